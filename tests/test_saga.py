"""Tests for the compensating Transaction."""

import asyncio

import pytest
from helpers import unwrap, unwrap_err
from kungfu import Error, LazyCoroResult, Ok

from shopsaga import saga as S


def recorder(log, label):
    def compensate(value):
        log.append((label, value))
    return compensate


class TestApply:
    def test_success_records_compensator(self):
        tx = S.Transaction("t")
        assert unwrap(tx.apply(lambda: Ok(1), recorder([], "a"))) == 1
        assert tx.pending == 1

    def test_failure_rolls_back_in_reverse(self):
        log = []
        tx = S.Transaction("t")
        tx.apply(lambda: Ok(1), recorder(log, "a"), name="a")
        tx.apply(lambda: Ok(2), recorder(log, "b"), name="b")

        failure = unwrap_err(tx.apply(lambda: Error("boom"), name="c"))

        assert failure.error == "boom"
        assert failure.step_failed == "c"
        assert failure.compensators_run == 2
        assert log == [("b", 2), ("a", 1)]
        assert tx.finished

    def test_step_without_compensator(self):
        tx = S.Transaction("t")
        tx.apply(lambda: Ok("read-only"))
        assert tx.pending == 0

    def test_apply_after_commit_raises(self):
        tx = S.Transaction("t")
        tx.commit()
        with pytest.raises(RuntimeError):
            tx.apply(lambda: Ok(1))


class TestRollback:
    def test_compensator_error_is_fatal(self):
        log = []
        tx = S.Transaction("t")
        tx.apply(lambda: Ok(1), recorder(log, "a"), name="a")
        tx.apply(lambda: Ok(2), lambda v: Error("cannot undo"), name="b")

        with pytest.raises(S.RollbackFailed) as exc_info:
            tx.rollback()

        assert exc_info.value.failed_steps == ("b",)
        # earlier compensators still ran
        assert log == [("a", 1)]

    def test_compensator_exception_is_fatal(self):
        def explode(value):
            raise ValueError("nope")

        tx = S.Transaction("t")
        tx.apply(lambda: Ok(1), explode, name="a")

        with pytest.raises(S.RollbackFailed):
            tx.rollback()

    def test_rollback_is_idempotent(self):
        log = []
        tx = S.Transaction("t")
        tx.apply(lambda: Ok(1), recorder(log, "a"))
        assert tx.rollback().compensators_run == 1
        assert tx.rollback().compensators_run == 0
        assert log == [("a", 1)]

    def test_abort_runs_compensators(self):
        log = []
        tx = S.Transaction("t")
        tx.apply(lambda: Ok(1), recorder(log, "a"))

        failure = tx.abort("declined", step="payment")

        assert failure.step_failed == "payment"
        assert failure.compensators_run == 1
        assert log == [("a", 1)]

    def test_commit_drops_compensators(self):
        log = []
        tx = S.Transaction("t")
        tx.apply(lambda: Ok(1), recorder(log, "a"))
        assert tx.commit() == 1
        assert tx.rollback().compensators_run == 0
        assert log == []


class TestRun:
    @pytest.mark.asyncio
    async def test_async_step_success(self):
        async def action():
            return Ok(42)

        tx = S.Transaction("t")
        value = unwrap(await tx.run(S.step(LazyCoroResult(action), name="answer")))
        assert value == 42

    @pytest.mark.asyncio
    async def test_async_step_failure_rolls_back(self):
        log = []

        async def action():
            return Error("down")

        tx = S.Transaction("t")
        tx.apply(lambda: Ok("held"), recorder(log, "reserve"))
        failure = unwrap_err(await tx.run(S.step(LazyCoroResult(action), name="pay")))

        assert failure.error == "down"
        assert log == [("reserve", "held")]

    @pytest.mark.asyncio
    async def test_from_async_lifts_exceptions(self):
        async def action():
            raise ConnectionError("gateway unreachable")

        tx = S.Transaction("t")
        step = S.from_async(action, on_error=lambda e: f"lifted: {e}", name="pay")
        failure = unwrap_err(await tx.run(step))

        assert failure.error == "lifted: gateway unreachable"

    @pytest.mark.asyncio
    async def test_cancellation_rolls_back_and_propagates(self):
        log = []
        started = asyncio.Event()

        async def slow():
            started.set()
            await asyncio.sleep(10)
            return Ok("late")

        tx = S.Transaction("t")
        tx.apply(lambda: Ok("held"), recorder(log, "reserve"))
        task = asyncio.create_task(tx.run(S.step(LazyCoroResult(slow))))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert log == [("reserve", "held")]
        assert tx.finished
