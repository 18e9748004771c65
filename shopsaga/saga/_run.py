"""
Saga execution with automatic rollback.

A Transaction is the compensation log of one saga run: every forward step
that succeeds records its undo action, and the first failure replays the
log in reverse before the error is handed back to the caller.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog
from kungfu import Result, Ok, Error

from shopsaga.saga._types import (
    SagaStep,
    SagaError,
    Rollback,
    RollbackFailed,
    RecordedCompensator,
    Compensator,
)

logger = structlog.get_logger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Transaction — Compensation Log
# ═══════════════════════════════════════════════════════════════════════════════


class Transaction[E]:
    """
    Sequence of compensated steps that succeeds or fails as a unit.

    Sync steps go through apply(), async ones (LazyCoroResult) through run().
    A failed step rolls the whole log back and returns SagaError; commit()
    forgets the log once every step has succeeded.

    Example:
        tx: S.Transaction[CheckoutError] = S.Transaction("checkout:alice")

        match tx.apply(lambda: inventory.reserve_batch(lines), inventory.release_all):
            case Error(e):
                return Error(e.error)
            case Ok(record):
                ...

        match await tx.run(S.from_async(charge, on_error=lambda e: PaymentDeclined(message=str(e)))):
            case Error(e):
                return Error(e.error)   # reservations already released
            case Ok(receipt):
                tx.commit()
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._compensators: list[RecordedCompensator[Any]] = []
        self._finished = False

    @property
    def pending(self) -> int:
        """Number of compensators that a rollback would run."""
        return len(self._compensators)

    @property
    def finished(self) -> bool:
        return self._finished

    def apply[T](
        self,
        action: Callable[[], Result[T, E]],
        compensate: Compensator[T] | None = None,
        *,
        name: str = "step",
    ) -> Result[T, SagaError[E]]:
        """Run a synchronous step, recording its compensator on success."""
        self._ensure_open()
        return self._record(action(), compensate, name)

    async def run[T](self, step: SagaStep[T, E]) -> Result[T, SagaError[E]]:
        """
        Await an async step, recording its compensator on success.

        If the await is cancelled (or the action raises instead of
        returning an Error), the log is rolled back before the exception
        propagates.
        """
        self._ensure_open()
        try:
            result = await step.action
        except BaseException:
            logger.warning("Saga step interrupted", saga=self.name, step=step.name)
            self.rollback()
            raise
        return self._record(result, step.compensate, step.name)

    def abort(self, error: E, *, step: str = "abort") -> SagaError[E]:
        """Fail the transaction at a point that is not itself a step."""
        rollback = self.rollback()
        return SagaError(
            error=error,
            step_failed=step,
            compensators_run=rollback.compensators_run,
        )

    def rollback(self) -> Rollback:
        """
        Run recorded compensators in reverse.

        Every compensator is attempted even if an earlier one fails; any
        failure raises RollbackFailed afterwards.
        """
        if self._finished:
            return Rollback(compensators_run=0)
        self._finished = True

        recorded = list(reversed(self._compensators))
        self._compensators.clear()

        comp_run = 0
        failed: list[str] = []
        for comp in recorded:
            try:
                outcome = comp.compensate(comp.value)
            except Exception:
                logger.critical(
                    "Compensation raised",
                    saga=self.name,
                    step=comp.step,
                    exc_info=True,
                )
                failed.append(comp.step)
                continue
            if isinstance(outcome, Error):
                logger.critical(
                    "Compensation failed",
                    saga=self.name,
                    step=comp.step,
                    outcome=repr(outcome),
                )
                failed.append(comp.step)
                continue
            comp_run += 1

        if failed:
            raise RollbackFailed(self.name, tuple(failed))

        logger.info("Saga rolled back", saga=self.name, compensators_run=comp_run)
        return Rollback(compensators_run=comp_run)

    def commit(self) -> int:
        """Close the transaction; returns how many compensators were dropped."""
        self._ensure_open()
        self._finished = True
        dropped = len(self._compensators)
        self._compensators.clear()
        logger.debug("Saga committed", saga=self.name, steps=dropped)
        return dropped

    # ───────────────────────────────────────────────────────────────────────────

    def _record[T](
        self,
        result: Result[T, E],
        compensate: Compensator[T] | None,
        name: str,
    ) -> Result[T, SagaError[E]]:
        match result:
            case Ok(value):
                if compensate is not None:
                    self._compensators.append(RecordedCompensator(name, value, compensate))
                return Ok(value)
            case Error(error):
                logger.info("Saga step failed", saga=self.name, step=name)
                return Error(self.abort(error, step=name))

    def _ensure_open(self) -> None:
        if self._finished:
            raise RuntimeError(f"Transaction {self.name!r} already finished")


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("Transaction",)
