"""
Saga types — core data structures.
"""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Callable
from kungfu import LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Compensator — Undo Action
# ═══════════════════════════════════════════════════════════════════════════════

type Compensator[T] = Callable[[T], object]
"""
Compensation function that receives the step result and undoes it.

Compensators are synchronous: a rollback never yields to the event loop,
so it cannot be interleaved with another checkout or cancelled halfway.
Returning a kungfu `Error` counts as a failed compensation.
"""

# ═══════════════════════════════════════════════════════════════════════════════
# SagaStep — Single Step with Compensation
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SagaStep[T, E]:
    """
    A single async saga step: action + compensator.

    When action succeeds, compensator is recorded.
    If a later step fails, compensators run in reverse.
    """

    action: LazyCoroResult[T, E]
    compensate: Compensator[T] | None
    name: str = "step"


@dataclass(frozen=True, slots=True)
class RecordedCompensator[T]:
    """Compensator bound to the value its step produced."""

    step: str
    value: T
    compensate: Compensator[T]


# ═══════════════════════════════════════════════════════════════════════════════
# Result Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Rollback:
    """Outcome of running the compensation log."""

    compensators_run: int


@dataclass(frozen=True, slots=True)
class SagaError[E]:
    """Step error plus what the rollback undid."""

    error: E
    step_failed: str
    compensators_run: int


class RollbackFailed(Exception):
    """
    A compensation could not be applied.

    Rollback actions are defined to succeed for valid inputs, so this
    signals a bug rather than a recoverable condition.
    """

    def __init__(self, saga: str, failed_steps: tuple[str, ...]) -> None:
        super().__init__(
            f"Rollback of {saga!r} incomplete; failed compensations: {', '.join(failed_steps)}"
        )
        self.saga = saga
        self.failed_steps = failed_steps


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Compensator",
    "SagaStep",
    "RecordedCompensator",
    "Rollback",
    "SagaError",
    "RollbackFailed",
)
