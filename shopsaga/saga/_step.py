"""
Saga step creation.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable
from kungfu import LazyCoroResult
from combinators import lift as L

from shopsaga.saga._types import SagaStep, Compensator

# ═══════════════════════════════════════════════════════════════════════════════
# step() — Primary Constructor
# ═══════════════════════════════════════════════════════════════════════════════


def step[T, E](
    action: LazyCoroResult[T, E],
    compensate: Compensator[T] | None = None,
    *,
    name: str = "step",
) -> SagaStep[T, E]:
    """
    Create a compensated saga step.

    Args:
        action: The operation to perform (LazyCoroResult)
        compensate: Undo for the action's value, if rollback needed
        name: Label used in logs and SagaError.step_failed

    Example:
        from shopsaga import saga as S

        persist = S.step(
            LazyCoroResult(lambda: store.save(order)),
            name="persist-order",
        )
    """
    return SagaStep(action=action, compensate=compensate, name=name)


# ═══════════════════════════════════════════════════════════════════════════════
# from_async() — Create step from async callable
# ═══════════════════════════════════════════════════════════════════════════════


def from_async[T, E](
    action: Callable[[], Awaitable[T]],
    on_error: Callable[[Exception], E],
    compensate: Compensator[T] | None = None,
    *,
    name: str = "step",
) -> SagaStep[T, E]:
    """
    Create step from async callable with error handling.

    Exceptions raised by the callable are lifted into E via on_error.

    Example:
        S.from_async(
            lambda: gateway.process_payment(order, "paypal"),
            on_error=lambda e: PaymentDeclined(message=str(e)),
            name="payment",
        )
    """
    return SagaStep(
        action=L.catching_async(action, on_error=on_error),
        compensate=compensate,
        name=name,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("step", "from_async")
