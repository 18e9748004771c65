"""
Saga — all-or-nothing sequences with compensation.

    from shopsaga import saga as S

    tx = S.Transaction("checkout")
    tx.apply(reserve, compensate=release)
    await tx.run(S.from_async(charge, on_error=lambda e: PaymentDeclined(message=str(e))))
    tx.commit()
"""

from __future__ import annotations

from shopsaga.saga._types import (
    Compensator,
    SagaStep,
    RecordedCompensator,
    Rollback,
    SagaError,
    RollbackFailed,
)
from shopsaga.saga._step import step, from_async
from shopsaga.saga._run import Transaction

__all__ = (
    "Compensator",
    "SagaStep",
    "RecordedCompensator",
    "Rollback",
    "SagaError",
    "RollbackFailed",
    "step",
    "from_async",
    "Transaction",
)
