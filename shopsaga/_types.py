"""
Core types for shopsaga.

Re-exports from kungfu + shared aliases.
"""

from __future__ import annotations

from decimal import Decimal

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Money = Decimal
"""Amount in currency units, quantised to cents at the end of each calculation."""

type Numeric = int | float | Decimal
"""Anything pricing functions accept as an amount."""

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Aliases
    "Money",
    "Numeric",
)
