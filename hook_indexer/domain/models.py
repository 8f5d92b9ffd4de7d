"""Typed domain models shared across runtime layers.

This module provides simple data contracts for cross-layer communication that
are not indexed entities themselves.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class ReserveBalances:
    """Observed external reserves held at a pool's custodial address.

    Attributes:
        reserve0: Idle plus yield-wrapped holdings of token0, in raw token units.
        reserve1: Idle plus yield-wrapped holdings of token1, in raw token units.
    """

    reserve0: int
    reserve1: int
