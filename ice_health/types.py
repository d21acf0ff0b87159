"""
Ice Health Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for the Ice Health Engine.

- HealthMetricsInput: trailing 24h measurements fed in
- IceHealthMetrics: five normalized sub-scores in [0, 100]
- IceHealthState: immutable per-epoch health snapshot

============================================================
DESIGN PRINCIPLES
============================================================
- All types are immutable
- Values are stored unrounded; rounding to 2 decimals
  happens only for display and serialization
- Timestamps are Unix seconds (0 means "never")

============================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


DISPLAY_DECIMALS = 2


def round_for_display(value: float) -> float:
    """Round a score for reports and serialization."""
    return round(value, DISPLAY_DECIMALS)


# ============================================================
# ENUMS
# ============================================================


class HealthStatus(str, Enum):
    """
    Health status tag derived from the composite score.

    - ALIVE: score >= threshold
    - MELTING: 0 < score < threshold
    - DEAD: score <= 0
    """

    ALIVE = "ALIVE"
    MELTING = "MELTING"
    DEAD = "DEAD"

    @property
    def is_below_threshold(self) -> bool:
        return self in (HealthStatus.MELTING, HealthStatus.DEAD)


# ============================================================
# INPUT DATA CONTRACT
# ============================================================


@dataclass(frozen=True)
class HealthMetricsInput:
    """
    Measurements over a trailing 24h window.

    All numeric fields are non-negative. Timestamps are Unix
    seconds; a last-buyback time of 0 means no buyback ever.
    """

    # Buyback metrics
    buyback_count_last_24h: int = 0
    buyback_volume_sol_last_24h: float = 0.0

    # Market metrics
    recent_sell_pressure_sol: float = 0.0  # estimated from price action
    current_liquidity: float = 0.0  # LP liquidity in SOL equivalent
    volatility_percent_24h: float = 0.0  # 0-100%

    # Time metrics
    last_buyback_timestamp_seconds: int = 0
    current_timestamp_seconds: int = 0

    @property
    def hours_since_last_action(self) -> float:
        elapsed = self.current_timestamp_seconds - self.last_buyback_timestamp_seconds
        return elapsed / 3600


# ============================================================
# OUTPUT DATA CONTRACTS
# ============================================================


@dataclass(frozen=True)
class IceHealthMetrics:
    """Five normalized sub-scores, each in [0, 100]."""

    buyback_frequency: float
    buyback_coverage: float
    liquidity_depth: float
    volatility_penalty: float
    time_decay: float

    def to_dict(self) -> Dict[str, float]:
        """Serialize with values rounded for display."""
        return {
            "buybackFrequency": round_for_display(self.buyback_frequency),
            "buybackCoverage": round_for_display(self.buyback_coverage),
            "liquidityDepth": round_for_display(self.liquidity_depth),
            "volatilityPenalty": round_for_display(self.volatility_penalty),
            "timeDecay": round_for_display(self.time_decay),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IceHealthMetrics":
        return cls(
            buyback_frequency=float(data["buybackFrequency"]),
            buyback_coverage=float(data["buybackCoverage"]),
            liquidity_depth=float(data["liquidityDepth"]),
            volatility_penalty=float(data["volatilityPenalty"]),
            time_decay=float(data["timeDecay"]),
        )


@dataclass(frozen=True)
class IceHealthState:
    """
    Immutable health snapshot for one epoch.

    Created once per epoch by the IceHealthEngine and consumed
    by the executor and reporting.

    ============================================================
    OUTPUT GUARANTEES
    ============================================================
    - health: always within [0, 100]
    - status: derived from the unrounded health value
    - metrics: all five sub-scores within [0, 100]

    ============================================================
    """

    timestamp: int
    health: float
    metrics: IceHealthMetrics
    status: HealthStatus
    last_action_time: int
    epoch_number: int

    @property
    def display_health(self) -> float:
        """Health rounded to 2 decimals."""
        return round_for_display(self.health)

    @property
    def is_alive(self) -> bool:
        return self.status == HealthStatus.ALIVE


__all__ = [
    "DISPLAY_DECIMALS",
    "round_for_display",
    "HealthStatus",
    "HealthMetricsInput",
    "IceHealthMetrics",
    "IceHealthState",
]
