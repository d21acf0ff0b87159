"""
Ice Health Engine - Configuration.

============================================================
PURPOSE
============================================================
Weights, threshold and normalization constants for the
health formula.

Weights are validated once when protocol configuration is
loaded (they must sum to 1.0 within WEIGHT_SUM_TOLERANCE).
The engine itself trusts them.

============================================================
"""

from dataclasses import dataclass, field
from typing import Dict, List


WEIGHT_SUM_TOLERANCE = 0.001


@dataclass(frozen=True)
class HealthWeights:
    """Weights applied to the five sub-scores."""

    buyback_frequency: float = 0.25
    buyback_coverage: float = 0.25
    liquidity_depth: float = 0.25
    volatility_penalty: float = 0.15
    time_decay: float = 0.10

    @property
    def total(self) -> float:
        return (
            self.buyback_frequency
            + self.buyback_coverage
            + self.liquidity_depth
            + self.volatility_penalty
            + self.time_decay
        )

    def validate(self) -> List[str]:
        """Validate weights, return list of errors."""
        errors = []

        if abs(self.total - 1.0) > WEIGHT_SUM_TOLERANCE:
            errors.append(
                f"Ice health weights must sum to 1.0, got {self.total:.4f}"
            )

        for name, value in self.to_dict().items():
            if value < 0:
                errors.append(f"Ice health weight {name} must be non-negative")

        return errors

    def to_dict(self) -> Dict[str, float]:
        return {
            "buybackFrequency": self.buyback_frequency,
            "buybackCoverage": self.buyback_coverage,
            "liquidityDepth": self.liquidity_depth,
            "volatilityPenalty": self.volatility_penalty,
            "timeDecay": self.time_decay,
        }


@dataclass(frozen=True)
class IceHealthConfig:
    """
    Configuration for the Ice Health Engine.
    """

    weights: HealthWeights = field(default_factory=HealthWeights)
    """Sub-score weights (sum to 1.0)."""

    threshold: float = 50.0
    """ALIVE/MELTING boundary, 0-100."""

    check_interval_minutes: int = 5
    """How often operators expect a fresh health reading."""

    buyback_count_saturation: float = 4.0
    """Buybacks per 24h that score 100 on frequency."""

    liquidity_saturation_sol: float = 50.0
    """Liquidity (SOL) that scores 100 on depth."""

    decay_horizon_hours: float = 72.0
    """Hours of inactivity that reach full time decay."""

    estimated_decay_rate_per_hour: float = 0.25
    """Points per hour used by the advisory time-to-threshold estimate."""

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = self.weights.validate()

        if self.threshold < 0 or self.threshold > 100:
            errors.append("Ice health threshold must be between 0 and 100")

        return errors


__all__ = [
    "WEIGHT_SUM_TOLERANCE",
    "HealthWeights",
    "IceHealthConfig",
]
