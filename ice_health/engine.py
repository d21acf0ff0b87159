"""
Ice Health Engine - Main Engine.

============================================================
PURPOSE
============================================================
Deterministic health calculation from measurable inputs.

FORMULA:
    IceHealth(t) = W_b * BuybackFreq(t)
                 + W_c * BuybackCoverage(t)
                 + W_l * LiquidityDepth(t)
                 - W_v * VolatilityPenalty(t)
                 - W_d * TimeDecay(t)

    - Weights sum to 1.0 (validated at config load)
    - Each component is normalized to [0, 100]
    - Result is clamped to [0, 100]

STATUS RULES:
    - ALIVE:   health >= threshold
    - MELTING: 0 < health < threshold
    - DEAD:    health <= 0

============================================================
ROUNDING
============================================================
Clamping and threshold comparison use unrounded values.
Rounding to 2 decimals happens only in to_dict/summary
output, so a score sitting next to the threshold never
flips status because of display rounding.

============================================================
USAGE
============================================================
    engine = IceHealthEngine(IceHealthConfig())
    state = engine.compute_health(metrics_input, epoch_number=1)

    print(state.status.value, state.display_health)

============================================================
"""

import logging
import math
from typing import Any, Dict, Optional

from core.clock import ClockProtocol, SystemClock

from .config import IceHealthConfig
from .types import (
    HealthMetricsInput,
    HealthStatus,
    IceHealthMetrics,
    IceHealthState,
    round_for_display,
)


logger = logging.getLogger(__name__)


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


class IceHealthEngine:
    """
    Pure health scoring engine.

    No side effects beyond logging. The clock is only used to
    stamp the produced state.
    """

    def __init__(
        self,
        config: Optional[IceHealthConfig] = None,
        clock: Optional[ClockProtocol] = None,
    ):
        self.config = config or IceHealthConfig()
        self._clock = clock or SystemClock()

    def compute_health(
        self,
        metrics_input: HealthMetricsInput,
        epoch_number: int,
    ) -> IceHealthState:
        """
        Compute ice health for the current epoch.

        Args:
            metrics_input: Trailing 24h measurements
            epoch_number: Epoch this state belongs to

        Returns:
            Immutable IceHealthState
        """
        metrics = self.compute_metrics(metrics_input)
        health = self.compute_health_score(metrics)
        status = self.compute_status(health)

        state = IceHealthState(
            timestamp=self._clock.unix_seconds(),
            health=health,
            metrics=metrics,
            status=status,
            last_action_time=metrics_input.last_buyback_timestamp_seconds,
            epoch_number=epoch_number,
        )

        logger.info(
            f"Ice health computed | epoch={epoch_number} "
            f"health={state.display_health:.2f} status={status.value} "
            f"metrics={metrics.to_dict()}"
        )

        return state

    def compute_metrics(self, metrics_input: HealthMetricsInput) -> IceHealthMetrics:
        """Normalize raw inputs into five sub-scores in [0, 100]."""
        cfg = self.config

        # 4+ buybacks per day saturates
        buyback_frequency = clamp(
            metrics_input.buyback_count_last_24h / cfg.buyback_count_saturation * 100
        )

        # No sell pressure means full coverage
        if metrics_input.recent_sell_pressure_sol > 0:
            buyback_coverage = clamp(
                metrics_input.buyback_volume_sol_last_24h
                / metrics_input.recent_sell_pressure_sol
                * 100
            )
        else:
            buyback_coverage = 100.0

        liquidity_depth = clamp(
            metrics_input.current_liquidity / cfg.liquidity_saturation_sol * 100
        )

        volatility_penalty = clamp(metrics_input.volatility_percent_24h)

        time_decay = clamp(
            metrics_input.hours_since_last_action / cfg.decay_horizon_hours * 100
        )

        return IceHealthMetrics(
            buyback_frequency=buyback_frequency,
            buyback_coverage=buyback_coverage,
            liquidity_depth=liquidity_depth,
            volatility_penalty=volatility_penalty,
            time_decay=time_decay,
        )

    def compute_health_score(self, metrics: IceHealthMetrics) -> float:
        """Weighted sum of sub-scores, clamped to [0, 100]."""
        weights = self.config.weights

        score = (
            weights.buyback_frequency * metrics.buyback_frequency
            + weights.buyback_coverage * metrics.buyback_coverage
            + weights.liquidity_depth * metrics.liquidity_depth
            - weights.volatility_penalty * metrics.volatility_penalty
            - weights.time_decay * metrics.time_decay
        )

        return clamp(score)

    def compute_status(self, health: float) -> HealthStatus:
        """Map an unrounded health score to a status tag."""
        if health >= self.config.threshold:
            return HealthStatus.ALIVE
        if health > 0:
            return HealthStatus.MELTING
        return HealthStatus.DEAD

    def is_alive(self, state: IceHealthState) -> bool:
        return state.status == HealthStatus.ALIVE

    def estimate_time_to_threshold(self, state: IceHealthState) -> int:
        """
        Minutes until health drops below the threshold.

        Advisory only: linear extrapolation at a fixed decay rate.
        Never used for control decisions.

        Returns:
            0 if the state is already MELTING or DEAD
        """
        if state.status.is_below_threshold:
            return 0

        rate = self.config.estimated_decay_rate_per_hour
        hours_to_threshold = (state.health - self.config.threshold) / rate

        return math.ceil(hours_to_threshold * 60)


# ============================================================
# SERIALIZATION
# ============================================================


def health_state_to_dict(state: IceHealthState) -> Dict[str, Any]:
    """Serialize a health state with display rounding."""
    return {
        "timestamp": state.timestamp,
        "health": round_for_display(state.health),
        "metrics": state.metrics.to_dict(),
        "status": state.status.value,
        "lastActionTime": state.last_action_time,
        "epochNumber": state.epoch_number,
    }


def health_state_from_dict(data: Dict[str, Any]) -> IceHealthState:
    """Parse a saved health state."""
    return IceHealthState(
        timestamp=int(data["timestamp"]),
        health=float(data["health"]),
        metrics=IceHealthMetrics.from_dict(data["metrics"]),
        status=HealthStatus(data["status"]),
        last_action_time=int(data["lastActionTime"]),
        epoch_number=int(data["epochNumber"]),
    )


def format_health_summary(state: IceHealthState) -> str:
    """
    Format a human-readable health summary.

    Useful for logging and operator scripts.
    """
    metrics = state.metrics
    lines = [
        "=" * 50,
        "ICE CUBE HEALTH",
        "=" * 50,
        f"Epoch:               {state.epoch_number}",
        f"Health Score:        {state.health:.2f}/100",
        f"Status:              {state.status.value}",
        "",
        "Health Metrics:",
        f"  Buyback Frequency:   {metrics.buyback_frequency:.2f}",
        f"  Buyback Coverage:    {metrics.buyback_coverage:.2f}",
        f"  Liquidity Depth:     {metrics.liquidity_depth:.2f}",
        f"  Volatility Penalty:  {metrics.volatility_penalty:.2f}",
        f"  Time Decay:          {metrics.time_decay:.2f}",
        "=" * 50,
    ]

    return "\n".join(lines)


__all__ = [
    "clamp",
    "IceHealthEngine",
    "health_state_to_dict",
    "health_state_from_dict",
    "format_health_summary",
]
