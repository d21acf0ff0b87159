"""
Orchestrator - Health Input Providers.

Supply the HealthMetricsInput for each epoch.

- SimulatedHealthInputProvider: seedable random market,
  last buyback one day ago
- ActivityHealthInputProvider: buyback count, volume and
  last-buyback time derived from executed buyback actions;
  market metrics come from a caller-supplied callable
"""

import logging
import random
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional, Tuple

from allocation.types import ActionStatus, ActionType, EpochAllocation
from core.clock import ClockProtocol, SystemClock
from ice_health.types import HealthMetricsInput


logger = logging.getLogger(__name__)


WINDOW_SECONDS = 86400


@dataclass(frozen=True)
class MarketMetrics:
    """Market measurements not derivable from our own actions."""

    recent_sell_pressure_sol: float = 0.0
    current_liquidity: float = 0.0
    volatility_percent_24h: float = 0.0


class HealthInputProvider(ABC):
    """Source of per-epoch health measurements."""

    @abstractmethod
    def get_input(self) -> HealthMetricsInput:
        pass

    def record_allocation(self, allocation: EpochAllocation, timestamp: int) -> None:
        """Observe a settled epoch. Default: ignore."""
        return None


class SimulatedHealthInputProvider(HealthInputProvider):
    """Random measurements for simulation and dry runs."""

    def __init__(
        self,
        clock: Optional[ClockProtocol] = None,
        rng: Optional[random.Random] = None,
    ):
        self._clock = clock or SystemClock()
        self._rng = rng or random.Random()

    def get_input(self) -> HealthMetricsInput:
        now = self._clock.unix_seconds()

        return HealthMetricsInput(
            buyback_count_last_24h=self._rng.randrange(4),
            buyback_volume_sol_last_24h=self._rng.random() * 10,
            recent_sell_pressure_sol=self._rng.random() * 5,
            current_liquidity=self._rng.random() * 100 + 20,
            volatility_percent_24h=self._rng.random() * 30,
            last_buyback_timestamp_seconds=now - WINDOW_SECONDS,
            current_timestamp_seconds=now,
        )


class ActivityHealthInputProvider(HealthInputProvider):
    """Derives buyback activity from the executor's own actions."""

    def __init__(
        self,
        market_metrics: Callable[[], MarketMetrics],
        clock: Optional[ClockProtocol] = None,
        last_buyback_timestamp: int = 0,
    ):
        self._market_metrics = market_metrics
        self._clock = clock or SystemClock()
        self._buybacks: Deque[Tuple[int, float]] = deque()
        self._last_buyback_timestamp = last_buyback_timestamp

    def record_allocation(self, allocation: EpochAllocation, timestamp: int) -> None:
        for action in allocation.actions:
            if action.type == ActionType.BUYBACK and action.status == ActionStatus.EXECUTED:
                self._buybacks.append((timestamp, action.amount_sol))
                self._last_buyback_timestamp = max(self._last_buyback_timestamp, timestamp)
                logger.debug(f"Buyback recorded for health | sol={action.amount_sol:.6f}")

    def _prune(self, now: int) -> None:
        while self._buybacks and self._buybacks[0][0] <= now - WINDOW_SECONDS:
            self._buybacks.popleft()

    def get_input(self) -> HealthMetricsInput:
        now = self._clock.unix_seconds()
        self._prune(now)
        market = self._market_metrics()

        return HealthMetricsInput(
            buyback_count_last_24h=len(self._buybacks),
            buyback_volume_sol_last_24h=sum(amount for _, amount in self._buybacks),
            recent_sell_pressure_sol=market.recent_sell_pressure_sol,
            current_liquidity=market.current_liquidity,
            volatility_percent_24h=market.volatility_percent_24h,
            last_buyback_timestamp_seconds=self._last_buyback_timestamp,
            current_timestamp_seconds=now,
        )


__all__ = [
    "WINDOW_SECONDS",
    "MarketMetrics",
    "HealthInputProvider",
    "SimulatedHealthInputProvider",
    "ActivityHealthInputProvider",
]
