"""
Allocation - Strategies.

============================================================
PURPOSE
============================================================
Maps an epoch's fee amount (and, for the adaptive variant,
ice health) to a budget split.

VARIANTS:
- FIXED:    static percentages from configuration
- ADAPTIVE: buyback share stepped by health, remaining
            categories keep their base relative proportions

The variant is selected once at startup from configuration.

============================================================
ADAPTIVE BUYBACK STEPS
============================================================
    health < 30        -> 85%   (critical: max buyback)
    30 <= health < 50  -> 80%   (low: aggressive buyback)
    50 <= health < 70  -> base  (medium: configured split)
    health >= 70       -> 50%   (high: preserve budget)

Remaining categories:
    pct = base_pct / (100 - base_buyback_pct) * (100 - buyback_pct)

When base_buyback_pct is 100 there is no base proportion to
preserve: lp, burn and cooling get 0% and buyback takes the
whole 100% so the split still sums to the fee amount.

============================================================
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Union

from ice_health.types import IceHealthState

from .types import AllocationAmounts, AllocationConfig, EpochAllocation


logger = logging.getLogger(__name__)


CRITICAL_HEALTH_BELOW = 30
LOW_HEALTH_BELOW = 50
MEDIUM_HEALTH_BELOW = 70

CRITICAL_BUYBACK_PCT = 85
LOW_BUYBACK_PCT = 80
HIGH_HEALTH_BUYBACK_PCT = 50


class AllocationMode(str, Enum):
    """Allocation strategy selector."""

    ADAPTIVE = "adaptive"
    FIXED = "fixed"


def split_fees(fee_amount: float, config: AllocationConfig) -> AllocationAmounts:
    """Proportional split of fee_amount by the percentages in config."""
    return AllocationAmounts(
        buyback=fee_amount * config.buyback_pct / 100,
        lp=fee_amount * config.lp_pct / 100,
        burn=fee_amount * config.burn_pct / 100,
        cooling=fee_amount * config.cooling_pct / 100,
    )


class AllocationStrategy(ABC):
    """
    Determines how to split detected fees among buyback, LP
    adds, burns and cooling events.
    """

    mode: AllocationMode

    @abstractmethod
    def allocate(
        self,
        fee_amount: float,
        ice_health: IceHealthState,
        config: AllocationConfig,
    ) -> EpochAllocation:
        """
        Compute the budget split for one epoch.

        Returns:
            EpochAllocation with an empty action list
        """
        pass


class FixedAllocationStrategy(AllocationStrategy):
    """Uses static percentages from config; ignores health."""

    mode = AllocationMode.FIXED

    def allocate(
        self,
        fee_amount: float,
        ice_health: IceHealthState,
        config: AllocationConfig,
    ) -> EpochAllocation:
        return EpochAllocation(
            total_fees_to_allocate=fee_amount,
            allocations=split_fees(fee_amount, config),
        )


class AdaptiveAllocationStrategy(AllocationStrategy):
    """Adjusts the buyback share from ice health."""

    mode = AllocationMode.ADAPTIVE

    def allocate(
        self,
        fee_amount: float,
        ice_health: IceHealthState,
        config: AllocationConfig,
    ) -> EpochAllocation:
        adapted = self.adapt_config(ice_health.health, config)

        logger.debug(
            f"Adaptive allocation | health={ice_health.health:.2f} "
            f"buyback_pct={adapted.buyback_pct:.2f} lp_pct={adapted.lp_pct:.2f} "
            f"burn_pct={adapted.burn_pct:.2f} cooling_pct={adapted.cooling_pct:.2f}"
        )

        return EpochAllocation(
            total_fees_to_allocate=fee_amount,
            allocations=split_fees(fee_amount, adapted),
        )

    @staticmethod
    def buyback_pct_for_health(health: float, base_config: AllocationConfig) -> float:
        if health < CRITICAL_HEALTH_BELOW:
            return CRITICAL_BUYBACK_PCT
        if health < LOW_HEALTH_BELOW:
            return LOW_BUYBACK_PCT
        if health < MEDIUM_HEALTH_BELOW:
            return base_config.buyback_pct
        return HIGH_HEALTH_BUYBACK_PCT

    @classmethod
    def adapt_config(cls, health: float, base_config: AllocationConfig) -> AllocationConfig:
        """
        Build the percentage split used for this health value.

        A base config that is 100% buyback has no other categories to
        scale, so the health step is ignored and the split stays
        100% buyback.
        """
        buyback_pct = cls.buyback_pct_for_health(health, base_config)

        base_remaining = 100 - base_config.buyback_pct
        if base_remaining <= 0:
            # Base config is all buyback; nothing to scale from
            return AllocationConfig(
                buyback_pct=100,
                lp_pct=0,
                burn_pct=0,
                cooling_pct=0,
            )

        remaining = 100 - buyback_pct
        return AllocationConfig(
            buyback_pct=buyback_pct,
            lp_pct=base_config.lp_pct / base_remaining * remaining,
            burn_pct=base_config.burn_pct / base_remaining * remaining,
            cooling_pct=base_config.cooling_pct / base_remaining * remaining,
        )


def create_allocation_strategy(mode: Union[AllocationMode, str]) -> AllocationStrategy:
    """
    Factory to create the configured allocation strategy.

    Raises:
        ValueError: On unknown mode
    """
    try:
        mode = AllocationMode(mode)
    except ValueError:
        raise ValueError(f"Unknown allocation mode: {mode}")

    if mode == AllocationMode.ADAPTIVE:
        return AdaptiveAllocationStrategy()
    return FixedAllocationStrategy()


__all__ = [
    "AllocationMode",
    "split_fees",
    "AllocationStrategy",
    "FixedAllocationStrategy",
    "AdaptiveAllocationStrategy",
    "create_allocation_strategy",
]
