"""
Executor - Action Runner.

============================================================
PURPOSE
============================================================
Executes one action per non-zero allocation category, in
fixed priority order, against the swap engine.

PER-CATEGORY CONTRACT:
- buyback:       quote first, reject above the price-impact
                 ceiling, otherwise swap SOL -> $ice
- add-lp / burn: not implemented, recorded as failed
- cooling-event: budget reservation, recorded as executed

An action failure never aborts its siblings.

============================================================
"""

import logging
from typing import Awaitable, Callable, Dict, List

from allocation.types import ActionType, AllocationAction, EpochAllocation
from core.exceptions import PriceImpactExceededError
from swap_engine.base import WRAPPED_SOL_MINT, SwapEngine
from swap_engine.config import SwapConfig


logger = logging.getLogger(__name__)


NOT_IMPLEMENTED_ERROR = "Not yet implemented"


class ActionRunner:
    """Sequential executor of allocation actions."""

    def __init__(self, swap_engine: SwapEngine, swap_config: SwapConfig):
        self._swap_engine = swap_engine
        self._swap_config = swap_config

        self._handlers: Dict[ActionType, Callable[[AllocationAction], Awaitable[None]]] = {
            ActionType.BUYBACK: self._execute_buyback,
            ActionType.ADD_LP: self._execute_add_lp,
            ActionType.BURN: self._execute_burn,
            ActionType.COOLING_EVENT: self._execute_cooling,
        }

    async def run(self, allocation: EpochAllocation) -> List[AllocationAction]:
        """Execute all non-zero categories and return their action records."""
        actions = []

        for action_type, amount in allocation.allocations.by_action_type():
            if amount <= 0:
                continue

            action = AllocationAction(type=action_type, amount_sol=amount)

            try:
                await self._handlers[action_type](action)
            except Exception as e:
                logger.error(f"{action_type.value} failed: {e}")
                if not action.status.is_terminal():
                    action.mark_failed(str(e))

            actions.append(action)

        return actions

    # --------------------------------------------------------
    # HANDLERS
    # --------------------------------------------------------

    async def _execute_buyback(self, action: AllocationAction) -> None:
        """SOL -> $ice, rejected without moving funds above the impact ceiling."""
        quote = await self._swap_engine.quote(
            WRAPPED_SOL_MINT,
            self._swap_config.ice_token_mint,
            action.amount_sol,
            self._swap_config.max_slippage_bps,
        )

        if quote.price_impact_bps > self._swap_config.max_price_impact_bps:
            raise PriceImpactExceededError(
                quote.price_impact_bps,
                self._swap_config.max_price_impact_bps,
            )

        result = await self._swap_engine.swap(
            WRAPPED_SOL_MINT,
            self._swap_config.ice_token_mint,
            action.amount_sol,
            self._swap_config.max_slippage_bps,
        )

        action.mark_executed(result.signature)

        logger.info(
            f"Buyback executed | sol={action.amount_sol:.6f} "
            f"ice={result.output_amount:.6f} signature={result.signature}"
        )

    async def _execute_add_lp(self, action: AllocationAction) -> None:
        logger.warning("Add LP not yet implemented, recording as failed")
        action.mark_failed(NOT_IMPLEMENTED_ERROR)

    async def _execute_burn(self, action: AllocationAction) -> None:
        logger.warning("Burn not yet implemented, recording as failed")
        action.mark_failed(NOT_IMPLEMENTED_ERROR)

    async def _execute_cooling(self, action: AllocationAction) -> None:
        logger.info(f"Cooling event recorded | sol={action.amount_sol:.6f}")
        action.mark_executed()


__all__ = [
    "NOT_IMPLEMENTED_ERROR",
    "ActionRunner",
]
