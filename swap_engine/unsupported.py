"""
Swap Engine - Unsupported DEX Engines.

Raydium and Orca integrations are not implemented. They are
kept as explicit variants so a misconfigured DEX_ENGINE fails
each buyback with a typed, auditable error instead of silently
doing nothing.
"""

import logging
from typing import Optional

from core.exceptions import UnsupportedOperationError

from .base import Quote, SwapEngine, SwapResult


logger = logging.getLogger(__name__)


class UnsupportedSwapEngine(SwapEngine):
    """Swap engine whose every call raises UnsupportedOperationError."""

    engine_id = "unsupported"
    display_name = "Unsupported"

    async def quote(
        self,
        input_mint: str,
        output_mint: str,
        amount_in: float,
        slippage_bps: Optional[int] = None,
    ) -> Quote:
        raise UnsupportedOperationError(
            f"{self.display_name} quote not yet implemented",
            engine=self.engine_id,
        )

    async def swap(
        self,
        input_mint: str,
        output_mint: str,
        amount_in: float,
        slippage_bps: Optional[int] = None,
    ) -> SwapResult:
        raise UnsupportedOperationError(
            f"{self.display_name} swap not yet implemented",
            engine=self.engine_id,
        )


class RaydiumSwapEngine(UnsupportedSwapEngine):
    engine_id = "raydium"
    display_name = "Raydium"


class OrcaSwapEngine(UnsupportedSwapEngine):
    engine_id = "orca"
    display_name = "Orca"


__all__ = [
    "UnsupportedSwapEngine",
    "RaydiumSwapEngine",
    "OrcaSwapEngine",
]
