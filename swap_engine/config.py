"""
Swap Engine - Configuration.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from .factory import DexEngineType


@dataclass(frozen=True)
class SwapConfig:
    """Swap engine selection and buyback ceilings."""

    dex_engine: DexEngineType = DexEngineType.MOCK
    """Engine selected at startup."""

    max_slippage_bps: int = 500
    """Slippage passed to quote and swap."""

    max_price_impact_bps: int = 1000
    """Buybacks quoted above this impact are rejected."""

    ice_token_mint: str = ""
    """Output asset of buybacks."""

    def validate(self) -> List[str]:
        errors = []

        if not 0 <= self.max_slippage_bps <= 10000:
            errors.append("max_slippage_bps must be between 0 and 10000")

        if not 0 <= self.max_price_impact_bps <= 10000:
            errors.append("max_price_impact_bps must be between 0 and 10000")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dexEngine": self.dex_engine.value,
            "maxSlippageBps": self.max_slippage_bps,
            "maxPriceImpactBps": self.max_price_impact_bps,
            "iceTokenMint": self.ice_token_mint,
        }


__all__ = ["SwapConfig"]
