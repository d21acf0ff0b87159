"""
Swap Engine - Base Interface.

============================================================
PURPOSE
============================================================
Collaborator contract the executor requires for asset
exchange. Route discovery, transaction construction and
signing belong to concrete engines.

CONTRACT:
- quote(): dry-run, no funds move
- swap():  submits the exchange, returns a transaction reference
- Both raise SwapEngineError with a descriptive message when
  the pair cannot be routed
- Timeout policy belongs to the engine; calls must fail fast
  enough not to starve the epoch cadence

============================================================
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple


logger = logging.getLogger(__name__)


WRAPPED_SOL_MINT = "So11111111111111111111111111111111111111112"
"""Wrapped SOL mint, the input asset for buybacks."""


# ============================================================
# REQUEST/RESPONSE TYPES
# ============================================================

@dataclass(frozen=True)
class QuoteRequest:
    """Request for a swap quote."""

    input_mint: str
    """Asset sold."""

    output_mint: str
    """Asset bought."""

    amount_in: float
    """Amount of input asset."""

    slippage_bps: Optional[int] = None
    """Maximum slippage in basis points."""


@dataclass(frozen=True)
class Quote:
    """Dry-run quote for a swap."""

    input_amount: float
    output_amount: float
    price_impact_bps: float
    fee_bps: float
    route_path: str


@dataclass(frozen=True)
class SwapResult:
    """Result of a submitted swap."""

    signature: str
    """Transaction reference."""

    input_amount: float
    output_amount: float
    actual_price_impact_bps: float


@dataclass(frozen=True)
class LPAddResult:
    """Result of a liquidity add."""

    signature: str
    lp_token_amount: float


# ============================================================
# INTERFACES
# ============================================================

class QuoteProvider(ABC):
    """Produces quotes without executing."""

    @abstractmethod
    async def get_quote(self, request: QuoteRequest) -> Quote:
        pass


class SwapEngine(ABC):
    """
    Abstract swap engine.

    One concrete engine is selected at startup from the
    DEX_ENGINE configuration.
    """

    engine_id: str = "base"

    @abstractmethod
    async def quote(
        self,
        input_mint: str,
        output_mint: str,
        amount_in: float,
        slippage_bps: Optional[int] = None,
    ) -> Quote:
        """Dry-run the swap and return a quote."""
        pass

    @abstractmethod
    async def swap(
        self,
        input_mint: str,
        output_mint: str,
        amount_in: float,
        slippage_bps: Optional[int] = None,
    ) -> SwapResult:
        """Submit the swap."""
        pass


class LPManager(ABC):
    """Liquidity management interface."""

    @abstractmethod
    async def add_liquidity(
        self,
        token_mint: str,
        token_amount: float,
        sol_amount: float,
    ) -> LPAddResult:
        pass

    @abstractmethod
    async def remove_liquidity(self, lp_token_amount: float) -> Tuple[float, float]:
        """Returns (sol_amount, token_amount)."""
        pass


__all__ = [
    "WRAPPED_SOL_MINT",
    "QuoteRequest",
    "Quote",
    "SwapResult",
    "LPAddResult",
    "QuoteProvider",
    "SwapEngine",
    "LPManager",
]
