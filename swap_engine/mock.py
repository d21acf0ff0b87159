"""
Swap Engine - Mock Engine.

============================================================
PURPOSE
============================================================
Mock swap engine for simulation, dry runs and tests.

FEATURES:
- Fixed 1% slippage, 100 bps impact, 50 bps fee by default
- Configurable price impact
- Configurable error injection
- Records every submitted swap

============================================================
"""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from core.exceptions import SwapEngineError

from .base import (
    LPAddResult,
    LPManager,
    Quote,
    QuoteProvider,
    QuoteRequest,
    SwapEngine,
    SwapResult,
)


logger = logging.getLogger(__name__)


SIGNATURE_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
SIGNATURE_LENGTH = 88


def generate_mock_signature(rng: Optional[random.Random] = None) -> str:
    """Random 88-character transaction reference."""
    rng = rng or random
    return "".join(rng.choice(SIGNATURE_ALPHABET) for _ in range(SIGNATURE_LENGTH))


# ============================================================
# MOCK CONFIGURATION
# ============================================================

@dataclass
class MockSwapConfig:
    """Configuration for the mock swap engine."""

    output_ratio: float = 0.99
    """Output per unit of input (1% slippage)."""

    price_impact_bps: float = 100.0
    """Quoted and realized price impact."""

    fee_bps: float = 50.0
    """Quoted fee."""

    route_path: str = "mock-route"

    # Error injection
    fail_quote: bool = False
    """Raise SwapEngineError from quote()."""

    fail_swap: bool = False
    """Raise SwapEngineError from swap()."""


# ============================================================
# MOCK QUOTE PROVIDER
# ============================================================

class MockQuoteProvider(QuoteProvider):
    """Quote provider with fixed slippage."""

    def __init__(self, config: Optional[MockSwapConfig] = None):
        self._config = config or MockSwapConfig()

    async def get_quote(self, request: QuoteRequest) -> Quote:
        quote = Quote(
            input_amount=request.amount_in,
            output_amount=request.amount_in * self._config.output_ratio,
            price_impact_bps=self._config.price_impact_bps,
            fee_bps=self._config.fee_bps,
            route_path=self._config.route_path,
        )

        logger.debug(f"Mock quote provided: {quote}")
        return quote


# ============================================================
# MOCK SWAP ENGINE
# ============================================================

class MockSwapEngine(SwapEngine):
    """
    Mock swap engine.

    Never touches a ledger. Swaps succeed unless error
    injection is configured.
    """

    engine_id = "mock"

    def __init__(
        self,
        config: Optional[MockSwapConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self._config = config or MockSwapConfig()
        self._quote_provider = MockQuoteProvider(self._config)
        self._rng = rng or random.Random()
        self._swaps: List[SwapResult] = []

    @property
    def config(self) -> MockSwapConfig:
        return self._config

    @property
    def executed_swaps(self) -> List[SwapResult]:
        return list(self._swaps)

    async def quote(
        self,
        input_mint: str,
        output_mint: str,
        amount_in: float,
        slippage_bps: Optional[int] = None,
    ) -> Quote:
        if self._config.fail_quote:
            raise SwapEngineError(
                f"Mock engine cannot route {input_mint} -> {output_mint}",
                engine=self.engine_id,
            )

        return await self._quote_provider.get_quote(QuoteRequest(
            input_mint=input_mint,
            output_mint=output_mint,
            amount_in=amount_in,
            slippage_bps=slippage_bps,
        ))

    async def swap(
        self,
        input_mint: str,
        output_mint: str,
        amount_in: float,
        slippage_bps: Optional[int] = 500,
    ) -> SwapResult:
        if self._config.fail_swap:
            raise SwapEngineError(
                f"Mock swap failed for {input_mint} -> {output_mint}",
                engine=self.engine_id,
            )

        result = SwapResult(
            signature=generate_mock_signature(self._rng),
            input_amount=amount_in,
            output_amount=amount_in * self._config.output_ratio,
            actual_price_impact_bps=self._config.price_impact_bps,
        )
        self._swaps.append(result)

        logger.info(
            f"Mock swap executed | in={amount_in:.6f} out={result.output_amount:.6f} "
            f"signature={result.signature[:12]}..."
        )
        return result


# ============================================================
# MOCK LP MANAGER
# ============================================================

class MockLPManager(LPManager):
    """Mock liquidity manager."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    async def add_liquidity(
        self,
        token_mint: str,
        token_amount: float,
        sol_amount: float,
    ) -> LPAddResult:
        result = LPAddResult(
            signature=generate_mock_signature(self._rng),
            lp_token_amount=token_amount * 0.5,
        )

        logger.info(
            f"Mock LP added | tokens={token_amount} sol={sol_amount} "
            f"lp_tokens={result.lp_token_amount}"
        )
        return result

    async def remove_liquidity(self, lp_token_amount: float) -> Tuple[float, float]:
        logger.info(f"Mock LP removed | lp_tokens={lp_token_amount}")
        return lp_token_amount * 2, lp_token_amount * 2


__all__ = [
    "SIGNATURE_ALPHABET",
    "SIGNATURE_LENGTH",
    "generate_mock_signature",
    "MockSwapConfig",
    "MockQuoteProvider",
    "MockSwapEngine",
    "MockLPManager",
]
