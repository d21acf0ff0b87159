"""
Swap Engine - Package.

============================================================
PURPOSE
============================================================
Asset exchange collaborators used by the executor for
buybacks: the SwapEngine contract, a mock engine for dry
runs and simulation, and explicit unsupported DEX variants.

============================================================
"""

from .base import (
    WRAPPED_SOL_MINT,
    QuoteRequest,
    Quote,
    SwapResult,
    LPAddResult,
    QuoteProvider,
    SwapEngine,
    LPManager,
)
from .mock import (
    generate_mock_signature,
    MockSwapConfig,
    MockQuoteProvider,
    MockSwapEngine,
    MockLPManager,
)
from .unsupported import (
    UnsupportedSwapEngine,
    RaydiumSwapEngine,
    OrcaSwapEngine,
)
from .factory import (
    DexEngineType,
    create_swap_engine,
    create_lp_manager,
    list_supported,
)
from .config import SwapConfig


__all__ = [
    # Config
    "SwapConfig",
    # Base
    "WRAPPED_SOL_MINT",
    "QuoteRequest",
    "Quote",
    "SwapResult",
    "LPAddResult",
    "QuoteProvider",
    "SwapEngine",
    "LPManager",
    # Mock
    "generate_mock_signature",
    "MockSwapConfig",
    "MockQuoteProvider",
    "MockSwapEngine",
    "MockLPManager",
    # Unsupported
    "UnsupportedSwapEngine",
    "RaydiumSwapEngine",
    "OrcaSwapEngine",
    # Factory
    "DexEngineType",
    "create_swap_engine",
    "create_lp_manager",
    "list_supported",
]
