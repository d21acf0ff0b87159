"""
Swap Engine Factory.

============================================================
PURPOSE
============================================================
Selects the swap engine and LP manager once at startup from
the DEX_ENGINE configuration.

============================================================
USAGE
============================================================
```python
engine = create_swap_engine("mock")
lp_manager = create_lp_manager("mock")
```

============================================================
"""

import logging
from enum import Enum
from typing import Dict, Optional, Type, Union

from core.exceptions import UnsupportedOperationError

from .base import LPManager, SwapEngine
from .mock import MockLPManager, MockSwapConfig, MockSwapEngine
from .unsupported import OrcaSwapEngine, RaydiumSwapEngine


logger = logging.getLogger(__name__)


class DexEngineType(str, Enum):
    """Supported DEX engine identifiers."""

    MOCK = "mock"
    RAYDIUM = "raydium"
    ORCA = "orca"


_ENGINE_REGISTRY: Dict[DexEngineType, Type[SwapEngine]] = {
    DexEngineType.MOCK: MockSwapEngine,
    DexEngineType.RAYDIUM: RaydiumSwapEngine,
    DexEngineType.ORCA: OrcaSwapEngine,
}


def _parse_dex_type(dex_type: Union[DexEngineType, str]) -> DexEngineType:
    try:
        return DexEngineType(dex_type)
    except ValueError:
        raise ValueError(f"Unknown DEX engine: {dex_type}")


def create_swap_engine(
    dex_type: Union[DexEngineType, str],
    mock_config: Optional[MockSwapConfig] = None,
) -> SwapEngine:
    """
    Create the configured swap engine.

    Raises:
        ValueError: On unknown engine identifier
    """
    dex_type = _parse_dex_type(dex_type)

    if dex_type == DexEngineType.MOCK:
        engine: SwapEngine = MockSwapEngine(mock_config)
    else:
        engine = _ENGINE_REGISTRY[dex_type]()

    logger.info(f"Swap engine created: {engine.engine_id}")
    return engine


def create_lp_manager(dex_type: Union[DexEngineType, str]) -> LPManager:
    """
    Create the LP manager for a DEX engine.

    Raises:
        UnsupportedOperationError: No LP manager for the engine
    """
    dex_type = _parse_dex_type(dex_type)

    if dex_type == DexEngineType.MOCK:
        return MockLPManager()

    raise UnsupportedOperationError(
        f"LP manager not implemented for {dex_type.value}",
        engine=dex_type.value,
    )


def list_supported() -> list:
    return [t.value for t in DexEngineType]


__all__ = [
    "DexEngineType",
    "create_swap_engine",
    "create_lp_manager",
    "list_supported",
]
