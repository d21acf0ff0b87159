"""
Fee Sources - Package.

============================================================
PURPOSE
============================================================
Detect fee inflows and accumulate them for the executor.

- FeeEvent / FeeTracker: inflow records and the shared accumulator
- FeeSource: detector contract
- MockFeeSource, WalletWatcherFeeSource, ApiFeeSource
- create_fee_source(): startup selection

============================================================
"""

from .types import (
    FeeEventSource,
    ConfirmationStatus,
    FeeEvent,
    FeeTracker,
)
from .base import FeeSource
from .mock import MockFeeSource
from .wallet_watcher import (
    CONFIRMED_THRESHOLD,
    confirmation_status_for,
    extract_sol_inflow,
    WalletWatcherFeeSource,
)
from .api import DEFAULT_FEE_API_URL, ApiFeeSource
from .factory import create_fee_source


__all__ = [
    # Types
    "FeeEventSource",
    "ConfirmationStatus",
    "FeeEvent",
    "FeeTracker",
    # Sources
    "FeeSource",
    "MockFeeSource",
    "CONFIRMED_THRESHOLD",
    "confirmation_status_for",
    "extract_sol_inflow",
    "WalletWatcherFeeSource",
    "DEFAULT_FEE_API_URL",
    "ApiFeeSource",
    # Factory
    "create_fee_source",
]
