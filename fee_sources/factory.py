"""
Fee Source Factory.

Selects the fee source once at startup from the FEE_SOURCE
configuration.
"""

import logging
import random
from typing import Optional, Union

from core.clock import ClockProtocol
from core.exceptions import MissingConfigError
from ledger.rpc import SolanaRpcClient

from .api import DEFAULT_FEE_API_URL, ApiFeeSource
from .base import FeeSource
from .mock import MockFeeSource
from .types import FeeEventSource
from .wallet_watcher import WalletWatcherFeeSource


logger = logging.getLogger(__name__)


def create_fee_source(
    source_type: Union[FeeEventSource, str],
    rpc_client: Optional[SolanaRpcClient] = None,
    fee_wallet: Optional[str] = None,
    clock: Optional[ClockProtocol] = None,
    poll_interval_ms: int = 30000,
    confirmation_depth: int = 32,
    api_url: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> FeeSource:
    """
    Create the configured fee source.

    Raises:
        ValueError: On unknown source type
        MissingConfigError: Wallet watcher without RPC client or fee wallet
    """
    try:
        source_type = FeeEventSource(source_type)
    except ValueError:
        raise ValueError(f"Unknown fee source: {source_type}")

    if source_type == FeeEventSource.WALLET_WATCHER:
        if rpc_client is None:
            raise MissingConfigError("SOLANA_RPC_URL")
        if not fee_wallet:
            raise MissingConfigError("ICE_CREATOR_FEE_WALLET")
        source: FeeSource = WalletWatcherFeeSource(
            client=rpc_client,
            fee_wallet=fee_wallet,
            clock=clock,
            poll_interval_ms=poll_interval_ms,
            confirmation_depth=confirmation_depth,
        )
    elif source_type == FeeEventSource.API:
        source = ApiFeeSource(api_url or DEFAULT_FEE_API_URL)
    else:
        source = MockFeeSource(clock=clock, rng=rng)

    logger.info(f"Fee source created: {source_type.value}")
    return source


__all__ = ["create_fee_source"]
