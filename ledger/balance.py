"""
Ledger - Balance Providers.

The executor only needs one number from the ledger: the bot
wallet's operating balance. Providers raise on query failure;
the executor decides how to treat the error.
"""

import logging
from abc import ABC, abstractmethod

from .rpc import SolanaRpcClient


logger = logging.getLogger(__name__)


class BalanceProvider(ABC):
    """Source of the operating wallet balance in SOL."""

    @abstractmethod
    async def get_balance_sol(self) -> float:
        pass


class RpcBalanceProvider(BalanceProvider):
    """Queries the bot wallet balance through JSON-RPC."""

    def __init__(self, client: SolanaRpcClient, address: str) -> None:
        self._client = client
        self._address = address

    @property
    def address(self) -> str:
        return self._address

    async def get_balance_sol(self) -> float:
        balance = await self._client.get_balance_sol(self._address)
        logger.debug(f"Bot balance: {balance:.6f} SOL ({self._address})")
        return balance


class StaticBalanceProvider(BalanceProvider):
    """Fixed balance for dry runs, simulation and tests."""

    def __init__(self, balance_sol: float = 10.0) -> None:
        self._balance_sol = balance_sol

    def set_balance(self, balance_sol: float) -> None:
        self._balance_sol = balance_sol

    async def get_balance_sol(self) -> float:
        return self._balance_sol


__all__ = [
    "BalanceProvider",
    "RpcBalanceProvider",
    "StaticBalanceProvider",
]
