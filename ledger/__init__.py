"""
Ledger - Package.

Read-only Solana JSON-RPC access and the balance providers
consumed by the executor's minimum-balance guard.
"""

from .rpc import (
    LAMPORTS_PER_SOL,
    DEFAULT_RPC_URL,
    lamports_to_sol,
    SolanaRpcClient,
)
from .balance import (
    BalanceProvider,
    RpcBalanceProvider,
    StaticBalanceProvider,
)


__all__ = [
    # RPC
    "LAMPORTS_PER_SOL",
    "DEFAULT_RPC_URL",
    "lamports_to_sol",
    "SolanaRpcClient",
    # Balance
    "BalanceProvider",
    "RpcBalanceProvider",
    "StaticBalanceProvider",
]
