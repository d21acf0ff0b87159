"""
Ledger - Solana JSON-RPC Client.

Uses a public or private Solana RPC endpoint over aiohttp.
Only read methods are exposed: balances, signatures,
transactions and signature statuses. Transaction
construction and signing are out of scope.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from core.exceptions import RPCError


logger = logging.getLogger(__name__)


LAMPORTS_PER_SOL = 1_000_000_000

DEFAULT_RPC_URL = "https://api.devnet.solana.com"


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL


class SolanaRpcClient:
    """
    Minimal async Solana JSON-RPC client.

    Timeout policy lives here: every call fails after
    `timeout_seconds` so a slow endpoint cannot stall an epoch.
    """

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        timeout_seconds: float = 20.0,
        commitment: str = "confirmed",
    ) -> None:
        self.rpc_url = rpc_url
        self.timeout_seconds = timeout_seconds
        self.commitment = commitment

        self._session: Optional[aiohttp.ClientSession] = None
        self._request_id = 0

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            headers = {"Content-Type": "application/json"}
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers=headers,
            )
        return self._session

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def _rpc_call(self, method: str, params: List[Any]) -> Any:
        """Make a JSON-RPC call and return its `result`."""
        session = await self._get_session()

        payload = {
            "jsonrpc": "2.0",
            "id": self._next_request_id(),
            "method": method,
            "params": params,
        }

        try:
            async with session.post(self.rpc_url, json=payload) as response:
                if response.status == 429:
                    raise RPCError(
                        "Solana RPC rate limit exceeded",
                        rpc_url=self.rpc_url,
                        method=method,
                        status_code=429,
                    )

                if response.status != 200:
                    raise RPCError(
                        f"RPC error: {response.status}",
                        rpc_url=self.rpc_url,
                        method=method,
                        status_code=response.status,
                    )

                data = await response.json()

                if "error" in data:
                    error = data["error"]
                    raise RPCError(
                        f"RPC error: {error.get('message', 'Unknown')}",
                        rpc_url=self.rpc_url,
                        method=method,
                        context={"details": error},
                    )

                return data.get("result")

        except aiohttp.ClientError as e:
            raise RPCError(
                f"Network error: {e}",
                rpc_url=self.rpc_url,
                method=method,
                cause=e,
            )
        except asyncio.TimeoutError as e:
            raise RPCError(
                "RPC request timed out",
                rpc_url=self.rpc_url,
                method=method,
                cause=e,
            )
        except ValueError as e:
            raise RPCError(
                f"Invalid JSON-RPC response: {e}",
                rpc_url=self.rpc_url,
                method=method,
                cause=e,
            )

    # ============================================================
    # READ METHODS
    # ============================================================

    async def get_balance_lamports(self, address: str) -> int:
        result = await self._rpc_call(
            "getBalance",
            [address, {"commitment": self.commitment}],
        )
        if isinstance(result, dict):
            return int(result.get("value", 0))
        return int(result or 0)

    async def get_balance_sol(self, address: str) -> float:
        """Balance of `address` in SOL."""
        return lamports_to_sol(await self.get_balance_lamports(address))

    async def get_signatures_for_address(
        self,
        address: str,
        limit: int = 100,
        until: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Newest-first signature records for an address."""
        options: Dict[str, Any] = {"limit": min(limit, 1000)}
        if until:
            options["until"] = until

        result = await self._rpc_call("getSignaturesForAddress", [address, options])
        return result or []

    async def get_transaction(self, signature: str) -> Optional[Dict[str, Any]]:
        return await self._rpc_call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "json",
                    "commitment": self.commitment,
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        )

    async def get_signature_statuses(
        self,
        signatures: List[str],
    ) -> List[Optional[Dict[str, Any]]]:
        result = await self._rpc_call(
            "getSignatureStatuses",
            [signatures, {"searchTransactionHistory": True}],
        )
        if not result:
            return [None] * len(signatures)
        return result.get("value", [])

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None


__all__ = [
    "LAMPORTS_PER_SOL",
    "DEFAULT_RPC_URL",
    "lamports_to_sol",
    "SolanaRpcClient",
]
