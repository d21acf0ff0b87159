"""
Fee Sources - Wallet Watcher.

============================================================
PURPOSE
============================================================
Watches the creator fee wallet for SOL inflows through the
Solana JSON-RPC API.

FLOW:
1. Poll no more often than every poll_interval_ms
2. getSignaturesForAddress, newest first, until the last seen
3. getTransaction per signature; inflow is the positive
   lamport change of the fee wallet account
4. getSignatureStatuses maps confirmations to
   processed / confirmed (>=16) / finalized (>=depth)

Errors are logged and produce an empty batch; the next poll
retries from the same last-seen signature.

============================================================
"""

import logging
from typing import Any, Dict, List, Optional

from core.clock import ClockProtocol, SystemClock
from core.exceptions import LedgerError
from ledger.rpc import SolanaRpcClient, lamports_to_sol

from .base import FeeSource
from .types import ConfirmationStatus, FeeEvent, FeeEventSource


logger = logging.getLogger(__name__)


CONFIRMED_THRESHOLD = 16


def confirmation_status_for(
    status: Optional[Dict[str, Any]],
    confirmation_depth: int,
) -> ConfirmationStatus:
    """Map a getSignatureStatuses entry to a confirmation level."""
    if not status:
        return ConfirmationStatus.PROCESSED

    # Rooted transactions report confirmations as null
    if status.get("confirmationStatus") == ConfirmationStatus.FINALIZED.value:
        return ConfirmationStatus.FINALIZED

    confirmations = status.get("confirmations") or 0

    if confirmations >= confirmation_depth:
        return ConfirmationStatus.FINALIZED
    elif confirmations >= CONFIRMED_THRESHOLD:
        return ConfirmationStatus.CONFIRMED
    return ConfirmationStatus.PROCESSED


def extract_sol_inflow(transaction: Dict[str, Any], wallet: str) -> float:
    """
    Positive SOL balance change of `wallet` in a transaction.

    Returns 0 when the wallet is not an account of the
    transaction or the balance did not grow.
    """
    meta = transaction.get("meta") or {}
    pre_balances = meta.get("preBalances") or []
    post_balances = meta.get("postBalances") or []

    account_keys = (
        transaction.get("transaction", {})
        .get("message", {})
        .get("accountKeys", [])
    )
    keys = [k["pubkey"] if isinstance(k, dict) else k for k in account_keys]

    if wallet not in keys:
        return 0.0

    index = keys.index(wallet)
    if index >= len(pre_balances) or index >= len(post_balances):
        return 0.0

    inflow = max(0, post_balances[index] - pre_balances[index])
    return lamports_to_sol(inflow)


class WalletWatcherFeeSource(FeeSource):
    """Fee source backed by the fee wallet's transaction history."""

    source_type = FeeEventSource.WALLET_WATCHER

    def __init__(
        self,
        client: SolanaRpcClient,
        fee_wallet: str,
        clock: Optional[ClockProtocol] = None,
        poll_interval_ms: int = 30000,
        confirmation_depth: int = 32,
        signature_limit: int = 100,
    ):
        self._client = client
        self._fee_wallet = fee_wallet
        self._clock = clock or SystemClock()
        self._poll_interval_ms = poll_interval_ms
        self._confirmation_depth = confirmation_depth
        self._signature_limit = signature_limit

        self._last_processed_signature: Optional[str] = None
        self._last_poll_ms: Optional[float] = None

    @property
    def last_processed_signature(self) -> Optional[str]:
        return self._last_processed_signature

    async def detect(self) -> List[FeeEvent]:
        now_ms = self._clock.timestamp() * 1000

        if (
            self._last_poll_ms is not None
            and now_ms - self._last_poll_ms < self._poll_interval_ms
        ):
            return []

        self._last_poll_ms = now_ms

        try:
            signatures = await self._fetch_recent_signatures()
            return await self._process_signatures(signatures)
        except LedgerError as e:
            logger.error(f"Error detecting fees from wallet: {e}")
            return []

    async def _fetch_recent_signatures(self) -> List[str]:
        logger.debug(f"Fetching recent signatures for {self._fee_wallet}")

        records = await self._client.get_signatures_for_address(
            self._fee_wallet,
            limit=self._signature_limit,
            until=self._last_processed_signature,
        )

        return [
            r["signature"] for r in records
            if r.get("signature") and not r.get("err")
        ]

    async def _process_signatures(self, signatures: List[str]) -> List[FeeEvent]:
        if not signatures:
            return []

        statuses = await self._client.get_signature_statuses(signatures)
        events = []

        for signature, status in zip(signatures, statuses):
            if signature == self._last_processed_signature:
                break

            try:
                tx = await self._client.get_transaction(signature)
            except LedgerError as e:
                logger.warning(f"Error processing signature {signature[:12]}...: {e}")
                continue

            if not tx or not tx.get("meta"):
                continue

            inflow = extract_sol_inflow(tx, self._fee_wallet)
            if inflow <= 0:
                continue

            event = FeeEvent(
                signature=signature,
                timestamp=tx.get("blockTime") or self._clock.unix_seconds(),
                amount_sol=inflow,
                source=self.source_type,
                confirmation_status=confirmation_status_for(
                    status, self._confirmation_depth
                ),
            )
            events.append(event)

            logger.info(
                f"Fee detected from wallet | signature={signature[:12]}... "
                f"amount={inflow:.6f} SOL status={event.confirmation_status.value}"
            )

        # Newest first
        self._last_processed_signature = signatures[0]

        return events

    async def close(self) -> None:
        await self._client.close()


__all__ = [
    "CONFIRMED_THRESHOLD",
    "confirmation_status_for",
    "extract_sol_inflow",
    "WalletWatcherFeeSource",
]
