"""
Fee Sources - Types.

============================================================
PURPOSE
============================================================
Fee inflow events and the shared fee accumulator.

OWNERSHIP:
- Fee sources only produce events
- FeeTracker.record() appends and increments the total
- Only the executor calls FeeTracker.reset_collected()

============================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Set


logger = logging.getLogger(__name__)


# ============================================================
# ENUMS
# ============================================================

class FeeEventSource(str, Enum):
    """Provenance tag of a fee event."""

    WALLET_WATCHER = "wallet-watcher"
    API = "api"
    MOCK = "mock"


class ConfirmationStatus(str, Enum):
    """Ledger confirmation level of a fee event."""

    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


# ============================================================
# FEE EVENT
# ============================================================

@dataclass
class FeeEvent:
    """One observed fee inflow."""

    signature: str
    """Unique reference of the inflow."""

    timestamp: int
    """Unix seconds."""

    amount_sol: float
    source: FeeEventSource
    confirmation_status: ConfirmationStatus
    processed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signature": self.signature,
            "timestamp": self.timestamp,
            "amountSol": self.amount_sol,
            "source": self.source.value,
            "confirmationStatus": self.confirmation_status.value,
            "processed": self.processed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeeEvent":
        return cls(
            signature=str(data["signature"]),
            timestamp=int(data["timestamp"]),
            amount_sol=float(data["amountSol"]),
            source=FeeEventSource(data.get("source", FeeEventSource.API.value)),
            confirmation_status=ConfirmationStatus(
                data.get("confirmationStatus", ConfirmationStatus.PROCESSED.value)
            ),
            processed=bool(data.get("processed", False)),
        )


# ============================================================
# FEE TRACKER
# ============================================================

@dataclass
class FeeTracker:
    """
    Shared fee accumulator.

    The total only grows between epochs. Each successful
    epoch claims the whole amount and zeroes it; there is no
    partial carry-forward.
    """

    total_fees_collected: float = 0.0
    last_processed_signature: str = ""
    last_processed_timestamp: int = 0
    events: List[FeeEvent] = field(default_factory=list)

    _seen: Set[str] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._seen.update(e.signature for e in self.events)

    def record(self, events: Iterable[FeeEvent]) -> List[FeeEvent]:
        """
        Append new events and add their amounts to the total.

        Events whose reference was already recorded are skipped.

        Returns:
            The events that were actually recorded
        """
        recorded = []

        for event in events:
            if event.signature in self._seen:
                logger.debug(f"Duplicate fee event skipped: {event.signature[:12]}...")
                continue

            self._seen.add(event.signature)
            self.events.append(event)
            self.total_fees_collected += event.amount_sol
            self.last_processed_signature = event.signature
            self.last_processed_timestamp = event.timestamp
            recorded.append(event)

        if recorded:
            logger.info(
                f"Fees recorded | events={len(recorded)} "
                f"total_collected={self.total_fees_collected:.6f} SOL"
            )

        return recorded

    def reset_collected(self) -> float:
        """
        Zero the collected total and mark pending events processed.

        Returns:
            The amount that was claimed
        """
        claimed = self.total_fees_collected
        self.total_fees_collected = 0.0

        for event in self.events:
            event.processed = True

        return claimed

    @property
    def pending_events(self) -> List[FeeEvent]:
        return [e for e in self.events if not e.processed]

    @property
    def lifetime_fees_sol(self) -> float:
        return sum(e.amount_sol for e in self.events)

    def snapshot(self) -> Dict[str, Any]:
        """Read-only aggregate counters."""
        return {
            "totalFeesCollected": self.total_fees_collected,
            "lastProcessedSignature": self.last_processed_signature,
            "lastProcessedTimestamp": self.last_processed_timestamp,
            "eventCount": len(self.events),
            "pendingEventCount": len(self.pending_events),
            "lifetimeFeesSol": self.lifetime_fees_sol,
        }


__all__ = [
    "FeeEventSource",
    "ConfirmationStatus",
    "FeeEvent",
    "FeeTracker",
]
