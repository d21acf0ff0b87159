"""
Reporting - Epoch Report.

One report per epoch that produced an allocation, carrying
everything an operator needs to audit it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from allocation.types import AllocationAction, AllocationAmounts, EpochAllocation
from ice_health.engine import health_state_from_dict, health_state_to_dict
from ice_health.types import IceHealthState


@dataclass
class EpochReport:
    """Audit record of one epoch."""

    epoch_number: int
    timestamp: int
    """Unix seconds."""

    fees_detected: float
    allocations: AllocationAmounts
    ice_health: IceHealthState
    actions: List[AllocationAction] = field(default_factory=list)
    tx_signatures: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @classmethod
    def from_allocation(
        cls,
        epoch_number: int,
        timestamp: int,
        allocation: EpochAllocation,
        ice_health: IceHealthState,
    ) -> "EpochReport":
        """Build a report from an executed epoch allocation."""
        return cls(
            epoch_number=epoch_number,
            timestamp=timestamp,
            fees_detected=allocation.total_fees_to_allocate,
            allocations=allocation.allocations,
            ice_health=ice_health,
            actions=list(allocation.actions),
            tx_signatures=allocation.transaction_references,
            errors=[
                f"{a.type.value}: {a.error}"
                for a in allocation.failed_actions
                if a.error
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "epochNumber": self.epoch_number,
            "timestamp": self.timestamp,
            "feesDetected": self.fees_detected,
            "allocations": self.allocations.to_dict(),
            "iceHealth": health_state_to_dict(self.ice_health),
            "actions": [a.to_dict() for a in self.actions],
            "txSignatures": list(self.tx_signatures),
            "errors": list(self.errors),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EpochReport":
        return cls(
            epoch_number=int(data["epochNumber"]),
            timestamp=int(data["timestamp"]),
            fees_detected=float(data["feesDetected"]),
            allocations=AllocationAmounts.from_dict(data["allocations"]),
            ice_health=health_state_from_dict(data["iceHealth"]),
            actions=[AllocationAction.from_dict(a) for a in data.get("actions", [])],
            tx_signatures=list(data.get("txSignatures", [])),
            errors=list(data.get("errors", [])),
        )


@dataclass(frozen=True)
class ReportSummary:
    """Aggregate over stored reports."""

    total_epochs: int
    total_fees: float
    total_actions: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalEpochs": self.total_epochs,
            "totalFees": self.total_fees,
            "totalActions": self.total_actions,
        }


__all__ = ["EpochReport", "ReportSummary"]
