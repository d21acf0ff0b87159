"""
Allocation - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for splitting an epoch's fees into budget
categories and recording the actions taken.

CATEGORIES (fixed priority order):
1. buyback        - SOL -> $ice swap
2. add-lp         - SOL + $ice -> LP tokens
3. burn           - $ice sent to the null address
4. cooling-event  - budget reservation, no external call

ACTION LIFECYCLE:
    PENDING ──► EXECUTED
       │
       └──────► FAILED

Terminal states are final.

============================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple


ALLOCATION_TOTAL_TOLERANCE = 1e-6
"""Relative tolerance between the split amounts and the fee total."""


# ============================================================
# ENUMS
# ============================================================


class ActionType(str, Enum):
    """Corrective action categories in execution priority order."""

    BUYBACK = "buyback"
    ADD_LP = "add-lp"
    BURN = "burn"
    COOLING_EVENT = "cooling-event"

    @classmethod
    def in_priority_order(cls) -> List["ActionType"]:
        return [cls.BUYBACK, cls.ADD_LP, cls.BURN, cls.COOLING_EVENT]


class ActionStatus(str, Enum):
    """Lifecycle status of an allocation action."""

    PENDING = "pending"
    EXECUTED = "executed"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        return self != ActionStatus.PENDING


class InvalidActionTransitionError(Exception):
    """An action left a terminal status."""


# ============================================================
# CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class AllocationConfig:
    """
    Base budget split, in percent.

    Must sum to exactly 100. Validated at configuration load
    time; strategies assume a valid config.
    """

    buyback_pct: float = 70
    lp_pct: float = 20
    burn_pct: float = 5
    cooling_pct: float = 5

    @property
    def total_pct(self) -> float:
        return self.buyback_pct + self.lp_pct + self.burn_pct + self.cooling_pct

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.total_pct != 100:
            errors.append(
                f"Allocation percentages must sum to 100, got {self.total_pct}"
            )

        for name, value in (
            ("buyback", self.buyback_pct),
            ("lp", self.lp_pct),
            ("burn", self.burn_pct),
            ("cooling", self.cooling_pct),
        ):
            if value < 0:
                errors.append(f"Allocation percentage {name} must be non-negative")

        return errors

    def to_dict(self) -> Dict[str, float]:
        return {
            "buybackPct": self.buyback_pct,
            "lpPct": self.lp_pct,
            "burnPct": self.burn_pct,
            "coolingPct": self.cooling_pct,
        }


# ============================================================
# ALLOCATION RESULT
# ============================================================


@dataclass(frozen=True)
class AllocationAmounts:
    """Per-category amounts (SOL) for one epoch."""

    buyback: float = 0.0
    lp: float = 0.0
    burn: float = 0.0
    cooling: float = 0.0

    @property
    def total(self) -> float:
        return self.buyback + self.lp + self.burn + self.cooling

    def by_action_type(self) -> Iterator[Tuple[ActionType, float]]:
        """Yield (action type, amount) in execution priority order."""
        yield ActionType.BUYBACK, self.buyback
        yield ActionType.ADD_LP, self.lp
        yield ActionType.BURN, self.burn
        yield ActionType.COOLING_EVENT, self.cooling

    def to_dict(self) -> Dict[str, float]:
        return {
            "buyback": self.buyback,
            "lp": self.lp,
            "burn": self.burn,
            "cooling": self.cooling,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AllocationAmounts":
        return cls(
            buyback=float(data.get("buyback", 0.0)),
            lp=float(data.get("lp", 0.0)),
            burn=float(data.get("burn", 0.0)),
            cooling=float(data.get("cooling", 0.0)),
        )


@dataclass
class AllocationAction:
    """
    One corrective action for a non-zero allocation category.

    Created by the executor in PENDING and moved exactly once
    to EXECUTED or FAILED.
    """

    type: ActionType
    amount_sol: float
    status: ActionStatus = ActionStatus.PENDING
    signature: Optional[str] = None
    error: Optional[str] = None

    def mark_executed(self, signature: Optional[str] = None) -> None:
        self._ensure_pending()
        self.status = ActionStatus.EXECUTED
        self.signature = signature

    def mark_failed(self, error: str) -> None:
        self._ensure_pending()
        self.status = ActionStatus.FAILED
        self.error = error

    def _ensure_pending(self) -> None:
        if self.status.is_terminal():
            raise InvalidActionTransitionError(
                f"Cannot transition {self.type.value} action from terminal "
                f"status {self.status.value}"
            )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type.value,
            "amountSol": self.amount_sol,
            "status": self.status.value,
        }
        if self.signature:
            data["signature"] = self.signature
        if self.error:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AllocationAction":
        return cls(
            type=ActionType(data["type"]),
            amount_sol=float(data["amountSol"]),
            status=ActionStatus(data["status"]),
            signature=data.get("signature"),
            error=data.get("error"),
        )


@dataclass
class EpochAllocation:
    """
    Budget split for one epoch plus the ordered actions taken.

    Strategies return it with an empty action list; the
    executor fills actions in live mode.
    """

    total_fees_to_allocate: float
    allocations: AllocationAmounts
    actions: List[AllocationAction] = field(default_factory=list)

    @property
    def transaction_references(self) -> List[str]:
        return [a.signature for a in self.actions if a.signature]

    @property
    def failed_actions(self) -> List[AllocationAction]:
        return [a for a in self.actions if a.status == ActionStatus.FAILED]

    def is_balanced(self, tolerance: float = ALLOCATION_TOTAL_TOLERANCE) -> bool:
        """Check the split amounts sum to the fee total within tolerance."""
        scale = max(abs(self.total_fees_to_allocate), 1.0)
        return abs(self.allocations.total - self.total_fees_to_allocate) <= tolerance * scale

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFeesToAllocate": self.total_fees_to_allocate,
            "allocations": self.allocations.to_dict(),
            "actions": [a.to_dict() for a in self.actions],
        }


__all__ = [
    "ALLOCATION_TOTAL_TOLERANCE",
    "ActionType",
    "ActionStatus",
    "InvalidActionTransitionError",
    "AllocationConfig",
    "AllocationAmounts",
    "AllocationAction",
    "EpochAllocation",
]
