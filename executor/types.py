"""
Executor - Type Definitions.

============================================================
EPOCH PHASES
============================================================
    IDLE ──► CHECKING_PRECONDITIONS ──► ALLOCATING ──► EXECUTING ──► SETTLED
     ▲               │                      │              │            │
     └───────────────┴──────────────────────┴──────────────┴────────────┘
                     │                      │              │
                     └──────────► CIRCUIT_OPEN ◄───────────┘

CIRCUIT_OPEN is sticky: only a manual reset returns to IDLE.

============================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from allocation.types import EpochAllocation


# ============================================================
# ENUMS
# ============================================================

class EpochPhase(str, Enum):
    """Executor epoch state machine phases."""

    IDLE = "idle"
    CHECKING_PRECONDITIONS = "checking-preconditions"
    ALLOCATING = "allocating"
    EXECUTING = "executing"
    SETTLED = "settled"
    CIRCUIT_OPEN = "circuit-open"


class AbortReason(str, Enum):
    """Why an epoch produced no allocation."""

    CIRCUIT_OPEN = "circuit-open"
    RATE_LIMITED = "rate-limited"
    LOW_BALANCE = "low-balance"
    INSUFFICIENT_FEES = "insufficient-fees"
    ERROR = "error"

    def counts_as_failure(self) -> bool:
        """Operational failures feed the circuit breaker."""
        return self in (AbortReason.LOW_BALANCE, AbortReason.ERROR)


# ============================================================
# EXECUTOR STATE
# ============================================================

@dataclass
class ExecutorState:
    """
    Process-wide executor state.

    Mutated only by the Executor inside an epoch or by a
    manual breaker reset. Lives for the process lifetime and
    is not persisted.
    """

    last_execution_time: int = 0
    """Unix seconds of the last settled epoch (0 = never)."""

    consecutive_failures: int = 0
    epoch_number: int = 0
    circuit_breaker_active: bool = False


@dataclass(frozen=True)
class ExecutorSnapshot:
    """Read-only view of executor state and carried config."""

    last_execution_time: int
    consecutive_failures: int
    epoch_number: int
    circuit_breaker_active: bool
    phase: EpochPhase
    mode: str
    max_budget_per_epoch_sol: float
    drift_tolerance_bps: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastExecutionTime": self.last_execution_time,
            "consecutiveFailures": self.consecutive_failures,
            "epochNumber": self.epoch_number,
            "circuitBreakerActive": self.circuit_breaker_active,
            "phase": self.phase.value,
            "mode": self.mode,
            "maxBudgetPerEpochSol": self.max_budget_per_epoch_sol,
            "driftToleranceBps": self.drift_tolerance_bps,
        }


# ============================================================
# EPOCH OUTCOME
# ============================================================

@dataclass(frozen=True)
class EpochOutcome:
    """Result record of one execute_epoch call."""

    epoch_number: int
    phase_reached: EpochPhase
    """Furthest phase entered during the epoch."""

    abort_reason: Optional[AbortReason] = None
    error: Optional[str] = None
    fees_processed_sol: float = 0.0
    allocation: Optional[EpochAllocation] = None

    @property
    def succeeded(self) -> bool:
        return self.abort_reason is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "epochNumber": self.epoch_number,
            "phaseReached": self.phase_reached.value,
            "abortReason": self.abort_reason.value if self.abort_reason else None,
            "error": self.error,
            "feesProcessedSol": self.fees_processed_sol,
            "succeeded": self.succeeded,
        }


__all__ = [
    "EpochPhase",
    "AbortReason",
    "ExecutorState",
    "ExecutorSnapshot",
    "EpochOutcome",
]
