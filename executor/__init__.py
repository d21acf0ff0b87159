"""
Executor - Package.

============================================================
PURPOSE
============================================================
Epoch executor: safety interlocks, allocation, action
execution and settlement.

STATE MACHINE:
    IDLE -> CHECKING_PRECONDITIONS -> ALLOCATING -> EXECUTING -> SETTLED
    with aborts back to IDLE and a sticky CIRCUIT_OPEN

============================================================
"""

from .config import (
    DUST_THRESHOLD_SOL,
    ExecutorMode,
    ExecutorConfig,
)
from .types import (
    EpochPhase,
    AbortReason,
    ExecutorState,
    ExecutorSnapshot,
    EpochOutcome,
)
from .state_machine import (
    VALID_TRANSITIONS,
    InvalidPhaseTransitionError,
    PhaseTransition,
    can_transition,
    EpochStateMachine,
)
from .actions import NOT_IMPLEMENTED_ERROR, ActionRunner
from .engine import Executor


__all__ = [
    # Config
    "DUST_THRESHOLD_SOL",
    "ExecutorMode",
    "ExecutorConfig",
    # Types
    "EpochPhase",
    "AbortReason",
    "ExecutorState",
    "ExecutorSnapshot",
    "EpochOutcome",
    # State machine
    "VALID_TRANSITIONS",
    "InvalidPhaseTransitionError",
    "PhaseTransition",
    "can_transition",
    "EpochStateMachine",
    # Execution
    "NOT_IMPLEMENTED_ERROR",
    "ActionRunner",
    "Executor",
]
