"""
Executor - Epoch State Machine.

============================================================
PURPOSE
============================================================
Tracks the phase of the current epoch with strict
transitions.

INVARIANTS:
- Every epoch starts from IDLE
- Every non-idle phase can fall back to IDLE or trip to
  CIRCUIT_OPEN
- CIRCUIT_OPEN is left only through reset()
- All transitions are logged and kept in a bounded history

============================================================
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Set, Tuple

from .types import EpochPhase


logger = logging.getLogger(__name__)


# ============================================================
# STATE TRANSITION RULES
# ============================================================

VALID_TRANSITIONS: Dict[EpochPhase, Set[EpochPhase]] = {
    EpochPhase.IDLE: {
        EpochPhase.CHECKING_PRECONDITIONS,
    },
    EpochPhase.CHECKING_PRECONDITIONS: {
        EpochPhase.ALLOCATING,
        EpochPhase.IDLE,
        EpochPhase.CIRCUIT_OPEN,
    },
    EpochPhase.ALLOCATING: {
        EpochPhase.EXECUTING,
        EpochPhase.IDLE,
        EpochPhase.CIRCUIT_OPEN,
    },
    EpochPhase.EXECUTING: {
        EpochPhase.SETTLED,
        EpochPhase.IDLE,
        EpochPhase.CIRCUIT_OPEN,
    },
    EpochPhase.SETTLED: {
        EpochPhase.IDLE,
        EpochPhase.CIRCUIT_OPEN,
    },
    # Sticky - left only through reset()
    EpochPhase.CIRCUIT_OPEN: set(),
}


class InvalidPhaseTransitionError(ValueError):
    """Transition not allowed by VALID_TRANSITIONS."""


@dataclass(frozen=True)
class PhaseTransition:
    """One recorded phase change."""

    epoch_number: int
    from_phase: EpochPhase
    to_phase: EpochPhase
    reason: str = ""


def can_transition(from_phase: EpochPhase, to_phase: EpochPhase) -> Tuple[bool, str]:
    """
    Check if a phase transition is allowed.

    Returns:
        Tuple of (allowed, reason)
    """
    if to_phase in VALID_TRANSITIONS.get(from_phase, set()):
        return True, "Valid transition"

    if from_phase == EpochPhase.CIRCUIT_OPEN:
        return False, "Circuit breaker open; manual reset required"

    return False, f"Invalid transition: {from_phase.value} -> {to_phase.value}"


# ============================================================
# EPOCH STATE MACHINE
# ============================================================

class EpochStateMachine:
    """Phase tracker for the executor."""

    def __init__(self, history_size: int = 100):
        self._phase = EpochPhase.IDLE
        self._history: Deque[PhaseTransition] = deque(maxlen=history_size)

    @property
    def phase(self) -> EpochPhase:
        return self._phase

    @property
    def history(self) -> List[PhaseTransition]:
        return list(self._history)

    def transition_to(
        self,
        target: EpochPhase,
        epoch_number: int,
        reason: str = "",
    ) -> PhaseTransition:
        """
        Move to a new phase.

        Raises:
            InvalidPhaseTransitionError: If the transition is not allowed
        """
        allowed, why = can_transition(self._phase, target)
        if not allowed:
            raise InvalidPhaseTransitionError(f"Epoch {epoch_number}: {why}")

        event = PhaseTransition(
            epoch_number=epoch_number,
            from_phase=self._phase,
            to_phase=target,
            reason=reason,
        )
        self._phase = target
        self._history.append(event)

        logger.debug(
            f"Epoch {epoch_number}: {event.from_phase.value} -> "
            f"{event.to_phase.value}" + (f" ({reason})" if reason else "")
        )
        return event

    def reset(self) -> None:
        """Manual return to IDLE from any phase."""
        if self._phase != EpochPhase.IDLE:
            logger.info(f"Epoch state machine reset from {self._phase.value}")
        self._phase = EpochPhase.IDLE


__all__ = [
    "VALID_TRANSITIONS",
    "InvalidPhaseTransitionError",
    "PhaseTransition",
    "can_transition",
    "EpochStateMachine",
]
