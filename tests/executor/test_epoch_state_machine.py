"""
Tests for the epoch state machine and executor config.
"""

import pytest

from executor import (
    EpochPhase,
    EpochStateMachine,
    ExecutorConfig,
    ExecutorMode,
    InvalidPhaseTransitionError,
    can_transition,
)


class TestCanTransition:
    """Tests for the transition table."""

    @pytest.mark.parametrize("from_phase,to_phase", [
        (EpochPhase.IDLE, EpochPhase.CHECKING_PRECONDITIONS),
        (EpochPhase.CHECKING_PRECONDITIONS, EpochPhase.ALLOCATING),
        (EpochPhase.CHECKING_PRECONDITIONS, EpochPhase.IDLE),
        (EpochPhase.CHECKING_PRECONDITIONS, EpochPhase.CIRCUIT_OPEN),
        (EpochPhase.ALLOCATING, EpochPhase.EXECUTING),
        (EpochPhase.EXECUTING, EpochPhase.SETTLED),
        (EpochPhase.SETTLED, EpochPhase.IDLE),
    ])
    def test_allowed(self, from_phase, to_phase):
        allowed, _ = can_transition(from_phase, to_phase)
        assert allowed

    @pytest.mark.parametrize("from_phase,to_phase", [
        (EpochPhase.IDLE, EpochPhase.EXECUTING),
        (EpochPhase.ALLOCATING, EpochPhase.SETTLED),
        (EpochPhase.SETTLED, EpochPhase.EXECUTING),
    ])
    def test_rejected(self, from_phase, to_phase):
        allowed, reason = can_transition(from_phase, to_phase)
        assert not allowed
        assert "Invalid transition" in reason

    def test_circuit_open_is_sticky(self):
        allowed, reason = can_transition(EpochPhase.CIRCUIT_OPEN, EpochPhase.IDLE)
        assert not allowed
        assert "manual reset" in reason


class TestEpochStateMachine:
    """Tests for the phase tracker."""

    def test_records_history(self):
        machine = EpochStateMachine()
        machine.transition_to(EpochPhase.CHECKING_PRECONDITIONS, 1)
        machine.transition_to(EpochPhase.IDLE, 1, "rate-limited")

        assert machine.phase == EpochPhase.IDLE
        assert machine.history[-1].reason == "rate-limited"
        assert machine.history[0].from_phase == EpochPhase.IDLE

    def test_invalid_transition_raises(self):
        machine = EpochStateMachine()

        with pytest.raises(InvalidPhaseTransitionError):
            machine.transition_to(EpochPhase.SETTLED, 1)
        assert machine.phase == EpochPhase.IDLE

    def test_history_bounded(self):
        machine = EpochStateMachine(history_size=4)
        for epoch in range(10):
            machine.transition_to(EpochPhase.CHECKING_PRECONDITIONS, epoch)
            machine.transition_to(EpochPhase.IDLE, epoch)

        assert len(machine.history) == 4

    def test_reset_from_circuit_open(self):
        machine = EpochStateMachine()
        machine.transition_to(EpochPhase.CHECKING_PRECONDITIONS, 1)
        machine.transition_to(EpochPhase.CIRCUIT_OPEN, 1)

        machine.reset()
        assert machine.phase == EpochPhase.IDLE


class TestExecutorConfig:
    """Tests for executor config validation."""

    def test_defaults(self):
        config = ExecutorConfig()

        assert config.validate() == []
        assert config.mode == ExecutorMode.DRY_RUN
        assert not config.is_live
        assert config.dust_threshold_sol == 0.01

    def test_invalid_values(self):
        errors = ExecutorConfig(
            epoch_interval_seconds=0,
            max_consecutive_failures=0,
            min_balance_to_operate_sol=-1,
        ).validate()

        assert len(errors) == 3
