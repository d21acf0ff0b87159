"""Shared executor fixtures."""

import itertools

import pytest

from allocation import AllocationConfig, AllocationMode, create_allocation_strategy
from core.clock import MockClock
from executor import Executor, ExecutorConfig, ExecutorMode
from fee_sources import ConfirmationStatus, FeeEvent, FeeEventSource, FeeTracker
from ice_health import HealthStatus, IceHealthMetrics, IceHealthState
from ledger import StaticBalanceProvider
from swap_engine import MockSwapEngine, SwapConfig


NOW = 1_700_000_000

_signatures = itertools.count(1)


def add_fees(tracker: FeeTracker, amount: float, timestamp: int = NOW) -> None:
    tracker.record([FeeEvent(
        signature=f"fee-{next(_signatures)}",
        timestamp=timestamp,
        amount_sol=amount,
        source=FeeEventSource.MOCK,
        confirmation_status=ConfirmationStatus.FINALIZED,
    )])


def make_health(health: float = 60.0, epoch_number: int = 1) -> IceHealthState:
    return IceHealthState(
        timestamp=NOW,
        health=health,
        metrics=IceHealthMetrics(health, health, health, 0.0, 0.0),
        status=HealthStatus.ALIVE if health >= 50 else HealthStatus.MELTING,
        last_action_time=NOW,
        epoch_number=epoch_number,
    )


@pytest.fixture
def clock():
    return MockClock.at(NOW)


@pytest.fixture
def tracker():
    return FeeTracker()


@pytest.fixture
def balance():
    return StaticBalanceProvider(10.0)


@pytest.fixture
def swap_engine():
    return MockSwapEngine()


@pytest.fixture
def make_executor(clock, tracker, balance, swap_engine):
    """Factory for executors sharing the fixture collaborators."""

    def _make(
        mode: ExecutorMode = ExecutorMode.LIVE,
        allocation_config: AllocationConfig = AllocationConfig(),
        allocation_mode: AllocationMode = AllocationMode.FIXED,
        swap_config: SwapConfig = SwapConfig(ice_token_mint="IceMint111"),
        **config_kwargs,
    ) -> Executor:
        return Executor(
            config=ExecutorConfig(mode=mode, **config_kwargs),
            allocation_config=allocation_config,
            allocation_strategy=create_allocation_strategy(allocation_mode),
            swap_engine=swap_engine,
            swap_config=swap_config,
            balance_provider=balance,
            fee_tracker=tracker,
            clock=clock,
        )

    return _make
