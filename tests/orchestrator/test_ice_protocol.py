"""
Tests for the IceProtocol epoch loop.

============================================================
PURPOSE
============================================================
Verify that each epoch detects fees, scores health, runs the
executor and always writes a report, and that reporting or
detection failures never fail the epoch.

============================================================
"""

import asyncio
import dataclasses
import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from allocation import AllocationMode, create_allocation_strategy
from core.clock import MockClock
from core.exceptions import FeeSourceError, ReportingError
from executor import EpochPhase, Executor, ExecutorMode
from fee_sources import ApiFeeSource, ConfirmationStatus, FeeEvent, FeeEventSource, FeeTracker
from ice_health import IceHealthEngine
from ledger import StaticBalanceProvider
from orchestrator import (
    IceProtocol,
    ProtocolConfig,
    ReportingConfig,
    SimulatedHealthInputProvider,
)
from reporting import EpochReportRepository, ReportGenerator, ReportPublisher
from swap_engine import MockSwapEngine


NOW = 1_700_000_000


def fee_event(signature: str, amount: float) -> FeeEvent:
    return FeeEvent(
        signature=signature,
        timestamp=NOW,
        amount_sol=amount,
        source=FeeEventSource.API,
        confirmation_status=ConfirmationStatus.FINALIZED,
    )


def timing_out_session() -> MagicMock:
    """aiohttp session whose requests exceed the client timeout."""
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    session.get = MagicMock(side_effect=asyncio.TimeoutError())
    session.post = MagicMock(side_effect=asyncio.TimeoutError())
    return session


def fake_fee_source(events=None, error=None) -> MagicMock:
    source = MagicMock()
    source.detect = AsyncMock(return_value=events or [], side_effect=error)
    source.close = AsyncMock()
    return source


@pytest.fixture
def config(tmp_path):
    return ProtocolConfig(reporting=ReportingConfig(reports_dir=str(tmp_path / "reports")))


@pytest.fixture
def build_protocol(config):
    """Factory for protocols with in-memory collaborators."""

    def _build(
        fee_source=None,
        balance: float = 10.0,
        health_inputs=None,
        **kwargs,
    ) -> IceProtocol:
        clock = MockClock.at(NOW)
        executor = Executor(
            config=config.executor,
            allocation_config=config.allocation,
            allocation_strategy=create_allocation_strategy(AllocationMode.FIXED),
            swap_engine=MockSwapEngine(),
            swap_config=config.swap,
            balance_provider=StaticBalanceProvider(balance),
            fee_tracker=FeeTracker(),
            clock=clock,
        )

        return IceProtocol(
            config=config,
            health_engine=IceHealthEngine(config.health, clock),
            executor=executor,
            fee_source=fee_source or fake_fee_source(),
            health_inputs=health_inputs or SimulatedHealthInputProvider(clock, random.Random(3)),
            report_generator=ReportGenerator(config.reporting.reports_dir),
            clock=clock,
            **kwargs,
        )

    return _build


# =============================================================================
# EPOCH
# =============================================================================

class TestRunEpoch:
    """Tests for a single epoch."""

    @pytest.mark.asyncio
    async def test_detected_fees_are_allocated(self, build_protocol):
        protocol = build_protocol(fake_fee_source([fee_event("sig-1", 2.0)]))

        report = await protocol.run_epoch()

        assert report.epoch_number == 1
        assert report.fees_detected == pytest.approx(2.0)
        assert report.allocations.total == pytest.approx(2.0)
        assert report.errors == []
        assert protocol.fee_tracker.total_fees_collected == 0
        assert protocol.executor.phase == EpochPhase.IDLE

    @pytest.mark.asyncio
    async def test_report_written_to_disk(self, build_protocol):
        protocol = build_protocol(fake_fee_source([fee_event("sig-1", 1.0)]))

        await protocol.run_epoch()

        reports = protocol.report_generator.load_recent_reports()
        assert len(reports) == 1
        assert reports[0].fees_detected == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_aborted_epoch_still_reported(self, build_protocol):
        protocol = build_protocol()

        report = await protocol.run_epoch()

        assert report.allocations.total == 0
        assert report.errors == ["Epoch aborted: insufficient-fees"]
        assert len(protocol.report_generator.load_recent_reports()) == 1

    @pytest.mark.asyncio
    async def test_low_balance_counts_failure(self, build_protocol):
        protocol = build_protocol(fake_fee_source([fee_event("sig-1", 1.0)]), balance=0.1)

        report = await protocol.run_epoch()

        assert report.errors == ["Epoch aborted: low-balance"]
        assert report.fees_detected == pytest.approx(1.0)
        assert protocol.get_state()["executor"]["consecutiveFailures"] == 1

    @pytest.mark.asyncio
    async def test_fee_source_error_does_not_fail_epoch(self, build_protocol):
        source = fake_fee_source(error=FeeSourceError("api down", source="api"))
        protocol = build_protocol(source)

        report = await protocol.run_epoch()

        assert report.errors == ["Epoch aborted: insufficient-fees"]
        source.detect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reporting_error_does_not_fail_epoch(self, build_protocol):
        protocol = build_protocol(fake_fee_source([fee_event("sig-1", 1.0)]))
        protocol._report_generator = MagicMock()
        protocol._report_generator.generate_report.side_effect = ReportingError("disk full")

        report = await protocol.run_epoch()

        assert report.allocations.total == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_allocation_recorded_for_health(self, build_protocol, config):
        health_inputs = MagicMock(
            wraps=SimulatedHealthInputProvider(MockClock.at(NOW), random.Random(1)),
        )
        protocol = build_protocol(
            fake_fee_source([fee_event("sig-1", 1.0)]),
            health_inputs=health_inputs,
        )

        await protocol.run_epoch()

        health_inputs.record_allocation.assert_called_once()

    @pytest.mark.asyncio
    async def test_repository_and_publisher(self, build_protocol, tmp_path):
        repository = EpochReportRepository(f"sqlite:///{tmp_path / 'reports.db'}")
        repository.create_tables()
        publisher = MagicMock()
        publisher.publish = AsyncMock(return_value={"discord": True})
        publisher.close = AsyncMock()

        source = fake_fee_source([fee_event("sig-1", 1.0)])
        protocol = build_protocol(source, report_repository=repository, publisher=publisher)

        await protocol.run_epoch()
        source.detect.return_value = []
        await protocol.run_epoch()

        assert repository.count() == 2
        publisher.publish.assert_awaited_once()

        await protocol.close()
        publisher.close.assert_awaited_once()
        source.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fee_api_timeout_still_allocates_pending_fees(self, build_protocol):
        source = ApiFeeSource(timeout_seconds=1.0)
        source._session = timing_out_session()
        protocol = build_protocol(source)
        protocol.fee_tracker.record([fee_event("sig-pending", 2.0)])

        report = await protocol.run_epoch()

        assert report.allocations.total == pytest.approx(2.0)
        assert protocol.executor.get_state().epoch_number == 1
        assert protocol.fee_tracker.total_fees_collected == 0
        assert len(protocol.report_generator.load_recent_reports()) == 1

    @pytest.mark.asyncio
    async def test_publisher_timeout_does_not_fail_epoch(self, build_protocol):
        publisher = ReportPublisher(discord_webhook_url="https://discord.test/hook")
        publisher._session = timing_out_session()
        protocol = build_protocol(
            fake_fee_source([fee_event("sig-1", 1.0)]),
            publisher=publisher,
        )

        report = await protocol.run_epoch()

        assert report.allocations.total == pytest.approx(1.0)
        assert len(protocol.report_generator.load_recent_reports()) == 1


# =============================================================================
# LOOP
# =============================================================================

class TestMainLoop:
    """Tests for start/stop."""

    @pytest.mark.asyncio
    async def test_stop_ends_loop_after_epoch(self, build_protocol):
        protocol = build_protocol()
        protocol.run_epoch = AsyncMock(side_effect=lambda: protocol.stop())

        await protocol.start(handle_signals=False)

        protocol.run_epoch.assert_awaited_once()
        assert not protocol.is_running

    @pytest.mark.asyncio
    async def test_epoch_exception_does_not_stop_loop(self, build_protocol, config):
        config.executor = dataclasses.replace(config.executor, epoch_interval_seconds=1)
        protocol = build_protocol()
        calls = []

        async def flaky_epoch():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            protocol.stop()

        protocol.run_epoch = flaky_epoch

        await protocol.start(handle_signals=False)

        assert len(calls) == 2


# =============================================================================
# SIMULATION & STATUS
# =============================================================================

class TestSimulation:
    """Tests for simulated runs and status reads."""

    @pytest.mark.asyncio
    async def test_simulate_runs_every_epoch(self, config):
        protocol = IceProtocol.create(config, simulation=True, rng=random.Random(42))

        summary = await protocol.simulate(3, sleep_seconds=0)

        assert summary.total_epochs == 3
        state = protocol.get_state()
        assert state["epochNumber"] == 3
        assert state["executor"]["epochNumber"] == 3
        assert state["executor"]["circuitBreakerActive"] is False

        await protocol.close()

    @pytest.mark.asyncio
    async def test_create_dry_run_defaults(self, config):
        protocol = IceProtocol.create(config, simulation=True)

        assert protocol.executor.config.mode == ExecutorMode.DRY_RUN
        assert protocol._publisher is None
        assert protocol._report_repository is None

        await protocol.close()

    @pytest.mark.asyncio
    async def test_health_check(self, build_protocol):
        protocol = build_protocol()

        result = protocol.health_check()

        assert 0 <= result["health"]["health"] <= 100
        assert isinstance(result["alive"], bool)
        assert result["minutesToThreshold"] >= 0
        assert result["epochNumber"] == 0
        assert result["lastOutcome"] is None

    @pytest.mark.asyncio
    async def test_reset_circuit_breaker(self, build_protocol):
        protocol = build_protocol(balance=0.0)

        for _ in range(protocol.config.executor.max_consecutive_failures):
            await protocol.run_epoch()

        assert protocol.get_state()["executor"]["circuitBreakerActive"] is True

        protocol.reset_circuit_breaker()

        state = protocol.get_state()["executor"]
        assert state["circuitBreakerActive"] is False
        assert state["consecutiveFailures"] == 0
