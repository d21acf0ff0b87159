"""
Orchestrator - Core.

============================================================
RESPONSIBILITY
============================================================
Main protocol class: ticks epochs and wires collaborators.

- Single entrypoint for the protocol loop
- Per epoch: detect fees -> compute health -> execute -> report
- Handles signals (SIGINT, SIGTERM)
- Stop requests are honored between epochs, never mid-epoch

============================================================
ARCHITECTURAL POSITION
============================================================
- This orchestrator has NO allocation logic
- It does NOT touch executor state
- It ONLY coordinates execution and reporting

============================================================
"""

import asyncio
import json
import logging
import random
import signal
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from allocation.strategies import create_allocation_strategy
from allocation.types import AllocationAmounts, EpochAllocation
from core.clock import ClockProtocol, MockClock, SystemClock
from core.exceptions import IceProtocolException, ReportingError
from executor.engine import Executor
from fee_sources.base import FeeSource
from fee_sources.factory import create_fee_source
from fee_sources.types import ConfirmationStatus, FeeEvent, FeeEventSource, FeeTracker
from ice_health.engine import IceHealthEngine, health_state_to_dict
from ice_health.types import IceHealthState
from ledger.balance import BalanceProvider, RpcBalanceProvider, StaticBalanceProvider
from ledger.rpc import SolanaRpcClient
from reporting.generator import ReportGenerator
from reporting.publisher import ReportPublisher
from reporting.repository import EpochReportRepository
from reporting.types import EpochReport, ReportSummary
from swap_engine.factory import create_swap_engine
from swap_engine.mock import generate_mock_signature

from .health_inputs import HealthInputProvider, SimulatedHealthInputProvider
from .models import ProtocolConfig, load_protocol_config


logger = logging.getLogger(__name__)


SIMULATED_BALANCE_SOL = 10.0
SIMULATED_MAX_FEE_SOL = 5.0


# ============================================================
# LOGGING SETUP
# ============================================================

def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Set up structured logging.

    Args:
        level: Log level
        log_format: Output format (json or text)
        log_file: Optional file to write alongside stdout

    Returns:
        Configured logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
            })
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handlers = [handler]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = handlers

    return logging.getLogger("orchestrator")


# ============================================================
# ICE PROTOCOL
# ============================================================

class IceProtocol:
    """
    Main protocol orchestrator.

    Owns the fee tracker and the epoch counter; the executor
    owns everything else that changes inside an epoch.
    """

    def __init__(
        self,
        config: ProtocolConfig,
        health_engine: IceHealthEngine,
        executor: Executor,
        fee_source: FeeSource,
        health_inputs: HealthInputProvider,
        report_generator: ReportGenerator,
        clock: Optional[ClockProtocol] = None,
        report_repository: Optional[EpochReportRepository] = None,
        publisher: Optional[ReportPublisher] = None,
        rpc_client: Optional[SolanaRpcClient] = None,
        rng: Optional[random.Random] = None,
    ):
        self._config = config
        self._health_engine = health_engine
        self._executor = executor
        self._fee_source = fee_source
        self._health_inputs = health_inputs
        self._report_generator = report_generator
        self._clock = clock or SystemClock()
        self._report_repository = report_repository
        self._publisher = publisher
        self._rpc_client = rpc_client
        self._rng = rng or random.Random()

        self._epoch_number = 0
        self._running = False
        self._stop_event = asyncio.Event()

    # --------------------------------------------------------
    # Construction
    # --------------------------------------------------------

    @classmethod
    def create(
        cls,
        config: Optional[ProtocolConfig] = None,
        simulation: bool = False,
        clock: Optional[ClockProtocol] = None,
        rng: Optional[random.Random] = None,
        env_file: Optional[str] = None,
    ) -> "IceProtocol":
        """
        Build a protocol instance from configuration.

        Simulation uses a mock clock advanced one epoch interval
        per simulated epoch and a fixed bot balance.

        Raises:
            ConfigurationError: On invalid configuration
        """
        logger.info("Initializing ICE protocol...")

        config = config or load_protocol_config(env_file)
        clock = clock or (MockClock() if simulation else SystemClock())
        rng = rng or random.Random()

        rpc_client = SolanaRpcClient(config.solana_rpc_url)
        fee_tracker = FeeTracker()

        fee_source = create_fee_source(
            config.fee_source.source_type,
            rpc_client=rpc_client,
            fee_wallet=config.ice_creator_fee_wallet,
            clock=clock,
            poll_interval_ms=config.fee_source.poll_interval_ms,
            confirmation_depth=config.fee_source.confirmation_depth,
            api_url=config.fee_source.api_url,
            rng=rng,
        )

        balance_provider: BalanceProvider
        if config.bot_wallet_address and not simulation:
            balance_provider = RpcBalanceProvider(rpc_client, config.bot_wallet_address)
        else:
            logger.warning(
                f"No bot wallet balance query; using fixed {SIMULATED_BALANCE_SOL} SOL"
            )
            balance_provider = StaticBalanceProvider(SIMULATED_BALANCE_SOL)

        executor = Executor(
            config=config.executor,
            allocation_config=config.allocation,
            allocation_strategy=create_allocation_strategy(config.allocation_mode),
            swap_engine=create_swap_engine(config.swap.dex_engine),
            swap_config=config.swap,
            balance_provider=balance_provider,
            fee_tracker=fee_tracker,
            clock=clock,
        )

        report_repository = None
        if config.reporting.database_url:
            report_repository = EpochReportRepository(config.reporting.database_url)
            report_repository.create_tables()

        publisher = ReportPublisher(
            discord_webhook_url=config.reporting.discord_webhook_url,
            telegram_bot_token=config.reporting.telegram_bot_token,
            telegram_chat_id=config.reporting.telegram_chat_id,
        )

        protocol = cls(
            config=config,
            health_engine=IceHealthEngine(config.health, clock),
            executor=executor,
            fee_source=fee_source,
            health_inputs=SimulatedHealthInputProvider(clock, rng),
            report_generator=ReportGenerator(config.reporting.reports_dir),
            clock=clock,
            report_repository=report_repository,
            publisher=publisher if publisher.enabled else None,
            rpc_client=rpc_client,
            rng=rng,
        )

        logger.info("ICE protocol initialized successfully")
        return protocol

    # --------------------------------------------------------
    # Properties
    # --------------------------------------------------------

    @property
    def config(self) -> ProtocolConfig:
        return self._config

    @property
    def executor(self) -> Executor:
        return self._executor

    @property
    def fee_tracker(self) -> FeeTracker:
        return self._executor.fee_tracker

    @property
    def report_generator(self) -> ReportGenerator:
        return self._report_generator

    @property
    def is_running(self) -> bool:
        return self._running

    # --------------------------------------------------------
    # Main Loop
    # --------------------------------------------------------

    async def start(self, handle_signals: bool = True) -> None:
        """
        Run epochs until stop() is called.

        The stop flag is checked only between epochs.
        """
        if self._running:
            logger.warning("Protocol already running")
            return

        self._running = True
        self._stop_event.clear()

        if handle_signals:
            self._install_signal_handlers()

        logger.info(
            f"Starting ICE protocol main loop | "
            f"interval={self._config.executor.epoch_interval_seconds}s "
            f"mode={self._config.executor.mode.value}"
        )

        try:
            while not self._stop_event.is_set():
                try:
                    await self.run_epoch()
                except Exception as e:
                    logger.error(f"Error in epoch execution: {e}", exc_info=True)

                if self._stop_event.is_set():
                    break

                await self._wait_for_next_epoch()
        finally:
            self._running = False
            if handle_signals:
                self._restore_signal_handlers()
            logger.info("ICE protocol main loop stopped")

    def stop(self) -> None:
        """Request shutdown after the in-flight epoch."""
        logger.info("Stopping ICE protocol")
        self._stop_event.set()

    async def run_epoch(self) -> EpochReport:
        """
        Run one epoch and write its report.

        Returns:
            The epoch report
        """
        self._epoch_number += 1
        epoch = self._epoch_number
        logger.info(f"Executing epoch {epoch}")

        await self._detect_fees()

        ice_health = self._health_engine.compute_health(
            self._health_inputs.get_input(),
            epoch,
        )

        allocation = await self._executor.execute_epoch(ice_health)
        now = self._clock.unix_seconds()

        if allocation is not None:
            self._health_inputs.record_allocation(allocation, now)

        report = self._build_report(epoch, now, ice_health, allocation)
        await self._emit_report(report, published=allocation is not None)

        return report

    async def simulate(self, num_epochs: int, sleep_seconds: float = 1.0) -> ReportSummary:
        """
        Run a fixed number of epochs with random fee inflow.

        Returns:
            Summary over stored reports
        """
        logger.info(f"Starting simulation | epochs={num_epochs}")

        for _ in range(num_epochs):
            try:
                self._inject_simulated_fee()
                await self.run_epoch()
            except Exception as e:
                logger.error(f"Error in simulation epoch: {e}", exc_info=True)

            if isinstance(self._clock, MockClock):
                self._clock.advance(seconds=self._config.executor.epoch_interval_seconds)

            if sleep_seconds > 0:
                await asyncio.sleep(sleep_seconds)

        summary = self._report_generator.generate_summary()
        logger.info(
            f"Simulation complete | epochs_run={num_epochs} "
            f"summary={summary.to_dict()}"
        )
        return summary

    # --------------------------------------------------------
    # Control & Status
    # --------------------------------------------------------

    def reset_circuit_breaker(self) -> None:
        self._executor.reset_circuit_breaker()

    def get_state(self) -> Dict[str, Any]:
        """Read-only protocol snapshot."""
        outcome = self._executor.last_outcome

        return {
            "executor": self._executor.get_state().to_dict(),
            "feeTracker": self.fee_tracker.snapshot(),
            "epochNumber": self._epoch_number,
            "running": self._running,
            "lastOutcome": outcome.to_dict() if outcome else None,
        }

    def health_check(self) -> Dict[str, Any]:
        """Current health reading plus protocol state; no epoch is run."""
        ice_health = self._health_engine.compute_health(
            self._health_inputs.get_input(),
            self._epoch_number,
        )

        return {
            "health": health_state_to_dict(ice_health),
            "alive": self._health_engine.is_alive(ice_health),
            "minutesToThreshold": self._health_engine.estimate_time_to_threshold(ice_health),
            **self.get_state(),
        }

    async def close(self) -> None:
        """Release network and database resources."""
        await self._fee_source.close()

        if self._rpc_client:
            await self._rpc_client.close()

        if self._publisher:
            await self._publisher.close()

        if self._report_repository:
            self._report_repository.dispose()

    # --------------------------------------------------------
    # Internals
    # --------------------------------------------------------

    async def _detect_fees(self) -> None:
        try:
            events = await self._fee_source.detect()
        except IceProtocolException as e:
            logger.warning(f"Fee detection failed: {e}")
            return

        self.fee_tracker.record(events)

    def _inject_simulated_fee(self) -> None:
        amount = self._rng.random() * SIMULATED_MAX_FEE_SOL
        if amount <= 0:
            return

        self.fee_tracker.record([FeeEvent(
            signature=generate_mock_signature(self._rng),
            timestamp=self._clock.unix_seconds(),
            amount_sol=amount,
            source=FeeEventSource.MOCK,
            confirmation_status=ConfirmationStatus.FINALIZED,
        )])

    def _build_report(
        self,
        epoch: int,
        now: int,
        ice_health: IceHealthState,
        allocation: Optional[EpochAllocation],
    ) -> EpochReport:
        if allocation is not None:
            return EpochReport.from_allocation(epoch, now, allocation, ice_health)

        errors = []
        outcome = self._executor.last_outcome
        if outcome and outcome.abort_reason:
            message = f"Epoch aborted: {outcome.abort_reason.value}"
            if outcome.error:
                message += f" ({outcome.error})"
            errors.append(message)

        return EpochReport(
            epoch_number=epoch,
            timestamp=now,
            fees_detected=self.fee_tracker.total_fees_collected,
            allocations=AllocationAmounts(),
            ice_health=ice_health,
            errors=errors,
        )

    async def _emit_report(self, report: EpochReport, published: bool) -> None:
        """Write, persist and publish; reporting failures never fail the epoch."""
        try:
            self._report_generator.generate_report(report)
        except ReportingError as e:
            logger.error(f"Report generation failed: {e}")

        if self._report_repository:
            try:
                self._report_repository.save(report)
            except ReportingError as e:
                logger.error(f"Report persistence failed: {e}")

        if self._publisher and published:
            await self._publisher.publish(report)

    async def _wait_for_next_epoch(self) -> None:
        interval = self._config.executor.epoch_interval_seconds
        logger.debug(f"Sleeping {interval}s until epoch {self._epoch_number + 1}")

        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass

    # --------------------------------------------------------
    # Signal Handlers
    # --------------------------------------------------------

    def _install_signal_handlers(self) -> None:
        """Install signal handlers for graceful shutdown."""
        if sys.platform == "win32":
            signal.signal(signal.SIGINT, self._signal_handler)
            return

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self.stop)

    def _restore_signal_handlers(self) -> None:
        if sys.platform == "win32":
            return

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)

    def _signal_handler(self, signum: int, frame: Any) -> None:
        """Synchronous signal handler (Windows)."""
        logger.info(f"Received signal {signum}")
        self.stop()


__all__ = [
    "SIMULATED_BALANCE_SOL",
    "setup_logging",
    "IceProtocol",
]
