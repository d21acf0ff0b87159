"""
Executor - Epoch Executor.

============================================================
PURPOSE
============================================================
Runs one epoch: safety guards, allocation, action
execution and settlement. Owns ExecutorState and is the only
component that zeroes the fee accumulator.

============================================================
GUARDS (evaluated in order, first failure aborts)
============================================================
1. Circuit breaker active     -> abort, not counted
2. Within min interval        -> abort, not counted
3. Balance below minimum      -> abort, counted failure
4. Fees below dust threshold  -> abort, not counted
5. Allocate via strategy
6. Live: execute actions / dry-run: skip submission
7. Settle: failures = 0, last execution = now, fees zeroed

Any exception inside the epoch is caught, logged and counted.
Nothing escapes execute_epoch().

============================================================
USAGE
============================================================
```python
executor = Executor(
    config=ExecutorConfig(mode=ExecutorMode.LIVE),
    allocation_config=AllocationConfig(),
    allocation_strategy=AdaptiveAllocationStrategy(),
    swap_engine=MockSwapEngine(),
    swap_config=SwapConfig(ice_token_mint="..."),
    balance_provider=StaticBalanceProvider(10.0),
    fee_tracker=FeeTracker(),
)

allocation = await executor.execute_epoch(health_state)
if allocation is None:
    print(executor.last_outcome.abort_reason)
```

============================================================
"""

import logging
from typing import Optional

from allocation.strategies import AllocationStrategy
from allocation.types import AllocationConfig, EpochAllocation
from core.clock import ClockProtocol, SystemClock
from fee_sources.types import FeeTracker
from ice_health.types import IceHealthState
from ledger.balance import BalanceProvider
from swap_engine.base import SwapEngine
from swap_engine.config import SwapConfig

from .actions import ActionRunner
from .config import ExecutorConfig
from .state_machine import EpochStateMachine
from .types import (
    AbortReason,
    EpochOutcome,
    EpochPhase,
    ExecutorSnapshot,
    ExecutorState,
)


logger = logging.getLogger(__name__)


class Executor:
    """
    Epoch executor with circuit breaker.

    Single writer of ExecutorState and of the fee
    accumulator's collected total. Epochs must be awaited
    sequentially; there is no internal locking.
    """

    def __init__(
        self,
        config: ExecutorConfig,
        allocation_config: AllocationConfig,
        allocation_strategy: AllocationStrategy,
        swap_engine: SwapEngine,
        swap_config: SwapConfig,
        balance_provider: BalanceProvider,
        fee_tracker: FeeTracker,
        clock: Optional[ClockProtocol] = None,
    ):
        self._config = config
        self._allocation_config = allocation_config
        self._strategy = allocation_strategy
        self._balance_provider = balance_provider
        self._fee_tracker = fee_tracker
        self._clock = clock or SystemClock()

        self._runner = ActionRunner(swap_engine, swap_config)
        self._state = ExecutorState()
        self._machine = EpochStateMachine()
        self._last_outcome: Optional[EpochOutcome] = None

    # ============================================================
    # PROPERTIES
    # ============================================================

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    @property
    def fee_tracker(self) -> FeeTracker:
        return self._fee_tracker

    @property
    def phase(self) -> EpochPhase:
        return self._machine.phase

    @property
    def state_machine(self) -> EpochStateMachine:
        return self._machine

    @property
    def last_outcome(self) -> Optional[EpochOutcome]:
        """Outcome of the most recent execute_epoch call."""
        return self._last_outcome

    # ============================================================
    # EPOCH
    # ============================================================

    async def execute_epoch(self, ice_health: IceHealthState) -> Optional[EpochAllocation]:
        """
        Execute one epoch.

        Returns:
            The epoch allocation, or None if the epoch aborted
        """
        self._state.epoch_number += 1
        epoch = self._state.epoch_number

        if self._state.circuit_breaker_active:
            logger.warning(f"Circuit breaker active, skipping epoch {epoch}")
            return self._abort(epoch, AbortReason.CIRCUIT_OPEN, EpochPhase.CIRCUIT_OPEN)

        phase_reached = EpochPhase.CHECKING_PRECONDITIONS

        try:
            self._transition(EpochPhase.CHECKING_PRECONDITIONS, epoch)

            now = self._clock.unix_seconds()
            elapsed = now - self._state.last_execution_time
            if elapsed < self._config.min_interval_seconds:
                logger.debug(
                    f"Skipping epoch {epoch} due to min interval "
                    f"({elapsed}s < {self._config.min_interval_seconds}s)"
                )
                return self._abort(epoch, AbortReason.RATE_LIMITED, phase_reached)

            balance = await self._check_balance()
            if balance < self._config.min_balance_to_operate_sol:
                logger.error(
                    f"Bot balance too low: {balance:.6f} SOL < "
                    f"{self._config.min_balance_to_operate_sol} SOL"
                )
                self._record_failure()
                return self._abort(epoch, AbortReason.LOW_BALANCE, phase_reached)

            fees_to_process = self._fee_tracker.total_fees_collected
            if fees_to_process < self._config.dust_threshold_sol:
                logger.debug(f"Insufficient fees to process: {fees_to_process:.6f} SOL")
                return self._abort(epoch, AbortReason.INSUFFICIENT_FEES, phase_reached)

            phase_reached = EpochPhase.ALLOCATING
            self._transition(phase_reached, epoch)
            allocation = self._strategy.allocate(
                fees_to_process,
                ice_health,
                self._allocation_config,
            )

            phase_reached = EpochPhase.EXECUTING
            self._transition(phase_reached, epoch)
            if self._config.is_live:
                allocation.actions = await self._runner.run(allocation)
            else:
                logger.info(
                    f"Dry-run mode: skipping actual execution | "
                    f"allocations={allocation.allocations.to_dict()}"
                )

            phase_reached = EpochPhase.SETTLED
            self._transition(phase_reached, epoch)
            self._settle(now)

        except Exception as e:
            logger.error(f"Error executing epoch {epoch}: {e}", exc_info=True)
            self._record_failure()
            return self._abort(epoch, AbortReason.ERROR, phase_reached, error=str(e))

        logger.info(
            f"Epoch executed successfully | epoch={epoch} "
            f"fees_processed={fees_to_process:.6f} SOL "
            f"ice_health={ice_health.display_health}"
        )

        self._last_outcome = EpochOutcome(
            epoch_number=epoch,
            phase_reached=EpochPhase.SETTLED,
            fees_processed_sol=fees_to_process,
            allocation=allocation,
        )
        self._transition(EpochPhase.IDLE, epoch, "settled")

        return allocation

    # ============================================================
    # CONTROL
    # ============================================================

    def reset_circuit_breaker(self) -> None:
        """Manual intervention: clear the breaker and the failure counter."""
        self._state.circuit_breaker_active = False
        self._state.consecutive_failures = 0
        self._machine.reset()
        logger.info("Circuit breaker reset")

    def get_state(self) -> ExecutorSnapshot:
        """Read-only snapshot of executor state."""
        return ExecutorSnapshot(
            last_execution_time=self._state.last_execution_time,
            consecutive_failures=self._state.consecutive_failures,
            epoch_number=self._state.epoch_number,
            circuit_breaker_active=self._state.circuit_breaker_active,
            phase=self._machine.phase,
            mode=self._config.mode.value,
            max_budget_per_epoch_sol=self._config.max_budget_per_epoch_sol,
            drift_tolerance_bps=self._config.drift_tolerance_bps,
        )

    # ============================================================
    # INTERNALS
    # ============================================================

    async def _check_balance(self) -> float:
        """Bot balance in SOL; a failed query reads as 0."""
        try:
            return await self._balance_provider.get_balance_sol()
        except Exception as e:
            logger.error(f"Error checking bot balance: {e}")
            return 0.0

    def _settle(self, now: int) -> None:
        self._state.last_execution_time = now
        self._state.consecutive_failures = 0
        self._fee_tracker.reset_collected()

    def _record_failure(self) -> None:
        self._state.consecutive_failures += 1

        if self._state.consecutive_failures >= self._config.max_consecutive_failures:
            if not self._state.circuit_breaker_active:
                logger.critical(
                    f"Circuit breaker activated due to consecutive failures: "
                    f"{self._state.consecutive_failures}"
                )
            self._state.circuit_breaker_active = True

    def _transition(self, target: EpochPhase, epoch: int, reason: str = "") -> None:
        self._machine.transition_to(target, epoch, reason)

    def _abort(
        self,
        epoch: int,
        reason: AbortReason,
        phase_reached: EpochPhase,
        error: Optional[str] = None,
    ) -> None:
        """Record the outcome and return the machine to IDLE or CIRCUIT_OPEN."""
        self._last_outcome = EpochOutcome(
            epoch_number=epoch,
            phase_reached=phase_reached,
            abort_reason=reason,
            error=error,
        )

        if self._machine.phase == EpochPhase.CIRCUIT_OPEN:
            return None

        if self._state.circuit_breaker_active:
            self._transition(EpochPhase.CIRCUIT_OPEN, epoch, reason.value)
        elif self._machine.phase != EpochPhase.IDLE:
            self._transition(EpochPhase.IDLE, epoch, reason.value)

        return None


__all__ = ["Executor"]
