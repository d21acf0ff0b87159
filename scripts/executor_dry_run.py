"""
Scripts - Executor Dry Run.

============================================================
RESPONSIBILITY
============================================================
Feeds one fee amount and one health value through a dry-run
executor and prints the resulting split. No RPC, no swaps.

============================================================
USAGE
============================================================
python -m scripts.executor_dry_run --fees 2.5 --health 25
python -m scripts.executor_dry_run --fees 2.5 --health 80 --mode fixed

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from allocation import AllocationConfig, AllocationMode, create_allocation_strategy
from core.clock import SystemClock
from executor import Executor, ExecutorConfig, ExecutorMode
from fee_sources import ConfirmationStatus, FeeEvent, FeeEventSource, FeeTracker
from ice_health import IceHealthEngine, IceHealthMetrics, IceHealthState
from ledger import StaticBalanceProvider
from orchestrator import setup_logging
from swap_engine import MockSwapEngine, SwapConfig


logger = logging.getLogger("executor_dry_run")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Dry-run one executor epoch")
    parser.add_argument("--fees", type=float, required=True, help="Collected fees in SOL")
    parser.add_argument("--health", type=float, required=True, help="Ice health 0-100")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in AllocationMode],
        default=AllocationMode.ADAPTIVE.value,
    )
    parser.add_argument("--balance", type=float, default=10.0, help="Bot wallet balance in SOL")
    parser.add_argument("--log-level", type=str.upper, default="INFO")
    return parser


def build_health_state(health: float, timestamp: int) -> IceHealthState:
    engine = IceHealthEngine()
    return IceHealthState(
        timestamp=timestamp,
        health=health,
        metrics=IceHealthMetrics(health, health, health, 0.0, health),
        status=engine.compute_status(health),
        last_action_time=timestamp,
        epoch_number=1,
    )


async def run(args: argparse.Namespace) -> int:
    clock = SystemClock()
    now = clock.unix_seconds()

    tracker = FeeTracker()
    tracker.record([FeeEvent(
        signature="dry-run",
        timestamp=now,
        amount_sol=args.fees,
        source=FeeEventSource.MOCK,
        confirmation_status=ConfirmationStatus.FINALIZED,
    )])

    executor = Executor(
        config=ExecutorConfig(mode=ExecutorMode.DRY_RUN),
        allocation_config=AllocationConfig(),
        allocation_strategy=create_allocation_strategy(args.mode),
        swap_engine=MockSwapEngine(),
        swap_config=SwapConfig(),
        balance_provider=StaticBalanceProvider(args.balance),
        fee_tracker=tracker,
        clock=clock,
    )

    allocation = await executor.execute_epoch(build_health_state(args.health, now))

    if allocation is None:
        outcome = executor.last_outcome
        print(json.dumps(outcome.to_dict() if outcome else {}, indent=2))
        return 1

    print(json.dumps(allocation.to_dict(), indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    setup_logging(level=args.log_level)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
