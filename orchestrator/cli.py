"""
Orchestrator - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line interface for the ICE protocol.

- Provides argparse-based CLI
- Loads configuration from .env and environment
- Entry point for the application

============================================================
USAGE
============================================================
python -m orchestrator.cli run
python -m orchestrator.cli simulate --epochs 10
python -m orchestrator.cli dry-run
python -m orchestrator.cli health-check

============================================================
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import List, Optional

from core.exceptions import ConfigurationError
from executor.config import ExecutorMode

from .core import IceProtocol, setup_logging
from .models import LOG_LEVELS, LogFormat, ProtocolConfig, load_protocol_config


logger = logging.getLogger(__name__)


COMMANDS = ("run", "simulate", "dry-run", "health-check")


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ice-protocol",
        description="ICE protocol fee allocation bot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  run           - Run the epoch loop until interrupted
  simulate      - Run N epochs with simulated fee inflow
  dry-run       - Run a single epoch without submitting actions
  health-check  - Print current health and executor state

Examples:
  %(prog)s run
  %(prog)s simulate --epochs 10 --sleep 0
  %(prog)s --log-format json health-check
""",
    )

    # --------------------------------------------------------
    # Logging / Config Options
    # --------------------------------------------------------
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: LOG_LEVEL or INFO)",
    )

    parser.add_argument(
        "--log-format",
        type=str,
        choices=[f.value for f in LogFormat],
        default=None,
        help="Logging format (default: LOG_FORMAT or text)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        metavar="PATH",
        help="Also write logs to this file",
    )

    parser.add_argument(
        "--env-file",
        type=str,
        metavar="PATH",
        help="Path to .env file",
    )

    # --------------------------------------------------------
    # Commands
    # --------------------------------------------------------
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Run the epoch loop")

    simulate = subparsers.add_parser("simulate", help="Run simulated epochs")
    simulate.add_argument(
        "--epochs",
        type=int,
        default=None,
        help="Number of epochs (default: SIMULATION_DURATION_EPOCHS)",
    )
    simulate.add_argument(
        "--sleep",
        type=float,
        default=1.0,
        metavar="SECONDS",
        help="Pause between epochs (default: 1.0)",
    )

    subparsers.add_parser("dry-run", help="Run one epoch in dry-run mode")
    subparsers.add_parser("health-check", help="Print health and state")

    return parser


def validate_args(args: argparse.Namespace) -> List[str]:
    """Validate CLI arguments, return list of errors."""
    errors = []

    if args.command == "simulate":
        if args.epochs is not None and args.epochs < 1:
            errors.append("--epochs must be at least 1")
        if args.sleep < 0:
            errors.append("--sleep must not be negative")

    return errors


def force_dry_run(config: ProtocolConfig) -> ProtocolConfig:
    """Copy of config with the executor in dry-run mode."""
    return config.with_overrides(
        executor=dataclasses.replace(config.executor, mode=ExecutorMode.DRY_RUN),
    )


# ============================================================
# COMMANDS
# ============================================================

async def async_main(args: argparse.Namespace, config: ProtocolConfig) -> int:
    """
    Async main entry point.

    Returns:
        Exit code
    """
    simulation = args.command == "simulate"
    if args.command == "dry-run":
        config = force_dry_run(config)

    protocol = IceProtocol.create(config, simulation=simulation)

    try:
        if args.command == "run":
            await protocol.start()

        elif args.command == "simulate":
            epochs = args.epochs or config.simulation_duration_epochs
            summary = await protocol.simulate(epochs, sleep_seconds=args.sleep)
            print(json.dumps(summary.to_dict(), indent=2))

        elif args.command == "dry-run":
            report = await protocol.run_epoch()
            print(json.dumps(report.to_dict(), indent=2))

        elif args.command == "health-check":
            print(json.dumps(protocol.health_check(), indent=2))

        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1
    finally:
        await protocol.close()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    errors = validate_args(args)
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    try:
        config = load_protocol_config(args.env_file)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(
        level=args.log_level or config.log_level,
        log_format=args.log_format or config.log_format.value,
        log_file=args.log_file,
    )

    print_banner(args, config)

    return asyncio.run(async_main(args, config))


def print_banner(args: argparse.Namespace, config: ProtocolConfig) -> None:
    """Print startup banner."""
    mode = "dry-run" if args.command == "dry-run" else config.executor.mode.value

    print()
    print("=" * 60)
    print("  ICE PROTOCOL")
    print("=" * 60)
    print(f"  Command:    {args.command}")
    print(f"  Network:    {config.solana_network.value}")
    print(f"  Executor:   {mode}")
    print(f"  Allocation: {config.allocation_mode.value}")
    print(f"  Fee Source: {config.fee_source.source_type.value}")
    print(f"  Interval:   {config.executor.epoch_interval_seconds}s")
    print("=" * 60)
    print()


# ============================================================
# MODULE EXECUTION
# ============================================================

if __name__ == "__main__":
    sys.exit(main())
