"""
Scripts - Simulate.

============================================================
RESPONSIBILITY
============================================================
Runs the full protocol loop for N epochs against mock
collaborators and a mock clock, then prints the summary.

============================================================
USAGE
============================================================
python -m scripts.simulate --epochs 24 --seed 7 --sleep 0
python -m scripts.simulate --reports-dir ./sim-reports --csv

EXIT CODES:
- 0: Simulation completed
- 1: Configuration invalid

============================================================
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import random
import sys
from typing import List, Optional

from core.exceptions import ConfigurationError
from orchestrator import IceProtocol, force_dry_run, load_protocol_config, setup_logging


logger = logging.getLogger("simulate")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run an ICE protocol simulation")
    parser.add_argument("--epochs", type=int, default=None, help="Number of epochs")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--sleep", type=float, default=0.0, help="Pause between epochs")
    parser.add_argument("--reports-dir", type=str, default=None, help="Report output directory")
    parser.add_argument("--csv", action="store_true", help="Print CSV export after the summary")
    parser.add_argument("--env-file", type=str, default=None, help="Path to .env file")
    parser.add_argument("--log-level", type=str.upper, default="INFO")
    return parser


async def run(args: argparse.Namespace) -> int:
    config = load_protocol_config(args.env_file)

    # Simulation never submits anything.
    config = force_dry_run(config)
    if args.reports_dir:
        config = config.with_overrides(
            reporting=dataclasses.replace(config.reporting, reports_dir=args.reports_dir),
        )

    rng = random.Random(args.seed)
    protocol = IceProtocol.create(config, simulation=True, rng=rng)

    try:
        epochs = args.epochs or config.simulation_duration_epochs
        summary = await protocol.simulate(epochs, sleep_seconds=args.sleep)
    finally:
        await protocol.close()

    print(json.dumps(summary.to_dict(), indent=2))
    print(json.dumps(protocol.get_state(), indent=2))

    if args.csv:
        print(protocol.report_generator.export_to_csv())

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        return asyncio.run(run(args))
    except ConfigurationError as e:
        logger.error(f"Configuration invalid: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
