"""
Scripts - Health Check.

============================================================
RESPONSIBILITY
============================================================
Scores a set of 24h measurements with the configured weights
and prints the health summary and advisory time to threshold.

============================================================
USAGE
============================================================
python -m scripts.health_check --buybacks 3 --volume 5 --sell-pressure 2 \\
    --liquidity 60 --volatility 10 --hours-since-buyback 2

EXIT CODES:
- 0: Health at or above threshold
- 2: Health below threshold

============================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

from core.clock import SystemClock
from ice_health import HealthMetricsInput, IceHealthEngine, format_health_summary
from orchestrator import ProtocolConfig, setup_logging


logger = logging.getLogger("health_check")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Score ice health")
    parser.add_argument("--buybacks", type=int, default=0)
    parser.add_argument("--volume", type=float, default=0.0)
    parser.add_argument("--sell-pressure", type=float, default=0.0)
    parser.add_argument("--liquidity", type=float, default=0.0)
    parser.add_argument("--volatility", type=float, default=0.0)
    parser.add_argument("--hours-since-buyback", type=float, default=0.0)
    parser.add_argument("--log-level", type=str.upper, default="WARNING")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    setup_logging(level=args.log_level)

    clock = SystemClock()
    now = clock.unix_seconds()
    config = ProtocolConfig.from_env()

    engine = IceHealthEngine(config.health, clock)
    state = engine.compute_health(
        HealthMetricsInput(
            buyback_count_last_24h=args.buybacks,
            buyback_volume_sol_last_24h=args.volume,
            recent_sell_pressure_sol=args.sell_pressure,
            current_liquidity=args.liquidity,
            volatility_percent_24h=args.volatility,
            last_buyback_timestamp_seconds=now - int(args.hours_since_buyback * 3600),
            current_timestamp_seconds=now,
        ),
        epoch_number=0,
    )

    print(format_health_summary(state))
    print(f"Minutes to threshold: {engine.estimate_time_to_threshold(state)}")

    return 0 if engine.is_alive(state) else 2


if __name__ == "__main__":
    sys.exit(main())
