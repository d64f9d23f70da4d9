#!/usr/bin/env python3
"""Run repeated liquidity cycles against a fresh default pool.

Usage:
    python scripts/simulate_cycles.py --amount 1000 --cycles 5

    # Different curve and external market
    python scripts/simulate_cycles.py --amp 25 --external-rate 1.12 -v
"""

import argparse
import logging
import sys
from dataclasses import replace
from decimal import Decimal

import structlog

from stablepool import DEFAULT_POOL_CONFIG, AmplificationConfig, StableswapCore
from stablepool.math import UNIT, to_decimal
from stablepool.pricing import usd_value
from stablepool.simulation import run_liquidity_cycles

logger = structlog.get_logger()

DEPLOYER = "deployer"


def main() -> int:
    parser = argparse.ArgumentParser(description="Simulate add/withdraw liquidity cycles")
    parser.add_argument(
        "--amount",
        type=int,
        default=1_000,
        help="Starting X position in whole tokens (default: 1000)",
    )
    parser.add_argument(
        "--cycles",
        type=int,
        default=5,
        help="Number of cycles (default: 5)",
    )
    parser.add_argument(
        "--amp",
        type=int,
        default=DEFAULT_POOL_CONFIG.amplification.coefficient,
        help="Amplification coefficient",
    )
    parser.add_argument(
        "--external-rate",
        type=Decimal,
        default=Decimal("1.1"),
        help="X per Y on the external market (default: 1.1)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    if args.amount <= 0 or args.cycles <= 0:
        print("Error: --amount and --cycles must be positive")
        return 1

    config = replace(
        DEFAULT_POOL_CONFIG,
        amplification=AmplificationConfig(
            coefficient=args.amp,
            convergence_threshold=DEFAULT_POOL_CONFIG.amplification.convergence_threshold,
        ),
    )
    core = StableswapCore(DEPLOYER)
    pool = core.create_pool(DEPLOYER, "simulation", config)

    report = run_liquidity_cycles(
        pool, args.amount * UNIT, args.cycles, external_rate=args.external_rate
    )

    print("=" * 60)
    print("Liquidity Cycle Simulation")
    print("=" * 60)
    for result in report.cycles:
        print(
            f"Cycle {result.cycle}: deposit {to_decimal(result.deposited_x)} X -> "
            f"{to_decimal(result.withdrawn_x)} X + {to_decimal(result.withdrawn_y)} Y "
            f"(${usd_value(result.withdrawn_x, result.withdrawn_y):.2f}) -> "
            f"{to_decimal(result.ending_x)} X"
        )
    print()
    print(f"Initial position: {to_decimal(report.initial_x)} X")
    print(f"Final position:   {to_decimal(report.final_x)} X")
    print(f"Total volume:     {to_decimal(report.total_volume)} X")
    print(f"Profit:           {report.profit_fraction * 100:.4f}%")
    return 0


if __name__ == "__main__":
    sys.exit(main())
