#!/usr/bin/env python3
"""
CLI entry point for offline health scoring.

Usage:
    # Score an aggregate export
    python -m health_engine.run aggregates.csv

    # Custom weights, save scored rows
    python -m health_engine.run aggregates.csv --config configs/health_scoring.yaml --output scored.csv

    # Only list customers at POOR or worse
    python -m health_engine.run aggregates.csv --at-risk POOR

    # Score generated sample data
    python -m health_engine.run --sample 200
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

from .config import load_config
from .scorer import HEALTH_LEVEL_ORDER, HealthScorer, generate_sample_aggregates

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Customer health scoring",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m health_engine.run aggregates.csv
  python -m health_engine.run aggregates.csv --output scored.csv
  python -m health_engine.run aggregates.csv --at-risk CRITICAL
  python -m health_engine.run --sample 200
        """,
    )

    parser.add_argument(
        "aggregates",
        nargs="?",
        help="Path to aggregate CSV (one row per customer)",
    )
    parser.add_argument(
        "--config",
        help="Path to YAML scoring config",
    )
    parser.add_argument(
        "--output",
        help="Write scored rows to this CSV",
    )
    parser.add_argument(
        "--at-risk",
        choices=HEALTH_LEVEL_ORDER,
        help="List customers at or below this health level",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Score N generated sample customers instead of a CSV",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.sample:
        df = generate_sample_aggregates(n_customers=args.sample)
    elif args.aggregates:
        path = Path(args.aggregates)
        if not path.exists():
            print(f"Aggregates not found: {args.aggregates}")
            return 1
        df = pd.read_csv(path)
    else:
        parser.print_help()
        return 1

    config = load_config(args.config)
    logger.info("Scoring %d customers with config %s", len(df), config.version)

    try:
        result = HealthScorer(config).score(df)
    except Exception as e:
        print(f"ERROR: {e}")
        return 1

    print(f"\n{'=' * 60}")
    print("HEALTH LEVELS")
    print("=" * 60)
    print(result.summary().to_string())

    print(f"\n{'=' * 60}")
    print("COMPONENTS")
    print("=" * 60)
    print(result.component_breakdown().to_string())

    if args.at_risk:
        at_risk = result.get_at_risk(args.at_risk).sort_values("HEALTH_SCORE")
        print(f"\nCustomers at or below {args.at_risk}: {len(at_risk)}")
        if not at_risk.empty:
            print(at_risk[["CUSTOMER_ID", "HEALTH_SCORE", "HEALTH_LEVEL"]].to_string(index=False))

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        result.df.to_csv(output, index=False)
        print(f"\nScored rows saved to: {output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
