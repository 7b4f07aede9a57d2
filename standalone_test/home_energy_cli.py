#!/usr/bin/env python3
"""
Command line runner for the Home Energy simulator.

Generates a simulated series without Home Assistant and prints it as a
table, together with the energy flows of the latest sample and the
self-test results.
"""

import argparse
import json
import logging
import random
import sys
from datetime import datetime
from pathlib import Path
from typing import List

# Import helper to format samples as table
sys.path.insert(0, str(Path(__file__).parent.parent / "custom_components" / "home_energy"))
from debug_utils import format_kw, format_kwh, format_series_table

from home_energy import HomeEnergySimulator, SimulationSession

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_arguments(argv: List[str] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Run the Home Energy simulator from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One seeded hour ending now
  python home_energy_cli.py

  # Reproducible evening run with 3 extra hours
  python home_energy_cli.py --seed 42 --start-time 2025-06-08T17:00:00 --steps 180

  # Show flows and colored output
  python home_energy_cli.py --flows --color

  # Save the series as JSON lines
  python home_energy_cli.py --output-json series.jsonl
        """
    )

    parser.add_argument(
        "--steps", type=int, default=0,
        help="Simulated minutes to run after the seeded hour. Default: 0"
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for reproducible runs. Default: unseeded"
    )
    parser.add_argument(
        "--start-time", type=str, default=None,
        help="Time of the last seeded sample in ISO format (YYYY-MM-DDTHH:MM:SS). Default: now"
    )
    parser.add_argument(
        "--last", type=int, default=20,
        help="Number of most recent samples to print. Default: 20"
    )
    parser.add_argument(
        "--flows", action="store_true",
        help="Print the energy flows of the latest sample"
    )
    parser.add_argument(
        "--color", action="store_true",
        help="Use ANSI colors in the table"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--output-json", type=str, default=None,
        help="Save the full series to a JSON lines file"
    )

    return parser.parse_args(argv)


def parse_start_time(time_str: str) -> int:
    """Parse the start time into epoch milliseconds."""
    try:
        if time_str:
            return int(datetime.fromisoformat(time_str).timestamp() * 1000)
        return int(datetime.now().timestamp() * 1000)
    except ValueError as e:
        logger.error(f"Invalid time format: {e}")
        sys.exit(1)


def main(argv: List[str] = None) -> int:
    """Main function."""
    args = parse_arguments(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.steps < 0:
        logger.error("Steps must be non-negative")
        return 1
    if args.last < 1:
        logger.error("Last must be at least 1")
        return 1

    simulator = HomeEnergySimulator()
    if args.verbose:
        logger.debug(f"Battery: {simulator.battery.get_config()}")
        logger.debug(f"EV battery: {simulator.ev.battery.get_config()}")

    session = SimulationSession(
        simulator=simulator,
        rng=random.Random(args.seed),
    )
    session.start(now_ms=parse_start_time(args.start_time))
    for _ in range(args.steps):
        session.tick()

    snapshot = session.snapshot()
    series = snapshot["series"]
    flows = snapshot["flows"] if args.flows else None

    print(format_series_table(series[-args.last:], flows, include_color=args.color))

    point = snapshot["point"]
    print(f"\nSamples in series: {len(series)}")
    print(f"Grid: {format_kw(point['grid'])}, "
          f"imported {format_kwh(point['gridImportEnergy'])}, "
          f"exported {format_kwh(point['gridExportEnergy'])}")

    print("\nSelf test:")
    for result in snapshot["self_test"]:
        status = "PASS" if result["pass"] else "FAIL"
        print(f"  [{status}] {result['name']}: {result['message']}")

    if args.output_json:
        try:
            with open(args.output_json, "w", encoding="utf-8") as f:
                for record in series:
                    f.write(json.dumps(record) + "\n")
            logger.info(f"Series saved to {args.output_json}")
        except OSError as e:
            logger.error(f"Failed to save series: {e}")
            return 1

    return 0 if all(result["pass"] for result in snapshot["self_test"]) else 1


if __name__ == "__main__":
    sys.exit(main())
