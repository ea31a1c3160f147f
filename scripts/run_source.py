#!/usr/bin/env python3
"""
Script to run a source outside the host and summarize what it yields.

Reads the connection options from a JSON file (the same format as
sources/{source_name}/configs/dev_config.json), then either probes the
connection or pulls every batch and prints one line per batch.

Usage:
    python scripts/run_source.py <source_name> --config <path>
    python scripts/run_source.py stripe --config sources/stripe/configs/dev_config.json
    python scripts/run_source.py stripe --config dev_config.json --test-connection
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from libs.logging_config import setup_logging
from libs.source_loader import get_source_module


def run_source(source_name: str, options: Dict[str, Any]) -> int:
    """Pull every batch of a source and print a summary line for each."""
    source = get_source_module(source_name)

    total_rows = 0
    batch_count = 0
    for batch in source.process_source(options):
        print(
            f"{batch['name']}: {batch['expectedRowCount']} rows, "
            f"{len(batch['columnTypes'])} columns"
        )
        total_rows += batch["expectedRowCount"]
        batch_count += 1

    print(f"Total: {batch_count} batches, {total_rows} rows")
    return 0


def check_connection(source_name: str, options: Dict[str, Any]) -> int:
    source = get_source_module(source_name)
    if source.test_connection(options):
        print("Connection OK")
        return 0
    print("Connection FAILED")
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the script."""
    parser = argparse.ArgumentParser(
        description="Run a source and summarize the batches it yields.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pull all Stripe tables and print row counts
  python scripts/run_source.py stripe --config sources/stripe/configs/dev_config.json

  # Only check that the API key works
  python scripts/run_source.py stripe --config dev_config.json --test-connection
        """,
    )

    parser.add_argument("source_name", help="Name of the source to run (e.g., stripe)")

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        required=True,
        help="JSON file with the connection options",
    )

    parser.add_argument(
        "--test-connection",
        action="store_true",
        help="Only check the connection instead of pulling data",
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log at DEBUG level"
    )

    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "INFO")

    try:
        with open(args.config, "r") as f:
            options = json.load(f)
        if args.test_connection:
            return check_connection(args.source_name, options)
        return run_source(args.source_name, options)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
