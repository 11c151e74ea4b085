#!/usr/bin/env python3
"""
Evaluate an HQL query against Harvest and print the report.

Usage:
    uv run python src/scripts/run_query.py "SUMMARY WEEK"
    uv run python src/scripts/run_query.py "LIST PAST 7 DAYS" --date 2025-11-07
"""

import argparse
import asyncio
import sys
from datetime import date, datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.harvest_client import get_harvest_client
from services.executor import execute
from services.rendering import to_text
from services.session import HarvestSession


def parse_as_of(date_str: str | None) -> date | None:
    """Parse the --date option (YYYY-MM-DD)."""
    if not date_str:
        return None
    return datetime.strptime(date_str, "%Y-%m-%d").date()


async def main(query: str, as_of_date_str: str | None = None) -> int:
    """Main entry point."""
    client = get_harvest_client()
    session = HarvestSession(client=client)
    try:
        result = await execute(
            query,
            session.fetch_entries,
            today=parse_as_of(as_of_date_str),
            on_loading=lambda tree: print(to_text(tree)),
        )
    finally:
        await client.aclose()

    if result.query is not None:
        print(f"Report for {result.query.from_iso} to {result.query.to_iso}\n")
    print(to_text(result.display))
    return 1 if result.failed else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run an HQL query and print the report")
    parser.add_argument("query", help="HQL query, e.g. 'SUMMARY MONTH'")
    parser.add_argument(
        "--date",
        help="Anchor date for relative ranges (YYYY-MM-DD). Defaults to today.",
    )
    args = parser.parse_args()

    try:
        sys.exit(asyncio.run(main(args.query, args.date)))
    except ValueError as e:
        print(f"\nError: {e}")
        sys.exit(1)
