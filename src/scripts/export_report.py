#!/usr/bin/env python3
"""
Export an HQL report to an Excel workbook.

Usage:
    uv run python src/scripts/export_report.py "SUMMARY MONTH"
    uv run python src/scripts/export_report.py "LIST FROM 2025-11-01 TO 2025-11-30" --output nov.xlsx
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import OUTPUT_DIR
from core.errors import FetchError
from core.harvest_client import get_harvest_client
from core.query import parse_query, strip_static_flag
from services.export import save_report_workbook
from services.reports import aggregate
from services.session import HarvestSession


def default_output_path(query) -> Path:
    name = f"harvest_{query.type.value.lower()}_{query.from_iso}_{query.to_iso}.xlsx"
    return OUTPUT_DIR / "reports" / name


async def main(source: str, output: Path | None = None):
    """Main entry point."""
    query_text, _ = strip_static_flag(source)
    query = parse_query(query_text)
    print(f"Exporting {query.type.value} report for {query.from_iso} to {query.to_iso}")

    client = get_harvest_client()
    session = HarvestSession(client=client)
    try:
        entries = await session.fetch_entries(query.from_date, query.to_date)
    finally:
        await client.aclose()
    print(f"Found {len(entries)} time entries")

    view = aggregate(entries, query.type)
    return save_report_workbook(view, query, output or default_output_path(query))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Export an HQL report to Excel")
    parser.add_argument("query", help="HQL query, e.g. 'SUMMARY MONTH'")
    parser.add_argument("--output", type=Path, help="Output .xlsx path")
    args = parser.parse_args()

    try:
        asyncio.run(main(args.query, args.output))
    except (ValueError, FetchError) as e:
        print(f"\nError: {e}")
        sys.exit(1)
