#!/usr/bin/env python3
"""
Freeze every static HQL block in a vault document.

Blocks whose query carries ``--static`` are evaluated once and replaced by
their rendered report. Blocks are processed bottom-up so earlier line
numbers stay valid while later blocks are rewritten.

Usage:
    uv run python src/scripts/freeze_document.py journal/2025-11.md
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import STATIC_FLAG, VAULT_DIR
from core.errors import RewriteError
from core.harvest_client import get_harvest_client
from services.documents import BlockLocation, VaultDocumentRewriter, find_query_blocks
from services.executor import execute
from services.rendering import to_text
from services.session import HarvestSession


async def freeze_document(document_id: str, session: HarvestSession, rewriter: VaultDocumentRewriter) -> int:
    """
    Freeze static blocks in one document.

    Returns:
        Number of blocks that failed to freeze
    """
    blocks = [b for b in find_query_blocks(rewriter.read(document_id)) if STATIC_FLAG in b.source]
    print(f"Found {len(blocks)} static block(s) in {document_id}")

    failures = 0
    for block in reversed(blocks):
        location = BlockLocation(document_id, block.line_start, block.line_end)
        result = await execute(block.source, session.fetch_entries, rewriter=rewriter, block=location)
        if result.rewritten:
            print(f"  Froze lines {block.line_start}-{block.line_end}")
        else:
            failures += 1
            print(f"  Lines {block.line_start}-{block.line_end}: {to_text(result.display)}")
    return failures


async def main(document_id: str, vault_dir: Path) -> int:
    """Main entry point."""
    client = get_harvest_client()
    session = HarvestSession(client=client)
    try:
        failures = await freeze_document(document_id, session, VaultDocumentRewriter(vault_dir))
    finally:
        await client.aclose()
    return 1 if failures else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Freeze static HQL blocks in a vault document")
    parser.add_argument("document", help="Document path relative to the vault")
    parser.add_argument("--vault", type=Path, default=VAULT_DIR, help="Vault directory")
    args = parser.parse_args()

    try:
        sys.exit(asyncio.run(main(args.document, args.vault)))
    except RewriteError as e:
        print(f"\nError: {e}")
        sys.exit(1)
