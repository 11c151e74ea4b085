"""
HQL block execution: parse, fetch, aggregate, render, and optionally freeze.

Every failure ends in a display state for that one block; nothing here raises
to the host for parse, fetch, or rewrite failures.
"""

import html
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Awaitable, Callable, Protocol

from core.config import (
    FETCH_FAILED_MESSAGE,
    LOADING_MESSAGE,
    PARSE_ERROR_PREFIX,
    REWRITE_ERROR_PREFIX,
)
from core.errors import FetchError, ParseError, RewriteError
from core.query import HarvestQuery, parse_query, strip_static_flag
from models.harvest import TimeEntry
from services.documents import BlockLocation
from services.rendering import DisplayTree, message_tree, render, to_markup
from services.reports import aggregate

EntryFetcher = Callable[[date, date], Awaitable[list[TimeEntry]]]


class DocumentRewriter(Protocol):
    def replace_lines(
        self, document_id: str, line_start: int, line_end: int, new_text: str
    ) -> None: ...


class ExecutionState(str, Enum):
    RECEIVED = "received"
    PARSING = "parsing"
    PARSE_FAILED = "parse_failed"
    FETCHING = "fetching"
    FETCH_FAILED = "fetch_failed"
    AGGREGATING = "aggregating"
    RENDERING = "rendering"
    REWRITING = "rewriting"
    REWRITE_FAILED = "rewrite_failed"
    DONE = "done"


@dataclass
class ExecutionResult:
    """Outcome of one block execution."""

    state: ExecutionState
    display: DisplayTree
    query: HarvestQuery | None = None
    markup: str | None = None
    rewritten: bool = False
    entry_count: int = 0
    total_hours: float = 0.0

    @property
    def failed(self) -> bool:
        return self.state in (
            ExecutionState.PARSE_FAILED,
            ExecutionState.FETCH_FAILED,
            ExecutionState.REWRITE_FAILED,
        )


def build_frozen_block(query_text: str, markup: str) -> str:
    """
    Frozen rendering written back in place of a static block.

    The original query stays available in a collapsed fold above the report.
    """
    return "\n".join(
        [
            '<details class="harvest-frozen-query">',
            "<summary>Harvest query</summary>",
            f"<pre>{html.escape(query_text.strip())}</pre>",
            "</details>",
            markup,
        ]
    )


async def execute(
    source: str,
    fetch_entries: EntryFetcher,
    rewriter: DocumentRewriter | None = None,
    block: BlockLocation | None = None,
    today: date | None = None,
    on_loading: Callable[[DisplayTree], None] | None = None,
) -> ExecutionResult:
    """
    Execute one HQL block.

    Args:
        source: Raw block text, possibly containing ``--static``.
        fetch_entries: Async callable returning entries for (from_date, to_date);
            raises FetchError on failure.
        rewriter: Document rewriter, required for static blocks.
        block: Location of the invoking block, required for static blocks.
        today: Anchor date for relative ranges.
        on_loading: Called with the loading display just before the fetch.

    Returns:
        ExecutionResult whose display is always populated
    """
    query_text, is_static = strip_static_flag(source)

    try:
        query = parse_query(query_text, today=today)
    except ParseError as e:
        return ExecutionResult(
            state=ExecutionState.PARSE_FAILED,
            display=message_tree(f"{PARSE_ERROR_PREFIX}{e}", css_class="harvest-error"),
        )

    if on_loading is not None:
        on_loading(message_tree(LOADING_MESSAGE, css_class="harvest-loading"))

    try:
        entries = await fetch_entries(query.from_date, query.to_date)
    except FetchError as e:
        print(f"  Fetch failed for {query.from_iso}..{query.to_iso}: {e}")
        return ExecutionResult(
            state=ExecutionState.FETCH_FAILED,
            display=message_tree(FETCH_FAILED_MESSAGE, css_class="harvest-error"),
            query=query,
        )

    view = aggregate(entries, query.type)

    display = render(view)
    result = ExecutionResult(
        state=ExecutionState.RENDERING,
        display=display,
        query=query,
        entry_count=len(entries),
        total_hours=sum(entry.hours for entry in entries),
    )

    if not is_static:
        result.state = ExecutionState.DONE
        return result

    result.state = ExecutionState.REWRITING
    result.markup = to_markup(display)
    try:
        if rewriter is None or block is None:
            raise RewriteError("The block's document location is unknown.")
        rewriter.replace_lines(
            block.document_id,
            block.line_start,
            block.line_end,
            build_frozen_block(query_text, result.markup),
        )
    except RewriteError as e:
        result.state = ExecutionState.REWRITE_FAILED
        result.display = message_tree(f"{REWRITE_ERROR_PREFIX}{e}", css_class="harvest-error")
        return result

    result.state = ExecutionState.DONE
    result.rewritten = True
    return result
