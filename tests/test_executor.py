"""Tests for HQL block execution."""

import asyncio
from datetime import date

import pytest

from core.config import FETCH_FAILED_MESSAGE, LOADING_MESSAGE, NO_ENTRIES_MESSAGE
from core.errors import FetchError
from services.documents import BlockLocation, VaultDocumentRewriter
from services.executor import ExecutionState, build_frozen_block, execute
from services.rendering import Paragraph, Table


class RecordingFetcher:
    """Entry fetcher double that records the requested ranges."""

    def __init__(self, entries=None, error: Exception | None = None):
        self.entries = entries or []
        self.error = error
        self.calls: list[tuple[date, date]] = []

    async def __call__(self, from_date: date, to_date: date):
        self.calls.append((from_date, to_date))
        if self.error is not None:
            raise self.error
        return list(self.entries)


def run(coro):
    return asyncio.run(coro)


def test_live_list_execution(today, sample_entries):
    fetcher = RecordingFetcher(sample_entries)
    result = run(execute("LIST PAST 7 DAYS", fetcher, today=today))

    assert result.state == ExecutionState.DONE
    assert not result.failed
    assert fetcher.calls == [(date(2025, 1, 9), today)]
    assert isinstance(result.display.children[0], Table)
    assert result.markup is None
    assert result.rewritten is False
    assert result.entry_count == 3
    assert result.total_hours == 6.5


def test_parse_failure_is_a_display_state():
    fetcher = RecordingFetcher()
    result = run(execute("LIST", fetcher))

    assert result.state == ExecutionState.PARSE_FAILED
    assert result.failed
    assert fetcher.calls == []
    (message,) = result.display.children
    assert message.text == "Error processing Harvest query: Query is too short."


def test_parse_failure_cites_bad_count():
    result = run(execute("LIST PAST x DAYS", RecordingFetcher()))
    assert result.state == ExecutionState.PARSE_FAILED
    assert "'X'" in result.display.children[0].text


def test_fetch_failure_is_a_display_state(today):
    fetcher = RecordingFetcher(error=FetchError("Harvest API Error: Unauthorized", 401))
    result = run(execute("SUMMARY WEEK", fetcher, today=today))

    assert result.state == ExecutionState.FETCH_FAILED
    assert result.query is not None
    assert result.display.children == (Paragraph(FETCH_FAILED_MESSAGE, css_class="harvest-error"),)


def test_no_entries_is_not_a_failure(today):
    result = run(execute("SUMMARY TODAY", RecordingFetcher([]), today=today))
    assert result.state == ExecutionState.DONE
    assert not result.failed
    assert result.display.children[0].text == NO_ENTRIES_MESSAGE


def test_other_errors_propagate(today):
    fetcher = RecordingFetcher(error=RuntimeError("boom"))
    with pytest.raises(RuntimeError):
        run(execute("LIST TODAY", fetcher, today=today))


@pytest.fixture
def vault(tmp_path):
    document = tmp_path / "notes" / "daily.md"
    document.parent.mkdir()
    document.write_text(
        "# Daily\n"
        "\n"
        "```harvest\n"
        "LIST FROM 2025-01-01 TO 2025-01-02 --static\n"
        "```\n"
        "\n"
        "Footer\n",
        encoding="utf-8",
    )
    return tmp_path


def test_static_execution_freezes_block(vault, sample_entries):
    rewriter = VaultDocumentRewriter(vault)
    block = BlockLocation("notes/daily.md", 2, 4)
    result = run(
        execute(
            "LIST FROM 2025-01-01 TO 2025-01-02 --static",
            RecordingFetcher(sample_entries),
            rewriter=rewriter,
            block=block,
        )
    )

    assert result.state == ExecutionState.DONE
    assert result.rewritten
    content = (vault / "notes" / "daily.md").read_text(encoding="utf-8")
    assert "```harvest" not in content
    assert "--static" not in content
    assert "<pre>LIST FROM 2025-01-01 TO 2025-01-02</pre>" in content
    assert result.markup in content
    assert content.startswith("# Daily\n\n<details")
    assert content.endswith("</div>\n\nFooter\n")


def test_static_without_location_fails_to_rewrite(sample_entries):
    result = run(
        execute("LIST FROM 2025-01-01 TO 2025-01-02 --static", RecordingFetcher(sample_entries))
    )
    assert result.state == ExecutionState.REWRITE_FAILED
    assert result.failed
    assert result.display.children[0].text.startswith("Failed to freeze Harvest report: ")
    assert result.markup is not None


def test_static_with_missing_document_fails_to_rewrite(vault, sample_entries):
    result = run(
        execute(
            "SUMMARY FROM 2025-01-01 TO 2025-01-02 --static",
            RecordingFetcher(sample_entries),
            rewriter=VaultDocumentRewriter(vault),
            block=BlockLocation("missing.md", 0, 2),
        )
    )
    assert result.state == ExecutionState.REWRITE_FAILED
    assert "not found" in result.display.children[0].text


def test_static_parse_failure_leaves_document_untouched(vault):
    document = vault / "notes" / "daily.md"
    before = document.read_text(encoding="utf-8")
    result = run(
        execute(
            "LIST NEVER --static",
            RecordingFetcher(),
            rewriter=VaultDocumentRewriter(vault),
            block=BlockLocation("notes/daily.md", 2, 4),
        )
    )
    assert result.state == ExecutionState.PARSE_FAILED
    assert document.read_text(encoding="utf-8") == before


def test_frozen_block_escapes_query_text():
    frozen = build_frozen_block("LIST <TODAY>", "<div></div>")
    assert "<pre>LIST &lt;TODAY&gt;</pre>" in frozen
    assert frozen.splitlines()[0] == '<details class="harvest-frozen-query">'
    assert frozen.endswith("<div></div>")


def test_concurrent_executions_are_independent(today, sample_entries):
    async def both():
        return await asyncio.gather(
            execute("LIST TODAY", RecordingFetcher(sample_entries), today=today),
            execute("SUMMARY TODAY", RecordingFetcher(sample_entries), today=today),
        )

    list_result, summary_result = run(both())
    assert isinstance(list_result.display.children[0], Table)
    assert summary_result.display.children[0].text == "Time Summary"


def test_loading_display_precedes_fetch(today, sample_entries):
    events = []

    class OrderedFetcher(RecordingFetcher):
        async def __call__(self, from_date, to_date):
            events.append("fetch")
            return await super().__call__(from_date, to_date)

    def on_loading(tree):
        events.append(tree.children[0].text)

    run(execute("LIST TODAY", OrderedFetcher(sample_entries), today=today, on_loading=on_loading))
    assert events == [LOADING_MESSAGE, "fetch"]


def test_no_loading_display_for_parse_failures():
    events = []
    run(execute("LIST", RecordingFetcher(), on_loading=events.append))
    assert events == []


def test_static_with_non_utf8_document_fails_to_rewrite(tmp_path, sample_entries):
    document = tmp_path / "latin1.md"
    original = b"caf\xe9\n```harvest\nLIST FROM 2025-01-01 TO 2025-01-02 --static\n```\n"
    document.write_bytes(original)

    result = run(
        execute(
            "LIST FROM 2025-01-01 TO 2025-01-02 --static",
            RecordingFetcher(sample_entries),
            rewriter=VaultDocumentRewriter(tmp_path),
            block=BlockLocation("latin1.md", 1, 3),
        )
    )

    assert result.state == ExecutionState.REWRITE_FAILED
    assert "not valid UTF-8" in result.display.children[0].text
    assert document.read_bytes() == original
