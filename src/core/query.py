"""
HQL (Harvest Query Language) parser.

Grammar (keywords are case-insensitive):

    <LIST|SUMMARY> <TODAY|WEEK|MONTH|PAST <n> DAYS|FROM <date> TO <date>>

A ``--static`` flag may appear anywhere in a query block; it is an
execution option and is stripped before parsing.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from core.config import STATIC_FLAG
from core.errors import ParseError
from core.time_range import format_iso_date, resolve_time_range


class ReportType(str, Enum):
    """Report shape selected by the first query token."""

    LIST = "LIST"
    SUMMARY = "SUMMARY"


@dataclass(frozen=True)
class HarvestQuery:
    """Parsed query: report type plus an inclusive date range."""

    type: ReportType
    from_date: date
    to_date: date

    def __post_init__(self):
        if self.from_date > self.to_date:
            raise ParseError(
                f"Start date {format_iso_date(self.from_date)} is after "
                f"end date {format_iso_date(self.to_date)}."
            )

    @property
    def from_iso(self) -> str:
        return format_iso_date(self.from_date)

    @property
    def to_iso(self) -> str:
        return format_iso_date(self.to_date)


def tokenize(source: str) -> list[str]:
    """Split on whitespace runs and uppercase every token."""
    return [token.upper() for token in source.split()]


def strip_static_flag(source: str) -> tuple[str, bool]:
    """
    Remove the ``--static`` flag from raw query text.

    Returns:
        Tuple of (source without the flag, whether the flag was present)
    """
    if STATIC_FLAG not in source:
        return source, False
    return source.replace(STATIC_FLAG, " ").strip(), True


def parse_query(source: str, today: date | None = None) -> HarvestQuery:
    """
    Parse HQL source text into a HarvestQuery.

    Args:
        source: Raw query text (without the ``--static`` flag).
        today: Anchor date for relative ranges. Uses the local date if None.

    Raises:
        ParseError: on empty input, too few tokens, an unknown report type,
            or any time range failure (InvalidRangeError/UnknownRangeError)
    """
    if not source or not source.strip():
        raise ParseError("Query is empty.")

    tokens = tokenize(source)
    if len(tokens) < 2:
        raise ParseError("Query is too short.")

    try:
        report_type = ReportType(tokens[0])
    except ValueError:
        raise ParseError(f"Invalid query type: {tokens[0]}. Must be LIST or SUMMARY.")

    from_date, to_date = resolve_time_range(tokens[1], tokens[2:], today)
    return HarvestQuery(type=report_type, from_date=from_date, to_date=to_date)
