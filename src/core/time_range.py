"""
Time range resolution for HQL.

Turns the range part of a query (``TODAY``, ``WEEK``, ``MONTH``,
``PAST <n> DAYS``, ``FROM <date> TO <date>``) into an inclusive pair of
calendar dates in the local calendar.
"""

import calendar
import re
from datetime import date, datetime, timedelta

from core.errors import InvalidRangeError, UnknownRangeError

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def format_iso_date(d: date) -> str:
    """Format date as zero-padded YYYY-MM-DD."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_iso_date(value: str) -> date:
    """
    Parse a strict YYYY-MM-DD literal.

    Raises:
        InvalidRangeError: if the literal is not a real calendar date
    """
    if not _ISO_DATE.fullmatch(value):
        raise InvalidRangeError(f"Invalid date '{value}'. Use YYYY-MM-DD.")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidRangeError(f"Invalid date '{value}'. Use YYYY-MM-DD.")


def _expect_no_trailing(args: list[str], used: int):
    if len(args) > used:
        extra = " ".join(args[used:])
        raise InvalidRangeError(f"Unexpected tokens after time range: {extra}")


def week_range(today: date) -> tuple[date, date]:
    """Monday..Sunday of the week containing today."""
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6)


def month_range(today: date) -> tuple[date, date]:
    """First..last calendar day of today's month."""
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def past_days_range(args: list[str], today: date) -> tuple[date, date]:
    """Resolve ``PAST <n> DAYS``; args are the tokens after ``PAST``."""
    if not args or not args[0].isdecimal():
        count = args[0] if args else ""
        raise InvalidRangeError(
            f"Invalid day count '{count}'. Use 'PAST <number> DAYS'."
        )
    count = int(args[0])
    if count < 1:
        raise InvalidRangeError(
            f"Invalid day count '{args[0]}'. The number of days must be at least 1."
        )
    if len(args) < 2 or args[1] != "DAYS":
        raise InvalidRangeError("Invalid PAST format. Use 'PAST <number> DAYS'.")
    _expect_no_trailing(args, 2)
    return today - timedelta(days=count - 1), today


def explicit_range(args: list[str]) -> tuple[date, date]:
    """Resolve ``FROM <date> TO <date>``; args are the tokens after ``FROM``."""
    if len(args) < 3 or args[1] != "TO":
        raise InvalidRangeError("Invalid FROM...TO format. Use 'FROM YYYY-MM-DD TO YYYY-MM-DD'.")
    _expect_no_trailing(args, 3)
    from_date = parse_iso_date(args[0])
    to_date = parse_iso_date(args[2])
    if from_date > to_date:
        raise InvalidRangeError(
            f"Start date {format_iso_date(from_date)} is after end date {format_iso_date(to_date)}."
        )
    return from_date, to_date


def resolve_time_range(
    keyword: str, args: list[str] | None = None, today: date | None = None
) -> tuple[date, date]:
    """
    Resolve a time range expression to an inclusive (from, to) date pair.

    Args:
        keyword: Leading range token, already uppercased (e.g. "PAST").
        args: Remaining uppercased tokens of the range expression.
        today: Anchor date for relative ranges. Uses the local date if None.

    Returns:
        Tuple of (from_date, to_date) with from_date <= to_date

    Raises:
        UnknownRangeError: if the keyword is not a known range form
        InvalidRangeError: if a known range form is malformed
    """
    args = list(args or [])
    if today is None:
        today = date.today()

    if keyword == "TODAY":
        _expect_no_trailing(args, 0)
        return today, today
    if keyword == "WEEK":
        _expect_no_trailing(args, 0)
        return week_range(today)
    if keyword == "MONTH":
        _expect_no_trailing(args, 0)
        return month_range(today)
    if keyword == "PAST":
        return past_days_range(args, today)
    if keyword == "FROM":
        return explicit_range(args)

    raise UnknownRangeError(keyword)
