"""
Exception taxonomy for HQL evaluation and the Harvest data source.

Parse and rewrite failures are ValueErrors so callers that only care about
"bad input" can catch them generically.
"""


class HQLError(ValueError):
    """Base class for query-language failures."""


class ParseError(HQLError):
    """Malformed HQL source (bad keyword, range, date literal, or too few tokens)."""


class InvalidRangeError(ParseError):
    """A time range expression that is recognized but malformed."""


class UnknownRangeError(InvalidRangeError):
    """A time range expression with an unrecognized leading keyword."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Unknown time range specifier: {token}")


class RewriteError(HQLError):
    """The static freeze could not write back into the document."""


class HarvestAPIError(Exception):
    """The Harvest API was unreachable or answered with an error."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class FetchError(HarvestAPIError):
    """Time entries for a query could not be fetched."""
