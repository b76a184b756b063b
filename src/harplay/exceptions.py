"""Custom exceptions for harplay package."""

from enum import StrEnum


class ParseErrorKind(StrEnum):
    """Why a capture could not be loaded."""

    MALFORMED_JSON = "malformed_json"
    SCHEMA_VIOLATION = "schema_violation"


class ReplayErrorKind(StrEnum):
    """Why a single replay attempt failed."""

    INVALID_URL = "invalid_url"
    NETWORK_FAILURE = "network_failure"
    TIMEOUT = "timeout"


class HarplayError(Exception):
    """Base exception class for all harplay errors."""


class ParseError(HarplayError):
    """Raised when a HAR capture cannot be loaded.

    Attributes:
        kind: Failure category, see ParseErrorKind.
    """

    kind: ParseErrorKind


class MalformedJSONError(ParseError):
    """Raised when capture text is not valid JSON."""

    kind = ParseErrorKind.MALFORMED_JSON


class SchemaViolationError(ParseError):
    """Raised when valid JSON lacks the ``log.entries`` array."""

    kind = ParseErrorKind.SCHEMA_VIOLATION


class EntryNotFoundError(HarplayError):
    """Raised when no entry exists at the requested capture index."""

    def __init__(self, index: int, total: int) -> None:
        self.index = index
        self.total = total
        super().__init__(f"No entry at index {index} (capture has {total} entries)")


class ReplayError(HarplayError):
    """Raised when replaying a request fails.

    Replay is single-shot: the error is surfaced to the caller as-is and
    nothing is retried.

    Attributes:
        kind: Failure category, see ReplayErrorKind.
        url: URL the replay targeted.
    """

    kind: ReplayErrorKind

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.url = url

    def to_dict(self) -> dict[str, str]:
        """Return a JSON-able description of the failure."""
        return {"error": self.kind.value, "message": self.message, "url": self.url}


class InvalidURLError(ReplayError):
    """Raised when the target URL is malformed or not http(s)."""

    kind = ReplayErrorKind.INVALID_URL


class NetworkFailureError(ReplayError):
    """Raised when the target cannot be reached or the exchange breaks."""

    kind = ReplayErrorKind.NETWORK_FAILURE


class ReplayTimeoutError(ReplayError):
    """Raised when the transport gives up waiting on the target."""

    kind = ReplayErrorKind.TIMEOUT
