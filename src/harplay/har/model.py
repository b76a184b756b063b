"""Typed, read-only representation of a parsed HAR capture.

HAR format specification: http://www.softwareishard.com/blog/har-12-spec/

Every type here is a frozen dataclass and every sequence a tuple, so a
parsed Capture can be shared between the index, the aggregator and the
replay engine without anyone mutating it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from harplay.logging import get_logger

LOG = get_logger(__name__)

TIMING_PHASES = ("blocked", "dns", "connect", "ssl", "send", "wait", "receive")


@dataclass(frozen=True)
class Header:
    """A name/value pair (headers, cookies and query parameters)."""

    name: str
    value: str = ""


@dataclass(frozen=True)
class PostParam:
    """One posted parameter of a form or multipart body."""

    name: str
    value: str | None = None
    file_name: str | None = None
    content_type: str | None = None


@dataclass(frozen=True)
class PostData:
    """Request body as recorded in the capture."""

    mime_type: str = ""
    text: str | None = None
    params: tuple[PostParam, ...] = ()

    @property
    def has_text(self) -> bool:
        """Return True if the body carries non-empty text."""
        return bool(self.text)


@dataclass(frozen=True)
class Request:
    """Captured HTTP request.

    The URL is kept as an opaque string: captures routinely contain URLs
    that do not parse, and nothing here requires them to.
    """

    method: str
    url: str
    http_version: str = ""
    headers: tuple[Header, ...] = ()
    cookies: tuple[Header, ...] = ()
    query_string: tuple[Header, ...] = ()
    post_data: PostData | None = None
    headers_size: int = -1
    body_size: int = -1

    def header(self, name: str) -> str | None:
        """Return the first header value matching name (case-insensitive)."""
        lowered = name.lower()
        for h in self.headers:
            if h.name.lower() == lowered:
                return h.value
        return None


@dataclass(frozen=True)
class Content:
    """Response body details."""

    size: int = 0
    mime_type: str = ""
    text: str | None = None
    encoding: str | None = None


@dataclass(frozen=True)
class Response:
    """Captured HTTP response."""

    status: int
    status_text: str = ""
    http_version: str = ""
    headers: tuple[Header, ...] = ()
    cookies: tuple[Header, ...] = ()
    content: Content = field(default_factory=Content)
    redirect_url: str = ""
    headers_size: int = -1
    body_size: int = -1


@dataclass(frozen=True)
class Timings:
    """Per-phase durations in milliseconds.

    Phases are independent measurements. Some producers overlap them, so
    their sum is not guaranteed to equal the entry's total time.
    """

    blocked: float = 0.0
    dns: float = 0.0
    connect: float = 0.0
    ssl: float = 0.0
    send: float = 0.0
    wait: float = 0.0
    receive: float = 0.0

    def phases(self) -> list[tuple[str, float]]:
        """Return (name, duration) pairs in waterfall order."""
        return [(name, getattr(self, name)) for name in TIMING_PHASES]


@dataclass(frozen=True)
class CacheState:
    """Cache entry state before or after the request."""

    expires: str | None = None
    last_access: str = ""
    etag: str = ""
    hit_count: int = 0


@dataclass(frozen=True)
class Cache:
    """Browser cache metadata for an entry."""

    before_request: CacheState | None = None
    after_request: CacheState | None = None


@dataclass(frozen=True)
class Entry:
    """Single request/response pair.

    Attributes:
        index: Position in the capture; the stable key used for selection.
        started_date_time: Start timestamp exactly as recorded.
        time: Total elapsed milliseconds, 0.0 when absent.
    """

    index: int
    started_date_time: str
    time: float
    request: Request
    response: Response
    timings: Timings = field(default_factory=Timings)
    cache: Cache = field(default_factory=Cache)
    server_ip_address: str | None = None
    connection: str | None = None

    @property
    def timestamp(self) -> datetime:
        """Start time as a datetime (epoch when the timestamp is unparseable)."""
        return parse_timestamp(self.started_date_time)


@dataclass(frozen=True)
class Creator:
    """Application that produced the capture."""

    name: str = ""
    version: str = ""


@dataclass(frozen=True)
class Browser:
    """Browser that recorded the capture."""

    name: str = ""
    version: str = ""


@dataclass(frozen=True)
class Page:
    """Page record from the capture's optional ``pages`` list."""

    id: str = ""
    title: str = ""
    started_date_time: str = ""


@dataclass(frozen=True)
class EntryError:
    """An entry that was skipped while parsing.

    Attributes:
        index: Zero-based index of the entry in the HAR file's entries array.
        url: URL of the request, or "unknown" if unavailable.
        error: Human-readable description of the problem.
    """

    index: int
    url: str
    error: str


@dataclass(frozen=True)
class Capture:
    """Root of a parsed HAR document.

    Entries keep capture (chronological) order.
    """

    version: str = ""
    creator: Creator = field(default_factory=Creator)
    browser: Browser | None = None
    pages: tuple[Page, ...] = ()
    entries: tuple[Entry, ...] = ()
    errors: tuple[EntryError, ...] = ()

    @property
    def has_errors(self) -> bool:
        """Return True if any entries were skipped."""
        return bool(self.errors)

    def __len__(self) -> int:
        return len(self.entries)


def parse_timestamp(started: str) -> datetime:
    """Parse an ISO 8601 HAR timestamp.

    Args:
        started: ISO 8601 timestamp string.

    Returns:
        Parsed datetime, or the epoch when the value cannot be parsed.
    """
    # Examples: "2023-01-15T10:30:00.000Z", "2023-01-15T10:30:00+00:00"
    try:
        if started.endswith("Z"):
            return datetime.fromisoformat(started.replace("Z", "+00:00"))
        return datetime.fromisoformat(started)
    except (ValueError, AttributeError):
        LOG.debug("timestamp_parse_failed", timestamp=started)
        return datetime.fromtimestamp(0, tz=UTC)
