"""Filtered and searchable views over capture entries.

Every function returns a new list and leaves the capture untouched.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import urlsplit

from harplay.exceptions import EntryNotFoundError
from harplay.har.model import Capture, Entry

# Filter value that lets every entry through
ALL = "all"


class StatusClass(StrEnum):
    """Hundreds-digit grouping of an HTTP status code."""

    SUCCESS = "2xx"
    REDIRECT = "3xx"
    CLIENT_ERROR = "4xx"
    SERVER_ERROR = "5xx"
    OTHER = "other"


_STATUS_BUCKETS = (
    (200, 300, StatusClass.SUCCESS),
    (300, 400, StatusClass.REDIRECT),
    (400, 500, StatusClass.CLIENT_ERROR),
    (500, 600, StatusClass.SERVER_ERROR),
)


def status_class(status: int) -> StatusClass:
    """Bucket a status code; anything outside 200-599 is OTHER."""
    for low, high, bucket in _STATUS_BUCKETS:
        if low <= status < high:
            return bucket
    return StatusClass.OTHER


@dataclass(frozen=True)
class EntryFilter:
    """Criteria for filter_entries. All criteria must match.

    Attributes:
        search_term: Case-insensitive substring of the URL or method.
        method: Exact request method, or "all".
        status_class: "2xx".."5xx", or "all".
    """

    search_term: str = ""
    method: str = ALL
    status_class: str = ALL

    def matches(self, entry: Entry) -> bool:
        if self.search_term:
            term = self.search_term.lower()
            if term not in entry.request.url.lower() and term not in entry.request.method.lower():
                return False

        if self.method != ALL and entry.request.method != self.method:
            return False

        if self.status_class != ALL:
            bucket = status_class(entry.response.status)
            # OTHER is not a selectable bucket; such statuses fail every filter
            if bucket is StatusClass.OTHER or bucket != self.status_class:
                return False

        return True


def filter_entries(entries: Iterable[Entry], criteria: EntryFilter | None = None) -> list[Entry]:
    """Return the entries matching criteria, in their original order.

    Args:
        entries: Entries to filter.
        criteria: Filter to apply; None keeps everything.

    Returns:
        New list of matching entries.
    """
    if criteria is None:
        return list(entries)
    return [entry for entry in entries if criteria.matches(entry)]


def distinct_methods(entries: Iterable[Entry]) -> list[str]:
    """Request methods present in entries, in first-seen order."""
    return list(dict.fromkeys(entry.request.method for entry in entries))


def get_entry(capture: Capture | Sequence[Entry], index: int) -> Entry:
    """Look up an entry by its capture-order index.

    Raises:
        EntryNotFoundError: If index is out of range.
    """
    entries = capture.entries if isinstance(capture, Capture) else capture
    if not 0 <= index < len(entries):
        raise EntryNotFoundError(index, len(entries))
    return entries[index]


def _split_absolute(url: str):
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return parts


def url_path(url: str) -> str:
    """Path component of url, or the raw url when it does not parse."""
    parts = _split_absolute(url)
    if parts is None:
        return url
    return parts.path or "/"


def url_host(url: str) -> str:
    """Host (with port) of url, or "unknown host" when it does not parse."""
    parts = _split_absolute(url)
    if parts is None:
        return "unknown host"
    return parts.netloc.rpartition("@")[2]
