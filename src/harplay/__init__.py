"""harplay - inspect, summarize and replay HAR captures.

This package provides:
- A read-only model of HAR (HTTP Archive) captures and a tolerant parser
- Filtering, summary statistics and content classification over entries
- Replay of captured (optionally edited) requests against their live origin
- Export of single entries as portable JSON documents

Example:
    >>> import asyncio
    >>> from harplay import parse_har_file, summarize, replay
    >>> capture = parse_har_file("session.har")
    >>> summarize(capture.entries).method_distribution
    >>> result = asyncio.run(replay(capture.entries[0].request))
    >>> result.status
"""

from harplay.config import HarplaySettings, get_settings
from harplay.exceptions import (
    EntryNotFoundError,
    HarplayError,
    InvalidURLError,
    MalformedJSONError,
    NetworkFailureError,
    ParseError,
    ReplayError,
    ReplayTimeoutError,
    SchemaViolationError,
)
from harplay.har import (
    Capture,
    Classification,
    Entry,
    EntryFilter,
    Request,
    Response,
    StatusClass,
    Summary,
    classify,
    filter_entries,
    parse_har_file,
    parse_har_string,
    summarize,
    to_export_document,
)
from harplay.replay import EditedRequest, Replayer, ReplayResult, parse_header_block, replay
from harplay.session import CaptureSession

__version__ = "0.3.0"

__all__ = [
    # Version
    "__version__",
    # Model and parsing
    "Capture",
    "Entry",
    "Request",
    "Response",
    "parse_har_file",
    "parse_har_string",
    # Analysis
    "Classification",
    "classify",
    "EntryFilter",
    "StatusClass",
    "filter_entries",
    "Summary",
    "summarize",
    "to_export_document",
    # Replay
    "EditedRequest",
    "Replayer",
    "ReplayResult",
    "parse_header_block",
    "replay",
    "CaptureSession",
    # Configuration
    "HarplaySettings",
    "get_settings",
    # Exceptions
    "HarplayError",
    "ParseError",
    "MalformedJSONError",
    "SchemaViolationError",
    "EntryNotFoundError",
    "ReplayError",
    "InvalidURLError",
    "NetworkFailureError",
    "ReplayTimeoutError",
]
