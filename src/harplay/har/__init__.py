"""HAR (HTTP Archive) parsing and analysis.

Example usage:
    from harplay.har import parse_har_file, filter_entries, EntryFilter, summarize

    capture = parse_har_file("session.har")
    if capture.has_errors:
        print(f"Warning: {len(capture.errors)} entries were skipped")
    failing = filter_entries(capture.entries, EntryFilter(status_class="5xx"))
    summary = summarize(failing)
"""

from harplay.har.aggregate import (
    PhaseShare,
    Share,
    Summary,
    WaterfallBar,
    summarize,
    timing_breakdown,
    waterfall,
)
from harplay.har.content import NO_CONTENT, Classification, classify, classify_content
from harplay.har.export import dumps_export, export_filename, to_export_document
from harplay.har.index import (
    EntryFilter,
    StatusClass,
    distinct_methods,
    filter_entries,
    get_entry,
    status_class,
)
from harplay.har.model import (
    Capture,
    Content,
    Entry,
    EntryError,
    Header,
    PostData,
    Request,
    Response,
    Timings,
)
from harplay.har.parser import parse_har_file, parse_har_string

__all__ = [
    # Model
    "Capture",
    "Content",
    "Entry",
    "EntryError",
    "Header",
    "PostData",
    "Request",
    "Response",
    "Timings",
    # Parser
    "parse_har_file",
    "parse_har_string",
    # Content
    "NO_CONTENT",
    "Classification",
    "classify",
    "classify_content",
    # Index
    "EntryFilter",
    "StatusClass",
    "distinct_methods",
    "filter_entries",
    "get_entry",
    "status_class",
    # Aggregate
    "PhaseShare",
    "Share",
    "Summary",
    "WaterfallBar",
    "summarize",
    "timing_breakdown",
    "waterfall",
    # Export
    "dumps_export",
    "export_filename",
    "to_export_document",
]
