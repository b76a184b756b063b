"""Summary statistics over capture entries.

Computes totals, timing extremes and grouped distributions for display.
Nothing here raises for a structurally valid capture: missing sizes and
times count as zero and an empty entry list yields an all-zero Summary.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from harplay.har.index import StatusClass, status_class
from harplay.har.model import Entry
from harplay.logging import get_logger

LOG = get_logger(__name__)

DEFAULT_TOP_CONTENT_TYPES = 5

# Display order of status buckets in a summary
STATUS_CLASS_ORDER = (
    StatusClass.SUCCESS,
    StatusClass.REDIRECT,
    StatusClass.CLIENT_ERROR,
    StatusClass.SERVER_ERROR,
    StatusClass.OTHER,
)

UNKNOWN_CONTENT_TYPE = "unknown"


@dataclass(frozen=True)
class Share:
    """A count and its percentage of the total."""

    count: int
    percentage: float

    def __str__(self) -> str:
        return f"{self.count} ({self.percentage:.1f}%)"


@dataclass(frozen=True)
class Summary:
    """Aggregate view of a set of entries."""

    total_count: int = 0
    total_body_bytes: int = 0
    average_time: float = 0.0
    slowest: Entry | None = None
    fastest: Entry | None = None
    method_distribution: dict[str, Share] = field(default_factory=dict)
    status_class_distribution: dict[StatusClass, Share] = field(default_factory=dict)
    content_type_distribution: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-able form of the summary."""

        def _ref(entry: Entry | None) -> dict[str, Any] | None:
            if entry is None:
                return None
            return {
                "index": entry.index,
                "method": entry.request.method,
                "url": entry.request.url,
                "time": entry.time,
            }

        return {
            "totalCount": self.total_count,
            "totalBodyBytes": self.total_body_bytes,
            "averageTime": self.average_time,
            "slowest": _ref(self.slowest),
            "fastest": _ref(self.fastest),
            "methodDistribution": {
                method: {"count": s.count, "percentage": s.percentage}
                for method, s in self.method_distribution.items()
            },
            "statusClassDistribution": {
                str(bucket): {"count": s.count, "percentage": s.percentage}
                for bucket, s in self.status_class_distribution.items()
            },
            "contentTypeDistribution": dict(self.content_type_distribution),
        }


@dataclass(frozen=True)
class WaterfallBar:
    """An entry's total time relative to the slowest entry."""

    index: int
    time: float
    fraction: float


@dataclass(frozen=True)
class PhaseShare:
    """One timing phase relative to the entry's total time."""

    name: str
    duration: float
    fraction: float


def _percentage(count: int, total: int) -> float:
    return count * 100.0 / total if total else 0.0


def content_subtype(mime_type: str) -> str:
    """Primary MIME subtype: ``application/json; charset=utf-8`` -> ``json``."""
    essence = mime_type.split(";", 1)[0].strip().lower()
    if not essence:
        return UNKNOWN_CONTENT_TYPE
    _, slash, subtype = essence.partition("/")
    if not slash:
        return essence
    return subtype.strip() or UNKNOWN_CONTENT_TYPE


def _extreme(entries: list[Entry], *, slowest: bool) -> Entry | None:
    """First entry with the maximal (or minimal) time, in capture order."""
    best: Entry | None = None
    for entry in entries:
        if best is None:
            best = entry
        elif slowest and entry.time > best.time:
            best = entry
        elif not slowest and entry.time < best.time:
            best = entry
    return best


def _top_content_types(entries: list[Entry], limit: int) -> dict[str, int]:
    # Counter keeps first-seen order and sorted() is stable, so ties keep it too
    counts = Counter(content_subtype(e.response.content.mime_type) for e in entries)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return dict(ranked[:limit])


def summarize(
    entries: Iterable[Entry],
    *,
    top_content_types: int = DEFAULT_TOP_CONTENT_TYPES,
) -> Summary:
    """Compute summary statistics for entries.

    Args:
        entries: Entries to summarize, in capture order.
        top_content_types: Number of content types to keep.

    Returns:
        Summary. An empty input gives zero totals and empty distributions.
    """
    items = list(entries)
    total = len(items)
    if total == 0:
        return Summary()

    total_time = sum(e.time for e in items)
    total_body_bytes = sum(max(e.response.content.size, 0) for e in items)

    method_counts = Counter(e.request.method for e in items)
    method_distribution = {
        method: Share(count=count, percentage=_percentage(count, total))
        for method, count in method_counts.items()
    }

    bucket_counts = Counter(status_class(e.response.status) for e in items)
    status_class_distribution = {
        bucket: Share(count=bucket_counts[bucket], percentage=_percentage(bucket_counts[bucket], total))
        for bucket in STATUS_CLASS_ORDER
        if bucket_counts[bucket] > 0
    }

    summary = Summary(
        total_count=total,
        total_body_bytes=total_body_bytes,
        average_time=total_time / total,
        slowest=_extreme(items, slowest=True),
        fastest=_extreme(items, slowest=False),
        method_distribution=method_distribution,
        status_class_distribution=status_class_distribution,
        content_type_distribution=_top_content_types(items, top_content_types),
    )
    LOG.debug(
        "entries_summarized",
        total=total,
        methods=len(method_distribution),
        average_time=summary.average_time,
    )
    return summary


def max_time(entries: Iterable[Entry]) -> float:
    """Largest total time among entries, 0.0 when there are none."""
    return max((e.time for e in entries), default=0.0)


def waterfall(entries: Iterable[Entry]) -> list[WaterfallBar]:
    """Scale every entry's time against the slowest entry.

    Returns:
        One bar per entry, in input order; fraction is in [0, 1].
    """
    items = list(entries)
    longest = max_time(items)
    return [
        WaterfallBar(
            index=e.index,
            time=e.time,
            fraction=e.time / longest if e.time and longest else 0.0,
        )
        for e in items
    ]


def timing_breakdown(entry: Entry) -> list[PhaseShare]:
    """Each timing phase as a share of the entry's total time.

    Fractions are not clamped: producers that overlap phases can report a
    phase longer than the total.
    """
    return [
        PhaseShare(
            name=name,
            duration=duration,
            fraction=duration / entry.time if duration and entry.time else 0.0,
        )
        for name, duration in entry.timings.phases()
    ]
