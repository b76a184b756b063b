"""Builders for HAR documents used across unit tests."""

from __future__ import annotations

import json
from typing import Any

from harplay.har.model import Capture
from harplay.har.parser import parse_har_string


def make_entry_data(
    url: str = "https://example.com/",
    method: str = "GET",
    status: int = 200,
    time: Any = 10.0,
    mime_type: str = "text/html",
    size: int = 100,
    **extra: Any,
) -> dict[str, Any]:
    """Build the JSON form of a HAR entry with sensible defaults."""
    entry: dict[str, Any] = {
        "startedDateTime": "2024-01-15T10:00:00.000Z",
        "time": time,
        "request": {
            "method": method,
            "url": url,
            "httpVersion": "HTTP/1.1",
            "headers": [],
            "cookies": [],
            "queryString": [],
            "headersSize": -1,
            "bodySize": 0,
        },
        "response": {
            "status": status,
            "statusText": "",
            "httpVersion": "HTTP/1.1",
            "headers": [],
            "cookies": [],
            "content": {"size": size, "mimeType": mime_type},
            "redirectURL": "",
            "headersSize": -1,
            "bodySize": size,
        },
        "cache": {},
        "timings": {"send": 0, "wait": 0, "receive": 0},
    }
    entry.update(extra)
    return entry


def make_har(entries: list[dict[str, Any]]) -> str:
    """Wrap entry dicts into a HAR document string."""
    return json.dumps(
        {
            "log": {
                "version": "1.2",
                "creator": {"name": "test", "version": "1.0"},
                "entries": entries,
            }
        }
    )


def make_capture(*entries: dict[str, Any]) -> Capture:
    """Parse entry dicts into a Capture."""
    return parse_har_string(make_har(list(entries)))
