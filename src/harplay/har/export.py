"""Portable JSON projection of a single entry.

The export document is a strict subset of the HAR entry: request,
response, timings, server address and timing totals. Cookies and cache
metadata are left out.
"""

from __future__ import annotations

import json
import re
import time
from typing import Any
from urllib.parse import urlsplit

from harplay.har.model import Entry, Header, PostData, Timings

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def _pairs(headers: tuple[Header, ...]) -> list[dict[str, str]]:
    return [{"name": h.name, "value": h.value} for h in headers]


def _post_data(post_data: PostData) -> dict[str, Any]:
    doc: dict[str, Any] = {"mimeType": post_data.mime_type}
    if post_data.text is not None:
        doc["text"] = post_data.text
    if post_data.params:
        params = []
        for p in post_data.params:
            param: dict[str, Any] = {"name": p.name}
            if p.value is not None:
                param["value"] = p.value
            if p.file_name is not None:
                param["fileName"] = p.file_name
            if p.content_type is not None:
                param["contentType"] = p.content_type
            params.append(param)
        doc["params"] = params
    return doc


def _timings(timings: Timings) -> dict[str, float]:
    return dict(timings.phases())


def to_export_document(entry: Entry) -> dict[str, Any]:
    """Project an entry into its export document.

    Args:
        entry: Entry to export.

    Returns:
        JSON-able dict using HAR field names.
    """
    request = entry.request
    response = entry.response

    request_doc: dict[str, Any] = {
        "method": request.method,
        "url": request.url,
        "httpVersion": request.http_version,
        "headers": _pairs(request.headers),
        "queryString": _pairs(request.query_string),
    }
    if request.post_data is not None:
        request_doc["postData"] = _post_data(request.post_data)

    content: dict[str, Any] = {
        "size": response.content.size,
        "mimeType": response.content.mime_type,
    }
    if response.content.text is not None:
        content["text"] = response.content.text
    if response.content.encoding is not None:
        content["encoding"] = response.content.encoding

    document: dict[str, Any] = {
        "request": request_doc,
        "response": {
            "status": response.status,
            "statusText": response.status_text,
            "httpVersion": response.http_version,
            "headers": _pairs(response.headers),
            "content": content,
        },
        "timings": _timings(entry.timings),
    }
    if entry.server_ip_address:
        document["serverIPAddress"] = entry.server_ip_address
    document["startedDateTime"] = entry.started_date_time
    document["time"] = entry.time
    return document


def dumps_export(entry: Entry) -> str:
    """Serialize the export document with 2-space indentation."""
    return json.dumps(to_export_document(entry), indent=2, ensure_ascii=False)


def _sanitize(value: str) -> str:
    return _NON_ALNUM.sub("_", value)


def export_filename(entry: Entry, *, now: float | None = None) -> str:
    """Suggested filename for an exported entry.

    ``{method}_{host}{path}.json`` with every non-alphanumeric character
    replaced by ``_``. When the URL has no host the name falls back to
    ``request_{milliseconds since epoch}.json``.

    Args:
        entry: Entry being exported.
        now: Fallback timestamp in seconds (defaults to the current time).
    """
    try:
        parts = urlsplit(entry.request.url)
    except ValueError:
        parts = None

    if parts is None or not parts.scheme or not parts.netloc:
        stamp = int((time.time() if now is None else now) * 1000)
        return f"request_{stamp}.json"

    host = parts.netloc.rpartition("@")[2]
    method = _sanitize(entry.request.method)
    return f"{method}_{_sanitize(host)}{_sanitize(parts.path)}.json"
