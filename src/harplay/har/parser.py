"""HAR file parser.

Parses HAR (HTTP Archive) documents into the read-only model in
``harplay.har.model``.

Only the top-level shape is enforced (``log.entries`` must be an array).
Below that the parser is tolerant: HAR producers disagree on which fields
they emit and how they type them, so a wrongly typed or missing field
falls back to a neutral default instead of failing the whole capture.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from harplay.exceptions import MalformedJSONError, SchemaViolationError
from harplay.har.model import (
    Browser,
    Cache,
    CacheState,
    Capture,
    Content,
    Creator,
    Entry,
    EntryError,
    Header,
    Page,
    PostData,
    PostParam,
    Request,
    Response,
    Timings,
)
from harplay.logging import get_logger

LOG = get_logger(__name__)


def _as_str(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _as_optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value == value and abs(value) != float("inf"):
        return int(value)
    return default


def _as_float(value: Any, default: float = 0.0) -> float:
    """Coerce a numeric HAR field to float, treating anything else as default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        result = float(value)
        # json.loads accepts NaN and Infinity literals
        if result != result or abs(result) == float("inf"):
            return default
        return result
    return default


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _parse_pairs(items: Any) -> tuple[Header, ...]:
    """Convert a HAR ``[{name, value}]`` array to Header tuples.

    Order and duplicate names are preserved. Items that are not objects are
    dropped.

    Args:
        items: headers, cookies or queryString array from HAR.

    Returns:
        Tuple of Header records.
    """
    return tuple(
        Header(name=_as_str(item.get("name")), value=_as_str(item.get("value")))
        for item in _as_list(items)
        if isinstance(item, dict)
    )


def _parse_post_data(data: Any) -> PostData | None:
    if isinstance(data, str):
        # Some exporters flatten postData to its text
        return PostData(text=data)
    if not isinstance(data, dict):
        return None

    params = tuple(
        PostParam(
            name=_as_str(p.get("name")),
            value=_as_optional_str(p.get("value")),
            file_name=_as_optional_str(p.get("fileName")),
            content_type=_as_optional_str(p.get("contentType")),
        )
        for p in _as_list(data.get("params"))
        if isinstance(p, dict)
    )
    return PostData(
        mime_type=_as_str(data.get("mimeType")),
        text=_as_optional_str(data.get("text")),
        params=params,
    )


def _parse_request(data: dict[str, Any]) -> Request:
    """Parse request section of HAR entry.

    Args:
        data: Request dict from HAR entry.

    Returns:
        Parsed Request object.
    """
    return Request(
        method=_as_str(data.get("method"), "GET"),
        url=_as_str(data.get("url")),
        http_version=_as_str(data.get("httpVersion")),
        headers=_parse_pairs(data.get("headers")),
        cookies=_parse_pairs(data.get("cookies")),
        query_string=_parse_pairs(data.get("queryString")),
        post_data=_parse_post_data(data.get("postData")),
        headers_size=_as_int(data.get("headersSize"), -1),
        body_size=_as_int(data.get("bodySize"), -1),
    )


def _parse_content(data: dict[str, Any]) -> Content:
    return Content(
        size=_as_int(data.get("size")),
        mime_type=_as_str(data.get("mimeType")),
        text=_as_optional_str(data.get("text")),
        encoding=_as_optional_str(data.get("encoding")),
    )


def _parse_response(data: dict[str, Any]) -> Response:
    """Parse response section of HAR entry.

    Args:
        data: Response dict from HAR entry.

    Returns:
        Parsed Response object.
    """
    return Response(
        status=_as_int(data.get("status")),
        status_text=_as_str(data.get("statusText")),
        http_version=_as_str(data.get("httpVersion")),
        headers=_parse_pairs(data.get("headers")),
        cookies=_parse_pairs(data.get("cookies")),
        content=_parse_content(_as_dict(data.get("content"))),
        redirect_url=_as_str(data.get("redirectURL")),
        headers_size=_as_int(data.get("headersSize"), -1),
        body_size=_as_int(data.get("bodySize"), -1),
    )


def _parse_timings(data: dict[str, Any]) -> Timings:
    # HAR uses -1 for phases that do not apply to the request
    return Timings(
        blocked=max(_as_float(data.get("blocked")), 0.0),
        dns=max(_as_float(data.get("dns")), 0.0),
        connect=max(_as_float(data.get("connect")), 0.0),
        ssl=max(_as_float(data.get("ssl")), 0.0),
        send=max(_as_float(data.get("send")), 0.0),
        wait=max(_as_float(data.get("wait")), 0.0),
        receive=max(_as_float(data.get("receive")), 0.0),
    )


def _parse_cache_state(data: Any) -> CacheState | None:
    if not isinstance(data, dict):
        return None
    return CacheState(
        expires=_as_optional_str(data.get("expires")),
        last_access=_as_str(data.get("lastAccess")),
        etag=_as_str(data.get("eTag")),
        hit_count=_as_int(data.get("hitCount")),
    )


def _parse_cache(data: dict[str, Any]) -> Cache:
    return Cache(
        before_request=_parse_cache_state(data.get("beforeRequest")),
        after_request=_parse_cache_state(data.get("afterRequest")),
    )


def _parse_entry(index: int, data: dict[str, Any]) -> Entry:
    return Entry(
        index=index,
        started_date_time=_as_str(data.get("startedDateTime")),
        time=max(_as_float(data.get("time")), 0.0),
        request=_parse_request(_as_dict(data.get("request"))),
        response=_parse_response(_as_dict(data.get("response"))),
        timings=_parse_timings(_as_dict(data.get("timings"))),
        cache=_parse_cache(_as_dict(data.get("cache"))),
        server_ip_address=_as_optional_str(data.get("serverIPAddress")),
        connection=_as_optional_str(data.get("connection")),
    )


def validate_har_schema(data: Any) -> None:
    """Validate HAR data has required structure.

    Args:
        data: Parsed JSON data from HAR file.

    Raises:
        SchemaViolationError: If required fields are missing.
    """
    if not isinstance(data, dict):
        raise SchemaViolationError("HAR file must contain a JSON object")

    if "log" not in data:
        raise SchemaViolationError("HAR file must contain 'log' object")

    log = data["log"]
    if not isinstance(log, dict):
        raise SchemaViolationError("'log' must be an object")

    if "entries" not in log:
        raise SchemaViolationError("HAR log must contain 'entries' array")

    if not isinstance(log["entries"], list):
        raise SchemaViolationError("'entries' must be an array")


def _build_capture(data: dict[str, Any]) -> Capture:
    """Build a Capture from validated HAR data.

    Entries that are not JSON objects are skipped and reported in
    ``Capture.errors``; every other entry is kept, however messy.
    Skipped entries do not consume an index, so ``Entry.index`` always
    matches the entry's position in ``Capture.entries``.
    """
    log = data["log"]
    entries: list[Entry] = []
    errors: list[EntryError] = []

    for raw_index, entry_data in enumerate(log["entries"]):
        if not isinstance(entry_data, dict):
            error = f"entry must be an object, got {type(entry_data).__name__}"
            errors.append(EntryError(index=raw_index, url="unknown", error=error))
            LOG.warning("entry_skipped", entry_index=raw_index, error=error)
            continue
        entries.append(_parse_entry(len(entries), entry_data))

    creator = _as_dict(log.get("creator"))
    browser = log.get("browser")
    pages = tuple(
        Page(
            id=_as_str(p.get("id")),
            title=_as_str(p.get("title")),
            started_date_time=_as_str(p.get("startedDateTime")),
        )
        for p in _as_list(log.get("pages"))
        if isinstance(p, dict)
    )

    return Capture(
        version=_as_str(log.get("version")),
        creator=Creator(name=_as_str(creator.get("name")), version=_as_str(creator.get("version"))),
        browser=(
            Browser(name=_as_str(browser.get("name")), version=_as_str(browser.get("version")))
            if isinstance(browser, dict)
            else None
        ),
        pages=pages,
        entries=tuple(entries),
        errors=tuple(errors),
    )


def parse_har_string(content: str) -> Capture:
    """Parse HAR content from a string.

    Args:
        content: HAR document text.

    Returns:
        Parsed Capture.

    Raises:
        MalformedJSONError: If content is not valid JSON.
        SchemaViolationError: If the document lacks the ``log.entries`` array.
    """
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, TypeError) as exc:
        raise MalformedJSONError(f"Invalid JSON in HAR content: {exc}") from exc
    except RecursionError as exc:
        raise MalformedJSONError("Invalid JSON in HAR content: nesting too deep") from exc

    validate_har_schema(data)
    capture = _build_capture(data)

    LOG.info(
        "har_parsed",
        entries=len(capture.entries),
        errors=len(capture.errors),
        creator=capture.creator.name,
    )
    return capture


def parse_har_file(filepath: Path | str) -> Capture:
    """Parse a HAR file from disk.

    Args:
        filepath: Path to HAR file.

    Returns:
        Parsed Capture.

    Raises:
        MalformedJSONError: If the file is not valid JSON.
        SchemaViolationError: If the document lacks the ``log.entries`` array.
        FileNotFoundError: If file does not exist.
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"HAR file not found: {filepath}")

    # utf-8-sig: browser exports on Windows sometimes carry a BOM
    content = filepath.read_text(encoding="utf-8-sig", errors="replace")
    LOG.debug("har_file_read", filepath=str(filepath), size=len(content))
    return parse_har_string(content)
