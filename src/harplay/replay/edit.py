"""Editable overlay for a captured request.

An EditedRequest is created when the user starts editing an entry and is
thrown away when they pick another one. It never writes back into the
capture: ``to_request()`` builds a fresh Request.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from harplay.har.model import Header, PostData, Request

# mime type given to a body typed into a request that had none
DEFAULT_BODY_MIME_TYPE = "application/json"


def parse_header_block(text: str) -> list[Header]:
    """Turn ``Name: value`` lines into headers.

    Best-effort by design of the text field it serves: each non-empty line
    is split on its first colon and both halves trimmed. A line without a
    colon becomes a header with an empty value. Blank lines are skipped.

    Args:
        text: Raw header text, one header per line.

    Returns:
        Headers in line order.
    """
    headers: list[Header] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        name, _, value = line.partition(":")
        headers.append(Header(name=name.strip(), value=value.strip()))
    return headers


def format_header_block(headers: Iterable[Header]) -> str:
    """Render headers as ``Name: value`` lines."""
    return "\n".join(f"{h.name}: {h.value}" for h in headers)


@dataclass
class EditedRequest:
    """Mutable copy of a Request's replayable fields."""

    method: str
    url: str
    headers: list[Header] = field(default_factory=list)
    post_data: PostData | None = None
    http_version: str = ""
    query_string: list[Header] = field(default_factory=list)

    @classmethod
    def from_request(cls, request: Request) -> EditedRequest:
        return cls(
            method=request.method,
            url=request.url,
            headers=list(request.headers),
            post_data=request.post_data,
            http_version=request.http_version,
            query_string=list(request.query_string),
        )

    @property
    def headers_text(self) -> str:
        return format_header_block(self.headers)

    def set_headers_text(self, text: str) -> None:
        """Replace the headers with those parsed from a text block."""
        self.headers = parse_header_block(text)

    @property
    def body_text(self) -> str:
        if self.post_data is None or self.post_data.text is None:
            return ""
        return self.post_data.text

    def set_body_text(self, text: str) -> None:
        """Replace the body text, keeping the declared MIME type."""
        if self.post_data is None:
            self.post_data = PostData(mime_type=DEFAULT_BODY_MIME_TYPE, text=text)
        else:
            self.post_data = replace(self.post_data, text=text)

    def to_request(self) -> Request:
        """Build an immutable Request from the current edits."""
        return Request(
            method=self.method,
            url=self.url,
            http_version=self.http_version,
            headers=tuple(self.headers),
            query_string=tuple(self.query_string),
            post_data=self.post_data,
        )
