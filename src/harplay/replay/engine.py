"""Replay a captured request against its live origin.

Replay is a single-shot exploratory tool, not a resilient client:

- exactly one outbound request per call, no retries;
- no timeout of its own; the transport default applies unless
  ``HARPLAY_REPLAY_TIMEOUT`` overrides it;
- failures are raised as ``ReplayError`` subclasses and never swallowed;
- cancelling the awaiting task abandons the call safely.

Replaying performs a real network call against whatever host the URL
names, which may be a production system.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import httpx

from harplay.config import HarplaySettings, get_settings
from harplay.exceptions import InvalidURLError, NetworkFailureError, ReplayTimeoutError
from harplay.har.model import Header, PostData, Request
from harplay.logging import get_logger
from harplay.replay.edit import EditedRequest

LOG = get_logger(__name__)

REPLAYABLE_SCHEMES = ("http", "https")

# RFC 9110 token characters
_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

# Recomputed by the transport for the body actually sent
_DROPPED_HEADERS = frozenset({"content-length"})

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM = "multipart/form-data"


@dataclass(frozen=True)
class ReplayResult:
    """Normalized response of a replayed request."""

    status: int
    headers: tuple[Header, ...]
    body: str
    status_text: str = ""
    http_version: str = ""
    url: str = ""
    elapsed_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """JSON-able ``{status, statusText, headers, body}``."""
        return {
            "status": self.status,
            "statusText": self.status_text,
            "headers": [{"name": h.name, "value": h.value} for h in self.headers],
            "body": self.body,
        }


@dataclass(frozen=True)
class PreparedRequest:
    """A request normalized for the transport."""

    method: str
    url: httpx.URL
    headers: list[tuple[str, str]]
    content: bytes | None = None
    files: list[tuple[str, tuple[str | None, bytes, str | None]]] | None = None

    def encoded_headers(self) -> list[tuple[bytes, bytes]]:
        # captured values may hold non-ASCII text, which httpx will not encode itself
        return [(k.encode("ascii"), v.encode("utf-8")) for k, v in self.headers]


def _is_sendable_header(name: str) -> bool:
    if not name or name.startswith(":"):
        # HTTP/2 pseudo-headers (:authority, :path...) are not real headers
        return False
    if name.lower() in _DROPPED_HEADERS:
        return False
    return bool(_TOKEN.match(name))


def _without(headers: list[tuple[str, str]], name: str) -> list[tuple[str, str]]:
    lowered = name.lower()
    return [(k, v) for k, v in headers if k.lower() != lowered]


def _multipart_fields(post_data: PostData) -> list[tuple[str, tuple[str | None, bytes, str | None]]]:
    # Plain fields go in as parts without a filename so the body is
    # multipart even when nothing was uploaded.
    return [
        (p.name, (p.file_name, (p.value or "").encode("utf-8"), p.content_type))
        for p in post_data.params
    ]


def prepare_request(request: Request | EditedRequest) -> PreparedRequest:
    """Normalize a captured or edited request for sending.

    Args:
        request: Request to replay.

    Returns:
        PreparedRequest ready for the transport.

    Raises:
        InvalidURLError: If the URL does not parse or is not http(s).
        NetworkFailureError: If the method is not a valid HTTP token.
    """
    if isinstance(request, EditedRequest):
        request = request.to_request()

    method = request.method.strip() or "GET"
    if not _TOKEN.match(method):
        # httpcore refuses methods that are not ASCII tokens
        raise NetworkFailureError(
            f"Cannot send request: invalid method {method!r}", url=request.url.strip()
        )
    raw_url = request.url.strip()

    try:
        url = httpx.URL(raw_url)
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise InvalidURLError(f"Invalid URL: {exc}", url=raw_url) from exc
    if url.scheme not in REPLAYABLE_SCHEMES or not url.host:
        raise InvalidURLError(f"Cannot replay URL: {raw_url!r}", url=raw_url)

    headers: list[tuple[str, str]] = []
    for header in request.headers:
        name = header.name.strip()
        if _is_sendable_header(name):
            headers.append((name, header.value))
        elif name:
            LOG.debug("replay_header_dropped", header=name)

    post_data = request.post_data
    if post_data is not None and post_data.has_text:
        if post_data.mime_type:
            headers = _without(headers, "Content-Type")
            headers.append(("Content-Type", post_data.mime_type))
        return PreparedRequest(
            method=method,
            url=url,
            headers=headers,
            content=post_data.text.encode("utf-8"),  # type: ignore[union-attr]
        )

    if post_data is not None and post_data.params:
        headers = _without(headers, "Content-Type")
        uploads = any(p.file_name is not None for p in post_data.params)
        if post_data.mime_type.lower().startswith(MULTIPART_FORM) or uploads:
            # the transport writes its own boundary into Content-Type
            return PreparedRequest(
                method=method, url=url, headers=headers, files=_multipart_fields(post_data)
            )
        headers.append(("Content-Type", post_data.mime_type or FORM_URLENCODED))
        pairs = [(p.name, p.value or "") for p in post_data.params]
        return PreparedRequest(
            method=method, url=url, headers=headers, content=urlencode(pairs).encode("utf-8")
        )

    return PreparedRequest(method=method, url=url, headers=headers)


def _result_from(response: httpx.Response) -> ReplayResult:
    try:
        elapsed_ms = response.elapsed.total_seconds() * 1000
    except RuntimeError:
        elapsed_ms = 0.0
    return ReplayResult(
        status=response.status_code,
        status_text=response.reason_phrase,
        http_version=response.http_version,
        headers=tuple(Header(name=k, value=v) for k, v in response.headers.multi_items()),
        body=response.text,
        url=str(response.url),
        elapsed_ms=elapsed_ms,
    )


class Replayer:
    """Sends captured requests using one set of transport options.

    Each replay opens its own client unless one is supplied, so
    concurrent replays share no state.

    Args:
        settings: Settings to take transport options from.
        client: Optional caller-owned client to send through. It is not
            closed by the Replayer.
        transport: Optional httpx transport for clients the Replayer opens.
    """

    def __init__(
        self,
        settings: HarplaySettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = client
        self._transport = transport

    def _client_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "follow_redirects": self.settings.replay_follow_redirects,
            "verify": self.settings.replay_verify_tls,
        }
        if self.settings.replay_timeout is not None:
            options["timeout"] = httpx.Timeout(self.settings.replay_timeout)
        if self._transport is not None:
            options["transport"] = self._transport
        return options

    async def _send(self, client: httpx.AsyncClient, prepared: PreparedRequest) -> httpx.Response:
        return await client.request(
            prepared.method,
            prepared.url,
            headers=prepared.encoded_headers(),
            content=prepared.content,
            files=prepared.files,
        )

    async def replay(self, request: Request | EditedRequest) -> ReplayResult:
        """Replay a request and capture the full response.

        Args:
            request: Captured request, or the user's edited overlay of one.

        Returns:
            ReplayResult with status, headers and complete body text.

        Raises:
            InvalidURLError: If the URL is malformed or not http(s).
            ReplayTimeoutError: If the transport timed out.
            NetworkFailureError: If the target was unreachable or the
                exchange failed, or the method cannot be sent.
        """
        prepared = prepare_request(request)
        target = str(prepared.url)
        LOG.info("replay_started", method=prepared.method, url=target)

        try:
            if self._client is not None:
                response = await self._send(self._client, prepared)
            else:
                async with httpx.AsyncClient(**self._client_options()) as client:
                    response = await self._send(client, prepared)
        except httpx.TimeoutException as exc:
            LOG.warning("replay_timeout", url=target, error=str(exc))
            raise ReplayTimeoutError(f"Request timed out: {exc}", url=target) from exc
        except (httpx.UnsupportedProtocol, httpx.InvalidURL) as exc:
            raise InvalidURLError(f"Invalid URL: {exc}", url=target) from exc
        except httpx.HTTPError as exc:
            LOG.warning("replay_failed", url=target, error=str(exc))
            message = str(exc) or type(exc).__name__
            raise NetworkFailureError(f"Request failed: {message}", url=target) from exc

        result = _result_from(response)
        LOG.info(
            "replay_completed",
            url=target,
            status=result.status,
            body_length=len(result.body),
            elapsed_ms=result.elapsed_ms,
        )
        return result


async def replay(
    request: Request | EditedRequest,
    *,
    settings: HarplaySettings | None = None,
    client: httpx.AsyncClient | None = None,
) -> ReplayResult:
    """Replay a single request. See Replayer.replay."""
    return await Replayer(settings, client=client).replay(request)
