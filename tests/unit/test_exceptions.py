"""Tests for the harplay exception hierarchy."""

import pytest

from harplay.exceptions import (
    EntryNotFoundError,
    HarplayError,
    InvalidURLError,
    MalformedJSONError,
    NetworkFailureError,
    ParseError,
    ParseErrorKind,
    ReplayError,
    ReplayErrorKind,
    ReplayTimeoutError,
    SchemaViolationError,
)


class TestHierarchy:
    """Every harplay error derives from HarplayError."""

    @pytest.mark.parametrize(
        "exc_class",
        [
            ParseError,
            MalformedJSONError,
            SchemaViolationError,
            EntryNotFoundError,
            ReplayError,
            InvalidURLError,
            NetworkFailureError,
            ReplayTimeoutError,
        ],
    )
    def test_is_harplay_error(self, exc_class: type) -> None:
        assert issubclass(exc_class, HarplayError)

    def test_parse_kinds(self) -> None:
        assert MalformedJSONError("x").kind is ParseErrorKind.MALFORMED_JSON
        assert SchemaViolationError("x").kind is ParseErrorKind.SCHEMA_VIOLATION

    def test_replay_kinds(self) -> None:
        assert InvalidURLError("x").kind is ReplayErrorKind.INVALID_URL
        assert NetworkFailureError("x").kind is ReplayErrorKind.NETWORK_FAILURE
        assert ReplayTimeoutError("x").kind is ReplayErrorKind.TIMEOUT


class TestEntryNotFoundError:
    def test_message(self) -> None:
        exc = EntryNotFoundError(9, 7)
        assert str(exc) == "No entry at index 9 (capture has 7 entries)"
        assert exc.index == 9
        assert exc.total == 7


class TestReplayError:
    def test_to_dict(self) -> None:
        exc = NetworkFailureError("Request failed: refused", url="http://127.0.0.1:1/")

        assert exc.to_dict() == {
            "error": "network_failure",
            "message": "Request failed: refused",
            "url": "http://127.0.0.1:1/",
        }
        assert str(exc) == "Request failed: refused"

    def test_url_defaults_empty(self) -> None:
        assert ReplayTimeoutError("slow").url == ""
