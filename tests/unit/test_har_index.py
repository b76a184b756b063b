"""Tests for entry filtering and lookup."""

from __future__ import annotations

import pytest
from har_builders import make_capture, make_entry_data

from harplay.exceptions import EntryNotFoundError
from harplay.har.index import (
    ALL,
    EntryFilter,
    StatusClass,
    distinct_methods,
    filter_entries,
    get_entry,
    status_class,
    url_host,
    url_path,
)
from harplay.har.model import Capture, Entry


class TestStatusClass:
    """Tests for status_class()."""

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (199, StatusClass.OTHER),
            (200, StatusClass.SUCCESS),
            (299, StatusClass.SUCCESS),
            (300, StatusClass.REDIRECT),
            (399, StatusClass.REDIRECT),
            (400, StatusClass.CLIENT_ERROR),
            (499, StatusClass.CLIENT_ERROR),
            (500, StatusClass.SERVER_ERROR),
            (599, StatusClass.SERVER_ERROR),
            (600, StatusClass.OTHER),
            (0, StatusClass.OTHER),
        ],
    )
    def test_boundaries(self, status: int, expected: StatusClass) -> None:
        assert status_class(status) is expected

    def test_values_are_filter_strings(self) -> None:
        assert StatusClass.SUCCESS == "2xx"
        assert StatusClass.SERVER_ERROR == "5xx"


class TestFilterEntries:
    """Tests for filter_entries()."""

    def test_no_criteria_returns_everything(self, sample_entries: tuple[Entry, ...]) -> None:
        result = filter_entries(sample_entries)
        assert result == list(sample_entries)
        assert result is not sample_entries

    def test_default_filter_is_identity(self, sample_entries: tuple[Entry, ...]) -> None:
        assert filter_entries(sample_entries, EntryFilter()) == list(sample_entries)

    def test_search_matches_url_case_insensitive(self, sample_entries: tuple[Entry, ...]) -> None:
        result = filter_entries(sample_entries, EntryFilter(search_term="API.EXAMPLE"))
        assert [e.index for e in result] == [2, 3, 4, 5]

    def test_search_matches_method(self, sample_entries: tuple[Entry, ...]) -> None:
        result = filter_entries(sample_entries, EntryFilter(search_term="post"))
        assert [e.index for e in result] == [3]

    def test_method_filter_is_exact(self, sample_entries: tuple[Entry, ...]) -> None:
        assert [e.index for e in filter_entries(sample_entries, EntryFilter(method="OPTIONS"))] == [5]
        assert filter_entries(sample_entries, EntryFilter(method="options")) == []

    def test_status_filter(self, sample_entries: tuple[Entry, ...]) -> None:
        redirects = filter_entries(sample_entries, EntryFilter(status_class="3xx"))
        errors = filter_entries(sample_entries, EntryFilter(status_class=StatusClass.CLIENT_ERROR))

        assert [e.index for e in redirects] == [3]
        assert [e.index for e in errors] == [4]

    def test_criteria_combine(self, sample_entries: tuple[Entry, ...]) -> None:
        criteria = EntryFilter(search_term="users", method="GET", status_class="2xx")
        assert [e.index for e in filter_entries(sample_entries, criteria)] == [2]

    def test_no_match(self, sample_entries: tuple[Entry, ...]) -> None:
        assert filter_entries(sample_entries, EntryFilter(search_term="nowhere")) == []

    def test_other_status_never_matches_a_class(self) -> None:
        capture = make_capture(make_entry_data(status=0), make_entry_data(status=101))

        for bucket in ("2xx", "3xx", "4xx", "5xx"):
            assert filter_entries(capture.entries, EntryFilter(status_class=bucket)) == []
        assert len(filter_entries(capture.entries, EntryFilter(status_class=ALL))) == 2

    def test_order_preserved(self, sample_entries: tuple[Entry, ...]) -> None:
        result = filter_entries(sample_entries, EntryFilter(method="GET"))
        indexes = [e.index for e in result]
        assert indexes == sorted(indexes)

    def test_capture_untouched(self, sample_capture: Capture) -> None:
        before = sample_capture.entries
        filter_entries(sample_capture.entries, EntryFilter(method="POST"))
        assert sample_capture.entries is before
        assert len(sample_capture.entries) == 7


class TestDistinctMethods:
    def test_first_seen_order(self, sample_entries: tuple[Entry, ...]) -> None:
        assert distinct_methods(sample_entries) == ["GET", "POST", "OPTIONS"]

    def test_empty(self) -> None:
        assert distinct_methods([]) == []


class TestGetEntry:
    """Tests for get_entry()."""

    def test_by_index(self, sample_capture: Capture) -> None:
        assert get_entry(sample_capture, 3).request.method == "POST"

    def test_accepts_sequence(self, sample_entries: tuple[Entry, ...]) -> None:
        assert get_entry(sample_entries, 0) is sample_entries[0]

    @pytest.mark.parametrize("index", [-1, 7, 100])
    def test_out_of_range(self, sample_capture: Capture, index: int) -> None:
        with pytest.raises(EntryNotFoundError) as exc_info:
            get_entry(sample_capture, index)

        assert exc_info.value.index == index
        assert exc_info.value.total == 7


class TestUrlParts:
    """Tests for url_path() and url_host()."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://api.example.com/v1/users?page=2", "/v1/users"),
            ("https://example.com", "/"),
            ("not a url", "not a url"),
            ("", ""),
        ],
    )
    def test_path(self, url: str, expected: str) -> None:
        assert url_path(url) == expected

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://api.example.com/v1/users", "api.example.com"),
            ("http://localhost:8080/x", "localhost:8080"),
            ("https://user:pw@example.com/", "example.com"),
            ("not a url", "unknown host"),
            ("http://[::1", "unknown host"),
        ],
    )
    def test_host(self, url: str, expected: str) -> None:
        assert url_host(url) == expected
