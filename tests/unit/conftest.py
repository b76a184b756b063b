"""Shared fixtures for unit tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from harplay.har.model import Capture, Entry
from harplay.har.parser import parse_har_file


@pytest.fixture
def sample_capture(sample_har_path: Path) -> Capture:
    """Parsed sample HAR fixture."""
    return parse_har_file(sample_har_path)


@pytest.fixture
def sample_entries(sample_capture: Capture) -> tuple[Entry, ...]:
    """Entries of the sample HAR fixture."""
    return sample_capture.entries
