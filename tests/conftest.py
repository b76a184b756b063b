"""Pytest configuration for harplay tests."""

import sys
from pathlib import Path

import pytest
import structlog
from structlog._config import BoundLoggerLazyProxy

# Add src directory to sys.path for test imports
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate each test from the developer's environment.

    This fixture:
    - Clears HARPLAY_* environment variables
    - Points HARPLAY_EXPORT_DIR at a temporary directory
    - Resets the global settings instance before each test
    """
    import os

    for key in list(os.environ):
        if key.startswith("HARPLAY_"):
            monkeypatch.delenv(key)

    export_dir = tmp_path / "exports"
    monkeypatch.setenv("HARPLAY_EXPORT_DIR", str(export_dir))
    # keep a stray .env in the working directory out of the settings
    monkeypatch.chdir(tmp_path)

    from harplay.config import reset_settings

    reset_settings()

    return export_dir


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Reset structlog after each test to prevent closed file handle errors.

    CliRunner captures stderr with a temporary file. When configure_logging()
    runs inside CliRunner, structlog binds loggers to that temp file. After
    the test, CliRunner closes the file. We reset structlog to prevent stale
    references.
    """
    yield
    structlog.reset_defaults()
    for module in list(sys.modules.values()):
        for attr in getattr(module, "__dict__", {}).values():
            if isinstance(attr, BoundLoggerLazyProxy):
                attr.__dict__.pop("bind", None)


@pytest.fixture
def sample_har_path() -> Path:
    """Path to sample HAR fixture."""
    return FIXTURES_DIR / "sample.har"
