"""Tests for harplay logging utilities."""

from __future__ import annotations

import io
import json
import logging

import pytest

from harplay.logging import NETWORK_LOGGERS, add_log_level, configure_logging, enable_network_debug, get_logger


class TestAddLogLevel:
    def test_warn_is_normalized(self) -> None:
        assert add_log_level(None, "warn", {})["level"] == "warning"

    def test_other_levels(self) -> None:
        assert add_log_level(None, "info", {"event": "x"}) == {"event": "x", "level": "info"}


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level="INFO", json_output=True)

        get_logger("test").info("replay_started", url="https://example.com/")

        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["event"] == "replay_started"
        assert record["level"] == "info"
        assert record["url"] == "https://example.com/"
        assert "timestamp" in record

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level="WARNING", json_output=True)

        log = get_logger("test")
        log.info("hidden_event")
        log.warning("shown_event")

        err = capsys.readouterr().err
        assert "hidden_event" not in err
        assert "shown_event" in err

    def test_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level="DEBUG")

        get_logger("test").debug("har_parsed", entries=3)

        assert "har_parsed" in capsys.readouterr().err

    def test_unknown_level_falls_back_to_info(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level="chatty", json_output=True)

        log = get_logger("test")
        log.debug("debug_event")
        log.info("info_event")

        err = capsys.readouterr().err
        assert "debug_event" not in err
        assert "info_event" in err

    def test_explicit_stream(self) -> None:
        buf = io.StringIO()
        configure_logging(level="INFO", json_output=True, stream=buf)

        get_logger("test").info("entry_exported", path="GET_example_com_.json")

        record = json.loads(buf.getvalue())
        assert record["event"] == "entry_exported"
        assert record["path"] == "GET_example_com_.json"

    def test_console_output_uncolored_when_not_a_tty(self) -> None:
        buf = io.StringIO()
        configure_logging(level="INFO", stream=buf)

        get_logger("test").info("har_parsed")

        assert "\x1b[" not in buf.getvalue()


class TestEnableNetworkDebug:
    def test_sets_debug_level_once(self) -> None:
        enable_network_debug()
        enable_network_debug()

        for name in NETWORK_LOGGERS:
            net_logger = logging.getLogger(name)
            assert net_logger.level == logging.DEBUG
            assert len(net_logger.handlers) == 1

            net_logger.handlers.clear()
            net_logger.setLevel(logging.NOTSET)
