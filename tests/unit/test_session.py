"""Tests for CaptureSession."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from harplay.config import HarplaySettings
from harplay.exceptions import EntryNotFoundError, HarplayError, MalformedJSONError
from harplay.har.model import Header, Request
from harplay.replay.edit import EditedRequest
from harplay.replay.engine import Replayer, ReplayResult
from harplay.session import CaptureSession


class SwitchingReplayer:
    """Replayer stand-in that moves the selection while the request is in flight."""

    def __init__(self, session: CaptureSession, switch_to: int) -> None:
        self.session = session
        self.switch_to = switch_to
        self.sent: list[Request | EditedRequest] = []

    async def replay(self, request: Request | EditedRequest) -> ReplayResult:
        self.sent.append(request)
        self.session.select(self.switch_to)
        return ReplayResult(status=200, headers=(), body="late")


@pytest.fixture
def session(sample_har_path: Path) -> CaptureSession:
    session = CaptureSession()
    session.load_file(sample_har_path)
    return session


class TestLoading:
    """Tests for loading captures into a session."""

    def test_load_file(self, session: CaptureSession) -> None:
        assert session.capture is not None
        assert len(session.capture) == 7
        assert session.selected is None

    def test_load_text(self) -> None:
        session = CaptureSession()
        capture = session.load_text('{"log": {"entries": []}}')
        assert session.capture is capture

    def test_failed_load_keeps_previous_capture(self, session: CaptureSession) -> None:
        previous = session.capture
        session.select(2)

        with pytest.raises(MalformedJSONError):
            session.load_text("{broken")

        assert session.capture is previous
        assert session.selected_index == 2

    def test_load_resets_selection(self, session: CaptureSession, sample_har_path: Path) -> None:
        session.select(1)
        session.edit()

        session.load_file(sample_har_path)

        assert session.selected_index is None
        assert session.edited is None


class TestSelection:
    """Tests for selecting and editing entries."""

    def test_select(self, session: CaptureSession) -> None:
        entry = session.select(3)
        assert session.selected is entry
        assert entry.request.method == "POST"

    def test_select_out_of_range(self, session: CaptureSession) -> None:
        with pytest.raises(EntryNotFoundError):
            session.select(99)
        assert session.selected is None

    def test_select_without_capture(self) -> None:
        with pytest.raises(HarplayError, match="No capture loaded"):
            CaptureSession().select(0)

    def test_edit_requires_selection(self, session: CaptureSession) -> None:
        with pytest.raises(HarplayError, match="No entry selected"):
            session.edit()

    def test_edit_created_once(self, session: CaptureSession) -> None:
        session.select(0)
        first = session.edit()
        first.method = "PUT"

        assert session.edit() is first

    def test_new_selection_discards_edits(self, session: CaptureSession) -> None:
        session.select(0)
        session.edit().method = "PUT"

        session.select(1)

        assert session.edited is None
        assert session.edit().method == "GET"

    def test_discard_edits(self, session: CaptureSession) -> None:
        session.select(0)
        session.edit().url = "https://other.example/"
        session.discard_edits()

        assert session.edit().url == "https://example.com/"


class TestReplaySelected:
    """Tests for CaptureSession.replay_selected()."""

    @pytest.mark.asyncio
    async def test_replays_edited_request(self, session: CaptureSession) -> None:
        sent: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(200, text="fresh")

        session.select(0)
        session.edit().headers = [Header("X-Edited", "1")]
        replayer = Replayer(HarplaySettings(), transport=httpx.MockTransport(handler))

        result = await session.replay_selected(replayer)

        assert result.body == "fresh"
        assert session.last_result is result
        assert sent[0].headers["x-edited"] == "1"

    @pytest.mark.asyncio
    async def test_replays_captured_request_when_unedited(self, session: CaptureSession) -> None:
        session.select(2)
        replayer = SwitchingReplayer(session, switch_to=2)

        await session.replay_selected(replayer)  # type: ignore[arg-type]

        assert replayer.sent == [session.capture.entries[2].request]  # type: ignore[union-attr]

    @pytest.mark.asyncio
    async def test_stale_result_not_stored(self, session: CaptureSession) -> None:
        session.select(0)
        replayer = SwitchingReplayer(session, switch_to=4)

        result = await session.replay_selected(replayer)  # type: ignore[arg-type]

        assert result.body == "late"
        assert session.selected_index == 4
        assert session.last_result is None

    @pytest.mark.asyncio
    async def test_reselecting_same_entry_drops_result(self, session: CaptureSession) -> None:
        session.select(0)
        replayer = SwitchingReplayer(session, switch_to=0)

        await session.replay_selected(replayer)  # type: ignore[arg-type]

        assert session.selected_index == 0
        assert session.last_result is None

    @pytest.mark.asyncio
    async def test_requires_selection(self, session: CaptureSession) -> None:
        with pytest.raises(HarplayError, match="No entry selected"):
            await session.replay_selected()
