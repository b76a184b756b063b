"""Caller-owned view state around a loaded capture.

The engine itself holds no state. A CaptureSession is what a front end
keeps between interactions: the loaded capture, the selected entry (by
capture index), the edit overlay and the last replay result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from harplay.exceptions import HarplayError
from harplay.har.index import get_entry
from harplay.har.model import Capture, Entry
from harplay.har.parser import parse_har_file, parse_har_string
from harplay.logging import get_logger
from harplay.replay.edit import EditedRequest
from harplay.replay.engine import Replayer, ReplayResult

LOG = get_logger(__name__)


@dataclass
class CaptureSession:
    """Ephemeral state for one operator working on one capture."""

    capture: Capture | None = None
    selected_index: int | None = None
    edited: EditedRequest | None = None
    last_result: ReplayResult | None = None
    # bumped on every load or select; a replay stores its result only if unchanged
    _generation: int = field(default=0, init=False, repr=False)

    def _reset_selection(self) -> None:
        self._generation += 1
        self.selected_index = None
        self.edited = None
        self.last_result = None

    def load_text(self, content: str) -> Capture:
        """Parse and activate a capture.

        On a parse error the exception propagates and the previously
        loaded capture stays active.
        """
        capture = parse_har_string(content)
        self.capture = capture
        self._reset_selection()
        return capture

    def load_file(self, path: Path | str) -> Capture:
        """Like load_text, reading the capture from disk."""
        capture = parse_har_file(path)
        self.capture = capture
        self._reset_selection()
        return capture

    def _require_capture(self) -> Capture:
        if self.capture is None:
            raise HarplayError("No capture loaded")
        return self.capture

    def select(self, index: int) -> Entry:
        """Select an entry, discarding any edits and replay result."""
        entry = get_entry(self._require_capture(), index)
        self._generation += 1
        self.selected_index = index
        self.edited = None
        self.last_result = None
        return entry

    @property
    def selected(self) -> Entry | None:
        if self.capture is None or self.selected_index is None:
            return None
        return self.capture.entries[self.selected_index]

    def _require_selected(self) -> Entry:
        entry = self.selected
        if entry is None:
            raise HarplayError("No entry selected")
        return entry

    def edit(self) -> EditedRequest:
        """Return the edit overlay for the selected entry, creating it on first use."""
        entry = self._require_selected()
        if self.edited is None:
            self.edited = EditedRequest.from_request(entry.request)
        return self.edited

    def discard_edits(self) -> None:
        self.edited = None

    async def replay_selected(self, replayer: Replayer | None = None) -> ReplayResult:
        """Replay the edited request, or the captured one when unedited.

        The result is stored only if no other load or selection happened
        while the request was in flight, including re-selecting the same
        entry.
        """
        entry = self._require_selected()
        request = self.edited if self.edited is not None else entry.request
        index = self.selected_index
        generation = self._generation

        result = await (replayer or Replayer()).replay(request)

        if self._generation == generation:
            self.last_result = result
        else:
            LOG.debug("replay_result_discarded", entry_index=index)
        return result
