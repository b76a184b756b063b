"""Replay of captured requests against their live origin."""

from harplay.replay.edit import EditedRequest, format_header_block, parse_header_block
from harplay.replay.engine import PreparedRequest, Replayer, ReplayResult, prepare_request, replay

__all__ = [
    "EditedRequest",
    "PreparedRequest",
    "ReplayResult",
    "Replayer",
    "format_header_block",
    "parse_header_block",
    "prepare_request",
    "replay",
]
