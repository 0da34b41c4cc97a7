# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Room tracking: line classification, room matching and the tracker façade."""

from __future__ import annotations

from .buffer import BufferState, FeedResult, LineClass, RoomBlock, RoomBlockBuffer
from .exits import VisibleExit, parse_exit_segment, parse_obvious_exits
from .matcher import MatchResult, MatchStrategy, PendingMovement, RoomMatcher, score_candidate
from .tracker import RoomTracker, parse_look_command

__all__ = [
    "BufferState",
    "FeedResult",
    "LineClass",
    "MatchResult",
    "MatchStrategy",
    "PendingMovement",
    "RoomBlock",
    "RoomBlockBuffer",
    "RoomMatcher",
    "RoomTracker",
    "VisibleExit",
    "parse_exit_segment",
    "parse_look_command",
    "parse_obvious_exits",
    "score_candidate",
]
