# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Room tracking and auto-walk navigation for MUD clients."""

from __future__ import annotations

from mudnav.graph import PathResult, PathStep, RoomExit, RoomIndex, RoomNode
from mudnav.router import LineFramer, MessageRouter
from mudnav.tracking import RoomTracker, VisibleExit
from mudnav.walking import AutoWalkManager, AutoWalkState, WalkFailureKind, WalkMode

__version__ = "0.1.0"

__all__ = [
    "AutoWalkManager",
    "AutoWalkState",
    "LineFramer",
    "MessageRouter",
    "PathResult",
    "PathStep",
    "RoomExit",
    "RoomIndex",
    "RoomNode",
    "RoomTracker",
    "VisibleExit",
    "WalkFailureKind",
    "WalkMode",
]
