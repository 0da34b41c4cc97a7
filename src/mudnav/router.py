# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Route raw server text to the tracker and the walker.

Network reads split text at arbitrary points ("Slum Street" in one chunk,
", Crossroads\\r\\n" in the next). ``LineFramer`` holds back the trailing
fragment until its newline arrives. ``MessageRouter`` applies the enemy
signal for a chunk before any of its lines reach the tracker, so a step is
never sent out of a room whose "Also here:" line listed enemies.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from mudnav.constants import COMBAT_ENGAGED_MARKER, COMBAT_OFF_MARKER, PLAYER_DEATH_MARKER
from mudnav.errors import require
from mudnav.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from mudnav.tracking.tracker import RoomTracker
    from mudnav.walking.executor import AutoWalkManager

logger = get_logger(__name__)

COMBAT_ENGAGED_RE = re.compile(re.escape(COMBAT_ENGAGED_MARKER))
COMBAT_OFF_RE = re.compile(re.escape(COMBAT_OFF_MARKER))
PLAYER_DEATH_RE = re.compile(re.escape(PLAYER_DEATH_MARKER), re.IGNORECASE)


class LineFramer:
    """Reassemble complete lines from arbitrarily chunked text."""

    def __init__(self) -> None:
        self._partial = ""

    @property
    def partial(self) -> str:
        return self._partial

    def feed(self, chunk: str) -> list[str]:
        """Return the complete lines in ``partial + chunk``; keep any trailing fragment."""
        text = self._partial + chunk
        self._partial = ""
        parts = text.split("\n")
        if not text.endswith("\n"):
            self._partial = parts[-1]
        lines = parts[:-1]
        return [line.removesuffix("\r") for line in lines]

    def flush(self) -> str:
        fragment = self._partial.removesuffix("\r")
        self._partial = ""
        return fragment

    def reset(self) -> None:
        self._partial = ""


class MessageRouter:
    """Dispatch each inbound chunk in a fixed order.

    1. ``enemy_signal(chunk)`` (the combat collaborator's room parser)
    2. every complete line to ``tracker.process_line``
    3. combat engaged / off markers to the walker
    4. the death marker: combat off, then player death
    """

    def __init__(
        self,
        tracker: RoomTracker,
        walker: AutoWalkManager | None = None,
        *,
        enemy_signal: Callable[[str], None] | None = None,
        framer: LineFramer | None = None,
    ) -> None:
        require("MessageRouter", tracker=tracker)
        self._tracker = tracker
        self._walker = walker
        self._enemy_signal = enemy_signal
        self._framer = framer or LineFramer()

    @property
    def framer(self) -> LineFramer:
        return self._framer

    def process(self, chunk: str) -> None:
        if self._enemy_signal is not None:
            self._enemy_signal(chunk)

        for line in self._framer.feed(chunk):
            self._tracker.process_line(line)

        if COMBAT_ENGAGED_RE.search(chunk):
            logger.debug("combat_engaged")
            self._notify_combat(True)
        elif COMBAT_OFF_RE.search(chunk):
            logger.debug("combat_off")
            self._notify_combat(False)

        if PLAYER_DEATH_RE.search(chunk):
            logger.info("player_death_detected")
            self._notify_combat(False)
            if self._walker is not None:
                self._walker.on_player_death()

    def record_outgoing(self, command: str) -> None:
        """Player typed a command; let the tracker predict from it."""
        self._tracker.record_player_command(command)

    def disconnect(self) -> None:
        self._framer.reset()
        if self._walker is not None:
            self._walker.on_disconnected()
        self._tracker.reset()

    def _notify_combat(self, in_combat: bool) -> None:
        if self._walker is not None:
            self._walker.on_combat_state_changed(in_combat)
