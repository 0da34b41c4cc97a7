# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Line classifier and room-block buffer.

A room display always arrives in this order:

    Room Name                 (one flush-left line)
      verbose description     (optional, indented; wrapped lines may be flush-left)
    You notice ... here.      (optional, may wrap)
    Also here: ....           (optional, may wrap)
    Obvious exits: ...        (always present, may wrap)
    The room is dimly lit     (optional, after the exits)

Only lines that can belong to such a block are kept. Combat spam, chat,
command echoes and the like are dropped so they are never mistaken for a
room name.
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from mudnav.constants import (
    DEFAULT_MAX_BUFFER_LINES,
    DIMLY_LIT_LINE,
    HP_STATUS_MARKER,
)
from mudnav.errors import MovementFailureDetector
from mudnav.tracking.exits import contains_direction_word, ends_with_direction_word

if TYPE_CHECKING:
    from mudnav.graph import RoomLookup

OBVIOUS_EXITS_RE = re.compile(r"^Obvious exits:\s*(.+)")
YOU_NOTICE_RE = re.compile(r"^You notice\s")
ALSO_HERE_RE = re.compile(r"^Also here:\s")
HP_STATUS_RE = re.compile(re.escape(HP_STATUS_MARKER) + r"\d+")
# "You notice Bob sneaking in from the north." is an arrival, not an item list
ARRIVAL_NOTICE_RE = re.compile(
    r"from the (?:north|south|east|west|northeast|southeast|northwest|southwest|above|below)[.!]",
    re.IGNORECASE,
)


class BufferState(StrEnum):
    IDLE = "idle"
    IN_VERBOSE_DESCRIPTION = "in_verbose_description"
    IN_ROOM_BLOCK = "in_room_block"


class LineClass(StrEnum):
    """What the classifier decided about one line."""

    BLANK = "blank"
    MOVEMENT_FAILURE = "movement_failure"
    EXITS_CONTINUATION = "exits_continuation"
    EXITS_CLOSED = "exits_closed"
    EXITS = "exits"
    ALSO_HERE = "also_here"
    YOU_NOTICE = "you_notice"
    ARRIVAL_NOISE = "arrival_noise"
    NOTICE_CONTINUATION = "notice_continuation"
    ALSO_HERE_CONTINUATION = "also_here_continuation"
    DESCRIPTION = "description"
    INDENTED_NOISE = "indented_noise"
    DIMLY_LIT = "dimly_lit"
    HP_STATUS = "hp_status"
    NAME_CANDIDATE = "name_candidate"


@dataclass(frozen=True)
class RoomBlock:
    """A completed room display: extracted name (empty if none) and raw exits text."""

    name: str
    exits_text: str


@dataclass(frozen=True)
class FeedResult:
    kind: LineClass
    block: RoomBlock | None = None
    failure: str | None = None


def _is_indented(line: str) -> bool:
    return bool(line) and line[0] in (" ", "\t")


class RoomBlockBuffer:
    """Stateful per-line filter that assembles room blocks.

    ``feed`` takes one complete line (no trailing newline) and reports how it
    was classified. When an exits line completes, the result carries the
    RoomBlock and the buffer is reset for the next display.
    """

    def __init__(
        self,
        rooms: RoomLookup,
        *,
        max_lines: int = DEFAULT_MAX_BUFFER_LINES,
        failure_detector: MovementFailureDetector | None = None,
    ) -> None:
        self._rooms = rooms
        self._lines: deque[str] = deque(maxlen=max_lines)
        self._failures = failure_detector or MovementFailureDetector()
        self.state = BufferState.IDLE
        self._capturing_exits = False
        self._exits_text = ""
        self._in_notice_continuation = False
        self._in_also_here_continuation = False

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def capturing_exits(self) -> bool:
        return self._capturing_exits

    def reset(self) -> None:
        self._lines.clear()
        self.state = BufferState.IDLE
        self._capturing_exits = False
        self._exits_text = ""
        self._in_notice_continuation = False
        self._in_also_here_continuation = False

    def feed(self, line: str) -> FeedResult:
        # Trailing whitespace is noise; leading whitespace marks a description.
        text = line.rstrip()
        if not text:
            return FeedResult(LineClass.BLANK)

        failure = self._failures.detect(text)
        if failure is not None:
            return FeedResult(LineClass.MOVEMENT_FAILURE, failure=failure)

        if self._capturing_exits:
            if contains_direction_word(text) and not HP_STATUS_RE.search(text) and text != DIMLY_LIT_LINE:
                self._exits_text += " " + text.strip()
                return FeedResult(LineClass.EXITS_CONTINUATION)
            exits_text = self._exits_text
            self._capturing_exits = False
            self._exits_text = ""
            return FeedResult(LineClass.EXITS_CLOSED, block=self._complete(exits_text))

        exits_match = OBVIOUS_EXITS_RE.match(text)
        if exits_match:
            exits_text = exits_match.group(1).strip()
            self._in_notice_continuation = False
            self._in_also_here_continuation = False
            if ends_with_direction_word(exits_text):
                return FeedResult(LineClass.EXITS, block=self._complete(exits_text))
            self._capturing_exits = True
            self._exits_text = exits_text
            return FeedResult(LineClass.EXITS)

        if ALSO_HERE_RE.match(text):
            self.state = BufferState.IN_ROOM_BLOCK
            self._in_also_here_continuation = not text.endswith(".")
            self._in_notice_continuation = False
            self._lines.append(text)
            return FeedResult(LineClass.ALSO_HERE)

        if YOU_NOTICE_RE.match(text):
            if ARRIVAL_NOTICE_RE.search(text):
                if self.state is BufferState.IDLE:
                    self._lines.clear()
                return FeedResult(LineClass.ARRIVAL_NOISE)
            self.state = BufferState.IN_ROOM_BLOCK
            self._in_notice_continuation = " here." not in text
            self._in_also_here_continuation = False
            self._lines.append(text)
            return FeedResult(LineClass.YOU_NOTICE)

        if self._in_notice_continuation:
            self._lines.append(text)
            if " here." in text or text.endswith("here."):
                self._in_notice_continuation = False
            return FeedResult(LineClass.NOTICE_CONTINUATION)

        if self._in_also_here_continuation:
            self._lines.append(text)
            if text.endswith("."):
                self._in_also_here_continuation = False
            return FeedResult(LineClass.ALSO_HERE_CONTINUATION)

        if _is_indented(text):
            # A description only follows a line that really is a room name.
            if self._lines and self._rooms.is_loaded:
                candidate = self._lines[-1].strip()
                if self._rooms.get_rooms_by_name(candidate):
                    self.state = BufferState.IN_VERBOSE_DESCRIPTION
                    self._lines.append(text)
                    return FeedResult(LineClass.DESCRIPTION)
            self._lines.clear()
            self.state = BufferState.IDLE
            return FeedResult(LineClass.INDENTED_NOISE)

        if self.state is BufferState.IN_VERBOSE_DESCRIPTION:
            self._lines.append(text)
            return FeedResult(LineClass.DESCRIPTION)

        if text == DIMLY_LIT_LINE:
            return FeedResult(LineClass.DIMLY_LIT)

        if HP_STATUS_RE.search(text):
            return FeedResult(LineClass.HP_STATUS)

        # Outside a block only the most recent candidate can be the name.
        if self.state is BufferState.IDLE:
            self._lines.clear()
        self._lines.append(text)
        return FeedResult(LineClass.NAME_CANDIDATE)

    def extract_room_name(self) -> str:
        """Name = line before the first marker, or the last line if there is no marker."""
        if not self._lines:
            return ""
        for index, buffered in enumerate(self._lines):
            if _is_indented(buffered) or YOU_NOTICE_RE.match(buffered) or ALSO_HERE_RE.match(buffered):
                if index == 0:
                    return ""
                return self._lines[index - 1].strip()
        return self._lines[-1].strip()

    def _complete(self, exits_text: str) -> RoomBlock:
        name = self.extract_room_name()
        self._lines.clear()
        self.state = BufferState.IDLE
        self._in_notice_continuation = False
        self._in_also_here_continuation = False
        return RoomBlock(name=name, exits_text=exits_text)
