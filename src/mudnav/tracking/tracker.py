# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Navigation tracker: turns server lines into a confirmed current room."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mudnav.config import TrackerConfig
from mudnav.constants import LOOK_PREFIXES, MOVE_COMMAND_TO_KEY
from mudnav.errors import MovementFailureDetector, require
from mudnav.events import EventHook
from mudnav.logging import get_logger
from mudnav.tracking.buffer import BufferState, LineClass, RoomBlock, RoomBlockBuffer
from mudnav.tracking.exits import VisibleExit, parse_obvious_exits
from mudnav.tracking.matcher import MatchStrategy, PendingMovement, RoomMatcher

if TYPE_CHECKING:
    from collections.abc import Callable

    from mudnav.graph import RoomLookup, RoomNode

logger = get_logger(__name__)


def parse_look_command(command: str) -> str | None:
    """Direction key for "l <dir>" / "look <dir>", else None."""
    lowered = command.strip().lower()
    for prefix in LOOK_PREFIXES:
        if lowered.startswith(prefix):
            return MOVE_COMMAND_TO_KEY.get(lowered[len(prefix) :].strip())
    return None


class RoomTracker:
    """Tracks the player's current room from MUD output.

    Feed every complete server line to ``process_line`` and every command the
    player sends to ``record_player_command``. Subscribers hear about:

    - ``room_changed(room | None)`` when the confirmed room key changes
    - ``room_display_detected(name, exits)`` for every parsed room display
    - ``log_message(text)`` human-readable progress and diagnostics
    """

    def __init__(
        self,
        rooms: RoomLookup,
        config: TrackerConfig | None = None,
        *,
        log_sink: Callable[[str], None] | None = None,
    ) -> None:
        require("RoomTracker", rooms=rooms)
        self._config = config or TrackerConfig()
        self._rooms = rooms
        self._buffer = RoomBlockBuffer(
            rooms,
            max_lines=self._config.max_buffer_lines,
            failure_detector=MovementFailureDetector(self._config.movement_failure_messages),
        )
        self._matcher = RoomMatcher(rooms)
        self._pending = PendingMovement()

        self._current_room: RoomNode | None = None
        self._current_room_name = ""
        self._current_exits: list[VisibleExit] = []

        self.room_changed = EventHook("room_changed")
        self.room_display_detected = EventHook("room_display_detected")
        self.log_message = EventHook("tracker_log")
        if log_sink is not None:
            self.log_message.connect(log_sink)

    @property
    def current_room(self) -> RoomNode | None:
        return self._current_room

    @property
    def current_room_key(self) -> str:
        return self._current_room.key if self._current_room else ""

    @property
    def current_room_name(self) -> str:
        """Room name as last displayed by the server (even if unmatched)."""
        return self._current_room_name

    @property
    def current_visible_exits(self) -> tuple[VisibleExit, ...]:
        return tuple(self._current_exits)

    @property
    def pending_movement(self) -> PendingMovement:
        return PendingMovement(self._pending.command, self._pending.from_key, self._pending.look_direction)

    @property
    def buffer_state(self) -> BufferState:
        return self._buffer.state

    def record_player_command(self, command: str) -> None:
        """Remember an outgoing movement or look command. Last command wins."""
        trimmed = command.strip().lower()
        if trimmed in MOVE_COMMAND_TO_KEY:
            self._pending.command = trimmed
            self._pending.from_key = self._current_room.key if self._current_room else None
            self._pending.look_direction = None
            return

        look_direction = parse_look_command(trimmed)
        if look_direction is not None:
            self._pending.look_direction = look_direction

    def process_line(self, line: str) -> None:
        """Process one complete line of server output."""
        result = self._buffer.feed(line)
        if result.kind is LineClass.MOVEMENT_FAILURE:
            logger.debug("movement_failed", failure=result.failure, command=self._pending.command)
            self._pending.clear_move()
            return
        if result.block is not None:
            self._process_block(result.block)

    def reset(self) -> None:
        """Forget everything (disconnect, character switch)."""
        self._current_room = None
        self._current_room_name = ""
        self._current_exits = []
        self._pending.clear()
        self._buffer.reset()
        logger.info("tracker_reset")
        self.room_changed.emit(None)

    def _process_block(self, block: RoomBlock) -> None:
        exits = parse_obvious_exits(
            block.exits_text,
            self._config.blocked_modifiers,
            on_unparsed=lambda segment: self._log(f"Could not parse exit segment: \"{segment}\""),
        )
        if not block.name:
            logger.debug("room_block_without_name", exits_text=block.exits_text)
            return

        self._current_room_name = block.name
        self._current_exits = exits
        self.room_display_detected.emit(block.name, list(exits))

        # Looking into an adjacent room displays it without moving us.
        if self._pending.look_direction is not None:
            logger.debug("room_display_from_look", name=block.name, direction=self._pending.look_direction)
            self._pending.look_direction = None
            return

        # Redisplay of the room we are already in (enter, "look").
        if (
            self._current_room is not None
            and self._current_room.name.strip().casefold() == block.name.strip().casefold()
            and self._pending.command is None
        ):
            return

        result = self._matcher.match(block.name, exits, self._pending)
        if result.strategy is MatchStrategy.UNRESOLVED and result.candidate_count > 1:
            self._log(
                f"Ambiguous room: \"{block.name}\" matches {result.candidate_count} rooms, could not disambiguate"
            )

        matched = result.room
        previous_key = self._current_room.key if self._current_room else None
        new_key = matched.key if matched else None
        # Listeners may send the next move while handling room_changed.
        self._pending.clear_move()
        if new_key == previous_key:
            return

        self._current_room = matched
        if matched is not None:
            logger.info("room_changed", key=matched.key, name=matched.name, strategy=str(result.strategy))
            self._log(f"Room: [{matched.key}] {matched.name}")
        else:
            logger.info("room_unmatched", name=block.name)
            self._log(f"Room: {block.name} (not matched to graph)")
        self.room_changed.emit(matched)

    def _log(self, message: str) -> None:
        self.log_message.emit(message)
