# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tests for inbound line framing and message routing."""

from __future__ import annotations

from unittest.mock import Mock, call

import pytest
from helpers import FakeGraph, make_path

from mudnav.errors import CollaboratorError
from mudnav.router import LineFramer, MessageRouter
from mudnav.scheduling import ManualScheduler
from mudnav.tracking import RoomTracker
from mudnav.walking import AutoWalkManager, AutoWalkState


class TestLineFramer:
    def test_complete_lines_are_returned(self) -> None:
        framer = LineFramer()
        assert framer.feed("Town Square\r\nObvious exits: north\r\n") == ["Town Square", "Obvious exits: north"]
        assert framer.partial == ""

    def test_trailing_fragment_is_held_back(self) -> None:
        framer = LineFramer()
        assert framer.feed("Slum Street, Cross") == []
        assert framer.partial == "Slum Street, Cross"
        assert framer.feed("roads\r\n") == ["Slum Street, Crossroads"]

    def test_split_crlf(self) -> None:
        framer = LineFramer()
        assert framer.feed("Town Square\r") == []
        assert framer.feed("\nnext") == ["Town Square"]
        assert framer.partial == "next"

    def test_blank_lines_are_kept(self) -> None:
        assert LineFramer().feed("a\n\nb\n") == ["a", "", "b"]

    def test_flush_and_reset(self) -> None:
        framer = LineFramer()
        framer.feed("[HP=50]:\r")
        assert framer.flush() == "[HP=50]:"
        assert framer.partial == ""
        framer.feed("dangling")
        framer.reset()
        assert framer.feed("\n") == [""]


@pytest.fixture
def tracker(rooms: FakeGraph) -> RoomTracker:
    return RoomTracker(rooms)


class TestMessageRouter:
    def test_enemy_signal_runs_before_tracker(self, tracker: RoomTracker) -> None:
        order: list[str] = []
        tracker.room_display_detected.connect(lambda name, exits: order.append(f"display:{name}"))
        router = MessageRouter(tracker, enemy_signal=lambda chunk: order.append("enemies"))

        router.process("Town Square\r\nAlso here: giant rat.\r\nObvious exits: north, east\r\n")

        assert order == ["enemies", "display:Town Square"]

    def test_combat_markers(self, tracker: RoomTracker) -> None:
        walker = Mock()
        router = MessageRouter(tracker, walker)

        router.process("*Combat Engaged*\r\n")
        router.process("*Combat Off*\r\n")
        router.process("*Combat Engaged*\r\n*Combat Off*\r\n")

        assert walker.on_combat_state_changed.call_args_list == [call(True), call(False), call(True)]

    def test_death_marker_ends_combat_then_notifies(self, tracker: RoomTracker) -> None:
        walker = Mock()
        router = MessageRouter(tracker, walker)

        router.process("Due to a miracle, you have been saved!\r\n")

        assert walker.method_calls == [call.on_combat_state_changed(False), call.on_player_death()]

    def test_without_walker(self, tracker: RoomTracker) -> None:
        router = MessageRouter(tracker)
        router.process("*Combat Engaged*\r\nDue to a miracle, you have been saved!\r\n")
        router.disconnect()
        assert tracker.current_room is None

    def test_record_outgoing_feeds_prediction(self, tracker: RoomTracker) -> None:
        router = MessageRouter(tracker)
        router.record_outgoing("look east")
        assert tracker.pending_movement.look_direction == "E"

    def test_disconnect_resets_everything(self, tracker: RoomTracker) -> None:
        walker = Mock()
        router = MessageRouter(tracker, walker)
        router.process("Town Square\r\nObvious exits: north, east\r\nHalf a li")
        assert tracker.current_room_key == "1/1"

        router.disconnect()

        walker.on_disconnected.assert_called_once_with()
        assert tracker.current_room is None
        assert router.framer.partial == ""

    def test_missing_tracker(self) -> None:
        with pytest.raises(CollaboratorError):
            MessageRouter(None)  # type: ignore[arg-type]


class TestEndToEnd:
    """Server text in, movement commands out."""

    @pytest.fixture
    def world(self, rooms: FakeGraph, tracker: RoomTracker, scheduler: ManualScheduler):
        enemies = {"count": 0}

        def enemy_signal(chunk: str) -> None:
            if "Also here:" in chunk:
                enemies["count"] = 1 if "rat" in chunk else 0

        sent: list[str] = []
        walker = AutoWalkManager(
            tracker,
            rooms,
            enemy_count=lambda: enemies["count"],
            should_pause_commands=lambda: False,
            send_command=sent.append,
            scheduler=scheduler,
        )
        router = MessageRouter(tracker, walker, enemy_signal=enemy_signal)
        router.process("Town Square\r\nObvious exits: north, east\r\n[HP=100/MA=20]:")
        return router, walker, sent, enemies

    def test_walk_driven_by_server_text(self, rooms: FakeGraph, world) -> None:
        router, walker, sent, _ = world
        completed = Mock()
        walker.walk_completed.connect(completed)

        walker.start_walk(make_path(rooms, ["1/1", "1/2", "1/3"]))
        assert sent == ["n"]

        router.process("\r\nNorth Street\r\nObvious exits: north, south\r\n")
        assert sent == ["n", "n"]

        router.process("[HP=100/MA=20]:\r\nCross")
        router.process("roads\r\nObvious exits: north, south,")
        router.process("\r\nwest\r\n[HP=100/MA=20]:")
        router.process("\r\n")

        completed.assert_called_once_with("Crossroads")
        assert walker.state is AutoWalkState.COMPLETED

    def test_enemies_in_arrival_chunk_hold_next_step(self, rooms: FakeGraph, world) -> None:
        router, walker, sent, enemies = world
        walker.start_walk(make_path(rooms, ["1/1", "1/2", "1/3"]))

        router.process("North Street\r\nAlso here: giant rat.\r\nObvious exits: north, south\r\n")
        assert walker.state is AutoWalkState.WAITING_FOR_COMBAT
        assert sent == ["n"]

        router.process("*Combat Engaged*\r\nYou slash at the giant rat!\r\n")
        enemies["count"] = 0
        router.process("The giant rat collapses.\r\n*Combat Off*\r\n")

        assert walker.state is AutoWalkState.WALKING
        assert sent == ["n", "n"]

    def test_death_during_walk(self, rooms: FakeGraph, world) -> None:
        router, walker, _, _ = world
        failed = Mock()
        walker.walk_failed.connect(failed)
        walker.start_walk(make_path(rooms, ["1/1", "1/2", "1/3"]))

        router.process("Due to a miracle, you have been saved!\r\n")

        failed.assert_called_once_with("Player died during walk.")
        assert walker.state is AutoWalkState.FAILED

    def test_walk_through_identically_named_rooms(
        self, rooms: FakeGraph, tracker: RoomTracker, scheduler: ManualScheduler
    ) -> None:
        sent: list[str] = []
        walker = AutoWalkManager(
            tracker,
            rooms,
            enemy_count=lambda: 0,
            should_pause_commands=lambda: False,
            send_command=sent.append,
            scheduler=scheduler,
        )
        router = MessageRouter(tracker, walker)
        router.process("Stairwell\r\nObvious exits: north\r\n")
        walker.start_walk(make_path(rooms, ["3/3", "3/1", "3/2", "3/4"]))

        router.process("Corridor\r\nObvious exits: north, south\r\n")
        assert tracker.current_room_key == "3/1"
        assert tracker.pending_movement.command == "n"
        assert tracker.pending_movement.from_key == "3/1"

        router.process("Corridor\r\nObvious exits: north, south\r\n")
        assert tracker.current_room_key == "3/2"
        assert walker.current_step_index == 2

        router.process("Landing\r\nObvious exits: south\r\n")
        assert walker.state is AutoWalkState.COMPLETED
        assert sent == ["n", "n", "n"]
