# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared builders and fakes for the test suite."""

from __future__ import annotations

from unittest.mock import Mock

from mudnav.events import EventHook
from mudnav.graph import PathResult, PathStep, RoomExit, RoomIndex, RoomNode


def room(key: str, name: str, **exits: str) -> RoomNode:
    """Build a RoomNode; keyword args map direction key -> destination key."""
    return RoomNode(
        key=key,
        name=name,
        exits=[RoomExit(direction=direction.upper(), destination_key=dest) for direction, dest in exits.items()],
    )


TOWN_ROOMS = [
    room("1/1", "Town Square", n="1/2", e="1/5"),
    room("1/2", "North Street", s="1/1", n="1/3"),
    room("1/3", "Crossroads", s="1/2", n="1/4", w="1/9"),
    room("1/4", "Temple Steps", s="1/3"),
    # Two alleys share a name but have disjoint exits
    room("1/5", "Dark Alley", w="1/1", e="1/6"),
    room("1/6", "Dark Alley", n="1/7", s="1/8"),
    room("1/7", "Sewer Grate", s="1/6"),
    room("1/8", "Quiet Lane", n="1/6"),
    room("1/9", "Market Stall", e="1/3"),
    # Two corridors with identical exits
    room("3/1", "Corridor", n="3/2", s="3/3"),
    room("3/2", "Corridor", n="3/4", s="3/1"),
    room("3/3", "Stairwell", n="3/1"),
    room("3/4", "Landing", s="3/2"),
]


class FakeGraph(RoomIndex):
    """RoomIndex plus a scripted pathfinder."""

    def __init__(self, rooms: list[RoomNode]) -> None:
        super().__init__(rooms)
        self.find_path = Mock(side_effect=self._chain_to)
        self.routes: dict[tuple[str, str], list[str]] = {}

    def _chain_to(self, from_key: str, to_key: str) -> PathResult:
        chain = self.routes.get((from_key, to_key))
        if chain is None:
            return PathResult(success=False, start_key=from_key, destination_key=to_key, error_message="no route")
        return make_path(self, [from_key, *chain])


def make_path(rooms: RoomIndex, keys: list[str]) -> PathResult:
    """Turn a chain of adjacent room keys into a PathResult."""
    steps: list[PathStep] = []
    for from_key, to_key in zip(keys, keys[1:], strict=False):
        origin = rooms.get_room(from_key)
        assert origin is not None, from_key
        room_exit = next(e for e in origin.exits if e.destination_key == to_key)
        target = rooms.get_room(to_key)
        steps.append(
            PathStep(
                from_key=from_key,
                to_key=to_key,
                command=room_exit.move_command,
                to_name=target.name if target else "",
            )
        )
    return PathResult(success=True, steps=steps, start_key=keys[0], destination_key=keys[-1])


def room_block(
    name: str,
    exits: str,
    *,
    description: list[str] | None = None,
    notice: list[str] | None = None,
    also_here: list[str] | None = None,
    dimly_lit: bool = False,
) -> list[str]:
    """Lines of a room display in server order."""
    lines = [name]
    lines += description or []
    lines += notice or []
    lines += also_here or []
    lines.append(f"Obvious exits: {exits}")
    if dimly_lit:
        lines.append("The room is dimly lit")
    return lines


class FakeTracker:
    """Stands in for RoomTracker in walker tests."""

    def __init__(self, rooms: RoomIndex, start: str | None = None) -> None:
        self._rooms = rooms
        self.room_changed = EventHook("room_changed")
        self.current_room = rooms.get_room(start) if start else None
        self.commands: list[str] = []

    @property
    def current_room_key(self) -> str:
        return self.current_room.key if self.current_room else ""

    def record_player_command(self, command: str) -> None:
        self.commands.append(command)

    def arrive(self, key: str | None) -> None:
        self.current_room = self._rooms.get_room(key) if key else None
        self.room_changed.emit(self.current_room)
