# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Map graph contract consumed by the tracker and the walker.

The map data source and its pathfinder live outside mudnav. This module
defines the shapes they exchange with us and a small in-memory lookup index
used by the replay tooling and tests.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import yaml
from pydantic import BaseModel, ConfigDict, Field

from mudnav.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = get_logger(__name__)


class RoomExit(BaseModel):
    """A single exit from a room."""

    direction: str  # "N", "SE", "U", ...
    destination_key: str
    command: str = ""  # what the player types; empty means the lowercase direction

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def move_command(self) -> str:
        return self.command or self.direction.lower()


class RoomNode(BaseModel):
    """A room in the map graph. Owned by the graph provider; read-only here."""

    key: str  # e.g. "1/297"
    name: str
    exits: list[RoomExit] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", frozen=True)

    def exit_for(self, direction_key: str) -> RoomExit | None:
        wanted = direction_key.upper()
        for room_exit in self.exits:
            if room_exit.direction.upper() == wanted:
                return room_exit
        return None

    def exit_directions(self) -> set[str]:
        return {room_exit.direction.upper() for room_exit in self.exits}

    def __str__(self) -> str:
        return f"[{self.key}] {self.name}"


class PathStep(BaseModel):
    """One movement in a planned route."""

    from_key: str
    to_key: str
    command: str
    to_name: str = ""

    model_config = ConfigDict(extra="ignore", frozen=True)

    def __str__(self) -> str:
        return f"{self.command} -> [{self.to_key}] {self.to_name}"


class PathResult(BaseModel):
    """Result of a shortest-path query."""

    success: bool = False
    steps: list[PathStep] = Field(default_factory=list)
    destination_key: str = ""
    start_key: str = ""
    error_message: str = ""

    model_config = ConfigDict(extra="ignore")

    @property
    def total_steps(self) -> int:
        return len(self.steps)


@runtime_checkable
class RoomLookup(Protocol):
    """Read-only room queries the tracker needs."""

    @property
    def is_loaded(self) -> bool: ...

    def get_room(self, key: str) -> RoomNode | None: ...

    def get_rooms_by_name(self, name: str) -> list[RoomNode]: ...

    def search_by_name(self, query: str, limit: int = 100) -> list[RoomNode]: ...


@runtime_checkable
class RoomGraphProvider(RoomLookup, Protocol):
    """Full graph contract, including the external pathfinder."""

    def find_path(self, from_key: str, to_key: str) -> PathResult: ...


class RoomIndex:
    """In-memory room lookup keyed by room key and case-folded name.

    Name lookups return rooms in insertion order, which is the stable order
    the matcher relies on when scores tie.
    """

    def __init__(self, rooms: Iterable[RoomNode] = ()) -> None:
        self._rooms: dict[str, RoomNode] = {}
        self._by_name: dict[str, list[RoomNode]] = {}
        for room in rooms:
            self.add(room)

    @property
    def is_loaded(self) -> bool:
        return bool(self._rooms)

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    def add(self, room: RoomNode) -> None:
        previous = self._rooms.get(room.key)
        if previous is not None and previous.name:
            self._by_name[_fold(previous.name)].remove(previous)
        self._rooms[room.key] = room
        if room.name:
            self._by_name.setdefault(_fold(room.name), []).append(room)

    def get_room(self, key: str) -> RoomNode | None:
        return self._rooms.get(key)

    def get_rooms_by_name(self, name: str) -> list[RoomNode]:
        return list(self._by_name.get(_fold(name), []))

    def search_by_name(self, query: str, limit: int = 100) -> list[RoomNode]:
        """Exact name matches first, then substring matches, up to ``limit``."""
        term = _fold(query)
        if not term or limit <= 0:
            return []

        results: list[RoomNode] = list(self._by_name.get(term, []))[:limit]
        seen = {room.key for room in results}
        for name, rooms in self._by_name.items():
            if len(results) >= limit:
                break
            if term not in name:
                continue
            for room in rooms:
                if room.key in seen:
                    continue
                results.append(room)
                seen.add(room.key)
                if len(results) >= limit:
                    break
        return results

    @classmethod
    def from_file(cls, path: Path | str) -> RoomIndex:
        """Load a list of room dumps from a .json or .yaml file."""
        path = Path(path)
        text = path.read_text()
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
        if isinstance(data, dict):
            data = data.get("rooms", [])
        index = cls(RoomNode.model_validate(row) for row in data or [])
        logger.info("room_index_loaded", path=str(path), rooms=index.room_count)
        return index


def _fold(name: str) -> str:
    return name.strip().casefold()
