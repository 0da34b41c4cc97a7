# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Resolve a detected room display to a single node in the map graph."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from mudnav.constants import MOVE_COMMAND_TO_KEY
from mudnav.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mudnav.graph import RoomLookup, RoomNode
    from mudnav.tracking.exits import VisibleExit

logger = get_logger(__name__)

EXACT_EXIT_MATCH_WEIGHT = 10


@dataclass
class PendingMovement:
    """The last movement or look command the player sent."""

    command: str | None = None
    from_key: str | None = None
    look_direction: str | None = None

    @property
    def has_move(self) -> bool:
        return self.command is not None and self.from_key is not None

    def clear_move(self) -> None:
        self.command = None
        self.from_key = None

    def clear(self) -> None:
        self.clear_move()
        self.look_direction = None


class MatchStrategy(StrEnum):
    PREDICTION = "prediction"
    UNIQUE_NAME = "unique_name"
    EXIT_SCORE = "exit_score"
    EXIT_SCORE_PREDICTION_TIEBREAK = "exit_score_prediction_tiebreak"
    PREDICTION_FALLBACK = "prediction_fallback"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class MatchResult:
    room: RoomNode | None
    strategy: MatchStrategy
    candidate_count: int = 0

    @property
    def resolved(self) -> bool:
        return self.room is not None


def score_candidate(candidate: RoomNode, detected: set[str]) -> int:
    """Score how well a candidate's exits explain the detected exit set.

    An identical exit set scores ten per direction; otherwise matches minus
    mismatches. Only positive scores are usable.
    """
    candidate_dirs = candidate.exit_directions()
    matched = sum(1 for direction in detected if direction in candidate_dirs)
    mismatched = len(detected) - matched
    if candidate_dirs == detected:
        return EXACT_EXIT_MATCH_WEIGHT * matched
    return matched - mismatched


class RoomMatcher:
    """Applies the disambiguation strategies in fixed order; first success wins.

    1. movement prediction (origin's exit in the command's direction, name must agree)
    2. unique name lookup
    3. exit-set scoring among same-named rooms, prediction breaks ties,
       otherwise the first top scorer in provider order
    4. movement prediction again
    5. unresolved
    """

    def __init__(self, rooms: RoomLookup) -> None:
        self._rooms = rooms

    def predict(self, from_key: str, command: str) -> RoomNode | None:
        """Destination reached from ``from_key`` by ``command``, per the graph."""
        origin = self._rooms.get_room(from_key)
        if origin is None:
            return None
        direction = MOVE_COMMAND_TO_KEY.get(command.strip().lower())
        if direction is None:
            return None
        room_exit = origin.exit_for(direction)
        if room_exit is None:
            return None
        return self._rooms.get_room(room_exit.destination_key)

    def match(
        self,
        name: str,
        exits: Sequence[VisibleExit],
        pending: PendingMovement | None = None,
    ) -> MatchResult:
        if not self._rooms.is_loaded:
            return MatchResult(None, MatchStrategy.UNRESOLVED)

        predicted = self._predicted(pending)
        if predicted is not None and _same_name(predicted.name, name):
            return MatchResult(predicted, MatchStrategy.PREDICTION, 1)

        candidates = self._rooms.get_rooms_by_name(name)
        if not candidates:
            return MatchResult(None, MatchStrategy.UNRESOLVED)
        if len(candidates) == 1:
            return MatchResult(candidates[0], MatchStrategy.UNIQUE_NAME, 1)

        detected = {visible.direction_key.upper() for visible in exits}
        scored = [(candidate, score_candidate(candidate, detected)) for candidate in candidates]
        scored = [(candidate, score) for candidate, score in scored if score > 0]
        if scored:
            best_score = max(score for _, score in scored)
            tied = [candidate for candidate, score in scored if score == best_score]
            if len(tied) == 1:
                return MatchResult(tied[0], MatchStrategy.EXIT_SCORE, len(candidates))
            if predicted is not None:
                for candidate in tied:
                    if candidate.key == predicted.key:
                        return MatchResult(candidate, MatchStrategy.EXIT_SCORE_PREDICTION_TIEBREAK, len(candidates))
            return MatchResult(tied[0], MatchStrategy.EXIT_SCORE, len(candidates))

        if predicted is not None and _same_name(predicted.name, name):
            return MatchResult(predicted, MatchStrategy.PREDICTION_FALLBACK, len(candidates))

        logger.warning("room_ambiguous", name=name, candidates=len(candidates))
        return MatchResult(None, MatchStrategy.UNRESOLVED, len(candidates))

    def _predicted(self, pending: PendingMovement | None) -> RoomNode | None:
        if pending is None or not pending.has_move:
            return None
        return self.predict(pending.from_key, pending.command)


def _same_name(left: str, right: str) -> bool:
    return left.strip().casefold() == right.strip().casefold()
