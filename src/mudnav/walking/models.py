# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Auto-walk state and session models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mudnav.graph import PathStep


class AutoWalkState(StrEnum):
    IDLE = "idle"
    WALKING = "walking"
    WAITING_FOR_COMBAT = "waiting_for_combat"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"


ACTIVE_STATES = frozenset({AutoWalkState.WALKING, AutoWalkState.WAITING_FOR_COMBAT, AutoWalkState.PAUSED})


class WalkMode(StrEnum):
    """Walk behaviour. Only NORMAL (pause on combat, resume when clear) exists."""

    NORMAL = "normal"


class WalkFailureKind(StrEnum):
    """Why a walk failed.

    NO_PATH, TIMEOUT, TOO_MANY_RECALCULATIONS and UNREACHABLE mean the walker
    gave up; PLAYER_DIED means the world stopped it.
    """

    NO_PATH = "no_path"
    TIMEOUT = "timeout"
    TOO_MANY_RECALCULATIONS = "too_many_recalculations"
    UNREACHABLE = "unreachable"
    PLAYER_DIED = "player_died"

    @property
    def is_external(self) -> bool:
        return self is WalkFailureKind.PLAYER_DIED


@dataclass
class WalkSession:
    """The one active walk: planned steps and progress along them."""

    steps: list[PathStep]
    destination_key: str
    destination_name: str
    walk_mode: WalkMode = WalkMode.NORMAL
    current_step_index: int = 0
    recalc_count: int = 0
    step_retried: bool = False
    combat_resume_retries: int = 0

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def current_step(self) -> PathStep | None:
        if 0 <= self.current_step_index < len(self.steps):
            return self.steps[self.current_step_index]
        return None

    def replace_steps(self, steps: list[PathStep]) -> None:
        self.steps = list(steps)
        self.current_step_index = 0
