# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration models for room tracking and auto-walk."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

from mudnav.constants import (
    DEFAULT_BLOCKED_MODIFIERS,
    DEFAULT_COMBAT_RESUME_RETRIES,
    DEFAULT_COMBAT_RESUME_RETRY_S,
    DEFAULT_MAX_BUFFER_LINES,
    DEFAULT_MAX_RECALCULATIONS,
    DEFAULT_MOVEMENT_FAILURE_MESSAGES,
    DEFAULT_PAUSE_POLL_INTERVAL_S,
    DEFAULT_STEP_TIMEOUT_S,
)
from mudnav.logging import get_logger

logger = get_logger(__name__)


class TrackerConfig(BaseModel):
    """Room tracker tuning."""

    max_buffer_lines: int = Field(default=DEFAULT_MAX_BUFFER_LINES, ge=1)
    # Exit modifiers that mark an exit as blocked ("closed door north")
    blocked_modifiers: list[str] = Field(default_factory=lambda: list(DEFAULT_BLOCKED_MODIFIERS))
    movement_failure_messages: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MOVEMENT_FAILURE_MESSAGES)
    )

    model_config = ConfigDict(extra="ignore")


class WalkConfig(BaseModel):
    """Auto-walk timing and retry limits."""

    step_timeout_s: float = Field(default=DEFAULT_STEP_TIMEOUT_S, gt=0)
    max_recalculations: int = Field(default=DEFAULT_MAX_RECALCULATIONS, ge=0)
    pause_poll_interval_s: float = Field(default=DEFAULT_PAUSE_POLL_INTERVAL_S, gt=0)
    combat_resume_retries: int = Field(default=DEFAULT_COMBAT_RESUME_RETRIES, ge=0)
    combat_resume_retry_s: float = Field(default=DEFAULT_COMBAT_RESUME_RETRY_S, gt=0)

    model_config = ConfigDict(extra="ignore")


class NavigationConfig(BaseModel):
    """Complete navigation configuration."""

    tracker: TrackerConfig = Field(default_factory=TrackerConfig)
    walk: WalkConfig = Field(default_factory=WalkConfig)

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_yaml(cls, path: Path | str) -> NavigationConfig:
        path = Path(path)
        logger.info("config_loading", path=str(path))
        data = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(data)

    def to_yaml(self, path: Path | str) -> None:
        path = Path(path)
        logger.info("config_saving", path=str(path))
        path.write_text(self.dump_yaml())

    def dump_yaml(self) -> str:
        data = self.model_dump(mode="json")
        return yaml.dump(data, default_flow_style=False, sort_keys=False)


def load_config(path: Path | str) -> NavigationConfig:
    return NavigationConfig.from_yaml(path)
