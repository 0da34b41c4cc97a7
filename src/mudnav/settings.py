# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Application settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mudnav.config import NavigationConfig


class Settings(BaseSettings):
    log_level: str = "WARNING"
    navigation: NavigationConfig = Field(default_factory=NavigationConfig)

    model_config = SettingsConfigDict(
        env_prefix="MUDNAV_",
        env_nested_delimiter="__",
        extra="ignore",
    )
