# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared constants for mudnav."""

from __future__ import annotations

# Longest words first so "northeast" wins over "north" / "east".
DIRECTION_WORDS: tuple[str, ...] = (
    "northeast",
    "northwest",
    "southeast",
    "southwest",
    "north",
    "south",
    "east",
    "west",
    "up",
    "down",
)

DIRECTION_WORD_TO_KEY: dict[str, str] = {
    "north": "N",
    "south": "S",
    "east": "E",
    "west": "W",
    "northeast": "NE",
    "northwest": "NW",
    "southeast": "SE",
    "southwest": "SW",
    "up": "U",
    "down": "D",
}

# Player-typed movement commands (short and long form) -> direction key
MOVE_COMMAND_TO_KEY: dict[str, str] = {
    "n": "N",
    "s": "S",
    "e": "E",
    "w": "W",
    "ne": "NE",
    "nw": "NW",
    "se": "SE",
    "sw": "SW",
    "u": "U",
    "d": "D",
    **DIRECTION_WORD_TO_KEY,
}

LOOK_PREFIXES: tuple[str, ...] = ("l ", "look ")

# Room block markers
OBVIOUS_EXITS_PREFIX = "Obvious exits:"
YOU_NOTICE_PREFIX = "You notice "
ALSO_HERE_PREFIX = "Also here:"
DIMLY_LIT_LINE = "The room is dimly lit"
HP_STATUS_MARKER = "[HP="
NO_EXITS_WORDS: frozenset[str] = frozenset({"none", "none!"})

DEFAULT_BLOCKED_MODIFIERS: tuple[str, ...] = ("closed",)

DEFAULT_MOVEMENT_FAILURE_MESSAGES: tuple[str, ...] = (
    "There is no exit in that direction!",
    "The door is closed!",
    "The gate is closed!",
)

# Inbound server markers
COMBAT_ENGAGED_MARKER = "*Combat Engaged*"
COMBAT_OFF_MARKER = "*Combat Off*"
PLAYER_DEATH_MARKER = "due to a miracle, you have been saved"

# Buffer / timing defaults
DEFAULT_MAX_BUFFER_LINES = 50
DEFAULT_STEP_TIMEOUT_S = 10.0
DEFAULT_MAX_RECALCULATIONS = 3
DEFAULT_PAUSE_POLL_INTERVAL_S = 1.0
DEFAULT_COMBAT_RESUME_RETRIES = 3
DEFAULT_COMBAT_RESUME_RETRY_S = 1.0
