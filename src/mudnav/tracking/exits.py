# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Parse the text of an "Obvious exits:" line."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from mudnav.constants import DEFAULT_BLOCKED_MODIFIERS, DIRECTION_WORD_TO_KEY, DIRECTION_WORDS, NO_EXITS_WORDS
from mudnav.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = get_logger(__name__)

_DIRECTION_ALTERNATION = "|".join(DIRECTION_WORDS)
_CONTAINS_DIRECTION_RE = re.compile(rf"\b(?:{_DIRECTION_ALTERNATION})\b", re.IGNORECASE)
_ENDS_WITH_DIRECTION_RE = re.compile(rf"\b(?:{_DIRECTION_ALTERNATION})$", re.IGNORECASE)


class VisibleExit(BaseModel):
    """An exit as shown on the "Obvious exits:" line."""

    direction_key: str  # "N", "SE", "U", ...
    direction_word: str  # "north", "southeast", "up", ...
    modifier: str = ""  # "open door", "closed gate", ...
    is_blocked: bool = False

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if not self.modifier:
            return self.direction_word
        return f"{self.modifier} {self.direction_word}"


def contains_direction_word(text: str) -> bool:
    return _CONTAINS_DIRECTION_RE.search(text) is not None


def ends_with_direction_word(text: str) -> bool:
    return _ENDS_WITH_DIRECTION_RE.search(text.rstrip()) is not None


def is_blocked_modifier(modifier: str, blocked_modifiers: Iterable[str] = DEFAULT_BLOCKED_MODIFIERS) -> bool:
    if not modifier.strip():
        return False
    lowered = modifier.lower()
    return any(blocked.lower() in lowered for blocked in blocked_modifiers)


def parse_exit_segment(
    segment: str,
    blocked_modifiers: Iterable[str] = DEFAULT_BLOCKED_MODIFIERS,
) -> VisibleExit | None:
    """Parse one comma-separated segment such as "open door east".

    The direction word must end the segment; anything before it is the modifier.
    """
    stripped = segment.strip()
    lowered = stripped.lower()
    for word in DIRECTION_WORDS:
        if lowered == word or lowered.endswith(" " + word):
            modifier = stripped[: len(stripped) - len(word)].strip()
            return VisibleExit(
                direction_key=DIRECTION_WORD_TO_KEY[word],
                direction_word=word,
                modifier=modifier,
                is_blocked=is_blocked_modifier(modifier, blocked_modifiers),
            )
    return None


def parse_obvious_exits(
    exits_text: str,
    blocked_modifiers: Iterable[str] = DEFAULT_BLOCKED_MODIFIERS,
    on_unparsed: Callable[[str], None] | None = None,
) -> list[VisibleExit]:
    """Parse the content after "Obvious exits:" into VisibleExit records.

    "NONE" / "NONE!" yields no exits. Segments without a trailing direction
    word are logged, reported to ``on_unparsed`` and skipped.
    """
    text = exits_text.strip()
    if not text or text.lower() in NO_EXITS_WORDS:
        return []

    blocked = list(blocked_modifiers)
    results: list[VisibleExit] = []
    for raw in text.split(","):
        segment = raw.strip().rstrip(".").strip()
        if not segment:
            continue
        visible = parse_exit_segment(segment, blocked)
        if visible is None:
            logger.warning("exit_segment_unparsed", segment=segment)
            if on_unparsed is not None:
                on_unparsed(segment)
            continue
        results.append(visible)
    return results
