# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exception types and movement-failure detection."""

from __future__ import annotations

from collections.abc import Iterable

from mudnav.constants import DEFAULT_MOVEMENT_FAILURE_MESSAGES


class NavigationError(Exception):
    """Base class for mudnav errors."""


class CollaboratorError(NavigationError, ValueError):
    """Raised at construction time when a required collaborator is missing."""

    def __init__(self, owner: str, name: str):
        super().__init__(f"{owner} requires a '{name}' collaborator")
        self.owner = owner
        self.name = name


def require(owner: str, **collaborators: object) -> None:
    """Raise CollaboratorError for the first collaborator that is None."""
    for name, value in collaborators.items():
        if value is None:
            raise CollaboratorError(owner, name)


class MovementFailureDetector:
    """Detects server replies that mean a movement command did not move us.

    Patterns are matched as case-insensitive substrings, first registered wins.
    """

    def __init__(self, messages: Iterable[str] = DEFAULT_MOVEMENT_FAILURE_MESSAGES):
        self.failure_patterns: dict[str, list[str]] = {}
        for message in messages:
            self.add_failure_pattern(_failure_type(message), [message])

    def add_failure_pattern(self, failure_type: str, patterns: list[str]) -> None:
        """Register patterns for a failure type.

        Args:
            failure_type: Identifier for this failure (e.g., "no_exit")
            patterns: Phrases to search for, compared case-insensitively
        """
        self.failure_patterns.setdefault(failure_type, []).extend(p.lower() for p in patterns)

    def detect(self, line: str) -> str | None:
        """Return the failure type for a line, or None if it is not a movement failure."""
        line_lower = line.lower()
        for failure_type, patterns in self.failure_patterns.items():
            for pattern in patterns:
                if pattern in line_lower:
                    return failure_type
        return None


def _failure_type(message: str) -> str:
    lowered = message.lower()
    if "no exit" in lowered:
        return "no_exit"
    if "door" in lowered:
        return "door_closed"
    if "gate" in lowered:
        return "gate_closed"
    return "movement_blocked"
