# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Auto-walk along a planned path."""

from __future__ import annotations

from .executor import AutoWalkManager
from .models import ACTIVE_STATES, AutoWalkState, WalkFailureKind, WalkMode, WalkSession

__all__ = [
    "ACTIVE_STATES",
    "AutoWalkManager",
    "AutoWalkState",
    "WalkFailureKind",
    "WalkMode",
    "WalkSession",
]
