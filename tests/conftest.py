# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest
from helpers import TOWN_ROOMS, FakeGraph

from mudnav.scheduling import ManualScheduler


@pytest.fixture
def rooms() -> FakeGraph:
    return FakeGraph(TOWN_ROOMS)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def log_lines() -> list[str]:
    return []
