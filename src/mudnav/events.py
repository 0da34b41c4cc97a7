# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""One-way notification hooks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mudnav.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger(__name__)


class EventHook:
    """Ordered list of listeners for one notification.

    A listener that raises is logged and skipped; the remaining listeners
    still run and the emitter's state machine is unaffected.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Callable[..., Any]] = []

    def connect(self, listener: Callable[..., Any]) -> Callable[..., Any]:
        self._listeners.append(listener)
        return listener

    def disconnect(self, listener: Callable[..., Any]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, *args: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(*args)
            except Exception as exc:
                logger.warning("listener_failed", hook=self.name, error=str(exc))

    def __len__(self) -> int:
        return len(self._listeners)
