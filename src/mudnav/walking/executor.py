# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Auto-walk executor.

Sends one movement command at a time and waits for the room tracker to
confirm arrival before sending the next. Pauses for combat and for the
external "commands paused" predicate, retries a silent step once, and
recalculates the route (a bounded number of times per walk) whenever the
player turns up somewhere unexpected.

All entry points, including timer callbacks, must run on the same
execution context as the tracker.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from mudnav.config import WalkConfig
from mudnav.errors import require
from mudnav.events import EventHook
from mudnav.logging import get_logger
from mudnav.scheduling import TimerSlots
from mudnav.walking.models import ACTIVE_STATES, AutoWalkState, WalkFailureKind, WalkMode, WalkSession

if TYPE_CHECKING:
    from collections.abc import Callable

    from mudnav.graph import PathResult, RoomGraphProvider, RoomNode
    from mudnav.scheduling import Scheduler
    from mudnav.tracking.tracker import RoomTracker

logger = get_logger(__name__)

STEP_TIMER = "step"
PAUSE_POLL_TIMER = "pause_poll"
COMBAT_RETRY_TIMER = "combat_retry"

NO_VALID_PATH_REASON = "No valid path to walk."
TIMEOUT_REASON = "Movement timed out. The path may be blocked."
TOO_MANY_RECALCULATIONS_REASON = "Walk aborted: too many recalculations."
PLAYER_DIED_REASON = "Player died during walk."


class AutoWalkManager:
    """Walks a precomputed path step by step.

    Notifications:

    - ``walk_progress(step_number, total_steps, target_room_name)``
    - ``walk_state_changed(AutoWalkState)``
    - ``walk_completed(destination_name)``
    - ``walk_failed(reason)``
    - ``log_message(text)``
    """

    def __init__(
        self,
        tracker: RoomTracker,
        graph: RoomGraphProvider,
        *,
        enemy_count: Callable[[], int],
        should_pause_commands: Callable[[], bool],
        send_command: Callable[[str], None],
        scheduler: Scheduler,
        clear_room_enemies: Callable[[], None] | None = None,
        config: WalkConfig | None = None,
        log_sink: Callable[[str], None] | None = None,
    ) -> None:
        require(
            "AutoWalkManager",
            tracker=tracker,
            graph=graph,
            enemy_count=enemy_count,
            should_pause_commands=should_pause_commands,
            send_command=send_command,
            scheduler=scheduler,
        )
        self._tracker = tracker
        self._graph = graph
        self._enemy_count = enemy_count
        self._should_pause_commands = should_pause_commands
        self._send_command = send_command
        self._clear_room_enemies = clear_room_enemies
        self._config = config or WalkConfig()
        self._timers = TimerSlots(scheduler)

        self._state = AutoWalkState.IDLE
        self._session: WalkSession | None = None
        self._failure_kind: WalkFailureKind | None = None

        self.walk_progress = EventHook("walk_progress")
        self.walk_state_changed = EventHook("walk_state_changed")
        self.walk_completed = EventHook("walk_completed")
        self.walk_failed = EventHook("walk_failed")
        self.log_message = EventHook("walk_log")
        if log_sink is not None:
            self.log_message.connect(log_sink)

        tracker.room_changed.connect(self.on_room_changed)

    # -- properties ---------------------------------------------------------

    @property
    def state(self) -> AutoWalkState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state in ACTIVE_STATES

    @property
    def current_step_index(self) -> int:
        return self._session.current_step_index if self._session else 0

    @property
    def total_steps(self) -> int:
        return self._session.total_steps if self._session else 0

    @property
    def destination_key(self) -> str:
        return self._session.destination_key if self._session else ""

    @property
    def destination_name(self) -> str:
        return self._session.destination_name if self._session else ""

    @property
    def recalc_count(self) -> int:
        return self._session.recalc_count if self._session else 0

    @property
    def walk_mode(self) -> WalkMode:
        return self._session.walk_mode if self._session else WalkMode.NORMAL

    @property
    def failure_kind(self) -> WalkFailureKind | None:
        """Kind of the most recent failure; reset when a new walk starts."""
        return self._failure_kind

    @property
    def session(self) -> WalkSession | None:
        if self._session is None:
            return None
        return replace(self._session, steps=list(self._session.steps))

    # -- public API ---------------------------------------------------------

    def start_walk(self, path: PathResult | None, mode: WalkMode = WalkMode.NORMAL) -> bool:
        """Start walking ``path``. Any walk already in progress is stopped first."""
        if path is None or not path.success or not path.steps:
            # A rejected request leaves an active walk and its failure record alone.
            if not self.is_active:
                self._failure_kind = WalkFailureKind.NO_PATH
            logger.warning("walk_rejected", reason="no_valid_path", walk_active=self.is_active)
            self.walk_failed.emit(NO_VALID_PATH_REASON)
            return False

        if self.is_active:
            self.stop()
        self._timers.cancel_all()

        destination = self._graph.get_room(path.destination_key)
        self._session = WalkSession(
            steps=list(path.steps),
            destination_key=path.destination_key,
            destination_name=destination.name if destination else path.destination_key,
            walk_mode=mode,
        )
        self._failure_kind = None

        session = self._session
        logger.info(
            "walk_started",
            destination=session.destination_key,
            name=session.destination_name,
            steps=session.total_steps,
        )
        self._log(
            f"Walking to [{session.destination_key}] {session.destination_name} - {session.total_steps} steps"
        )
        self._set_state(AutoWalkState.WALKING)
        self._send_next_step()
        return True

    def stop(self) -> None:
        """Cancel the current walk and return to Idle."""
        if self._state is AutoWalkState.IDLE:
            return

        self._timers.cancel_all()
        was_active = self.is_active
        step_index = self.current_step_index
        total = self.total_steps
        self._session = None
        self._set_state(AutoWalkState.IDLE)

        if was_active:
            logger.info("walk_stopped", step=step_index + 1, total=total)
            self._log(f"Auto-walk stopped at step {step_index + 1}/{total}")

    def on_combat_state_changed(self, in_combat: bool) -> None:
        """Combat engaged (True) or ended (False)."""
        if self._session is not None:
            self._session.combat_resume_retries = 0

        if in_combat and self._state in (AutoWalkState.WALKING, AutoWalkState.WAITING_FOR_COMBAT):
            self._timers.cancel_all()
            if self._state is not AutoWalkState.WAITING_FOR_COMBAT:
                logger.info("walk_paused_for_combat", step=self.current_step_index + 1)
                self._log("Auto-walk paused - combat engaged")
            self._set_state(AutoWalkState.WAITING_FOR_COMBAT)
        elif not in_combat and self._state is AutoWalkState.WAITING_FOR_COMBAT:
            self._try_resume_after_combat()

    def on_player_death(self) -> None:
        if not self.is_active:
            return
        logger.warning("walk_aborted", reason="player_died")
        self._log("Auto-walk aborted - player died")
        self._fail(WalkFailureKind.PLAYER_DIED, PLAYER_DIED_REASON)

    def on_disconnected(self) -> None:
        """Connection lost: drop the walk silently (no failure notification)."""
        if not self.is_active:
            return
        self._timers.cancel_all()
        self._session = None
        logger.info("walk_dropped", reason="disconnected")
        self._set_state(AutoWalkState.IDLE)

    def on_room_changed(self, room: RoomNode | None) -> None:
        """Tracker confirmed a new room. Advance, complete or recalculate."""
        # Still tracked while waiting for combat: a step sent before combat
        # engaged may land, and must not be repeated on resume.
        if self._state not in (AutoWalkState.WALKING, AutoWalkState.WAITING_FOR_COMBAT):
            return
        if room is None or self._session is None:
            return

        session = self._session
        self._timers.cancel(STEP_TIMER)

        if room.key == session.destination_key:
            self._complete()
            return

        step = session.current_step
        if step is not None and room.key == step.to_key:
            session.current_step_index += 1
            if session.current_step_index >= session.total_steps:
                self._complete()
                return
            if self._state is AutoWalkState.WALKING:
                self._send_next_step()
            return

        if self._state is AutoWalkState.WALKING:
            self._recalculate(room)

    # -- step execution -----------------------------------------------------

    def _send_next_step(self) -> None:
        session = self._session
        if session is None:
            return

        if self._should_pause_commands():
            logger.info("walk_paused", reason="commands_paused")
            self._log("Auto-walk paused - commands paused")
            self._set_state(AutoWalkState.PAUSED)
            self._timers.arm(PAUSE_POLL_TIMER, self._config.pause_poll_interval_s, self._on_pause_poll)
            return

        step = session.current_step
        if step is None:
            self._complete()
            return
        session.step_retried = False

        current = self._tracker.current_room
        if current is not None and step.from_key and current.key != step.from_key:
            logger.info("walk_drift", expected=step.from_key, actual=current.key)
            self._log(f"Expected to be in [{step.from_key}] but in [{current.key}] - recalculating")
            self._recalculate(current)
            return

        enemies = self._enemy_count()
        if enemies > 0:
            logger.info("walk_paused_for_combat", enemies=enemies, step=session.current_step_index + 1)
            self._log(f"{enemies} enemies in room - pausing walk for combat")
            self._timers.cancel_all()
            self._set_state(AutoWalkState.WAITING_FOR_COMBAT)
            return

        self.walk_progress.emit(session.current_step_index + 1, session.total_steps, step.to_name)
        logger.debug(
            "walk_step",
            step=session.current_step_index + 1,
            total=session.total_steps,
            command=step.command,
            from_key=step.from_key,
            to_key=step.to_key,
        )
        self._transmit(step.command)
        # Enemies of the room we are leaving must not pause us in the next one.
        if self._clear_room_enemies is not None:
            self._clear_room_enemies()
        self._timers.arm(STEP_TIMER, self._config.step_timeout_s, self._on_step_timeout)

    def _transmit(self, command: str) -> None:
        # Register first so the tracker predicts from the right origin.
        self._tracker.record_player_command(command)
        self._send_command(command)

    def _recalculate(self, current: RoomNode) -> None:
        session = self._session
        if session is None:
            return

        session.recalc_count += 1
        limit = self._config.max_recalculations
        if session.recalc_count > limit:
            logger.warning("walk_failed", reason="too_many_recalculations", limit=limit)
            self._log(f"Auto-walk failed - exceeded {limit} recalculations")
            self._fail(WalkFailureKind.TOO_MANY_RECALCULATIONS, TOO_MANY_RECALCULATIONS_REASON)
            return

        logger.info("walk_recalculating", room=current.key, attempt=session.recalc_count, limit=limit)
        self._log(
            f"Unexpected room: [{current.key}] {current.name} - recalculating path "
            f"(attempt {session.recalc_count}/{limit})"
        )

        try:
            path: PathResult | None = self._graph.find_path(current.key, session.destination_key)
        except Exception as e:
            logger.error("path_provider_failed", room=current.key, error=str(e), error_type=type(e).__name__)
            path = None
        if path is None or not path.success or not path.steps:
            if current.key == session.destination_key:
                self._complete()
                return
            logger.warning("walk_failed", reason="unreachable", room=current.key, destination=session.destination_key)
            self._log(f"Auto-walk failed - no path from [{current.key}] to [{session.destination_key}]")
            self._fail(
                WalkFailureKind.UNREACHABLE,
                f"Cannot reach {session.destination_name} from current location.",
            )
            return

        session.replace_steps(path.steps)
        self._log(f"Path recalculated: {session.total_steps} steps remaining")
        self._send_next_step()

    def _complete(self) -> None:
        session = self._session
        self._timers.cancel_all()
        self._session = None
        self._set_state(AutoWalkState.COMPLETED)
        name = session.destination_name if session else ""
        key = session.destination_key if session else ""
        logger.info("walk_completed", destination=key, name=name)
        self._log(f"Auto-walk complete - arrived at [{key}] {name}")
        self.walk_completed.emit(name)

    def _fail(self, kind: WalkFailureKind, reason: str) -> None:
        self._timers.cancel_all()
        self._session = None
        self._failure_kind = kind
        self._set_state(AutoWalkState.FAILED)
        self.walk_failed.emit(reason)

    # -- combat resume ------------------------------------------------------

    def _try_resume_after_combat(self) -> None:
        session = self._session
        if self._state is not AutoWalkState.WAITING_FOR_COMBAT or session is None:
            return

        enemies = self._enemy_count()
        if enemies > 0:
            # The enemy source may lag behind the combat-off marker.
            if session.combat_resume_retries < self._config.combat_resume_retries:
                session.combat_resume_retries += 1
                logger.debug("walk_resume_recheck", enemies=enemies, attempt=session.combat_resume_retries)
                self._timers.arm(
                    COMBAT_RETRY_TIMER,
                    self._config.combat_resume_retry_s,
                    self._try_resume_after_combat,
                )
                return
            logger.info("walk_still_waiting", enemies=enemies)
            self._log(f"{enemies} enemies remain after retries - staying paused")
            session.combat_resume_retries = 0
            return

        session.combat_resume_retries = 0
        logger.info("walk_resuming", reason="combat_cleared")
        self._log("Auto-walk resuming - combat cleared")
        self._set_state(AutoWalkState.WALKING)

        current = self._tracker.current_room
        step = session.current_step
        if current is not None and step is not None and current.key != step.from_key:
            self._log(f"Position changed during combat: expected [{step.from_key}], now [{current.key}] - recalculating")
            self._recalculate(current)
            return

        self._send_next_step()

    # -- timers -------------------------------------------------------------

    def _on_step_timeout(self) -> None:
        session = self._session
        if self._state is not AutoWalkState.WALKING or session is None:
            return

        step = session.current_step
        if not session.step_retried and step is not None:
            session.step_retried = True
            logger.info("walk_step_timeout", command=step.command, retry=True)
            self._log(f"Step timeout - retrying: {step.command}")
            self._transmit(step.command)
            self._timers.arm(STEP_TIMER, self._config.step_timeout_s, self._on_step_timeout)
            return

        logger.warning("walk_failed", reason="timeout")
        self._log("Auto-walk failed - step timed out after retry")
        self._fail(WalkFailureKind.TIMEOUT, TIMEOUT_REASON)

    def _on_pause_poll(self) -> None:
        if self._state is not AutoWalkState.PAUSED:
            return
        if self._should_pause_commands():
            self._timers.arm(PAUSE_POLL_TIMER, self._config.pause_poll_interval_s, self._on_pause_poll)
            return
        logger.info("walk_resuming", reason="commands_unpaused")
        self._log("Auto-walk resuming - commands unpaused")
        self._set_state(AutoWalkState.WALKING)
        self._send_next_step()

    # -- helpers ------------------------------------------------------------

    def _set_state(self, state: AutoWalkState) -> None:
        if self._state is state:
            return
        previous = self._state
        self._state = state
        logger.debug("walk_state_changed", previous=str(previous), state=str(state))
        self.walk_state_changed.emit(state)

    def _log(self, message: str) -> None:
        self.log_message.emit(message)
