"""
Playback state machine driving the reveal cursor.

The controller owns the cursor and the play state. While playing, a scheduled
tick advances the cursor at a fixed interval; every manual transition cancels
the pending tick before touching the state, and a generation counter makes any
tick that slipped through the cancel a no-op.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol

from recipetree.constants import DEFAULT_INTERVAL_MS, MIN_INTERVAL_MS, SPEED_PRESETS_MS

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


class CancelHandle(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    """Anything with ``call_later(delay, callback)``; asyncio loops qualify."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> CancelHandle: ...


class ThreadingScheduler:
    """Runs callbacks on daemon ``threading.Timer`` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


ChangeCallback = Callable[["PlaybackController"], None]


class PlaybackController:
    """
    Cursor/state machine for stepping through a recipe.

    States are ``stopped``, ``playing`` and ``paused``; the cursor is kept in
    ``[0, step_count - 1]`` (``-1`` while there are no steps). Out-of-range
    moves are clamped silently.

    Example:
        controller = PlaybackController(len(steps), scheduler=loop)
        controller.play()
        ...
        controller.step_back()  # pauses and moves back one step
    """

    def __init__(
        self,
        step_count: int = 0,
        scheduler: Optional[Scheduler] = None,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        on_change: Optional[ChangeCallback] = None,
    ):
        self._lock = threading.RLock()
        self._scheduler: Scheduler = scheduler or ThreadingScheduler()
        self._interval_ms = self._validate_interval(interval_ms)
        self._on_change = on_change
        self._handle: Optional[CancelHandle] = None
        self._generation = 0
        self._step_count = max(0, int(step_count))
        self._cursor = 0 if self._step_count else -1
        self._state = PlaybackState.STOPPED

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------
    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def is_playing(self) -> bool:
        return self._state is PlaybackState.PLAYING

    @property
    def at_end(self) -> bool:
        return self._cursor == self._last_index

    @property
    def _last_index(self) -> int:
        return self._step_count - 1

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "cursor": self._cursor,
                "state": self._state.value,
                "interval_ms": self._interval_ms,
                "step_count": self._step_count,
            }

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def load(self, step_count: int) -> None:
        """A new step sequence arrived: forget everything and reset."""
        with self._lock:
            self._step_count = max(0, int(step_count))
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._cancel_pending()
            changed = self._apply(0 if self._step_count else -1, PlaybackState.STOPPED)
        self._notify(changed)

    def play(self) -> None:
        with self._lock:
            if self._state is PlaybackState.PLAYING:
                return
            if self._step_count == 0 or self.at_end:
                return
            self._cancel_pending()
            self._state = PlaybackState.PLAYING
            self._schedule_tick()
        self._notify(True)

    def pause(self) -> None:
        with self._lock:
            if self._state is not PlaybackState.PLAYING:
                return
            self._cancel_pending()
            self._state = PlaybackState.PAUSED
        self._notify(True)

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def step_forward(self) -> None:
        self._move(lambda cursor: cursor + 1)

    def step_back(self) -> None:
        self._move(lambda cursor: cursor - 1)

    def jump_to_end(self) -> None:
        self._move(lambda _: self._last_index)

    def seek(self, index: int) -> None:
        """Jump to an arbitrary step; pauses like the other manual moves."""
        self._move(lambda _: index)

    def set_speed(self, interval_ms: int) -> None:
        """Change the auto-advance interval without touching cursor or state."""
        interval_ms = self._validate_interval(interval_ms)
        with self._lock:
            self._interval_ms = interval_ms
            if self._state is PlaybackState.PLAYING:
                self._cancel_pending()
                self._schedule_tick()

    def cycle_speed(self) -> int:
        """Rotate through the speed presets (1x -> 2x -> 0.5x -> 1x)."""
        with self._lock:
            try:
                position = SPEED_PRESETS_MS.index(self._interval_ms)
                next_interval = SPEED_PRESETS_MS[(position + 1) % len(SPEED_PRESETS_MS)]
            except ValueError:
                next_interval = SPEED_PRESETS_MS[0]
        self.set_speed(next_interval)
        return next_interval

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _move(self, target: Callable[[int], int]) -> None:
        """Pause and move to ``target(cursor)``, read and written under one lock."""
        with self._lock:
            self._cancel_pending()
            if self._step_count == 0:
                changed = self._apply(-1, self._state)
            else:
                index = max(0, min(target(self._cursor), self._last_index))
                changed = self._apply(index, PlaybackState.PAUSED)
        self._notify(changed)

    def _apply(self, cursor: int, state: PlaybackState) -> bool:
        changed = cursor != self._cursor or state is not self._state
        self._cursor = cursor
        self._state = state
        return changed

    def _cancel_pending(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule_tick(self) -> None:
        generation = self._generation
        self._handle = self._scheduler.call_later(
            self._interval_ms / 1000.0, lambda: self._tick(generation)
        )

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._state is not PlaybackState.PLAYING:
                logger.debug("Ignoring stale playback tick (generation %d)", generation)
                return
            self._handle = None
            self._cursor = min(self._cursor + 1, self._last_index)
            if self.at_end:
                self._generation += 1
                self._state = PlaybackState.STOPPED
            else:
                self._schedule_tick()
        self._notify(True)

    def _notify(self, changed: bool) -> None:
        if changed and self._on_change is not None:
            self._on_change(self)

    @staticmethod
    def _validate_interval(interval_ms: int) -> int:
        interval_ms = int(interval_ms)
        if interval_ms < MIN_INTERVAL_MS:
            raise ValueError(
                f"Playback interval must be at least {MIN_INTERVAL_MS} ms, got {interval_ms}"
            )
        return interval_ms
