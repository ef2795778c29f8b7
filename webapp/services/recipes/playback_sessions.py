"""
Server-driven playback sessions.

A session pairs a RecipeMovie with a PlaybackController and an SSE channel:
every cursor/state change of the controller is published as a ``frame``
event. Clients steer a running session through action names that map onto
the controller's transitions.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional

from recipetree.movie import RecipeMovie
from recipetree.playback import PlaybackController, PlaybackState, Scheduler
from recipetree.reveal import RevealFrame

from webapp.services.recipes.frontend_builder import assemble_frame_event
from webapp.services.sse import EventChannel, channels, in_background

logger = logging.getLogger(__name__)


class PlaybackSession:
    """One movie being played to one SSE channel."""

    def __init__(
        self,
        channel: EventChannel,
        movie: RecipeMovie,
        interval_ms: int,
        close_on_end: bool = True,
        scheduler: Optional[Scheduler] = None,
    ):
        self.channel = channel
        self.movie = movie
        self.close_on_end = close_on_end
        self._previous: Optional[RevealFrame] = None
        self._publish_lock = threading.Lock()
        self._finished = threading.Event()
        self.controller = PlaybackController(
            step_count=movie.step_count,
            scheduler=scheduler,
            interval_ms=interval_ms,
            on_change=self._on_change,
        )
        self._actions: Dict[str, Callable[..., Any]] = {
            "play": self.controller.play,
            "pause": self.controller.pause,
            "toggle": self.controller.toggle,
            "step-forward": self.controller.step_forward,
            "step-back": self.controller.step_back,
            "jump-to-end": self.controller.jump_to_end,
            "reset": self.controller.reset,
            "cycle-speed": self.controller.cycle_speed,
        }

    @property
    def session_id(self) -> str:
        return self.channel.channel_id

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    def publish_current(self) -> None:
        """Send a frame for the current cursor regardless of changes."""
        with self._publish_lock:
            payload = assemble_frame_event(self.movie, self.controller, self._previous)
            self._previous = self.movie.frame(self.controller.cursor)
        self.channel.send(payload, event="frame")

    def apply(self, action: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a named transition and return the controller snapshot.

        Raises:
            ValueError: For unknown actions or missing/invalid parameters.
        """
        params = params or {}
        if self.finished:
            raise ValueError(f"Playback session {self.session_id} has already finished")

        if action == "close":
            self.finish()
        elif action == "speed":
            if "intervalMs" not in params:
                raise ValueError("Action 'speed' requires 'intervalMs'")
            self.controller.set_speed(int(params["intervalMs"]))
        elif action == "seek":
            if "cursor" not in params:
                raise ValueError("Action 'seek' requires 'cursor'")
            self.controller.seek(int(params["cursor"]))
        elif action in self._actions:
            self._actions[action]()
        else:
            raise ValueError(f"Unknown playback action '{action}'")

        logger.debug(f"[playback {self.session_id}] {action} -> {self.controller.snapshot()}")
        return self.controller.snapshot()

    def finish_if_done(self) -> None:
        """Finish when there is nothing left to auto-play."""
        if not self.close_on_end or self.controller.is_playing:
            return
        if self.controller.step_count == 0 or self.controller.at_end:
            if self.controller.state is not PlaybackState.PAUSED:
                self.finish()

    def finish(self) -> None:
        self.controller.pause()
        self._finished.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._finished.wait(timeout)

    def _on_change(self, controller: PlaybackController) -> None:
        self.publish_current()
        if (
            self.close_on_end
            and controller.state is PlaybackState.STOPPED
            and controller.at_end
        ):
            self._finished.set()


class PlaybackSessionRegistry:
    """Thread-safe lookup of running sessions by channel id."""

    def __init__(self) -> None:
        self._sessions: Dict[str, PlaybackSession] = {}
        self._lock = threading.Lock()

    def add(self, session: PlaybackSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def get(self, session_id: str) -> Optional[PlaybackSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)


@in_background
def _supervise_session(
    channel: EventChannel,
    session: PlaybackSession,
    registry: PlaybackSessionRegistry,
    autoplay: bool,
    timeout: float,
    stream_grace: float,
) -> None:
    try:
        try:
            session.publish_current()
            if autoplay:
                session.controller.play()
            session.finish_if_done()
            if not session.wait(timeout):
                logger.warning(f"[playback {session.session_id}] timed out after {timeout}s")
                channel.send_log("Playback session timed out", level="warning")
        finally:
            session.finish()
            registry.discard(session.session_id)
        channel.complete(session.controller.snapshot())
    finally:
        _drop_channel_later(channel.channel_id, stream_grace)


def _drop_channel_later(channel_id: str, delay: float) -> None:
    """
    Unregister a completed channel that no client may ever stream.

    A stream attached before then keeps its own reference and still drains
    the remaining events.
    """
    if delay <= 0:
        channels.remove(channel_id)
        return
    timer = threading.Timer(delay, channels.remove, args=(channel_id,))
    timer.daemon = True
    timer.start()


def start_playback_session(
    registry: PlaybackSessionRegistry,
    movie: RecipeMovie,
    interval_ms: int,
    autoplay: bool = True,
    close_on_end: bool = True,
    timeout: float = 600.0,
    scheduler: Optional[Scheduler] = None,
    stream_grace: float = 30.0,
) -> PlaybackSession:
    """
    Register a session and start supervising it in the background.

    The session is registered before the supervisor thread starts, so the
    returned ``session_id`` can be used for actions right away. Once the
    session finishes, its channel stays available for ``stream_grace``
    seconds and is then unregistered even if nobody streamed it.
    """
    channel = channels.create()
    try:
        session = PlaybackSession(
            channel,
            movie,
            interval_ms=interval_ms,
            close_on_end=close_on_end,
            scheduler=scheduler,
        )
    except ValueError:
        channels.remove(channel.channel_id)
        raise
    registry.add(session)
    _supervise_session(session, registry, autoplay, timeout, stream_grace, channel=channel)
    logger.info(
        f"[playback {session.session_id}] started ({movie.step_count} steps, "
        f"{interval_ms} ms, autoplay={autoplay})"
    )
    return session
