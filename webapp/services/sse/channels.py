"""
Event channels for SSE streaming.

A channel is a thread-safe queue between whoever produces events (timer
threads of a playback session) and the SSE endpoint draining it.
"""

from __future__ import annotations

import json
import queue
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generator, List, Optional, Tuple

from flask import Response

from recipetree.io import RecipeEncoder

# Queue items: (event_name, data, sequence number), None is the end sentinel
_QueueItem = Optional[Tuple[str, Any, int]]


def format_sse_message(
    data: Any, event: Optional[str] = None, event_id: Optional[str] = None
) -> str:
    """
    One SSE message. Non-string data is JSON-encoded with RecipeEncoder, so
    frame payloads may carry tuples and enums; every payload line gets its own
    ``data:`` prefix.
    """
    lines = []
    if event_id is not None:
        lines.append(f"id: {event_id}")
    if event is not None:
        lines.append(f"event: {event}")
    payload = data if isinstance(data, str) else json.dumps(data, cls=RecipeEncoder)
    lines.extend(f"data: {line}" for line in payload.split("\n"))
    return "\n".join(lines) + "\n\n"


@dataclass
class EventChannel:
    """
    A thread-safe channel of named events.

    Example:
        channel = EventChannel()
        channel.send({"cursor": 0}, event="frame")
        channel.complete({"cursor": 3})
    """

    channel_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    _queue: "queue.Queue[_QueueItem]" = field(default_factory=queue.Queue)
    _closed: bool = field(default=False)
    _sequence: int = field(default=0)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def send(self, data: Any, event: str = "frame") -> bool:
        """Queue an event; returns False once the channel is closed."""
        with self._lock:
            if self._closed:
                return False
            self._sequence += 1
            self._queue.put((event, data, self._sequence))
            return True

    def send_log(self, message: str, level: str = "info") -> None:
        self.send({"message": message, "level": level}, event="log")

    def send_error(self, error: str) -> None:
        self.send({"error": error}, event="error")

    def complete(self, data: Any = None, error: Optional[str] = None) -> None:
        """Send the final ``complete`` event and close the channel."""
        if error:
            self.send({"error": error}, event="complete")
        else:
            self.send({"data": data}, event="complete")
        self.close()

    def close(self) -> None:
        """Close the channel without sending a complete event."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(None)  # Sentinel to stop iteration

    @property
    def is_closed(self) -> bool:
        return self._closed

    def drain(self) -> List[Tuple[str, Any]]:
        """Take every queued event without blocking (mainly for tests)."""
        events: List[Tuple[str, Any]] = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return events
            if item is None:
                return events
            events.append((item[0], item[1]))

    def stream(self, timeout: float = 30.0) -> Generator[str, None, None]:
        """
        Yield SSE messages as they arrive until the channel closes.

        Args:
            timeout: Seconds to wait for a message before sending a keepalive
                comment.
        """
        while True:
            try:
                item = self._queue.get(timeout=timeout)
            except queue.Empty:
                if self._closed:
                    break
                yield ": keepalive\n\n"
                continue
            if item is None:  # Sentinel
                break
            event, data, sequence = item
            yield format_sse_message(data, event=event, event_id=str(sequence))


class ChannelRegistry:
    """
    Registry of active SSE channels, safe for concurrent access.

    Background work publishes to a channel; the SSE endpoint looks it up by
    ``channel_id`` and streams it.
    """

    def __init__(self) -> None:
        self._channels: Dict[str, EventChannel] = {}
        self._lock = threading.Lock()

    def create(self) -> EventChannel:
        channel = EventChannel()
        with self._lock:
            self._channels[channel.channel_id] = channel
        return channel

    def get(self, channel_id: str) -> Optional[EventChannel]:
        with self._lock:
            return self._channels.get(channel_id)

    def remove(self, channel_id: str) -> None:
        with self._lock:
            channel = self._channels.pop(channel_id, None)
        if channel is not None:
            channel.close()

    def cleanup_closed(self) -> int:
        """Remove all closed channels and return how many were removed."""
        with self._lock:
            closed = [cid for cid, ch in self._channels.items() if ch.is_closed]
            for cid in closed:
                del self._channels[cid]
            return len(closed)

    def count(self) -> int:
        with self._lock:
            return len(self._channels)


# Global registry instance
channels = ChannelRegistry()


def stream_response(
    channel: EventChannel,
    on_close: Optional[Callable[[], None]] = None,
    keepalive: float = 30.0,
) -> Response:
    """
    Stream ``channel`` as ``text/event-stream``.

    ``on_close`` runs once the stream ends, whether the channel completed or
    the client went away.
    """

    def generate() -> Generator[str, None, None]:
        try:
            yield from channel.stream(timeout=keepalive)
        finally:
            if on_close is not None:
                on_close()

    # No "Connection" header: it is hop-by-hop and WSGI forbids it
    return Response(
        generate(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "X-Accel-Buffering": "no",
        },
    )
