"""
Decorator for running channel-bound work in a background thread.
"""

from __future__ import annotations

import functools
import logging
import threading
from typing import Any, Callable, Concatenate, Optional, ParamSpec, TypeVar

from webapp.services.sse.channels import EventChannel, channels

P = ParamSpec("P")
T = TypeVar("T")

logger = logging.getLogger(__name__)


def in_background(
    func: Callable[Concatenate[EventChannel, P], T],
) -> Callable[P, EventChannel]:
    """
    Run ``func`` in a daemon thread with a freshly registered channel.

    The decorated function receives the EventChannel as its first argument
    (a pre-created one can be passed as ``channel=``); the wrapper returns
    that channel immediately so the caller can hand its
    ``channel_id`` to the client. An exception raised by ``func`` is sent as an
    ``error`` event and closes the channel.

    Example:
        @in_background
        def run(channel: EventChannel, session):
            ...
            channel.complete({"cursor": 3})

        channel = run(session)
        return jsonify({"channel_id": channel.channel_id})
    """

    @functools.wraps(func)
    def wrapper(
        *args: Any, channel: Optional[EventChannel] = None, **kwargs: Any
    ) -> EventChannel:
        if channel is None:
            channel = channels.create()

        def run() -> None:
            try:
                func(channel, *args, **kwargs)
            except Exception as e:
                logger.error(f"Background task {func.__name__} failed: {e}", exc_info=True)
                channel.send_error(str(e))
                channel.close()

        thread = threading.Thread(target=run, name=f"sse-{func.__name__}", daemon=True)
        thread.start()

        return channel

    return wrapper
