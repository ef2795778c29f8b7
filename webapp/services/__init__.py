"""
Webapp services package.

This package provides modular services for the Flask application:
- logging_config: Application logging configuration
- recipes: Frontend payloads and server-driven playback sessions
- sse: Server-Sent Events for real-time streaming
"""

from webapp.services.logging_config import configure_logging
from webapp.services.recipes import (
    assemble_frontend_dict,
    start_playback_session,
    PlaybackSessionRegistry,
)
from webapp.services.sse import (
    format_sse_message,
    stream_response,
    channels,
    EventChannel,
    in_background,
)

__all__ = [
    # Logging
    "configure_logging",
    # Recipes
    "assemble_frontend_dict",
    "start_playback_session",
    "PlaybackSessionRegistry",
    # SSE
    "format_sse_message",
    "stream_response",
    "channels",
    "EventChannel",
    "in_background",
]
