"""
Recipe services.

Builds frontend payloads from recipe movies and runs server-driven playback
sessions that stream frames over SSE.
"""

from webapp.services.recipes.frontend_builder import (
    assemble_frontend_dict,
    assemble_frame_event,
)
from webapp.services.recipes.playback_sessions import (
    PlaybackSession,
    PlaybackSessionRegistry,
    start_playback_session,
)

__all__ = [
    "assemble_frontend_dict",
    "assemble_frame_event",
    "PlaybackSession",
    "PlaybackSessionRegistry",
    "start_playback_session",
]
