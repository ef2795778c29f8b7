"""
Server-Sent Events (SSE) support for Flask 3.x.

Used to stream recipe playback frames to the browser without polling.

Usage:
    from webapp.services.sse import channels, stream_response

    @bp.route('/stream/playback/<channel_id>')
    def stream(channel_id):
        channel = channels.get(channel_id)
        return stream_response(channel, on_close=lambda: channels.remove(channel_id))
"""

from webapp.services.sse.channels import (
    ChannelRegistry,
    EventChannel,
    channels,
    format_sse_message,
    stream_response,
)
from webapp.services.sse.decorators import in_background

__all__ = [
    "format_sse_message",
    "stream_response",
    "EventChannel",
    "ChannelRegistry",
    "channels",
    "in_background",
]
