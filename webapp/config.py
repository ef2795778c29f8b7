"""Configuration for the Flask application."""

import os
from pathlib import Path

from recipetree.constants import (
    DEFAULT_BACKEND_TIMEOUT,
    DEFAULT_BACKEND_URL,
    DEFAULT_INTERVAL_MS,
    NODE_X_SPACING,
    NODE_Y_SPACING,
)


class Config:
    """Flask configuration."""

    # Flask settings
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"
    TESTING = False

    # CORS settings
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_DIR = Path(os.environ.get("LOG_DIR", "logs"))

    # External search backend
    SEARCH_BACKEND_URL = os.environ.get("SEARCH_BACKEND_URL", DEFAULT_BACKEND_URL)
    SEARCH_TIMEOUT_SECONDS = float(
        os.environ.get("SEARCH_TIMEOUT_SECONDS", DEFAULT_BACKEND_TIMEOUT)
    )

    # Recipe movies
    MOVIE_CACHE_SIZE = int(os.environ.get("MOVIE_CACHE_SIZE", 32))
    DEFAULT_PLAYBACK_INTERVAL_MS = int(
        os.environ.get("DEFAULT_PLAYBACK_INTERVAL_MS", DEFAULT_INTERVAL_MS)
    )
    # Seconds a server-driven playback may stay open before it is closed
    PLAYBACK_SESSION_TIMEOUT = float(os.environ.get("PLAYBACK_SESSION_TIMEOUT", 600))
    # Seconds a finished session's stream stays available to a late client
    PLAYBACK_STREAM_GRACE = float(os.environ.get("PLAYBACK_STREAM_GRACE", 30))

    # Pixel spacing of one logical layout unit
    NODE_X_SPACING = float(os.environ.get("NODE_X_SPACING", NODE_X_SPACING))
    NODE_Y_SPACING = float(os.environ.get("NODE_Y_SPACING", NODE_Y_SPACING))
