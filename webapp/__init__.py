# --------------------------------------------------------------
#  __init__.py (package root)
# --------------------------------------------------------------
from typing import Optional, Type

from flask import Flask
from flask_cors import CORS

from recipetree.client import SearchBackendClient
from recipetree.movie import RecipeMovieCache

from .config import Config
from .services.logging_config import configure_logging
from .services.recipes.playback_sessions import PlaybackSessionRegistry
from .routes.routes import bp as main_bp

__all__ = ["create_app"]


def create_app(config_object: Optional[Type[Config]] = None) -> Flask:
    """Factory for the Flask WSGI application.

    Using a *factory* makes unit testing trivial (each test just calls
    ``create_app()``) and prevents module-level side effects.
    """
    import sys

    app: Flask | None = None
    try:
        app = Flask(__name__)
        app.config.from_object(config_object or Config)

        # Configure logging early to capture all messages
        configure_logging(app)

        app.logger.info("[INIT] Enabling CORS...")
        CORS(app, origins=app.config["CORS_ORIGINS"])

        app.logger.info("[INIT] Wiring recipe services...")
        app.extensions["search_client"] = SearchBackendClient(
            base_url=app.config["SEARCH_BACKEND_URL"],
            timeout=app.config["SEARCH_TIMEOUT_SECONDS"],
        )
        app.extensions["recipe_movies"] = RecipeMovieCache(
            max_entries=app.config["MOVIE_CACHE_SIZE"]
        )
        app.extensions["playback_sessions"] = PlaybackSessionRegistry()

        app.logger.info("[INIT] Registering blueprints...")
        app.register_blueprint(main_bp)

        app.logger.info("[INIT] Flask app creation complete")
        return app
    except Exception as e:
        # If logging is not configured yet, fallback to stderr
        if app is not None and hasattr(app, "logger"):
            app.logger.error(f"[INIT ERROR] Failed to create app: {e}", exc_info=True)
        else:
            print(f"[INIT ERROR] Failed to create app: {e}", file=sys.stderr)
            import traceback

            traceback.print_exc(file=sys.stderr)
        raise
