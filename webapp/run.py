# --------------------------------------------------------------
#  run.py
# --------------------------------------------------------------
"""Development server runner for the recipe tree webapp."""

import argparse
from typing import Any, Mapping, cast

from webapp import create_app
from webapp.config import Config


def main():
    """Main entry point for the development server."""
    import sys
    import traceback
    from flask import Flask

    parser = argparse.ArgumentParser(description="Recipe tree API backend")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument(
        "--search-backend",
        default=None,
        help="Base URL of the search backend (overrides SEARCH_BACKEND_URL)",
    )
    args = parser.parse_args()

    config_object = Config
    if args.search_backend:

        class CliConfig(Config):
            SEARCH_BACKEND_URL = args.search_backend

        config_object = CliConfig

    app: Flask | None = None
    try:
        app = create_app(config_object)
        app.logger.info("[STARTUP] Flask app created successfully")

        config: Mapping[str, Any] = cast(Mapping[str, Any], app.config)
        debug_mode = bool(config.get("DEBUG", False))

        app.logger.info(
            f"[STARTUP] Serving on {args.host}:{args.port} (debug={debug_mode}), "
            f"search backend at {config['SEARCH_BACKEND_URL']}"
        )
        # Never enable debug for production, use a real WSGI server
        # threaded=True keeps SSE streams from blocking other requests
        app.run(host=args.host, port=args.port, debug=debug_mode, threaded=True)
    except Exception as e:
        if app is not None and hasattr(app, "logger"):
            app.logger.error(f"[ERROR] Failed to start server: {e}", exc_info=True)
        else:
            print(f"[ERROR] Failed to start server: {e}", file=sys.stderr)
            print("[ERROR] Traceback:", file=sys.stderr)
            traceback.print_exc(file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
