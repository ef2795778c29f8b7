# --------------------------------------------------------------
#  routes.py
# --------------------------------------------------------------
from __future__ import annotations

import json
from logging import Logger
from typing import Any, Dict, Tuple, Union

from flask import Blueprint, Response, current_app, jsonify, request

from recipetree.client import SearchBackendClient
from recipetree.exceptions import SearchBackendError
from recipetree.io import RecipeEncoder
from recipetree.movie import RecipeMovie, RecipeMovieCache
from recipetree.steps import search_result_to_dict
from webapp.routes.helpers import parse_recipe_request, parse_search_request
from webapp.services.recipes import assemble_frontend_dict, start_playback_session
from webapp.services.recipes.playback_sessions import PlaybackSessionRegistry
from webapp.services.sse import channels, stream_response

bp = Blueprint("main", __name__)

RouteResult = Union[Response, Tuple[Dict[str, Any], int]]


@bp.route("/about")
def about() -> Response:
    """Simple health-check / about endpoint."""
    return jsonify(
        {"about": "Recipe tree API backend. See the web front-end for the UI."}
    )


# ----------------------------------------------------------------------
# Search proxy
# ----------------------------------------------------------------------


@bp.route("/search", methods=["GET"])
def search() -> RouteResult:
    log: Logger = current_app.logger
    log.info("[search] GET /search from %s", request.remote_addr)

    try:
        req = parse_search_request(request)
        client: SearchBackendClient = current_app.extensions["search_client"]
        result = client.search(req.element, mode=req.mode, max_recipes=req.max_recipes)
    except ValueError as e:
        log.warning(f"[search] Bad request: {e}")
        return _fail(400, str(e)), 400
    except SearchBackendError as e:
        log.error(f"[search] Backend failure: {e}")
        return _fail(502, str(e)), 502

    movie_dict = None
    if result.found and result.primary_path:
        movie = _movies().get(result.primary_path, req.mode)
        movie_dict = _frontend(movie)

    log.info(
        f"[search] '{req.element}' ({req.mode}): found={result.found}, "
        f"{len(result.primary_path)} steps"
    )
    return _json({"search": search_result_to_dict(result), "movie": movie_dict})


# ----------------------------------------------------------------------
# Main business endpoint: step sequence to positioned tree
# ----------------------------------------------------------------------


@bp.route("/recipe/tree", methods=["POST"])
def recipe_tree() -> RouteResult:
    log: Logger = current_app.logger
    log.info("[recipe] POST /recipe/tree from %s", request.remote_addr)

    try:
        req = parse_recipe_request(request)
        movie = _movies().get(req.steps, req.strategy, req.base_preview)
    except ValueError as e:
        log.warning(f"[recipe] Bad request: {e}")
        return _fail(400, str(e)), 400

    log.info(
        f"[recipe] {movie.step_count} steps -> {len(movie.tree)} nodes "
        f"({movie.strategy.name.lower()} layout)"
    )
    return _json(_frontend(movie))


# ----------------------------------------------------------------------
# Server-driven playback over SSE
# ----------------------------------------------------------------------


@bp.route("/recipe/playback", methods=["POST"])
def recipe_playback() -> RouteResult:
    log: Logger = current_app.logger

    try:
        req = parse_recipe_request(request)
        movie = _movies().get(req.steps, req.strategy, req.base_preview)
        session = start_playback_session(
            _sessions(),
            movie,
            interval_ms=req.interval_ms or current_app.config["DEFAULT_PLAYBACK_INTERVAL_MS"],
            autoplay=req.autoplay,
            close_on_end=req.close_on_end,
            timeout=current_app.config["PLAYBACK_SESSION_TIMEOUT"],
            stream_grace=current_app.config["PLAYBACK_STREAM_GRACE"],
        )
    except ValueError as e:
        log.warning(f"[playback] Bad request: {e}")
        return _fail(400, str(e)), 400

    return _json(
        {
            "channel_id": session.session_id,
            "stream_url": f"/stream/playback/{session.session_id}",
            "playback": session.controller.snapshot(),
            "movie": _frontend(movie),
        }
    )


@bp.route("/recipe/playback/<session_id>/<action>", methods=["POST"])
def playback_action(session_id: str, action: str) -> RouteResult:
    session = _sessions().get(session_id)
    if session is None:
        return _fail(404, f"Unknown playback session '{session_id}'"), 404

    params = request.get_json(silent=True) or {}
    try:
        snapshot = session.apply(action, params)
    except ValueError as e:
        current_app.logger.warning(f"[playback] {action} rejected: {e}")
        return _fail(400, str(e)), 400
    return jsonify(snapshot)


@bp.route("/stream/playback/<channel_id>")
def stream_playback(channel_id: str) -> RouteResult:
    channel = channels.get(channel_id)
    if channel is None:
        return _fail(404, f"Unknown stream '{channel_id}'"), 404

    return stream_response(channel, on_close=lambda: channels.remove(channel_id))


# ----------------------------------------------------------------------
# Diagnostic helpers
# ----------------------------------------------------------------------


@bp.errorhandler(Exception)
def global_error(exc: Exception):  # Flask passes the exception instance in
    current_app.logger.error("[global] Unhandled exception", exc_info=True)
    return _fail(500, str(exc)), 500


# ----------------------------------------------------------------------
# Utilities
# ----------------------------------------------------------------------
def _movies() -> RecipeMovieCache:
    return current_app.extensions["recipe_movies"]


def _sessions() -> PlaybackSessionRegistry:
    return current_app.extensions["playback_sessions"]


def _frontend(movie: RecipeMovie) -> Dict[str, Any]:
    return assemble_frontend_dict(
        movie,
        x_spacing=current_app.config["NODE_X_SPACING"],
        y_spacing=current_app.config["NODE_Y_SPACING"],
    )


def _json(data: Any) -> Response:
    return Response(json.dumps(data, cls=RecipeEncoder), mimetype="application/json")


def _fail(status_code: int, message: str) -> dict[str, Any]:
    return {
        "error": message,
        "status": status_code,
    }
