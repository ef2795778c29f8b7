"""Request handling helpers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from flask import Request

from recipetree.constants import DEFAULT_SEARCH_MODE, SEARCH_MODES
from recipetree.layout import LayoutStrategy
from recipetree.steps import SynthesisStep, parse_search_response, parse_steps


@dataclass
class RecipeRequest:
    """Encapsulates a step sequence posted for layout or playback."""

    steps: List[SynthesisStep]
    strategy: LayoutStrategy
    base_preview: bool = False
    interval_ms: Optional[int] = None
    autoplay: bool = True
    close_on_end: bool = True


@dataclass
class SearchRequest:
    element: str
    mode: str
    max_recipes: Optional[int] = None


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "on", "yes")


def _json_body(request: Request) -> Mapping[str, Any]:
    body = request.get_json(silent=True)
    if body is None:
        raise ValueError("Request body must be JSON")
    if isinstance(body, list):
        # A bare step list
        return {"steps": body}
    if not isinstance(body, Mapping):
        raise ValueError("Request body must be a JSON object or a list of steps")
    return body


def _steps_from_body(body: Mapping[str, Any]) -> List[SynthesisStep]:
    if "steps" in body and isinstance(body["steps"], list):
        return parse_steps(body["steps"])
    if "paths" in body or "path" in body or "found" in body:
        result = parse_search_response(body)
        path_index = int(body.get("pathIndex", 0))
        if not result.paths:
            return []
        if not 0 <= path_index < len(result.paths):
            raise ValueError(
                f"pathIndex {path_index} out of range for {len(result.paths)} paths"
            )
        return result.paths[path_index]
    raise ValueError("Missing 'steps' (or a search response with 'paths')")


def parse_recipe_request(request: Request) -> RecipeRequest:
    """Parses and validates a posted step sequence."""
    body = _json_body(request)
    steps = _steps_from_body(body)

    interval = body.get("intervalMs")
    return RecipeRequest(
        steps=steps,
        strategy=LayoutStrategy.from_mode(body.get("mode")),
        base_preview=_as_bool(body.get("basePreview"), False),
        interval_ms=int(interval) if interval is not None else None,
        autoplay=_as_bool(body.get("autoplay"), True),
        close_on_end=_as_bool(body.get("closeOnEnd"), True),
    )


def parse_search_request(request: Request) -> SearchRequest:
    """Parses ``element``/``mode``/``maxRecipes`` query parameters."""
    element = (request.args.get("element") or "").strip().lower()
    if not element:
        raise ValueError("Element parameter is required")

    mode = (request.args.get("mode") or DEFAULT_SEARCH_MODE).strip().lower()
    if mode not in SEARCH_MODES:
        raise ValueError(
            f"Unknown search mode '{mode}'. Expected one of: {', '.join(SEARCH_MODES)}"
        )

    max_recipes: Optional[int] = None
    raw_max = request.args.get("maxRecipes")
    if raw_max:
        max_recipes = int(raw_max)
        if max_recipes < 1:
            raise ValueError("maxRecipes must be a positive integer")

    return SearchRequest(element=element, mode=mode, max_recipes=max_recipes)
