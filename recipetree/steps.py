"""
Synthesis steps and the search response they arrive in.

This is the deserialization boundary: everything coming from the search
backend is validated here and turned into fixed-shape records. Code further
down (tree builder, layout, revealer) trusts these records and never
re-validates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from recipetree.exceptions import StepFormatError


@dataclass(frozen=True)
class TierInfo:
    """Tier of each element taking part in one combination."""

    left: int = 0
    right: int = 0
    result: int = 0


@dataclass(frozen=True)
class SynthesisStep:
    """One combination event: ``left + right -> result``."""

    ingredients: Tuple[str, str]
    result: str
    tiers: TierInfo = field(default_factory=TierInfo)

    @property
    def left(self) -> str:
        return self.ingredients[0]

    @property
    def right(self) -> str:
        return self.ingredients[1]

    @property
    def is_self_combination(self) -> bool:
        return self.ingredients[0] == self.ingredients[1]

    def __str__(self) -> str:
        return f"{self.left} + {self.right} = {self.result}"


@dataclass(frozen=True)
class TargetInfo:
    element: str
    tier: int = 0


@dataclass
class SearchResult:
    """Decoded response of one search request."""

    found: bool
    steps_visited: int = 0
    execution_time_ms: float = 0.0
    target: Optional[TargetInfo] = None
    paths: List[List[SynthesisStep]] = field(default_factory=list)

    @property
    def primary_path(self) -> List[SynthesisStep]:
        """The first recipe path, or an empty list when nothing was found."""
        if not self.found or not self.paths:
            return []
        return self.paths[0]


# ----------------------------------------------------------------------
# Parsing
# ----------------------------------------------------------------------


def _require_tier(value: Any, what: str) -> int:
    # bool is an int subclass but never a valid tier
    if isinstance(value, bool) or not isinstance(value, int):
        if not (isinstance(value, float) and value.is_integer()):
            raise StepFormatError(f"{what} must be an integer, got {value!r}")
        value = int(value)
    # Tier 0 is the base tier; node keys rely on tiers having no sign
    if value < 0:
        raise StepFormatError(f"{what} must not be negative, got {value}")
    return value


def _require_name(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise StepFormatError(f"{what} must be a non-empty string, got {value!r}")
    return value


def parse_step(raw: Mapping[str, Any]) -> SynthesisStep:
    """
    Validate and convert one raw step mapping.

    Args:
        raw: Mapping with ``ingredients`` (two names), ``result`` and an
            optional ``tiers`` mapping with ``left``, ``right`` and ``result``.

    Returns:
        The corresponding SynthesisStep. Missing tiers default to 0.

    Raises:
        StepFormatError: If the mapping does not have the expected shape.
    """
    if not isinstance(raw, Mapping):
        raise StepFormatError(f"Step must be an object, got {type(raw).__name__}")

    ingredients = raw.get("ingredients")
    if not isinstance(ingredients, (list, tuple)) or len(ingredients) != 2:
        raise StepFormatError(
            f"Step ingredients must be a pair of element names, got {ingredients!r}"
        )
    left = _require_name(ingredients[0], "Left ingredient")
    right = _require_name(ingredients[1], "Right ingredient")
    result = _require_name(raw.get("result"), "Step result")

    raw_tiers = raw.get("tiers")
    if raw_tiers is None:
        tiers = TierInfo()
    elif isinstance(raw_tiers, Mapping):
        tiers = TierInfo(
            left=_require_tier(raw_tiers.get("left", 0), "tiers.left"),
            right=_require_tier(raw_tiers.get("right", 0), "tiers.right"),
            result=_require_tier(raw_tiers.get("result", 0), "tiers.result"),
        )
    else:
        raise StepFormatError(f"Step tiers must be an object, got {raw_tiers!r}")

    return SynthesisStep(ingredients=(left, right), result=result, tiers=tiers)


def parse_steps(raw: Optional[Sequence[Any]]) -> List[SynthesisStep]:
    """Parse a list of raw steps. ``None`` and empty input give ``[]``."""
    if raw is None:
        return []
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise StepFormatError(f"Steps must be a list, got {type(raw).__name__}")
    parsed: List[SynthesisStep] = []
    for index, item in enumerate(raw):
        try:
            parsed.append(parse_step(item))
        except StepFormatError as e:
            raise StepFormatError(f"Step {index}: {e}") from e
    return parsed


def parse_search_response(payload: Mapping[str, Any]) -> SearchResult:
    """
    Decode a search backend response.

    Both ``{"found": false}`` (any status) and a full success payload are
    accepted. Success payloads carry ``paths`` (a list of step lists); the
    older single ``path`` field is accepted as a one-element ``paths``.

    Raises:
        StepFormatError: If the payload is not a mapping or a path is malformed.
    """
    if not isinstance(payload, Mapping):
        raise StepFormatError(
            f"Search response must be an object, got {type(payload).__name__}"
        )

    found = bool(payload.get("found", False))
    target: Optional[TargetInfo] = None
    raw_target = payload.get("target")
    if isinstance(raw_target, Mapping) and raw_target.get("element"):
        target = TargetInfo(
            element=_require_name(raw_target.get("element"), "target.element"),
            tier=_require_tier(raw_target.get("tier", 0), "target.tier"),
        )

    try:
        steps_visited = int(payload.get("steps") or 0)
        execution_time = float(payload.get("executionTime") or 0.0)
    except (TypeError, ValueError) as e:
        raise StepFormatError(f"Invalid search statistics: {e}") from e

    if not found:
        return SearchResult(
            found=False,
            steps_visited=steps_visited,
            execution_time_ms=execution_time,
            target=target,
        )

    raw_paths = payload.get("paths")
    if raw_paths is None and payload.get("path") is not None:
        raw_paths = [payload["path"]]
    if raw_paths is None:
        raw_paths = []
    if not isinstance(raw_paths, list):
        raise StepFormatError("Search response 'paths' must be a list of step lists")

    paths: List[List[SynthesisStep]] = []
    for index, raw_path in enumerate(raw_paths):
        try:
            paths.append(parse_steps(raw_path))
        except StepFormatError as e:
            raise StepFormatError(f"Path {index}: {e}") from e

    return SearchResult(
        found=True,
        steps_visited=steps_visited,
        execution_time_ms=execution_time,
        target=target,
        paths=paths,
    )


def step_to_dict(step: SynthesisStep) -> Dict[str, Any]:
    return {
        "ingredients": list(step.ingredients),
        "result": step.result,
        "tiers": {
            "left": step.tiers.left,
            "right": step.tiers.right,
            "result": step.tiers.result,
        },
    }


def search_result_to_dict(result: SearchResult) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "found": result.found,
        "steps": result.steps_visited,
        "executionTime": result.execution_time_ms,
        "paths": [[step_to_dict(s) for s in path] for path in result.paths],
    }
    if result.target is not None:
        data["target"] = {"element": result.target.element, "tier": result.target.tier}
    return data
