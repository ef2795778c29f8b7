"""Text formatting utilities for logging."""

from typing import Any, Iterable


def format_keys(keys: Iterable[str], limit: int = 12) -> str:
    """Comma-separated node keys, shortened after ``limit`` entries."""
    keys = list(keys)
    if not keys:
        return "∅"
    shown = ", ".join(keys[:limit])
    if len(keys) > limit:
        shown += f", … (+{len(keys) - limit})"
    return shown


def format_step(step: Any) -> str:
    """``left + right = result`` for anything shaped like a synthesis step."""
    ingredients = getattr(step, "ingredients", None)
    result = getattr(step, "result", None)
    if ingredients is None or result is None:
        return str(step)
    return f"{ingredients[0]} + {ingredients[1]} = {result}"
