"""
Custom exceptions for recipe tree reconstruction and playback.
"""

from __future__ import annotations

from typing import Optional


class RecipeTreeError(Exception):
    """Base exception for recipe tree errors."""

    pass


class StepFormatError(RecipeTreeError, ValueError):
    """Raised when a synthesis step or search response has the wrong shape."""

    pass


class TreeBuildError(RecipeTreeError, ValueError):
    """Raised when the tree builder is called outside its contract."""

    pass


class LayoutError(RecipeTreeError, ValueError):
    """Raised for invalid layout parameters."""

    pass


class SearchBackendError(RecipeTreeError):
    """Raised when the search backend is unreachable or answers badly.

    The message is meant to be shown to the user as-is.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
