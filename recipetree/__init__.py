"""Recipe tree reconstruction, layout, step-wise reveal and playback."""

from recipetree.exceptions import (
    LayoutError,
    RecipeTreeError,
    SearchBackendError,
    StepFormatError,
    TreeBuildError,
)
from recipetree.steps import (
    SearchResult,
    SynthesisStep,
    TargetInfo,
    TierInfo,
    parse_search_response,
    parse_step,
    parse_steps,
)
from recipetree.tree import RecipeEdge, RecipeTree, TreeNode, build_recipe_tree
from recipetree.layout import LayoutStrategy, SeparationPolicy, calculate_layout
from recipetree.reveal import RevealFrame, newly_revealed, reveal, reveal_all
from recipetree.playback import PlaybackController, PlaybackState, ThreadingScheduler
from recipetree.movie import RecipeMovie, RecipeMovieCache, build_recipe_movie

__all__ = [
    "LayoutError",
    "RecipeTreeError",
    "SearchBackendError",
    "StepFormatError",
    "TreeBuildError",
    "SearchResult",
    "SynthesisStep",
    "TargetInfo",
    "TierInfo",
    "parse_search_response",
    "parse_step",
    "parse_steps",
    "RecipeEdge",
    "RecipeTree",
    "TreeNode",
    "build_recipe_tree",
    "LayoutStrategy",
    "SeparationPolicy",
    "calculate_layout",
    "RevealFrame",
    "newly_revealed",
    "reveal",
    "reveal_all",
    "PlaybackController",
    "PlaybackState",
    "ThreadingScheduler",
    "RecipeMovie",
    "RecipeMovieCache",
    "build_recipe_movie",
]
