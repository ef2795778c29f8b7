"""Build-once recipe movie: full tree, layout and every reveal frame."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from recipetree.layout import LayoutStrategy, Positions, calculate_layout
from recipetree.logger import rt_logger
from recipetree.reveal import RevealFrame, reveal_all
from recipetree.steps import SynthesisStep
from recipetree.tree import RecipeTree, build_recipe_tree

logger = logging.getLogger(__name__)

StrategyLike = Union[LayoutStrategy, str, None]


@dataclass
class RecipeMovie:
    """
    Everything the UI needs to play one step sequence.

    The tree and positions are computed once for the final step; frames are
    filters over that tree, one per cursor position.
    """

    steps: Tuple[SynthesisStep, ...]
    strategy: LayoutStrategy
    tree: RecipeTree
    positions: Positions = field(default_factory=dict)
    frames: List[RevealFrame] = field(default_factory=list)
    base_preview: bool = False
    build_time: float = 0.0

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def is_empty(self) -> bool:
        return not self.steps

    def frame(self, cursor: int) -> RevealFrame:
        """Frame for ``cursor``, clamped; empty before the first step."""
        if not self.frames or cursor < 0:
            return RevealFrame(cursor=cursor)
        return self.frames[min(cursor, len(self.frames) - 1)]


def build_recipe_movie(
    steps: Sequence[SynthesisStep],
    strategy: StrategyLike = LayoutStrategy.FORWARD,
    base_preview: bool = False,
) -> RecipeMovie:
    """
    Build, lay out and pre-reveal a step sequence.

    Args:
        steps: The solution path from the search backend.
        strategy: Layout strategy or search mode string (``"bfs"``, ``"dfs"``...).
        base_preview: Reveal policy for cursor 0, see ``reveal``.

    Returns:
        A RecipeMovie; empty input gives an empty movie.
    """
    layout_strategy = LayoutStrategy.from_mode(strategy)
    steps = tuple(steps)
    if not steps:
        return RecipeMovie(
            steps=(),
            strategy=layout_strategy,
            tree=RecipeTree.empty(),
            base_preview=base_preview,
        )

    start = time.perf_counter()
    tree = build_recipe_tree(steps)
    positions = calculate_layout(tree, layout_strategy)
    frames = reveal_all(tree, base_preview=base_preview)
    elapsed = time.perf_counter() - start

    if not rt_logger.disabled:
        rt_logger.log_recipe_tree(tree, title=f"Layout ({layout_strategy.name.lower()})")
        for frame in frames:
            rt_logger.log_reveal_frame(frame, tree)

    logger.info(
        f"Built recipe movie for '{steps[-1].result}' ({len(steps)} steps, "
        f"{len(tree)} nodes, {layout_strategy.name.lower()} layout) in {elapsed:.4f}s"
    )
    return RecipeMovie(
        steps=steps,
        strategy=layout_strategy,
        tree=tree,
        positions=positions,
        frames=frames,
        base_preview=base_preview,
        build_time=elapsed,
    )


class RecipeMovieCache:
    """
    Small LRU memo so a sequence is only rebuilt when it actually changes.

    Keys are the (hashable) step tuple, strategy and reveal policy. Safe to
    share between request threads; two threads missing on the same key may
    both build, and the first movie stored wins.
    """

    def __init__(self, max_entries: int = 32):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: "OrderedDict[tuple, RecipeMovie]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(
        self,
        steps: Sequence[SynthesisStep],
        strategy: StrategyLike = LayoutStrategy.FORWARD,
        base_preview: bool = False,
    ) -> RecipeMovie:
        key = (tuple(steps), LayoutStrategy.from_mode(strategy), base_preview)
        with self._lock:
            movie: Optional[RecipeMovie] = self._entries.get(key)
            if movie is not None:
                self.hits += 1
                self._entries.move_to_end(key)
                return movie
            self.misses += 1

        # Built outside the lock so a slow sequence does not block cache hits
        built = build_recipe_movie(key[0], key[1], base_preview)
        with self._lock:
            movie = self._entries.setdefault(key, built)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
        return movie

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
