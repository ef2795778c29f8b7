"""
Layout calculation for recipe trees.

Every strategy shares one placement algorithm: leaves are laid out left to
right in traversal order by a monotonically increasing counter, each internal
node sits at the midpoint of its children, and ``y`` is the node depth (root
at 0, base elements at the bottom). Strategies differ only in how far apart
consecutive leaves are placed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from recipetree.constants import (
    DEEP_CROSS_BRANCH,
    DEEP_SIBLING_UNIT,
    FORWARD_CROSS_BRANCH,
    FORWARD_SIBLING_UNIT,
)
from recipetree.exceptions import LayoutError
from recipetree.tree import RecipeTree, TreeNode

# --- Layout Type Definition ---
# Maps each node key to its logical (x, y) coordinate.
Positions = Dict[str, Tuple[float, float]]


class LayoutStrategy(Enum):
    FORWARD = "bfs"
    DEEP = "dfs"
    BIDIRECTIONAL = "bidirectional"

    @classmethod
    def from_mode(cls, mode: Optional[str]) -> "LayoutStrategy":
        """Pick the strategy for a search mode; unknown modes lay out forward."""
        if isinstance(mode, LayoutStrategy):
            return mode
        if not mode:
            return cls.FORWARD
        normalized = str(mode).strip().lower()
        for strategy in cls:
            if strategy.value == normalized:
                return strategy
        return cls.FORWARD


@dataclass(frozen=True)
class SeparationPolicy:
    """
    Horizontal gap between consecutive leaves.

    Attributes:
        sibling_unit: Gap between leaves sharing a parent, scaled by the
            number of siblings (``sibling_unit * count / 2``).
        cross_branch: Fixed gap between leaves of different parents.

    The forward policy keeps the plain unit leaf counter, so a cross-branch
    gap is as wide as a sibling gap and every leaf sits one unit from the
    next. Only the deep policy uses a cross-branch gap smaller than the
    sibling gap.
    """

    sibling_unit: float = FORWARD_SIBLING_UNIT
    cross_branch: float = FORWARD_CROSS_BRANCH

    def __post_init__(self) -> None:
        if self.sibling_unit <= 0 or self.cross_branch <= 0:
            raise LayoutError(
                f"Separation must be positive, got sibling_unit={self.sibling_unit}, "
                f"cross_branch={self.cross_branch}"
            )

    def gap(self, tree: RecipeTree, previous: TreeNode, current: TreeNode) -> float:
        if previous.parent is not None and previous.parent == current.parent:
            siblings = tree.node(current.parent).children or ()
            return self.sibling_unit * max(len(siblings), 2) / 2
        return self.cross_branch


_SEPARATIONS: Dict[LayoutStrategy, SeparationPolicy] = {
    LayoutStrategy.FORWARD: SeparationPolicy(FORWARD_SIBLING_UNIT, FORWARD_CROSS_BRANCH),
    LayoutStrategy.DEEP: SeparationPolicy(DEEP_SIBLING_UNIT, DEEP_CROSS_BRANCH),
}


def separation_for(strategy: LayoutStrategy) -> SeparationPolicy:
    # Bidirectional has no two-frontier placement yet and reuses forward.
    if strategy is LayoutStrategy.BIDIRECTIONAL:
        return _SEPARATIONS[LayoutStrategy.FORWARD]
    return _SEPARATIONS[strategy]


def calculate_layout(
    tree: RecipeTree,
    strategy: LayoutStrategy = LayoutStrategy.FORWARD,
    separation: Optional[SeparationPolicy] = None,
) -> Positions:
    """
    Assign logical ``(x, y)`` coordinates to every node of ``tree``.

    Args:
        tree: The recipe tree to place. Node ``x``/``y`` attributes are set.
        strategy: Layout strategy chosen from the search mode.
        separation: Overrides the strategy's default leaf separation.

    Returns:
        Mapping from node key to ``(x, y)``. Calling this again on the same
        tree gives identical coordinates.
    """
    if tree.is_empty():
        return {}
    policy = separation or separation_for(strategy)

    positions: Positions = {}
    leaf_state: List[Optional[TreeNode]] = [None]  # last placed leaf
    leaf_x_ref: List[float] = [0.0]
    _assign_coords(tree, tree.root_key, policy, positions, leaf_state, leaf_x_ref)
    return positions


def _assign_coords(
    tree: RecipeTree,
    key: str,
    policy: SeparationPolicy,
    positions: Positions,
    leaf_state: List[Optional[TreeNode]],
    leaf_x_ref: List[float],
) -> float:
    """
    Recursively place the subtree rooted at ``key``.

    Args:
        leaf_state: Mutable one-element list holding the previously placed leaf.
        leaf_x_ref: Mutable one-element list holding that leaf's x.

    Returns:
        The x coordinate of the node.
    """
    node = tree.node(key)
    y = float(node.depth)

    if node.is_leaf:
        previous = leaf_state[0]
        if previous is None:
            x = 0.0
        else:
            x = leaf_x_ref[0] + policy.gap(tree, previous, node)
        leaf_state[0] = node
        leaf_x_ref[0] = x
    else:
        child_xs = [
            _assign_coords(tree, child, policy, positions, leaf_state, leaf_x_ref)
            for child in node.children
        ]
        x = (min(child_xs) + max(child_xs)) / 2

    node.x = x
    node.y = y
    positions[key] = (x, y)
    return x


def scale_positions(
    positions: Positions, x_spacing: float, y_spacing: float
) -> Positions:
    """Convert logical units to pixels."""
    return {
        key: (x * x_spacing, y * y_spacing) for key, (x, y) in positions.items()
    }


def layout_bounds(positions: Positions) -> Tuple[float, float, float, float]:
    """``(min_x, min_y, max_x, max_y)`` of a layout, zeros when empty."""
    if not positions:
        return (0.0, 0.0, 0.0, 0.0)
    xs = [x for x, _ in positions.values()]
    ys = [y for _, y in positions.values()]
    return (min(xs), min(ys), max(xs), max(ys))
