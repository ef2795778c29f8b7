"""
Step-by-step reveal of a fully built recipe tree.

The tree is built and laid out once for the complete step sequence; a frame
for a cursor position is only a filter over that tree's nodes and edges, so
nodes never move while the cursor advances.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Set, Tuple

from recipetree.tree import RecipeEdge, RecipeTree, TreeNode


@dataclass(frozen=True)
class RevealFrame:
    """Visible node keys and edge ids for one cursor position."""

    cursor: int
    node_keys: Tuple[str, ...] = ()
    edge_ids: Tuple[str, ...] = ()

    def __contains__(self, key: object) -> bool:
        return key in self.node_keys or key in self.edge_ids

    def is_empty(self) -> bool:
        return not self.node_keys

    def nodes(self, tree: RecipeTree) -> List[TreeNode]:
        return [tree.node(key) for key in self.node_keys]

    def edges(self, tree: RecipeTree) -> List[RecipeEdge]:
        visible = set(self.edge_ids)
        return [edge for edge in tree.edges if edge.id in visible]


def reveal(tree: RecipeTree, cursor: int, base_preview: bool = False) -> RevealFrame:
    """
    Compute the visible part of ``tree`` after steps ``0..cursor``.

    A step contributes the node it produced and that node's ingredient
    children; an edge is visible when both of its endpoints are. Nodes and
    edges keep the order of the full tree.

    Args:
        tree: Tree built for the complete step sequence.
        cursor: Current step index; values past the last step are clamped.
        base_preview: When True, cursor 0 shows only the tier-0 elements
            (no edges), and later cursors keep showing all of them.

    Returns:
        The frame for ``cursor``. Negative cursors and empty trees give an
        empty frame.
    """
    if tree.is_empty() or cursor < 0:
        return RevealFrame(cursor=cursor)
    cursor = min(cursor, tree.step_count - 1)

    visible: Set[str] = set()
    if base_preview:
        visible.update(node.key for node in tree if node.tier == 0)
        if cursor == 0:
            return RevealFrame(
                cursor=0,
                node_keys=tuple(key for key in tree.nodes_by_key if key in visible),
            )

    for node in tree:
        if node.step_index is not None and node.step_index <= cursor:
            visible.add(node.key)
            visible.update(node.children or ())

    node_keys = tuple(key for key in tree.nodes_by_key if key in visible)
    edge_ids = tuple(
        edge.id
        for edge in tree.edges
        if edge.source in visible and edge.target in visible
    )
    return RevealFrame(cursor=cursor, node_keys=node_keys, edge_ids=edge_ids)


def reveal_all(tree: RecipeTree, base_preview: bool = False) -> List[RevealFrame]:
    """One frame per cursor position ``0..step_count-1``."""
    if tree.is_empty():
        return []
    return [reveal(tree, k, base_preview) for k in range(tree.step_count)]


def newly_revealed(
    previous: RevealFrame, current: RevealFrame
) -> Tuple[List[str], List[str]]:
    """Node keys and edge ids present in ``current`` but not in ``previous``."""
    seen_nodes = set(previous.node_keys)
    seen_edges = set(previous.edge_ids)
    return (
        [key for key in current.node_keys if key not in seen_nodes],
        [edge_id for edge_id in current.edge_ids if edge_id not in seen_edges],
    )
