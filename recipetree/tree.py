"""
Recipe tree reconstruction.

Turns a flat, ordered list of synthesis steps into a rooted tree whose root is
the result of the selected step and whose children are the ingredients that
went into it. Elements that are produced once but consumed several times, and
self-combinations (``Water + Water``), are duplicated into distinct nodes so
that every ingredient slot has its own node and its own edge.
"""

from __future__ import annotations

import logging
from bisect import bisect_left
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from recipetree.constants import BASE_ELEMENTS
from recipetree.exceptions import TreeBuildError
from recipetree.logger import format_step, rt_logger
from recipetree.steps import SynthesisStep

logger = logging.getLogger(__name__)


def identity_key(label: str, tier: int, depth: int, occurrence: int) -> str:
    """Key of a node in the recipe tree: ``"{label}-{tier}-{depth}-{occurrence}"``."""
    return f"{label}-{tier}-{depth}-{occurrence}"


class TreeNode:
    """
    One element occurrence in a recipe tree.

    Nodes are created once per build and only their ``x``/``y`` coordinates
    are written afterwards (by the layout engine).
    """

    __slots__ = (
        "key",
        "label",
        "tier",
        "depth",
        "occurrence",
        "children",
        "parent",
        "step_index",
        "x",
        "y",
    )

    def __init__(
        self,
        label: str,
        tier: int,
        depth: int,
        occurrence: int = 0,
        children: Optional[Tuple[str, str]] = None,
        step_index: Optional[int] = None,
    ):
        self.key = identity_key(label, tier, depth, occurrence)
        self.label = label
        self.tier = tier
        self.depth = depth
        self.occurrence = occurrence
        self.children = children
        self.parent: Optional[str] = None
        # Index of the step that produced this node, None for leaves
        self.step_index = step_index
        self.x: Optional[float] = None
        self.y: Optional[float] = None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def is_root(self) -> bool:
        return self.depth == 0

    @property
    def position(self) -> Optional[Tuple[float, float]]:
        if self.x is None or self.y is None:
            return None
        return (self.x, self.y)

    def __repr__(self) -> str:
        return f"TreeNode('{self.key}')"


@dataclass(frozen=True)
class RecipeEdge:
    """Directed link from an ingredient (``source``) to its result (``target``)."""

    source: str
    target: str

    @property
    def id(self) -> str:
        return f"e-{self.source}-{self.target}"


class RecipeTree:
    """Result of one tree build: the root key plus all nodes and edges."""

    def __init__(
        self,
        root_key: Optional[str],
        nodes_by_key: Dict[str, TreeNode],
        edges: List[RecipeEdge],
        step_count: int,
        upto_index: int,
    ):
        self.root_key = root_key
        self.nodes_by_key = nodes_by_key
        self.edges = edges
        self.step_count = step_count
        self.upto_index = upto_index

    @classmethod
    def empty(cls) -> "RecipeTree":
        return cls(None, {}, [], 0, -1)

    @property
    def root(self) -> Optional[TreeNode]:
        if self.root_key is None:
            return None
        return self.nodes_by_key[self.root_key]

    def __len__(self) -> int:
        return len(self.nodes_by_key)

    def __iter__(self) -> Iterator[TreeNode]:
        return iter(self.nodes_by_key.values())

    def __contains__(self, key: object) -> bool:
        return key in self.nodes_by_key

    def node(self, key: str) -> TreeNode:
        return self.nodes_by_key[key]

    def is_empty(self) -> bool:
        return self.root_key is None

    def leaves(self) -> List[TreeNode]:
        """Leaves in left-to-right order."""
        return [node for node in self.traverse() if node.is_leaf]

    def traverse(self) -> List[TreeNode]:
        """Pre-order, left child before right child."""
        if self.root_key is None:
            return []
        order: List[TreeNode] = []
        stack = [self.root_key]
        while stack:
            node = self.nodes_by_key[stack.pop()]
            order.append(node)
            if node.children:
                stack.extend(reversed(node.children))
        return order

    def max_depth(self) -> int:
        return max((node.depth for node in self), default=-1)

    def edge_ids(self) -> List[str]:
        return [edge.id for edge in self.edges]

    def signature(self) -> Tuple:
        """Hashable description of keys and structure (positions excluded)."""
        return (
            self.root_key,
            tuple(
                (n.key, n.label, n.tier, n.depth, n.children, n.step_index)
                for n in self.nodes_by_key.values()
            ),
            tuple(edge.id for edge in self.edges),
        )


class _RecipeTreeBuilder:
    """Single-use builder holding the per-build bookkeeping."""

    def __init__(self, steps: Sequence[SynthesisStep], upto_index: int):
        self.steps = steps
        self.upto_index = upto_index
        self.nodes: Dict[str, TreeNode] = {}
        self.edges: List[RecipeEdge] = []
        self._occurrences: Dict[Tuple[str, int, int], int] = {}
        # element name -> ascending step indices producing it (up to upto_index)
        self._producers: Dict[str, List[int]] = {}
        for index in range(upto_index + 1):
            self._producers.setdefault(steps[index].result, []).append(index)

    def _producer_before(self, name: str, consumer_index: int) -> Optional[int]:
        """Latest step strictly before ``consumer_index`` whose result is ``name``."""
        indices = self._producers.get(name)
        if not indices:
            return None
        pos = bisect_left(indices, consumer_index)
        if pos == 0:
            return None
        return indices[pos - 1]

    def build(self) -> RecipeTree:
        last = self.steps[self.upto_index]
        root_key = self._visit(last.result, last.tiers.result, 0, self.upto_index)
        return RecipeTree(
            root_key=root_key,
            nodes_by_key=self.nodes,
            edges=self.edges,
            step_count=len(self.steps),
            upto_index=self.upto_index,
        )

    def _visit(
        self, label: str, tier: int, depth: int, step_index: Optional[int]
    ) -> str:
        children: Optional[Tuple[str, str]] = None
        if step_index is not None:
            step = self.steps[step_index]
            left_key = self._visit(
                step.left,
                step.tiers.left,
                depth + 1,
                self._resolve(step.left, step_index),
            )
            right_key = self._visit(
                step.right,
                step.tiers.right,
                depth + 1,
                self._resolve(step.right, step_index),
            )
            children = (left_key, right_key)

        slot = (label, tier, depth)
        occurrence = self._occurrences.get(slot, 0)
        key = identity_key(label, tier, depth, occurrence)
        # Every ingredient slot gets its own node, even if a key is already taken
        while key in self.nodes:
            occurrence += 1
            key = identity_key(label, tier, depth, occurrence)
        self._occurrences[slot] = occurrence + 1

        node = TreeNode(
            label=label,
            tier=tier,
            depth=depth,
            occurrence=occurrence,
            children=children,
            step_index=step_index,
        )
        self.nodes[key] = node
        if children:
            for child_key in children:
                self.nodes[child_key].parent = key
                self.edges.append(RecipeEdge(source=child_key, target=key))
        return key

    def _resolve(self, name: str, consumer_index: int) -> Optional[int]:
        producer = self._producer_before(name, consumer_index)
        if producer is None and name.lower() not in BASE_ELEMENTS:
            logger.debug(
                "Ingredient %r of step %d is not produced earlier and not a base "
                "element; treating as leaf",
                name,
                consumer_index,
            )
        return producer


def build_recipe_tree(
    steps: Sequence[SynthesisStep], upto_index: Optional[int] = None
) -> RecipeTree:
    """
    Reconstruct the recipe tree ending at ``steps[upto_index]``.

    Walks the step list backwards from ``upto_index``: the root is that step's
    result, and each ingredient is resolved to the latest earlier step
    producing it (recursing into that step) or becomes a leaf when no earlier
    step produces it. Unknown ingredients are kept as leaves with their raw
    name rather than failing the build.

    Args:
        steps: Ordered synthesis steps; must be non-empty.
        upto_index: Index of the last step to include. Defaults to the final
            step, i.e. the complete solution path.

    Returns:
        A RecipeTree; calling this twice with the same arguments gives trees
        with identical keys and structure.

    Raises:
        TreeBuildError: If ``steps`` is empty or ``upto_index`` is out of range.
    """
    if not steps:
        raise TreeBuildError("Cannot build a recipe tree from an empty step list")
    if upto_index is None:
        upto_index = len(steps) - 1
    if not 0 <= upto_index < len(steps):
        raise TreeBuildError(
            f"upto_index {upto_index} out of range for {len(steps)} steps"
        )

    tree = _RecipeTreeBuilder(steps, upto_index).build()

    if not rt_logger.disabled:
        rt_logger.section(f"Recipe tree up to step {upto_index}")
        for index in range(upto_index + 1):
            rt_logger.info(f"Step {index}: {format_step(steps[index])}")
        rt_logger.log_recipe_tree(tree)
    logger.debug(
        "Built recipe tree for %r: %d nodes, %d edges",
        steps[upto_index].result,
        len(tree),
        len(tree.edges),
    )
    return tree
