"""Combined logger with recipe tree helpers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from recipetree.logger.base_logger import AlgorithmLogger
from recipetree.logger.formatting import format_keys
from recipetree.logger.table_logger import TableLogger

if TYPE_CHECKING:
    from recipetree.reveal import RevealFrame
    from recipetree.tree import RecipeTree


class Logger(TableLogger):
    """
    Table-capable logger that also knows how to dump recipe trees.

    Usage:
        logger = Logger("RecipeTree")
        logger.section("Build")
        logger.log_recipe_tree(tree)
        logger.log_reveal_frame(frame, tree)
    """

    def __init__(self, name: str):
        AlgorithmLogger.__init__(self, name)

    def setup_console_logging(self, level: int = logging.INFO):
        """Enable logging to the console."""
        self.disabled = False
        if not any(isinstance(h, logging.StreamHandler) for h in self.logger.handlers):
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
        self.logger.setLevel(level)

    def log_recipe_tree(self, tree: RecipeTree, title: Optional[str] = None) -> None:
        if self.disabled:
            return
        rows = [
            [
                node.key,
                node.label,
                node.tier,
                node.depth,
                "-" if node.step_index is None else node.step_index,
                "leaf" if node.is_leaf else " + ".join(node.children or ()),
                "-" if node.position is None else f"({node.x:g}, {node.y:g})",
            ]
            for node in tree.traverse()
        ]
        self.table(
            rows,
            headers=["key", "element", "tier", "depth", "step", "children", "position"],
            title=title or f"Recipe tree rooted at {tree.root_key}",
        )

    def log_reveal_frame(self, frame: RevealFrame, tree: RecipeTree) -> None:
        if self.disabled:
            return
        self.subsection(f"Cursor {frame.cursor} / {max(tree.step_count - 1, 0)}")
        self.result("Visible nodes", format_keys(frame.node_keys))
        self.result("Visible edges", format_keys(frame.edge_ids))
