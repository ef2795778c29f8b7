"""
Builds the frontend-specific data structures from a RecipeMovie.

Key Responsibilities:
- Scale logical layout units to pixel positions.
- Flatten nodes and edges into the shape the graph widget consumes.
- Attach the per-cursor frames so the client can scrub without a round trip.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from recipetree.constants import NODE_X_SPACING, NODE_Y_SPACING
from recipetree.layout import layout_bounds, scale_positions
from recipetree.movie import RecipeMovie
from recipetree.playback import PlaybackController
from recipetree.reveal import RevealFrame, newly_revealed
from recipetree.steps import step_to_dict


# =============================================================================
# Main Entry Points
# =============================================================================


def assemble_frontend_dict(
    movie: RecipeMovie,
    x_spacing: float = NODE_X_SPACING,
    y_spacing: float = NODE_Y_SPACING,
) -> Dict[str, Any]:
    """
    Convert a RecipeMovie into the flat dictionary sent to the frontend.

    Empty movies produce empty node/edge/frame lists rather than an error.
    """
    pixel_positions = scale_positions(movie.positions, x_spacing, y_spacing)
    min_x, min_y, max_x, max_y = layout_bounds(pixel_positions)

    return {
        "strategy": movie.strategy.value,
        "stepCount": movie.step_count,
        "steps": [step_to_dict(step) for step in movie.steps],
        "root": movie.tree.root_key,
        "nodes": _serialize_nodes(movie, pixel_positions),
        "edges": _serialize_edges(movie),
        "frames": [_serialize_frame(frame) for frame in movie.frames],
        "basePreview": movie.base_preview,
        "bounds": {"minX": min_x, "minY": min_y, "maxX": max_x, "maxY": max_y},
    }


def assemble_frame_event(
    movie: RecipeMovie,
    controller: PlaybackController,
    previous: Optional[RevealFrame] = None,
) -> Dict[str, Any]:
    """
    Payload of one SSE ``frame`` event for the controller's current cursor.

    ``added_nodes``/``added_edges`` are relative to ``previous`` so the client
    can animate only what appeared.
    """
    frame = movie.frame(controller.cursor)
    added_nodes, added_edges = newly_revealed(
        previous or RevealFrame(cursor=-1), frame
    )
    snapshot = controller.snapshot()
    return {
        **snapshot,
        "nodes": list(frame.node_keys),
        "edges": list(frame.edge_ids),
        "added_nodes": added_nodes,
        "added_edges": added_edges,
    }


# =============================================================================
# Helpers
# =============================================================================


def _serialize_nodes(
    movie: RecipeMovie, pixel_positions: Dict[str, Any]
) -> List[Dict[str, Any]]:
    nodes: List[Dict[str, Any]] = []
    for node in movie.tree:
        x, y = pixel_positions.get(node.key, (0.0, 0.0))
        nodes.append(
            {
                "id": node.key,
                "position": {"x": x, "y": y},
                "data": {
                    "label": node.label,
                    "tier": node.tier,
                    "depth": node.depth,
                    "step": node.step_index,
                    "isRoot": node.is_root,
                    "isLeaf": node.is_leaf,
                },
            }
        )
    return nodes


def _serialize_edges(movie: RecipeMovie) -> List[Dict[str, str]]:
    return [
        {"id": edge.id, "source": edge.source, "target": edge.target}
        for edge in movie.tree.edges
    ]


def _serialize_frame(frame: RevealFrame) -> Dict[str, Any]:
    return {
        "cursor": frame.cursor,
        "nodes": list(frame.node_keys),
        "edges": list(frame.edge_ids),
    }
