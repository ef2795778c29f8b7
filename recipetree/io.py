import json
from enum import Enum
from pathlib import Path
from typing import IO, Any, Dict, List, Union
from uuid import UUID

from recipetree.reveal import RevealFrame
from recipetree.steps import (
    SearchResult,
    SynthesisStep,
    parse_search_response,
    parse_steps,
    search_result_to_dict,
    step_to_dict,
)
from recipetree.tree import RecipeEdge, RecipeTree, TreeNode


class RecipeEncoder(json.JSONEncoder):
    def default(self, o: Any):
        if isinstance(o, TreeNode):
            node_dict: Dict[str, Any] = {
                "id": o.key,
                "label": o.label,
                "tier": o.tier,
                "depth": o.depth,
                "isRoot": o.is_root,
                "isLeaf": o.is_leaf,
            }
            # Only include non-default fields to keep JSON clean
            if o.children:
                node_dict["children"] = list(o.children)
            if o.step_index is not None:
                node_dict["step"] = o.step_index
            if o.position is not None:
                node_dict["position"] = {"x": o.x, "y": o.y}
            return node_dict

        if isinstance(o, RecipeEdge):
            return {"id": o.id, "source": o.source, "target": o.target}

        if isinstance(o, RevealFrame):
            return {
                "cursor": o.cursor,
                "nodes": list(o.node_keys),
                "edges": list(o.edge_ids),
            }

        if isinstance(o, RecipeTree):
            return tree_to_dict(o)

        if isinstance(o, SynthesisStep):
            return step_to_dict(o)

        if isinstance(o, SearchResult):
            return search_result_to_dict(o)

        if isinstance(o, Enum):
            return o.value

        if isinstance(o, UUID):
            return str(o)

        return super().default(o)


def tree_to_dict(tree: RecipeTree) -> Dict[str, Any]:
    return {
        "root": tree.root_key,
        "nodes": list(tree.nodes_by_key.values()),
        "edges": tree.edges,
        "stepCount": tree.step_count,
    }


def dump_json(obj: Any, f: IO[str]):
    json.dump(obj, f, cls=RecipeEncoder)


def dumps_json(obj: Any) -> str:
    return json.dumps(obj, cls=RecipeEncoder)


def read_steps(path: Union[str, Path]) -> List[SynthesisStep]:
    """
    Read a step sequence from a JSON file.

    The file may hold a bare step list or a full search response, in which
    case the first path is returned.
    """
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, list):
        return parse_steps(data)
    return parse_search_response(data).primary_path


def write_json(obj: Any, path: Union[str, Path]):
    with open(path, "w") as f:
        dump_json(obj, f)
