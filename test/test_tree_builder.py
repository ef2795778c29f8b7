import logging

import pytest

from recipetree.exceptions import TreeBuildError
from recipetree.steps import SynthesisStep, TierInfo, parse_steps
from recipetree.tree import build_recipe_tree, identity_key


def test_identity_key_format():
    assert identity_key("Mud", 1, 1, 0) == "Mud-1-1-0"


def test_sample_tree_structure(sample_steps):
    tree = build_recipe_tree(sample_steps)

    assert tree.root_key == "Brick-2-0-0"
    assert tree.root.label == "Brick"
    assert tree.root.depth == 0
    assert tree.root.children == ("Mud-1-1-0", "Fire-0-1-0")

    mud = tree.node("Mud-1-1-0")
    assert mud.depth == 1
    assert mud.step_index == 0
    assert mud.children == ("Earth-0-2-0", "Water-0-2-0")
    assert mud.parent == "Brick-2-0-0"

    # Fire feeds Brick directly, so it sits one level below the root
    fire = tree.node("Fire-0-1-0")
    assert fire.depth == 1
    assert fire.is_leaf
    assert fire.step_index is None

    assert tree.node("Earth-0-2-0").depth == 2
    assert tree.node("Water-0-2-0").depth == 2
    assert len(tree) == 5
    assert tree.max_depth() == 2


def test_sample_tree_edges_point_from_ingredient_to_result(sample_steps):
    tree = build_recipe_tree(sample_steps)

    assert tree.edge_ids() == [
        "e-Earth-0-2-0-Mud-1-1-0",
        "e-Water-0-2-0-Mud-1-1-0",
        "e-Mud-1-1-0-Brick-2-0-0",
        "e-Fire-0-1-0-Brick-2-0-0",
    ]
    for edge in tree.edges:
        assert tree.node(edge.source).parent == edge.target


def test_traversal_is_left_first_preorder(sample_steps):
    tree = build_recipe_tree(sample_steps)

    assert [n.label for n in tree.traverse()] == ["Brick", "Mud", "Earth", "Water", "Fire"]
    assert [n.label for n in tree.leaves()] == ["Earth", "Water", "Fire"]


def test_build_is_deterministic(reused_steps):
    first = build_recipe_tree(reused_steps)
    second = build_recipe_tree(reused_steps)

    assert first.signature() == second.signature()
    assert list(first.nodes_by_key) == list(second.nodes_by_key)


def test_self_combination_produces_two_distinct_children(self_combination_steps):
    tree = build_recipe_tree(self_combination_steps)

    lake = tree.node("Lake-1-1-0")
    left, right = lake.children
    assert left != right
    assert {left, right} == {"Water-0-2-0", "Water-0-2-1"}
    assert tree.node(left).label == tree.node(right).label == "Water"
    assert len([e for e in tree.edges if e.target == lake.key]) == 2


def test_reused_intermediate_is_duplicated_per_consumer(reused_steps):
    tree = build_recipe_tree(reused_steps)

    muds = [n for n in tree if n.label == "Mud"]
    assert len(muds) == 2
    assert {n.key for n in muds} == {"Mud-1-2-0", "Mud-1-2-1"}
    assert {n.parent for n in muds} == {"Brick-2-1-0", "Dust-2-1-0"}
    # Every Mud copy carries its own ingredient subtree
    for mud in muds:
        assert len(mud.children) == 2
        assert mud.step_index == 0


def test_upto_index_builds_partial_tree(reused_steps):
    tree = build_recipe_tree(reused_steps, upto_index=1)

    assert tree.root.label == "Brick"
    assert tree.upto_index == 1
    assert tree.step_count == 4
    assert "Dust-2-1-0" not in tree
    assert all(n.label != "Wall" for n in tree)


def test_unknown_ingredient_becomes_leaf():
    steps = parse_steps(
        [
            {"ingredients": ["Earth", "Water"], "result": "Mud", "tiers": {"result": 1}},
            {"ingredients": ["Mud", "Unobtainium"], "result": "Thing", "tiers": {"left": 1, "right": 7, "result": 8}},
        ]
    )
    tree = build_recipe_tree(steps)

    odd = tree.node("Unobtainium-7-1-0")
    assert odd.is_leaf
    assert odd.label == "Unobtainium"


def test_ingredient_produced_later_is_not_resolved():
    steps = parse_steps(
        [
            {"ingredients": ["Mud", "Fire"], "result": "Brick"},
            {"ingredients": ["Earth", "Water"], "result": "Mud"},
        ]
    )
    tree = build_recipe_tree(steps, upto_index=0)

    assert tree.node("Mud-0-1-0").is_leaf


def test_cyclic_steps_terminate():
    steps = parse_steps(
        [
            {"ingredients": ["B", "A"], "result": "A"},
            {"ingredients": ["A", "A"], "result": "B"},
        ]
    )
    tree = build_recipe_tree(steps)

    assert tree.root.label == "B"
    # Step 1 consumes A from step 0; step 0's ingredients are unresolved leaves
    assert tree.max_depth() == 2


def test_build_rejects_empty_steps_and_bad_index(sample_steps):
    with pytest.raises(TreeBuildError):
        build_recipe_tree([])
    with pytest.raises(TreeBuildError):
        build_recipe_tree(sample_steps, upto_index=2)
    with pytest.raises(ValueError):
        build_recipe_tree(sample_steps, upto_index=-1)


def test_colliding_keys_still_give_every_slot_its_own_node():
    # "X-" at tier 1 and "X" at tier -1 both format as "X--1-1-0"
    step = SynthesisStep(("X-", "X"), "R", TierInfo(left=1, right=-1, result=2))
    tree = build_recipe_tree([step])

    left, right = tree.root.children
    assert left != right
    assert tree.node(left).label == "X-"
    assert tree.node(right).label == "X"
    assert len({edge.id for edge in tree.edges}) == 2


def test_unresolved_ingredients_are_logged_unless_base(caplog):
    steps = parse_steps(
        [
            {"ingredients": ["Earth", "Water"], "result": "Mud", "tiers": {"result": 1}},
            {"ingredients": ["Mud", "Stardust"], "result": "Thing", "tiers": {"left": 1, "result": 2}},
        ]
    )
    caplog.set_level(logging.DEBUG, logger="recipetree.tree")

    build_recipe_tree(steps)

    unresolved = [r.getMessage() for r in caplog.records if "not a base element" in r.getMessage()]
    assert len(unresolved) == 1
    assert "'Stardust'" in unresolved[0]
