import pytest

from recipetree.exceptions import LayoutError
from recipetree.layout import (
    LayoutStrategy,
    SeparationPolicy,
    calculate_layout,
    layout_bounds,
    scale_positions,
    separation_for,
)
from recipetree.tree import RecipeTree, build_recipe_tree


def test_forward_layout_of_sample(sample_steps):
    tree = build_recipe_tree(sample_steps)
    positions = calculate_layout(tree, LayoutStrategy.FORWARD)

    assert positions == {
        "Earth-0-2-0": (0.0, 2.0),
        "Water-0-2-0": (1.0, 2.0),
        "Mud-1-1-0": (0.5, 1.0),
        "Fire-0-1-0": (2.0, 1.0),
        "Brick-2-0-0": (1.25, 0.0),
    }
    assert tree.node("Brick-2-0-0").position == (1.25, 0.0)


def test_deep_layout_packs_branches_tighter(sample_steps):
    tree = build_recipe_tree(sample_steps)
    forward = calculate_layout(tree, LayoutStrategy.FORWARD)
    deep = calculate_layout(tree, LayoutStrategy.DEEP)

    assert deep["Fire-0-1-0"] == (1.5, 1.0)
    assert deep["Brick-2-0-0"] == (1.0, 0.0)
    forward_width = layout_bounds(forward)[2] - layout_bounds(forward)[0]
    deep_width = layout_bounds(deep)[2] - layout_bounds(deep)[0]
    assert deep_width < forward_width


def test_bidirectional_matches_forward(reused_steps):
    tree = build_recipe_tree(reused_steps)

    assert calculate_layout(tree, LayoutStrategy.BIDIRECTIONAL) == calculate_layout(
        tree, LayoutStrategy.FORWARD
    )
    assert separation_for(LayoutStrategy.BIDIRECTIONAL) == separation_for(
        LayoutStrategy.FORWARD
    )


def test_layout_is_idempotent(reused_steps):
    tree = build_recipe_tree(reused_steps)

    first = calculate_layout(tree, LayoutStrategy.DEEP)
    second = calculate_layout(tree, LayoutStrategy.DEEP)
    assert first == second


def test_leaves_never_overlap_and_parents_sit_between_children(reused_steps):
    tree = build_recipe_tree(reused_steps)
    calculate_layout(tree)

    leaf_xs = [leaf.x for leaf in tree.leaves()]
    assert leaf_xs == sorted(leaf_xs)
    assert len(set(leaf_xs)) == len(leaf_xs)

    for node in tree:
        assert node.y == float(node.depth)
        if node.children:
            xs = [tree.node(child).x for child in node.children]
            assert node.x == (min(xs) + max(xs)) / 2


def test_custom_separation():
    policy = SeparationPolicy(sibling_unit=2.0, cross_branch=3.0)
    assert policy.sibling_unit == 2.0

    with pytest.raises(LayoutError):
        SeparationPolicy(sibling_unit=0, cross_branch=1.0)
    with pytest.raises(ValueError):
        SeparationPolicy(sibling_unit=1.0, cross_branch=-1.0)


def test_custom_separation_widens_layout(sample_steps):
    tree = build_recipe_tree(sample_steps)
    positions = calculate_layout(tree, separation=SeparationPolicy(2.0, 3.0))

    assert positions["Water-0-2-0"] == (2.0, 2.0)
    assert positions["Fire-0-1-0"] == (5.0, 1.0)


def test_empty_tree_layout():
    assert calculate_layout(RecipeTree.empty()) == {}
    assert layout_bounds({}) == (0.0, 0.0, 0.0, 0.0)


@pytest.mark.parametrize(
    "mode, expected",
    [
        ("bfs", LayoutStrategy.FORWARD),
        ("DFS", LayoutStrategy.DEEP),
        ("bidirectional", LayoutStrategy.BIDIRECTIONAL),
        ("multi", LayoutStrategy.FORWARD),
        (None, LayoutStrategy.FORWARD),
        (LayoutStrategy.DEEP, LayoutStrategy.DEEP),
    ],
)
def test_strategy_from_mode(mode, expected):
    assert LayoutStrategy.from_mode(mode) is expected


def test_scale_positions_to_pixels(sample_steps):
    tree = build_recipe_tree(sample_steps)
    pixels = scale_positions(calculate_layout(tree), 180.0, 120.0)

    assert pixels["Brick-2-0-0"] == (225.0, 0.0)
    assert pixels["Earth-0-2-0"] == (0.0, 240.0)
    assert layout_bounds(pixels) == (0.0, 0.0, 360.0, 240.0)


def test_only_deep_narrows_the_cross_branch_gap():
    forward = separation_for(LayoutStrategy.FORWARD)
    deep = separation_for(LayoutStrategy.DEEP)

    assert forward.cross_branch == forward.sibling_unit
    assert deep.cross_branch < deep.sibling_unit
