import threading

import pytest

from recipetree.layout import LayoutStrategy
from recipetree.movie import RecipeMovieCache, build_recipe_movie
from recipetree.reveal import reveal
from recipetree.steps import parse_steps


def test_movie_is_built_once_for_the_full_sequence(sample_steps):
    movie = build_recipe_movie(sample_steps, "dfs")

    assert movie.strategy is LayoutStrategy.DEEP
    assert movie.step_count == 2
    assert movie.tree.root.label == "Brick"
    assert set(movie.positions) == set(movie.tree.nodes_by_key)
    assert len(movie.frames) == 2
    assert movie.frames[0] == reveal(movie.tree, 0)


def test_positions_do_not_move_between_frames(reused_steps):
    movie = build_recipe_movie(reused_steps)
    snapshot = dict(movie.positions)

    for cursor in range(movie.step_count):
        for node in movie.frame(cursor).nodes(movie.tree):
            assert node.position == snapshot[node.key]


def test_frame_lookup_is_clamped(sample_steps):
    movie = build_recipe_movie(sample_steps)

    assert movie.frame(5) is movie.frames[-1]
    assert movie.frame(-1).is_empty()


def test_empty_movie():
    movie = build_recipe_movie([])

    assert movie.is_empty()
    assert movie.tree.is_empty()
    assert movie.frames == []
    assert movie.frame(0).is_empty()


def test_cache_reuses_movies(sample_steps, reused_steps):
    cache = RecipeMovieCache(max_entries=2)

    first = cache.get(sample_steps, "bfs")
    assert cache.get(list(sample_steps), LayoutStrategy.FORWARD) is first
    assert (cache.hits, cache.misses) == (1, 1)

    deep = cache.get(sample_steps, "dfs")
    assert deep is not first
    preview = cache.get(sample_steps, "dfs", base_preview=True)
    assert preview.base_preview
    assert len(cache) == 2

    # Oldest entry was evicted
    assert cache.get(sample_steps, "bfs") is not first
    assert cache.misses == 4


def test_cache_rejects_zero_size():
    with pytest.raises(ValueError):
        RecipeMovieCache(max_entries=0)


def test_cache_survives_concurrent_eviction():
    sequences = [
        parse_steps([{"ingredients": ["Earth", "Water"], "result": f"Mud{i}", "tiers": {"result": 1}}])
        for i in range(4)
    ]
    cache = RecipeMovieCache(max_entries=1)
    errors = []
    start = threading.Barrier(8)

    def worker(offset):
        start.wait()
        try:
            for round_index in range(50):
                steps = sequences[(offset + round_index) % len(sequences)]
                assert cache.get(steps).tree.root.label == steps[0].result
        except Exception as e:  # collected for the main thread
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(cache) == 1
    assert cache.hits + cache.misses == 8 * 50
