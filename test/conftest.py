import logging
import os
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from recipetree.logger import rt_logger
from recipetree.steps import parse_steps


def pytest_configure(config):
    """Set up test environment before tests run."""
    output_dir = (
        Path(os.path.dirname(os.path.dirname(__file__))) / "output" / "test_debug"
    )
    output_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Enable recipe tree tracing
    rt_logger.disabled = False


def pytest_sessionfinish(session, exitstatus):
    """Write the accumulated recipe tree trace next to the other debug output."""
    if rt_logger.disabled:
        return
    output_dir = (
        Path(os.path.dirname(os.path.dirname(__file__))) / "output" / "test_debug"
    )
    rt_logger.write_html(output_dir / "recipe_tree_trace.html")


class _Handle:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Collects scheduled callbacks; tests fire them explicitly."""

    def __init__(self) -> None:
        self.handles: List[_Handle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _Handle:
        handle = _Handle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> List[_Handle]:
        return [h for h in self.handles if not h.cancelled]

    def fire(self, handle: Optional[_Handle] = None) -> None:
        """Run ``handle`` (default: the most recent pending one)."""
        if handle is None:
            handle = self.pending[-1]
        handle.cancelled = True
        handle.callback()

    def run_until_idle(self, limit: int = 100) -> int:
        fired = 0
        while self.pending and fired < limit:
            self.fire()
            fired += 1
        return fired


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


SAMPLE_STEPS = [
    {
        "ingredients": ["Earth", "Water"],
        "result": "Mud",
        "tiers": {"left": 0, "right": 0, "result": 1},
    },
    {
        "ingredients": ["Mud", "Fire"],
        "result": "Brick",
        "tiers": {"left": 1, "right": 0, "result": 2},
    },
]


@pytest.fixture
def raw_sample_steps():
    return [dict(step) for step in SAMPLE_STEPS]


@pytest.fixture
def sample_steps():
    return parse_steps(SAMPLE_STEPS)


@pytest.fixture
def self_combination_steps():
    return parse_steps(
        [
            {
                "ingredients": ["Water", "Water"],
                "result": "Lake",
                "tiers": {"left": 0, "right": 0, "result": 1},
            },
            {
                "ingredients": ["Lake", "Fire"],
                "result": "Steam",
                "tiers": {"left": 1, "right": 0, "result": 2},
            },
        ]
    )


@pytest.fixture
def reused_steps():
    """``Mud`` is produced once and consumed by two later steps."""
    return parse_steps(
        [
            {"ingredients": ["Earth", "Water"], "result": "Mud", "tiers": {"result": 1}},
            {"ingredients": ["Mud", "Fire"], "result": "Brick", "tiers": {"left": 1, "result": 2}},
            {"ingredients": ["Mud", "Air"], "result": "Dust", "tiers": {"left": 1, "result": 2}},
            {"ingredients": ["Brick", "Dust"], "result": "Wall", "tiers": {"left": 2, "right": 2, "result": 3}},
        ]
    )
