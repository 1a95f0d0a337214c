"""Pytest configuration and shared fixtures."""

import random
import sys
from pathlib import Path

import pytest

# Add the source directory to the Python path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir / "src"))


@pytest.fixture
def rng():
    """A seeded source of uniform draws, for reproducible networks and start positions."""
    return random.Random(42)


@pytest.fixture
def small_config():
    """A default configuration shrunk to a quick-running session."""
    from herdevo.run.config import Config

    config = Config()
    config.population_size               = 4
    config.flock_size                    = 5
    config.initial_moves_before_mutation = 20
    config.max_number_generations        = 2
    return config


@pytest.fixture
def open_world():
    """A 300x300 field with no fences, two waypoints and a goal in the top-right corner."""
    from herdevo.world.world_model import GoalRegion, WorldModel

    return WorldModel(300, 300,
                      waypoints=[(100, 100), (250, 50)],
                      fences=[],
                      goal=GoalRegion(260, 0, 40, 40))


@pytest.fixture
def walled_world():
    """Like 'open_world', with a vertical fence between x=150 and the goal."""
    from herdevo.world.world_model import GoalRegion, WorldModel

    return WorldModel(300, 300,
                      waypoints=[(100, 100), (200, 100), (250, 50)],
                      fences=[[(150, 0), (150, 200)]],
                      goal=GoalRegion(260, 0, 40, 40))
