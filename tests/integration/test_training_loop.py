"""
Integration tests for the complete training loop.

These tests train real populations on the standard course for a few
generations. They check the bookkeeping of the loop (generation counts,
move budgets, stable network ids, model files), not how well the herders learn.
"""

import random
from pathlib import Path

import pytest

from herdevo import Config, Experiment, TrainingSession, Trial, WorldModel
from herdevo.pool.population import TransitionOutcome


@pytest.fixture
def config():
    """The shipped configuration, shrunk to a few quick generations."""
    config = Config(str(Path(__file__).parents[2] / 'configs' / 'default.ini'))
    config.population_size               = 6
    config.flock_size                    = 8
    config.initial_moves_before_mutation = 40
    config.max_number_generations        = 3
    return config


# ============================================================================
# Test Training Session End-to-End
# ============================================================================

class TestTrainingLoop:

    def test_generations_on_standard_course(self, config):
        session = TrainingSession(config, rng=random.Random(42))
        session.start()

        while session.generation < 3:
            session.tick()

        assert [s.generation for s in session.stats] == [1, 2, 3]
        assert all(s.outcome == TransitionOutcome.MUTATED for s in session.stats)
        assert sorted(session.population.networks) == list(range(6))
        assert sorted(session.flocks) == list(range(6))

    def test_budgets_grow(self, config):
        session = TrainingSession(config, rng=random.Random(1))
        session.start()

        while session.generation < 3:
            session.tick()

        budgets = [s.moves_budget for s in session.stats]
        assert budgets == sorted(budgets)

    def test_fitness_within_bounds(self, config):
        """Test every recorded fitness is a waypoint index or a goal-weighted mean."""
        session = TrainingSession(config, rng=random.Random(2))
        session.start()

        while session.generation < 2:
            session.tick()

        for stats in session.stats:
            assert 0 <= stats.mean_fitness <= stats.best_fitness <= 100

    def test_threaded_session(self, config):
        session = TrainingSession(config, rng=random.Random(3))
        session.start()

        while session.generation < 2:
            session.tick(num_jobs=3)

        assert len(session.stats) == 2

    def test_single_herder_is_reinitialised(self, config):
        config.population_size = 1
        session = TrainingSession(config, rng=random.Random(4))
        session.start()

        session.next_generation()

        assert session.stats[-1].outcome == TransitionOutcome.REINITIALISED

    def test_heading_steering(self, config):
        config.steering_mode = 'heading'
        config.input_wall_sensor = True
        config.input_angle_to_centroid = True
        session = TrainingSession(config, rng=random.Random(5))
        session.start()

        for _ in range(60):
            session.tick()

        assert session.layers[0] == 63 + 8 + 1 + 1


# ============================================================================
# Test Model Persistence Across Sessions
# ============================================================================

class TestModelPersistence:

    def test_resume_from_saved_models(self, config, tmp_path):
        config.model_directory = str(tmp_path)
        config.save_models     = True

        first = TrainingSession(config, rng=random.Random(6))
        first.start()
        while first.generation < 1:
            first.tick()

        saved = {n.id: n.to_lines() for n in first.population}

        second = TrainingSession(config, rng=random.Random(7))
        second.start()

        assert second.moves_left > config.loaded_moves_before_mutation
        for network in second.population:
            assert network.to_lines() == saved[network.id]


# ============================================================================
# Test Trials and Experiments
# ============================================================================

class TestTrialsAndExperiments:

    def test_trial_on_custom_course(self, config, capsys):
        world = WorldModel.default_course(400, 300)
        config.world_width = 400
        trial = Trial(config, world)

        trial.run()

        assert trial.generation == 3
        assert trial.session.world is world
        assert "Trained 3 generations" in capsys.readouterr().out

    def test_experiment(self, config, capsys):
        config.max_number_generations = 1
        results = Experiment(2, config).run()

        assert len(results) == 2
        assert all(r["number_generations"] == 1 for r in results)
