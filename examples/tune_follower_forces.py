"""
Tuning the Follower Forces

The boid multipliers decide how easy a flock is to herd: followers that
ignore the herder cannot be driven, followers that scatter from it are lost.
This example lets Optuna search the escape and "threatened" multipliers for
the values under which a population learns the course fastest.

Each proposed configuration is scored by the best flock fitness reached in a
short trial (a fixed number of ticks), averaged over a few trials.

Usage:
    python examples/tune_follower_forces.py
"""

from pathlib import Path

from herdevo.optimization import BayesianOptimizer, SearchSpace

CONFIG_FILE = Path(__file__).parent.parent / "configs" / "default.ini"

if __name__ == "__main__":
    space = SearchSpace()
    space.add_float('escape_multiplier',            1.0,  5.0)
    space.add_float('cohesion_threat_multiplier',  -1.0,  0.0)
    space.add_float('separation_threat_multiplier', -1.0, 0.0)
    space.add_float('alignment_threat_multiplier',  0.0,  1.0)
    space.add_categorical('steering_mode', ['position', 'heading'])

    optimizer = BayesianOptimizer(space,
                                  config_path         = str(CONFIG_FILE),
                                  num_trials_per_eval = 2,
                                  num_jobs_flocks     = 4,
                                  max_ticks           = 3000)
    optimizer.optimize(num_configs=30)
    optimizer.print_summary()
    optimizer.save_best_config("tuned.ini")
