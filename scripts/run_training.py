#!/usr/bin/env python3
"""
Utility script to train herders from the command line.

Usage:
    python scripts/run_training.py --generations 50 --num-jobs 4
    python scripts/run_training.py --config configs/default.ini --mode experiment --num-trials 10
"""

import argparse
import sys
from pathlib import Path

# Add the source directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from herdevo import Config, Experiment, Trial


def main():
    parser = argparse.ArgumentParser(description='Evolve neural-network herders')
    parser.add_argument('--config', default=None,
                        help='Configuration INI file (default: built-in defaults)')
    parser.add_argument('--generations', type=int, default=None,
                        help='Number of generations to train (overrides the configuration)')
    parser.add_argument('--mode', choices=['trial', 'experiment'], default='trial',
                        help='Run a single trial or a full experiment')
    parser.add_argument('--num-trials', type=int, default=10,
                        help='Number of trials for experiment mode')
    parser.add_argument('--num-jobs', type=int, default=1,
                        help='Worker threads moving the flocks (trial mode) or '
                             'processes running trials (experiment mode)')

    args = parser.parse_args()

    config = Config(args.config)
    if args.generations is not None:
        config.max_number_generations = args.generations
    if config.max_number_generations is None and args.mode == 'experiment':
        parser.error("experiment mode needs a generation limit (--generations)")

    print(f"Mode: {args.mode}")
    print(f"Population: {config.population_size} herders, {config.flock_size} followers each")

    if args.mode == 'trial':
        trial = Trial(config)
        try:
            trial.run(num_jobs=args.num_jobs)
        except KeyboardInterrupt:
            trial.stop()
            print("\nInterrupted")
    else:
        experiment = Experiment(args.num_trials, config)
        experiment.run(num_jobs_trials=args.num_jobs, num_jobs_flocks=1)


if __name__ == '__main__':
    main()
