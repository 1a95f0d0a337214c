"""
Optimization Package

Bayesian tuning of the training parameters with Optuna.
"""

from herdevo.optimization.search_space       import SearchSpace
from herdevo.optimization.bayesian_optimizer import BayesianOptimizer

__all__ = [
    'SearchSpace',
    'BayesianOptimizer',
]
