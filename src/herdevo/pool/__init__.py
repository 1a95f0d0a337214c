"""
Pool Package

The population of herder networks and the selection step between generations.
"""

from herdevo.pool.population import Population, TransitionOutcome

__all__ = ['Population', 'TransitionOutcome']
