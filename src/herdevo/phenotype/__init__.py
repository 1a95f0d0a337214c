"""
Phenotype Package

The executable brains of the herders.

Exported Classes:
    Network: Fixed-topology feedforward network evolved by mutation and cloning
"""

from herdevo.phenotype.network import Network, crypto_random

__all__ = ['Network', 'crypto_random']
