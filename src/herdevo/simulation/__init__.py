"""
Simulation Package

Per-tick physics of the flocks: boid followers, the network-controlled
herder, waypoint progress and failure detection.
"""

from herdevo.simulation.failure  import FailureReason
from herdevo.simulation.follower import Follower
from herdevo.simulation.herder   import Herder
from herdevo.simulation.flock    import Flock, closest_waypoint_forwards
from herdevo.simulation.inputs   import assemble_inputs, input_width, layer_sizes

__all__ = ['FailureReason',
           'Follower',
           'Herder',
           'Flock',
           'closest_waypoint_forwards',
           'assemble_inputs',
           'input_width',
           'layer_sizes']
