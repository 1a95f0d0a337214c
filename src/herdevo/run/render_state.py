"""
Snapshots of the training state for a renderer.

Drawing is not done here. A user interface takes these plain copies after a
tick and is free to keep them while the next tick mutates the live objects.
"""

from dataclasses import dataclass, field

from herdevo.phenotype.network import Network
from herdevo.simulation.flock  import Flock
from herdevo.world.geometry    import Point

@dataclass
class FlockView:
    id               : int
    followers        : list[Point]
    followers_in_goal: list[bool]
    herder           : Point
    desired_position : Point
    herder_facing    : float
    failed           : bool
    failure_reason   : str
    next_waypoint    : int
    fitness          : float
    score            : float
    rank             : int
    sweep_triangles  : list = field(default_factory=list)
    hit_triangles    : list = field(default_factory=list)

    @classmethod
    def from_flock(cls, flock: Flock, network: Network) -> 'FlockView':
        herder = flock.herder
        sweep, hits = [], []
        if herder.monitoring:
            sweep = list(herder.sheep_sensor.sweep_triangles)
            hits  = list(herder.sheep_sensor.hit_triangles)

        return cls(id                = flock.id,
                   followers         = flock.follower_positions(),
                   followers_in_goal = [flock.world.in_goal(p) for p in flock.follower_positions()],
                   herder            = herder.position,
                   desired_position  = herder.desired_position,
                   herder_facing     = herder.facing,
                   failed            = flock.failed,
                   failure_reason    = flock.failure_reason.value,
                   next_waypoint     = flock.next_waypoint,
                   fitness           = flock.fitness(),
                   score             = network.score,
                   rank              = network.rank,
                   sweep_triangles   = sweep,
                   hit_triangles     = hits)

@dataclass
class NetworkView:
    id             : int
    mutated        : bool
    performance    : list[int]
    rank           : int
    best_fitness   : float
    average_fitness: float

    @classmethod
    def from_network(cls, network: Network, waypoint_count: int) -> 'NetworkView':
        return cls(id              = network.id,
                   mutated         = network.mutated,
                   performance     = list(network.performance),
                   rank            = network.rank,
                   best_fitness    = network.best_fitness(waypoint_count),
                   average_fitness = network.average_fitness())
