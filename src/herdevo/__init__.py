"""
herdevo - evolving neural-network herders that drive boid flocks.

A population of small fixed-topology feedforward networks each steers one
herder. Every herder drives its own flock of followers along a sequence of
waypoints into a goal region; the networks that get furthest are cloned and
mutated into the next generation.

Main components:
- activations:  Activation functions, selected per layer
- world:        Course geometry (waypoints, fences, goal region)
- phenotype:    The herder network (inference, mutation, persistence)
- sensors:      Radial sector sensors for followers and fences
- simulation:   Follower and herder physics, flock progress and failure
- pool:         Population ranking and selection
- run:          Configuration, training session, trials and experiments
- optimization: Bayesian tuning of the training parameters

Example:
    >>> from herdevo import Config, Trial
    >>> config = Config()
    >>> config.max_number_generations = 20
    >>> Trial(config).run(num_jobs=4)
"""

__version__ = "0.1.0"

from herdevo.errors                import HerdevoError, InvalidTopology, TopologyMismatch, ShapeMismatch
from herdevo.world.world_model     import WorldModel, GoalRegion
from herdevo.phenotype.network     import Network
from herdevo.pool.population       import Population, TransitionOutcome
from herdevo.simulation.failure    import FailureReason
from herdevo.simulation.flock      import Flock
from herdevo.run.config            import Config
from herdevo.run.session           import TrainingSession
from herdevo.run.trial             import Trial
from herdevo.run.experiment        import Experiment
from herdevo.optimization          import BayesianOptimizer, SearchSpace

__all__ = [
    "HerdevoError",
    "InvalidTopology",
    "TopologyMismatch",
    "ShapeMismatch",
    "WorldModel",
    "GoalRegion",
    "Network",
    "Population",
    "TransitionOutcome",
    "FailureReason",
    "Flock",
    "Config",
    "TrainingSession",
    "Trial",
    "Experiment",
    "BayesianOptimizer",
    "SearchSpace",
]
