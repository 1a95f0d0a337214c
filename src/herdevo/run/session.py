"""
Training Session Module

A TrainingSession holds everything one training run shares: the
configuration, the course, the population of networks and the flocks they
steer. Nothing is global, so several sessions (e.g. the trials of an
experiment) can run side by side.

Each tick moves every flock that has not failed. The moves are independent
and may run on a pool of worker threads; the next generation is only bred
after all of them have returned, and then on the calling thread alone.

Classes:
    GenerationStats: Summary of one finished generation
    TrainingSession: Population + flocks + course + move budget of one run
"""

import threading
import time
from dataclasses import dataclass
from pathlib     import Path
from typing      import Optional

from joblib import Parallel, delayed

from herdevo.phenotype.network   import crypto_random
from herdevo.pool.population     import Population, TransitionOutcome
from herdevo.run.config          import Config
from herdevo.run.render_state    import FlockView, NetworkView
from herdevo.simulation.flock    import Flock
from herdevo.simulation.inputs   import layer_sizes
from herdevo.world.world_model   import WorldModel

MODEL_FILE_PATTERN = "herder{}.ai"

@dataclass
class GenerationStats:
    generation     : int
    moves_budget   : int
    best_fitness   : float
    mean_fitness   : float
    flocks_in_goal : int
    failed_flocks  : int
    outcome        : TransitionOutcome

class TrainingSession:
    """
    Public Attributes:
        config:                  Configuration parameters
        world:                   The course, read-only while flocks move
        layers:                  Layer sizes of every network
        population:              The networks, by id
        flocks:                  The flocks of the current generation, by id
        running:                 Cleared to stop the training loop at the next tick
        generation:              Number of finished generations
        moves_made:              Ticks played in the current generation
        moves_left:              Ticks allowed in the current generation
        moves_between_mutations: Move budget the next generation grows from
        stats:                   GenerationStats of every finished generation

    Public Methods:
        start():           Load saved models (if configured) and create the first flocks
        tick(num_jobs):    Move every flock once, breeding a new generation first if due
        next_generation(): Rank, mutate and recreate the flocks
        stop():            Ask the training loop to stop
    """

    def __init__(self, config: Config, world: Optional[WorldModel] = None, rng=None):
        """
        Parameters:
            config: Configuration parameters (validated here)
            world:  The course; defaults to the standard course sized by the configuration
            rng:    Source of uniform draws (defaults to 'crypto_random')
        """
        config.validate()

        self.config = config
        self.world  = world if world is not None else \
            WorldModel.default_course(config.world_width, config.world_height)
        self._rng   = rng if rng is not None else crypto_random

        # the input width depends on which inputs are enabled, so it
        # must be known before any network is built
        self.layers     = layer_sizes(config)
        self.population = Population.from_config(config, self.layers, self.world.waypoint_count, self._rng)
        self.flocks     : dict[int, Flock] = {}

        self.running = threading.Event()
        self.running.set()

        self.generation              = 0
        self.moves_made              = 0
        self.moves_left              = 0
        self.moves_between_mutations = config.initial_moves_before_mutation
        self.stats: list[GenerationStats] = []

        self._parallel = None
        self._parallel_jobs = None

    def _clock(self) -> float:
        if self.config.time_wasting_in_seconds:
            return time.monotonic()
        return float(self.moves_made)

    def start(self):
        """Load saved models if a model directory is configured, then create the first flocks."""
        if self.config.model_directory is not None and self.load_models(self.config.model_directory):
            # trained networks do not need an early mutation
            self.moves_between_mutations = self.config.loaded_moves_before_mutation
        self._advance_budget()
        self._create_flocks()

    def load_models(self, directory: str | Path) -> bool:
        """
        Load 'herder<id>.ai' into every network that has one.

        Returns:
            True if at least one network was loaded
        """
        loaded = False
        for network in self.population:
            loaded |= network.load(Path(directory) / MODEL_FILE_PATTERN.format(network.id))
        return loaded

    def save_models(self, directory: str | Path):
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        for network in self.population:
            network.save(directory / MODEL_FILE_PATTERN.format(network.id))

    def stop(self):
        self.running.clear()

    @property
    def all_failed(self) -> bool:
        return bool(self.flocks) and all(flock.failed for flock in self.flocks.values())

    def tick(self, num_jobs: int = 1) -> Optional[TransitionOutcome]:
        """
        Play one tick. When the move budget is spent, or every flock has
        failed, the next generation is bred before anything moves.

        Parameters:
            num_jobs: Worker threads moving the flocks
                      1 = serial, -1 = one per CPU core

        Returns:
            The outcome of the generation transition, if one happened
        """
        outcome = None

        self.moves_made += 1
        if self.moves_made > self.moves_left or self.all_failed:
            outcome = self.next_generation()

        self._move_all_flocks(num_jobs)
        return outcome

    def _move_all_flocks(self, num_jobs: int):
        active = [flock for flock in self.flocks.values() if not flock.failed]

        if num_jobs == 1:
            for flock in active:
                flock.move(self)
            return

        # threads share the flocks and networks; each flock touches only
        # its own followers, herder and network
        if self._parallel is None or self._parallel_jobs != num_jobs:
            self._parallel = Parallel(n_jobs=num_jobs, prefer="threads", require="sharedmem")
            self._parallel_jobs = num_jobs
        self._parallel(delayed(flock.move)(self) for flock in active)

    def fitness(self) -> dict[int, float]:
        """Fitness of every flock of the current generation, by id."""
        return {flock_id: flock.fitness() for flock_id, flock in self.flocks.items()}

    def next_generation(self) -> TransitionOutcome:
        """
        Breed the next generation from the current flocks' fitness,
        grow the move budget and put fresh flocks on the course.
        """
        fitness = self.fitness()
        outcome = self.population.next_generation(fitness)
        self.generation += 1

        values = list(fitness.values())
        self.stats.append(GenerationStats(
            generation     = self.generation,
            moves_budget   = self.moves_left,
            best_fitness   = max(values),
            mean_fitness   = sum(values) / len(values),
            flocks_in_goal = sum(1 for v in values if v > self.world.waypoint_count),
            failed_flocks  = sum(1 for flock in self.flocks.values() if flock.failed),
            outcome        = outcome))

        if self.config.save_models and self.config.model_directory is not None:
            self.save_models(self.config.model_directory)

        self._advance_budget()
        self._create_flocks()
        return outcome

    def _advance_budget(self):
        """Each generation may run a fixed percentage longer than the previous one."""
        if self.moves_left == 0:
            self.moves_left = self.moves_between_mutations
        self.moves_between_mutations = int(self.moves_left * (100 + self.config.move_budget_growth_percent) / 100)
        self.moves_left = self.moves_between_mutations
        self.moves_made = 0

    def _create_flocks(self):
        # every flock starts from the same positions, so they compete fairly
        starts = self.world.random_start_positions(self.config.flock_size, self._rng)
        self.flocks = {network_id: Flock(network_id, starts, self.config, self.world, self._clock)
                       for network_id in self.population.networks}

    def flock_views(self) -> list[FlockView]:
        return [FlockView.from_flock(flock, self.population[flock_id])
                for flock_id, flock in self.flocks.items()]

    def network_views(self) -> list[NetworkView]:
        return [NetworkView.from_network(network, self.world.waypoint_count)
                for network in self.population]
