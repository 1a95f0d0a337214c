"""
Herder Population Module

This module implements the Population class, which owns one network per
herder and turns the outcome of a generation into the next one: it records
each network's fitness, ranks the population by a composite score, replaces
the worse half with mutated clones of the better half and replaces the very
worst network with a fresh random one.

Networks are addressed by a stable id (0..N-1), the same id as the flock
they steer. Ranking reorders them only temporarily; the id order is restored
at the end of every transition.

Classes:
    TransitionOutcome: What a generation transition did to the population
    Population:        The networks being evolved, indexed by id
"""

import math
import warnings
from enum   import Enum
from typing import Iterator, Mapping, Sequence

from herdevo.activations       import ActivationKind
from herdevo.errors            import InvalidTopology
from herdevo.phenotype.network import Network, crypto_random
from herdevo.simulation.inputs import NUM_OUTPUTS

# Cap on the seed performance given to a freshly cloned network.
SEED_PERFORMANCE_CAP = 26

# Scales the "proven successes per generation" term of the score.
SUCCESS_RATE_WEIGHT = 26

# Divides the raw fitness term of the score for networks that are not the best.
RAW_FITNESS_DIVISOR = 30

class TransitionOutcome(Enum):
    MUTATED       = "mutated"        # clones of the better half were mutated
    REINITIALISED = "reinitialised"  # the lone network was replaced

class Population:
    """
    The herder networks being evolved.

    Public Attributes:
        networks: Mapping id -> Network, in id order between transitions

    Public Methods:
        compute_scores(strict):   Score every network from its fitness and history
        ranked(strict):           Networks sorted by score, worst first; sets ranks
        next_generation(fitness): Record fitness and breed the next generation
        fittest():                The network with the highest fitness
    """

    def __init__(self,
                 size            : int,
                 layers          : Sequence[int],
                 activation_kinds: Sequence[ActivationKind | str],
                 waypoint_count  : int,
                 mutation_chance : float = 5.0,
                 mutation_size   : float = 0.25,
                 max_passes      : int   = 100,
                 rng             = None):
        """
        Parameters:
            size:             Number of networks (1, or an even number)
            layers:           Layer sizes shared by every network; the last
                              layer must hold the 2 steering outputs
            activation_kinds: One activation per layer
            waypoint_count:   Number of waypoints of the course; a fitness above
                              it means followers reached the goal region
            mutation_chance:  Percent chance that each parameter of a clone is perturbed
            mutation_size:    Width of the perturbation interval
            max_passes:       Fruitless mutation passes before one change is forced
            rng:              Source of uniform draws (defaults to 'crypto_random')
        """
        if len(layers) < 2 or layers[-1] != NUM_OUTPUTS:
            raise InvalidTopology(f"Herder networks need {NUM_OUTPUTS} outputs, got layers {list(layers)}")
        if size < 1 or (size > 1 and size % 2):
            raise ValueError(f"Population size must be 1 or a positive even number, got {size}")

        self.layers           = tuple(layers)
        self.activation_kinds = tuple(activation_kinds)
        self.waypoint_count   = waypoint_count
        self.mutation_chance  = mutation_chance
        self.mutation_size    = mutation_size
        self.max_passes       = max_passes
        self._rng             = rng if rng is not None else crypto_random

        self.networks: dict[int, Network] = {i: self._new_network(i) for i in range(size)}

    @classmethod
    def from_config(cls, config, layers: Sequence[int], waypoint_count: int, rng=None) -> 'Population':
        return cls(config.population_size,
                   layers,
                   config.activations,
                   waypoint_count,
                   mutation_chance = config.mutation_chance_percent,
                   mutation_size   = config.mutation_magnitude,
                   max_passes      = config.max_mutation_passes,
                   rng             = rng)

    def _new_network(self, network_id: int) -> Network:
        return Network(network_id, self.layers, self.activation_kinds, rng=self._rng)

    def __len__(self) -> int:
        return len(self.networks)

    def __getitem__(self, network_id: int) -> Network:
        return self.networks[network_id]

    def __iter__(self) -> Iterator[Network]:
        return iter(self.networks.values())

    def fittest(self) -> Network:
        """The network with the highest fitness; NaN fitness never wins."""
        return max(self.networks.values(), key=lambda n: -math.inf if math.isnan(n.fitness) else n.fitness)

    def compute_scores(self, strict: bool = False):
        """
        Give every network its ranking score.

        A network whose flock reached the goal region (fitness above the
        waypoint count) scores its raw fitness. Otherwise the score adds
        its rate of goal-reaching generations since it was last mutated to
        either the best fitness of the population (for the best network) or
        its recent average plus a small share of its raw fitness.

        NaN fitness is left out of the population's best fitness. A NaN
        score sinks to -inf (the worst rank) with a RuntimeWarning; with
        'strict' it raises FloatingPointError instead.
        """
        best = max((n.fitness for n in self.networks.values() if not math.isnan(n.fitness)), default=0.0)

        for network in self.networks.values():
            if math.isnan(network.fitness):
                score = math.nan
            elif best == 0:
                # nobody made any progress; the order is irrelevant
                score = 0.0
            elif network.fitness > self.waypoint_count:
                score = network.fitness
            else:
                age = network.generation_of_last_mutation
                success_rate = 0 if age == 0 else \
                    network.best_fitness(self.waypoint_count) / (age / 100) * SUCCESS_RATE_WEIGHT

                if network.fitness == best:
                    score = success_rate + best
                else:
                    score = success_rate + network.average_fitness() + network.fitness / RAW_FITNESS_DIVISOR

            if math.isnan(score):
                if strict:
                    raise FloatingPointError(f"Score of network {network.id} is NaN")
                warnings.warn(f"Score of network {network.id} is NaN; ranking it last", RuntimeWarning)
                score = -math.inf

            network.score = score

    def ranked(self, strict: bool = False) -> list[Network]:
        """
        Score the networks and return them sorted by ascending score
        (worst first). Ties keep id order. Ranks are 1-based, 1 = best.
        """
        self.compute_scores(strict)
        ordered = sorted(self.networks.values(), key=lambda n: n.score)
        for index, network in enumerate(ordered):
            network.rank = len(ordered) - index
        return ordered

    def next_generation(self, fitness: Mapping[int, float], strict: bool = False) -> TransitionOutcome:
        """
        Turn the outcome of a generation into the next generation.

        Step 1: every network records its flock's fitness in its history.
        Step 2: the networks are ranked by score, worst first.
        Step 3: each network of the worse half that has had as many
                generations as the best success count in the population is
                overwritten by a mutated clone of its mirror in the better
                half (index + N/2), unless that donor is itself unproven.
        Step 4: the worst network is replaced by a random one, given a
                borrowed average fitness so it is not culled right away.
        Step 5: the id order of the population is restored.

        Parameters:
            fitness: Mapping network id -> fitness of its flock this generation
            strict:  Raise on NaN scores instead of ranking them last

        Returns:
            The outcome of the transition
        """
        if len(self.networks) == 1:
            (network_id,) = self.networks
            self.networks[network_id] = self._new_network(network_id)
            return TransitionOutcome.REINITIALISED

        # Step 1
        max_success = 0.0
        for network_id, network in self.networks.items():
            network.mutated = False
            network.generation_of_last_mutation += 1
            network.fitness = fitness[network_id]
            max_success = max(max_success, network.best_fitness(self.waypoint_count))
            # a NaN fitness is left to the scoring below
            network.performance.append(int(network.fitness) if math.isfinite(network.fitness) else 0)

        # Step 2
        ordered = self.ranked(strict)
        size = len(ordered)
        half = size // 2

        # Step 3
        for index in range(half):
            loser = ordered[index]
            donor = ordered[index + half]

            # newcomers get as many generations as the best has successes
            if loser.generation_of_last_mutation < max_success:
                continue
            if donor.generation_of_last_mutation < max_success:
                continue

            donor.clone_into(loser)
            loser.generation_of_last_mutation = 0
            loser.mutate(self.mutation_chance, self.mutation_size, self.max_passes)
            loser.performance = [min(SEED_PERFORMANCE_CAP, int(donor.average_fitness()) - 1)]

        # Step 4
        worst = ordered[0]
        replacement = self._new_network(worst.id)
        replacement.fitness = ordered[int(size * 0.75)].average_fitness()
        replacement.rank    = worst.rank
        self.networks[worst.id] = replacement

        # Step 5
        self.networks = {network_id: self.networks[network_id] for network_id in sorted(self.networks)}

        return TransitionOutcome.MUTATED

    def __str__(self):
        return '\n'.join(str(network) for network in self.networks.values())
