"""
Herder Network Module

This module implements the fixed-topology, fully-connected feedforward network
that steers one herder. Networks are never trained by gradient descent; they
evolve through cloning and random perturbation of their weights and biases.

Classes:
    Network: Layered feedforward network with mutation, cloning and persistence
"""

import secrets
import warnings
from pathlib import Path
from typing import Iterable, Optional, Sequence

import numpy as np
import graphviz  # type: ignore

from herdevo.activations import ActivationKind, activate
from herdevo.errors      import InvalidTopology, ShapeMismatch, TopologyMismatch

# OS-entropy backed source of uniform draws. Unlike a seeded PRNG it cannot
# hand correlated streams to networks created at the same moment, and it is
# safe to share between the worker threads that move the flocks.
crypto_random = secrets.SystemRandom()

class Network:
    """
    A layered feedforward neural network with a fixed topology.

    Layer 0 receives the inputs; every following layer computes, for each of
    its neurons, the dot product of the previous layer's outputs with that
    neuron's weight row plus the neuron's bias, then applies the layer's
    activation function.

    Public Attributes:
        id:                          Stable population slot this network occupies
        layers:                      Number of neurons in each layer
        activation_kinds:            Activation of each layer (entry 0 is not applied)
        biases:                      biases[l] holds the biases of layer l+1
        weights:                     weights[l][dst, src] connects layer l to layer l+1
        fitness:                     Most recent raw fitness
        score:                       Ranking value computed during selection
        performance:                 Integer fitness snapshot of every generation
        generation_of_last_mutation: Generations survived since last cloned/mutated
        mutated:                     Whether the last transition mutated this network
        rank:                        1-based rank by score (1 = best)

    Public Methods:
        feed_forward(inputs):          Compute the network outputs
        mutate(percent, magnitude):    Randomly perturb weights and biases
        clone_into(destination):       Copy weights and biases into another network
        randomize():                   Draw fresh weights and biases
        best_fitness(waypoint_count):  Number of generations the goal was reached
        average_fitness():             Mean of the most recent performance entries
        to_lines() / load_lines():     Plain-text codec
        save(path) / load(path):       Persist to / restore from a model file
        visualize():                   Render the topology with graphviz
    """

    def __init__(self,
                 network_id      : int,
                 layers          : Sequence[int],
                 activation_kinds: Sequence[ActivationKind | str],
                 weights         : Optional[Sequence[np.ndarray]] = None,
                 biases          : Optional[Sequence[np.ndarray]] = None,
                 rng             = None):
        """
        Parameters:
            network_id:       Population slot (and flock id) this network belongs to
            layers:           Neurons per layer, input layer first (at least 2 layers)
            activation_kinds: One activation per layer, either ActivationKind or name
            weights:          Optional explicit weights, one (dst, src) matrix per layer pair
            biases:           Optional explicit biases, one vector per non-input layer
            rng:              Source of uniform draws (defaults to 'crypto_random')
        """
        if len(layers) < 2:
            raise InvalidTopology(f"A network needs at least 2 layers, got {len(layers)}")
        if len(activation_kinds) != len(layers):
            raise InvalidTopology(f"Expected {len(layers)} activation functions (one per layer), "
                                  f"got {len(activation_kinds)}")
        if any(int(size) < 1 for size in layers):
            raise InvalidTopology(f"Every layer needs at least one neuron, got {list(layers)}")

        self.id     : int             = network_id
        self.layers : tuple[int, ...] = tuple(int(size) for size in layers)
        self.activation_kinds = tuple(kind if isinstance(kind, ActivationKind) else ActivationKind.from_name(kind)
                                      for kind in activation_kinds)
        self._rng = rng if rng is not None else crypto_random

        # per-layer outputs of the last feed_forward()
        self.neurons = [np.zeros(size) for size in self.layers]

        if weights is None and biases is None:
            self.randomize()
        elif weights is None or biases is None:
            raise InvalidTopology("Weights and biases must be given together")
        else:
            self.weights = [np.array(w, dtype=np.float64) for w in weights]
            self.biases  = [np.array(b, dtype=np.float64) for b in biases]
            self._check_tensor_shapes()

        self.fitness                    : float     = 0.0
        self.score                      : float     = 0.0
        self.performance                : list[int] = []
        self.generation_of_last_mutation: int       = 0
        self.mutated                    : bool      = False
        self.rank                       : int       = 0

    def _check_tensor_shapes(self):
        expected_pairs = len(self.layers) - 1
        if len(self.weights) != expected_pairs or len(self.biases) != expected_pairs:
            raise TopologyMismatch(f"Expected {expected_pairs} weight matrices and bias vectors, "
                                   f"got {len(self.weights)} and {len(self.biases)}")

        for layer in range(1, len(self.layers)):
            w_shape = self.weights[layer - 1].shape
            b_shape = self.biases[layer - 1].shape
            if w_shape != (self.layers[layer], self.layers[layer - 1]):
                raise TopologyMismatch(f"Weights into layer {layer} have shape {w_shape}, "
                                       f"expected {(self.layers[layer], self.layers[layer - 1])}")
            if b_shape != (self.layers[layer],):
                raise TopologyMismatch(f"Biases of layer {layer} have shape {b_shape}, "
                                       f"expected {(self.layers[layer],)}")

    def _uniform_array(self, shape) -> np.ndarray:
        count = int(np.prod(shape))
        values = [self._rng.uniform(-0.5, 0.5) for _ in range(count)]
        return np.array(values, dtype=np.float64).reshape(shape)

    def randomize(self):
        """Replace every weight and bias with a uniform random value in [-0.5, 0.5]."""
        self.biases  = [self._uniform_array((self.layers[layer],))
                        for layer in range(1, len(self.layers))]
        self.weights = [self._uniform_array((self.layers[layer], self.layers[layer - 1]))
                        for layer in range(1, len(self.layers))]

    @property
    def num_inputs(self) -> int:
        return self.layers[0]

    @property
    def num_outputs(self) -> int:
        return self.layers[-1]

    @property
    def number_parameters(self) -> int:
        return sum(b.size for b in self.biases) + sum(w.size for w in self.weights)

    def feed_forward(self, inputs: Iterable[float]) -> np.ndarray:
        """
        Process one input vector through the network.

        Parameters:
            inputs: Input values, exactly one per input neuron

        Returns:
            Outputs of the final layer
        """
        values = np.asarray(list(inputs) if not isinstance(inputs, np.ndarray) else inputs, dtype=np.float64)
        if values.shape != (self.layers[0],):
            actual = values.shape[0] if values.ndim == 1 else values.shape
            raise ValueError(f"Expected {self.layers[0]} inputs, got {actual}")

        self.neurons[0] = values
        for layer in range(1, len(self.layers)):
            z = self.weights[layer - 1] @ self.neurons[layer - 1] + self.biases[layer - 1]
            self.neurons[layer] = np.asarray(activate(self.activation_kinds[layer], z), dtype=np.float64)

        return self.neurons[-1].copy()

    def mutate(self, percent_chance: float, magnitude: float, max_passes: int = 100):
        """
        Randomly perturb weights and biases.

        Each parameter is, with probability 'percent_chance'/100, shifted by a
        uniform random value in [-magnitude/2, +magnitude/2]. At least one
        parameter always changes: a pass that changes nothing is repeated, and
        after 'max_passes' fruitless passes a single randomly chosen parameter
        is perturbed.

        Parameters:
            percent_chance: Chance (0..100) that any one parameter is perturbed
            magnitude:      Width of the perturbation interval (must be positive)
            max_passes:     Passes to try before forcing a single perturbation
        """
        if magnitude <= 0:
            raise ValueError(f"Mutation magnitude must be positive, got {magnitude}")

        self.mutated = True
        arrays = self.biases + self.weights

        for _ in range(max_passes):
            changed = False
            for array in arrays:
                for index in range(array.size):
                    if self._rng.random() * 100 < percent_chance:
                        array.flat[index] += self._nonzero_delta(magnitude)
                        changed = True
            if changed:
                return

        # every pass was fruitless (e.g. a 0% chance): force one change
        position = self._rng.randrange(self.number_parameters)
        for array in arrays:
            if position < array.size:
                array.flat[position] += self._nonzero_delta(magnitude)
                return
            position -= array.size

    def _nonzero_delta(self, magnitude: float) -> float:
        delta = 0.0
        while delta == 0.0:
            delta = self._rng.uniform(-magnitude / 2, magnitude / 2)
        return delta

    def clone_into(self, destination: 'Network'):
        """
        Copy this network's weights and biases into 'destination'.
        Fitness, history and counters of 'destination' are left untouched.
        """
        if destination.layers != self.layers:
            raise TopologyMismatch(f"Cannot clone network with layers {list(self.layers)} "
                                   f"into network with layers {list(destination.layers)}")
        for src, dst in zip(self.biases, destination.biases):
            dst[...] = src
        for src, dst in zip(self.weights, destination.weights):
            dst[...] = src

    def best_fitness(self, waypoint_count: int) -> float:
        """
        Number of recorded generations in which the flock reached the goal,
        i.e. whose fitness exceeds the number of waypoints.
        Falls back to the current fitness while there is no history.
        """
        if not self.performance:
            return self.fitness
        return sum(1 for entry in self.performance if round(entry) > waypoint_count)

    def average_fitness(self) -> float:
        """
        Mean of the most recent 10% (at least 2) of the performance history.
        Older entries describe a network that has since been mutated.
        Falls back to the current fitness while there is no history.
        """
        if not self.performance:
            return self.fitness
        window = max(2, len(self.performance) // 10)
        recent = self.performance[-window:]
        return sum(recent) / len(recent)

    # Persistence: fitness, then biases (layer-major, neuron-minor), then
    # weights (layer-major, destination neuron, then source neuron).

    def to_lines(self) -> list[str]:
        lines = [repr(float(self.fitness))]
        for b in self.biases:
            lines.extend(repr(float(v)) for v in b)
        for w in self.weights:
            lines.extend(repr(float(v)) for v in w.reshape(-1))
        return lines

    def load_lines(self, lines: Sequence[str]):
        """
        Restore fitness, biases and weights from the lines produced by 'to_lines()'.
        The network is left unchanged if the lines do not fit its topology.

        Raises:
            ShapeMismatch: wrong number of lines, or a line is not a number
        """
        values = [line.strip() for line in lines]
        while values and values[-1] == "":
            values.pop()

        expected = 1 + self.number_parameters
        if len(values) != expected:
            raise ShapeMismatch(f"Model has {len(values)} values, network with layers "
                                f"{list(self.layers)} needs {expected}")
        try:
            numbers = [float(v) for v in values]
        except ValueError as error:
            raise ShapeMismatch(f"Model contains a non-numeric value: {error}") from error

        index = 1
        biases = []
        for b in self.biases:
            biases.append(np.array(numbers[index:index + b.size]))
            index += b.size
        weights = []
        for w in self.weights:
            weights.append(np.array(numbers[index:index + w.size]).reshape(w.shape))
            index += w.size

        self.fitness = numbers[0]
        self.biases  = biases
        self.weights = weights

    def save(self, path: str | Path):
        Path(path).write_text("\n".join(self.to_lines()) + "\n")

    def load(self, path: str | Path) -> bool:
        """
        Load a model file into this network.

        Returns:
            True on success. False if the file does not exist, or if it does
            not fit this network (a warning is issued and the network is kept as is).
        """
        path = Path(path)
        if not path.exists():
            return False
        try:
            self.load_lines(path.read_text().splitlines())
        except ShapeMismatch as error:
            warnings.warn(f"Unable to load model '{path}' into network {self.id}: {error}")
            return False
        return True

    def visualize(self, view: bool = False) -> graphviz.Digraph:
        """
        Draw the network with Graphviz, one column per layer; edge
        thickness is proportional to the weight magnitude.

        Parameters:
            view: If True, render and open the drawing

        Returns:
            graphviz.Digraph object representing the network
        """
        dot = graphviz.Digraph()
        dot.attr(rankdir='LR')
        dot.attr('graph', labelloc='t', label=f"network {self.id}")

        node_attrs = {'style': 'filled', 'shape': 'circle', 'color': 'black', 'penwidth': '0.5',
                      'fontsize': '5', 'width': '0.5', 'height': '0.5', 'fixedsize': 'true'}

        for layer, size in enumerate(self.layers):
            fill = 'lightgrey' if layer == 0 else 'white' if layer == len(self.layers) - 1 else 'lightblue'
            with dot.subgraph(name=f'cluster_{layer}') as cluster:
                cluster.attr(rank='same', style='invisible', label=self.activation_kinds[layer].value)
                for neuron in range(size):
                    label = f"L{layer}N{neuron}"
                    if layer > 0:
                        label += f"\\nbias={self.biases[layer - 1][neuron]:.2f}"
                    cluster.node(f"{layer}_{neuron}", label=label, fillcolor=fill, **node_attrs)

        for layer in range(1, len(self.layers)):
            matrix = self.weights[layer - 1]
            for dst in range(matrix.shape[0]):
                for src in range(matrix.shape[1]):
                    weight = matrix[dst, src]
                    color = 'green' if weight > 0 else 'red'
                    dot.edge(f"{layer - 1}_{src}", f"{layer}_{dst}", color=color,
                             penwidth=str(0.1 + 2 * abs(weight)), arrowsize='0.3')

        if view:
            dot.render(f'network_{self.id}', view=True, cleanup=True)
        return dot

    def __repr__(self):
        return f"Network(id={self.id}, layers={list(self.layers)}, fitness={self.fitness})"
