"""
Unit tests for herdevo.phenotype.network module.

Covers construction and topology checks, inference, mutation, cloning,
the fitness aggregates and the plain-text model codec.
"""

import random
import warnings

import numpy as np
import pytest
from unittest.mock import Mock

from herdevo.activations       import ActivationKind
from herdevo.errors            import InvalidTopology, ShapeMismatch, TopologyMismatch
from herdevo.phenotype.network import Network


def zero_network(layers, kind):
    """A network with every weight and bias set to 0."""
    weights = [np.zeros((layers[i], layers[i - 1])) for i in range(1, len(layers))]
    biases  = [np.zeros(layers[i]) for i in range(1, len(layers))]
    return Network(0, layers, [kind] * len(layers), weights=weights, biases=biases)


def parameters(network):
    return np.concatenate([b.ravel() for b in network.biases] + [w.ravel() for w in network.weights])


# ============================================================================
# Construction
# ============================================================================

class TestNetworkInit:
    """Test Network.__init__ method."""

    def test_tensor_shapes(self, rng):
        """Test that weights and biases match the layer sizes."""
        network = Network(3, [4, 5, 2], ['tanh', 'tanh', 'identity'], rng=rng)

        assert network.id == 3
        assert network.layers == (4, 5, 2)
        assert [w.shape for w in network.weights] == [(5, 4), (2, 5)]
        assert [b.shape for b in network.biases] == [(5,), (2,)]
        assert network.number_parameters == 5 * 4 + 2 * 5 + 5 + 2

    def test_random_values_in_range(self, rng):
        """Test that initial weights and biases are uniform in [-0.5, 0.5]."""
        network = Network(0, [10, 10, 2], ['tanh'] * 3, rng=rng)
        values = parameters(network)

        assert np.all(values >= -0.5)
        assert np.all(values <= 0.5)
        assert len(set(values.tolist())) > 1

    def test_default_source_is_crypto_random(self):
        """Test that networks built without an rng differ from each other."""
        a = Network(0, [3, 2], ['identity'] * 2)
        b = Network(1, [3, 2], ['identity'] * 2)
        assert not np.array_equal(parameters(a), parameters(b))

    def test_activation_names_are_resolved(self, rng):
        """Test that activation names become ActivationKinds."""
        network = Network(0, [2, 2], ['Sigmoid', 'leaky_relu'], rng=rng)
        assert network.activation_kinds == (ActivationKind.SIGMOID, ActivationKind.LEAKY_RELU)

    def test_initial_bookkeeping(self, rng):
        """Test fitness, score, history and counters start empty."""
        network = Network(0, [2, 2], ['tanh'] * 2, rng=rng)
        assert network.fitness == 0.0
        assert network.score == 0.0
        assert network.performance == []
        assert network.generation_of_last_mutation == 0
        assert network.mutated is False

    def test_too_few_layers(self):
        """Test that a single layer is rejected."""
        with pytest.raises(InvalidTopology, match="at least 2 layers"):
            Network(0, [3], ['tanh'])

    def test_activation_count_mismatch(self):
        """Test that one activation per layer is required."""
        with pytest.raises(InvalidTopology, match="activation"):
            Network(0, [3, 4, 2], ['tanh', 'tanh'])

    def test_empty_layer(self):
        """Test that a layer without neurons is rejected."""
        with pytest.raises(InvalidTopology):
            Network(0, [3, 0, 2], ['tanh'] * 3)

    def test_explicit_tensors_with_wrong_shape(self):
        """Test that weight tensors disagreeing with the layers are rejected."""
        weights = [np.zeros((4, 3)), np.zeros((2, 3))]
        biases  = [np.zeros(4), np.zeros(2)]
        with pytest.raises(TopologyMismatch):
            Network(0, [3, 4, 2], ['tanh'] * 3, weights=weights, biases=biases)

    def test_weights_without_biases(self):
        """Test that weights and biases must be given together."""
        with pytest.raises(InvalidTopology):
            Network(0, [3, 2], ['tanh'] * 2, weights=[np.zeros((2, 3))])

    def test_topology_errors_are_value_errors(self):
        """Test the exception hierarchy."""
        assert issubclass(InvalidTopology, ValueError)
        assert issubclass(TopologyMismatch, ValueError)
        assert issubclass(ShapeMismatch, ValueError)


# ============================================================================
# Inference
# ============================================================================

class TestFeedForward:
    """Test Network.feed_forward method."""

    @pytest.mark.parametrize("kind,expected", [
        (ActivationKind.SIGMOID,  0.5),
        (ActivationKind.TANH,     0.0),
        (ActivationKind.IDENTITY, 0.0),
        (ActivationKind.RELU,     0.0),
    ])
    def test_zero_network_returns_fixed_point(self, kind, expected):
        """Test that zero weights, biases and inputs give the activation's value at 0."""
        network = zero_network([4, 3, 2], kind)
        np.testing.assert_allclose(network.feed_forward([0.0] * 4), [expected, expected])

    def test_known_values(self):
        """Test a hand-computed single-layer network."""
        network = Network(0, [2, 2], ['identity', 'identity'],
                          weights=[np.array([[1.0, 2.0], [-1.0, 0.5]])],
                          biases=[np.array([0.5, -0.5])])
        np.testing.assert_allclose(network.feed_forward([1.0, 2.0]), [5.5, -0.5])

    def test_hidden_layer_activation_applied(self):
        """Test that each layer applies its own activation."""
        network = Network(0, [1, 1, 1], ['identity', 'relu', 'identity'],
                          weights=[np.array([[1.0]]), np.array([[2.0]])],
                          biases=[np.array([0.0]), np.array([1.0])])
        assert network.feed_forward([-3.0])[0] == pytest.approx(1.0)
        assert network.feed_forward([3.0])[0] == pytest.approx(7.0)

    def test_input_layer_activation_not_applied(self):
        """Test that the input layer's activation is ignored."""
        network = Network(0, [1, 1], ['relu', 'identity'],
                          weights=[np.array([[1.0]])], biases=[np.array([0.0])])
        assert network.feed_forward([-2.0])[0] == pytest.approx(-2.0)

    def test_accepts_numpy_input(self, rng):
        """Test numpy arrays are accepted as inputs."""
        network = Network(0, [3, 2], ['tanh'] * 2, rng=rng)
        assert network.feed_forward(np.zeros(3)).shape == (2,)

    def test_wrong_input_length(self, rng):
        """Test that the input length is checked."""
        network = Network(0, [3, 2], ['tanh'] * 2, rng=rng)
        with pytest.raises(ValueError, match="Expected 3 inputs, got 2"):
            network.feed_forward([0.0, 0.0])

    def test_neurons_hold_layer_outputs(self):
        """Test the scratch state holds every layer's outputs."""
        network = zero_network([2, 3, 2], ActivationKind.SIGMOID)
        network.feed_forward([1.0, 1.0])
        np.testing.assert_allclose(network.neurons[1], [0.5, 0.5, 0.5])

    def test_output_is_a_copy(self, rng):
        """Test that mutating the returned vector leaves the network alone."""
        network = Network(0, [2, 2], ['tanh'] * 2, rng=rng)
        out = network.feed_forward([1.0, 1.0])
        out[0] = 99.0
        assert network.neurons[-1][0] != 99.0


# ============================================================================
# Mutation and cloning
# ============================================================================

class TestMutate:
    """Test Network.mutate method."""

    def test_full_chance_changes_every_parameter(self, rng):
        """Test that a 100% chance perturbs every weight and bias."""
        network = Network(0, [5, 4, 2], ['tanh'] * 3, rng=rng)
        before = parameters(network).copy()

        network.mutate(100, 0.5)

        after = parameters(network)
        assert np.all(after != before)
        assert np.all(np.abs(after - before) <= 0.25)

    def test_zero_chance_still_changes_one_parameter(self, rng):
        """Test that a 0% chance terminates and forces exactly one change."""
        network = Network(0, [5, 4, 2], ['tanh'] * 3, rng=rng)
        before = parameters(network).copy()

        network.mutate(0, 0.5, max_passes=3)

        changed = np.count_nonzero(parameters(network) != before)
        assert changed == 1

    def test_low_chance_changes_something(self, rng):
        """Test a low chance still changes at least one parameter."""
        network = Network(0, [3, 2], ['tanh'] * 2, rng=rng)
        before = parameters(network).copy()

        network.mutate(1, 0.25)

        assert np.any(parameters(network) != before)

    def test_sets_mutated_flag(self, rng):
        """Test that mutation marks the network."""
        network = Network(0, [3, 2], ['tanh'] * 2, rng=rng)
        network.mutate(50, 0.25)
        assert network.mutated is True

    def test_non_positive_magnitude(self, rng):
        """Test that a zero magnitude is rejected (it could never change anything)."""
        network = Network(0, [3, 2], ['tanh'] * 2, rng=rng)
        with pytest.raises(ValueError):
            network.mutate(50, 0)

    def test_uses_the_given_source(self):
        """Test that every draw goes through the network's rng."""
        source = Mock(wraps=random.Random(1))
        network = Network(0, [2, 2], ['tanh'] * 2, rng=source)
        source.reset_mock()

        network.mutate(100, 0.25)

        assert source.random.called
        assert source.uniform.called


class TestCloneInto:
    """Test Network.clone_into method."""

    def test_copies_weights_and_biases(self, rng):
        """Test the destination ends up with the source's parameters."""
        source      = Network(0, [3, 4, 2], ['tanh'] * 3, rng=rng)
        destination = Network(1, [3, 4, 2], ['tanh'] * 3, rng=rng)

        source.clone_into(destination)

        np.testing.assert_array_equal(parameters(destination), parameters(source))

    def test_is_a_deep_copy(self, rng):
        """Test later changes to the source do not reach the destination."""
        source      = Network(0, [3, 2], ['tanh'] * 2, rng=rng)
        destination = Network(1, [3, 2], ['tanh'] * 2, rng=rng)
        source.clone_into(destination)

        source.weights[0][0, 0] += 1.0

        assert destination.weights[0][0, 0] != source.weights[0][0, 0]

    def test_keeps_destination_bookkeeping(self, rng):
        """Test id, fitness and history of the destination are untouched."""
        source      = Network(0, [3, 2], ['tanh'] * 2, rng=rng)
        destination = Network(1, [3, 2], ['tanh'] * 2, rng=rng)
        source.fitness, source.performance = 9.0, [9]
        destination.fitness, destination.performance = 2.0, [1, 2]

        source.clone_into(destination)

        assert destination.id == 1
        assert destination.fitness == 2.0
        assert destination.performance == [1, 2]

    def test_topology_mismatch(self, rng):
        """Test cloning between different topologies fails."""
        source      = Network(0, [3, 2], ['tanh'] * 2, rng=rng)
        destination = Network(1, [4, 2], ['tanh'] * 2, rng=rng)
        with pytest.raises(TopologyMismatch):
            source.clone_into(destination)


# ============================================================================
# Fitness aggregates
# ============================================================================

class TestFitnessAggregates:
    """Test best_fitness() and average_fitness()."""

    def test_average_uses_recent_entries(self, rng):
        """Test that 10 entries average only the last 2."""
        network = Network(0, [2, 2], ['tanh'] * 2, rng=rng)
        network.performance = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]
        assert network.average_fitness() == pytest.approx(9.5)

    def test_average_uses_ten_percent(self, rng):
        """Test that 30 entries average the last 3."""
        network = Network(0, [2, 2], ['tanh'] * 2, rng=rng)
        network.performance = [0] * 27 + [3, 6, 9]
        assert network.average_fitness() == pytest.approx(6.0)

    def test_average_of_single_entry(self, rng):
        """Test a single entry is its own average."""
        network = Network(0, [2, 2], ['tanh'] * 2, rng=rng)
        network.performance = [4]
        assert network.average_fitness() == pytest.approx(4.0)

    def test_best_counts_goal_generations(self, rng):
        """Test best_fitness counts entries above the waypoint count."""
        network = Network(0, [2, 2], ['tanh'] * 2, rng=rng)
        network.performance = [3, 8, 9, 100, 50, 8]
        assert network.best_fitness(8) == 3

    def test_empty_history_falls_back_to_fitness(self, rng):
        """Test both aggregates return the fitness while there is no history."""
        network = Network(0, [2, 2], ['tanh'] * 2, rng=rng)
        network.fitness = 3.5
        assert network.best_fitness(8) == 3.5
        assert network.average_fitness() == 3.5


# ============================================================================
# Persistence
# ============================================================================

class TestPersistence:
    """Test the plain-text model codec."""

    def test_line_order(self):
        """Test fitness, then biases, then weights (destination-major)."""
        network = Network(0, [2, 2], ['identity'] * 2,
                          weights=[np.array([[1.0, 2.0], [3.0, 4.0]])],
                          biases=[np.array([5.0, 6.0])])
        network.fitness = 7.0

        values = [float(v) for v in network.to_lines()]

        assert values == [7.0, 5.0, 6.0, 1.0, 2.0, 3.0, 4.0]

    def test_save_load_round_trip(self, tmp_path, rng):
        """Test a mutated network survives a save and load."""
        original = Network(0, [4, 3, 2], ['tanh'] * 3, rng=rng)
        original.mutate(50, 0.25)
        original.fitness = 12.25
        path = tmp_path / "herder0.ai"
        original.save(path)

        restored = Network(0, [4, 3, 2], ['tanh'] * 3, rng=rng)
        assert restored.load(path) is True

        assert restored.fitness == original.fitness
        np.testing.assert_array_equal(parameters(restored), parameters(original))

    def test_load_missing_file(self, tmp_path, rng):
        """Test a missing file returns False quietly."""
        network = Network(0, [3, 2], ['tanh'] * 2, rng=rng)
        assert network.load(tmp_path / "nothing.ai") is False

    def test_load_wrong_topology_warns(self, tmp_path, rng):
        """Test a model of another shape is refused with a warning, leaving the network as is."""
        Network(0, [5, 2], ['tanh'] * 2, rng=rng).save(tmp_path / "m.ai")
        network = Network(0, [3, 2], ['tanh'] * 2, rng=rng)
        before = parameters(network).copy()

        with pytest.warns(UserWarning, match="Unable to load model"):
            assert network.load(tmp_path / "m.ai") is False

        np.testing.assert_array_equal(parameters(network), before)

    def test_load_lines_wrong_count(self, rng):
        """Test the strict loader raises ShapeMismatch."""
        network = Network(0, [3, 2], ['tanh'] * 2, rng=rng)
        with pytest.raises(ShapeMismatch):
            network.load_lines(["1.0"] * 5)

    def test_load_lines_not_a_number(self, rng):
        """Test a garbled value raises ShapeMismatch, not a bare ValueError."""
        network = Network(0, [1, 1], ['tanh'] * 2, rng=rng)
        with pytest.raises(ShapeMismatch, match="non-numeric"):
            network.load_lines(["1.0", "x", "0.5"])

    def test_load_lines_ignores_trailing_blank_lines(self, rng):
        """Test trailing empty lines do not count."""
        network = Network(0, [1, 1], ['tanh'] * 2, rng=rng)
        network.load_lines(["2.0", "0.25", "-0.75", "", ""])
        assert network.fitness == 2.0
        assert network.biases[0][0] == 0.25
        assert network.weights[0][0, 0] == -0.75


class TestVisualize:
    """Test Network.visualize method."""

    def test_one_node_per_neuron(self, rng):
        """Test the graph names every neuron and draws every connection."""
        network = Network(4, [3, 2], ['tanh'] * 2, rng=rng)
        source = network.visualize().source

        for layer, size in enumerate(network.layers):
            for neuron in range(size):
                assert f"{layer}_{neuron}" in source
        assert source.count("->") == 6
