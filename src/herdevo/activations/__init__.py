"""
Activations Package

Activation functions for the layers of a herder network, selected per layer
through the 'ActivationKind' enum and applied with 'activate()'.
"""

from herdevo.activations.basic_activations import (
    ActivationKind,
    activations,
    derivatives,
    activation_codes,
    activate,
    derivative,
    sigmoid_activation,
    tanh_activation,
    relu_activation,
    leaky_relu_activation,
    binary_step_activation,
    softsign_activation,
    selu_activation,
    identity_activation,
    SELU_ALPHA,
    SELU_SCALE
)

__all__ = [
    'ActivationKind',
    'activations',
    'derivatives',
    'activation_codes',
    'activate',
    'derivative',
    'sigmoid_activation',
    'tanh_activation',
    'relu_activation',
    'leaky_relu_activation',
    'binary_step_activation',
    'softsign_activation',
    'selu_activation',
    'identity_activation',
    'SELU_ALPHA',
    'SELU_SCALE'
]
