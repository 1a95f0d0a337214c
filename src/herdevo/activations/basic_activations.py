"""
Activation functions for the herder networks.

Each layer of a network carries one 'ActivationKind'. The functions below work
element-wise on scalars and numpy arrays; they are written with 'autograd.numpy'
so the hand-coded derivatives can be checked against automatic differentiation.
Derivatives are expressed in terms of the pre-activation input 'z'.
"""

from enum import Enum

import autograd.numpy as np  # type: ignore

SELU_ALPHA = 1.6732632423543772848
SELU_SCALE = 1.0507009873554804934
LEAKY_SLOPE = 0.01

class ActivationKind(Enum):
    SIGMOID     = "sigmoid"
    TANH        = "tanh"
    RELU        = "relu"
    LEAKY_RELU  = "leakyrelu"
    BINARY_STEP = "binarystep"
    SOFTSIGN    = "softsign"
    SELU        = "selu"
    IDENTITY    = "identity"

    @classmethod
    def from_name(cls, name: str) -> 'ActivationKind':
        """
        Look up an activation by name, ignoring case, '_' and '-'
        (so 'TanH', 'leaky_relu' and 'Binary-Step' are all accepted).
        """
        key = name.strip().lower().replace('_', '').replace('-', '')
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Invalid activation function '{name}'") from None

def sigmoid_activation(z):
    k = np.exp(np.clip(z, -500, 500))   # keep exp() finite
    return k / (1.0 + k)

def tanh_activation(z):
    return np.tanh(z)

def relu_activation(z):
    return np.maximum(0.0, z)

def leaky_relu_activation(z):
    return np.maximum(LEAKY_SLOPE * z, z)

def binary_step_activation(z):
    return np.where(z >= 0, 1.0, 0.0)

def softsign_activation(z):
    return z / (1.0 + np.abs(z))

def selu_activation(z):
    negative = SELU_ALPHA * (np.exp(np.minimum(z, 0.0)) - 1.0)
    return SELU_SCALE * np.where(z > 0, z, negative)

def identity_activation(z):
    return z

def sigmoid_derivative(z):
    y = sigmoid_activation(z)
    return y * (1.0 - y)

def tanh_derivative(z):
    y = np.tanh(z)
    return 1.0 - y ** 2

def relu_derivative(z):
    return np.where(z > 0, 1.0, 0.0)

def leaky_relu_derivative(z):
    return np.where(z > 0, 1.0, LEAKY_SLOPE)

def binary_step_derivative(z):
    return np.zeros_like(z, dtype=float)

def softsign_derivative(z):
    return 1.0 / (1.0 + np.abs(z)) ** 2

def selu_derivative(z):
    # for z <= 0 this is (f(z) + alpha) * scale with f(z) = alpha * (e^z - 1)
    negative = SELU_ALPHA * np.exp(np.minimum(z, 0.0))
    return SELU_SCALE * np.where(z > 0, 1.0, negative)

def identity_derivative(z):
    return np.ones_like(z, dtype=float)

activations = {
    ActivationKind.SIGMOID    : sigmoid_activation,
    ActivationKind.TANH       : tanh_activation,
    ActivationKind.RELU       : relu_activation,
    ActivationKind.LEAKY_RELU : leaky_relu_activation,
    ActivationKind.BINARY_STEP: binary_step_activation,
    ActivationKind.SOFTSIGN   : softsign_activation,
    ActivationKind.SELU       : selu_activation,
    ActivationKind.IDENTITY   : identity_activation
    }

derivatives = {
    ActivationKind.SIGMOID    : sigmoid_derivative,
    ActivationKind.TANH       : tanh_derivative,
    ActivationKind.RELU       : relu_derivative,
    ActivationKind.LEAKY_RELU : leaky_relu_derivative,
    ActivationKind.BINARY_STEP: binary_step_derivative,
    ActivationKind.SOFTSIGN   : softsign_derivative,
    ActivationKind.SELU       : selu_derivative,
    ActivationKind.IDENTITY   : identity_derivative
    }

# 3-letter identifiers for each activation function
activation_codes = {
    ActivationKind.SIGMOID    : "SIG",
    ActivationKind.TANH       : "TNH",
    ActivationKind.RELU       : "RLU",
    ActivationKind.LEAKY_RELU : "LRL",
    ActivationKind.BINARY_STEP: "BIN",
    ActivationKind.SOFTSIGN   : "SSN",
    ActivationKind.SELU       : "SLU",
    ActivationKind.IDENTITY   : "IDN"
    }

def activate(kind: ActivationKind, z):
    """Apply the activation function selected by 'kind' to 'z'."""
    return activations[kind](z)

def derivative(kind: ActivationKind, z):
    """Derivative of the activation selected by 'kind', evaluated at 'z'."""
    return derivatives[kind](z)
