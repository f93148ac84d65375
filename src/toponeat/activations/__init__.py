"""
Activations Package

This package provides the squash functions applied by hidden and output nodes.
A network uses exactly one of them, selected by the 'activation' option.

Exported:
    activations:      Dictionary mapping activation function names to functions
    activation_codes: Dictionary mapping activation function names to 3-letter codes
    Individual activation functions: tanh_activation, sigmoid_activation
"""

from toponeat.activations.basic_activations import (
    activations,
    activation_codes,
    tanh_activation,
    sigmoid_activation
)

__all__ = [
    'activations',
    'activation_codes',
    'tanh_activation',
    'sigmoid_activation'
]
