import numpy as np

def tanh_activation(z):
    return np.tanh(z)

def sigmoid_activation(z):
    z = np.clip(z, -500, 500)   # to prevent overflow when calculating exp
    return 1.0 / (1.0 + np.exp(-z))

activations = {
    "tanh"   : tanh_activation,
    "sigmoid": sigmoid_activation,
    }

# 3-letter identifiers for each activation function
activation_codes = {
    "tanh"   : "TNH",
    "sigmoid": "SIG",
    }
