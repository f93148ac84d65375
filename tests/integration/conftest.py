"""
Shared fixtures for integration tests.
"""

import random

import pytest

from toponeat.run.config import Config


@pytest.fixture(autouse=True)
def set_random_seeds():
    """Set random seeds for reproducibility."""
    random.seed(42)
    yield
    random.seed(None)


@pytest.fixture
def xor_config():
    """Configuration tuned for solving XOR with bias-free tanh networks."""
    config = Config()
    config.population_size         = 100
    config.weight_perturb_strength = 0.5
    config.new_connection_chance   = 0.1
    config.new_node_chance         = 0.05
    config.elitism                 = 2
    config.max_generations         = 100
    config.target_fitness          = 0.9
    return config
