"""Pytest configuration and shared fixtures."""

import random

import pytest

from toponeat.run.config                  import Config
from toponeat.genotype.innovation_tracker import InnovationTracker


@pytest.fixture
def default_config():
    """A Config holding the default values (2 inputs, 1 output, tanh)."""
    return Config()


@pytest.fixture
def tracker(default_config):
    """A fresh innovation tracker sized for the default configuration."""
    return InnovationTracker.from_config(default_config)


@pytest.fixture
def seeded():
    """Seed the random number generator, and release the seed afterwards."""
    random.seed(1234)
    yield
    random.seed(None)
