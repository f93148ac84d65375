"""
Unit tests for Config class.
"""

import configparser
import os

import pytest

from toponeat.run.config import Config


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def test_config_dir():
    """Return the directory containing test configuration files."""
    return os.path.join(os.path.dirname(__file__), 'test_configs')


# ============================================================================
# Test Config Initialization
# ============================================================================

class TestConfigDefaults:
    """Test Config() without a file."""

    def test_defaults(self):
        config = Config()

        assert config.population_size       == 100
        assert config.num_inputs            == 2
        assert config.num_outputs           == 1
        assert config.activation            == 'tanh'
        assert config.weight_init_range     == 1.0
        assert config.mutate_weight_chance  == 0.8
        assert config.new_connection_chance == 0.05
        assert config.new_node_chance       == 0.03
        assert config.single_mutation is False
        assert config.elitism               == 0
        assert config.max_generations       == 100
        assert config.target_fitness        == 0.99

    def test_defaults_are_valid(self):
        Config().validate()


class TestConfigFile:
    """Test parsing INI files."""

    def test_nonexistent_file(self):
        with pytest.raises(FileNotFoundError, match="Configuration file .* not found"):
            Config('nonexistent_file.ini')

    def test_full(self, test_config_dir):
        config = Config(os.path.join(test_config_dir, 'full.ini'))

        assert config.population_size         == 50
        assert config.num_inputs              == 4
        assert config.num_outputs             == 2
        assert config.activation              == 'sigmoid'
        assert config.weight_init_range       == 2.0
        assert config.weight_perturb_prob     == 0.7
        assert config.weight_perturb_strength == 0.3
        assert config.mutate_weight_chance    == 0.6
        assert config.new_connection_chance   == 0.2
        assert config.new_node_chance         == 0.1
        assert config.single_mutation is True
        assert config.elitism                 == 3
        assert config.distance_excess_coeff   == 2.0
        assert config.distance_disjoint_coeff == 1.5
        assert config.distance_weight_coeff   == 0.5
        assert config.max_generations         == 40
        assert config.target_fitness          == 0.95

    def test_minimal_uses_defaults(self, test_config_dir):
        config = Config(os.path.join(test_config_dir, 'minimal.ini'))

        assert config.num_inputs              == 2
        assert config.num_outputs             == 1
        assert config.activation              == 'tanh'
        assert config.weight_perturb_prob     == 0.9
        assert config.weight_perturb_strength == 0.1
        assert config.elitism                 == 0

    def test_missing_required_option(self, test_config_dir):
        with pytest.raises(configparser.NoOptionError):
            Config(os.path.join(test_config_dir, 'missing_required.ini'))

    def test_out_of_range_probability(self, test_config_dir):
        with pytest.raises(ValueError, match="mutate_weight_chance"):
            Config(os.path.join(test_config_dir, 'bad_probability.ini'))

    def test_single_mutation_chances_overflow(self, test_config_dir):
        with pytest.raises(ValueError, match="add up to at most 1"):
            Config(os.path.join(test_config_dir, 'single_mutation_overflow.ini'))


class TestConfigValidate:
    """Test validate() on manually edited configurations."""

    @pytest.mark.parametrize("name, value", [
        ('population_size', 0),
        ('num_inputs', 0),
        ('num_outputs', 0),
        ('elitism', -1),
        ('elitism', 100),
        ('max_generations', -1),
        ('activation', 'relu'),
        ('weight_init_range', 0.0),
        ('weight_perturb_strength', -0.1),
        ('weight_perturb_prob', 1.1),
        ('new_node_chance', -0.1),
    ])
    def test_invalid_values(self, name, value):
        config = Config()
        setattr(config, name, value)
        with pytest.raises(ValueError, match=name):
            config.validate()

    def test_single_mutation_sum_rounding(self):
        config = Config()
        config.single_mutation       = True
        config.mutate_weight_chance  = 0.7
        config.new_connection_chance = 0.2
        config.new_node_chance       = 0.1
        config.validate()
