import configparser
import os
from toponeat.activations import activations

class Config:

    # Options holding a probability, checked by 'validate()'
    _PROBABILITIES = ('weight_perturb_prob',
                      'mutate_weight_chance',
                      'new_connection_chance',
                      'new_node_chance')

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a default Config.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a Config holding default values,
                         meant for manual attribute setting.

        Raises:
            FileNotFoundError: if 'config_file' does not exist
            ValueError:        if the file holds out-of-range values
        """

        # Default config for testing/manual setup.
        # These are conservative values; bias-free tanh networks rarely solve XOR with them
        # within 100 generations. examples/configs/config_xor.ini holds values tuned for XOR.
        if config_file is None:

            # Population initialization
            self.population_size = 100
            self.num_inputs      = 2
            self.num_outputs     = 1

            # Nodes
            self.activation = 'tanh'

            # Connections
            self.weight_init_range       = 1.0
            self.weight_perturb_prob     = 0.9
            self.weight_perturb_strength = 0.1

            # Mutation
            self.mutate_weight_chance  = 0.8
            self.new_connection_chance = 0.05
            self.new_node_chance       = 0.03
            self.single_mutation       = False

            # Reproduction
            self.elitism = 0

            # Genomic distance
            self.distance_excess_coeff   = 1.0
            self.distance_disjoint_coeff = 1.0
            self.distance_weight_coeff   = 0.4

            # Termination
            self.max_generations = 100
            self.target_fitness  = 0.99

            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return parser.get(section, key).strip()
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        # [POPULATION_INIT]

        # The number of genomes in each generation.
        self.population_size = get_value('POPULATION_INIT', 'population_size', int)

        # The number of input nodes, through which the network receives inputs.
        self.num_inputs = get_value('POPULATION_INIT', 'num_inputs', int, default=2)

        # The number of output nodes, to which the network delivers outputs.
        self.num_outputs = get_value('POPULATION_INIT', 'num_outputs', int, default=1)

        # [NODE]

        # Squash function applied by every hidden and output node ("tanh" or "sigmoid").
        self.activation = get_value('NODE', 'activation', str, default='tanh')

        # [CONNECTION]

        # New and replaced weights are drawn uniformly from [-weight_init_range, weight_init_range].
        # This is not a clamp: perturbations may carry a weight outside this range.
        self.weight_init_range = get_value('CONNECTION', 'weight_init_range', float, default=1.0)

        # When a weight mutates, the probability that it is perturbed rather than replaced.
        self.weight_perturb_prob = get_value('CONNECTION', 'weight_perturb_prob', float, default=0.9)

        # Perturbations are drawn uniformly from [-weight_perturb_strength, weight_perturb_strength].
        self.weight_perturb_strength = get_value('CONNECTION', 'weight_perturb_strength', float, default=0.1)

        # [MUTATION]

        # The probability that a mutation pass mutates the connection weights.
        self.mutate_weight_chance = get_value('MUTATION', 'mutate_weight_chance', float)

        # The probability that a mutation pass adds a connection between existing nodes.
        self.new_connection_chance = get_value('MUTATION', 'new_connection_chance', float)

        # The probability that a mutation pass splits an existing connection with a new node.
        self.new_node_chance = get_value('MUTATION', 'new_node_chance', float)

        # If 'True', a mutation pass draws a single random number and applies at most
        # one of the three mutations; the chances above must then add up to at most 1.
        self.single_mutation = get_value('MUTATION', 'single_mutation', bool, default=False)

        # [REPRODUCTION]

        # The number of fittest genomes copied unchanged into the next generation.
        self.elitism = get_value('REPRODUCTION', 'elitism', int, default=0)

        # [DISTANCE]

        # Coefficients of the excess, disjoint and weight difference
        # terms in the genomic distance between two genomes.
        self.distance_excess_coeff   = get_value('DISTANCE', 'distance_excess_coeff'  , float, default=1.0)
        self.distance_disjoint_coeff = get_value('DISTANCE', 'distance_disjoint_coeff', float, default=1.0)
        self.distance_weight_coeff   = get_value('DISTANCE', 'distance_weight_coeff'  , float, default=0.4)

        # [TERMINATION]

        # The number of generations after which to stop the run.
        self.max_generations = get_value('TERMINATION', 'max_generations', int)

        # The best fitness which when met or exceeded causes the run to end.
        self.target_fitness = get_value('TERMINATION', 'target_fitness', float)

        self.validate()

    def validate(self) -> None:
        """
        Check that the configuration values are consistent.

        Raises:
            ValueError: describing the first offending option
        """
        for name in self._PROBABILITIES:
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"'{name}' must be in [0, 1], got {value}")

        if self.population_size < 1:
            raise ValueError(f"'population_size' must be at least 1, got {self.population_size}")
        if self.num_inputs < 1:
            raise ValueError(f"'num_inputs' must be at least 1, got {self.num_inputs}")
        if self.num_outputs < 1:
            raise ValueError(f"'num_outputs' must be at least 1, got {self.num_outputs}")
        if not 0 <= self.elitism < self.population_size:
            raise ValueError(f"'elitism' must be in [0, population_size), got {self.elitism}")
        if self.max_generations < 0:
            raise ValueError(f"'max_generations' cannot be negative, got {self.max_generations}")
        if self.activation not in activations:
            raise ValueError(f"Invalid activation function '{self.activation}', "
                             f"expected one of {sorted(activations)}")
        if self.weight_init_range <= 0:
            raise ValueError(f"'weight_init_range' must be positive, got {self.weight_init_range}")
        if self.weight_perturb_strength < 0:
            raise ValueError(f"'weight_perturb_strength' cannot be negative, got {self.weight_perturb_strength}")

        if self.single_mutation:
            total = self.mutate_weight_chance + self.new_connection_chance + self.new_node_chance
            if total > 1.0 + 1e-9:   # tolerate rounding in the sum
                raise ValueError(f"with 'single_mutation' the mutation chances must add up to at most 1, got {total}")
