"""
XOR Problem Implementation for NEAT

This module implements the classic XOR (exclusive OR) problem, the fitness
task used to evolve and benchmark networks.

The XOR Problem:
    XOR is a two-input, one-output boolean function where the output is 1
    only when the inputs differ:
        Input (0, 0) → Output 0
        Input (0, 1) → Output 1
        Input (1, 0) → Output 1
        Input (1, 1) → Output 0

    This problem cannot be solved by a single-layer perceptron (linear classifier)
    and requires at least one hidden node, making it an ideal minimal test case
    for topology-evolving algorithms like NEAT.

Fitness Function:
    Fitness = 1 / (1 + Σ(output - target)²)

    The fitness is always in (0, 1], decreases as the error grows,
    and is equal to 1 only when all four cases produce exact outputs.

Classes:
    TrialXOR: NEAT trial for solving XOR

Functions:
    xor_squared_error: Total squared error of a network over the XOR cases
    evaluate_xor:      XOR fitness of a network
"""

import logging
from typing import Optional

from toponeat.run.config import Config
from toponeat.phenotype  import CompiledNetwork, compile_genome
from toponeat.run.trial  import Trial

logger = logging.getLogger(__name__)

XOR_INPUTS  = [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
XOR_OUTPUTS = [[0.0],      [1.0],      [1.0],      [0.0]]

def xor_squared_error(network: CompiledNetwork) -> float:
    """
    Sum of the squared errors of the network's (first) output over all four XOR cases.
    """
    error = 0.0
    for inputs, expected_output in zip(XOR_INPUTS, XOR_OUTPUTS):
        output = network.activate(inputs)                # forward pass through network
        error += (output[0] - expected_output[0]) ** 2   # errors accumulate
    return error

def evaluate_xor(network: CompiledNetwork) -> float:
    """
    XOR fitness of a network: 1 / (1 + total squared error).
    """
    return 1.0 / (1.0 + xor_squared_error(network))

class TrialXOR(Trial):
    """
    NEAT trial for solving the XOR (exclusive OR) problem.

    Problem Definition:
        Inputs: 2 binary values (0 or 1)
        Output: 1 value, compared against the XOR of the inputs
        Training cases: All 4 possible input combinations

    Success Criteria:
        Trial succeeds when the best fitness reaches 'target_fitness',
        and fails after 'max_generations' otherwise.
    """

    def __init__(self, config: Config, suppress_output: bool = False, seed: Optional[int] = None):
        """
        Initialize the XOR trial.

        Parameters:
            config:          Configuration parameters (population size, mutation rates, etc.)
            suppress_output: If True, suppress progress and final reports
            seed:            Seed for the random number generator, if any

        Raises:
            ValueError: if the configuration does not describe 2-input, 1-output networks
        """
        if (config.num_inputs, config.num_outputs) != (2, 1):
            raise ValueError(f"XOR needs 2 inputs and 1 output, got {config.num_inputs} and {config.num_outputs}")
        super().__init__(config, suppress_output, seed)

    def _evaluate_fitness(self, network: CompiledNetwork) -> float:
        return evaluate_xor(network)

    def _final_report(self):
        """
        Display the best genome and its truth table at the end of the trial.
        """
        super()._final_report()
        if self.best_genome is None:
            return

        network = compile_genome(self.best_genome)

        s  = "input         output   target  error\n"
        s += "------------------------------------\n"
        for inputs, expected_output in zip(XOR_INPUTS, XOR_OUTPUTS):
            output = network.activate(inputs)[0]
            s += f"{inputs} -> {output:.4f}    {expected_output[0]}   {abs(output - expected_output[0]):.4f}\n"
        logger.info("Truth table of the best genome:\n%s", s)
