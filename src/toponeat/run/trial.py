"""
NEAT Trial Module

This module defines the abstract base class for NEAT trials.

A trial represents one independent run of the NEAT algorithm, evolving a
population through generations until a solution is found or the maximum
number of generations is reached.
"""

import logging
import random
from abc    import ABC, abstractmethod
from typing import Optional

from toponeat.run.config       import Config
from toponeat.genotype         import Genome, InnovationTracker
from toponeat.phenotype        import CompiledNetwork
from toponeat.pool.population  import GenerationSummary, Population

logger = logging.getLogger(__name__)

class Trial(ABC):
    """
    Abstract base class for implementing a NEAT trial.

    A trial represents one independent run of the NEAT algorithm, evolving a
    population through generations until a solution is found or the maximum
    number of generations is reached. Every run owns a fresh InnovationTracker.

    Fitness is not monotonic across generations, so the trial keeps track of
    the fittest genome seen in any generation, not just in the last one.

    Subclasses must implement:
    - _evaluate_fitness(network): Evaluate fitness for a single compiled network

    Subclasses can override:
    - _reset():           Reset trial-specific state (must call super()._reset())
    - _report_progress(): Report progress after each generation
    - _final_report():    Report the final results
    - _terminate():       Custom termination logic (default: max generations + fitness target)

    Public Attributes:
        best_genome: The fittest genome seen so far (None before the first generation)
        failed:      Whether the trial ended without reaching the target fitness

    Public Properties:
        best_fitness: Fitness of 'best_genome'
        generation:   Number of generations evolved so far
        population:   The population being evolved

    Public Methods:
        run(): Execute a complete NEAT trial
    """

    def __init__(self, config: Config, suppress_output: bool = False, seed: Optional[int] = None):
        """
        Initialize the trial.

        Parameters:
            config:          Configuration parameters
            suppress_output: If True, suppress progress and final reports
                             (useful when running multiple trials in experiments)
            seed:            If given, the random number generator is seeded
                             with it at the start of every run

        Raises:
            ValueError: if the configuration is invalid
        """
        config.validate()

        self._config            : Config                = config
        self._suppress_output   : bool                  = suppress_output
        self._seed              : Optional[int]         = seed
        self._generation_counter: int                   = 0
        self._population        : Optional[Population]  = None
        self._tracker           : Optional[InnovationTracker] = None
        self.best_genome        : Optional[Genome]      = None
        self.failed             : bool                  = True

    @property
    def best_fitness(self) -> Optional[float]:
        return None if self.best_genome is None else self.best_genome.fitness

    @property
    def generation(self) -> int:
        return self._generation_counter

    @property
    def population(self) -> Optional[Population]:
        return self._population

    def run(self) -> Optional[Genome]:
        """
        Run the trial.

        Resets the trial state and runs the evolutionary
        algorithm until the terminate condition is met.

        Returns:
            the fittest genome seen during the run
        """
        # Reset the trial state before starting a new run
        self._reset()

        # Create the initial population
        self._population = Population(self._config, self._tracker, self._evaluate_fitness)

        # Evolution loop
        while not self._terminate():

            # Evaluate the current generation and replace it by its offspring
            self._population.evolve()
            self._generation_counter = self._population.generation
            self._update_best(self._population.last_summary)

            # Display progress after each generation
            if not self._suppress_output:
                self._report_progress()

        # Produce final report
        if not self._suppress_output:
            self._final_report()

        return self.best_genome

    def _reset(self):
        """
        Reset the trial state before starting a new run.

        Subclasses overriding this method must call super()._reset().
        """
        if self._seed is not None:
            random.seed(self._seed)

        self._tracker            = InnovationTracker.from_config(self._config)
        self._population         = None
        self._generation_counter = 0
        self.best_genome         = None
        self.failed              = True

    def _update_best(self, summary: GenerationSummary):
        """
        Remember the fittest genome of an evaluated generation, if it beats every earlier one.
        """
        if self.best_genome is None or summary.best_fitness > self.best_genome.fitness:
            self.best_genome = summary.best_genome

    @abstractmethod
    def _evaluate_fitness(self, network: CompiledNetwork) -> float:
        """
        Evaluate and return the fitness of a network.

        This method should test the network on the problem domain and compute
        a fitness score. Higher fitness values indicate better performance and
        higher probability of procreating.

        IMPORTANT: The fitness must be a positive number (or zero).

        Parameters:
            network: The compiled network to evaluate

        Returns:
            float: Fitness score of the network
        """
        pass

    def _report_progress(self):
        """
        Report trial progress after each generation.

        This method is suppressed by setting 'self._suppress_output' to 'True',
        which we might do when running many trials, as part of an experiment.
        """
        summary = self._population.last_summary
        logger.info("Generation %04d: mean fitness = %.4f, best fitness = %.4f (best so far = %.4f)",
                    summary.generation, summary.mean_fitness, summary.best_fitness, self.best_fitness)

    def _final_report(self):
        """
        Produce final report at the end of the trial.

        This method is suppressed by setting 'self._suppress_output' to 'True',
        which we might do when running many trials, as part of an experiment.
        """
        outcome = "FAILED" if self.failed else "SUCCESS"
        logger.info("Trial finished after %d generations [%s], best fitness = %s",
                    self._generation_counter, outcome,
                    "n/a" if self.best_fitness is None else f"{self.best_fitness:.4f}")
        if self.best_genome is not None:
            logger.info("Best genome:\n%s", self.best_genome)

    def _terminate(self) -> bool:
        """
        Determine whether the trial should terminate.

        This default implementation stops the trial after a maximum number
        of generations, or as soon as the best fitness seen reaches the target.

        Subclasses can override this method for custom termination logic.

        Returns:
            bool: True if the trial should stop, False otherwise
        """
        # Has this trial run for too long?
        terminate = self._generation_counter >= self._config.max_generations

        # Has the best fitness reached the target?
        success = self.best_fitness is not None and self.best_fitness >= self._config.target_fitness
        if success:
            self.failed = False

        return terminate or success
