"""
NEAT Population Module

This module implements the Population class, which owns the genomes of an
evolutionary run and carries them from one generation to the next: fitness
evaluation, roulette-wheel selection, reproduction by mutation, and wholesale
generational replacement.

Classes:
    GenerationSummary: Fitness statistics of one evaluated generation
    Population:        A population of genomes evolving through generations

Functions:
    roulette_select: Fitness-proportional selection of a single genome
"""

import logging
import math
import random
from typing import Callable, NamedTuple, Optional, Sequence

from toponeat.run.config       import Config
from toponeat.genotype         import Genome, InnovationTracker
from toponeat.phenotype        import CompiledNetwork, compile_genome

logger = logging.getLogger(__name__)

# Lower bound on the width of the range roulette picks are drawn from
MIN_PICK_RANGE = 1e-9

class GenerationSummary(NamedTuple):
    """
    Fitness statistics of one evaluated generation.

    'best_genome' is a copy of the fittest genome (with its fitness set),
    unaffected by the mutations applied to the population afterwards.
    """
    generation   : int
    total_fitness: float
    mean_fitness : float
    best_fitness : float
    best_genome  : Genome

def roulette_select(fitnesses: Sequence[float], pick: float) -> Optional[int]:
    """
    Fitness-proportional (roulette-wheel) selection.

    Scans the fitnesses accumulating them, and stops at the first genome for
    which the running sum exceeds 'pick'.

    Parameters:
        fitnesses: fitness of each genome, all non-negative
        pick:      a number drawn uniformly from [0, sum(fitnesses))

    Returns:
        the index of the selected genome, or None if the running sum never exceeds 'pick'
    """
    current = 0.0
    for i, fitness in enumerate(fitnesses):
        current += fitness
        if current > pick:
            return i
    return None

class Population:
    """
    A population of evolving genomes.

    The population starts as 'population_size' seed genomes: structurally identical
    networks connecting every input to every output, with random weights. Each call
    to 'evolve()' evaluates all genomes, then replaces them wholesale with offspring
    of fitness-proportionally selected parents; there is no overlap between generations.

    The innovation tracker is shared by all genomes of the run and is only touched
    while reproducing, one mutation at a time.

    Public Attributes:
        genomes:      List of all Genome objects in the current generation
        generation:   Number of generational replacements so far
        last_summary: Statistics of the most recently evaluated generation (None before any evaluation)

    Public Methods:
        evaluate():           Calculate the fitness of every genome
        evolve():             Evaluate, select, reproduce and replace (one generational step)
        get_fittest_genome(): Return the genome with highest fitness
    """

    def __init__(self,
                 config          : Config,
                 tracker         : InnovationTracker,
                 fitness_function: Callable[[CompiledNetwork], float]):
        """
        Initialize the population with 'population_size' seed genomes.

        Parameters:
            config:           Stores configuration parameters
            tracker:          The innovation tracker of the current run
            fitness_function: Scores a compiled network; must return a finite non-negative
                              number, higher values meaning fitter networks

        Raises:
            ValueError: if the configuration is invalid
        """
        config.validate()

        self._config           = config
        self._tracker          = tracker
        self._fitness_function = fitness_function

        self.genomes     : list[Genome]                = [Genome(config, tracker) for _ in range(config.population_size)]
        self.generation  : int                         = 0
        self.last_summary: Optional[GenerationSummary] = None

    def evaluate(self) -> GenerationSummary:
        """
        Calculate the fitness of every genome of the current generation.

        Each genome is compiled into a fresh network, which is scored by the fitness
        function. The resulting statistics are stored in 'last_summary' and logged.

        Returns:
            the statistics of the current generation

        Raises:
            ValueError: if the fitness function returns a negative or non-finite number
        """
        for genome in self.genomes:
            network = compile_genome(genome)
            fitness = float(self._fitness_function(network))
            if not math.isfinite(fitness) or fitness < 0:
                raise ValueError(f"Fitness must be a finite non-negative number, got {fitness}")
            genome.fitness = fitness

        fittest = self.get_fittest_genome()
        best_genome = fittest.clone()
        best_genome.fitness = fittest.fitness

        total_fitness = sum(genome.fitness for genome in self.genomes)
        self.last_summary = GenerationSummary(generation    = self.generation,
                                              total_fitness = total_fitness,
                                              mean_fitness  = total_fitness / len(self.genomes),
                                              best_fitness  = fittest.fitness,
                                              best_genome   = best_genome)

        logger.info("Generation %d: total fitness = %.4f, best fitness = %.4f",
                    self.generation, total_fitness, fittest.fitness)
        return self.last_summary

    def evolve(self) -> None:
        """
        Perform one generational step.

        Step 1: Evaluation
        - Compile and score every genome

        Step 2: Selection & Reproduction
        - The 'elitism' fittest genomes are copied unchanged
        - The remaining slots are filled by roulette-wheel selection: each selected
          parent is cloned and the clone is mutated
        - If the total fitness is zero, fresh seed genomes are used instead

        Step 3: Replacement
        - The offspring replace the current generation; the generation counter advances
        """
        self.evaluate()
        self.genomes     = self._spawn_next_generation()
        self.generation += 1

    def _spawn_next_generation(self) -> list[Genome]:
        """
        Create the offspring of the current (evaluated) generation.
        """
        population_size = self._config.population_size
        fitnesses       = [genome.fitness for genome in self.genomes]
        total_fitness   = sum(fitnesses)

        # Elite genomes survive unchanged
        ranked    = sorted(self.genomes, key=lambda g: g.fitness, reverse=True)
        offspring = [genome.clone() for genome in ranked[:self._config.elitism]]

        # A zero-width roulette wheel cannot select anyone
        if total_fitness <= 0:
            logger.warning("Generation %d: total fitness is zero, seeding %d fresh genomes",
                           self.generation, population_size - len(offspring))
            while len(offspring) < population_size:
                offspring.append(Genome(self._config, self._tracker))
            return offspring

        pick_range = max(total_fitness, MIN_PICK_RANGE)
        while len(offspring) < population_size:
            pick  = random.random() * pick_range
            index = roulette_select(fitnesses, pick)
            if index is None:
                continue

            child = self.genomes[index].clone()
            child.mutate(self._tracker)
            offspring.append(child)

        return offspring

    def get_fittest_genome(self) -> Optional[Genome]:
        """
        Find and return the genome with the highest fitness in the population.

        Returns:
            The genome with the highest fitness value, or None if the population
            is empty, or the fitness of genomes has not been calculated yet
        """
        if not self.genomes:
            return None

        # 'max' raises a TypeError if called on a list that contains 'None';
        # in our case, this happens if the fitness has not been evaluated yet.
        try:
            return max(self.genomes, key=lambda genome: genome.fitness)
        except TypeError:
            return None

    def __len__(self):
        return len(self.genomes)

    def __str__(self):
        return '\n'.join(str(genome) for genome in self.genomes)
