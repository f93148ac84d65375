"""
toponeat - NEAT (NeuroEvolution of Augmenting Topologies) for feedforward controllers.

This package evolves both the topology and the weights of small feedforward
neural networks, meant to drive agents in a host simulation: each tick the
host feeds a compiled network a fixed-length sensor vector and reads back
the action vector.

Main components:
- genotype:    Genetic encoding (genomes, genes, innovation tracking)
- phenotype:   Network compiler and activation engine
- pool:        Population, roulette-wheel selection, generational replacement
- run:         Configuration, trial execution and experiment framework
- activations: Activation functions for neural networks

Example:
    >>> from toponeat import Config, Trial
    >>> config = Config("config.ini")
    >>> class MyTrial(Trial):
    ...     def _evaluate_fitness(self, network):
    ...         return 1.0 / (1.0 + abs(network.activate([0.5, 0.5])[0]))
    >>> trial = MyTrial(config)
    >>> best_genome = trial.run()
"""

__version__ = "0.1.0"

# Config must be imported first; the genotype modules depend on it
from toponeat.run.config                  import Config
from toponeat.genotype.node_gene          import NodeGene, NodeType
from toponeat.genotype.connection_gene    import ConnectionGene
from toponeat.genotype.innovation_tracker import InnovationTracker
from toponeat.genotype.genome             import Genome
from toponeat.phenotype.network           import CompiledNetwork, compile_genome
from toponeat.pool.population             import Population
from toponeat.run.trial                   import Trial
from toponeat.run.trial_xor               import TrialXOR
from toponeat.run.experiment              import Experiment

__all__ = [
    "Config",
    "NodeGene",
    "NodeType",
    "ConnectionGene",
    "InnovationTracker",
    "Genome",
    "CompiledNetwork",
    "compile_genome",
    "Population",
    "Trial",
    "TrialXOR",
    "Experiment",
]
