"""
NEAT Pool Package

This package implements population management for the NEAT (NeuroEvolution of
Augmenting Topologies) algorithm.

Modules:
    population: Population class and roulette-wheel selection

Exported:
    GenerationSummary: Fitness statistics of one evaluated generation
    Population:        Population of genomes evolving through generations
    roulette_select:   Fitness-proportional selection of a single genome
"""

from toponeat.pool.population import GenerationSummary, Population, roulette_select

__all__ = ['GenerationSummary',
           'Population',
           'roulette_select']
