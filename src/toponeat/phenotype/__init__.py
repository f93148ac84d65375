"""
NEAT Phenotype Package

This package implements the phenotype representation for the NEAT (NeuroEvolution
of Augmenting Topologies) algorithm: the compiled, directly executable form of
a genome.

The phenotype layer transforms the genetic representation (genotype) into functioning
neural networks that can process inputs and produce outputs. A host simulation feeds
a network one fixed-length sensor vector per tick and reads back the action vector.

Modules:
    network: Network compiler and activation engine

Exported:
    NodeState:       Runtime state of one node
    CompiledNetwork: Feedforward neural network compiled from a genome
    compile_genome:  Compile a genome into a CompiledNetwork
"""

from toponeat.phenotype.network import NodeState, CompiledNetwork, compile_genome

__all__ = ['NodeState',
           'CompiledNetwork',
           'compile_genome']
