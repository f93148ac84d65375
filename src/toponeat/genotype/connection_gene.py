"""
NEAT Connection Gene Module

This module implements the ConnectionGene class for the
NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    ConnectionGene: Gene encoding a weighted connection between nodes
"""

import random
from toponeat.run.config import Config

class ConnectionGene:
    """
    A gene describing a weighted connection between two nodes in a Neural Network.

    Each connection gene represents a directed edge in the neural network graph,
    connecting a source node to a destination node with an associated weight.
    Connection genes are uniquely identified by their innovation number, which
    is assigned once, at creation, and never changes afterwards. Two genomes
    holding a connection gene with the same innovation number describe the
    same historical structural change, which is what allows genomes of
    different shapes to be aligned and compared.

    Connections can be enabled or disabled. A disabled connection does not take
    part in computation but stays in the genome, keeping its weight and its
    innovation number.

    Public Attributes:
        node_in:    ID of the source node
        node_out:   ID of the destination node
        weight:     Weight of the connection
        enabled:    Whether this connection is active in the network
        innovation: Innovation number uniquely identifying this connection within a run

    Public Methods:
        mutate(): Stochastically mutate the connection weight
    """

    def __init__(self,
                 node_in   : int,
                 node_out  : int,
                 weight    : float,
                 innovation: int,
                 config    : Config,
                 enabled   : bool = True):
        """
        Initialize a connection gene.

        Parameters:
            node_in:    ID of the source node
            node_out:   ID of the destination node
            weight:     Weight of the connection
            innovation: Number uniquely identifying this connection within a run
            config:     Stores configuration parameters
            enabled:    Whether this connection is active in the network
        """
        self.node_in   : int    = node_in
        self.node_out  : int    = node_out
        self.weight    : float  = weight
        self.enabled   : bool   = enabled
        self.innovation: int    = innovation
        self._config   : Config = config

    def mutate(self) -> None:
        """
        Mutate the weight of the connection.

        The weight is either:
         + perturbed, by adding a small uniform random amount (probability 'weight_perturb_prob')
         + replaced, by a new uniform random value (the rest of the time)
        Weights are not clamped.
        """
        if random.random() < self._config.weight_perturb_prob:
            strength     = self._config.weight_perturb_strength
            self.weight += random.uniform(-strength, strength)
        else:
            self.weight  = random_weight(self._config)

    def copy(self) -> 'ConnectionGene':
        """Return an independent copy of this gene."""
        return ConnectionGene(self.node_in, self.node_out, self.weight,
                              self.innovation, self._config, self.enabled)

    def __repr__(self):
        return (f"ConnectionGene(node_in={self.node_in:03d}, node_out={self.node_out:03d},"
                f"weight={self.weight:+.6f}, enabled={self.enabled}, innovation={self.innovation:03d})")

    def __str__(self):
        s  = f"[{self.innovation:03d},{'E' if self.enabled else 'D'},"
        s += f"{self.node_in:02d}=>{self.node_out:02d},{self.weight:+.02f}]"
        return s

def random_weight(config: Config) -> float:
    """
    Draw a fresh connection weight, uniformly from [-weight_init_range, weight_init_range].
    """
    return random.uniform(-config.weight_init_range, config.weight_init_range)
