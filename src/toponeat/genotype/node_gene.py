"""
NEAT Node Gene Module.

This module implements the NodeGene class and NodeType enumeration
for the NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    NodeType: Enumeration for node types (INPUT, HIDDEN, OUTPUT)
    NodeGene: Gene encoding a single network node
"""

from enum import Enum

class NodeType(Enum):
    """
    Nodes come in three types: input, hidden, output.
    """
    INPUT  = "I"
    HIDDEN = "H"
    OUTPUT = "O"

class NodeGene:
    """
    A gene describing a node in a Neural Network.

    Node genes are identified by a unique node ID which remains consistent
    across structural mutations. Input nodes never compute, they pass the
    value they receive unchanged. Hidden and output nodes compute:
        activation(sum of weighted incoming values)

    The activation function is a property of the whole network (see 'Config'),
    so a node gene carries no parameters beyond its identity and type.

    Public Attributes:
        id:   Unique identifier for this node
        type: Type of node (INPUT, HIDDEN, or OUTPUT)
    """

    def __init__(self, node_id: int, node_type: NodeType):
        """
        Parameters:
            node_id:   Unique identifier for this node
            node_type: Type of node (INPUT, HIDDEN, OUTPUT)
        """
        self.id  : int      = node_id
        self.type: NodeType = node_type

    def __eq__(self, other):
        if not isinstance(other, NodeGene):
            return NotImplemented
        return self.id == other.id and self.type == other.type

    def __hash__(self):
        return hash((self.id, self.type))

    def __repr__(self):
        return f"NodeGene(node_id={self.id:03d}, node_type=NodeType.{self.type.name})"

    def __str__(self):
        return f"[{self.type.value}{self.id}]"
