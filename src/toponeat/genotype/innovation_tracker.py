"""
NEAT Innovation Tracker Module

This module implements the InnovationTracker class for the
NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    InnovationTracker: Run-wide tracker for innovation numbers and node IDs
"""

class InnovationTracker:
    """
    Tracks structural changes across all genomes of one evolutionary run.
    Ensures the same connection (identified by its endpoints) always gets the
    same innovation number, whichever genome creates it, and hands out
    collision-free IDs for new hidden nodes.

    A tracker is created once at the start of a run and lives for the run's
    duration; it is passed explicitly to every operation that needs it.
    It is not thread-safe: callers mutating genomes concurrently must
    serialize access to it.

    Public Properties:
        next_innovation_number: The innovation number the next new connection will receive
        next_node_id:           The ID the next new node will receive

    Public Methods:
        get_innovation_number(node_in, node_out): Innovation number for a connection
        allocate_node_id():                       ID for a new hidden node
        reserve_node_id(node_id):                 Keep an externally chosen node ID from being allocated
    """

    def __init__(self, num_inputs: int, num_outputs: int):
        """
        Parameters:
            num_inputs:  number of input nodes in every genome
            num_outputs: number of output nodes in every genome

        Input and output nodes own IDs [0, num_inputs + num_outputs),
        so new node IDs are allocated starting at 'num_inputs + num_outputs'.
        """
        self._next_innovation_number: int = 0
        self._next_node_id          : int = num_inputs + num_outputs

        # For each connection ever created, map its endpoints to its innovation number
        self._innovation_numbers: dict[tuple[int, int], int] = {}  # (node_in, node_out) -> innovation number

    @classmethod
    def from_config(cls, config) -> 'InnovationTracker':
        """
        Create a tracker sized for the genomes described by 'config'.
        """
        return cls(config.num_inputs, config.num_outputs)

    @property
    def next_innovation_number(self) -> int:
        return self._next_innovation_number

    @property
    def next_node_id(self) -> int:
        return self._next_node_id

    def get_innovation_number(self, node_in: int, node_out: int) -> int:
        """
        Get innovation number for a connection, identified by its endpoints.
        Returns existing innovation number if this connection was created
        before (in any genome), otherwise assigns a new innovation number.

        Parameters:
            node_in:  node ID for the 'from' end of the connection
            node_out: node ID for the 'to'   end of the connection

        Returns:
            connection ID (a.k.a. innovation number)
        """
        key = (node_in, node_out)

        # This is a new connection
        if key not in self._innovation_numbers:
            self._innovation_numbers[key] = self._next_innovation_number
            self._next_innovation_number += 1

        return self._innovation_numbers[key]

    def allocate_node_id(self) -> int:
        """
        Get a fresh, run-wide unique ID for a new (hidden) node.
        """
        node_id = self._next_node_id
        self._next_node_id += 1
        return node_id

    def reserve_node_id(self, node_id: int) -> None:
        """
        Mark 'node_id' as taken, so that 'allocate_node_id()' never returns it.
        Used when genomes built outside of mutation introduce their own hidden node IDs.
        """
        self._next_node_id = max(self._next_node_id, node_id + 1)

    def __len__(self):
        return len(self._innovation_numbers)

    def __repr__(self):
        return (f"InnovationTracker(next_innovation_number={self.next_innovation_number}, "
                f"next_node_id={self.next_node_id}, known_connections={len(self)})")
