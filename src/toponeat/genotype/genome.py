"""
NEAT Genome Module

This module implements the Genome class for the NEAT
(NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    Genome: Complete genome representing a neural network structure
"""

import random
from typing import Optional

from toponeat.run.config                  import Config
from toponeat.genotype.connection_gene    import ConnectionGene, random_weight
from toponeat.genotype.innovation_tracker import InnovationTracker
from toponeat.genotype.node_gene          import NodeType, NodeGene

class Genome:
    """
    A NEAT genome representing a neural network as a collection of node and connection genes.

    In the NEAT (NeuroEvolution of Augmenting Topologies) algorithm, a genome encodes
    the structure and parameters of a neural network at the genotype level. It consists of:
    - Node genes: describe network nodes (input, hidden, output)
    - Connection genes: describe weighted connections between nodes, each with an
      innovation number which aligns genes across genomes of different shapes

    A seed genome contains only input and output nodes, with every input connected
    to every output. Via mutation, genomes grow by adding nodes and connections,
    forming increasingly complex network topologies while remaining a DAG.

    Within a genome a (node_in, node_out) pair appears at most once. Since the
    InnovationTracker maps each pair to a single innovation number, connection
    genes can be keyed by innovation number.

    Node numbering convention:
        - Input nodes:  [0, num_inputs)
        - Output nodes: [num_inputs, num_inputs + num_outputs)
        - Hidden nodes: [num_inputs + num_outputs, ...), allocated by the InnovationTracker

    Attributes:
        node_genes: Dictionary mapping node IDs to NodeGene objects
        conn_genes: Dictionary mapping innovation numbers to ConnectionGene objects (in creation order)
        fitness:    Fitness assigned by the last evaluation (None until evaluated)

    Public Properties:
        input_nodes:         List of all input node genes
        output_nodes:        List of all output node genes
        hidden_nodes:        List of all hidden node genes
        connections:         List of all connection genes, in creation order
        enabled_connections: List of the enabled connection genes

    Public Methods:
        clone():           Create an independent copy of this genome
        mutate(tracker):   Apply one mutation pass
        distance(other):   Calculate genetic distance to another genome
        validate():        Check that every connection refers to existing nodes

    Class Methods:
        from_dict(genome_dict, tracker, config): Create a genome from a dictionary description
    """

    # Maximum number of node pairs tried by a single add-connection mutation
    NUM_ATTEMPTS = 20

    def __init__(self, config: Config, tracker: InnovationTracker):
        """
        Initialize a seed Genome.

        A seed genome has only input and output nodes (their number never changes and
        is retrieved from the configuration) and connects every input node to every
        output node, with random weights. The innovation numbers of these connections
        come from 'tracker', so all seed genomes of a run share them.

        Parameters:
            config:  Stores configuration parameters
            tracker: The innovation tracker of the current run
        """
        self._config = config

        self.node_genes: dict[int, NodeGene]       = {}  # node ID => node gene
        self.conn_genes: dict[int, ConnectionGene] = {}  # innovation number => connection gene
        self.fitness   : Optional[float]           = None

        # Initialize input nodes
        # By convention, input nodes are numbered: [0, NUMBER INPUT NODES)
        for i in range(self._config.num_inputs):
            self.node_genes[i] = NodeGene(i, NodeType.INPUT)

        # Initialize output nodes
        # By convention, output nodes are numbered: [NUMBER INPUT NODES, NUMBER INPUT NODES + NUMBER OUTPUT NODES)
        for i in range(self._config.num_outputs):
            node_id = self._config.num_inputs + i
            self.node_genes[node_id] = NodeGene(node_id, NodeType.OUTPUT)

        # Connect all input nodes to all output nodes
        for input_node in self.input_nodes:
            for output_node in self.output_nodes:
                self._add_connection(tracker, input_node.id, output_node.id, random_weight(self._config))

    @classmethod
    def from_dict(cls,
                  genome_dict: dict,
                  tracker    : Optional[InnovationTracker] = None,
                  config     : Optional[Config]            = None) -> 'Genome':
        """
        Create a Genome from a dictionary description.

        This method allows programmatic creation of genomes with specific structures.
        The dictionary specifies nodes and connections, and the method validates that
        the structure follows the node numbering convention and is acyclic.

        Dictionary format:
            {
                "nodes": [
                    {"id": 0, "type": "input"},
                    {"id": 1, "type": "input"},
                    {"id": 2, "type": "output"},
                    {"id": 3, "type": "hidden"}
                ],
                "connections": [
                    {"from": 0, "to": 3, "weight":  0.5, "enabled": true},
                    {"from": 1, "to": 3, "weight": -0.3},
                    {"from": 3, "to": 2, "weight":  1.5}
                ]
            }

        Parameters:
            genome_dict: Dictionary describing the genome structure
            tracker:     Innovation tracker assigning the innovation numbers; if None, a new
                         tracker is created. Node IDs of the hidden nodes are reserved in it.
            config:      Configuration parameters; if None, a default Config is created
                         with the number of inputs and outputs inferred from 'genome_dict'

        Returns:
            A new Genome object with the specified structure

        Raises:
            ValueError: If the structure is invalid (wrong node numbering, cycles, etc.)
            KeyError:   If required fields are missing from the dictionary
        """
        # Parse nodes data
        nodes_data   = genome_dict["nodes"]
        input_nodes  = [n for n in nodes_data if n["type"] == "input"]
        output_nodes = [n for n in nodes_data if n["type"] == "output"]
        hidden_nodes = [n for n in nodes_data if n["type"] == "hidden"]
        num_inputs   = len(input_nodes)
        num_outputs  = len(output_nodes)

        if len(input_nodes) + len(output_nodes) + len(hidden_nodes) != len(nodes_data):
            raise ValueError("Node type must be one of 'input', 'hidden', 'output'")

        # Validate node numbering convention
        cls._validate_node_numbering(input_nodes, output_nodes, hidden_nodes, num_inputs, num_outputs)

        if config is None:
            config = Config()
            config.num_inputs  = num_inputs
            config.num_outputs = num_outputs
        elif (config.num_inputs, config.num_outputs) != (num_inputs, num_outputs):
            raise ValueError(f"Genome has {num_inputs} inputs and {num_outputs} outputs, configuration "
                             f"expects {config.num_inputs} inputs and {config.num_outputs} outputs")

        if tracker is None:
            tracker = InnovationTracker(num_inputs, num_outputs)

        # Create empty genome
        genome = cls.__new__(cls)
        genome._config    = config
        genome.node_genes = {}
        genome.conn_genes = {}
        genome.fitness    = None

        # Add nodes, following the numbering convention order
        for node_data in sorted(input_nodes, key=lambda n: n["id"]):
            genome.node_genes[node_data["id"]] = NodeGene(node_data["id"], NodeType.INPUT)
        for node_data in sorted(output_nodes, key=lambda n: n["id"]):
            genome.node_genes[node_data["id"]] = NodeGene(node_data["id"], NodeType.OUTPUT)
        for node_data in hidden_nodes:
            genome.node_genes[node_data["id"]] = NodeGene(node_data["id"], NodeType.HIDDEN)
            tracker.reserve_node_id(node_data["id"])

        # Add connections and validate network is acyclic
        for conn_data in genome_dict.get("connections", []):
            node_in  = conn_data["from"]
            node_out = conn_data["to"]
            weight   = conn_data["weight"]
            enabled  = conn_data.get("enabled", True)

            # Validate that nodes exist
            if node_in not in genome.node_genes:
                raise ValueError(f"Connection references non-existent source node: {node_in}")
            if node_out not in genome.node_genes:
                raise ValueError(f"Connection references non-existent destination node: {node_out}")

            if genome.node_genes[node_out].type == NodeType.INPUT:
                raise ValueError(f"Connection from {node_in} to {node_out} ends at an input node")
            if genome._find_connection(node_in, node_out) is not None:
                raise ValueError(f"Duplicate connection from {node_in} to {node_out}")

            # Validate that connection wouldn't create a cycle
            if genome._would_create_cycle(node_in, node_out):
                raise ValueError(f"Connection from {node_in} to {node_out} would create a cycle")

            conn = genome._add_connection(tracker, node_in, node_out, weight)
            conn.enabled = enabled

        return genome

    @staticmethod
    def _validate_node_numbering(input_nodes : list,
                                 output_nodes: list,
                                 hidden_nodes: list,
                                 num_inputs  : int,
                                 num_outputs : int) -> None:
        """
        Validate that nodes follow the NEAT numbering convention.

        Raises:
            ValueError: If node numbering doesn't follow the convention
        """
        # Check input nodes are numbered [0, num_inputs)
        input_ids = sorted([n["id"] for n in input_nodes])
        expected_input_ids = list(range(num_inputs))
        if input_ids != expected_input_ids:
            raise ValueError(f"Input nodes must be numbered {expected_input_ids}, got {input_ids}")

        # Check output nodes are numbered [num_inputs, num_inputs + num_outputs)
        output_ids = sorted([n["id"] for n in output_nodes])
        expected_output_ids = list(range(num_inputs, num_inputs + num_outputs))
        if output_ids != expected_output_ids:
            raise ValueError(f"Output nodes must be numbered {expected_output_ids}, got {output_ids}")

        # Check hidden nodes are numbered >= num_inputs + num_outputs
        hidden_ids = [n["id"] for n in hidden_nodes]
        min_hidden_id = num_inputs + num_outputs
        for hid in hidden_ids:
            if hid < min_hidden_id:
                raise ValueError(f"Hidden node {hid} has ID below minimum {min_hidden_id}")

        # Check for duplicate node IDs
        all_ids = input_ids + output_ids + hidden_ids
        if len(all_ids) != len(set(all_ids)):
            raise ValueError("Duplicate node IDs found in node list")

    @property
    def input_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.INPUT]

    @property
    def output_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.OUTPUT]

    @property
    def hidden_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.HIDDEN]

    @property
    def connections(self) -> list[ConnectionGene]:
        return list(self.conn_genes.values())

    @property
    def enabled_connections(self) -> list[ConnectionGene]:
        return [conn for conn in self.conn_genes.values() if conn.enabled]

    def clone(self) -> 'Genome':
        """
        Create an independent copy of this genome.

        The copy has its own gene objects, so mutating it leaves this genome
        untouched. The fitness is not copied: it belongs to an evaluation,
        not to the genome's identity.
        """
        offspring = Genome.__new__(Genome)
        offspring._config    = self._config
        offspring.node_genes = {nid: NodeGene(node.id, node.type) for nid, node in self.node_genes.items()}
        offspring.conn_genes = {innov: conn.copy() for innov, conn in self.conn_genes.items()}
        offspring.fitness    = None
        return offspring

    def validate(self) -> None:
        """
        Check that every connection refers to nodes existing in this genome.

        Raises:
            RuntimeError: on a dangling node reference; it means an upstream operation broke
                          the genome's invariants, and the genome must not be used further
        """
        for conn in self.conn_genes.values():
            for node_id in (conn.node_in, conn.node_out):
                if node_id not in self.node_genes:
                    raise RuntimeError(f"Connection {conn.innovation} references missing node {node_id}")

    def distance(self, other: 'Genome') -> float:
        """
        Calculate genetic distance between this genome and another using the original NEAT formula.

        The original NEAT formula only looks at connections, aligned by innovation number.
           distance = (c1 * E / N) + (c2 * D / N) + c3 * W̄

        Where:
        - E = number of excess connection genes
        - D = number of disjoint connection genes
        - N = number of connection genes in larger genome
        - W̄ = average weight difference of matching connection genes
        - c1, c2, c3 = weight of various terms (from configuration)

        Parameters:
            other: the genome relative to which we are calculating the distance

        Returns:
            the NEAT distance between this genome and 'other'
        """
        # Get innovation numbers from both genomes
        innovs1 = set(self.conn_genes.keys())
        innovs2 = set(other.conn_genes.keys())
        if not innovs1 and not innovs2:
            return 0.0

        # Find matching, disjoint, and excess genes
        matching_innovs     =  innovs1 & innovs2
        non_matching_innovs = (innovs1 | innovs2) - matching_innovs

        max_innov1 = max(innovs1) if innovs1 else -1
        max_innov2 = max(innovs2) if innovs2 else -1

        # Excess   genes: beyond the smaller genome's max innovation number
        # Disjoint genes: within the overlapping range but not matching
        num_excess   = 0
        num_disjoint = 0
        for innov in non_matching_innovs:
            if innov > min(max_innov1, max_innov2):
                num_excess += 1
            else:
                num_disjoint += 1

        # Average connection weight difference for matching connection genes
        avg_weight_diff = 0.0
        if matching_innovs:
            weight_diff = sum(abs(self.conn_genes[i].weight - other.conn_genes[i].weight) for i in matching_innovs)
            avg_weight_diff = weight_diff / len(matching_innovs)

        N = max(len(self.conn_genes), len(other.conn_genes))
        return (self._config.distance_excess_coeff   * num_excess   / N +
                self._config.distance_disjoint_coeff * num_disjoint / N +
                self._config.distance_weight_coeff   * avg_weight_diff)

    def mutate(self, tracker: InnovationTracker) -> None:
        """
        Apply one mutation pass to the current genome.

        The possible mutations, in priority order, are:
          + mutate the connection weights
          + add a connection
          + add a node (split a connection)

        If 'single_mutation' is set, a single random number selects at most one of them
        (the probabilities partition [0, 1)); otherwise each occurs independently with
        its own probability. Mutations which turn out to be infeasible are skipped.

        Parameters:
            tracker: the innovation tracker of the current run
        """
        weight_chance     = self._config.mutate_weight_chance
        connection_chance = self._config.new_connection_chance
        node_chance       = self._config.new_node_chance

        # Case #1: only one mutation is allowed at a time
        if self._config.single_mutation:
            r = random.random()
            if r < weight_chance:
                self._mutate_weights()
            elif r < weight_chance + connection_chance:
                self._mutate_add_connection(tracker)
            elif r < weight_chance + connection_chance + node_chance:
                self._mutate_add_node(tracker)

        # Case #2: mutations occur independently
        else:
            do_mutate_weights = random.random() < weight_chance
            do_add_connection = random.random() < connection_chance
            do_add_node       = random.random() < node_chance

            if do_mutate_weights:
                self._mutate_weights()
            if do_add_connection:
                self._mutate_add_connection(tracker)
            if do_add_node:
                self._mutate_add_node(tracker)

    def _mutate_weights(self) -> None:
        """
        Mutate the weight of every enabled connection.
        """
        for conn in self.conn_genes.values():
            if conn.enabled:
                conn.mutate()

    def _mutate_add_connection(self, tracker: InnovationTracker) -> None:
        """
        Add a new connection between two existing nodes.

        The nodes representing the two ends of the new connection
        are selected at random, however we cannot add a connection:
         + from a node to itself
         + ending at an INPUT node
         + duplicating an enabled connection between the same two nodes
         + which would create a cycle in the DAG network graph

        If the two nodes are already joined by a disabled connection, that connection
        is re-enabled with a fresh weight (keeping its innovation number) instead.

        Note that the method does NOT add a new connection if it fails to do
        so due to the constraints listed above a maximum number of times.
        """
        node_IDs = list(self.node_genes.keys())

        # To prevent an infinite loop, this method only attempts
        # to create a new connection a maximum number of times.
        for _ in range(self.NUM_ATTEMPTS):

            # Select at random the two ends of the new connection
            node_in  = random.choice(node_IDs)
            node_out = random.choice(node_IDs)

            # Carry out quick checks first
            if node_in == node_out:
                continue
            if self.node_genes[node_out].type == NodeType.INPUT:
                continue

            existing = self._find_connection(node_in, node_out)
            if existing is not None:
                if existing.enabled:
                    continue

                # Re-enable rather than duplicate. The disabled connection is part of the
                # graph checked for cycles, so enabling it cannot create one.
                existing.enabled = True
                existing.weight  = random_weight(self._config)
                return

            # Carry out expensive check last
            if self._would_create_cycle(node_in, node_out):
                continue

            # Success - add connection gene to the genome and return
            self._add_connection(tracker, node_in, node_out, random_weight(self._config))
            return

    def _mutate_add_node(self, tracker: InnovationTracker) -> None:
        """
        Split an existing connection by adding a new node.

        The connection to split is selected at random from all 'enabled' connections.
        It is disabled (not removed: its innovation number and weight are kept) and
        replaced by two new connections through a new hidden node:
          + from the old source to the new node, with weight 1.0
          + from the new node to the old destination, with the old weight
        so that, at insertion time, the new node changes the network as little as possible.
        """
        enabled_conn_genes = self.enabled_connections
        if not enabled_conn_genes:
            return
        split_conn_gene = random.choice(enabled_conn_genes)

        # The connection being split must be disabled.
        split_conn_gene.enabled = False

        # Create the gene describing the new node (it is a hidden node)
        new_node_id = tracker.allocate_node_id()
        self.node_genes[new_node_id] = NodeGene(new_node_id, NodeType.HIDDEN)

        # First new connection: old source -> new node (weight = 1.0)
        self._add_connection(tracker, split_conn_gene.node_in, new_node_id, 1.0)

        # Second new connection: new node -> old destination (weight = old weight)
        self._add_connection(tracker, new_node_id, split_conn_gene.node_out, split_conn_gene.weight)

    def _add_connection(self, tracker: InnovationTracker, node_in: int, node_out: int, weight: float) -> ConnectionGene:
        """
        Append a new enabled connection gene, numbered by 'tracker'.
        """
        innovation = tracker.get_innovation_number(node_in, node_out)
        connection = ConnectionGene(node_in, node_out, weight, innovation, self._config)
        self.conn_genes[innovation] = connection
        return connection

    def _find_connection(self, node_in: int, node_out: int) -> Optional[ConnectionGene]:
        """
        Return the connection gene (enabled or disabled) from 'node_in' to 'node_out', if any.
        """
        for conn in self.conn_genes.values():
            if conn.node_in == node_in and conn.node_out == node_out:
                return conn
        return None

    def _would_create_cycle(self, from_node: int, to_node: int) -> bool:
        """
        Check if adding a connection from_node -> to_node would create a cycle.
        Uses DFS to check if there's already a path from 'to_node' back to 'from_node'.
        Considers ALL connections (both enabled and disabled) to maintain DAG structure.

        Parameters:
            from_node: proposed start of the new connection
            to_node:   proposed end   of the new connections

        Returns:
            whether adding the new connection would create a cycle in the network
        """
        # Avoid trivial connections.
        if from_node == to_node:
            return True

        # Nodes reachable in one step, via both enabled and disabled connections
        successors: dict[int, list[int]] = {}
        for conn in self.conn_genes.values():
            successors.setdefault(conn.node_in, []).append(conn.node_out)

        # If we can reach 'from_node' starting at 'to_node', then adding a
        # connection 'from_node' -> 'to_node' would create a network cycle
        visited = set()
        stack = [to_node]

        while stack:
            current = stack.pop()
            if current == from_node:
                return True   # found path 'to_node' -> 'from_node', would create cycle
            if current in visited:
                continue
            visited.add(current)
            stack.extend(successors.get(current, []))

        return False

    def __str__(self):
        node_genes_str  = ''.join(str(node) for node in self.input_nodes)
        node_genes_str += ''.join(str(node) for node in self.hidden_nodes)
        node_genes_str += ''.join(str(node) for node in self.output_nodes)
        conn_genes_str  = ''.join(str(conn) for conn in self.conn_genes.values())
        return f"Nodes: {node_genes_str}\nConns: {conn_genes_str}"
