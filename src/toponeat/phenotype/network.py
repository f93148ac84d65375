"""
NEAT Compiled Network Module

This module implements the phenotype representation for the NEAT algorithm.
A genome is compiled into a flat, topologically ordered network, which is
then activated directly: no graph traversal happens at activation time.

Classes:
    NodeState:       Runtime state of one node (value and resolved incoming edges)
    CompiledNetwork: An executable feedforward network compiled from a genome

Functions:
    compile_genome:  Compile a genome into a CompiledNetwork
"""

from typing import Callable, Sequence, TYPE_CHECKING
import graphviz  # type: ignore

from toponeat.activations        import activations, activation_codes
from toponeat.genotype.node_gene import NodeType  # Needed at runtime

if TYPE_CHECKING:
    from toponeat.genotype import Genome

class NodeState:
    """
    The runtime state of one node of a compiled network.

    Public Attributes:
        id:       ID of the node gene this state was compiled from
        type:     Node type (INPUT, HIDDEN, or OUTPUT)
        value:    The value computed (or, for inputs, received) during the last activation
        incoming: The enabled incoming connections, as (source index, weight) pairs;
                  source indices point into the network's dense node list
    """

    def __init__(self, node_id: int, node_type: NodeType):
        self.id      : int                      = node_id
        self.type    : NodeType                 = node_type
        self.value   : float                    = 0.0
        self.incoming: list[tuple[int, float]]  = []

    def __repr__(self):
        return (f"NodeState(id={self.id:03d}, type=NodeType.{self.type.name}, "
                f"value={self.value:+.4f}, incoming={self.incoming})")

class CompiledNetwork:
    """
    A feedforward neural network compiled from a Genome.

    Compilation assigns each node a dense zero-based index (in genome order),
    resolves every enabled connection into the incoming list of its destination
    node, and computes the execution order: a post-order depth-first traversal
    of the dependency graph, starting from each output node. Input nodes are
    never part of the execution order (their values are seeded directly), and
    hidden nodes from which no output can be reached are left out.

    Disabled connections are invisible to the compiled network. A compiled
    network is a snapshot: whenever the genome's topology or weights change,
    it must be compiled again.

    Public Attributes:
        nodes:           Dense list of NodeState objects, in genome order
        execution_order: Indices of the nodes to compute, in topological order
        inputs_count:    Number of input nodes
        output_indices:  Indices of the output nodes, in genome order

    Public Methods:
        activate(inputs):     Process inputs through the network and return outputs
        forward_pass(inputs): Same as activate
        visualize(view):      Draw the source genome with Graphviz

    Public Properties:
        number_nodes:               Total number of nodes in the network
        number_nodes_hidden:        Number of hidden nodes in the network
        number_connections:         Total number of connections in the network
        number_connections_enabled: Number of enabled connections in the network
    """

    def __init__(self, genome: 'Genome', activation: str | None = None):
        """
        Compile a genome.

        Parameters:
            genome:     The Genome encoding the network
            activation: Name of the squash function applied by hidden and output nodes;
                        if None, the genome's configured activation is used

        Raises:
            RuntimeError: if a connection refers to a node missing from the genome, or
                          the connections form a cycle (both mean a genome invariant is broken)
        """
        self._genome = genome

        if activation is None:
            activation = genome._config.activation
        self._activation_name: str                       = activation
        self._activation     : Callable[[float], float] = activations[activation]

        # Step 1: assign each node a dense index
        self.nodes: list[NodeState] = []
        node_id_to_idx: dict[int, int] = {}
        for gene in genome.node_genes.values():
            node_id_to_idx[gene.id] = len(self.nodes)
            self.nodes.append(NodeState(gene.id, gene.type))

        # Step 2: resolve the enabled connections into incoming lists
        for conn in genome.conn_genes.values():
            if not conn.enabled:
                continue
            try:
                from_idx = node_id_to_idx[conn.node_in]
                to_idx   = node_id_to_idx[conn.node_out]
            except KeyError as e:
                raise RuntimeError(f"Connection {conn.innovation} references missing node {e.args[0]}") from e
            self.nodes[to_idx].incoming.append((from_idx, conn.weight))

        # Steps 3 & 4: execution order, input and output bookkeeping
        self.output_indices : list[int] = [i for i, n in enumerate(self.nodes) if n.type == NodeType.OUTPUT]
        self._input_indices : list[int] = [i for i, n in enumerate(self.nodes) if n.type == NodeType.INPUT]
        self.inputs_count   : int       = len(self._input_indices)
        self.execution_order: list[int] = self._execution_order(self.nodes, self.output_indices)

    @staticmethod
    def _execution_order(nodes: list[NodeState], output_indices: list[int]) -> list[int]:
        """
        Sort the nodes needed to compute the outputs in topological order.

        Iterative post-order depth-first traversal from each output node: a node is
        appended only after all of its sources. Visited nodes are skipped, so a node
        feeding several others (diamond shapes) is scheduled once. Input nodes are
        never scheduled.

        Parameters:
            nodes:          Dense node list, with resolved incoming connections
            output_indices: Indices of the output nodes, in genome order

        Returns:
            List of node indices in execution order

        Raises:
            RuntimeError: if a cycle is found
        """
        order    = []
        visited  = set()   # nodes already appended to 'order'
        on_stack = set()   # nodes whose sources are being visited

        for out_idx in output_indices:
            if out_idx in visited:
                continue

            # Each stack entry: (node index, iterator over the indices of its sources)
            stack = [(out_idx, iter(src for src, _ in nodes[out_idx].incoming))]
            on_stack.add(out_idx)

            while stack:
                idx, sources = stack[-1]
                for src in sources:
                    if src in visited or nodes[src].type == NodeType.INPUT:
                        continue
                    if src in on_stack:
                        raise RuntimeError(f"Cycle detected through node {nodes[src].id}")
                    stack.append((src, iter(s for s, _ in nodes[src].incoming)))
                    on_stack.add(src)
                    break

                # All sources done: schedule the node
                else:
                    stack.pop()
                    on_stack.discard(idx)
                    visited.add(idx)
                    order.append(idx)

        return order

    @property
    def number_nodes(self) -> int:
        """Total number of nodes in the network."""
        return len(self.nodes)

    @property
    def number_nodes_hidden(self) -> int:
        """Number of hidden nodes in the network."""
        return sum(1 for node in self.nodes if node.type == NodeType.HIDDEN)

    @property
    def number_connections(self) -> int:
        """Total number of connections in the network."""
        return len(self._genome.conn_genes)

    @property
    def number_connections_enabled(self) -> int:
        """Number of enabled connections in the network."""
        return sum(len(node.incoming) for node in self.nodes)

    def activate(self, inputs: Sequence[float]) -> list[float]:
        """
        Perform a complete forward pass through the network.

        Parameters:
            inputs: the network inputs (as many as input nodes), in input node order

        Returns:
            the results of passing the inputs through the network (as many as output nodes)

        Raises:
            ValueError: if the number of inputs does not match the number of input nodes
        """
        # The number of inputs must match the number of input nodes
        if len(inputs) != self.inputs_count:
            raise ValueError(f"Expected {self.inputs_count} inputs, got {len(inputs)}")

        # Set input values
        for idx, value in zip(self._input_indices, inputs):
            self.nodes[idx].value = float(value)

        # Propagate values through the network, in topological order
        nodes = self.nodes
        for idx in self.execution_order:
            node = nodes[idx]
            weighted_sum = sum(nodes[src].value * weight for src, weight in node.incoming)
            node.value = float(self._activation(weighted_sum))

        # Get output values
        return [nodes[idx].value for idx in self.output_indices]

    forward_pass = activate

    def visualize(self, view: bool = False) -> graphviz.Digraph:
        """
        Visualize the network using Graphviz.

        Draws all the nodes of the source genome and all its connections,
        enabled (black) and disabled (light gray).

        Parameters:
            view: If True, render the graph and open the result

        Returns:
            graphviz.Digraph object representing the network
        """
        dot = graphviz.Digraph()
        dot.attr(rankdir='LR')  # Left to right layout

        # Define node colors
        node_attrs = {
            'INPUT':  {'fillcolor': 'lightgrey', 'style': 'filled', 'shape': 'circle', 'fontsize': '8'},
            'HIDDEN': {'fillcolor': 'lightblue', 'style': 'filled', 'shape': 'circle', 'fontsize': '8'},
            'OUTPUT': {'fillcolor': 'white'    , 'style': 'filled', 'shape': 'circle', 'fontsize': '8'}
        }

        # Create subgraphs for better layout
        clusters = [('cluster_input' , 'source', NodeType.INPUT),
                    ('cluster_hidden', 'same'  , NodeType.HIDDEN),
                    ('cluster_output', 'sink'  , NodeType.OUTPUT)]
        for name, rank, node_type in clusters:
            node_ids = sorted(n.id for n in self.nodes if n.type == node_type)
            if not node_ids:
                continue
            with dot.subgraph(name=name) as cluster:
                cluster.attr(rank=rank, style='invisible')
                for node_id in node_ids:
                    label = f"{node_type.value}{node_id}"
                    if node_type != NodeType.INPUT:
                        label += f"\\n{activation_codes[self._activation_name]}"
                    cluster.node(str(node_id), label=label, **node_attrs[node_type.name])

        # Add edges with weights (both enabled and disabled)
        for conn in self._genome.conn_genes.values():
            dot.edge(str(conn.node_in), str(conn.node_out),
                     label    = f"i={conn.innovation},w={conn.weight:.2f}",
                     fontsize = '6',
                     color    = 'black' if conn.enabled else 'lightgray')

        if view:
            dot.view(cleanup=True)

        return dot

    def __str__(self):
        nodes_str = "\n".join(f"  {node}" for node in self.nodes)
        return f"{nodes_str}\n  execution order: {self.execution_order}"

def compile_genome(genome: 'Genome', activation: str | None = None) -> CompiledNetwork:
    """
    Compile 'genome' into an executable network (see CompiledNetwork).
    """
    return CompiledNetwork(genome, activation)
