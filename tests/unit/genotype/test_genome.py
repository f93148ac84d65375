"""
Unit tests for Genome class.

Tests cover seed genomes, construction from a dictionary, cloning, validation,
distance calculation, and the three mutation operators.
"""

import random

import pytest

from toponeat.genotype.genome             import Genome
from toponeat.genotype.node_gene          import NodeType
from toponeat.genotype.innovation_tracker import InnovationTracker
from toponeat.phenotype                   import compile_genome
from toponeat.run.config                  import Config


# ============================================================================
# Test Fixtures
# ============================================================================

@pytest.fixture
def config_3x2():
    """Default config with 3 inputs, 2 outputs."""
    config = Config()
    config.num_inputs  = 3
    config.num_outputs = 2
    return config


@pytest.fixture
def no_mutation_config():
    """Config with all mutation chances set to 0."""
    config = Config()
    config.mutate_weight_chance  = 0.0
    config.new_connection_chance = 0.0
    config.new_node_chance       = 0.0
    return config


@pytest.fixture
def hidden_genome_dict():
    """2 inputs, 1 output and a chain of two hidden nodes: 0 -> 3 -> 4 -> 2."""
    return {
        "nodes": [
            {"id": 0, "type": "input"},
            {"id": 1, "type": "input"},
            {"id": 2, "type": "output"},
            {"id": 3, "type": "hidden"},
            {"id": 4, "type": "hidden"},
        ],
        "connections": [
            {"from": 0, "to": 3, "weight": 0.5},
            {"from": 3, "to": 4, "weight": -1.0},
            {"from": 4, "to": 2, "weight": 2.0},
        ]
    }


@pytest.fixture
def single_connection_dict():
    """1 input connected to 1 output."""
    return {
        "nodes": [
            {"id": 0, "type": "input"},
            {"id": 1, "type": "output"},
        ],
        "connections": [
            {"from": 0, "to": 1, "weight": 0.7},
        ]
    }


def choices(*values):
    """Replacement for 'random.choice' returning the given values in order."""
    it = iter(values)
    return lambda seq: next(it)


def connection_pairs(genome):
    return [(c.node_in, c.node_out) for c in genome.connections]


# ============================================================================
# Test: Seed genomes
# ============================================================================

class TestGenomeInit:
    """Test seed genome initialization."""

    def test_nodes(self, config_3x2):
        genome = Genome(config_3x2, InnovationTracker.from_config(config_3x2))

        assert [n.id for n in genome.input_nodes]  == [0, 1, 2]
        assert [n.id for n in genome.output_nodes] == [3, 4]
        assert genome.hidden_nodes == []
        assert genome.fitness is None

    def test_fully_connected(self, config_3x2):
        genome = Genome(config_3x2, InnovationTracker.from_config(config_3x2))

        assert sorted(connection_pairs(genome)) == [(i, o) for i in range(3) for o in (3, 4)]
        assert all(conn.enabled for conn in genome.connections)
        assert sorted(genome.conn_genes) == list(range(6))

    def test_weights_within_init_range(self, default_config, tracker):
        random.seed(3)
        for _ in range(50):
            genome = Genome(default_config, tracker)
            assert all(-1.0 <= c.weight <= 1.0 for c in genome.connections)

    def test_seed_genomes_share_innovation_numbers(self, default_config, tracker):
        g1 = Genome(default_config, tracker)
        g2 = Genome(default_config, tracker)

        assert list(g1.conn_genes) == list(g2.conn_genes) == [0, 1]
        assert tracker.next_innovation_number == 2

    def test_weights_differ_between_seed_genomes(self, default_config, tracker, seeded):
        g1 = Genome(default_config, tracker)
        g2 = Genome(default_config, tracker)
        assert [c.weight for c in g1.connections] != [c.weight for c in g2.connections]


# ============================================================================
# Test: from_dict
# ============================================================================

class TestGenomeFromDict:
    """Test genome construction from a dictionary."""

    def test_structure(self, hidden_genome_dict):
        genome = Genome.from_dict(hidden_genome_dict)

        assert [n.id for n in genome.hidden_nodes] == [3, 4]
        assert connection_pairs(genome) == [(0, 3), (3, 4), (4, 2)]
        assert [c.weight for c in genome.connections] == [0.5, -1.0, 2.0]

    def test_enabled_flag(self, single_connection_dict):
        single_connection_dict["connections"][0]["enabled"] = False
        genome = Genome.from_dict(single_connection_dict)
        assert genome.enabled_connections == []

    def test_hidden_ids_reserved_in_tracker(self, hidden_genome_dict):
        tracker = InnovationTracker(2, 1)
        Genome.from_dict(hidden_genome_dict, tracker)
        assert tracker.allocate_node_id() == 5

    def test_shares_tracker_numbering(self, hidden_genome_dict, default_config, tracker):
        seed   = Genome(default_config, tracker)              # 0->2 is innovation 0
        genome = Genome.from_dict(hidden_genome_dict, tracker, default_config)
        assert genome.conn_genes.keys().isdisjoint(seed.conn_genes.keys())

        hidden_genome_dict["connections"].append({"from": 0, "to": 2, "weight": 0.1})
        genome = Genome.from_dict(hidden_genome_dict, tracker, default_config)
        assert genome._find_connection(0, 2).innovation == 0

    def test_config_mismatch(self, hidden_genome_dict, config_3x2):
        with pytest.raises(ValueError, match="configuration expects"):
            Genome.from_dict(hidden_genome_dict, config=config_3x2)

    def test_cycle_rejected(self, hidden_genome_dict):
        hidden_genome_dict["connections"].append({"from": 4, "to": 3, "weight": 1.0})
        with pytest.raises(ValueError, match="cycle"):
            Genome.from_dict(hidden_genome_dict)

    def test_self_loop_rejected(self, hidden_genome_dict):
        hidden_genome_dict["connections"].append({"from": 3, "to": 3, "weight": 1.0})
        with pytest.raises(ValueError, match="cycle"):
            Genome.from_dict(hidden_genome_dict)

    def test_missing_node_rejected(self, hidden_genome_dict):
        hidden_genome_dict["connections"].append({"from": 0, "to": 9, "weight": 1.0})
        with pytest.raises(ValueError, match="non-existent destination"):
            Genome.from_dict(hidden_genome_dict)

    def test_connection_into_input_rejected(self, hidden_genome_dict):
        hidden_genome_dict["connections"].append({"from": 3, "to": 1, "weight": 1.0})
        with pytest.raises(ValueError, match="input node"):
            Genome.from_dict(hidden_genome_dict)

    def test_duplicate_rejected(self, hidden_genome_dict):
        hidden_genome_dict["connections"].append({"from": 0, "to": 3, "weight": 1.0})
        with pytest.raises(ValueError, match="Duplicate connection"):
            Genome.from_dict(hidden_genome_dict)

    def test_bad_numbering_rejected(self, hidden_genome_dict):
        hidden_genome_dict["nodes"][2]["id"] = 7
        hidden_genome_dict["connections"] = []
        with pytest.raises(ValueError, match="Output nodes must be numbered"):
            Genome.from_dict(hidden_genome_dict)

    def test_bad_type_rejected(self, hidden_genome_dict):
        hidden_genome_dict["nodes"][3]["type"] = "bias"
        with pytest.raises(ValueError, match="Node type"):
            Genome.from_dict(hidden_genome_dict)

    def test_missing_field(self):
        with pytest.raises(KeyError):
            Genome.from_dict({"connections": []})


# ============================================================================
# Test: clone and validate
# ============================================================================

class TestGenomeClone:

    def test_clone_is_independent(self, hidden_genome_dict):
        genome = Genome.from_dict(hidden_genome_dict)
        genome.fitness = 0.5

        offspring = genome.clone()
        offspring.connections[0].weight  = 100.0
        offspring.connections[1].enabled = False
        offspring.node_genes.pop(4)

        assert genome.connections[0].weight == 0.5
        assert genome.connections[1].enabled is True
        assert 4 in genome.node_genes
        assert offspring.fitness is None

    def test_clone_keeps_structure(self, hidden_genome_dict):
        genome    = Genome.from_dict(hidden_genome_dict)
        offspring = genome.clone()
        assert list(offspring.conn_genes) == list(genome.conn_genes)
        assert offspring.node_genes == genome.node_genes
        assert genome.distance(offspring) == 0.0


class TestGenomeValidate:

    def test_valid_genome(self, hidden_genome_dict):
        Genome.from_dict(hidden_genome_dict).validate()

    def test_dangling_reference(self, hidden_genome_dict):
        genome = Genome.from_dict(hidden_genome_dict)
        del genome.node_genes[4]
        with pytest.raises(RuntimeError, match="missing node 4"):
            genome.validate()


# ============================================================================
# Test: distance
# ============================================================================

class TestGenomeDistance:

    def test_excess_disjoint_weight_terms(self, default_config):
        tracker = InnovationTracker.from_config(default_config)
        g1 = Genome.from_dict({
            "nodes": [{"id": 0, "type": "input"}, {"id": 1, "type": "input"}, {"id": 2, "type": "output"}],
            "connections": [{"from": 0, "to": 2, "weight": 1.0},    # innovation 0
                            {"from": 1, "to": 2, "weight": 0.5}]    # innovation 1
        }, tracker, default_config)
        g2 = Genome.from_dict({
            "nodes": [{"id": 0, "type": "input"}, {"id": 1, "type": "input"},
                      {"id": 2, "type": "output"}, {"id": 3, "type": "hidden"}],
            "connections": [{"from": 0, "to": 2, "weight": 0.0},    # innovation 0
                            {"from": 1, "to": 3, "weight": 1.0},    # innovation 2
                            {"from": 3, "to": 2, "weight": 1.0}]    # innovation 3
        }, tracker, default_config)

        # 1 disjoint (innovation 1), 2 excess (2, 3), N = 3, mean weight difference 1.0
        expected = 1.0 * 2 / 3 + 1.0 * 1 / 3 + 0.4 * 1.0
        assert g1.distance(g2) == pytest.approx(expected)
        assert g2.distance(g1) == pytest.approx(expected)

    def test_empty_genomes(self, single_connection_dict):
        single_connection_dict["connections"] = []
        g1 = Genome.from_dict(single_connection_dict)
        g2 = Genome.from_dict(single_connection_dict)
        assert g1.distance(g2) == 0.0


# ============================================================================
# Test: mutations
# ============================================================================

class TestMutateAddNode:

    def test_split(self, single_connection_dict):
        tracker = InnovationTracker(1, 1)
        genome  = Genome.from_dict(single_connection_dict, tracker)

        genome._mutate_add_node(tracker)

        old = genome._find_connection(0, 1)
        assert old.enabled is False
        assert old.weight == 0.7
        assert [n.id for n in genome.hidden_nodes] == [2]

        into = genome._find_connection(0, 2)
        out  = genome._find_connection(2, 1)
        assert (into.weight, into.enabled, into.innovation) == (1.0, True, 1)
        assert (out.weight,  out.enabled,  out.innovation)  == (0.7, True, 2)

    def test_same_split_twice_gets_fresh_ids(self, single_connection_dict):
        tracker = InnovationTracker(1, 1)
        g1 = Genome.from_dict(single_connection_dict, tracker)
        g2 = Genome.from_dict(single_connection_dict, tracker)

        g1._mutate_add_node(tracker)
        g2._mutate_add_node(tracker)

        assert [n.id for n in g1.hidden_nodes] == [2]
        assert [n.id for n in g2.hidden_nodes] == [3]
        assert sorted(g2.conn_genes) == [0, 3, 4]

    def test_no_enabled_connection(self, single_connection_dict):
        single_connection_dict["connections"][0]["enabled"] = False
        tracker = InnovationTracker(1, 1)
        genome  = Genome.from_dict(single_connection_dict, tracker)

        genome._mutate_add_node(tracker)

        assert genome.hidden_nodes == []
        assert tracker.next_node_id == 2


class TestMutateAddConnection:

    def test_adds_valid_connection(self, hidden_genome_dict, monkeypatch):
        tracker = InnovationTracker(2, 1)
        genome  = Genome.from_dict(hidden_genome_dict, tracker)

        # 4 -> 3 closes a cycle and is rejected, 1 -> 4 is accepted
        monkeypatch.setattr(random, "choice", choices(4, 3, 1, 4))
        genome._mutate_add_connection(tracker)

        assert connection_pairs(genome) == [(0, 3), (3, 4), (4, 2), (1, 4)]
        assert genome.connections[-1].innovation == 3
        assert -1.0 <= genome.connections[-1].weight <= 1.0

    def test_rejected_candidates(self, hidden_genome_dict, monkeypatch):
        tracker = InnovationTracker(2, 1)
        genome  = Genome.from_dict(hidden_genome_dict, tracker)

        # self loop, into an input, duplicate, then a valid one
        monkeypatch.setattr(random, "choice", choices(3, 3, 2, 0, 0, 3, 0, 2))
        genome._mutate_add_connection(tracker)

        assert connection_pairs(genome)[-1] == (0, 2)
        assert len(genome.connections) == 4

    def test_reenables_disabled_duplicate(self, single_connection_dict, monkeypatch):
        single_connection_dict["connections"][0]["enabled"] = False
        tracker = InnovationTracker(1, 1)
        genome  = Genome.from_dict(single_connection_dict, tracker)

        monkeypatch.setattr(random, "choice", choices(0, 1))
        genome._mutate_add_connection(tracker)

        assert len(genome.connections) == 1
        conn = genome.connections[0]
        assert conn.enabled is True
        assert conn.innovation == 0
        assert tracker.next_innovation_number == 1

    def test_saturated_genome_unchanged(self, default_config, tracker, seeded):
        genome = Genome(default_config, tracker)
        before = connection_pairs(genome)

        genome._mutate_add_connection(tracker)

        assert connection_pairs(genome) == before
        assert tracker.next_innovation_number == 2

    def test_disabled_connections_count_for_cycles(self, hidden_genome_dict):
        hidden_genome_dict["connections"][1]["enabled"] = False    # 3 -> 4 disabled
        genome = Genome.from_dict(hidden_genome_dict)
        assert genome._would_create_cycle(4, 3)
        assert not genome._would_create_cycle(3, 2)


class TestMutateWeights:

    def test_only_enabled_connections(self, hidden_genome_dict):
        hidden_genome_dict["connections"][1]["enabled"] = False
        genome = Genome.from_dict(hidden_genome_dict)
        genome._config.weight_perturb_prob = 1.0

        random.seed(5)
        genome._mutate_weights()

        weights = [c.weight for c in genome.connections]
        assert weights[1] == -1.0
        assert weights[0] != 0.5
        assert weights[2] != 2.0
        assert abs(weights[0] - 0.5) <= 0.1


class TestMutate:

    def test_no_mutation(self, no_mutation_config, seeded):
        tracker = InnovationTracker.from_config(no_mutation_config)
        genome  = Genome(no_mutation_config, tracker)
        weights = [c.weight for c in genome.connections]

        for _ in range(20):
            genome.mutate(tracker)

        assert [c.weight for c in genome.connections] == weights
        assert genome.hidden_nodes == []

    def test_independent_node_mutation(self, no_mutation_config, seeded):
        no_mutation_config.new_node_chance = 1.0
        tracker = InnovationTracker.from_config(no_mutation_config)
        genome  = Genome(no_mutation_config, tracker)

        for i in range(5):
            genome.mutate(tracker)
            assert len(genome.hidden_nodes) == i + 1

    def test_single_mutation_applies_at_most_one(self, no_mutation_config, seeded):
        config = no_mutation_config
        config.single_mutation       = True
        config.mutate_weight_chance  = 0.5
        config.new_node_chance       = 0.5
        tracker = InnovationTracker.from_config(config)

        for _ in range(50):
            genome  = Genome(config, tracker)
            weights = [c.weight for c in genome.connections]
            genome.mutate(tracker)

            structure_changed = len(genome.hidden_nodes) == 1
            weights_changed   = [c.weight for c in genome.connections[:2]] != weights
            assert structure_changed != weights_changed

    def test_single_mutation_weights_only(self, no_mutation_config, seeded):
        config = no_mutation_config
        config.single_mutation      = True
        config.mutate_weight_chance = 1.0
        tracker = InnovationTracker.from_config(config)
        genome  = Genome(config, tracker)

        for _ in range(20):
            genome.mutate(tracker)

        assert len(genome.connections) == 2
        assert genome.hidden_nodes == []

    def test_invariants_hold_after_many_mutations(self, seeded):
        config = Config()
        config.num_inputs            = 3
        config.num_outputs           = 2
        config.new_connection_chance = 0.5
        config.new_node_chance       = 0.3
        tracker = InnovationTracker.from_config(config)
        genome  = Genome(config, tracker)

        for _ in range(200):
            genome.mutate(tracker)

            genome.validate()
            pairs = connection_pairs(genome)
            assert len(pairs) == len(set(pairs))
            assert all(genome.node_genes[node_out].type != NodeType.INPUT for _, node_out in pairs)
            assert all(innov == conn.innovation for innov, conn in genome.conn_genes.items())

        # compiling fails on cycles
        compile_genome(genome)
        assert len(genome.hidden_nodes) > 0
