"""Tests for CentralityEngine.

Betweenness is cross-validated against networkx; the other measures are
checked against hand-computed values on small graphs.
"""

from __future__ import annotations

import logging
import math

import networkx as nx
import pytest

from deepthink.causal.centrality import (
    CentralityEngine,
    compute_all_centrality,
    get_most_central_node,
)
from deepthink.causal.graph import CausalGraph
from deepthink.causal.types import (
    CentralityConfig,
    CentralityType,
    GraphNode,
    RankedNode,
)


@pytest.fixture
def empty_graph() -> CausalGraph:
    return CausalGraph(id="empty")


@pytest.fixture
def edgeless_graph() -> CausalGraph:
    return CausalGraph(id="edgeless", nodes=tuple(GraphNode(n, n) for n in "ABCD"))


@pytest.fixture
def star_graph() -> CausalGraph:
    """H → A, H → B, H → C, H → D"""
    return CausalGraph.from_edges([("H", leaf) for leaf in "ABCD"], graph_id="star")


class TestDegree:
    def test_normalized(self, chain_graph):
        degree, in_degree, out_degree = CentralityEngine(chain_graph).degree()
        assert degree == {"A": 0.5, "B": 1.0, "C": 0.5}
        assert in_degree == {"A": 0.0, "B": 0.5, "C": 0.5}
        assert out_degree == {"A": 0.5, "B": 0.5, "C": 0.0}

    def test_raw(self, chain_graph):
        degree, _, _ = CentralityEngine(chain_graph).degree(normalize=False)
        assert degree == {"A": 1, "B": 2, "C": 1}

    def test_bidirected_counts_both_ways(self, bow_graph):
        _, in_degree, out_degree = CentralityEngine(bow_graph).degree(normalize=False)
        assert out_degree == {"X": 2, "Y": 1}
        assert in_degree == {"X": 1, "Y": 2}

    def test_single_node_not_divided_by_zero(self):
        g = CausalGraph(id="one", nodes=(GraphNode("A", "A"),))
        degree, _, _ = CentralityEngine(g).degree()
        assert degree == {"A": 0.0}


class TestBetweenness:
    def test_chain_middle(self, chain_graph):
        scores = CentralityEngine(chain_graph).betweenness(normalize=False)
        # Both orientations of the pair (A, C) pass through B.
        assert scores == {"A": 0.0, "B": 2.0, "C": 0.0}

    def test_normalization_factor(self, chain_graph):
        scores = CentralityEngine(chain_graph).betweenness()
        assert scores["B"] == pytest.approx(2.0 * 2 / (2 * 1))

    def test_edgeless_all_zero(self, edgeless_graph):
        assert set(CentralityEngine(edgeless_graph).betweenness().values()) == {0.0}

    def test_star_hub(self, star_graph):
        scores = CentralityEngine(star_graph).betweenness(normalize=False)
        # 6 leaf pairs, each seen from both ends.
        assert scores["H"] == pytest.approx(12.0)
        assert all(scores[leaf] == 0.0 for leaf in "ABCD")

    def test_matches_networkx(self, sprinkler_graph, smoking_graph, star_graph):
        for graph in (sprinkler_graph, smoking_graph, star_graph):
            ours = CentralityEngine(graph).betweenness(normalize=False)
            theirs = nx.betweenness_centrality(
                graph.directed_graph.to_undirected(), normalized=False
            )
            for nid in graph.node_ids:
                assert ours[nid] == pytest.approx(2 * theirs[nid])


class TestCloseness:
    def test_chain(self, chain_graph):
        scores = CentralityEngine(chain_graph).closeness(normalize=False)
        assert scores["A"] == pytest.approx(2 / 3)
        assert scores["B"] == pytest.approx(1.0)

    def test_chain_normalized(self, chain_graph):
        scores = CentralityEngine(chain_graph).closeness()
        assert scores["B"] == pytest.approx(2 / 3)

    def test_isolated_node_zero(self, edgeless_graph):
        assert set(CentralityEngine(edgeless_graph).closeness().values()) == {0.0}


class TestPageRank:
    def test_sums_to_one(self, sprinkler_graph):
        scores = CentralityEngine(sprinkler_graph).pagerank()
        assert sum(scores.values()) == pytest.approx(1.0)

    def test_chain_flows_downstream(self, chain_graph):
        scores = CentralityEngine(chain_graph).pagerank()
        assert scores["C"] > scores["B"] > scores["A"]

    def test_cycle_uniform(self):
        g = CausalGraph.from_edges([("A", "B"), ("B", "A")])
        scores = CentralityEngine(g).pagerank()
        assert scores["A"] == pytest.approx(0.5)
        assert scores["B"] == pytest.approx(0.5)

    def test_edgeless_uniform(self, edgeless_graph):
        scores = CentralityEngine(edgeless_graph).pagerank()
        assert all(v == pytest.approx(0.25) for v in scores.values())

    def test_empty_graph(self, empty_graph):
        assert CentralityEngine(empty_graph).pagerank() == {}

    def test_logs_convergence(self, chain_graph, caplog):
        with caplog.at_level(logging.DEBUG, logger="deepthink.causal.centrality"):
            CentralityEngine(chain_graph).pagerank()
        assert any(r.getMessage() == "centrality.converged" for r in caplog.records)

    def test_logs_max_iterations(self, chain_graph, caplog):
        with caplog.at_level(logging.DEBUG, logger="deepthink.causal.centrality"):
            CentralityEngine(chain_graph).pagerank(max_iterations=1, tolerance=0.0)
        assert any(r.getMessage() == "centrality.max_iterations" for r in caplog.records)


class TestEigenvector:
    def test_star_hub_highest(self, star_graph):
        scores = CentralityEngine(star_graph).eigenvector(max_iterations=500)
        assert max(scores, key=scores.get) == "H"

    def test_unit_norm(self, sprinkler_graph):
        scores = CentralityEngine(sprinkler_graph).eigenvector()
        assert math.sqrt(sum(v * v for v in scores.values())) == pytest.approx(1.0)

    def test_empty_graph(self, empty_graph):
        assert CentralityEngine(empty_graph).eigenvector() == {}


class TestKatz:
    def test_chain(self, chain_graph):
        scores = CentralityEngine(chain_graph).katz()
        assert scores["C"] == pytest.approx(1.0)
        assert scores["B"] == pytest.approx(1.1 / 1.11)
        assert scores["A"] == pytest.approx(1.0 / 1.11)

    def test_edgeless_all_beta(self, edgeless_graph):
        assert set(CentralityEngine(edgeless_graph).katz().values()) == {1.0}


class TestComputeAll:
    def test_default_measures(self, sprinkler_graph):
        result = compute_all_centrality(sprinkler_graph)
        assert result.measures.katz is None
        assert CentralityType.KATZ not in result.top_nodes
        assert set(result.measures.pagerank) == set(sprinkler_graph.node_ids)
        assert result.computation_time_ms >= 0

    def test_requested_subset_only(self, chain_graph):
        cfg = CentralityConfig(measures=(CentralityType.PAGERANK, CentralityType.KATZ))
        result = compute_all_centrality(chain_graph, cfg)
        assert result.measures.degree == {}
        assert result.measures.katz is not None
        assert set(result.top_nodes) == {CentralityType.PAGERANK, CentralityType.KATZ}

    def test_top_n(self, star_graph):
        cfg = CentralityConfig(measures=(CentralityType.DEGREE,), top_n=2)
        top = compute_all_centrality(star_graph, cfg).top_nodes[CentralityType.DEGREE]
        assert [r.node_id for r in top] == ["H", "A"]

    def test_top_ties_keep_node_order(self, edgeless_graph):
        cfg = CentralityConfig(measures=(CentralityType.PAGERANK,))
        top = compute_all_centrality(edgeless_graph, cfg).top_nodes[CentralityType.PAGERANK]
        assert [r.node_id for r in top] == ["A", "B", "C", "D"]

    def test_empty_graph(self, empty_graph):
        result = compute_all_centrality(empty_graph)
        assert result.measures.pagerank == {}
        assert result.top_nodes == {}


class TestMostCentral:
    def test_star_hub(self, star_graph):
        best = get_most_central_node(star_graph, CentralityType.DEGREE)
        assert best == RankedNode("H", 1.0)

    def test_first_wins_ties(self, edgeless_graph):
        assert get_most_central_node(edgeless_graph).node_id == "A"

    def test_empty_graph_none(self, empty_graph):
        assert get_most_central_node(empty_graph) is None
        assert get_most_central_node(empty_graph, CentralityType.KATZ) is None
