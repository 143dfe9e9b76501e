"""Tests for PathFinder."""

from __future__ import annotations

from deepthink.causal.graph import CausalGraph
from deepthink.causal.paths import PathFinder, find_all_paths
from deepthink.causal.types import EdgeType, TraversalDirection


class TestFindAllPaths:
    def test_chain_single_path(self, chain_graph):
        [path] = find_all_paths(chain_graph, ["A"], ["C"])
        assert path.nodes == ("A", "B", "C")
        assert [e.direction for e in path.edges] == [TraversalDirection.FORWARD] * 2

    def test_collider_walks_against_edges(self, collider_graph):
        [path] = find_all_paths(collider_graph, ["A"], ["C"])
        assert str(path) == "A -> B <- C"
        assert path.edges[1].direction == TraversalDirection.BACKWARD

    def test_sprinkler_two_paths(self, sprinkler_graph):
        paths = find_all_paths(sprinkler_graph, ["Rain"], ["Sprinkler"])
        assert sorted(str(p) for p in paths) == [
            "Rain -> Wet <- Sprinkler",
            "Rain <- Season -> Sprinkler",
        ]

    def test_paths_are_simple(self):
        g = CausalGraph.from_edges([("A", "B"), ("B", "C"), ("C", "A"), ("C", "D")])
        for path in find_all_paths(g, ["A"], ["D"]):
            assert len(set(path.nodes)) == len(path.nodes)

    def test_stops_at_first_target(self, chain_graph):
        paths = find_all_paths(chain_graph, ["A"], ["B", "C"])
        assert [p.nodes for p in paths] == [("A", "B")]

    def test_max_length_counts_nodes(self, chain_graph):
        assert find_all_paths(chain_graph, ["A"], ["C"], max_length=2) == []
        assert len(find_all_paths(chain_graph, ["A"], ["C"], max_length=3)) == 1

    def test_unknown_source_ignored(self, chain_graph):
        assert find_all_paths(chain_graph, ["nope"], ["C"]) == []

    def test_disconnected(self):
        g = CausalGraph.from_edges([("A", "B"), ("C", "D")])
        assert find_all_paths(g, ["A"], ["D"]) == []

    def test_bidirected_step_type(self, bow_graph):
        paths = find_all_paths(bow_graph, ["X"], ["Y"])
        assert sorted(p.edges[0].edge_type for p in paths) == [
            EdgeType.BIDIRECTED,
            EdgeType.DIRECTED,
        ]


class TestBackdoorPaths:
    def test_first_step_into_source(self, backdoor_graph):
        [path] = PathFinder(backdoor_graph).find_backdoor_paths(["X"], ["Y"])
        assert path.nodes == ("X", "Z", "Y")

    def test_no_backdoor_in_chain(self, chain_graph):
        assert PathFinder(chain_graph).find_backdoor_paths(["A"], ["C"]) == []

    def test_bidirected_counts_as_backdoor(self, bow_graph):
        [path] = PathFinder(bow_graph).find_backdoor_paths(["X"], ["Y"])
        assert path.edges[0].edge_type == EdgeType.BIDIRECTED


class TestDirectedPaths:
    def test_follows_arrows_only(self, sprinkler_graph):
        finder = PathFinder(sprinkler_graph)
        assert len(finder.find_directed_paths(["Season"], ["Wet"])) == 2
        assert finder.find_directed_paths(["Wet"], ["Season"]) == []
        assert finder.find_directed_paths(["Rain"], ["Sprinkler"]) == []
