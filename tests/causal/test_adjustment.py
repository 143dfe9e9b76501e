"""Tests for graph surgery, adjustment criteria and do-calculus rules."""

from __future__ import annotations

from deepthink.causal.adjustment import (
    AdjustmentEngine,
    create_marginalized_graph,
    create_mutilated_graph,
    remove_outgoing_edges,
)
from deepthink.causal.graph import CausalGraph
from deepthink.causal.types import (
    DoCalculusResult,
    EdgeType,
    FrontdoorResult,
    GraphEdge,
    Intervention,
)


class TestMutilation:
    def test_removes_incoming_edges(self, backdoor_graph):
        g = create_mutilated_graph(backdoor_graph, ["X"])
        assert g.edges == (GraphEdge("Z", "Y"), GraphEdge("X", "Y"))
        assert g.node_ids == backdoor_graph.node_ids
        assert g.id == "backdoor_mutilated"
        assert g.metadata["description"] == "Mutilated graph with interventions on: X"

    def test_accepts_interventions(self, backdoor_graph):
        g = create_mutilated_graph(backdoor_graph, [Intervention("X", value=1)])
        assert not g.has_edge("Z", "X")

    def test_idempotent(self, sprinkler_graph):
        once = create_mutilated_graph(sprinkler_graph, ["Rain", "Wet"])
        twice = create_mutilated_graph(once, ["Rain", "Wet"])
        assert twice.edges == once.edges

    def test_removes_bidirected_edge_stored_into_target(self):
        g = CausalGraph.from_edges([GraphEdge("U", "X", EdgeType.BIDIRECTED), ("X", "Y")])
        assert create_mutilated_graph(g, ["X"]).edges == (GraphEdge("X", "Y"),)

    def test_keeps_edges_stored_out_of_target(self, iv_graph):
        # X <-> Y is stored with X as its source, so only Z -> X goes.
        g = create_mutilated_graph(iv_graph, ["X"])
        assert g.edges == (GraphEdge("X", "Y"), GraphEdge("X", "Y", EdgeType.BIDIRECTED))

    def test_removes_undirected_edge_stored_into_target(self):
        g = CausalGraph.from_edges([GraphEdge("A", "X", EdgeType.UNDIRECTED), ("X", "Y")])
        assert create_mutilated_graph(g, ["X"]).edges == (GraphEdge("X", "Y"),)

    def test_keeps_bidirected_edge_stored_out_of_target(self):
        g = CausalGraph.from_edges([GraphEdge("X", "U", EdgeType.BIDIRECTED), ("X", "Y")])
        assert create_mutilated_graph(g, ["X"]).edges == g.edges

    def test_input_graph_untouched(self, backdoor_graph):
        create_mutilated_graph(backdoor_graph, ["X"])
        assert backdoor_graph.has_edge("Z", "X")

    def test_remove_outgoing_edges(self, backdoor_graph):
        g = remove_outgoing_edges(backdoor_graph, ["Z"])
        assert g.edges == (GraphEdge("X", "Y"),)


class TestMarginalization:
    def test_chain(self, chain_graph):
        g = create_marginalized_graph(chain_graph, "B")
        assert g.node_ids == ("A", "C")
        assert g.edges == (GraphEdge("A", "C"),)

    def test_no_duplicate_edges(self):
        g = CausalGraph.from_edges([("A", "B"), ("B", "C"), ("A", "C")])
        assert create_marginalized_graph(g, "B").edges == (GraphEdge("A", "C"),)

    def test_no_self_loops(self):
        g = CausalGraph.from_edges([("A", "B"), ("B", "A")])
        marginalized = create_marginalized_graph(g, "B")
        assert marginalized.node_ids == ("A",)
        assert marginalized.edges == ()


class TestBackdoor:
    def test_confounder_required(self, backdoor_graph):
        engine = AdjustmentEngine(backdoor_graph)
        assert not engine.is_valid_backdoor_adjustment("X", "Y", [])
        assert engine.is_valid_backdoor_adjustment("X", "Y", ["Z"])

    def test_descendant_of_treatment_invalid(self, chain_graph):
        assert not AdjustmentEngine(chain_graph).is_valid_backdoor_adjustment("A", "C", ["B"])

    def test_find_set(self, backdoor_graph):
        assert AdjustmentEngine(backdoor_graph).find_backdoor_adjustment_set("X", "Y") == ("Z",)

    def test_unconfounded_empty_set(self, chain_graph):
        assert AdjustmentEngine(chain_graph).find_backdoor_adjustment_set("A", "C") == ()

    def test_latent_confounding_no_set(self, bow_graph):
        assert AdjustmentEngine(bow_graph).find_backdoor_adjustment_set("X", "Y") is None

    def test_candidates_exclude_descendants(self, smoking_graph):
        engine = AdjustmentEngine(smoking_graph)
        assert engine.backdoor_candidates("Smoking", "Cancer") == ["Genotype"]

    def test_find_all_sets(self, smoking_graph):
        engine = AdjustmentEngine(smoking_graph)
        assert engine.find_all_backdoor_sets("Smoking", "Cancer") == [("Genotype",)]
        assert engine.find_all_backdoor_sets("Smoking", "Cancer", max_size=0) == []

    def test_bounded_search(self, backdoor_graph):
        engine = AdjustmentEngine(backdoor_graph, max_set_size=0)
        assert engine.find_backdoor_adjustment_set("X", "Y") is None


class TestFrontdoor:
    def test_latent_confounder(self, frontdoor_graph):
        result = AdjustmentEngine(frontdoor_graph).check_frontdoor_criterion("X", "Y")
        assert result == FrontdoorResult(satisfied=True, mediators=("M",))

    def test_confounder_node_between_bidirected_edges(self, frontdoor_proxy_graph):
        result = AdjustmentEngine(frontdoor_proxy_graph).check_frontdoor_criterion("X", "Y")
        assert result.satisfied
        assert result.mediators == ("M",)

    def test_smoking_tar(self, smoking_graph):
        result = AdjustmentEngine(smoking_graph).check_frontdoor_criterion("Smoking", "Cancer")
        assert result.mediators == ("Tar",)

    def test_direct_edge_not_intercepted(self, backdoor_graph):
        assert not AdjustmentEngine(backdoor_graph).check_frontdoor_criterion("X", "Y").satisfied

    def test_no_mediators(self, bow_graph):
        result = AdjustmentEngine(bow_graph).check_frontdoor_criterion("X", "Y")
        assert result == FrontdoorResult(satisfied=False)

    def test_confounded_mediator_rejected(self):
        g = CausalGraph.from_edges(
            [
                ("X", "M"),
                ("M", "Y"),
                GraphEdge("X", "Y", EdgeType.BIDIRECTED),
                GraphEdge("X", "M", EdgeType.BIDIRECTED),
            ]
        )
        assert not AdjustmentEngine(g).check_frontdoor_criterion("X", "Y").satisfied

    def test_interception(self, frontdoor_graph):
        engine = AdjustmentEngine(frontdoor_graph)
        assert engine.frontdoor_candidates("X", "Y") == ["M"]
        assert engine.intercepts_all_directed_paths("X", "Y", ["M"])
        assert not engine.intercepts_all_directed_paths("X", "Y", [])


class TestInstrumentalVariable:
    def test_instrument_found(self, iv_graph):
        assert AdjustmentEngine(iv_graph).find_instrumental_variable("X", "Y") == "Z"

    def test_direct_effect_disqualifies(self, backdoor_graph):
        assert AdjustmentEngine(backdoor_graph).find_instrumental_variable("X", "Y") is None

    def test_chain_root(self, chain_graph):
        assert AdjustmentEngine(chain_graph).find_instrumental_variable("B", "C") == "A"


class TestDoCalculus:
    def test_rule1_applies(self, chain_graph):
        result = AdjustmentEngine(chain_graph).apply_rule1(["C"], ["B"], ["A"])
        assert result == DoCalculusResult(rule=1, applicable=True, expression="P(C|do(B))")

    def test_rule1_blocked(self, chain_graph):
        result = AdjustmentEngine(chain_graph).apply_rule1(["C"], [], ["A"])
        assert result == DoCalculusResult(rule=1, applicable=False)

    def test_rule2_with_confounder_observed(self, backdoor_graph):
        engine = AdjustmentEngine(backdoor_graph)
        result = engine.apply_rule2(["Y"], [], ["X"], ["Z"])
        assert result.applicable
        assert result.expression == "P(Y|X,Z)"
        assert not engine.apply_rule2(["Y"], [], ["X"]).applicable

    def test_rule3_removes_action(self, chain_graph):
        engine = AdjustmentEngine(chain_graph)
        assert engine.apply_rule3(["A"], [], ["C"]) == DoCalculusResult(
            rule=3, applicable=True, expression="P(A)"
        )
        assert not engine.apply_rule3(["C"], [], ["A"]).applicable

    def test_rule3_keeps_ancestors_of_w(self):
        # Z is an ancestor of W, so do(Z) does not cut Y -> Z.
        g = CausalGraph.from_edges([("Y", "Z"), ("Z", "W")])
        engine = AdjustmentEngine(g)
        assert not engine.apply_rule3(["Y"], [], ["Z"], ["W"]).applicable
        assert engine.apply_rule3(["Y"], [], ["Z"]).applicable
