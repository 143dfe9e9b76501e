"""Shared fixtures for causal tests.

Canonical graphs: chain, fork, collider, sprinkler, smoking, plus the
identification scenarios (backdoor, frontdoor, instrumental variable, bow).
"""

from __future__ import annotations

import pytest

from deepthink.causal.graph import CausalGraph
from deepthink.causal.types import EdgeType, GraphEdge

# =============================================================================
# Helpers
# =============================================================================


def _edge(src: str, tgt: str) -> GraphEdge:
    return GraphEdge(source=src, target=tgt, type=EdgeType.DIRECTED)


def _latent(a: str, b: str) -> GraphEdge:
    """a <-> b: an unobserved common cause."""
    return GraphEdge(source=a, target=b, type=EdgeType.BIDIRECTED)


# =============================================================================
# Structural fixtures
# =============================================================================


@pytest.fixture
def chain_graph() -> CausalGraph:
    """A → B → C"""
    return CausalGraph.from_edges([_edge("A", "B"), _edge("B", "C")], graph_id="chain")


@pytest.fixture
def fork_graph() -> CausalGraph:
    """B → A, B → C (B is a common cause)"""
    return CausalGraph.from_edges([_edge("B", "A"), _edge("B", "C")], graph_id="fork")


@pytest.fixture
def collider_graph() -> CausalGraph:
    """A → B, C → B (B is a collider)"""
    return CausalGraph.from_edges([_edge("A", "B"), _edge("C", "B")], graph_id="collider")


@pytest.fixture
def sprinkler_graph() -> CausalGraph:
    """Season → Rain, Season → Sprinkler, Rain → Wet, Sprinkler → Wet"""
    return CausalGraph.from_edges(
        [
            _edge("Season", "Rain"),
            _edge("Season", "Sprinkler"),
            _edge("Rain", "Wet"),
            _edge("Sprinkler", "Wet"),
        ],
        graph_id="sprinkler",
    )


@pytest.fixture
def smoking_graph() -> CausalGraph:
    """Smoking → Tar → Cancer, Genotype → Smoking, Genotype → Cancer"""
    return CausalGraph.from_edges(
        [
            _edge("Smoking", "Tar"),
            _edge("Tar", "Cancer"),
            _edge("Genotype", "Smoking"),
            _edge("Genotype", "Cancer"),
        ],
        graph_id="smoking",
    )


# =============================================================================
# Identification scenarios
# =============================================================================


@pytest.fixture
def backdoor_graph() -> CausalGraph:
    """Z → X, Z → Y, X → Y (Z confounds X and Y)"""
    return CausalGraph.from_edges(
        [_edge("Z", "X"), _edge("Z", "Y"), _edge("X", "Y")], graph_id="backdoor"
    )


@pytest.fixture
def frontdoor_graph() -> CausalGraph:
    """X → M → Y with X <-> Y (latent confounder, mediator M)"""
    return CausalGraph.from_edges(
        [_edge("X", "M"), _edge("M", "Y"), _latent("X", "Y")], graph_id="frontdoor"
    )


@pytest.fixture
def frontdoor_proxy_graph() -> CausalGraph:
    """X → M → Y with U <-> X and U <-> Y"""
    return CausalGraph.from_edges(
        [_edge("X", "M"), _edge("M", "Y"), _latent("U", "X"), _latent("U", "Y")],
        graph_id="frontdoor_proxy",
    )


@pytest.fixture
def iv_graph() -> CausalGraph:
    """Z → X → Y with X <-> Y (Z is an instrument)"""
    return CausalGraph.from_edges(
        [_edge("Z", "X"), _edge("X", "Y"), _latent("X", "Y")], graph_id="iv"
    )


@pytest.fixture
def bow_graph() -> CausalGraph:
    """X → Y with X <-> Y: the textbook non-identifiable effect"""
    return CausalGraph.from_edges([_edge("X", "Y"), _latent("X", "Y")], graph_id="bow")
