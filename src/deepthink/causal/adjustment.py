"""AdjustmentEngine — graph surgery, adjustment criteria and do-calculus.

Graph surgery (mutilation, marginalisation) returns new CausalGraph values.
Every criterion here reduces to path blocking checks from the d-separation
engine, so none of them assume the input is acyclic.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import networkx as nx

from .dsep import DSeparationEngine
from .formulas import render_do_expression
from .graph import CausalGraph
from .subsets import SubsetSequence
from .types import (
    DoCalculusResult,
    EdgeType,
    FrontdoorResult,
    GraphEdge,
    Intervention,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Graph surgery
# =============================================================================


def _variables(interventions: Iterable[Intervention | str]) -> list[str]:
    return list(
        dict.fromkeys(i.variable if isinstance(i, Intervention) else i for i in interventions)
    )


def create_mutilated_graph(
    graph: CausalGraph,
    interventions: Iterable[Intervention | str],
) -> CausalGraph:
    """G with every edge whose target is an intervened variable removed (do(X=x)).

    Only the stored direction counts: ``U <-> X`` and an undirected ``A -- X``
    go, ``X <-> U`` stays.
    """
    variables = _variables(interventions)
    targets = set(variables)
    kept = [e for e in graph.edges if e.target not in targets]
    metadata = dict(graph.metadata)
    metadata["description"] = f"Mutilated graph with interventions on: {', '.join(variables)}"
    return graph.with_edges(kept, id=f"{graph.id}_mutilated", metadata=metadata)


def remove_outgoing_edges(graph: CausalGraph, variables: Iterable[str]) -> CausalGraph:
    """G with the directed edges leaving *variables* removed (the underbar operator)."""
    sources = set(variables)
    kept = [e for e in graph.edges if not (e.type == EdgeType.DIRECTED and e.source in sources)]
    return graph.with_edges(kept, id=f"{graph.id}_pruned")


def create_marginalized_graph(graph: CausalGraph, variable: str) -> CausalGraph:
    """Remove *variable*, wiring each of its parents straight to each of its children."""
    parents: list[str] = []
    children: list[str] = []
    kept: list[GraphEdge] = []
    for e in graph.edges:
        if e.target == variable:
            if e.source != variable:
                parents.append(e.source)
        elif e.source == variable:
            children.append(e.target)
        else:
            kept.append(e)

    existing = {(e.source, e.target) for e in kept}
    for parent in dict.fromkeys(parents):
        for child in dict.fromkeys(children):
            if parent == child or (parent, child) in existing:
                continue
            kept.append(GraphEdge(source=parent, target=child, type=EdgeType.DIRECTED))
            existing.add((parent, child))

    return CausalGraph(
        id=f"{graph.id}_marginalized_{variable}",
        nodes=tuple(n for n in graph.nodes if n.id != variable),
        edges=tuple(kept),
        is_dag=graph.is_dag,
        metadata=dict(graph.metadata),
    )


# =============================================================================
# Engine
# =============================================================================


@dataclass
class AdjustmentEngine:
    """Backdoor, frontdoor and instrumental-variable analysis for one graph.

    ``max_set_size`` bounds every exhaustive subset search and
    ``max_path_length`` every path enumeration.
    """

    graph: CausalGraph
    max_path_length: int = 10
    max_set_size: int = 5
    _dsep: DSeparationEngine = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._dsep = DSeparationEngine(self.graph, max_path_length=self.max_path_length)

    @property
    def dsep(self) -> DSeparationEngine:
        return self._dsep

    def _engine_for(self, graph: CausalGraph) -> DSeparationEngine:
        return DSeparationEngine(graph, max_path_length=self.max_path_length)

    # ------------------------------------------------------------------
    # Backdoor criterion
    # ------------------------------------------------------------------

    def backdoor_paths_blocked(
        self,
        sources: Sequence[str],
        targets: Sequence[str],
        z: Iterable[str],
    ) -> bool:
        """True when *z* blocks every backdoor path from *sources* to *targets*."""
        paths = self._dsep.path_finder.find_backdoor_paths(sources, targets, self.max_path_length)
        _, open_ = self._dsep.classify_paths(paths, z)
        return not open_

    def is_valid_backdoor_adjustment(
        self,
        treatment: str,
        outcome: str,
        adjustment_set: Iterable[str],
    ) -> bool:
        """Pearl's backdoor criterion for (treatment, outcome) relative to *adjustment_set*."""
        z = tuple(adjustment_set)
        descendants = self.graph.descendants(treatment)
        if any(node in descendants for node in z):
            return False
        return self.backdoor_paths_blocked((treatment,), (outcome,), z)

    def backdoor_candidates(self, treatment: str, outcome: str) -> list[str]:
        """Nodes eligible for a backdoor set: not X, not Y, not a descendant of X."""
        descendants = self.graph.descendants(treatment)
        return [
            nid
            for nid in self.graph.node_ids
            if nid not in (treatment, outcome) and nid not in descendants
        ]

    def find_backdoor_adjustment_set(
        self, treatment: str, outcome: str
    ) -> tuple[str, ...] | None:
        """Smallest valid backdoor set, or None within ``max_set_size``."""
        subsets = SubsetSequence.of(
            self.backdoor_candidates(treatment, outcome), max_size=self.max_set_size
        )
        found = subsets.first(lambda z: self.is_valid_backdoor_adjustment(treatment, outcome, z))
        logger.debug("Backdoor set for %s -> %s: %s", treatment, outcome, found)
        return found

    def find_all_backdoor_sets(
        self,
        treatment: str,
        outcome: str,
        max_size: int | None = None,
    ) -> list[tuple[str, ...]]:
        """Every valid backdoor set up to *max_size* (default ``max_set_size``)."""
        bound = self.max_set_size if max_size is None else max_size
        subsets = SubsetSequence.of(self.backdoor_candidates(treatment, outcome), max_size=bound)
        return subsets.all(lambda z: self.is_valid_backdoor_adjustment(treatment, outcome, z))

    # ------------------------------------------------------------------
    # Frontdoor criterion
    # ------------------------------------------------------------------

    def frontdoor_candidates(self, treatment: str, outcome: str) -> list[str]:
        """Nodes on some directed path X → ... → Y, strictly between them."""
        between = self.graph.descendants(treatment) & self.graph.ancestors(outcome)
        return [
            nid
            for nid in self.graph.node_ids
            if nid in between and nid not in (treatment, outcome)
        ]

    def intercepts_all_directed_paths(
        self, treatment: str, outcome: str, mediators: Iterable[str]
    ) -> bool:
        """Whether removing *mediators* cuts every directed path X → Y.

        Only directed edges form directed paths; bidirected and undirected
        edges never do.
        """
        g = self.graph.directed_graph
        if treatment not in g or outcome not in g:
            return True
        view = nx.restricted_view(g, list(mediators), [])
        return not nx.has_path(view, treatment, outcome)

    def check_frontdoor_criterion(self, treatment: str, outcome: str) -> FrontdoorResult:
        """Search for a mediator set M satisfying Pearl's frontdoor criterion.

        1. M intercepts every directed path from X to Y.
        2. No unblocked backdoor path runs from X to M.
        3. X blocks every backdoor path from M to Y.

        Singletons are tried first, then larger sets up to ``max_set_size``.
        """
        candidates = self.frontdoor_candidates(treatment, outcome)
        for mediators in SubsetSequence.of(candidates, min_size=1, max_size=self.max_set_size):
            if not self.intercepts_all_directed_paths(treatment, outcome, mediators):
                continue
            if not self.backdoor_paths_blocked((treatment,), mediators, ()):
                continue
            if self.backdoor_paths_blocked(mediators, (outcome,), (treatment,)):
                logger.debug("Frontdoor mediators for %s -> %s: %s", treatment, outcome, mediators)
                return FrontdoorResult(satisfied=True, mediators=mediators)
        return FrontdoorResult(satisfied=False)

    # ------------------------------------------------------------------
    # Instrumental variables
    # ------------------------------------------------------------------

    def find_instrumental_variable(self, treatment: str, outcome: str) -> str | None:
        """First Z with Z → X, no direct Z → Y, and Z ⊥ Y once X is intervened on."""
        mutilated = self._engine_for(create_mutilated_graph(self.graph, [treatment]))
        for nid in self.graph.node_ids:
            if nid in (treatment, outcome):
                continue
            if not self.graph.has_edge(nid, treatment, EdgeType.DIRECTED):
                continue
            if self.graph.has_edge(nid, outcome):
                continue
            if mutilated.separates((nid,), (outcome,), ()):
                return nid
        return None

    # ------------------------------------------------------------------
    # Do-calculus
    # ------------------------------------------------------------------

    def apply_rule1(
        self,
        y: Sequence[str],
        x: Sequence[str],
        z: Sequence[str],
        w: Sequence[str] = (),
    ) -> DoCalculusResult:
        """Insertion/deletion of observations.

        P(y|do(x),z,w) = P(y|do(x),w) if (Y ⊥ Z | X, W) in G_{X̄}.
        """
        g = create_mutilated_graph(self.graph, x)
        if self._engine_for(g).separates(y, z, (*x, *w)):
            return DoCalculusResult(
                rule=1, applicable=True, expression=render_do_expression(y, x, w)
            )
        return DoCalculusResult(rule=1, applicable=False)

    def apply_rule2(
        self,
        y: Sequence[str],
        x: Sequence[str],
        z: Sequence[str],
        w: Sequence[str] = (),
    ) -> DoCalculusResult:
        """Action/observation exchange.

        P(y|do(x),do(z),w) = P(y|do(x),z,w) if (Y ⊥ Z | X, W) in G_{X̄Z̲}.
        """
        g = remove_outgoing_edges(create_mutilated_graph(self.graph, x), z)
        if self._engine_for(g).separates(y, z, (*x, *w)):
            return DoCalculusResult(
                rule=2, applicable=True, expression=render_do_expression(y, x, (*z, *w))
            )
        return DoCalculusResult(rule=2, applicable=False)

    def apply_rule3(
        self,
        y: Sequence[str],
        x: Sequence[str],
        z: Sequence[str],
        w: Sequence[str] = (),
    ) -> DoCalculusResult:
        """Insertion/deletion of actions.

        P(y|do(x),do(z),w) = P(y|do(x),w) if (Y ⊥ Z | X, W) in G_{X̄,Z(W)̄},
        where Z(W) are the Z-nodes that are not ancestors of any W-node in G_{X̄}.
        """
        g_x = create_mutilated_graph(self.graph, x)
        w_ancestors = g_x.ancestors_of_set(w)
        z_w = [node for node in z if node not in w_ancestors]
        g = create_mutilated_graph(g_x, z_w) if z_w else g_x
        if self._engine_for(g).separates(y, z, (*x, *w)):
            return DoCalculusResult(
                rule=3, applicable=True, expression=render_do_expression(y, x, w)
            )
        return DoCalculusResult(rule=3, applicable=False)
