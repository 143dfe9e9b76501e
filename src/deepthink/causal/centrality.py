"""CentralityEngine — structural importance of nodes.

Degree, betweenness (Brandes), closeness, PageRank, eigenvector and Katz.
Iterative measures run plain power iteration over dicts keyed in node
insertion order, so results are reproducible for fixed parameters.
"""

from __future__ import annotations

import math
import time
from collections import deque
from dataclasses import dataclass, field

from deepthink.observability.logging import get_logger

from .adjacency import AdjacencyIndex
from .graph import CausalGraph
from .types import (
    CentralityConfig,
    CentralityMeasures,
    CentralityResult,
    CentralityType,
    RankedNode,
)

logger = get_logger(__name__)


@dataclass
class CentralityEngine:
    """Computes centrality measures for one graph.

    Usage::

        engine = CentralityEngine(graph)
        result = engine.compute_all(CentralityConfig(measures=(CentralityType.PAGERANK,)))
    """

    graph: CausalGraph
    _directed: AdjacencyIndex = field(init=False, repr=False)
    _undirected: AdjacencyIndex = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._directed = AdjacencyIndex.build(self.graph, directed=True)
        self._undirected = AdjacencyIndex.build(self.graph, directed=False)

    @property
    def _nodes(self) -> tuple[str, ...]:
        return self.graph.node_ids

    # ------------------------------------------------------------------
    # Degree
    # ------------------------------------------------------------------

    def degree(
        self, normalize: bool = True
    ) -> tuple[dict[str, float], dict[str, float], dict[str, float]]:
        """Return ``(degree, in_degree, out_degree)``.

        Undirected and bidirected edges count toward both the in- and
        out-degree of both endpoints.
        """
        n = len(self._nodes)
        norm = n - 1 if normalize and n > 1 else 1

        degree: dict[str, float] = {}
        in_degree: dict[str, float] = {}
        out_degree: dict[str, float] = {}
        for nid in self._nodes:
            out_d = self._directed.out_degree(nid)
            in_d = self._directed.in_degree(nid)
            out_degree[nid] = out_d / norm
            in_degree[nid] = in_d / norm
            degree[nid] = (out_d + in_d) / norm
        return degree, in_degree, out_degree

    # ------------------------------------------------------------------
    # Betweenness (Brandes)
    # ------------------------------------------------------------------

    def betweenness(self, normalize: bool = True) -> dict[str, float]:
        """Brandes' algorithm on the undirected view, O(V·E).

        Each unordered pair is seen from both ends, hence the factor 2 in
        the normalisation.
        """
        nodes = self._nodes
        adj = self._undirected.outgoing
        scores: dict[str, float] = dict.fromkeys(nodes, 0.0)

        for s in nodes:
            stack: list[str] = []
            pred: dict[str, list[str]] = {v: [] for v in nodes}
            sigma: dict[str, float] = dict.fromkeys(nodes, 0.0)
            dist: dict[str, int] = dict.fromkeys(nodes, -1)
            sigma[s] = 1.0
            dist[s] = 0

            queue = deque([s])
            while queue:
                v = queue.popleft()
                stack.append(v)
                for w in adj[v]:
                    if dist[w] < 0:
                        dist[w] = dist[v] + 1
                        queue.append(w)
                    if dist[w] == dist[v] + 1:
                        sigma[w] += sigma[v]
                        pred[w].append(v)

            delta: dict[str, float] = dict.fromkeys(nodes, 0.0)
            while stack:
                w = stack.pop()
                for v in pred[w]:
                    delta[v] += (sigma[v] / sigma[w]) * (1.0 + delta[w])
                if w != s:
                    scores[w] += delta[w]

        n = len(nodes)
        if normalize and n > 2:
            factor = (n - 1) * (n - 2)
            scores = {nid: value * 2 / factor for nid, value in scores.items()}
        return scores

    # ------------------------------------------------------------------
    # Closeness
    # ------------------------------------------------------------------

    def closeness(self, normalize: bool = True) -> dict[str, float]:
        """reachable / sum(distances) over the undirected view."""
        nodes = self._nodes
        adj = self._undirected.outgoing
        n = len(nodes)
        scores: dict[str, float] = {}

        for source in nodes:
            dist: dict[str, int] = {source: 0}
            queue = deque([source])
            while queue:
                current = queue.popleft()
                for neighbor in adj[current]:
                    if neighbor not in dist:
                        dist[neighbor] = dist[current] + 1
                        queue.append(neighbor)

            total = sum(dist.values())
            reachable = len(dist) - 1
            if reachable > 0 and total > 0:
                cc = reachable / total
                scores[source] = cc * (n - 1) / n if normalize and n > 1 else cc
            else:
                scores[source] = 0.0
        return scores

    # ------------------------------------------------------------------
    # PageRank
    # ------------------------------------------------------------------

    def pagerank(
        self,
        damping_factor: float = 0.85,
        max_iterations: int = 100,
        tolerance: float = 1e-6,
    ) -> dict[str, float]:
        """PageRank via power iteration.

        Dangling nodes (no outgoing edges) hand their mass to every node
        uniformly, so the scores always sum to 1.
        """
        nodes = self._nodes
        n = len(nodes)
        if n == 0:
            return {}

        adj = self._directed.outgoing
        scores: dict[str, float] = dict.fromkeys(nodes, 1.0 / n)
        teleport = (1.0 - damping_factor) / n

        for iteration in range(max_iterations):
            new_scores: dict[str, float] = dict.fromkeys(nodes, teleport)
            dangling_mass = 0.0
            for nid in nodes:
                targets = adj[nid]
                if targets:
                    share = damping_factor * scores[nid] / len(targets)
                    for t in targets:
                        new_scores[t] += share
                else:
                    dangling_mass += damping_factor * scores[nid] / n
            if dangling_mass:
                for nid in nodes:
                    new_scores[nid] += dangling_mass

            diff = max(abs(new_scores[nid] - scores[nid]) for nid in nodes)
            scores = new_scores
            if diff < tolerance:
                logger.debug(
                    "centrality.converged",
                    measure="pagerank",
                    iterations=iteration + 1,
                    final_diff=diff,
                    node_count=n,
                )
                break
        else:
            logger.debug(
                "centrality.max_iterations",
                measure="pagerank",
                iterations=max_iterations,
                node_count=n,
            )
        return scores

    # ------------------------------------------------------------------
    # Eigenvector
    # ------------------------------------------------------------------

    def eigenvector(self, max_iterations: int = 100, tolerance: float = 1e-6) -> dict[str, float]:
        """Power iteration on the undirected structure, L2-normalised each round."""
        nodes = self._nodes
        n = len(nodes)
        if n == 0:
            return {}

        incoming = self._undirected.incoming
        scores: dict[str, float] = dict.fromkeys(nodes, 1.0 / math.sqrt(n))

        for iteration in range(max_iterations):
            new_scores = {nid: sum(scores[u] for u in incoming[nid]) for nid in nodes}
            norm = math.sqrt(sum(v * v for v in new_scores.values()))
            if norm > 0:
                new_scores = {nid: v / norm for nid, v in new_scores.items()}

            diff = max(abs(new_scores[nid] - scores[nid]) for nid in nodes)
            scores = new_scores
            if diff < tolerance:
                logger.debug(
                    "centrality.converged",
                    measure="eigenvector",
                    iterations=iteration + 1,
                    final_diff=diff,
                    node_count=n,
                )
                break
        else:
            logger.debug(
                "centrality.max_iterations",
                measure="eigenvector",
                iterations=max_iterations,
                node_count=n,
            )
        return scores

    # ------------------------------------------------------------------
    # Katz
    # ------------------------------------------------------------------

    def katz(
        self,
        alpha: float = 0.1,
        beta: float = 1.0,
        max_iterations: int = 100,
        tolerance: float = 1e-6,
    ) -> dict[str, float]:
        """Katz centrality, scaled so the largest score is 1."""
        nodes = self._nodes
        if not nodes:
            return {}

        incoming = self._directed.incoming
        scores: dict[str, float] = dict.fromkeys(nodes, 0.0)

        for iteration in range(max_iterations):
            new_scores = {
                nid: beta + alpha * sum(scores[u] for u in incoming[nid]) for nid in nodes
            }
            diff = max(abs(new_scores[nid] - scores[nid]) for nid in nodes)
            scores = new_scores
            if diff < tolerance:
                logger.debug(
                    "centrality.converged",
                    measure="katz",
                    iterations=iteration + 1,
                    final_diff=diff,
                    node_count=len(nodes),
                )
                break

        peak = max(scores.values())
        if peak > 0:
            scores = {nid: v / peak for nid, v in scores.items()}
        return scores

    # ------------------------------------------------------------------
    # Combined analysis
    # ------------------------------------------------------------------

    def compute_all(self, config: CentralityConfig | None = None) -> CentralityResult:
        """Compute the requested measures plus the top nodes of each."""
        cfg = config or CentralityConfig()
        started = time.perf_counter()
        wanted = set(cfg.measures)
        measures = CentralityMeasures()

        if wanted & {CentralityType.DEGREE, CentralityType.IN_DEGREE, CentralityType.OUT_DEGREE}:
            measures.degree, measures.in_degree, measures.out_degree = self.degree(cfg.normalize)
        if CentralityType.BETWEENNESS in wanted:
            measures.betweenness = self.betweenness(cfg.normalize)
        if CentralityType.CLOSENESS in wanted:
            measures.closeness = self.closeness(cfg.normalize)
        if CentralityType.PAGERANK in wanted:
            measures.pagerank = self.pagerank(cfg.damping_factor, cfg.max_iterations, cfg.tolerance)
        if CentralityType.EIGENVECTOR in wanted:
            measures.eigenvector = self.eigenvector(cfg.max_iterations, cfg.tolerance)
        if CentralityType.KATZ in wanted:
            measures.katz = self.katz(
                cfg.katz_alpha, cfg.katz_beta, cfg.max_iterations, cfg.tolerance
            )

        top_nodes: dict[CentralityType, list[RankedNode]] = {}
        for measure in CentralityType:
            scores = measures.get(measure)
            if scores:
                top_nodes[measure] = _top(scores, cfg.top_n)

        elapsed = (time.perf_counter() - started) * 1000
        logger.debug(
            "centrality.computed",
            graph_id=self.graph.id,
            measures=sorted(m.value for m in wanted),
            node_count=len(self._nodes),
            latency_ms=elapsed,
        )
        return CentralityResult(measures=measures, top_nodes=top_nodes, computation_time_ms=elapsed)

    def scores_for(self, measure: CentralityType) -> dict[str, float]:
        """Scores for one measure using default parameters."""
        if measure in (CentralityType.DEGREE, CentralityType.IN_DEGREE, CentralityType.OUT_DEGREE):
            degree, in_degree, out_degree = self.degree()
            return {
                CentralityType.DEGREE: degree,
                CentralityType.IN_DEGREE: in_degree,
                CentralityType.OUT_DEGREE: out_degree,
            }[measure]
        if measure == CentralityType.BETWEENNESS:
            return self.betweenness()
        if measure == CentralityType.CLOSENESS:
            return self.closeness()
        if measure == CentralityType.PAGERANK:
            return self.pagerank()
        if measure == CentralityType.EIGENVECTOR:
            return self.eigenvector()
        return self.katz()

    def most_central_node(
        self, measure: CentralityType = CentralityType.PAGERANK
    ) -> RankedNode | None:
        """Highest-scoring node for *measure*; first node wins ties. None if empty."""
        scores = self.scores_for(measure)
        best: RankedNode | None = None
        for nid, score in scores.items():
            if best is None or score > best.score:
                best = RankedNode(nid, score)
        return best


def _top(scores: dict[str, float], n: int) -> list[RankedNode]:
    # sorted() is stable, so ties keep insertion order.
    ranked = sorted(scores.items(), key=lambda item: -item[1])
    return [RankedNode(nid, score) for nid, score in ranked[:n]]


# =============================================================================
# Module-level conveniences
# =============================================================================


def compute_all_centrality(
    graph: CausalGraph, config: CentralityConfig | None = None
) -> CentralityResult:
    return CentralityEngine(graph).compute_all(config)


def get_most_central_node(
    graph: CausalGraph, measure: CentralityType = CentralityType.PAGERANK
) -> RankedNode | None:
    return CentralityEngine(graph).most_central_node(measure)
