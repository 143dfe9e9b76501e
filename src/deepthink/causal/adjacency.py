"""AdjacencyIndex — outgoing/incoming lists and a traversal index.

Built in one O(V + E) pass. Map keys follow node insertion order so every
downstream iteration is reproducible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .graph import CausalGraph
from .types import EdgeType, GraphEdge, TraversalDirection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Neighbor:
    """A step available from a node: where it leads and over which edge."""

    node_id: str
    edge: GraphEdge
    direction: TraversalDirection


@dataclass
class AdjacencyIndex:
    """Adjacency views over a CausalGraph.

    With ``directed=True`` directed edges appear once (source → target)
    while undirected and bidirected edges appear in both directions. With
    ``directed=False`` every edge appears in both directions.

    Edges with an endpoint missing from the node list are dropped.
    """

    outgoing: dict[str, list[str]]
    incoming: dict[str, list[str]]
    traversal: dict[str, list[Neighbor]]

    @classmethod
    def build(cls, graph: CausalGraph, directed: bool = True) -> AdjacencyIndex:
        outgoing: dict[str, list[str]] = {nid: [] for nid in graph.node_ids}
        incoming: dict[str, list[str]] = {nid: [] for nid in graph.node_ids}
        traversal: dict[str, list[Neighbor]] = {nid: [] for nid in graph.node_ids}

        dropped = 0
        for edge in graph.edges:
            src, tgt = edge.source, edge.target
            if src not in outgoing or tgt not in outgoing:
                dropped += 1
                continue

            outgoing[src].append(tgt)
            incoming[tgt].append(src)
            if not directed or edge.type in (EdgeType.UNDIRECTED, EdgeType.BIDIRECTED):
                outgoing[tgt].append(src)
                incoming[src].append(tgt)

            traversal[src].append(Neighbor(tgt, edge, TraversalDirection.FORWARD))
            traversal[tgt].append(Neighbor(src, edge, TraversalDirection.BACKWARD))

        if dropped:
            logger.debug("Dropped %d dangling edge(s) while indexing graph %s", dropped, graph.id)

        return cls(outgoing=outgoing, incoming=incoming, traversal=traversal)

    @property
    def node_count(self) -> int:
        return len(self.outgoing)

    def out_degree(self, node_id: str) -> int:
        return len(self.outgoing.get(node_id, ()))

    def in_degree(self, node_id: str) -> int:
        return len(self.incoming.get(node_id, ()))
