"""CausalGraph — the immutable diagram every engine reads.

Structural queries over directed edges (parents, ancestors, descendants)
go through a lazily built ``networkx.DiGraph``. Bidirected and undirected
edges never contribute to ancestry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import Any

import networkx as nx

from .types import EdgeType, GraphEdge, GraphNode, NodeType

logger = logging.getLogger(__name__)


class GraphValidationError(ValueError):
    """Raised when a graph description cannot be turned into a CausalGraph."""


@dataclass(frozen=True)
class CausalGraph:
    """Nodes plus typed edges.

    ``is_dag`` is a caller-supplied hint and is never checked. Edges that
    reference unknown node ids are kept as given; every engine skips them.
    """

    id: str
    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()
    is_dag: bool | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        # Accept any iterable but store tuples so the value stays immutable.
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[tuple[str, str] | GraphEdge],
        node_names: dict[str, str] | None = None,
        graph_id: str = "graph",
    ) -> CausalGraph:
        """Build a graph from edges alone (useful for testing).

        Nodes are created in first-seen order. Plain ``(a, b)`` tuples become
        directed edges.

        Args:
            edges: ``GraphEdge`` values or ``(source, target)`` pairs.
            node_names: Optional id→name mapping. If absent, name == id.
            graph_id: Identifier of the resulting graph.
        """
        names = node_names or {}
        built: list[GraphEdge] = []
        seen: dict[str, None] = {}
        for e in edges:
            edge = e if isinstance(e, GraphEdge) else GraphEdge(source=e[0], target=e[1])
            built.append(edge)
            seen.setdefault(edge.source)
            seen.setdefault(edge.target)
        for nid in names:
            seen.setdefault(nid)
        nodes = tuple(GraphNode(id=nid, name=names.get(nid, nid)) for nid in seen)
        return cls(id=graph_id, nodes=nodes, edges=tuple(built))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], strict: bool = False) -> CausalGraph:
        """Build a graph from its dict form (``nodes``/``edges`` with ``from``/``to``).

        Raises:
            GraphValidationError: on duplicate node ids, unknown node or edge
                types, missing fields, or (with ``strict``) dangling edges.
        """
        try:
            raw_nodes = data.get("nodes") or []
            raw_edges = data.get("edges") or []
            nodes: list[GraphNode] = []
            ids: set[str] = set()
            for raw in raw_nodes:
                nid = str(raw["id"])
                if nid in ids:
                    raise GraphValidationError(f"Duplicate node id: {nid!r}")
                ids.add(nid)
                node_type = raw.get("type")
                nodes.append(
                    GraphNode(
                        id=nid,
                        name=str(raw.get("name", nid)),
                        type=NodeType(node_type) if node_type else None,
                        description=raw.get("description"),
                        properties=dict(raw.get("properties") or {}),
                    )
                )

            edges: list[GraphEdge] = []
            for raw in raw_edges:
                source = raw["from"] if "from" in raw else raw["source"]
                target = raw["to"] if "to" in raw else raw["target"]
                edges.append(
                    GraphEdge(
                        source=str(source),
                        target=str(target),
                        type=EdgeType(raw.get("type") or EdgeType.DIRECTED),
                        weight=raw.get("weight"),
                        confidence=raw.get("confidence"),
                        observed=raw.get("observed"),
                    )
                )
        except KeyError as err:
            raise GraphValidationError(f"Missing required field: {err.args[0]!r}") from err
        except (TypeError, AttributeError) as err:
            raise GraphValidationError(f"Malformed graph description: {err}") from err
        except GraphValidationError:
            raise
        except ValueError as err:
            # Enum lookups for unknown node/edge types.
            raise GraphValidationError(str(err)) from err

        is_dag = data.get("isDAG", data.get("is_dag"))
        graph = cls(
            id=str(data.get("id", "graph")),
            nodes=tuple(nodes),
            edges=tuple(edges),
            is_dag=is_dag,
            metadata=dict(data.get("metadata") or {}),
        )

        if strict:
            dangling = graph.dangling_edges()
            if dangling:
                described = ", ".join(f"{e.source}->{e.target}" for e in dangling)
                raise GraphValidationError(f"Edges reference unknown nodes: {described}")
        return graph

    def to_dict(self) -> dict[str, Any]:
        nodes: list[dict[str, Any]] = []
        for n in self.nodes:
            d: dict[str, Any] = {"id": n.id, "name": n.name}
            if n.type is not None:
                d["type"] = n.type.value
            if n.description is not None:
                d["description"] = n.description
            if n.properties:
                d["properties"] = dict(n.properties)
            nodes.append(d)

        edges: list[dict[str, Any]] = []
        for e in self.edges:
            d = {"from": e.source, "to": e.target, "type": e.type.value}
            for key in ("weight", "confidence", "observed"):
                value = getattr(e, key)
                if value is not None:
                    d[key] = value
            edges.append(d)

        out: dict[str, Any] = {"id": self.id, "nodes": nodes, "edges": edges}
        if self.is_dag is not None:
            out["isDAG"] = self.is_dag
        if self.metadata:
            out["metadata"] = dict(self.metadata)
        return out

    def with_edges(self, edges: Iterable[GraphEdge], **changes: Any) -> CausalGraph:
        """Copy of this graph with a different edge list."""
        return replace(self, edges=tuple(edges), **changes)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @cached_property
    def node_ids(self) -> tuple[str, ...]:
        """Node ids in insertion order."""
        return tuple(n.id for n in self.nodes)

    @cached_property
    def _node_id_set(self) -> frozenset[str]:
        return frozenset(self.node_ids)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._node_id_set

    def node(self, node_id: str) -> GraphNode | None:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def has_edge(self, source: str, target: str, edge_type: EdgeType | None = None) -> bool:
        """Whether an edge ``source -> target`` is stored (any type unless given)."""
        return any(
            e.source == source and e.target == target and (edge_type is None or e.type == edge_type)
            for e in self.edges
        )

    def dangling_edges(self) -> list[GraphEdge]:
        """Edges whose endpoints are not both declared nodes."""
        known = self._node_id_set
        return [e for e in self.edges if e.source not in known or e.target not in known]

    @property
    def has_bidirected_edges(self) -> bool:
        return any(e.type == EdgeType.BIDIRECTED for e in self.edges)

    # ------------------------------------------------------------------
    # Directed structure (networkx)
    # ------------------------------------------------------------------

    @cached_property
    def directed_graph(self) -> nx.DiGraph:
        """networkx view holding every node and the directed edges between them."""
        g = nx.DiGraph()
        g.add_nodes_from(self.node_ids)
        known = self._node_id_set
        for e in self.edges:
            if e.type != EdgeType.DIRECTED:
                continue
            if e.source in known and e.target in known:
                g.add_edge(e.source, e.target)
            else:
                logger.debug("Skipping dangling edge %s->%s in %s", e.source, e.target, self.id)
        return g

    @cached_property
    def bidirected_graph(self) -> nx.Graph:
        """Undirected networkx view of the bidirected (latent confounding) edges."""
        g = nx.Graph()
        g.add_nodes_from(self.node_ids)
        known = self._node_id_set
        g.add_edges_from(
            (e.source, e.target)
            for e in self.edges
            if e.type == EdgeType.BIDIRECTED and e.source in known and e.target in known
        )
        return g

    def parents(self, node_id: str) -> frozenset[str]:
        """Direct parents of a node via directed edges."""
        if not self.has_node(node_id):
            return frozenset()
        return frozenset(self.directed_graph.predecessors(node_id))

    def children(self, node_id: str) -> frozenset[str]:
        """Direct children of a node via directed edges."""
        if not self.has_node(node_id):
            return frozenset()
        return frozenset(self.directed_graph.successors(node_id))

    def ancestors(self, node_id: str) -> frozenset[str]:
        """All ancestors of a node (transitive parents). Safe on cyclic graphs."""
        if not self.has_node(node_id):
            return frozenset()
        return frozenset(nx.ancestors(self.directed_graph, node_id))

    def descendants(self, node_id: str) -> frozenset[str]:
        """All descendants of a node (transitive children). Safe on cyclic graphs."""
        if not self.has_node(node_id):
            return frozenset()
        return frozenset(nx.descendants(self.directed_graph, node_id))

    def ancestors_of_set(self, node_ids: Iterable[str]) -> frozenset[str]:
        out: set[str] = set()
        for nid in node_ids:
            out |= self.ancestors(nid)
        return frozenset(out)
