"""DSeparationEngine — path-based d-separation over mixed graphs.

Enumerates simple paths between X and Y and checks each against the
conditioning set. Unlike ``networkx.is_d_separator`` this handles
bidirected and undirected edges and reports which paths stay open, at the
cost of exponential path enumeration on dense graphs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .graph import CausalGraph
from .paths import PathFinder
from .subsets import SubsetSequence
from .types import (
    DSeparationConfig,
    DSeparationRequest,
    DSeparationResult,
    EdgeType,
    IndependenceAssertion,
    Path,
    PathEdge,
    VStructure,
)

logger = logging.getLogger(__name__)


def is_collider(edges: Sequence[PathEdge], index: int) -> bool:
    """Whether node *index* of a path has arrowheads from both adjacent steps.

    ``edges[index - 1]`` arrives at the node, ``edges[index]`` leaves it.
    Endpoints are never colliders.
    """
    if index <= 0 or index >= len(edges):
        return False
    return edges[index - 1].points_into_target and edges[index].points_into_source


@dataclass
class DSeparationEngine:
    """Answers d-separation queries on a CausalGraph."""

    graph: CausalGraph
    max_path_length: int = 10
    _paths: PathFinder = field(init=False, repr=False)
    _descendants: dict[str, frozenset[str]] = field(init=False, repr=False, default_factory=dict)

    def __post_init__(self) -> None:
        self._paths = PathFinder(self.graph)

    @classmethod
    def from_config(cls, graph: CausalGraph, config: DSeparationConfig) -> DSeparationEngine:
        return cls(graph=graph, max_path_length=config.max_path_length)

    @property
    def path_finder(self) -> PathFinder:
        return self._paths

    def _descendants_of(self, node_id: str) -> frozenset[str]:
        if node_id not in self._descendants:
            self._descendants[node_id] = self.graph.descendants(node_id)
        return self._descendants[node_id]

    # ------------------------------------------------------------------
    # Path blocking
    # ------------------------------------------------------------------

    def is_path_blocked(self, path: Path, z: Iterable[str]) -> tuple[bool, str]:
        """Return ``(blocked, reason)`` for *path* under conditioning set *z*."""
        conditioning = set(z)
        nodes = path.nodes

        if len(nodes) < 3:
            if nodes[0] in conditioning or nodes[-1] in conditioning:
                return True, "Source or target is conditioned"
            return False, ""

        for i in range(1, len(nodes) - 1):
            node = nodes[i]
            if is_collider(path.edges, i):
                opened = node in conditioning or not conditioning.isdisjoint(
                    self._descendants_of(node)
                )
                if not opened:
                    return True, f"Collider {node} not conditioned"
            elif node in conditioning:
                return True, f"Non-collider {node} is conditioned"

        return False, ""

    def classify_paths(
        self, paths: Iterable[Path], z: Iterable[str]
    ) -> tuple[list[Path], list[Path]]:
        """Mark each path and split into ``(blocked, open)``."""
        conditioning = frozenset(z)
        blocked: list[Path] = []
        open_: list[Path] = []
        for path in paths:
            is_blocked, reason = self.is_path_blocked(path, conditioning)
            path.is_blocked = is_blocked
            path.blocking_reason = reason or None
            (blocked if is_blocked else open_).append(path)
        return blocked, open_

    # ------------------------------------------------------------------
    # Core query
    # ------------------------------------------------------------------

    def check_d_separation(
        self,
        request: DSeparationRequest,
        include_path_details: bool = False,
    ) -> DSeparationResult:
        """Test whether ``request.x`` and ``request.y`` are d-separated by ``request.z``."""
        paths = self._paths.find_all_paths(request.x, request.y, self.max_path_length)
        blocked, open_ = self.classify_paths(paths, request.z)
        separated = not open_

        x_desc = ", ".join(request.x)
        y_desc = ", ".join(request.y)
        z_desc = ", ".join(request.z)
        if separated and not paths:
            explanation = f"No paths exist between {{{x_desc}}} and {{{y_desc}}}"
        elif separated:
            explanation = f"All {len(paths)} path(s) are blocked by conditioning on {{{z_desc}}}"
        else:
            explanation = (
                f"{len(open_)} of {len(paths)} path(s) remain open "
                f"after conditioning on {{{z_desc}}}"
            )

        return DSeparationResult(
            separated=separated,
            blocked_paths=blocked if include_path_details else [],
            open_paths=open_ if include_path_details else [],
            conditioning_set=tuple(request.z),
            explanation=explanation,
        )

    def is_d_separated(
        self,
        x: frozenset[str],
        y: frozenset[str],
        z: frozenset[str],
    ) -> IndependenceAssertion:
        """Test whether *x* and *y* are d-separated given *z*."""
        result = self.check_d_separation(
            DSeparationRequest(
                x=_ordered(self.graph, x),
                y=_ordered(self.graph, y),
                z=_ordered(self.graph, z),
            )
        )
        return IndependenceAssertion(
            x=frozenset(x),
            y=frozenset(y),
            z=frozenset(z),
            is_independent=result.separated,
        )

    def separates(self, x: Sequence[str], y: Sequence[str], z: Sequence[str]) -> bool:
        return self.check_d_separation(DSeparationRequest(tuple(x), tuple(y), tuple(z))).separated

    # ------------------------------------------------------------------
    # Separators
    # ------------------------------------------------------------------

    def find_minimal_separator(
        self,
        x: Sequence[str],
        y: Sequence[str],
        max_set_size: int = 5,
    ) -> tuple[str, ...] | None:
        """Smallest conditioning set (by cardinality) that d-separates x and y.

        Returns None when no subset of at most *max_set_size* remaining
        nodes works. The set found is minimal, not unique.
        """
        excluded = set(x) | set(y)
        candidates = [nid for nid in self.graph.node_ids if nid not in excluded]
        subsets = SubsetSequence.of(candidates, max_size=max_set_size)
        found = subsets.first(lambda z: self.separates(x, y, z))
        logger.debug("Minimal separator for %s / %s: %s", list(x), list(y), found)
        return found

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def find_v_structures(self) -> list[VStructure]:
        """Every ``a -> c <- b`` where a and b are not adjacent."""
        structures: list[VStructure] = []
        for node in self.graph.node_ids:
            parents = _incoming_sources(self.graph, node)
            for i, p1 in enumerate(parents):
                for p2 in parents[i + 1 :]:
                    if not _adjacent(self.graph, p1, p2):
                        structures.append(VStructure(parent1=p1, collider=node, parent2=p2))
        return structures

    def compute_markov_blanket(self, node_id: str) -> list[str]:
        """Parents, children and the children's other parents (bidirected edges ignored)."""
        parents: list[str] = []
        children: list[str] = []
        for e in self.graph.edges:
            if e.type == EdgeType.BIDIRECTED:
                continue
            if e.target == node_id and e.source != node_id:
                parents.append(e.source)
            if e.source == node_id and e.target != node_id:
                children.append(e.target)

        co_parents: list[str] = []
        child_set = set(children)
        for e in self.graph.edges:
            if e.type == EdgeType.BIDIRECTED:
                continue
            if e.target in child_set and e.source != node_id:
                co_parents.append(e.source)

        # dict.fromkeys keeps first-seen order while de-duplicating
        return list(dict.fromkeys([*parents, *children, *co_parents]))

    # ------------------------------------------------------------------
    # Exhaustive enumeration
    # ------------------------------------------------------------------

    def get_implied_independencies(
        self,
        max_conditioning_size: int = 3,
    ) -> list[IndependenceAssertion]:
        """All (x, y, z) with x ⊥ y | z, for z up to *max_conditioning_size* nodes.

        Exponential; meant for small diagnostic graphs.
        """
        nodes = self.graph.node_ids
        results: list[IndependenceAssertion] = []

        for i, x_id in enumerate(nodes):
            for y_id in nodes[i + 1 :]:
                others = [n for n in nodes if n != x_id and n != y_id]
                for z in SubsetSequence.of(others, max_size=max_conditioning_size):
                    if self.separates((x_id,), (y_id,), z):
                        results.append(
                            IndependenceAssertion(
                                x=frozenset({x_id}),
                                y=frozenset({y_id}),
                                z=frozenset(z),
                                is_independent=True,
                            )
                        )
        return results


# =============================================================================
# Helpers
# =============================================================================


def _ordered(graph: CausalGraph, ids: Iterable[str]) -> tuple[str, ...]:
    wanted = set(ids)
    ordered = [nid for nid in graph.node_ids if nid in wanted]
    # Unknown ids keep a stable place at the end.
    ordered.extend(sorted(wanted - set(ordered)))
    return tuple(ordered)


def _incoming_sources(graph: CausalGraph, node_id: str) -> list[str]:
    """Sources of edges stored into *node_id*, bidirected ones excluded, in edge order.

    Undirected edges count in their stored direction, so ``A -- C <- B`` is a
    v-structure at C.
    """
    return list(
        dict.fromkeys(
            e.source
            for e in graph.edges
            if e.target == node_id and e.type != EdgeType.BIDIRECTED and e.source != node_id
        )
    )


def _adjacent(graph: CausalGraph, a: str, b: str) -> bool:
    return any(
        (e.source == a and e.target == b) or (e.source == b and e.target == a) for e in graph.edges
    )


def check_d_separation(
    graph: CausalGraph,
    request: DSeparationRequest,
    config: DSeparationConfig | None = None,
) -> DSeparationResult:
    cfg = config or DSeparationConfig()
    engine = DSeparationEngine.from_config(graph, cfg)
    return engine.check_d_separation(request, include_path_details=cfg.include_path_details)
