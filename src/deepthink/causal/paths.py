"""PathFinder — bounded enumeration of simple paths between node sets.

Paths ignore edge direction while walking but remember it: every step is
tagged forward or backward relative to the stored edge, which is what lets
the d-separation engine spot colliders. Exponential on dense graphs;
``max_length`` (maximum node count of a path) is the only bound.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from .adjacency import AdjacencyIndex, Neighbor
from .graph import CausalGraph
from .types import EdgeType, Path, PathEdge, TraversalDirection

StepFilter = Callable[[PathEdge], bool]


def _step(current: str, neighbor: Neighbor) -> PathEdge:
    return PathEdge(
        source=current,
        target=neighbor.node_id,
        direction=neighbor.direction,
        edge_type=neighbor.edge.type,
    )


def enters_source(step: PathEdge) -> bool:
    """First-step filter for backdoor paths.

    Undirected edges carry no arrowhead but may still hide confounding,
    so they are kept.
    """
    return step.points_into_source or step.edge_type == EdgeType.UNDIRECTED


@dataclass
class PathFinder:
    """Enumerates simple paths over one graph."""

    graph: CausalGraph
    _index: AdjacencyIndex = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._index = AdjacencyIndex.build(self.graph)

    def find_all_paths(
        self,
        sources: Iterable[str],
        targets: Iterable[str],
        max_length: int = 10,
    ) -> list[Path]:
        """Every simple path from a source to a target with at most *max_length* nodes.

        A path ends at the first target it reaches.
        """
        return self._enumerate(sources, targets, max_length)

    def find_backdoor_paths(
        self,
        sources: Iterable[str],
        targets: Iterable[str],
        max_length: int = 10,
    ) -> list[Path]:
        """Paths whose first edge points into the source node."""
        return self._enumerate(sources, targets, max_length, first_step=enters_source)

    def find_directed_paths(
        self,
        sources: Iterable[str],
        targets: Iterable[str],
        max_length: int = 10,
    ) -> list[Path]:
        """Paths following directed edges head-to-tail only."""
        return self._enumerate(sources, targets, max_length, every_step=_is_causal_step)

    def _enumerate(
        self,
        sources: Iterable[str],
        targets: Iterable[str],
        max_length: int,
        first_step: StepFilter | None = None,
        every_step: StepFilter | None = None,
    ) -> list[Path]:
        target_set = set(targets)
        traversal = self._index.traversal
        found: list[Path] = []

        for source in sources:
            if source not in traversal:
                continue

            # Each frame: (node, iterator position) with the path kept alongside.
            path_nodes: list[str] = [source]
            path_edges: list[PathEdge] = []
            on_path: set[str] = {source}
            stack: list[tuple[str, int]] = [(source, 0)]

            while stack:
                current, pos = stack[-1]
                neighbors = traversal[current]

                if pos >= len(neighbors) or len(path_nodes) >= max_length:
                    stack.pop()
                    on_path.discard(path_nodes.pop())
                    if path_edges:
                        path_edges.pop()
                    continue

                stack[-1] = (current, pos + 1)
                neighbor = neighbors[pos]
                nxt = neighbor.node_id
                if nxt in on_path:
                    continue

                step = _step(current, neighbor)
                if every_step is not None and not every_step(step):
                    continue
                if first_step is not None and not path_edges and not first_step(step):
                    continue

                if nxt in target_set:
                    found.append(
                        Path(nodes=(*path_nodes, nxt), edges=(*path_edges, step))
                    )
                    continue

                path_nodes.append(nxt)
                path_edges.append(step)
                on_path.add(nxt)
                stack.append((nxt, 0))

        return found


def _is_causal_step(step: PathEdge) -> bool:
    return step.edge_type == EdgeType.DIRECTED and step.direction == TraversalDirection.FORWARD


def find_all_paths(
    graph: CausalGraph,
    sources: Iterable[str],
    targets: Iterable[str],
    max_length: int = 10,
) -> list[Path]:
    return PathFinder(graph).find_all_paths(sources, targets, max_length)
