"""Causal type system — enums, value types, request/result dataclasses.

Every other causal module imports from here. Graph inputs are frozen so a
query can never mutate the diagram it was handed; results are plain
dataclasses the calling layer is free to render however it likes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

# =============================================================================
# Enums
# =============================================================================


class NodeType(StrEnum):
    """Role a variable plays in the diagram."""

    OBSERVED = "observed"
    LATENT = "latent"
    INTERVENTION = "intervention"
    OUTCOME = "outcome"


class EdgeType(StrEnum):
    """Edge mark types. Bidirected edges stand for latent confounding."""

    DIRECTED = "directed"
    BIDIRECTED = "bidirected"
    UNDIRECTED = "undirected"


class TraversalDirection(StrEnum):
    """Direction a path step takes relative to the underlying edge."""

    FORWARD = "forward"
    BACKWARD = "backward"


class CentralityType(StrEnum):
    DEGREE = "degree"
    IN_DEGREE = "in_degree"
    OUT_DEGREE = "out_degree"
    BETWEENNESS = "betweenness"
    CLOSENESS = "closeness"
    PAGERANK = "pagerank"
    EIGENVECTOR = "eigenvector"
    KATZ = "katz"


class InterventionType(StrEnum):
    ATOMIC = "atomic"
    STOCHASTIC = "stochastic"
    CONDITIONAL = "conditional"


class AdjustmentMethod(StrEnum):
    """How an interventional distribution was identified."""

    BACKDOOR = "backdoor"
    FRONTDOOR = "frontdoor"
    INSTRUMENTAL = "instrumental"
    GENERAL = "general"


DEFAULT_MEASURES: tuple[CentralityType, ...] = (
    CentralityType.DEGREE,
    CentralityType.IN_DEGREE,
    CentralityType.OUT_DEGREE,
    CentralityType.BETWEENNESS,
    CentralityType.CLOSENESS,
    CentralityType.PAGERANK,
    CentralityType.EIGENVECTOR,
)
"""Measures computed when the caller does not name any (Katz is opt-in)."""


# =============================================================================
# Graph value types
# =============================================================================


@dataclass(frozen=True)
class GraphNode:
    """A variable in the causal diagram."""

    id: str
    name: str
    type: NodeType | None = None
    description: str | None = None
    properties: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class GraphEdge:
    """An edge between two node ids.

    ``weight`` lies in [-1, 1] and ``confidence`` in [0, 1]; neither is
    validated here, that is the job of whoever built the graph.
    """

    source: str
    target: str
    type: EdgeType = EdgeType.DIRECTED
    weight: float | None = None
    confidence: float | None = None
    observed: bool | None = None

    @property
    def is_directed(self) -> bool:
        return self.type == EdgeType.DIRECTED

    @property
    def is_bidirected(self) -> bool:
        return self.type == EdgeType.BIDIRECTED


# =============================================================================
# Paths
# =============================================================================


@dataclass(frozen=True)
class PathEdge:
    """One step of a path, recorded in traversal order.

    ``source``/``target`` follow the walk; ``direction`` says whether the
    walk agreed with the stored edge (forward) or ran against it (backward).
    """

    source: str
    target: str
    direction: TraversalDirection
    edge_type: EdgeType = EdgeType.DIRECTED

    @property
    def points_into_target(self) -> bool:
        """Arrowhead at the node this step arrives at."""
        if self.edge_type == EdgeType.BIDIRECTED:
            return True
        return self.edge_type == EdgeType.DIRECTED and self.direction == TraversalDirection.FORWARD

    @property
    def points_into_source(self) -> bool:
        """Arrowhead at the node this step leaves."""
        if self.edge_type == EdgeType.BIDIRECTED:
            return True
        return self.edge_type == EdgeType.DIRECTED and self.direction == TraversalDirection.BACKWARD


@dataclass
class Path:
    """A simple path. Blocking status is filled in by the d-separation engine."""

    nodes: tuple[str, ...]
    edges: tuple[PathEdge, ...]
    is_blocked: bool | None = None
    blocking_reason: str | None = None

    @property
    def length(self) -> int:
        return len(self.edges)

    def __str__(self) -> str:
        if not self.edges:
            return "".join(self.nodes)
        parts = [self.nodes[0]]
        for step in self.edges:
            if step.edge_type == EdgeType.BIDIRECTED:
                arrow = "<->"
            elif step.edge_type == EdgeType.UNDIRECTED:
                arrow = "--"
            elif step.direction == TraversalDirection.FORWARD:
                arrow = "->"
            else:
                arrow = "<-"
            parts.append(f" {arrow} {step.target}")
        return "".join(parts)


# =============================================================================
# Centrality
# =============================================================================


@dataclass
class CentralityConfig:
    """Knobs for centrality computation. Values are trusted as given."""

    measures: tuple[CentralityType, ...] = DEFAULT_MEASURES
    damping_factor: float = 0.85
    max_iterations: int = 100
    tolerance: float = 1e-6
    normalize: bool = True
    katz_alpha: float = 0.1
    katz_beta: float = 1.0
    top_n: int = 5


@dataclass
class CentralityMeasures:
    """Per-node scores for each measure; unrequested measures stay empty.

    ``katz`` is ``None`` unless Katz centrality was requested.
    """

    degree: dict[str, float] = field(default_factory=dict)
    in_degree: dict[str, float] = field(default_factory=dict)
    out_degree: dict[str, float] = field(default_factory=dict)
    betweenness: dict[str, float] = field(default_factory=dict)
    closeness: dict[str, float] = field(default_factory=dict)
    pagerank: dict[str, float] = field(default_factory=dict)
    eigenvector: dict[str, float] = field(default_factory=dict)
    katz: dict[str, float] | None = None

    def get(self, measure: CentralityType) -> dict[str, float]:
        scores = getattr(self, measure.value)
        return scores if scores is not None else {}


@dataclass(frozen=True)
class RankedNode:
    node_id: str
    score: float


@dataclass
class CentralityResult:
    measures: CentralityMeasures
    top_nodes: dict[CentralityType, list[RankedNode]]
    computation_time_ms: float


# =============================================================================
# D-separation
# =============================================================================


@dataclass(frozen=True)
class DSeparationRequest:
    x: tuple[str, ...]
    y: tuple[str, ...]
    z: tuple[str, ...] = ()


@dataclass
class DSeparationConfig:
    max_path_length: int = 10
    include_path_details: bool = False


@dataclass
class DSeparationResult:
    separated: bool
    blocked_paths: list[Path]
    open_paths: list[Path]
    conditioning_set: tuple[str, ...]
    explanation: str


@dataclass
class IndependenceAssertion:
    """Result of a d-separation test between node sets."""

    x: frozenset[str]
    y: frozenset[str]
    z: frozenset[str]
    is_independent: bool
    method: str = "d_separation"


@dataclass(frozen=True)
class VStructure:
    """``parent1 -> collider <- parent2`` with non-adjacent parents."""

    parent1: str
    collider: str
    parent2: str
    activated_when_conditioned: bool = True


# =============================================================================
# Interventions & identification
# =============================================================================


@dataclass(frozen=True)
class Intervention:
    """A ``do(variable = value)`` operation."""

    variable: str
    value: float | str = 0
    type: InterventionType = InterventionType.ATOMIC
    distribution: Mapping[str, Any] | None = field(default=None, compare=False)


@dataclass(frozen=True)
class AdjustmentFormula:
    adjustment_set: tuple[str, ...]
    latex: str
    plain_text: str
    method: AdjustmentMethod
    is_valid: bool = True


@dataclass
class FrontdoorResult:
    satisfied: bool
    mediators: tuple[str, ...] = ()


@dataclass
class IdentifiabilityResult:
    """Outcome of the identification cascade.

    ``witness`` is the set that made the effect identifiable: the
    adjustment set, the mediators, or the instrument.
    """

    identifiable: bool
    reason: str
    method: AdjustmentMethod | None = None
    witness: tuple[str, ...] = ()


@dataclass
class DoCalculusResult:
    rule: int
    applicable: bool
    expression: str | None = None


@dataclass
class InterventionRequest:
    interventions: list[Intervention]
    outcomes: list[str]
    covariates: list[str] | None = None


@dataclass
class InterventionResult:
    identifiable: bool
    treatment: str | None = None
    outcome: str | None = None
    method: AdjustmentMethod | None = None
    non_identifiable_reason: str | None = None
    estimand: str | None = None
    adjustment: AdjustmentFormula | None = None
