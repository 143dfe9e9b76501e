"""Causal graph analysis for deepthink.

Structural analysis of causal graphs: centrality, d-separation,
graph surgery, adjustment criteria and identification of interventional
effects. Graphs may mix directed, bidirected (latent confounding) and
undirected edges and need not be acyclic; every algorithm is path based
and keeps a visited set.

Layers:
    CausalGraph → AdjacencyIndex → PathFinder → DSeparationEngine
        → AdjustmentEngine → InterventionAnalyzer
    CentralityEngine sits beside them on the AdjacencyIndex.
"""

from .adjustment import (
    AdjustmentEngine,
    create_marginalized_graph,
    create_mutilated_graph,
    remove_outgoing_edges,
)
from .centrality import CentralityEngine, compute_all_centrality, get_most_central_node
from .dsep import DSeparationEngine, check_d_separation
from .formulas import (
    generate_backdoor_formula,
    generate_frontdoor_formula,
    generate_general_formula,
    generate_iv_formula,
)
from .graph import CausalGraph, GraphValidationError
from .intervention import InterventionAnalyzer, analyze_intervention, is_identifiable
from .paths import PathFinder, find_all_paths
from .subsets import SubsetSequence
from .types import (
    DEFAULT_MEASURES,
    AdjustmentFormula,
    AdjustmentMethod,
    CentralityConfig,
    CentralityMeasures,
    CentralityResult,
    CentralityType,
    DoCalculusResult,
    DSeparationConfig,
    DSeparationRequest,
    DSeparationResult,
    EdgeType,
    FrontdoorResult,
    GraphEdge,
    GraphNode,
    IdentifiabilityResult,
    IndependenceAssertion,
    Intervention,
    InterventionRequest,
    InterventionResult,
    InterventionType,
    NodeType,
    Path,
    PathEdge,
    RankedNode,
    TraversalDirection,
    VStructure,
)

__all__ = [
    # Enums
    "AdjustmentMethod",
    "CentralityType",
    "EdgeType",
    "InterventionType",
    "NodeType",
    "TraversalDirection",
    # Graph
    "CausalGraph",
    "GraphEdge",
    "GraphNode",
    "GraphValidationError",
    "Path",
    "PathEdge",
    # Centrality
    "CentralityConfig",
    "CentralityEngine",
    "CentralityMeasures",
    "CentralityResult",
    "DEFAULT_MEASURES",
    "RankedNode",
    "compute_all_centrality",
    "get_most_central_node",
    # Paths & d-separation
    "DSeparationConfig",
    "DSeparationEngine",
    "DSeparationRequest",
    "DSeparationResult",
    "IndependenceAssertion",
    "PathFinder",
    "SubsetSequence",
    "VStructure",
    "check_d_separation",
    "find_all_paths",
    # Adjustment & identification
    "AdjustmentEngine",
    "AdjustmentFormula",
    "DoCalculusResult",
    "FrontdoorResult",
    "IdentifiabilityResult",
    "Intervention",
    "InterventionAnalyzer",
    "InterventionRequest",
    "InterventionResult",
    "analyze_intervention",
    "create_marginalized_graph",
    "create_mutilated_graph",
    "generate_backdoor_formula",
    "generate_frontdoor_formula",
    "generate_general_formula",
    "generate_iv_formula",
    "is_identifiable",
    "remove_outgoing_edges",
]
