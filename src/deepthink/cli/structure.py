"""CLI commands for graph structure: centrality, Markov blankets, v-structures."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import typer

from deepthink.causal.centrality import CentralityEngine
from deepthink.causal.dsep import DSeparationEngine
from deepthink.causal.types import CentralityType
from deepthink.cli._errors import handle_error
from deepthink.cli._io import echo_json, load_graph, require_nodes, split_ids
from deepthink.config import EngineSettings

GRAPH_HELP = "Graph file (.json, .yaml or .yml)."
STRICT_HELP = "Reject edges that reference unknown nodes."


def centrality(
    ctx: typer.Context,
    graph_file: Path = typer.Argument(..., help=GRAPH_HELP),
    measures: str = typer.Option(
        None, "--measures", "-m", help="Comma-separated measures (default: configured set)."
    ),
    top: int = typer.Option(None, "--top", "-n", help="How many top nodes per measure."),
    raw: bool = typer.Option(False, "--raw", help="Skip normalisation."),
    strict: bool = typer.Option(False, "--strict", help=STRICT_HELP),
) -> None:
    """Compute centrality measures and the top nodes of each."""
    settings: EngineSettings = ctx.obj
    graph = load_graph(graph_file, strict=strict)

    config = settings.centrality_config()
    if measures:
        try:
            chosen = tuple(CentralityType(m.lower()) for m in split_ids(measures))
        except ValueError as err:
            available = ", ".join(m.value for m in CentralityType)
            handle_error(f"{err}. Available measures: {available}")
        config = dataclasses.replace(config, measures=chosen)
    if top is not None:
        config = dataclasses.replace(config, top_n=top)
    if raw:
        config = dataclasses.replace(config, normalize=False)

    result = CentralityEngine(graph).compute_all(config)
    wanted = set(config.measures)
    echo_json(
        {
            "graph": graph.id,
            "measures": {
                m.value: result.measures.get(m) for m in CentralityType if m in wanted
            },
            "top_nodes": {
                m.value: ranked for m, ranked in result.top_nodes.items() if m in wanted
            },
            "computation_time_ms": result.computation_time_ms,
        }
    )


def blanket(
    graph_file: Path = typer.Argument(..., help=GRAPH_HELP),
    node: str = typer.Argument(..., help="Node whose Markov blanket to compute."),
    strict: bool = typer.Option(False, "--strict", help=STRICT_HELP),
) -> None:
    """Print the Markov blanket of a node: parents, children, co-parents."""
    graph = load_graph(graph_file, strict=strict)
    require_nodes(graph, [node])
    markov_blanket = DSeparationEngine(graph).compute_markov_blanket(node)
    echo_json({"node": node, "markov_blanket": markov_blanket})


def vstructures(
    graph_file: Path = typer.Argument(..., help=GRAPH_HELP),
    strict: bool = typer.Option(False, "--strict", help=STRICT_HELP),
) -> None:
    """List every v-structure a -> c <- b with non-adjacent parents."""
    graph = load_graph(graph_file, strict=strict)
    echo_json({"v_structures": DSeparationEngine(graph).find_v_structures()})

