"""CLI commands for d-separation queries."""

from __future__ import annotations

from pathlib import Path

import typer

from deepthink.causal.dsep import DSeparationEngine
from deepthink.causal.types import DSeparationRequest
from deepthink.cli._errors import handle_error
from deepthink.cli._io import echo_json, load_graph, require_nodes, split_ids
from deepthink.cli.structure import GRAPH_HELP, STRICT_HELP
from deepthink.config import EngineSettings


def dsep(
    ctx: typer.Context,
    graph_file: Path = typer.Argument(..., help=GRAPH_HELP),
    x: str = typer.Option(..., "--x", "-x", help="Comma-separated source nodes."),
    y: str = typer.Option(..., "--y", "-y", help="Comma-separated target nodes."),
    z: str = typer.Option("", "--z", "-z", help="Comma-separated conditioning set."),
    paths: bool = typer.Option(False, "--paths", help="Include blocked and open paths."),
    max_path_length: int = typer.Option(None, "--max-path-length", help="Max nodes per path."),
    strict: bool = typer.Option(False, "--strict", help=STRICT_HELP),
) -> None:
    """Test whether X and Y are d-separated given Z."""
    settings: EngineSettings = ctx.obj
    graph = load_graph(graph_file, strict=strict)
    xs, ys, zs = split_ids(x), split_ids(y), split_ids(z)
    if not xs or not ys:
        handle_error("--x and --y need at least one node each")
    require_nodes(graph, (*xs, *ys, *zs))

    engine = DSeparationEngine(
        graph,
        max_path_length=max_path_length or settings.max_path_length,
    )
    result = engine.check_d_separation(
        DSeparationRequest(x=xs, y=ys, z=zs),
        include_path_details=paths or settings.include_path_details,
    )
    echo_json(result)


def separator(
    ctx: typer.Context,
    graph_file: Path = typer.Argument(..., help=GRAPH_HELP),
    x: str = typer.Option(..., "--x", "-x", help="Comma-separated source nodes."),
    y: str = typer.Option(..., "--y", "-y", help="Comma-separated target nodes."),
    max_set_size: int = typer.Option(None, "--max-set-size", help="Largest set to try."),
    strict: bool = typer.Option(False, "--strict", help=STRICT_HELP),
) -> None:
    """Find a smallest conditioning set that d-separates X and Y."""
    settings: EngineSettings = ctx.obj
    graph = load_graph(graph_file, strict=strict)
    xs, ys = split_ids(x), split_ids(y)
    require_nodes(graph, (*xs, *ys))

    bound = settings.max_set_size if max_set_size is None else max_set_size
    engine = DSeparationEngine(graph, max_path_length=settings.max_path_length)
    found = engine.find_minimal_separator(xs, ys, max_set_size=bound)
    echo_json({"x": xs, "y": ys, "found": found is not None, "separator": found})


def independencies(
    ctx: typer.Context,
    graph_file: Path = typer.Argument(..., help=GRAPH_HELP),
    max_conditioning_size: int = typer.Option(
        None, "--max-conditioning-size", help="Largest conditioning set to try."
    ),
    strict: bool = typer.Option(False, "--strict", help=STRICT_HELP),
) -> None:
    """List every conditional independence the graph implies."""
    settings: EngineSettings = ctx.obj
    graph = load_graph(graph_file, strict=strict)
    bound = (
        settings.max_conditioning_size if max_conditioning_size is None else max_conditioning_size
    )
    engine = DSeparationEngine(graph, max_path_length=settings.max_path_length)
    found = engine.get_implied_independencies(max_conditioning_size=bound)
    echo_json({"count": len(found), "independencies": found})
