"""CLI commands for interventional queries: identification and do-calculus."""

from __future__ import annotations

from pathlib import Path

import typer

from deepthink.causal.intervention import InterventionAnalyzer
from deepthink.causal.types import Intervention, InterventionRequest
from deepthink.cli._errors import handle_error
from deepthink.cli._io import echo_json, load_graph, require_nodes, split_ids
from deepthink.cli.structure import GRAPH_HELP, STRICT_HELP
from deepthink.config import EngineSettings


def identify(
    ctx: typer.Context,
    graph_file: Path = typer.Argument(..., help=GRAPH_HELP),
    treatment: str = typer.Option(..., "--treatment", "-t", help="Intervened variable X."),
    outcome: str = typer.Option(..., "--outcome", "-o", help="Outcome variable Y."),
    covariates: str = typer.Option(
        None, "--covariates", "-c", help="Comma-separated adjustment set to try first."
    ),
    strict: bool = typer.Option(False, "--strict", help=STRICT_HELP),
) -> None:
    """Decide whether P(Y | do(X)) is identifiable and print its estimand."""
    settings: EngineSettings = ctx.obj
    graph = load_graph(graph_file, strict=strict)
    covs = split_ids(covariates) if covariates is not None else None
    require_nodes(graph, (treatment, outcome, *(covs or ())))

    analyzer = InterventionAnalyzer(
        graph,
        max_path_length=settings.max_path_length,
        max_set_size=settings.max_set_size,
    )
    result = analyzer.analyze_intervention(
        InterventionRequest(
            interventions=[Intervention(variable=treatment)],
            outcomes=[outcome],
            covariates=list(covs) if covs is not None else None,
        )
    )
    echo_json(result)


def do_rule(
    ctx: typer.Context,
    graph_file: Path = typer.Argument(..., help=GRAPH_HELP),
    rule: int = typer.Argument(..., help="Do-calculus rule: 1, 2 or 3."),
    y: str = typer.Option(..., "--y", "-y", help="Comma-separated outcome nodes."),
    x: str = typer.Option("", "--x", "-x", help="Comma-separated intervened nodes."),
    z: str = typer.Option(..., "--z", "-z", help="Comma-separated nodes the rule acts on."),
    w: str = typer.Option("", "--w", "-w", help="Comma-separated observed nodes."),
    strict: bool = typer.Option(False, "--strict", help=STRICT_HELP),
) -> None:
    """Check whether a do-calculus rule applies and print the rewritten expression."""
    settings: EngineSettings = ctx.obj
    if rule not in (1, 2, 3):
        handle_error(f"Rule must be 1, 2 or 3, got {rule}")
    graph = load_graph(graph_file, strict=strict)
    ys, xs, zs, ws = split_ids(y), split_ids(x), split_ids(z), split_ids(w)
    require_nodes(graph, (*ys, *xs, *zs, *ws))

    engine = InterventionAnalyzer(
        graph,
        max_path_length=settings.max_path_length,
        max_set_size=settings.max_set_size,
    ).adjustment
    apply = {1: engine.apply_rule1, 2: engine.apply_rule2, 3: engine.apply_rule3}[rule]
    echo_json(apply(ys, xs, zs, ws))
