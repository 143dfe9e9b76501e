"""deepthink CLI -- typer-based command interface.

Commands (each reads a graph file and prints JSON):
    deepthink centrality <graph>               Centrality measures + top nodes
    deepthink dsep <graph> -x A -y B -z C      d-separation test
    deepthink separator <graph> -x A -y B      Minimal separating set
    deepthink blanket <graph> <node>           Markov blanket
    deepthink vstructures <graph>              Colliders with non-adjacent parents
    deepthink independencies <graph>           Implied conditional independencies
    deepthink identify <graph> -t X -o Y       Identifiability + estimand
    deepthink do-rule <graph> <1|2|3> ...      Do-calculus rule check
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

import typer

from deepthink.cli import identification, separation, structure
from deepthink.cli._errors import handle_error
from deepthink.config import EngineSettings
from deepthink.observability import ObservabilityConfig, setup_logging

app = typer.Typer(
    name="deepthink",
    help="Analyse causal graphs: centrality, d-separation, identification.",
    no_args_is_help=True,
)

app.command("centrality")(structure.centrality)
app.command("blanket")(structure.blanket)
app.command("vstructures")(structure.vstructures)
app.command("dsep")(separation.dsep)
app.command("separator")(separation.separator)
app.command("independencies")(separation.independencies)
app.command("identify")(identification.identify)
app.command("do-rule")(identification.do_rule)


@app.callback()
def configure(
    ctx: typer.Context,
    config: Path = typer.Option(
        None, "--config", help="Engine settings YAML (default: ~/.deepthink/engine.yaml)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine internals at DEBUG."),
) -> None:
    """Load engine settings and wire up logging before any command runs."""
    obs = ObservabilityConfig.from_env()
    if verbose:
        obs = dataclasses.replace(obs, level="DEBUG")
    try:
        setup_logging(obs)
    except ValueError as err:
        handle_error(str(err))
    if config is not None and not config.is_file():
        handle_error(f"Config file not found: {config}")
    ctx.obj = EngineSettings.load(config)
    logging.getLogger(__name__).debug("Engine settings: %s", ctx.obj.to_dict())


def main() -> None:
    """Entry point for the deepthink CLI."""
    app()
