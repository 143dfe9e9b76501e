"""Graph file loading and JSON output for CLI commands."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Any

import typer
import yaml

from deepthink.causal.graph import CausalGraph, GraphValidationError
from deepthink.causal.types import Path as GraphPath
from deepthink.cli._errors import handle_error


def load_graph(path: Path, strict: bool = False) -> CausalGraph:
    """Read a graph from a ``.json``, ``.yaml`` or ``.yml`` file.

    Unreadable files, parse errors and invalid graphs all end the command
    through handle_error().
    """
    if not path.is_file():
        handle_error(f"Graph file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as err:
        handle_error(f"Could not read {path}: {err}")

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as err:
        handle_error(f"Could not parse {path}: {err}")

    if not isinstance(data, dict):
        handle_error(f"{path} must contain a mapping with 'nodes' and 'edges'")
    try:
        return CausalGraph.from_dict(data, strict=strict)
    except GraphValidationError as err:
        handle_error(f"Invalid graph in {path}: {err}")


def split_ids(raw: str | None) -> tuple[str, ...]:
    """``"A, B,C"`` → ``("A", "B", "C")``; blanks dropped, order kept."""
    if not raw:
        return ()
    return tuple(dict.fromkeys(part.strip() for part in raw.split(",") if part.strip()))


def require_nodes(graph: CausalGraph, ids: Iterable[str]) -> None:
    unknown = [nid for nid in ids if not graph.has_node(nid)]
    if unknown:
        handle_error(f"Unknown node(s) in graph {graph.id!r}: {', '.join(unknown)}")


def to_jsonable(value: Any) -> Any:
    """Convert engine results into plain JSON types.

    Dataclasses become dicts, enums their values, sets sorted lists.
    Paths keep their arrow rendering alongside the node list.
    """
    if isinstance(value, GraphPath):
        return {
            "path": str(value),
            "nodes": list(value.nodes),
            "is_blocked": value.is_blocked,
            "blocking_reason": value.blocking_reason,
        }
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_jsonable(getattr(value, f.name))
            for f in dataclasses.fields(value)
            if not f.name.startswith("_")
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(to_jsonable(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def echo_json(value: Any) -> None:
    typer.echo(json.dumps(to_jsonable(value), indent=2, ensure_ascii=False))
