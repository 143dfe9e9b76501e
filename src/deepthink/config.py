"""Engine defaults: YAML config + env var overrides.

Priority: env var > YAML file > default.
Env vars use DEEPTHINK_{SETTING_NAME} (e.g. DEEPTHINK_MAX_SET_SIZE=3).
YAML file default: ~/.deepthink/engine.yaml, overridable with
DEEPTHINK_CONFIG.

A malformed number is fatal: the offending variable is named on stderr
and the process exits with status 1.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, NoReturn

import yaml

from deepthink.causal.types import (
    DEFAULT_MEASURES,
    CentralityConfig,
    CentralityType,
    DSeparationConfig,
)

_TRUTHY = {"1", "true", "on", "yes"}
_FALSY = {"0", "false", "off", "no"}
_DEFAULT_PATH = Path("~/.deepthink/engine.yaml").expanduser()


def _fail(source: str, raw: Any, kind: str) -> NoReturn:
    print(f"Error: {source}={raw!r} is not a valid {kind}", file=sys.stderr)
    raise SystemExit(1)


def _int_env(var: str, default: int) -> int:
    """Parse an integer from an environment variable with a helpful error on bad input."""
    raw = os.environ.get(var)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        _fail(var, raw, "integer")


def _float_env(var: str, default: float) -> float:
    """Parse a float from an environment variable with a helpful error on bad input."""
    raw = os.environ.get(var)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        _fail(var, raw, "number")


def _bool_env(var: str, default: bool) -> bool:
    raw = os.environ.get(var)
    if raw is None:
        return default
    val = raw.lower()
    if val in _TRUTHY:
        return True
    if val in _FALSY:
        return False
    _fail(var, raw, "boolean")


def _parse_measures(raw: Any, source: str) -> tuple[CentralityType, ...]:
    """``"pagerank, degree"`` or ``[pagerank, degree]`` → CentralityType tuple."""
    items = raw.split(",") if isinstance(raw, str) else list(raw or [])
    try:
        return tuple(CentralityType(str(m).strip().lower()) for m in items if str(m).strip())
    except ValueError:
        _fail(source, raw, "list of centrality measures")


@dataclass
class EngineSettings:
    # Centrality
    measures: tuple[CentralityType, ...] = DEFAULT_MEASURES
    damping_factor: float = 0.85
    max_iterations: int = 100
    tolerance: float = 1e-6
    normalize: bool = True
    katz_alpha: float = 0.1
    katz_beta: float = 1.0
    top_n: int = 5
    # Path search and subset search bounds
    max_path_length: int = 10
    max_set_size: int = 5
    max_conditioning_size: int = 3
    include_path_details: bool = False
    source: Path | None = field(default=None, compare=False)

    @classmethod
    def load(cls, path: Path | None = None) -> EngineSettings:
        """Load settings from YAML file, then override with env vars."""
        file_path = path or _config_path()
        file_values: dict[str, Any] = {}

        if file_path.exists():
            try:
                raw = yaml.safe_load(file_path.read_text()) or {}
            except yaml.YAMLError as err:
                print(f"Error: could not parse {file_path}: {err}", file=sys.stderr)
                raise SystemExit(1) from err
            if isinstance(raw, dict):
                file_values = raw

        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            name = f.name
            if name == "source":
                continue
            env_key = f"DEEPTHINK_{name.upper()}"
            if env_key in os.environ:
                kwargs[name] = _from_env(name, env_key, f.default)
            elif name in file_values:
                kwargs[name] = _coerce(name, file_values[name], f.default, str(file_path))
            # else: dataclass default

        return cls(**kwargs, source=file_path if file_path.exists() else None)

    def centrality_config(self) -> CentralityConfig:
        return CentralityConfig(
            measures=self.measures,
            damping_factor=self.damping_factor,
            max_iterations=self.max_iterations,
            tolerance=self.tolerance,
            normalize=self.normalize,
            katz_alpha=self.katz_alpha,
            katz_beta=self.katz_beta,
            top_n=self.top_n,
        )

    def dseparation_config(self) -> DSeparationConfig:
        return DSeparationConfig(
            max_path_length=self.max_path_length,
            include_path_details=self.include_path_details,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            if f.name == "source":
                continue
            value = getattr(self, f.name)
            if f.name == "measures":
                value = [m.value for m in value]
            out[f.name] = value
        return out


def _config_path() -> Path:
    override = os.environ.get("DEEPTHINK_CONFIG")
    return Path(override).expanduser() if override else _DEFAULT_PATH


def _from_env(name: str, env_key: str, default: Any) -> Any:
    if name == "measures":
        return _parse_measures(os.environ[env_key], env_key)
    if isinstance(default, bool):
        return _bool_env(env_key, default)
    if isinstance(default, int):
        return _int_env(env_key, default)
    return _float_env(env_key, default)


def _coerce(name: str, value: Any, default: Any, source: str) -> Any:
    """Coerce a YAML value to the type of *default*, failing fast on garbage."""
    label = f"{source}:{name}"
    if name == "measures":
        return _parse_measures(value, label)
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if str(value).lower() in _TRUTHY:
            return True
        if str(value).lower() in _FALSY:
            return False
        _fail(label, value, "boolean")
    try:
        if isinstance(default, int):
            # int("2.5") must fail; YAML floats for int settings are rejected too.
            if isinstance(value, float):
                raise ValueError(value)
            return int(value)
        return float(value)
    except (TypeError, ValueError):
        _fail(label, value, "integer" if isinstance(default, int) else "number")

