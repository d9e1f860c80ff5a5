"""
Serialization module for FinProj configs and results.

Purpose
-------
Provides JSON persistence for engine configurations and plain-data
conversion of engine results, so a hosting layer can store or ship them.
The engines themselves never touch files.

Supports serialization of:
- Every configuration model (SimulationConfig, RetirementSimulationConfig,
  SafeWithdrawalParams, GoalProbabilityConfig, Scenario,
  LongTermProjectionConfig, WhatIfScenario)
- Every result dataclass (Monte Carlo, scenario comparison, cashflow)

Design Principles
-----------------
- Type-safe: configs are re-validated by their Pydantic model on load
- Human-readable: indented JSON
- Backward compatible: files carry a schema version; mismatches warn

Example
-------
>>> from pathlib import Path
>>> from finproj.serialization import save_config, load_config, save_result
>>> save_config(cfg, Path("sim.json"))
>>> cfg2 = load_config(Path("sim.json"))
>>> save_result(engine.simulate(cfg2), Path("result.json"))
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, Optional, Type
from pathlib import Path
from enum import Enum
import dataclasses
import json
import math
import warnings

import numpy as np
from pydantic import BaseModel

from .config import (
    GoalProbabilityConfig,
    LongTermProjectionConfig,
    RetirementSimulationConfig,
    SafeWithdrawalParams,
    Scenario,
    SimulationConfig,
    WhatIfScenario,
)
from .exceptions import ConfigurationError
from .types import ResultEnvelopeDict

__all__ = [
    "SCHEMA_VERSION",
    "CONFIG_MODELS",
    "to_plain",
    "result_to_dict",
    "save_result",
    "load_result",
    "save_config",
    "load_config",
]


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "0.1.0"

CONFIG_MODELS: Dict[str, Type[BaseModel]] = {
    cls.__name__: cls
    for cls in (
        SimulationConfig,
        RetirementSimulationConfig,
        SafeWithdrawalParams,
        GoalProbabilityConfig,
        Scenario,
        LongTermProjectionConfig,
        WhatIfScenario,
    )
}


def _check_schema_version(data: Dict[str, Any]) -> None:
    schema_version = data.get("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"Config schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )


# ---------------------------------------------------------------------------
# Plain-data conversion
# ---------------------------------------------------------------------------

def to_plain(obj: Any, skip: Iterable[str] = ()) -> Any:
    """
    Recursively convert results/configs into JSON-compatible data.

    Dataclasses and Pydantic models become dicts, tuples and numpy arrays
    become lists, enums their values. Non-finite floats become None.
    Dataclass fields named in *skip* are dropped at every level.
    """
    skip = frozenset(skip)
    if isinstance(obj, BaseModel):
        return to_plain(obj.model_dump(mode="json"), skip)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: to_plain(getattr(obj, f.name), skip)
            for f in dataclasses.fields(obj)
            if f.name not in skip
        }
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, np.ndarray):
        return [to_plain(v, skip) for v in obj.tolist()]
    if isinstance(obj, np.generic):
        return to_plain(obj.item(), skip)
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, dict):
        return {str(k): to_plain(v, skip) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(v, skip) for v in obj]
    return obj


def result_to_dict(result: Any, include_outcomes: bool = False) -> Dict[str, Any]:
    """
    Convert an engine result to a plain dict.

    Parameters
    ----------
    result : dataclass
        Any FinProj result (SimulationResult, RetirementSimulationResult,
        ScenarioComparisonResult, LongTermProjectionResult, ...).
    include_outcomes : bool
        Keep the raw ``all_outcomes`` arrays (one value per trial).
    """
    if not dataclasses.is_dataclass(result):
        raise TypeError(f"Expected a result dataclass, got {type(result).__name__}")
    return to_plain(result, skip=() if include_outcomes else ("all_outcomes",))


# ---------------------------------------------------------------------------
# Result persistence
# ---------------------------------------------------------------------------

def save_result(result: Any, path: Path, include_outcomes: bool = False) -> None:
    """
    Save an engine result to a JSON file.

    Examples
    --------
    >>> from pathlib import Path
    >>> save_result(engine.simulate(cfg), Path("out/simulation.json"))
    """
    envelope: ResultEnvelopeDict = {
        "schema_version": SCHEMA_VERSION,
        "kind": type(result).__name__,
        "result": result_to_dict(result, include_outcomes=include_outcomes),
    }
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(envelope, f, indent=2)


def load_result(path: Path) -> ResultEnvelopeDict:
    """
    Load a saved result as plain data.

    Note: Returns the envelope dict instead of a result object because
    results are outputs and are never fed back into an engine.
    """
    with open(path, "r") as f:
        data = json.load(f)
    _check_schema_version(data)
    return data


# ---------------------------------------------------------------------------
# Config persistence
# ---------------------------------------------------------------------------

def save_config(config: BaseModel, path: Path) -> None:
    """
    Save a configuration model to JSON with its kind and schema version.

    Examples
    --------
    >>> save_config(SimulationConfig(...), Path("sim.json"))
    """
    kind = type(config).__name__
    if kind not in CONFIG_MODELS:
        raise ConfigurationError(f"Cannot save unknown config type {kind}")
    data = {
        "schema_version": SCHEMA_VERSION,
        "kind": kind,
        "config": config.model_dump(mode="json"),
    }
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def load_config(path: Path, model: Optional[Type[BaseModel]] = None) -> BaseModel:
    """
    Load and validate a configuration file.

    Accepts either a file written by save_config() (the model is taken
    from its ``kind`` unless *model* is given) or a bare JSON object of
    config fields, which requires *model*.

    Raises
    ------
    ConfigurationError
        If the model cannot be determined.
    pydantic.ValidationError
        If the data does not satisfy the model.
    """
    with open(path, "r") as f:
        data = json.load(f)

    if "schema_version" in data and "config" in data:
        _check_schema_version(data)
        payload = data["config"]
        if model is None:
            kind = data.get("kind")
            model = CONFIG_MODELS.get(kind)
            if model is None:
                raise ConfigurationError(f"Unknown config kind {kind!r} in {path}")
    else:
        payload = data
        if model is None:
            raise ConfigurationError(
                f"{path} has no 'kind'; pass the config model explicitly"
            )

    return model.model_validate(payload)
