# src/tinflex/config.py
"""
Module: config
Purpose: Validated refinement settings and YAML run configuration
Dependencies: pydantic (v2), yaml

Example run config::

    density: normal
    params: {mu: 0.0, sigma: 1.0}
    points: [-.inf, -1.5, 0.0, 1.5, .inf]
    cs: 0.0                 # scalar applies to every piece
    settings:
      rho: 1.1
      max_intervals: 1000
      max_iterations: 1000
      summation: precise
    seed: 1337
    n_samples: 10000
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Literal, Mapping, Optional, Union, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

__all__ = ["TinflexSettings", "RunConfig", "load_config", "load_run_config"]


class TinflexSettings(BaseModel):
    """Refinement knobs shared by the sampler and the CLI."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    rho: float = Field(default=1.1, gt=1.0)
    max_intervals: int = Field(default=1_000, ge=1)
    max_iterations: int = Field(default=1_000, ge=0)
    summation: Literal["precise", "kbn"] = "precise"

    @field_validator("rho")
    @classmethod
    def _finite_rho(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"rho must be finite. Got {v}.")
        return v

    @classmethod
    def build(cls, **kwargs: Any) -> "TinflexSettings":
        """Construct from keyword overrides, reporting failures as ConfigError."""
        try:
            return cls(**kwargs)
        except ValidationError as e:
            raise ConfigError(f"invalid tinflex settings: {e}") from e


class RunConfig(BaseModel):
    """A complete CLI run: which density, how to partition it, how much to sample."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    density: str
    params: Dict[str, float] = Field(default_factory=dict)
    points: List[float] = Field(min_length=2)
    cs: Union[float, List[float]] = 0.0
    settings: TinflexSettings = Field(default_factory=TinflexSettings)
    seed: Optional[int] = None
    n_samples: int = Field(default=1_000, gt=0)

    @field_validator("points", mode="before")
    @classmethod
    def _parse_points(cls, v: Any) -> Any:
        # YAML writes infinities as .inf; JSON-ish configs may spell them "inf"
        if isinstance(v, (list, tuple)):
            return [float(x) if isinstance(x, str) else x for x in v]
        return v

    @field_validator("density", mode="before")
    @classmethod
    def _normalize_density(cls, v: Any) -> str:
        s = str(v).strip().lower()
        if not s:
            raise ValueError("density cannot be empty")
        return s

    def piece_cs(self) -> List[float]:
        """Per-piece T_c parameters; a scalar ``cs`` is broadcast."""
        n = len(self.points) - 1
        if isinstance(self.cs, list):
            if len(self.cs) != n:
                raise ConfigError(f"cs must have {n} entries for {len(self.points)} points. Got {len(self.cs)}.")
            return list(self.cs)
        return [float(self.cs)] * n


def load_config(path: str) -> Mapping[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Could not read config at path={path!r}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML parse error in {path!r}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config at {path} is not a mapping")
    return cast(Mapping[str, Any], data)


def load_run_config(path: str) -> RunConfig:
    raw = load_config(path)
    try:
        return RunConfig.model_validate(dict(raw))
    except ValidationError as e:
        raise ConfigError(f"invalid run config {path}: {e}") from e
