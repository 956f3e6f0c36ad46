"""Top-level package for tinflex: adaptive hat/squeeze envelopes and rejection sampling."""

from importlib import metadata as _metadata

from .calc import RefinementReport, arcmean, calc_interval, calc_points
from .config import RunConfig, TinflexSettings, load_run_config
from .densities import DENSITIES, Density, get_density
from .errors import (
    ConfigError,
    IntervalError,
    InternalInvariantError,
    InvalidPartitionError,
    NonFiniteAreaError,
    TinflexError,
)
from .intervals import GenerationInterval, Interval, LinearFun
from .sampler import Tinflex
from .summation import KBNSum, PreciseSum, make_summator

try:
    __version__ = _metadata.version("tinflex")
except _metadata.PackageNotFoundError:  # pragma: no cover - during local usage
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "arcmean",
    "calc_interval",
    "calc_points",
    "RefinementReport",
    "Tinflex",
    "TinflexSettings",
    "RunConfig",
    "load_run_config",
    "Density",
    "DENSITIES",
    "get_density",
    "GenerationInterval",
    "Interval",
    "LinearFun",
    "PreciseSum",
    "KBNSum",
    "make_summator",
    "TinflexError",
    "InvalidPartitionError",
    "IntervalError",
    "NonFiniteAreaError",
    "InternalInvariantError",
    "ConfigError",
]
