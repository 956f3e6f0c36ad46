# src/tinflex/densities.py
"""
Log-densities with analytic derivatives, addressable by name.

A ``Density`` is the capability set the refinement needs: three plain
``float -> float`` callables for log f and its first two derivatives.
Normalisation constants are optional; the sampler only needs f up to scale.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, NamedTuple

from .errors import ConfigError

__all__ = ["Density", "DENSITIES", "normal", "quartic", "exponential_power", "get_density"]


class Density(NamedTuple):
    f0: Callable[[float], float]
    f1: Callable[[float], float]
    f2: Callable[[float], float]


def normal(mu: float = 0.0, sigma: float = 1.0) -> Density:
    """Gaussian N(mu, sigma^2), normalised."""
    if not (math.isfinite(sigma) and sigma > 0):
        raise ConfigError(f"sigma must be finite and > 0. Got {sigma}.")
    log_norm = math.log(sigma) + 0.5 * math.log(2.0 * math.pi)
    var = sigma * sigma
    return Density(
        f0=lambda x: -0.5 * (x - mu) ** 2 / var - log_norm,
        f1=lambda x: -(x - mu) / var,
        f2=lambda x: -1.0 / var,
    )


def quartic() -> Density:
    """Bimodal log-density -x^4 + 5x^2 - 4 (inflection points at +-sqrt(5/6) in log scale)."""
    return Density(
        f0=lambda x: -(x**4) + 5.0 * x**2 - 4.0,
        f1=lambda x: 10.0 * x - 4.0 * x**3,
        f2=lambda x: 10.0 - 12.0 * x**2,
    )


def exponential_power(alpha: float = 2.0) -> Density:
    """Unnormalised exp(-|x|^alpha); alpha >= 2 keeps f2 finite at the origin."""
    if not (math.isfinite(alpha) and alpha >= 2.0):
        raise ConfigError(f"alpha must be finite and >= 2. Got {alpha}.")
    return Density(
        f0=lambda x: -abs(x) ** alpha,
        f1=lambda x: -alpha * math.copysign(1.0, x) * abs(x) ** (alpha - 1.0),
        f2=lambda x: -alpha * (alpha - 1.0) * abs(x) ** (alpha - 2.0),
    )


DENSITIES: Dict[str, Callable[..., Density]] = {
    "normal": normal,
    "quartic": quartic,
    "exponential_power": exponential_power,
}


def get_density(name: str, **params: float) -> Density:
    try:
        factory = DENSITIES[name]
    except KeyError as e:
        raise ConfigError(f"unknown density {name!r}; choose from {sorted(DENSITIES)}") from e
    try:
        return factory(**params)
    except TypeError as e:
        raise ConfigError(f"bad parameters for density {name!r}: {e}") from e
