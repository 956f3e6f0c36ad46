# src/tinflex/transform.py
"""
Module: transform
Purpose: T_c family of transformations applied to a log-density
Dependencies: math, numpy

The density is supplied on the log scale, f0 = log f, together with the
first two derivatives f1 = f0', f2 = f0''. For a shape parameter c,

    T_0(f) = log f                      -> (f0, f1, f2)
    T_c(f) = sign(c) * f**c             -> t0 = sign(c) * exp(c * f0)
                                           t1 = c * t0 * f1
                                           t2 = c * t0 * (c * f1**2 + f2)

T_c is strictly increasing for every c, so a line lying above (below) the
transformed density maps back to an upper (lower) bound on f itself.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from .intervals import Interval

__all__ = ["transform", "inverse", "transform_to_interval"]

Triple = Tuple[float, float, float]


def _exp(x: float) -> float:
    # math.exp raises on overflow; the far tails of c < 0 legitimately give inf.
    with np.errstate(over="ignore"):
        return float(np.exp(x))


def transform(c: float, x0: float, x1: float, x2: float) -> Triple:
    """Map log-density value and derivatives at a point into T_c space."""
    if c == 0:
        return float(x0), float(x1), float(x2)
    t0 = math.copysign(1.0, c) * _exp(c * x0)
    t1 = c * t0 * x1
    t2 = c * t0 * (c * x1 * x1 + x2)
    return t0, t1, t2


def inverse(c: float, y: float) -> float:
    """
    Map a transformed value back to a density value.

    For c > 0 a non-positive argument corresponds to zero density; for c < 0
    a non-negative argument lies outside the range of T_c and maps to inf.
    """
    if c == 0:
        return _exp(y)
    if c > 0:
        return float(y) ** (1.0 / c) if y > 0 else 0.0
    if y >= 0:
        return math.inf
    return float(-y) ** (1.0 / c)


def transform_to_interval(
    lx: float,
    rx: float,
    c: float,
    lf0: float,
    lf1: float,
    lf2: float,
    rf0: float,
    rf1: float,
    rf2: float,
) -> Interval:
    """Build an (unevaluated) interval from raw log-density triples at both ends."""
    ltx, lt1x, lt2x = transform(c, lf0, lf1, lf2)
    rtx, rt1x, rt2x = transform(c, rf0, rf1, rf2)
    return Interval(
        lx=float(lx),
        rx=float(rx),
        c=float(c),
        ltx=ltx,
        lt1x=lt1x,
        lt2x=lt2x,
        rtx=rtx,
        rt1x=rt1x,
        rt2x=rt2x,
    )
