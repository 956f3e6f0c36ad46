# src/tinflex/area.py
"""
Module: area
Purpose: Hat/squeeze construction and exact areas below back-transformed lines
Dependencies: math, numpy

Overview
--------
On an interval [l, r] the hat and squeeze are lines in T_c space. Mapped
back through T_c^{-1} they bound the density from above and below:

  c == 0:   h(x) = exp(a + b (x - y))
  c != 0:   h(x) = u(x) ** (1/c),   u(x) = sign(c) * (a + b (x - y))

With k = du/dx and e = 1/c + 1 the antiderivative is u**e / (e k)
(log(u) / k when c == -1, exp(.) / b when c == 0).

Design notes
------------
- Differences of antiderivatives are rewritten around the larger end value
  with expm1/log1p, so short intervals and near-flat lines keep full
  relative precision (no U**e - V**e cancellation).
- For c > 0 the part of a line below zero means zero density; integration
  is clipped to where the line is positive.
- Divergent integrals (unbounded tail with the wrong slope, a c < 0 hat
  touching zero, ...) return inf. The interval evaluator rejects those.
- A one-sided interval gets the tangent at its finite end only where T_c is
  concave there, and never for c > 0 on an infinite end. Otherwise it has
  no hat, its hat area is inf, and it is rejected the same way.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

from .intervals import FunType, Interval, LinearFun, determine_type

__all__ = [
    "determine_hat_and_squeeze",
    "hat_area",
    "squeeze_area",
    "line_area",
    "inverse_line_area",
]


def _exp(x: float) -> float:
    with np.errstate(over="ignore"):
        return float(np.exp(x))


def _pow(x: float, e: float) -> float:
    with np.errstate(over="ignore", divide="ignore"):
        return float(np.power(x, e))


# ---------- Builder ----------


def _tail_tangent_bounds(c: float, open_x: float, t2: float) -> bool:
    """
    Whether the tangent at the finite end of a one-sided interval is a hat.

    T_c must be concave at that end. For c > 0 an infinite end never works:
    T_c(f) stays positive and vanishes at infinity, so it is convex out there
    and any sloped tangent drops below it.
    """
    if not t2 <= 0:
        return False
    return c <= 0 or math.isfinite(open_x)


def determine_hat_and_squeeze(iv: Interval) -> FunType:
    """Pick hat and squeeze lines for ``iv`` from its shape; stores them on ``iv``."""
    kind = determine_type(iv)

    if kind is FunType.UNDEFINED:
        iv.hat, iv.squeeze = None, None
        return kind
    if kind is FunType.LEFT_TAIL:
        ok = _tail_tangent_bounds(iv.c, iv.lx, iv.rt2x)
        iv.hat = LinearFun.tangent(iv.rx, iv.rtx, iv.rt1x) if ok else None
        iv.squeeze = None
        return kind
    if kind is FunType.RIGHT_TAIL:
        ok = _tail_tangent_bounds(iv.c, iv.rx, iv.lt2x)
        iv.hat = LinearFun.tangent(iv.lx, iv.ltx, iv.lt1x) if ok else None
        iv.squeeze = None
        return kind

    left = LinearFun.tangent(iv.lx, iv.ltx, iv.lt1x)
    right = LinearFun.tangent(iv.rx, iv.rtx, iv.rt1x)
    sec = LinearFun.secant(iv.lx, iv.rx, iv.ltx, iv.rtx)
    R = sec.slope

    if kind is FunType.CONCAVE:
        # both tangents are valid hats, keep the tighter one
        la = line_area(left, iv.lx, iv.rx, iv.c)
        ra = line_area(right, iv.lx, iv.rx, iv.c)
        iv.hat = left if la <= ra else right
        iv.squeeze = sec
    elif kind is FunType.CONVEX:
        la = line_area(left, iv.lx, iv.rx, iv.c)
        ra = line_area(right, iv.lx, iv.rx, iv.c)
        iv.hat = sec
        iv.squeeze = left if la >= ra else right
    elif kind is FunType.CONCAVE_CONVEX:
        iv.hat = left if iv.lt1x >= R else sec
        iv.squeeze = right if iv.rt1x >= R else sec
    else:  # CONVEX_CONCAVE
        iv.hat = right if iv.rt1x <= R else sec
        iv.squeeze = left if iv.lt1x <= R else sec
    return kind


def hat_area(iv: Interval) -> float:
    if iv.hat is None:
        return math.inf
    return line_area(iv.hat, iv.lx, iv.rx, iv.c)


def squeeze_area(iv: Interval) -> float:
    if iv.squeeze is None:
        return 0.0
    return line_area(iv.squeeze, iv.lx, iv.rx, iv.c)


# ---------- Areas ----------


def _log_area(fn: LinearFun, lx: float, rx: float) -> float:
    b = fn.slope
    if b == 0:
        return _exp(fn.a) * (rx - lx)
    if not math.isfinite(lx):
        return _exp(fn(rx)) / b if b > 0 and math.isfinite(rx) else math.inf
    if not math.isfinite(rx):
        return _exp(fn(lx)) / -b if b < 0 else math.inf
    top = max(fn(lx), fn(rx))
    return _exp(top) * -math.expm1(-abs(b) * (rx - lx)) / abs(b)


def _power_span(U: float, length: float, k_abs: float, e: float) -> float:
    """Integral of u**(e-1) over a span where u is linear, falling from U by k_abs*length."""
    if k_abs == 0:
        return _pow(U, e - 1.0) * length
    z = k_abs * length / U
    if e == 0:
        return -math.log1p(-z) / k_abs if z < 1 else math.inf
    frac = 1.0 if z >= 1 else abs(math.expm1(e * math.log1p(-z)))
    return _pow(U, e) * frac / (abs(e) * k_abs)


def _clip_positive(fn: LinearFun, lx: float, rx: float) -> Optional[Tuple[float, float]]:
    """Sub-interval of [lx, rx] on which the line is positive (c > 0)."""
    b = fn.slope
    if b == 0:
        return (lx, rx) if fn.a > 0 else None
    x0 = fn.y - fn.a / b
    lo, hi = (max(lx, x0), rx) if b > 0 else (lx, min(rx, x0))
    if not hi > lo:
        return None
    return lo, hi


def line_area(fn: Optional[LinearFun], lx: float, rx: float, c: float) -> float:
    """Area below T_c^{-1}(fn) on [lx, rx]; inf when the integral diverges."""
    if fn is None or lx == rx:
        return 0.0
    if c == 0:
        return _log_area(fn, lx, rx)

    s = math.copysign(1.0, c)
    k = s * fn.slope
    e = 1.0 / c + 1.0

    if c > 0:
        span = _clip_positive(fn, lx, rx)
        if span is None:
            return 0.0
        lx, rx = span
        if not (math.isfinite(lx) and math.isfinite(rx)):
            return math.inf
        ul, ur = max(fn(lx), 0.0), max(fn(rx), 0.0)
        U = max(ul, ur)
        if U == 0:
            return 0.0
        return _power_span(U, rx - lx, abs(k), e)

    # c < 0: the line must stay negative on the whole interval
    if k == 0:
        u = s * fn.a
        if u <= 0 or not (math.isfinite(lx) and math.isfinite(rx)):
            return math.inf
        return _pow(u, 1.0 / c) * (rx - lx)
    if not math.isfinite(lx) or not math.isfinite(rx):
        # u grows without bound towards the open end; needs e < 0 (c > -1)
        if not math.isfinite(lx) and not math.isfinite(rx):
            return math.inf
        if (not math.isfinite(lx) and k > 0) or (not math.isfinite(rx) and k < 0):
            return math.inf
        if e >= 0:
            return math.inf
        V = s * fn(rx if math.isfinite(rx) else lx)
        if V <= 0:
            return math.inf
        return _pow(V, e) / (-e * abs(k))
    ul, ur = s * fn(lx), s * fn(rx)
    if ul <= 0 or ur <= 0:
        return math.inf
    return _power_span(max(ul, ur), rx - lx, abs(k), e)


# ---------- Inversion (used by the sampler) ----------


def inverse_line_area(fn: LinearFun, lx: float, rx: float, c: float, t: float) -> float:
    """
    Return x in [lx, rx] with area(lx, x) == t for the back-transformed line.

    ``t`` must lie in [0, line_area(fn, lx, rx, c)]; the result is clipped to
    the interval to absorb rounding at the ends.
    """
    b = fn.slope
    if c == 0:
        if b == 0:
            x = lx + t / _exp(fn.a)
        elif math.isfinite(lx):
            arg = b * t * _exp(-fn(lx))
            if arg <= -1:
                return rx
            x = lx + math.log1p(arg) / b
        else:
            x = fn.y + (math.log(b * t) - fn.a) / b
        return min(max(x, lx), rx)

    s = math.copysign(1.0, c)
    k = s * b
    e = 1.0 / c + 1.0
    lo, hi = lx, rx
    if c > 0:
        span = _clip_positive(fn, lx, rx)
        if span is not None:
            lo, hi = span
    if k == 0:
        x = lo + t / _pow(s * fn.a, 1.0 / c)
        return min(max(x, lx), hi)

    if math.isfinite(lo):
        u0 = max(s * fn(lo), 0.0)
    else:
        u0 = math.inf  # c in (-1, 0), u grows towards -inf

    if e == 0:
        ux = u0 * _exp(k * t)
    elif u0 == 0 or not math.isfinite(u0):
        base = _pow(u0, e) + e * k * t
        if base <= 0:
            return hi
        ux = _pow(base, 1.0 / e)
    else:
        arg = e * k * t * _pow(u0, -e)
        if arg <= -1:
            return hi
        ux = u0 * _exp(math.log1p(arg) / e)

    if math.isfinite(lo) and math.isfinite(u0):
        x = lo + (ux - u0) / k
    else:
        x = fn.y + (s * ux - fn.a) / b
    return min(max(x, lx), hi)
