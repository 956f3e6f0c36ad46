# src/tinflex/calc.py
"""
Module: calc
Purpose: Adaptive refinement of hat/squeeze envelopes over a partitioned domain
Dependencies: math, logging; tinflex.{area, intervals, summation, transform}

Overview
--------
``calc_points`` seeds one interval per pair of consecutive breakpoints and
then repeatedly splits every interval whose hat-minus-squeeze area exceeds
the current average, until

    total hat area / total squeeze area <= rho

or the iteration / interval budgets run out. Budget exhaustion is not an
error: the intervals returned are valid, only less efficient than asked for.

Design notes
------------
- Split points come from ``arcmean``, which bisects in arctan space so that
  intervals reaching towards +-inf are cut at finite, reasonably central
  points.
- The two area totals are running compensated sums. Each split subtracts
  the old interval's areas and adds the two halves back; they are never
  recomputed from scratch.
- One pass per iteration, left to right. Right halves created during a pass
  are linked behind their left half and skipped until the next iteration.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Literal, Sequence, Tuple, Union, overload

from .area import determine_hat_and_squeeze, hat_area, squeeze_area
from .errors import (
    IntervalError,
    InternalInvariantError,
    InvalidPartitionError,
    NonFiniteAreaError,
)
from .intervals import FunType, GenerationInterval, Interval, IntervalChain
from .summation import Summation, make_summator
from .transform import transform, transform_to_interval

__all__ = ["arcmean", "calc_interval", "calc_points", "RefinementReport"]

LOG = logging.getLogger(__name__)

ScalarFn = Callable[[float], float]

# relative slack when comparing hat and squeeze areas of one interval
_AREA_RTOL = 1e-9


def arcmean(x: float, y: float, *, presorted: bool = False) -> float:
    """
    Splitting point strictly inside the interval spanned by ``x`` and ``y``.

    The endpoints are mapped through arctan, bisected there and mapped back,
    so points near +-inf (and inf itself) are handled. Two fallbacks:
      - both ends beyond 1e3 on the same side: harmonic mean 2 / (1/l + 1/r);
      - arctan images closer than 1e-6: arithmetic mean.

    Args:
        x, y: interval ends, in any order unless ``presorted``.
        presorted: caller guarantees ``x <= y``; skips the swap.
    """
    l, r = float(x), float(y)
    if not presorted and r < l:
        l, r = r, l

    if r < -1e3 or l > 1e3:
        return 2.0 / (1.0 / l + 1.0 / r)

    d = math.atan(l)
    b = math.atan(r)
    if not d <= b:
        raise InternalInvariantError(f"arcmean: atan({l}) > atan({r}); ends are not ordered")
    if b - d < 1e-6:
        # may round onto l or r for adjacent floats; the caller then carries a
        # zero-width interval with zero areas
        return 0.5 * l + 0.5 * r
    return math.tan(0.5 * (d + b))


def calc_interval(iv: Interval) -> None:
    """
    Build hat and squeeze for ``iv`` and store their areas on it.

    Raises:
        IntervalError: ``lx > rx``, or the hat area falls below the squeeze area.
        NonFiniteAreaError: no tangent or secant bounds the density from above
            (e.g. a c > 0 piece reaching to +-inf), or either area is inf/nan.
    """
    if iv.lx > iv.rx:
        raise IntervalError(f"invalid interval: lx={iv.lx} > rx={iv.rx}")

    if iv.lx == iv.rx:
        iv.hat_area = 0.0
        iv.squeeze_area = 0.0
        return

    kind = determine_hat_and_squeeze(iv)
    if iv.hat is None:
        why = (
            "shape of T_c(f) is undefined"
            if kind is FunType.UNDEFINED
            else "T_c(f) must be concave at the finite end, with c <= 0 towards an unbounded one"
        )
        raise NonFiniteAreaError(
            f"no hat bounds the density on [{iv.lx}, {iv.rx}] (c={iv.c}, {kind.value}): {why}"
        )
    h = hat_area(iv)
    s = squeeze_area(iv)

    if not math.isfinite(h):
        raise NonFiniteAreaError(
            f"hat area on [{iv.lx}, {iv.rx}] (c={iv.c}, {kind.value}) is not finite: {h}"
        )
    if not math.isfinite(s):
        raise NonFiniteAreaError(
            f"squeeze area on [{iv.lx}, {iv.rx}] (c={iv.c}, {kind.value}) is not finite: {s}"
        )
    if s > h:
        if s - h > _AREA_RTOL * h:
            raise IntervalError(
                f"hat area {h} below squeeze area {s} on [{iv.lx}, {iv.rx}] (c={iv.c}, {kind.value}); "
                "more than one inflection point in the interval?"
            )
        s = h
    iv.hat_area = h
    iv.squeeze_area = s


@dataclass(frozen=True)
class RefinementReport:
    """What the refinement loop did and where it stopped."""

    iterations: int
    n_intervals: int
    hat_area: float
    squeeze_area: float
    rho: float

    @property
    def ratio(self) -> float:
        return self.hat_area / self.squeeze_area if self.squeeze_area > 0 else math.inf

    @property
    def converged(self) -> bool:
        return self.ratio <= self.rho


def _validate_partition(cs: Sequence[float], points: Sequence[float]) -> None:
    if len(points) < 2:
        raise InvalidPartitionError(f"two or more splitting points are required. Got {len(points)}.")
    for p in points[1:-1]:
        if not math.isfinite(p):
            raise InvalidPartitionError(f"interior splitting points must be finite. Got {list(points)}.")
    if len(cs) != len(points) - 1:
        raise InvalidPartitionError(
            f"cs must have length len(points) - 1 = {len(points) - 1}. Got {len(cs)}."
        )
    if math.isinf(points[0]) and not cs[0] > -1:
        raise InvalidPartitionError(f"c must be > -1 on an unbounded left end. Got c={cs[0]}.")
    if math.isinf(points[-1]) and not cs[-1] > -1:
        raise InvalidPartitionError(f"c must be > -1 on an unbounded right end. Got c={cs[-1]}.")
    for a, b in zip(points[:-1], points[1:]):
        if not a < b:
            raise InvalidPartitionError(f"splitting points must be strictly increasing. Got {list(points)}.")


@overload
def calc_points(
    f0: ScalarFn,
    f1: ScalarFn,
    f2: ScalarFn,
    cs: Sequence[float],
    points: Sequence[float],
    rho: float = ...,
    max_intervals: int = ...,
    max_iterations: int = ...,
    *,
    summation: Summation = ...,
    report: Literal[False] = ...,
) -> List[GenerationInterval]: ...


@overload
def calc_points(
    f0: ScalarFn,
    f1: ScalarFn,
    f2: ScalarFn,
    cs: Sequence[float],
    points: Sequence[float],
    rho: float = ...,
    max_intervals: int = ...,
    max_iterations: int = ...,
    *,
    summation: Summation = ...,
    report: Literal[True],
) -> Tuple[List[GenerationInterval], RefinementReport]: ...


def calc_points(
    f0: ScalarFn,
    f1: ScalarFn,
    f2: ScalarFn,
    cs: Sequence[float],
    points: Sequence[float],
    rho: float = 1.1,
    max_intervals: int = 1_000,
    max_iterations: int = 1_000,
    *,
    summation: Summation = "precise",
    report: bool = False,
) -> Union[List[GenerationInterval], Tuple[List[GenerationInterval], RefinementReport]]:
    """
    Refine a partition until the hat/squeeze area ratio is at most ``rho``.

    Args:
        f0: log-density.
        f1, f2: first and second derivative of ``f0``.
        cs: T_c parameter for each initial piece (``len(points) - 1`` values).
        points: strictly increasing breakpoints; only the two ends may be
            infinite. Each piece may contain at most one inflection point of
            the transformed density.
        rho: target efficiency (hat area / squeeze area).
        max_intervals: stop splitting once this many intervals exist.
        max_iterations: maximal number of refinement passes.
        summation: ``"precise"`` (exact partials) or ``"kbn"`` running sums.
        report: also return a :class:`RefinementReport`.

    Returns:
        Intervals in domain order, or ``(intervals, report)``. Splitting two
        adjacent floats can leave a zero-width interval (``lx == rx``, zero
        areas, no lines); the sampler never selects it.

    Raises:
        InvalidPartitionError: malformed ``points``/``cs``; nothing is evaluated.
        IntervalError, NonFiniteAreaError: an interval could not be enveloped.
    """
    cs = [float(c) for c in cs]
    points = [float(p) for p in points]
    _validate_partition(cs, points)

    LOG.debug("starting refinement with points=%s cs=%s rho=%s", points, cs, rho)

    total_hat = make_summator(summation)
    total_squeeze = make_summator(summation)
    chain = IntervalChain()

    # seed; each breakpoint's triple is evaluated once and shared by its neighbours
    l = points[0]
    l0, l1, l2 = f0(l), f1(l), f2(l)
    for c, r in zip(cs, points[1:]):
        r0, r1, r2 = f0(r), f1(r), f2(r)
        iv = transform_to_interval(l, r, c, l0, l1, l2, r0, r1, r2)
        calc_interval(iv)
        total_hat.add(iv.hat_area)
        total_squeeze.add(iv.squeeze_area)
        chain.append(iv)
        l, l0, l1, l2 = r, r0, r1, r2

    n_intervals = len(chain)
    if LOG.isEnabledFor(logging.DEBUG):
        LOG.debug("seeded %d intervals: lx=%s", n_intervals, [iv.lx for iv in chain])
        LOG.debug("hat areas=%s", [iv.hat_area for iv in chain])
        LOG.debug("squeeze areas=%s", [iv.squeeze_area for iv in chain])

    iterations = 0
    while iterations < max_iterations and n_intervals < max_intervals:
        H = total_hat.total()
        Q = total_squeeze.total()
        ratio = H / Q if Q > 0 else math.inf
        if ratio <= rho:
            break
        LOG.debug("iteration %d: hat=%.6g squeeze=%.6g ratio=%.6g", iterations, H, Q, ratio)

        # numerator rounded down one ulp so the threshold never exceeds the true mean
        avg_gap = math.nextafter(H - Q, -math.inf) / n_intervals

        h = chain.head
        while h != IntervalChain.END:
            nxt = chain.next_of(h)
            iv = chain[h]
            if iv.gap > avg_gap:
                total_hat.subtract(iv.hat_area)
                total_squeeze.subtract(iv.squeeze_area)

                mid = arcmean(iv.lx, iv.rx, presorted=True)
                m0, m1, m2 = transform(iv.c, f0(mid), f1(mid), f2(mid))
                right = Interval(
                    lx=mid,
                    rx=iv.rx,
                    c=iv.c,
                    ltx=m0,
                    lt1x=m1,
                    lt2x=m2,
                    rtx=iv.rtx,
                    rt1x=iv.rt1x,
                    rt2x=iv.rt2x,
                )
                LOG.debug("split [%s, %s] at %s", iv.lx, iv.rx, mid)

                iv.rx = mid
                iv.rtx, iv.rt1x, iv.rt2x = m0, m1, m2

                calc_interval(iv)
                calc_interval(right)

                total_hat.add(iv.hat_area)
                total_hat.add(right.hat_area)
                total_squeeze.add(iv.squeeze_area)
                total_squeeze.add(right.squeeze_area)

                chain.insert_after(h, right)
                n_intervals += 1
            h = nxt
        iterations += 1

    result = RefinementReport(
        iterations=iterations,
        n_intervals=n_intervals,
        hat_area=total_hat.total(),
        squeeze_area=total_squeeze.total(),
        rho=float(rho),
    )
    if result.converged:
        LOG.info(
            "refinement converged: %d intervals after %d iterations, ratio=%.6g",
            n_intervals,
            iterations,
            result.ratio,
        )
    else:
        LOG.warning(
            "refinement stopped before reaching rho=%s: ratio=%.6g with %d intervals after %d iterations",
            rho,
            result.ratio,
            n_intervals,
            iterations,
        )

    intervals = [GenerationInterval.from_interval(iv) for iv in chain]
    if report:
        return intervals, result
    return intervals
