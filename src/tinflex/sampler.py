# src/tinflex/sampler.py
"""
Module: sampler
Purpose: Rejection sampling from a refined hat/squeeze envelope
Dependencies: numpy, logging; tinflex.{area, calc, config, densities, transform}

Draw loop
---------
  1. choose an interval with probability hat_area / total (cumulative sums);
  2. invert the hat's area function inside it -> candidate x;
  3. V ~ U(0, hat(x)); accept if V <= squeeze(x) (no density call),
     otherwise accept if V <= exp(f0(x)).

The expected number of candidates per accepted sample is at most
total hat area / total squeeze area, i.e. ``efficiency``.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .area import inverse_line_area
from .calc import RefinementReport, calc_points
from .config import TinflexSettings
from .densities import Density
from .intervals import GenerationInterval
from .transform import inverse

__all__ = ["Tinflex"]

LOG = logging.getLogger(__name__)

SeedLike = Union[None, int, np.random.Generator]

_BATCH = 1024


class Tinflex:
    """
    Sampler for the density exp(f0) built on a refined envelope.

    Args:
        density: log-density and its first two derivatives.
        cs: T_c parameter per initial piece, or a single value for all pieces.
        points: initial breakpoints (ends may be infinite).
        settings: refinement settings, or a mapping of overrides validated
            through ``TinflexSettings.build`` (``ConfigError`` when invalid);
            defaults to ``TinflexSettings()``.
    """

    def __init__(
        self,
        density: Density,
        cs: Union[float, Sequence[float]],
        points: Sequence[float],
        settings: Union[None, TinflexSettings, Mapping[str, Any]] = None,
    ) -> None:
        self.density = density
        if settings is None:
            settings = TinflexSettings()
        elif not isinstance(settings, TinflexSettings):
            settings = TinflexSettings.build(**settings)
        self.settings: TinflexSettings = settings
        if isinstance(cs, (int, float)):
            cs = [float(cs)] * (len(points) - 1)
        intervals, report = calc_points(
            density.f0,
            density.f1,
            density.f2,
            cs,
            points,
            self.settings.rho,
            self.settings.max_intervals,
            self.settings.max_iterations,
            summation=self.settings.summation,
            report=True,
        )
        self.intervals: List[GenerationInterval] = intervals
        self.report: RefinementReport = report
        self._lx = np.array([iv.lx for iv in intervals], dtype=float)
        self._cum = np.cumsum([iv.hat_area for iv in intervals])

    def __len__(self) -> int:
        return len(self.intervals)

    def __repr__(self) -> str:
        return (
            f"Tinflex(n_intervals={len(self)}, hat_area={self.hat_area:.6g}, "
            f"squeeze_area={self.squeeze_area:.6g})"
        )

    @property
    def hat_area(self) -> float:
        return self.report.hat_area

    @property
    def squeeze_area(self) -> float:
        return self.report.squeeze_area

    @property
    def efficiency(self) -> float:
        return self.report.ratio

    def envelope(self, x: float) -> Tuple[float, float]:
        """(squeeze, hat) in density scale at ``x``."""
        i = int(np.searchsorted(self._lx, x, side="right")) - 1
        i = min(max(i, 0), len(self.intervals) - 1)
        iv = self.intervals[i]
        if not (iv.lx <= x <= iv.rx) or iv.hat is None:
            return 0.0, 0.0
        hat = inverse(iv.c, iv.hat(x))
        squeeze = 0.0 if iv.squeeze is None else inverse(iv.c, iv.squeeze(x))
        return squeeze, hat

    def _candidate(self, u: float) -> Tuple[GenerationInterval, float]:
        i = int(np.searchsorted(self._cum, u, side="left"))
        i = min(i, len(self.intervals) - 1)
        iv = self.intervals[i]
        t = u - (self._cum[i - 1] if i > 0 else 0.0)
        t = min(max(float(t), np.finfo(float).tiny), iv.hat_area)
        x = inverse_line_area(iv.hat, iv.lx, iv.rx, iv.c, t)
        return iv, x

    def sample(self, n: int, rng: SeedLike = None) -> NDArray[np.float64]:
        """Draw ``n`` independent samples."""
        if n < 0:
            raise ValueError(f"n must be >= 0. Got {n}.")
        rng = np.random.default_rng(rng)
        out = np.empty(n, dtype=float)
        total = float(self._cum[-1])
        f0 = self.density.f0
        filled = 0
        tries = 0
        while filled < n:
            us = total * (1.0 - rng.random(_BATCH))
            vs = rng.random(_BATCH)
            for u, v in zip(us, vs):
                tries += 1
                iv, x = self._candidate(float(u))
                vh = float(v) * inverse(iv.c, iv.hat(x))
                if iv.squeeze is not None and vh <= inverse(iv.c, iv.squeeze(x)):
                    accepted = True
                else:
                    accepted = vh <= inverse(0.0, f0(x))
                if accepted:
                    out[filled] = x
                    filled += 1
                    if filled == n:
                        break
        if n:
            LOG.debug("drew %d samples from %d candidates (%.4f per sample)", n, tries, tries / n)
        return out

    def __call__(self, n: int, rng: SeedLike = None) -> NDArray[np.float64]:
        return self.sample(n, rng)
