# src/tinflex/summation.py
"""
Compensated running sums for the hat/squeeze area totals.

Provides:
  - PreciseSum   exact running sum (Shewchuk partials, correctly rounded total)
  - KBNSum       Kahan-Babuska-Neumaier compensated sum
  - make_summator(kind, initial=0.0)

Notes:
  * Both keep their compensation state across ``add``/``subtract`` calls; the
    total is never re-derived from the individual terms.
  * Refinement subtracts an interval's areas before splitting and adds the
    two halves back, so the same magnitudes cancel many times over. Naive
    float addition drifts under that pattern, which is enough to flip the
    ``H / Q <= rho`` test near convergence.
"""

from __future__ import annotations

import math
from typing import List, Literal, Protocol

from typing_extensions import TypeAlias

__all__ = ["Summation", "Summator", "PreciseSum", "KBNSum", "make_summator"]

Summation: TypeAlias = Literal["precise", "kbn"]


class Summator(Protocol):
    def add(self, x: float) -> None: ...

    def subtract(self, x: float) -> None: ...

    def total(self) -> float: ...


class PreciseSum:
    """Running sum stored as non-overlapping partials.

    ``total()`` is the correctly rounded value of the exact sum of everything
    added so far. Non-finite terms are kept apart so that they propagate the
    same way plain float addition would (``inf - inf`` gives ``nan``).
    """

    __slots__ = ("_partials", "_special")

    def __init__(self, initial: float = 0.0) -> None:
        self._partials: List[float] = []
        self._special = 0.0
        if initial:
            self.add(initial)

    def add(self, x: float) -> None:
        x = float(x)
        if not math.isfinite(x):
            self._special += x
            return
        partials = self._partials
        i = 0
        for y in partials:
            if abs(x) < abs(y):
                x, y = y, x
            hi = x + y
            lo = y - (hi - x)
            if lo:
                partials[i] = lo
                i += 1
            x = hi
        partials[i:] = [x]

    def subtract(self, x: float) -> None:
        self.add(-float(x))

    def total(self) -> float:
        if self._special:
            return self._special
        return math.fsum(self._partials)

    def __float__(self) -> float:
        return self.total()

    def __repr__(self) -> str:
        return f"PreciseSum({self.total()!r})"


class KBNSum:
    """Kahan-Babuska-Neumaier compensated sum (one correction term)."""

    __slots__ = ("_s", "_c")

    def __init__(self, initial: float = 0.0) -> None:
        self._s = float(initial)
        self._c = 0.0

    def add(self, x: float) -> None:
        x = float(x)
        s = self._s
        t = s + x
        if abs(s) >= abs(x):
            self._c += (s - t) + x
        else:
            self._c += (x - t) + s
        self._s = t

    def subtract(self, x: float) -> None:
        self.add(-float(x))

    def total(self) -> float:
        return self._s + self._c

    def __float__(self) -> float:
        return self.total()

    def __repr__(self) -> str:
        return f"KBNSum({self.total()!r})"


def make_summator(kind: Summation = "precise", initial: float = 0.0) -> Summator:
    """Return a fresh running sum of the requested flavour."""
    if kind == "precise":
        return PreciseSum(initial)
    if kind == "kbn":
        return KBNSum(initial)
    raise ValueError(f'summation must be "precise" or "kbn". Got {kind!r}.')
