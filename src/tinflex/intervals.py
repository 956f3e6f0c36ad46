# src/tinflex/intervals.py
"""
Interval records, envelope lines and the domain-ordered interval chain.

Provides:
  - LinearFun          line a + slope * (x - y) in transformed space
  - Interval           mutable working record used during refinement
  - GenerationInterval immutable projection handed to the sampler
  - FunType, determine_type(iv)
  - IntervalChain      arena of intervals linked in domain order

Notes:
  * Every interval is assumed to contain at most one inflection point of the
    transformed density, so the signs of T'' at both ends fix its shape.
  * Splitting mutates an interval into its left half and links the right
    half directly behind it; handles of all other intervals stay valid.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

__all__ = [
    "LinearFun",
    "Interval",
    "GenerationInterval",
    "FunType",
    "determine_type",
    "IntervalChain",
]


@dataclass(frozen=True)
class LinearFun:
    """Line through (y, a) with the given slope."""

    slope: float
    y: float
    a: float

    def __call__(self, x: float) -> float:
        if self.slope == 0:
            return self.a
        return self.a + self.slope * (x - self.y)

    @classmethod
    def tangent(cls, x: float, t0: float, t1: float) -> "LinearFun":
        return cls(slope=float(t1), y=float(x), a=float(t0))

    @classmethod
    def secant(cls, lx: float, rx: float, ltx: float, rtx: float) -> "LinearFun":
        slope = (rtx - ltx) / (rx - lx)
        # anchor at the end with the larger transformed value
        if ltx >= rtx:
            return cls(slope=float(slope), y=float(lx), a=float(ltx))
        return cls(slope=float(slope), y=float(rx), a=float(rtx))

    def to_dict(self) -> Dict[str, float]:
        return {"slope": self.slope, "y": self.y, "a": self.a}


@dataclass(slots=True)
class Interval:
    lx: float
    rx: float
    c: float
    ltx: float
    lt1x: float
    lt2x: float
    rtx: float
    rt1x: float
    rt2x: float
    hat: Optional[LinearFun] = None
    squeeze: Optional[LinearFun] = None
    hat_area: float = 0.0
    squeeze_area: float = 0.0

    @property
    def gap(self) -> float:
        return self.hat_area - self.squeeze_area


@dataclass(frozen=True, slots=True)
class GenerationInterval:
    """
    The subset of an interval that sampling needs.

    ``squeeze=None`` is the zero function; ``hat`` is only None for a
    degenerate (lx == rx) interval, whose areas are zero.
    """

    lx: float
    rx: float
    c: float
    hat: Optional[LinearFun]
    squeeze: Optional[LinearFun]
    hat_area: float
    squeeze_area: float

    @classmethod
    def from_interval(cls, iv: Interval) -> "GenerationInterval":
        return cls(
            lx=iv.lx,
            rx=iv.rx,
            c=iv.c,
            hat=iv.hat,
            squeeze=iv.squeeze,
            hat_area=iv.hat_area,
            squeeze_area=iv.squeeze_area,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lx": self.lx,
            "rx": self.rx,
            "c": self.c,
            "hat": None if self.hat is None else self.hat.to_dict(),
            "squeeze": None if self.squeeze is None else self.squeeze.to_dict(),
            "hat_area": self.hat_area,
            "squeeze_area": self.squeeze_area,
        }


class FunType(Enum):
    """Shape of the transformed density on an interval."""

    CONCAVE = "concave"
    CONVEX = "convex"
    CONCAVE_CONVEX = "concave_convex"
    CONVEX_CONCAVE = "convex_concave"
    LEFT_TAIL = "left_tail"  # left end unbounded or density vanishes there
    RIGHT_TAIL = "right_tail"
    UNDEFINED = "undefined"


def _one_sided(x: float, tx: float) -> bool:
    return not (math.isfinite(x) and math.isfinite(tx))


def determine_type(iv: Interval) -> FunType:
    left_open = _one_sided(iv.lx, iv.ltx)
    right_open = _one_sided(iv.rx, iv.rtx)
    if left_open and right_open:
        return FunType.UNDEFINED
    if left_open:
        return FunType.LEFT_TAIL
    if right_open:
        return FunType.RIGHT_TAIL

    if iv.lt2x <= 0 and iv.rt2x <= 0:
        return FunType.CONCAVE
    if iv.lt2x >= 0 and iv.rt2x >= 0:
        return FunType.CONVEX
    if iv.lt2x < 0 < iv.rt2x:
        return FunType.CONCAVE_CONVEX
    if iv.lt2x > 0 > iv.rt2x:
        return FunType.CONVEX_CONCAVE
    # nan curvature
    return FunType.UNDEFINED


class IntervalChain:
    """
    Intervals kept in domain order.

    Records live in an append-only arena and are addressed by integer
    handles; the order is carried by ``next`` links, so linking a new
    interval behind an existing one is O(1) and never moves other records.
    """

    __slots__ = ("_items", "_next", "_head", "_tail")

    END = -1

    def __init__(self) -> None:
        self._items: List[Interval] = []
        self._next: List[int] = []
        self._head = self.END
        self._tail = self.END

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, handle: int) -> Interval:
        return self._items[handle]

    def __iter__(self) -> Iterator[Interval]:
        h = self._head
        while h != self.END:
            yield self._items[h]
            h = self._next[h]

    @property
    def head(self) -> int:
        return self._head

    def next_of(self, handle: int) -> int:
        return self._next[handle]

    def _new(self, iv: Interval) -> int:
        self._items.append(iv)
        self._next.append(self.END)
        return len(self._items) - 1

    def append(self, iv: Interval) -> int:
        h = self._new(iv)
        if self._tail == self.END:
            self._head = h
        else:
            self._next[self._tail] = h
        self._tail = h
        return h

    def insert_after(self, handle: int, iv: Interval) -> int:
        h = self._new(iv)
        self._next[h] = self._next[handle]
        self._next[handle] = h
        if self._tail == handle:
            self._tail = h
        return h
