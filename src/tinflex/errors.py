# src/tinflex/errors.py
"""
Module: errors
Purpose: Exception hierarchy for envelope construction and sampling

Every failure raised here is fatal for the given input: the refinement is
only defined for well-formed partitions and well-behaved densities, so
nothing is retried. Validation errors also derive from ``ValueError`` so that
callers catching the builtin keep working.
"""

from __future__ import annotations

__all__ = [
    "TinflexError",
    "InvalidPartitionError",
    "IntervalError",
    "NonFiniteAreaError",
    "InternalInvariantError",
    "ConfigError",
]


class TinflexError(RuntimeError):
    """Base class for all errors raised by tinflex."""


class InvalidPartitionError(TinflexError, ValueError):
    """Breakpoints or transform parameters violate the input contract."""


class IntervalError(TinflexError):
    """An interval is inverted (lx > rx) or its hat lies below its squeeze."""


class NonFiniteAreaError(TinflexError, ArithmeticError):
    """Hat or squeeze area is not finite after evaluation."""


class InternalInvariantError(TinflexError):
    """A numeric invariant that sorted inputs guarantee did not hold."""


class ConfigError(TinflexError, ValueError):
    """User-fixable configuration error."""
