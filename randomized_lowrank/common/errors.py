"""Exception hierarchy for the randomized decompositions.

Validation failures subclass ``ValueError`` so callers that only catch the
built-in type keep working. Failures of the exact small solvers are NumPy's
``LinAlgError`` and are never wrapped.
"""

from __future__ import annotations


class DecompositionError(Exception):
    """Base class for errors raised by ``randomized_lowrank``."""


class InvalidInputError(DecompositionError, ValueError):
    """The input matrix cannot be decomposed (wrong ndim, empty, non-square)."""


class ConfigurationError(DecompositionError, ValueError):
    """A tuning parameter (rank, threshold, ...) is out of range."""
