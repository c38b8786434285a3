"""Randomized sketching primitives package exports."""

from .core import as_float_matrix, clamp_rank, find_range, gram_schmidt, sample_gaussian

__all__ = ["as_float_matrix", "clamp_rank", "find_range", "gram_schmidt", "sample_gaussian"]
