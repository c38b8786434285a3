"""Randomized symmetric eigendecomposition package exports."""

from .core import RandomizedSymEigen, SymEigenResult, sym_eigen

__all__ = ["RandomizedSymEigen", "SymEigenResult", "sym_eigen"]
