"""Randomized PCA package exports."""

from .core import PcaResult, RandomizedPCA, pca

__all__ = ["PcaResult", "RandomizedPCA", "pca"]
