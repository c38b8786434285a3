"""Randomized SVD package exports."""

from .core import RandomizedSVD, RsvdResult, rsvd, truncated_svd

__all__ = ["RandomizedSVD", "RsvdResult", "rsvd", "truncated_svd"]
