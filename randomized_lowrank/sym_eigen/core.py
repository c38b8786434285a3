"""Randomized eigendecomposition of symmetric matrices.

A single sketch suffices because the row and column spaces of a symmetric
matrix coincide:

1. ``Y = orth(A^T O)``
2. ``B = Y^T A Y``                 small symmetric core
3. ``B = V_B diag(w) V_B^T``       exact eigendecomposition
4. eigenvalues ``w``, eigenvectors ``Y V_B``

Eigenvalues come back in the order of ``numpy.linalg.eigh`` (ascending).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from randomized_lowrank.common.config import DecompositionConfig
from randomized_lowrank.common.errors import InvalidInputError
from randomized_lowrank.sketch.core import as_float_matrix, clamp_rank, find_range

FloatArray = NDArray[np.floating]

logger = logging.getLogger(__name__)


@dataclass
class SymEigenResult:
    """Container for randomized symmetric eigendecomposition outputs."""

    eigenvalues: FloatArray
    eigenvectors: FloatArray
    requested_rank: int

    @property
    def rank(self) -> int:
        return int(self.eigenvalues.shape[0])

    def as_matrix(self) -> FloatArray:
        """Reconstruct ``V diag(w) V^T``."""

        v = self.eigenvectors
        return (v * self.eigenvalues[np.newaxis, :]) @ v.T


class RandomizedSymEigen:
    """Truncated eigendecomposition of a dense symmetric matrix.

    Only the square shape is checked; the matrix is assumed symmetric.
    Arguments are the same as for ``RandomizedSVD``.
    """

    def __init__(
        self,
        config: Optional[DecompositionConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.config = (config if config is not None else DecompositionConfig()).validate()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self._result: Optional[SymEigenResult] = None

    @property
    def result(self) -> Optional[SymEigenResult]:
        return self._result

    @property
    def eigenvalues(self) -> FloatArray:
        return self._require_result().eigenvalues

    @property
    def eigenvectors(self) -> FloatArray:
        return self._require_result().eigenvectors

    def _require_result(self) -> SymEigenResult:
        if self._result is None:
            raise RuntimeError("no decomposition available; call compute() first")
        return self._result

    def compute(self, a: ArrayLike, rank: Optional[int] = None) -> SymEigenResult:
        """Approximate the eigenpairs of ``a`` from a rank-``rank`` sketch.

        An input with a zero dimension yields an empty result instead of an
        error.
        """

        a = as_float_matrix(a, "RandomizedSymEigen")
        rows, cols = a.shape
        if rows == 0 or cols == 0:
            self._result = SymEigenResult(
                eigenvalues=np.empty((0,), dtype=a.dtype),
                eigenvectors=np.empty((rows, 0), dtype=a.dtype),
                requested_rank=0,
            )
            return self._result
        if rows != cols:
            raise InvalidInputError(f"RandomizedSymEigen expects a square matrix, got {rows}x{cols}")
        r = clamp_rank(rank, rows, cols)

        y = find_range(a, r, self.rng, self.config.ortho_threshold)
        k = y.shape[1]
        if k == 0:
            logger.debug("RandomizedSymEigen: sketch of %dx%d input collapsed entirely", rows, cols)
            eigenvalues = np.empty((0,), dtype=y.dtype)
            eigenvectors = y
        else:
            b = y.T @ a @ y
            # LinAlgError (non-convergence) propagates to the caller.
            eigenvalues, v_b = np.linalg.eigh(b)
            eigenvectors = y @ v_b

        self._result = SymEigenResult(eigenvalues=eigenvalues, eigenvectors=eigenvectors, requested_rank=r)
        return self._result


def sym_eigen(
    a: ArrayLike,
    rank: Optional[int] = None,
    seed: Optional[int] = None,
    config: Optional[DecompositionConfig] = None,
) -> SymEigenResult:
    """Functional form of ``RandomizedSymEigen(...).compute(a, rank)``."""

    return RandomizedSymEigen(config=config, seed=seed).compute(a, rank)
