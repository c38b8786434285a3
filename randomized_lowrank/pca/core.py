"""Principal component analysis on top of the randomized SVD.

With ``A ~ U diag(S) V^T`` the components are the columns of ``V`` and the
scores of the rows of ``A`` are ``U diag(S)`` (equivalently ``A V``). The
data is used as given unless ``center=True``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from randomized_lowrank.common.config import DecompositionConfig
from randomized_lowrank.common.errors import InvalidInputError
from randomized_lowrank.rsvd.core import RandomizedSVD
from randomized_lowrank.sketch.core import as_float_matrix

FloatArray = NDArray[np.floating]


@dataclass
class PcaResult:
    """Container for PCA outputs.

    Attributes
    ----------
    components : ndarray
        ``(n_features, k)`` loadings, one principal axis per column.
    scores : ndarray
        ``(n_samples, k)`` coordinates of the rows in the component basis.
    singular_values : ndarray
        ``(k,)`` singular values of the (centered) data, descending.
    mean : ndarray or None
        Column means that were subtracted, ``None`` without centering.
    """

    components: FloatArray
    scores: FloatArray
    singular_values: FloatArray
    mean: Optional[FloatArray]

    @property
    def rank(self) -> int:
        return int(self.singular_values.shape[0])

    @property
    def explained_variance(self) -> FloatArray:
        """Variance along each component, ``S**2 / (n_samples - 1)``."""

        n_samples = self.scores.shape[0]
        return self.singular_values**2 / max(n_samples - 1, 1)

    def transform(self, x: ArrayLike) -> FloatArray:
        """Project new rows onto the components."""

        x = as_float_matrix(x, "PcaResult.transform")
        if x.shape[1] != self.components.shape[0]:
            raise InvalidInputError(
                f"expected {self.components.shape[0]} features, got {x.shape[1]}"
            )
        if self.mean is not None:
            x = x - self.mean
        return x @ self.components


class RandomizedPCA:
    """Randomized PCA engine; same arguments as ``RandomizedSVD`` plus ``center``."""

    def __init__(
        self,
        config: Optional[DecompositionConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        center: bool = False,
    ) -> None:
        self.svd = RandomizedSVD(config=config, seed=seed, rng=rng)
        self.center = center
        self._result: Optional[PcaResult] = None

    @property
    def result(self) -> Optional[PcaResult]:
        return self._result

    @property
    def components(self) -> FloatArray:
        return self._require_result().components

    @property
    def scores(self) -> FloatArray:
        return self._require_result().scores

    def _require_result(self) -> PcaResult:
        if self._result is None:
            raise RuntimeError("no decomposition available; call compute() first")
        return self._result

    def compute(self, a: ArrayLike, rank: Optional[int] = None) -> PcaResult:
        a = as_float_matrix(a, "RandomizedPCA")
        mean = None
        if self.center and a.size:
            mean = a.mean(axis=0)
            a = a - mean

        svd = self.svd.compute(a, rank)
        self._result = PcaResult(
            components=svd.v,
            scores=svd.u * svd.s[np.newaxis, :],
            singular_values=svd.s,
            mean=mean,
        )
        return self._result


def pca(
    a: ArrayLike,
    rank: Optional[int] = None,
    seed: Optional[int] = None,
    center: bool = False,
    config: Optional[DecompositionConfig] = None,
) -> PcaResult:
    """Functional form of ``RandomizedPCA(...).compute(a, rank)``."""

    return RandomizedPCA(config=config, seed=seed, center=center).compute(a, rank)
