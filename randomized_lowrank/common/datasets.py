"""Seeded synthetic matrices for tests and experiments.

Each generator takes a small spec dataclass so that the experiment runner
can log and reproduce exactly what it decomposed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from randomized_lowrank.common.errors import ConfigurationError

FloatArray = NDArray[np.floating]


@dataclass
class GaussianMatrixSpec:
    """Dense i.i.d. standard normal matrix of shape ``(m, n)``."""

    m: int
    n: int
    seed: Optional[int] = None


@dataclass
class LowRankMatrixSpec:
    """Rank-``r`` matrix ``U diag(s) V^T`` with ``s_i = (i + 1) ** -decay_exponent``.

    ``noise_std > 0`` adds dense Gaussian noise, making the matrix only
    numerically low-rank.
    """

    m: int
    n: int
    r: int
    decay_exponent: float = 1.0
    noise_std: float = 0.0
    seed: Optional[int] = None


@dataclass
class SymmetricPsdSpec:
    """Symmetric positive-semidefinite ``n x n`` matrix of exact rank ``r``."""

    n: int
    r: int
    decay_exponent: float = 1.0
    seed: Optional[int] = None


def _orthonormal_columns(rng: np.random.Generator, rows: int, cols: int) -> FloatArray:
    q, _ = np.linalg.qr(rng.normal(size=(rows, cols)))
    return q


def _spectrum(r: int, decay_exponent: float) -> FloatArray:
    return np.arange(1, r + 1, dtype=np.float64) ** (-decay_exponent)


def gaussian_matrix(spec: GaussianMatrixSpec) -> FloatArray:
    rng = np.random.default_rng(spec.seed)
    return rng.normal(size=(spec.m, spec.n))


def low_rank_matrix(spec: LowRankMatrixSpec) -> FloatArray:
    """Build the matrix described by ``spec``."""

    if not 0 < spec.r <= min(spec.m, spec.n):
        raise ConfigurationError("r must be in [1, min(m, n)]")
    rng = np.random.default_rng(spec.seed)
    u = _orthonormal_columns(rng, spec.m, spec.r)
    v = _orthonormal_columns(rng, spec.n, spec.r)
    a = (u * _spectrum(spec.r, spec.decay_exponent)[np.newaxis, :]) @ v.T
    if spec.noise_std > 0.0:
        a = a + spec.noise_std * rng.normal(size=a.shape)
    return a


def symmetric_psd_matrix(spec: SymmetricPsdSpec) -> FloatArray:
    """Build ``Q diag(s) Q^T``; the result is symmetrized to remove round-off."""

    if not 0 < spec.r <= spec.n:
        raise ConfigurationError("r must be in [1, n]")
    rng = np.random.default_rng(spec.seed)
    q = _orthonormal_columns(rng, spec.n, spec.r)
    a = (q * _spectrum(spec.r, spec.decay_exponent)[np.newaxis, :]) @ q.T
    return 0.5 * (a + a.T)
