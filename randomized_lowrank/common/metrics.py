"""Metric utilities for evaluating randomized decompositions.

All functions here work purely on NumPy arrays and are side-effect free.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from numpy.typing import NDArray

from randomized_lowrank.common.errors import InvalidInputError

FloatArray = NDArray[np.floating]


def relative_frobenius_error(true: FloatArray, approx: FloatArray) -> float:
    """Compute relative Frobenius norm error ``||true - approx||_F / ||true||_F``.

    Parameters
    ----------
    true:
        Ground-truth matrix.
    approx:
        Approximate matrix with the same shape as ``true``.

    Returns
    -------
    float
        Relative Frobenius norm error.
    """

    if true.shape != approx.shape:
        raise InvalidInputError("shapes of true and approx must match")

    diff = true - approx
    num = np.linalg.norm(diff, ord="fro")
    denom = np.linalg.norm(true, ord="fro")
    if denom == 0.0:
        if num == 0.0:
            return 0.0
        raise InvalidInputError("cannot compute relative error: true has zero Frobenius norm")
    return float(num / denom)


def reconstruction_error(
    a: FloatArray,
    left: FloatArray,
    values: FloatArray,
    right: Optional[FloatArray] = None,
) -> float:
    """Absolute Frobenius error of ``left @ diag(values) @ right.T`` against ``a``.

    With ``right`` omitted the symmetric form ``left @ diag(values) @ left.T``
    is used, which is what an eigendecomposition reconstructs.
    """

    if right is None:
        right = left
    approx = (left * values[np.newaxis, :]) @ right.T
    if approx.shape != a.shape:
        raise InvalidInputError(f"factors reconstruct shape {approx.shape}, expected {a.shape}")
    return float(np.linalg.norm(a - approx, ord="fro"))


def orthonormality_error(q: FloatArray) -> float:
    """Return ``max |Q^T Q - I|`` over the columns of ``q``.

    An empty basis (zero columns) is trivially orthonormal.
    """

    if q.ndim != 2:
        raise InvalidInputError("orthonormality_error expects a 2D array")
    k = q.shape[1]
    if k == 0:
        return 0.0
    gram = q.T @ q
    return float(np.max(np.abs(gram - np.eye(k, dtype=gram.dtype))))


def spectral_norm_error_power_iteration(
    true: FloatArray,
    approx: FloatArray,
    max_iters: int = 50,
    tol: float = 1e-6,
    seed: int | None = None,
) -> float:
    """Approximate spectral-norm error ``||true - approx||_2`` by power iteration.

    Parameters
    ----------
    true, approx:
        Matrices with identical shapes.
    max_iters:
        Maximum number of power-iteration steps.
    tol:
        Convergence tolerance on successive Rayleigh quotient changes.
    seed:
        Random seed for initial vector.

    Returns
    -------
    float
        Approximate spectral norm of ``true - approx``.
    """

    if true.shape != approx.shape:
        raise InvalidInputError("shapes of true and approx must match")

    rng = np.random.default_rng(seed)
    diff = (true - approx).astype(np.float64, copy=False)
    _, n = diff.shape

    # Power iteration on diff^T diff.
    v = rng.normal(size=(n,))
    v /= np.linalg.norm(v)

    prev_val = 0.0
    for _ in range(max_iters):
        w = diff.T @ (diff @ v)
        norm_w = np.linalg.norm(w)
        if norm_w == 0.0:
            return 0.0
        v = w / norm_w
        rayleigh = float(v @ (diff.T @ (diff @ v)))
        if abs(rayleigh - prev_val) <= tol * max(1.0, abs(prev_val)):
            prev_val = rayleigh
            break
        prev_val = rayleigh

    return float(np.sqrt(max(prev_val, 0.0)))
