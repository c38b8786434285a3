"""Randomized SVD engine.

Sketch twice, solve small, lift twice:

1. ``Y = orth(A^T O)``          basis of the row space of ``A``
2. ``B = A Y``
3. ``Z = orth(B P)``            basis of the column space of ``B``
4. ``C = Z^T B``                small core, ``C ~ Z^T A Y``
5. ``C = U_C diag(S) V_C^T``    exact thin SVD
6. ``U = Z U_C``, ``V = Y V_C``

so that ``A ~ U diag(S) V^T``. The random source is an explicit NumPy
generator owned by the engine, seeded on construction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from randomized_lowrank.common.config import DecompositionConfig
from randomized_lowrank.common.errors import ConfigurationError, InvalidInputError
from randomized_lowrank.sketch.core import as_float_matrix, clamp_rank, find_range

FloatArray = NDArray[np.floating]

logger = logging.getLogger(__name__)


@dataclass
class RsvdResult:
    """Container for randomized SVD outputs.

    ``u`` or ``v`` is ``None`` when it was not requested (see
    ``RandomizedSVD.compute_u`` and friends). ``requested_rank`` is the
    rank after clamping to ``min(m, n)``; ``rank`` may be smaller when the
    sketch turned out rank deficient.
    """

    u: Optional[FloatArray]
    s: FloatArray
    v: Optional[FloatArray]
    requested_rank: int

    @property
    def rank(self) -> int:
        """Effective rank of the returned approximation."""

        return int(self.s.shape[0])

    @property
    def vt(self) -> Optional[FloatArray]:
        return None if self.v is None else self.v.T

    def as_matrix(self) -> FloatArray:
        """Reconstruct the low-rank approximation ``U diag(S) V^T``."""

        if self.u is None or self.v is None:
            raise ValueError("as_matrix needs both U and V; use RandomizedSVD.compute")
        return (self.u * self.s[np.newaxis, :]) @ self.v.T


class RandomizedSVD:
    """Truncated SVD of a dense matrix by randomized sketching.

    Parameters
    ----------
    config:
        Numerical settings; defaults to ``DecompositionConfig()``.
    seed:
        Seed for the engine's generator. Ignored when ``rng`` is given.
    rng:
        Generator to draw the sketching matrices from.

    Each ``compute*`` call returns its result and also keeps it on the
    engine, replacing whatever an earlier call produced.
    """

    def __init__(
        self,
        config: Optional[DecompositionConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.config = (config if config is not None else DecompositionConfig()).validate()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self._result: Optional[RsvdResult] = None

    def compute(self, a: ArrayLike, rank: Optional[int] = None) -> RsvdResult:
        """Compute ``U``, ``S`` and ``V`` of a rank-``rank`` approximation of ``a``."""

        return self._run(a, rank, want_u=True, want_v=True)

    def compute_u(self, a: ArrayLike, rank: Optional[int] = None) -> RsvdResult:
        """Like ``compute`` but skips lifting ``V``."""

        return self._run(a, rank, want_u=True, want_v=False)

    def compute_v(self, a: ArrayLike, rank: Optional[int] = None) -> RsvdResult:
        """Like ``compute`` but skips lifting ``U``."""

        return self._run(a, rank, want_u=False, want_v=True)

    def compute_singular_values(self, a: ArrayLike, rank: Optional[int] = None) -> RsvdResult:
        """Only the singular values; neither factor is lifted."""

        return self._run(a, rank, want_u=False, want_v=False)

    @property
    def result(self) -> Optional[RsvdResult]:
        return self._result

    @property
    def matrix_u(self) -> Optional[FloatArray]:
        return self._require_result().u

    @property
    def singular_values(self) -> FloatArray:
        return self._require_result().s

    @property
    def matrix_v(self) -> Optional[FloatArray]:
        return self._require_result().v

    @property
    def effective_rank(self) -> int:
        return self._require_result().rank

    def _require_result(self) -> RsvdResult:
        if self._result is None:
            raise RuntimeError("no decomposition available; call compute() first")
        return self._result

    def _run(self, a: ArrayLike, rank: Optional[int], want_u: bool, want_v: bool) -> RsvdResult:
        a = as_float_matrix(a, "RandomizedSVD")
        m, n = a.shape
        if m == 0 or n == 0:
            raise InvalidInputError(f"cannot decompose an empty {m}x{n} matrix")
        r = clamp_rank(rank, m, n)

        z, y, u_c, s, vt_c = self._reduce(a, r)

        u = z @ u_c if want_u else None
        v = y @ vt_c.T if want_v else None
        self._result = RsvdResult(u=u, s=s, v=v, requested_rank=r)
        return self._result

    def _reduce(
        self, a: FloatArray, r: int
    ) -> Tuple[FloatArray, FloatArray, FloatArray, FloatArray, FloatArray]:
        """Sketch ``a`` on both sides and take the exact SVD of the core.

        Returns ``(Z, Y, U_C, S, V_C^T)``.
        """

        threshold = self.config.ortho_threshold
        m, n = a.shape

        # Range(B) = Range(A Y), Y spanning Range(A^T)
        y = find_range(a, r, self.rng, threshold)
        b = a @ y

        # Second sketch on the column space of the reduced matrix
        z = find_range(b.T, y.shape[1], self.rng, threshold)
        c = z.T @ b

        k = min(c.shape)
        if k < r:
            logger.debug("RandomizedSVD: effective rank %d < requested %d for %dx%d input", k, r, m, n)
        if k == 0:
            return (
                z,
                y,
                np.empty((z.shape[1], 0), dtype=c.dtype),
                np.empty((0,), dtype=c.dtype),
                np.empty((0, y.shape[1]), dtype=c.dtype),
            )

        # LinAlgError (non-convergence) propagates to the caller.
        u_c, s, vt_c = np.linalg.svd(c, full_matrices=False)
        return z, y, u_c, s, vt_c


def rsvd(
    a: ArrayLike,
    rank: Optional[int] = None,
    seed: Optional[int] = None,
    config: Optional[DecompositionConfig] = None,
) -> RsvdResult:
    """Compute a randomized rank-``rank`` SVD approximation of ``a``.

    Parameters
    ----------
    a:
        Input matrix of shape ``(m, n)``.
    rank:
        Target rank; clamped to ``min(m, n)``, which is also the default.
    seed:
        Optional random seed for reproducibility.
    config:
        Numerical settings for the orthonormalization.

    Returns
    -------
    RsvdResult
        Factors ``U`` ``(m, k)``, ``S`` ``(k,)`` descending and ``V``
        ``(n, k)`` with ``k <= rank``.
    """

    return RandomizedSVD(config=config, seed=seed).compute(a, rank)


def truncated_svd(a: ArrayLike, rank: int) -> RsvdResult:
    """Deterministic truncated SVD wrapper for comparison baselines."""

    a = as_float_matrix(a, "truncated_svd")
    if rank <= 0 or rank > min(a.shape):
        raise ConfigurationError("rank must be in [1, min(m, n)]")

    u, s, vt = np.linalg.svd(a, full_matrices=False)
    return RsvdResult(u=u[:, :rank], s=s[:rank], v=vt[:rank, :].T, requested_rank=rank)
