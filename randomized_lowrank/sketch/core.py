"""Sketching primitives shared by the randomized decompositions.

- Gaussian test matrices via the Box-Muller transform
- Modified Gram-Schmidt with a rank-deficiency cut-off
- The randomized range finder built from the two

The random source is always an explicit ``numpy.random.Generator`` so that
results are reproducible from a seed.
"""

from __future__ import annotations

import logging
import operator
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from randomized_lowrank.common.config import DEFAULT_ORTHO_THRESHOLD
from randomized_lowrank.common.errors import ConfigurationError, InvalidInputError

FloatArray = NDArray[np.floating]

logger = logging.getLogger(__name__)

# Uniform draws are k in [0, RAND_MAX] mapped to (k + 1) / (RAND_MAX + 2),
# which never reaches 0 or 1.
RAND_MAX = 2**31 - 1


def _uniform_open(rng: np.random.Generator, size) -> NDArray[np.float64]:
    k = rng.integers(0, RAND_MAX, size=size, endpoint=True)
    return (k + 1.0) / (RAND_MAX + 2.0)


def sample_gaussian(mat: FloatArray, rng: np.random.Generator) -> FloatArray:
    """Overwrite ``mat`` with standard normal samples and return it.

    Samples are generated per row, two at a time, with the Box-Muller
    transform::

        len = sqrt(-2 ln v1)
        x, y = len * cos(2 pi v2), len * sin(2 pi v2)

    For an odd number of columns the last column of each row gets its own
    pair and keeps only ``x``; the ``y`` of that pair is discarded.

    Parameters
    ----------
    mat:
        Writable two-dimensional floating point array, filled in place.
    rng:
        Source of uniform randomness.
    """

    if mat.ndim != 2:
        raise InvalidInputError("sample_gaussian expects a 2D array")
    if not np.issubdtype(mat.dtype, np.floating):
        raise InvalidInputError(f"sample_gaussian expects a floating point array, got dtype {mat.dtype}")
    rows, cols = mat.shape
    if mat.size == 0:
        return mat

    pairs = (cols + 1) // 2
    v = _uniform_open(rng, (rows, pairs, 2))
    length = np.sqrt(-2.0 * np.log(v[..., 0]))
    angle = 2.0 * np.pi * v[..., 1]

    samples = np.empty((rows, 2 * pairs), dtype=np.float64)
    samples[:, 0::2] = length * np.cos(angle)
    samples[:, 1::2] = length * np.sin(angle)
    # Odd width: slicing drops the unused y of the last pair.
    mat[...] = samples[:, :cols]
    return mat


def gram_schmidt(mat: FloatArray, threshold: float = DEFAULT_ORTHO_THRESHOLD) -> int:
    """Orthonormalize the columns of ``mat`` in place, left to right.

    Each column has its projections onto the already orthonormalized
    columns to its left removed and is then normalized. The first column
    whose remaining norm falls below ``threshold`` ends the procedure: it and
    every column to its right are set to zero.

    Parameters
    ----------
    mat:
        Writable two-dimensional floating point array. Callers that still
        need the original values must pass a copy.
    threshold:
        Absolute norm below which a column counts as linearly dependent.

    Returns
    -------
    int
        Number of leading orthonormal columns. Columns from this index on
        are zero and carry no basis direction.
    """

    if mat.ndim != 2:
        raise InvalidInputError("gram_schmidt expects a 2D array")
    if not threshold > 0.0:
        raise ConfigurationError("threshold must be positive")

    cols = mat.shape[1]
    for i in range(cols):
        col = mat[:, i]
        for j in range(i):
            basis = mat[:, j]
            col -= np.dot(col, basis) * basis

        norm = np.linalg.norm(col)
        if norm < threshold:
            mat[:, i:] = 0.0
            logger.debug("gram_schmidt: column %d of %d below threshold (norm=%.3e)", i, cols, norm)
            return i
        col /= norm
    return cols


def find_range(
    a: FloatArray,
    rank: int,
    rng: np.random.Generator,
    threshold: float = DEFAULT_ORTHO_THRESHOLD,
) -> FloatArray:
    """Approximate an orthonormal basis of the row space of ``a``.

    Draws a Gaussian ``(p, rank)`` matrix ``O`` for ``a`` of shape
    ``(p, q)``, forms ``Y = a.T @ O`` and orthonormalizes it. To sketch the
    column space of a matrix ``B`` pass ``B.T``.

    Returns
    -------
    ndarray
        ``(q, k)`` matrix with orthonormal columns, ``k <= rank``. ``k`` is
        smaller than ``rank`` only when orthonormalization collapsed.
    """

    if rank < 0:
        raise ConfigurationError("rank must be non-negative")
    o = np.empty((a.shape[0], rank), dtype=a.dtype)
    sample_gaussian(o, rng)

    # Column-major so that the per-column updates in gram_schmidt are contiguous.
    y = np.asfortranarray(a.T @ o)
    k = gram_schmidt(y, threshold)
    if k < rank:
        logger.debug("find_range: basis collapsed from %d to %d columns", rank, k)
    return y[:, :k]


def as_float_matrix(a: ArrayLike, caller: str) -> FloatArray:
    """Return ``a`` as a 2D floating point array.

    Float32/float64 input is passed through without a copy. The exact
    solvers only handle those two, so float16 is promoted to float32 and
    extended precision (longdouble) is rounded to float64. Integer and
    boolean input is promoted to float64.
    """

    arr = np.asarray(a)
    if arr.ndim != 2:
        raise InvalidInputError(f"{caller} expects a 2D array, got ndim={arr.ndim}")
    if arr.dtype == np.float32 or arr.dtype == np.float64:
        return arr
    if arr.dtype == np.float16:
        return arr.astype(np.float32)
    if np.issubdtype(arr.dtype, np.floating):
        logger.debug("%s: rounding %s input to float64", caller, arr.dtype)
        return arr.astype(np.float64)
    if np.issubdtype(arr.dtype, np.integer) or arr.dtype == np.bool_:
        return arr.astype(np.float64)
    raise InvalidInputError(f"{caller} expects real floating point data, got dtype {arr.dtype}")


def clamp_rank(rank: Optional[int], *dims: int) -> int:
    """Resolve a requested rank against the matrix dimensions.

    ``None`` means the full rank ``min(dims)``. Ranks above ``min(dims)``
    are clamped; non-positive ranks are rejected.
    """

    limit = min(dims)
    if rank is None:
        return limit
    try:
        rank = operator.index(rank)
    except TypeError as exc:
        raise ConfigurationError(f"rank must be an integer, got {rank!r}") from exc
    if rank <= 0:
        raise ConfigurationError(f"rank must be positive, got {rank}")
    if rank > limit:
        logger.debug("rank %d clamped to %d", rank, limit)
        return limit
    return rank
