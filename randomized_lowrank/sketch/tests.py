"""Tests for the sketching primitives (sampler, Gram-Schmidt, range finder)."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from randomized_lowrank.common.datasets import LowRankMatrixSpec, low_rank_matrix
from randomized_lowrank.common.errors import ConfigurationError, InvalidInputError
from randomized_lowrank.common.metrics import orthonormality_error
from randomized_lowrank.sketch.core import (
    as_float_matrix,
    clamp_rank,
    find_range,
    gram_schmidt,
    sample_gaussian,
)


def test_sample_gaussian_moments() -> None:
    """Samples should have mean ~0 and unit variance."""

    mat = np.empty((400, 301))
    sample_gaussian(mat, np.random.default_rng(0))
    assert np.all(np.isfinite(mat))
    assert abs(float(mat.mean())) < 0.02
    assert abs(float(mat.std()) - 1.0) < 0.02


def test_sample_gaussian_odd_column_uses_own_pair() -> None:
    """An odd trailing column consumes a full pair and keeps its first value."""

    odd = sample_gaussian(np.empty((3, 3)), np.random.default_rng(7))
    even = sample_gaussian(np.empty((3, 4)), np.random.default_rng(7))
    np.testing.assert_array_equal(odd, even[:, :3])


def test_sample_gaussian_reproducible_and_dtype_preserving() -> None:
    a = sample_gaussian(np.empty((5, 6), dtype=np.float32), np.random.default_rng(3))
    b = sample_gaussian(np.empty((5, 6), dtype=np.float32), np.random.default_rng(3))
    assert a.dtype == np.float32
    np.testing.assert_array_equal(a, b)


def test_sample_gaussian_empty_is_noop() -> None:
    mat = np.empty((0, 4))
    assert sample_gaussian(mat, np.random.default_rng(0)) is mat


def test_gram_schmidt_full_rank() -> None:
    """Full-rank input yields an orthonormal basis of the same span."""

    rng = np.random.default_rng(1)
    original = rng.normal(size=(50, 10))
    q = np.array(original, order="F")

    k = gram_schmidt(q)

    assert k == 10
    assert orthonormality_error(q) < 1e-10
    # Span is preserved: projecting the original columns onto Q is lossless.
    np.testing.assert_allclose(q @ (q.T @ original), original, atol=1e-10)


def test_gram_schmidt_collapses_at_duplicate_column() -> None:
    """A repeated column zeroes itself and everything to its right."""

    rng = np.random.default_rng(2)
    a, b, c = rng.normal(size=(3, 20))
    mat = np.column_stack([a, b, a, c])

    k = gram_schmidt(mat)

    assert k == 2
    np.testing.assert_array_equal(mat[:, 2:], 0.0)
    np.testing.assert_allclose(mat[:, 0], a / np.linalg.norm(a))
    assert orthonormality_error(mat[:, :2]) < 1e-12


def test_gram_schmidt_zero_first_column() -> None:
    mat = np.ones((4, 3))
    mat[:, 0] = 0.0
    assert gram_schmidt(mat) == 0
    np.testing.assert_array_equal(mat, 0.0)


def test_gram_schmidt_threshold_is_configurable() -> None:
    mat = np.zeros((3, 2))
    mat[0, 0] = 1.0
    mat[1, 1] = 1e-3

    assert gram_schmidt(mat.copy()) == 2
    assert gram_schmidt(mat.copy(), threshold=1e-2) == 1

    with pytest.raises(ConfigurationError):
        gram_schmidt(mat.copy(), threshold=0.0)


def test_find_range_captures_row_space() -> None:
    a = low_rank_matrix(LowRankMatrixSpec(m=30, n=40, r=5, seed=4))

    y = find_range(a, 5, np.random.default_rng(5))

    assert y.shape == (40, 5)
    assert orthonormality_error(y) < 1e-10
    np.testing.assert_allclose(a @ y @ y.T, a, atol=1e-10)


def test_find_range_truncates_collapsed_directions() -> None:
    """Asking for more directions than the matrix has returns only real ones."""

    a = low_rank_matrix(LowRankMatrixSpec(m=30, n=40, r=3, seed=6))

    y = find_range(a, 6, np.random.default_rng(7))

    assert y.shape == (40, 3)
    assert orthonormality_error(y) < 1e-10


def test_clamp_rank() -> None:
    assert clamp_rank(None, 6, 4) == 4
    assert clamp_rank(3, 6, 4) == 3
    assert clamp_rank(10, 6, 4) == 4
    assert clamp_rank(np.int64(2), 6, 4) == 2
    with pytest.raises(ConfigurationError):
        clamp_rank(0, 6, 4)
    with pytest.raises(ConfigurationError):
        clamp_rank(2.5, 6, 4)


def test_as_float_matrix() -> None:
    ints = as_float_matrix([[1, 2], [3, 4]], "test")
    assert ints.dtype == np.float64

    f32 = np.ones((2, 2), dtype=np.float32)
    assert as_float_matrix(f32, "test") is f32

    with pytest.raises(InvalidInputError):
        as_float_matrix(np.ones(3), "test")
    with pytest.raises(InvalidInputError):
        as_float_matrix(np.ones((2, 2), dtype=complex), "test")


def test_as_float_matrix_maps_unsupported_precisions() -> None:
    """float16 and longdouble are converted to types the exact solvers accept."""

    assert as_float_matrix(np.ones((2, 2), dtype=np.float16), "test").dtype == np.float32
    assert as_float_matrix(np.ones((2, 2), dtype=np.longdouble), "test").dtype == np.float64


def test_sample_gaussian_rejects_integer_matrix() -> None:
    with pytest.raises(InvalidInputError):
        sample_gaussian(np.zeros((2, 3), dtype=np.int64), np.random.default_rng(0))


def test_clamp_and_collapse_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="randomized_lowrank")

    clamp_rank(10, 6, 4)
    a = low_rank_matrix(LowRankMatrixSpec(m=20, n=15, r=2, seed=8))
    find_range(a, 5, np.random.default_rng(9))

    messages = [r.getMessage() for r in caplog.records if r.name == "randomized_lowrank.sketch.core"]
    assert any("clamped to 4" in m for m in messages)
    assert any("collapsed from 5 to 2" in m for m in messages)
    assert all(r.levelno == logging.DEBUG for r in caplog.records if r.name.startswith("randomized_lowrank"))


if __name__ == "__main__":  # pragma: no cover - manual execution
    test_sample_gaussian_moments()
    test_sample_gaussian_odd_column_uses_own_pair()
    test_gram_schmidt_full_rank()
    test_gram_schmidt_collapses_at_duplicate_column()
    test_find_range_captures_row_space()
    print("Sketch tests passed.")
