"""Randomized symmetric eigendecomposition tests."""

from __future__ import annotations

import numpy as np
import pytest

from randomized_lowrank.common.datasets import SymmetricPsdSpec, symmetric_psd_matrix
from randomized_lowrank.common.errors import ConfigurationError, InvalidInputError
from randomized_lowrank.common.metrics import orthonormality_error, reconstruction_error
from randomized_lowrank.rsvd.core import rsvd
from randomized_lowrank.sym_eigen.core import RandomizedSymEigen, sym_eigen


def test_psd_low_rank_recovery() -> None:
    a = symmetric_psd_matrix(SymmetricPsdSpec(n=30, r=4, seed=0))

    result = sym_eigen(a, rank=4, seed=1)

    exact = np.linalg.eigvalsh(a)[-4:]
    np.testing.assert_allclose(result.eigenvalues, exact, rtol=1e-10)
    assert np.all(np.diff(result.eigenvalues) >= 0.0)
    assert orthonormality_error(result.eigenvectors) < 1e-10
    assert reconstruction_error(a, result.eigenvectors, result.eigenvalues) < 1e-10
    np.testing.assert_allclose(
        a @ result.eigenvectors,
        result.eigenvectors * result.eigenvalues[np.newaxis, :],
        atol=1e-10,
    )


def test_indefinite_matrix_keeps_solver_order() -> None:
    rng = np.random.default_rng(2)
    q, _ = np.linalg.qr(rng.normal(size=(15, 3)))
    a = (q * np.array([3.0, -2.0, 1.0])[np.newaxis, :]) @ q.T

    result = sym_eigen(a, rank=3, seed=3)

    np.testing.assert_allclose(result.eigenvalues, [-2.0, 1.0, 3.0], atol=1e-10)


def test_agrees_with_svd_on_psd_input() -> None:
    a = symmetric_psd_matrix(SymmetricPsdSpec(n=40, r=5, decay_exponent=1.5, seed=4))

    for rank in (5, 8):
        eig = sym_eigen(a, rank=rank, seed=5)
        svd = rsvd(a, rank=rank, seed=6)
        np.testing.assert_allclose(eig.eigenvalues[::-1], svd.s, atol=1e-10)


def test_rank_collapse_and_clamp() -> None:
    a = symmetric_psd_matrix(SymmetricPsdSpec(n=12, r=3, seed=7))

    result = RandomizedSymEigen(seed=8).compute(a, rank=50)

    assert result.requested_rank == 12
    assert result.rank == 3
    assert result.eigenvectors.shape == (12, 3)


def test_identity_matrix() -> None:
    result = sym_eigen(np.eye(10), rank=4, seed=9)
    np.testing.assert_allclose(result.eigenvalues, np.ones(4), atol=1e-10)


def test_empty_input_is_noop() -> None:
    engine = RandomizedSymEigen(seed=10)
    result = engine.compute(np.zeros((0, 0)), rank=3)

    assert result.eigenvalues.shape == (0,)
    assert result.eigenvectors.shape == (0, 0)
    assert engine.eigenvalues is result.eigenvalues


def test_zero_matrix_gives_empty_basis() -> None:
    result = sym_eigen(np.zeros((6, 6)), rank=2, seed=11)

    assert result.rank == 0
    assert result.eigenvectors.shape == (6, 0)


def test_seeded_runs_are_reproducible() -> None:
    a = symmetric_psd_matrix(SymmetricPsdSpec(n=20, r=20, seed=12))

    first = sym_eigen(a, rank=5, seed=13)
    second = sym_eigen(a, rank=5, seed=13)

    np.testing.assert_array_equal(first.eigenvalues, second.eigenvalues)
    np.testing.assert_array_equal(first.eigenvectors, second.eigenvectors)


def test_low_and_extended_precision_inputs() -> None:
    half = sym_eigen(np.eye(6, dtype=np.float16), rank=2, seed=14)
    assert half.eigenvectors.dtype == np.float32
    np.testing.assert_allclose(half.eigenvalues, np.ones(2), atol=1e-5)

    extended = sym_eigen(np.eye(6, dtype=np.longdouble), rank=2, seed=15)
    assert extended.eigenvalues.dtype == np.float64
    np.testing.assert_allclose(extended.eigenvalues, np.ones(2), atol=1e-10)


def test_solver_failure_propagates(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(*args, **kwargs):
        raise np.linalg.LinAlgError("Eigenvalues did not converge")

    monkeypatch.setattr(np.linalg, "eigh", _fail)
    with pytest.raises(np.linalg.LinAlgError):
        sym_eigen(np.eye(4), rank=2, seed=16)


def test_invalid_inputs() -> None:
    with pytest.raises(InvalidInputError):
        sym_eigen(np.ones((3, 4)), rank=2)
    with pytest.raises(ConfigurationError):
        sym_eigen(np.eye(3), rank=-1)
    with pytest.raises(RuntimeError):
        _ = RandomizedSymEigen().eigenvectors


if __name__ == "__main__":  # pragma: no cover - manual execution
    test_psd_low_rank_recovery()
    test_agrees_with_svd_on_psd_input()
    test_empty_input_is_noop()
    print("Symmetric eigen tests passed.")
