"""Randomized SVD engine tests.

Small, seeded matrices so the suite runs in well under a second. The
low-rank cases have known spectra, so exact recovery can be asserted.
"""

from __future__ import annotations

import numpy as np
import pytest

from randomized_lowrank.common.config import DecompositionConfig
from randomized_lowrank.common.datasets import LowRankMatrixSpec, low_rank_matrix
from randomized_lowrank.common.errors import ConfigurationError, InvalidInputError
from randomized_lowrank.common.metrics import orthonormality_error, relative_frobenius_error
from randomized_lowrank.rsvd.core import RandomizedSVD, rsvd, truncated_svd


def test_exact_low_rank_recovery() -> None:
    """A rank-5 matrix is reproduced exactly with rank 5."""

    a = low_rank_matrix(LowRankMatrixSpec(m=60, n=40, r=5, seed=0))

    result = rsvd(a, rank=5, seed=1)

    assert result.u.shape == (60, 5)
    assert result.s.shape == (5,)
    assert result.v.shape == (40, 5)
    assert relative_frobenius_error(a, result.as_matrix()) < 1e-10
    assert orthonormality_error(result.u) < 1e-10
    assert orthonormality_error(result.v) < 1e-10

    exact = np.linalg.svd(a, compute_uv=False)[:5]
    np.testing.assert_allclose(result.s, exact, rtol=1e-10)


def test_singular_values_non_negative_and_descending() -> None:
    rng = np.random.default_rng(2)
    a = rng.normal(size=(30, 25))

    s = rsvd(a, rank=8, seed=3).s

    assert np.all(s >= 0.0)
    assert np.all(np.diff(s) <= 0.0)


def test_noisy_low_rank_matches_truncated_svd() -> None:
    """Oversampled sketch recovers the leading singular values of a noisy matrix."""

    a = low_rank_matrix(LowRankMatrixSpec(m=80, n=60, r=10, decay_exponent=0.5, noise_std=1e-3, seed=4))

    exact = truncated_svd(a, rank=10)
    approx = rsvd(a, rank=20, seed=5)

    np.testing.assert_allclose(approx.s[:10], exact.s, rtol=5e-3)


def test_rank_above_true_rank_reports_effective_rank() -> None:
    a = low_rank_matrix(LowRankMatrixSpec(m=30, n=20, r=4, seed=6))

    result = rsvd(a, rank=9, seed=7)

    assert result.requested_rank == 9
    assert result.rank == 4
    assert result.u.shape == (30, 4)
    assert result.v.shape == (20, 4)
    assert relative_frobenius_error(a, result.as_matrix()) < 1e-10


def test_rank_is_clamped_to_smaller_dimension() -> None:
    rng = np.random.default_rng(8)
    a = rng.normal(size=(20, 10))

    result = rsvd(a, rank=100, seed=9)

    assert result.requested_rank == 10
    assert result.u.shape == (20, 10)
    assert relative_frobenius_error(a, result.as_matrix()) < 1e-8


def test_rank_monotonicity() -> None:
    """Larger rank never gives a worse reconstruction."""

    a = low_rank_matrix(LowRankMatrixSpec(m=50, n=40, r=10, decay_exponent=2.0, seed=10))

    errors = [relative_frobenius_error(a, rsvd(a, rank=r, seed=11).as_matrix()) for r in (2, 10, 12)]

    assert errors[0] > errors[1]
    assert errors[1] <= errors[2] + 1e-8
    assert errors[1] < 1e-10


def test_identity_matrix() -> None:
    """All singular values of the identity are one and U, V span the same subspace."""

    result = RandomizedSVD(seed=12).compute(np.eye(12), rank=5)

    np.testing.assert_allclose(result.s, np.ones(5), atol=1e-10)
    assert orthonormality_error(result.u) < 1e-10
    np.testing.assert_allclose(result.u @ result.u.T, result.v @ result.v.T, atol=1e-10)


def test_partial_variants_match_full_compute() -> None:
    rng = np.random.default_rng(13)
    a = rng.normal(size=(25, 18))

    full = RandomizedSVD(seed=14).compute(a, rank=6)
    only_u = RandomizedSVD(seed=14).compute_u(a, rank=6)
    only_v = RandomizedSVD(seed=14).compute_v(a, rank=6)
    only_s = RandomizedSVD(seed=14).compute_singular_values(a, rank=6)

    assert only_u.v is None and only_v.u is None
    assert only_s.u is None and only_s.v is None
    np.testing.assert_allclose(only_u.u, full.u, rtol=0, atol=1e-12)
    np.testing.assert_allclose(only_v.v, full.v, rtol=0, atol=1e-12)
    np.testing.assert_allclose(only_s.s, full.s, rtol=0, atol=1e-12)
    with pytest.raises(ValueError):
        only_s.as_matrix()


def test_seeded_runs_are_reproducible() -> None:
    rng = np.random.default_rng(15)
    a = rng.normal(size=(20, 30))

    first = rsvd(a, rank=4, seed=16)
    second = rsvd(a, rank=4, seed=16)

    np.testing.assert_array_equal(first.u, second.u)
    np.testing.assert_array_equal(first.s, second.s)
    np.testing.assert_array_equal(first.v, second.v)


def test_engine_keeps_latest_result() -> None:
    engine = RandomizedSVD(seed=17)
    with pytest.raises(RuntimeError):
        _ = engine.singular_values

    rng = np.random.default_rng(18)
    engine.compute(rng.normal(size=(10, 8)), rank=3)
    assert engine.effective_rank == 3

    engine.compute_singular_values(rng.normal(size=(6, 5)), rank=2)
    assert engine.singular_values.shape == (2,)
    assert engine.matrix_u is None
    assert engine.result is not None and engine.result.requested_rank == 2


def test_zero_matrix_collapses_to_empty_factors() -> None:
    result = rsvd(np.zeros((5, 4)), rank=3, seed=19)

    assert result.rank == 0
    assert result.u.shape == (5, 0)
    assert result.v.shape == (4, 0)
    np.testing.assert_array_equal(result.as_matrix(), np.zeros((5, 4)))


def test_float32_is_preserved() -> None:
    a = low_rank_matrix(LowRankMatrixSpec(m=20, n=15, r=3, seed=20)).astype(np.float32)

    result = rsvd(a, rank=3, seed=21)

    assert result.u.dtype == np.float32
    assert result.s.dtype == np.float32
    assert relative_frobenius_error(a, result.as_matrix()) < 1e-4


def test_low_and_extended_precision_inputs() -> None:
    """float16 is computed in float32, longdouble in float64."""

    half = rsvd(np.eye(6, dtype=np.float16), rank=2, seed=23)
    assert half.u.dtype == np.float32
    np.testing.assert_allclose(half.s, np.ones(2), atol=1e-5)

    extended = rsvd(np.eye(6, dtype=np.longdouble), rank=2, seed=24)
    assert extended.s.dtype == np.float64
    np.testing.assert_allclose(extended.s, np.ones(2), atol=1e-10)


def test_invalid_inputs() -> None:
    with pytest.raises(InvalidInputError):
        rsvd(np.zeros((0, 4)), rank=1)
    with pytest.raises(InvalidInputError):
        rsvd(np.ones(4), rank=1)
    with pytest.raises(ConfigurationError):
        rsvd(np.ones((4, 4)), rank=0)
    with pytest.raises(ConfigurationError):
        RandomizedSVD(config=DecompositionConfig(ortho_threshold=-1.0))
    with pytest.raises(ConfigurationError):
        truncated_svd(np.ones((4, 4)), rank=5)


def test_solver_failure_propagates(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(*args, **kwargs):
        raise np.linalg.LinAlgError("SVD did not converge")

    monkeypatch.setattr(np.linalg, "svd", _fail)
    with pytest.raises(np.linalg.LinAlgError):
        rsvd(np.eye(4), rank=2, seed=22)


def test_experiments_smoke(tmp_path) -> None:
    """A tiny configuration runs every experiment and writes its CSV."""

    from randomized_lowrank.common.config import (
        ExperimentConfig,
        MatrixFamily,
        RsvdSweepConfig,
        SizeScalingConfig,
    )
    from randomized_lowrank.rsvd.experiments import run_all

    config = ExperimentConfig(
        families=[MatrixFamily.LOW_RANK, MatrixFamily.SYMMETRIC_PSD],
        rank_sweep=RsvdSweepConfig(ranks=[4, 8], n=32, num_trials=1, seed=0),
        size_scaling=SizeScalingConfig(sizes=[16, 32], rank=4, num_trials=1, seed=1),
    )
    run_all(tmp_path, config)

    for name in ("rsvd_rank_sweep.csv", "rsvd_size_scaling.csv", "sym_eigen_agreement.csv"):
        assert (tmp_path / name).exists()
    assert len((tmp_path / "runs.jsonl").read_text(encoding="utf-8").splitlines()) == 3


if __name__ == "__main__":  # pragma: no cover - manual execution
    test_exact_low_rank_recovery()
    test_noisy_low_rank_matches_truncated_svd()
    test_rank_monotonicity()
    test_identity_matrix()
    test_partial_variants_match_full_compute()
    print("RSVD tests passed.")
