"""Randomized PCA tests."""

from __future__ import annotations

import numpy as np
import pytest

from randomized_lowrank.common.datasets import LowRankMatrixSpec, low_rank_matrix
from randomized_lowrank.common.errors import InvalidInputError
from randomized_lowrank.pca.core import RandomizedPCA, pca
from randomized_lowrank.rsvd.core import rsvd


def test_scores_are_u_times_s() -> None:
    a = low_rank_matrix(LowRankMatrixSpec(m=40, n=12, r=3, seed=0))

    result = pca(a, rank=3, seed=1)
    svd = rsvd(a, rank=3, seed=1)

    np.testing.assert_allclose(result.components, svd.v)
    np.testing.assert_allclose(result.scores, svd.u * svd.s[np.newaxis, :])
    # Scores are the data expressed in the component basis.
    np.testing.assert_allclose(result.scores, a @ result.components, atol=1e-10)
    np.testing.assert_allclose(result.transform(a), result.scores, atol=1e-10)


def test_centered_pca_matches_covariance_eigenvalues() -> None:
    rng = np.random.default_rng(2)
    latent = rng.normal(size=(200, 2)) * np.array([3.0, 1.0])
    mixing = np.linalg.qr(rng.normal(size=(6, 2)))[0].T
    x = latent @ mixing + np.array([5.0, -1.0, 0.0, 2.0, 4.0, 1.0])

    result = RandomizedPCA(seed=3, center=True).compute(x, rank=2)

    np.testing.assert_allclose(result.mean, x.mean(axis=0))
    cov_eigs = np.linalg.eigvalsh(np.cov(x, rowvar=False))[::-1][:2]
    np.testing.assert_allclose(result.explained_variance, cov_eigs, rtol=1e-8)
    np.testing.assert_allclose(result.transform(x), result.scores, atol=1e-8)


def test_transform_rejects_wrong_feature_count() -> None:
    result = pca(np.eye(5), rank=2, seed=4)
    with pytest.raises(InvalidInputError):
        result.transform(np.ones((3, 4)))


def test_engine_accessors() -> None:
    engine = RandomizedPCA(seed=5)
    with pytest.raises(RuntimeError):
        _ = engine.components
    engine.compute(np.eye(6), rank=3)
    assert engine.components.shape == (6, 3)
    assert engine.scores.shape == (6, 3)
    assert engine.result.mean is None


if __name__ == "__main__":  # pragma: no cover - manual execution
    test_scores_are_u_times_s()
    test_centered_pca_matches_covariance_eigenvalues()
    print("PCA tests passed.")
