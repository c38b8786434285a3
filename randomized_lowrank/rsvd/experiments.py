"""Experiment runner for the randomized decompositions.

Experiments implemented:
1) Rank sweep across matrix families (error vs rank, against exact truncated SVD).
2) Size scaling (runtime of the randomized SVD vs full ``numpy.linalg.svd``).
3) Symmetric agreement (eigen engine vs SVD engine on PSD matrices).

Outputs are CSVs under ``results/``:
- ``rsvd_rank_sweep.csv``
- ``rsvd_size_scaling.csv``
- ``sym_eigen_agreement.csv``

plus one JSONL line per run in ``runs.jsonl``.
"""

from __future__ import annotations

import argparse
import csv
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import numpy as np

from randomized_lowrank.common.config import (
    DecompositionConfig,
    ExperimentConfig,
    MatrixFamily,
    MethodKind,
    RsvdSweepConfig,
    SizeScalingConfig,
)
from randomized_lowrank.common.datasets import (
    GaussianMatrixSpec,
    LowRankMatrixSpec,
    SymmetricPsdSpec,
    gaussian_matrix,
    low_rank_matrix,
    symmetric_psd_matrix,
)
from randomized_lowrank.common.logging_utils import append_jsonl, get_logger
from randomized_lowrank.common.metrics import (
    orthonormality_error,
    relative_frobenius_error,
    spectral_norm_error_power_iteration,
)
from randomized_lowrank.common.timing import time_function
from randomized_lowrank.rsvd.core import RandomizedSVD, truncated_svd
from randomized_lowrank.sym_eigen.core import RandomizedSymEigen

logger = get_logger(__name__)

DEFAULT_CONFIG = ExperimentConfig(
    families=[MatrixFamily.GAUSSIAN, MatrixFamily.LOW_RANK, MatrixFamily.SYMMETRIC_PSD],
    rank_sweep=RsvdSweepConfig(ranks=[8, 16, 32, 64, 128], n=512, num_trials=3, seed=1234),
    size_scaling=SizeScalingConfig(sizes=[256, 512, 1024, 2048], rank=32, num_trials=3, seed=9012),
)

INTRINSIC_RANK = 20


def _write_csv(path: Path, rows: List[Dict]) -> None:
    """Write rows to CSV with a header derived from the first row."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if not rows:
        return
    fieldnames = list(rows[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)
    logger.info("Wrote %d rows to %s", len(rows), path)


def generate_matrix(family: MatrixFamily, n: int, seed: int) -> np.ndarray:
    if family is MatrixFamily.GAUSSIAN:
        return gaussian_matrix(GaussianMatrixSpec(m=n, n=n, seed=seed))
    if family is MatrixFamily.LOW_RANK:
        return low_rank_matrix(
            LowRankMatrixSpec(m=n, n=n, r=min(INTRINSIC_RANK, n), decay_exponent=1.0, noise_std=1e-3, seed=seed)
        )
    if family is MatrixFamily.SYMMETRIC_PSD:
        return symmetric_psd_matrix(SymmetricPsdSpec(n=n, r=min(4 * INTRINSIC_RANK, n), decay_exponent=2.0, seed=seed))
    raise ValueError(f"unknown matrix family {family!r}")


@dataclass
class BenchmarkResult:
    rel_error: float
    baseline_error: float
    spectral_error: float
    orthonormality: float
    effective_rank: int
    runtime_sec: float
    speedup: float


def evaluate_rsvd(
    a: np.ndarray,
    rank: int,
    seed: int,
    config: DecompositionConfig,
) -> Tuple[BenchmarkResult, float]:
    """Run the randomized SVD vs full SVD on a single matrix.

    Returns (randomized metrics, baseline_runtime_sec).
    """

    exact, baseline_timing = time_function(lambda: truncated_svd(a, rank=rank))

    engine = RandomizedSVD(config=config, seed=seed)
    approx, rsvd_timing = time_function(lambda: engine.compute(a, rank))
    approx_mat = approx.as_matrix()

    speedup = baseline_timing.seconds / rsvd_timing.seconds if rsvd_timing.seconds > 0 else 0.0
    return (
        BenchmarkResult(
            rel_error=relative_frobenius_error(a, approx_mat),
            baseline_error=relative_frobenius_error(a, exact.as_matrix()),
            spectral_error=spectral_norm_error_power_iteration(a, approx_mat, seed=seed),
            orthonormality=max(orthonormality_error(approx.u), orthonormality_error(approx.v)),
            effective_rank=approx.rank,
            runtime_sec=rsvd_timing.seconds,
            speedup=speedup,
        ),
        baseline_timing.seconds,
    )


# ============================================================================
# Experiment 1: Rank sweep across matrix families
# ============================================================================

def run_rank_sweep(output_dir: Path, config: ExperimentConfig = DEFAULT_CONFIG) -> List[Dict]:
    sweep = config.rank_sweep
    logger.info("Running rank sweep (n=%d)", sweep.n)

    rng = np.random.default_rng(sweep.seed)
    rows: List[Dict] = []

    for family in config.families:
        logger.info("  Matrix family: %s", family.value)
        for trial in range(sweep.num_trials):
            a = generate_matrix(family, sweep.n, int(rng.integers(0, 1_000_000)))
            for rank in sweep.ranks:
                if rank > min(a.shape):
                    continue
                metrics, baseline_time = evaluate_rsvd(
                    a, rank=rank, seed=int(rng.integers(0, 1_000_000)), config=config.decomposition
                )
                rows.append(
                    {
                        "matrix_type": family.value,
                        "algo": MethodKind.RSVD.value,
                        "baseline": MethodKind.FULL_SVD.value,
                        "m": a.shape[0],
                        "n": a.shape[1],
                        "rank": rank,
                        "trial": trial,
                        "baseline_runtime_sec": baseline_time,
                        **asdict(metrics),
                    }
                )
    _write_csv(output_dir / "rsvd_rank_sweep.csv", rows)
    return rows


# ============================================================================
# Experiment 2: Size scaling
# ============================================================================

def run_size_scaling(output_dir: Path, config: ExperimentConfig = DEFAULT_CONFIG) -> List[Dict]:
    scaling = config.size_scaling
    logger.info("Running size scaling (rank=%d)", scaling.rank)
    rng = np.random.default_rng(scaling.seed)
    rows: List[Dict] = []

    for n in scaling.sizes:
        logger.info("  Size n=%d", n)
        for trial in range(scaling.num_trials):
            a = generate_matrix(MatrixFamily.LOW_RANK, n, int(rng.integers(0, 1_000_000)))
            rank_eff = min(scaling.rank, n)
            metrics, baseline_time = evaluate_rsvd(
                a, rank=rank_eff, seed=int(rng.integers(0, 1_000_000)), config=config.decomposition
            )
            rows.append(
                {
                    "matrix_type": MatrixFamily.LOW_RANK.value,
                    "m": n,
                    "n": n,
                    "rank": rank_eff,
                    "trial": trial,
                    "baseline_runtime_sec": baseline_time,
                    **asdict(metrics),
                }
            )
    _write_csv(output_dir / "rsvd_size_scaling.csv", rows)
    return rows


# ============================================================================
# Experiment 3: Symmetric eigen vs SVD agreement
# ============================================================================

def run_symmetric_agreement(output_dir: Path, config: ExperimentConfig = DEFAULT_CONFIG) -> List[Dict]:
    sweep = config.rank_sweep
    logger.info("Running symmetric agreement (n=%d)", sweep.n)
    rng = np.random.default_rng(sweep.seed + 1)
    rows: List[Dict] = []

    for trial in range(sweep.num_trials):
        a = generate_matrix(MatrixFamily.SYMMETRIC_PSD, sweep.n, int(rng.integers(0, 1_000_000)))
        exact = np.linalg.eigvalsh(a)[::-1]
        for rank in sweep.ranks:
            seed = int(rng.integers(0, 1_000_000))
            eig_engine = RandomizedSymEigen(config=config.decomposition, seed=seed)
            svd_engine = RandomizedSVD(config=config.decomposition, seed=seed)

            eig, eig_timing = time_function(lambda: eig_engine.compute(a, rank))
            svd, svd_timing = time_function(lambda: svd_engine.compute_singular_values(a, rank))

            k = min(eig.rank, svd.rank)
            eig_desc = eig.eigenvalues[::-1][:k]
            rows.append(
                {
                    "algo": MethodKind.SYM_EIGEN.value,
                    "n": sweep.n,
                    "rank": rank,
                    "trial": trial,
                    "effective_rank": k,
                    "max_abs_diff": float(np.max(np.abs(eig_desc - svd.s[:k]))) if k else 0.0,
                    "eig_rel_error_top": float(abs(eig_desc[0] - exact[0]) / exact[0]) if k else float("nan"),
                    "eig_runtime_sec": eig_timing.seconds,
                    "svd_runtime_sec": svd_timing.seconds,
                }
            )
    _write_csv(output_dir / "sym_eigen_agreement.csv", rows)
    return rows


# ============================================================================
# Entry point
# ============================================================================

EXPERIMENTS: Dict[str, Callable[[Path, ExperimentConfig], List[Dict]]] = {
    "rank_sweep": run_rank_sweep,
    "size_scaling": run_size_scaling,
    "symmetric_agreement": run_symmetric_agreement,
}


def run_all(output_dir: Path | None = None, config: ExperimentConfig = DEFAULT_CONFIG) -> None:
    """Run all experiments and emit CSVs."""

    base_dir = Path("results") if output_dir is None else Path(output_dir)
    base_dir.mkdir(parents=True, exist_ok=True)

    for name, experiment in EXPERIMENTS.items():
        rows = experiment(base_dir, config)
        append_jsonl(
            base_dir / "runs.jsonl",
            {
                "experiment": name,
                "rows": len(rows),
                "ortho_threshold": config.decomposition.ortho_threshold,
            },
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Run randomized decomposition experiments")
    parser.add_argument("--output-dir", type=Path, default=Path("results"), help="Directory for CSVs")
    parser.add_argument(
        "--ortho-threshold",
        type=float,
        default=DecompositionConfig().ortho_threshold,
        help="Gram-Schmidt rank-deficiency threshold",
    )
    args = parser.parse_args()

    config = ExperimentConfig(
        families=DEFAULT_CONFIG.families,
        rank_sweep=DEFAULT_CONFIG.rank_sweep,
        size_scaling=DEFAULT_CONFIG.size_scaling,
        decomposition=DecompositionConfig(ortho_threshold=args.ortho_threshold).validate(),
    )
    run_all(args.output_dir, config)


if __name__ == "__main__":  # pragma: no cover - manual execution
    main()
