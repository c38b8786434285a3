"""Plotting utilities for the randomized decomposition experiments.

Generates figures from:
- rsvd_rank_sweep.csv
- rsvd_size_scaling.csv
- sym_eigen_agreement.csv
"""

from __future__ import annotations

import argparse
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd

from randomized_lowrank.common.config import MethodKind
from randomized_lowrank.common.logging_utils import get_logger

logger = get_logger(__name__)

# Style configuration
plt.style.use("seaborn-v0_8-whitegrid")
plt.rcParams.update({
    "font.size": 11,
    "axes.labelsize": 12,
    "axes.titlesize": 13,
    "legend.fontsize": 10,
    "lines.linewidth": 2,
    "lines.markersize": 7,
    "errorbar.capsize": 3,
})

MATRIX_TYPE_COLORS = {
    "gaussian": "#d73027",       # red (no low-rank structure)
    "low_rank": "#1a9850",       # green
    "symmetric_psd": "#3288bd",  # blue
}

ALGO_COLORS = {
    MethodKind.RSVD: "#7b3294",
    MethodKind.FULL_SVD: "#4d4d4d",
    MethodKind.SYM_EIGEN: "#3288bd",
}


def _save_figure(fig: plt.Figure, path: Path) -> None:
    """Save figure with tight layout."""

    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.info("Saved: %s", path)


# ============================================================================
# Figure 1: Error vs rank by matrix type
# ============================================================================

def plot_error_vs_rank(csv_path: Path, output_path: Path) -> None:
    """Randomized error per family, with the optimal truncated-SVD error dashed."""

    df = pd.read_csv(csv_path)
    agg = df.groupby(["matrix_type", "rank"]).agg({
        "rel_error": ["mean", "std"],
        "baseline_error": "mean",
    }).reset_index()
    agg.columns = ["matrix_type", "rank", "error_mean", "error_std", "baseline_mean"]

    fig, ax = plt.subplots(figsize=(10, 6))
    for matrix_type, subset in agg.groupby("matrix_type"):
        color = MATRIX_TYPE_COLORS.get(matrix_type, "#4d4d4d")
        ax.errorbar(
            subset["rank"], subset["error_mean"], yerr=subset["error_std"].fillna(0.0),
            marker="o", color=color, label=f"{matrix_type} (randomized)",
        )
        ax.plot(subset["rank"], subset["baseline_mean"], linestyle="--", color=color, alpha=0.6)

    ax.set_xlabel("Target Rank r")
    ax.set_ylabel("Relative Frobenius Error")
    ax.set_yscale("log")
    ax.set_title("Randomized SVD Error vs Rank\n(dashed: exact truncated SVD)")
    ax.grid(True, alpha=0.3, which="both")
    ax.legend(loc="upper right")

    _save_figure(fig, output_path)


# ============================================================================
# Figure 2: Runtime vs size
# ============================================================================

def plot_runtime_vs_size(csv_path: Path, output_path: Path) -> None:
    df = pd.read_csv(csv_path)
    agg = df.groupby("n").agg({
        "runtime_sec": ["mean", "std"],
        "baseline_runtime_sec": ["mean", "std"],
    }).reset_index()
    agg.columns = ["n", "rsvd_mean", "rsvd_std", "full_mean", "full_std"]

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.errorbar(agg["n"], agg["rsvd_mean"], yerr=agg["rsvd_std"].fillna(0.0),
                marker="o", color=ALGO_COLORS[MethodKind.RSVD], label="Randomized SVD")
    ax.errorbar(agg["n"], agg["full_mean"], yerr=agg["full_std"].fillna(0.0),
                marker="x", color=ALGO_COLORS[MethodKind.FULL_SVD], label="Full SVD")

    ax.set_xlabel("Matrix Size n")
    ax.set_ylabel("Runtime (seconds)")
    ax.set_xscale("log", base=2)
    ax.set_yscale("log")
    ax.set_title("Runtime vs Matrix Size: Randomized vs Full SVD")
    ax.grid(True, alpha=0.3, which="both")
    ax.legend(loc="upper left")

    _save_figure(fig, output_path)


# ============================================================================
# Figure 3: Symmetric eigen vs SVD agreement
# ============================================================================

def plot_symmetric_agreement(csv_path: Path, output_path: Path) -> None:
    df = pd.read_csv(csv_path)
    agg = df.groupby("rank").agg({
        "max_abs_diff": "max",
        "eig_runtime_sec": "mean",
        "svd_runtime_sec": "mean",
    }).reset_index()

    fig, (ax_diff, ax_time) = plt.subplots(1, 2, figsize=(14, 6))

    # Exact agreement would be 0 on a log axis.
    ax_diff.plot(agg["rank"], agg["max_abs_diff"].clip(lower=1e-16), marker="o", color=ALGO_COLORS[MethodKind.SYM_EIGEN])
    ax_diff.set_xlabel("Target Rank r")
    ax_diff.set_ylabel("max |eigenvalue - singular value|")
    ax_diff.set_yscale("log")
    ax_diff.set_title("Eigen vs SVD Engine on PSD Input")

    ax_time.plot(agg["rank"], agg["eig_runtime_sec"], marker="o",
                 color=ALGO_COLORS[MethodKind.SYM_EIGEN], label="Symmetric eigen (one sketch)")
    ax_time.plot(agg["rank"], agg["svd_runtime_sec"], marker="s",
                 color=ALGO_COLORS[MethodKind.RSVD], label="SVD values only (two sketches)")
    ax_time.set_xlabel("Target Rank r")
    ax_time.set_ylabel("Runtime (seconds)")
    ax_time.legend(loc="upper left")

    for ax in (ax_diff, ax_time):
        ax.grid(True, alpha=0.3, which="both")

    _save_figure(fig, output_path)


# ============================================================================
# Entrypoint
# ============================================================================

def generate_all_plots(results_dir: Path, output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)

    figures = [
        ("rsvd_rank_sweep.csv", plot_error_vs_rank, "fig1_error_vs_rank.png"),
        ("rsvd_size_scaling.csv", plot_runtime_vs_size, "fig2_runtime_vs_size.png"),
        ("sym_eigen_agreement.csv", plot_symmetric_agreement, "fig3_symmetric_agreement.png"),
    ]
    for csv_name, plot, figure_name in figures:
        csv_path = results_dir / csv_name
        if csv_path.exists():
            plot(csv_path, output_dir / figure_name)
        else:
            logger.warning("Skipping: %s not found", csv_path)


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate plots from experiment CSVs")
    parser.add_argument(
        "--results-dir",
        type=Path,
        default=Path("results"),
        help="Directory containing the experiment CSVs",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("results/figures"),
        help="Directory to save plots",
    )
    args = parser.parse_args()
    generate_all_plots(args.results_dir, args.output_dir)


if __name__ == "__main__":  # pragma: no cover - plotting entrypoint
    main()
