"""Smoke test: experiment CSVs turn into figures."""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

from randomized_lowrank.common.config import (  # noqa: E402
    ExperimentConfig,
    MatrixFamily,
    RsvdSweepConfig,
    SizeScalingConfig,
)
from randomized_lowrank.plots.plot_rsvd import generate_all_plots  # noqa: E402
from randomized_lowrank.rsvd.experiments import run_all  # noqa: E402


def test_generate_all_plots(tmp_path) -> None:
    config = ExperimentConfig(
        families=[MatrixFamily.GAUSSIAN, MatrixFamily.LOW_RANK],
        rank_sweep=RsvdSweepConfig(ranks=[2, 4], n=16, num_trials=2, seed=0),
        size_scaling=SizeScalingConfig(sizes=[8, 16], rank=2, num_trials=2, seed=1),
    )
    run_all(tmp_path, config)

    figures = tmp_path / "figures"
    generate_all_plots(tmp_path, figures)

    assert sorted(p.name for p in figures.glob("*.png")) == [
        "fig1_error_vs_rank.png",
        "fig2_runtime_vs_size.png",
        "fig3_symmetric_agreement.png",
    ]


def test_missing_csvs_are_skipped(tmp_path) -> None:
    generate_all_plots(tmp_path, tmp_path / "figures")
    assert list((tmp_path / "figures").glob("*.png")) == []
