"""Configuration dataclasses for decompositions and experiments.

These provide typed containers so that the engines, the experiment runner and
the plotting scripts share a common schema.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List

from randomized_lowrank.common.errors import ConfigurationError

# Columns whose norm drops below this after projection end the orthonormal
# basis. Appropriate for float64 data of roughly unit scale.
DEFAULT_ORTHO_THRESHOLD = 1e-4


class MatrixFamily(str, Enum):
    """Synthetic matrix families used by the experiments."""

    GAUSSIAN = "gaussian"
    LOW_RANK = "low_rank"
    SYMMETRIC_PSD = "symmetric_psd"


class MethodKind(str, Enum):
    """Decomposition methods compared in the experiments."""

    RSVD = "rsvd"
    SYM_EIGEN = "sym_eigen"
    FULL_SVD = "full_svd"


@dataclass
class DecompositionConfig:
    """Numerical settings shared by every randomized engine.

    Attributes
    ----------
    ortho_threshold : float
        Rank-deficiency threshold of the Gram-Schmidt orthonormalizer. The
        right value depends on the scale and precision of the data.
    """

    ortho_threshold: float = DEFAULT_ORTHO_THRESHOLD

    def validate(self) -> "DecompositionConfig":
        """Raise ``ConfigurationError`` if any setting is unusable."""

        if not math.isfinite(self.ortho_threshold) or self.ortho_threshold <= 0.0:
            raise ConfigurationError(
                f"ortho_threshold must be a positive finite number, got {self.ortho_threshold!r}"
            )
        return self


@dataclass
class RsvdSweepConfig:
    """Configuration parameters for the rank-sweep experiment."""

    ranks: List[int]
    n: int
    num_trials: int
    seed: int


@dataclass
class SizeScalingConfig:
    """Configuration parameters for the size-scaling experiment."""

    sizes: List[int]
    rank: int
    num_trials: int
    seed: int


@dataclass
class ExperimentConfig:
    """Top-level configuration for a single experiment suite."""

    families: List[MatrixFamily]
    rank_sweep: RsvdSweepConfig
    size_scaling: SizeScalingConfig
    decomposition: DecompositionConfig = field(default_factory=DecompositionConfig)
