"""
Configuration dataclasses for robust Rasch estimation.

This module defines the configuration parameters for:
- Quadrature settings (Gauss-Hermite integration)
- Convergence criteria for the alternating estimator and MMLE
- Parameter bounds enforced by the bounded optimizer
- Divergence hyperparameters (beta for DPD, gamma for gamma-divergence)
"""

from dataclasses import dataclass, field
from importlib import metadata

import toml

from robust_rasch.core.paths import ProjectRootNotFound, get_project_root_dir
from robust_rasch.irt.rasch import DEFAULT_SCALE_CONSTANT

DISTRIBUTION_NAME = "robust-rasch"

# Default parameter bounds
DEFAULT_DIFFICULTY_BOUNDS = (-4.0, 4.0)

# Default divergence hyperparameters
DEFAULT_DPD_BETA = 0.5
DEFAULT_GAMMA = 0.5

# Default convergence settings for the robust alternating estimator
DEFAULT_MAX_ITERATIONS = 30
DEFAULT_PARAM_TOLERANCE = 1e-4

# Default convergence settings for MMLE (EM on the marginal log-likelihood)
DEFAULT_MAX_EM_ITERATIONS = 500
DEFAULT_EM_TOLERANCE = 1e-6

# L-BFGS-B settings; tight enough that optimizer error stays well below
# DEFAULT_PARAM_TOLERANCE
DEFAULT_MAX_LBFGS_ITERATIONS = 200
DEFAULT_LBFGS_FTOL = 1e-12
DEFAULT_LBFGS_GTOL = 1e-8

# Default quadrature settings
DEFAULT_QUADRATURE_POINTS = 41


def _get_package_version() -> str:
    try:
        root_dir = get_project_root_dir()
    except ProjectRootNotFound:
        # Installed without a source checkout
        return metadata.version(DISTRIBUTION_NAME)

    with open(root_dir / "pyproject.toml") as f:
        data = toml.load(f)

    version = data.get("project", {}).get("version")

    if not version:
        raise ValueError("Version not found in pyproject.toml")

    assert isinstance(version, str)
    return version


@dataclass(frozen=True)
class QuadratureConfig:
    """
    Configuration for Gauss-Hermite quadrature.

    Attributes:
        n_points: Number of quadrature points (M).
        mean: Mean of the ability prior (typically 0).
        std: Standard deviation of the ability prior (typically 1).
    """

    n_points: int = DEFAULT_QUADRATURE_POINTS
    mean: float = 0.0
    std: float = 1.0

    def __post_init__(self) -> None:
        if self.n_points < 2:
            raise ValueError(f"n_points must be >= 2, got {self.n_points}")
        if self.std <= 0:
            raise ValueError(f"std must be > 0, got {self.std}")


@dataclass(frozen=True)
class ConvergenceConfig:
    """
    Convergence criteria.

    Attributes:
        max_iterations: Outer iteration budget of the robust estimator.
        param_tolerance: The robust estimator converges when the maximum
            absolute per-item difficulty change is below this value.
        max_em_iterations: Maximum number of EM iterations for MMLE.
        em_tolerance: MMLE stops when |LL_new - LL_old| < em_tolerance.
        max_lbfgs_iterations: Maximum iterations for L-BFGS-B in an M-step.
        lbfgs_ftol: Relative objective tolerance for L-BFGS-B.
        lbfgs_gtol: Projected gradient tolerance for L-BFGS-B.
    """

    max_iterations: int = DEFAULT_MAX_ITERATIONS
    param_tolerance: float = DEFAULT_PARAM_TOLERANCE
    max_em_iterations: int = DEFAULT_MAX_EM_ITERATIONS
    em_tolerance: float = DEFAULT_EM_TOLERANCE
    max_lbfgs_iterations: int = DEFAULT_MAX_LBFGS_ITERATIONS
    lbfgs_ftol: float = DEFAULT_LBFGS_FTOL
    lbfgs_gtol: float = DEFAULT_LBFGS_GTOL

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(
                f"max_iterations must be >= 1, got {self.max_iterations}"
            )
        if self.max_em_iterations < 1:
            raise ValueError(
                f"max_em_iterations must be >= 1, got {self.max_em_iterations}"
            )
        if self.param_tolerance <= 0:
            raise ValueError(
                f"param_tolerance must be > 0, got {self.param_tolerance}"
            )


@dataclass(frozen=True)
class ParameterBounds:
    """
    Bounds for item parameters during optimization.

    Attributes:
        difficulty: (min, max) bounds applied to every item difficulty.
    """

    difficulty: tuple[float, float] = DEFAULT_DIFFICULTY_BOUNDS

    def __post_init__(self) -> None:
        lower, upper = self.difficulty
        if not lower < upper:
            raise ValueError(
                f"difficulty bounds must satisfy lower < upper, got {self.difficulty}"
            )


@dataclass(frozen=True)
class DivergenceConfig:
    """
    Robust divergence hyperparameters. Neither is estimated.

    Attributes:
        beta: DPD tuning constant. Larger values downweight poorly fitting
            response patterns more strongly.
        gamma: gamma-divergence tuning constant.
    """

    beta: float = DEFAULT_DPD_BETA
    gamma: float = DEFAULT_GAMMA

    def __post_init__(self) -> None:
        if self.beta <= 0:
            raise ValueError(f"beta must be > 0, got {self.beta}")
        if self.gamma <= 0:
            raise ValueError(f"gamma must be > 0, got {self.gamma}")


@dataclass(frozen=True)
class EstimationConfig:
    """
    Master configuration for Rasch estimation.

    Attributes:
        quadrature: Settings for Gauss-Hermite quadrature.
        convergence: Convergence criteria.
        bounds: Parameter bounds for optimization.
        divergence: Robust divergence hyperparameters.
        scale: Scale constant D of the item characteristic curve.
        model_version: Version string for reproducibility tracking.
    """

    quadrature: QuadratureConfig = QuadratureConfig()
    convergence: ConvergenceConfig = ConvergenceConfig()
    bounds: ParameterBounds = ParameterBounds()
    divergence: DivergenceConfig = DivergenceConfig()
    scale: float = DEFAULT_SCALE_CONSTANT
    model_version: str = field(default_factory=_get_package_version)

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ValueError(f"scale must be > 0, got {self.scale}")


def default_config() -> EstimationConfig:
    """Create a default estimation configuration."""
    return EstimationConfig()
