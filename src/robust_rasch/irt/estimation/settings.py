from pydantic_settings import BaseSettings

from robust_rasch.irt.estimation.config import (
    DEFAULT_DIFFICULTY_BOUNDS,
    DEFAULT_DPD_BETA,
    DEFAULT_GAMMA,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_PARAM_TOLERANCE,
    DEFAULT_QUADRATURE_POINTS,
    ConvergenceConfig,
    DivergenceConfig,
    EstimationConfig,
    ParameterBounds,
    QuadratureConfig,
)
from robust_rasch.irt.rasch import DEFAULT_SCALE_CONSTANT

ROBUST_RASCH_ENV_PREFIX = "ROBUST_RASCH_"


class EstimatorSettings(BaseSettings):
    model_config = {"env_prefix": ROBUST_RASCH_ENV_PREFIX}

    beta: float = DEFAULT_DPD_BETA
    gamma: float = DEFAULT_GAMMA
    scale: float = DEFAULT_SCALE_CONSTANT
    quadrature_points: int = DEFAULT_QUADRATURE_POINTS
    tolerance: float = DEFAULT_PARAM_TOLERANCE
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    lower_bound: float = DEFAULT_DIFFICULTY_BOUNDS[0]
    upper_bound: float = DEFAULT_DIFFICULTY_BOUNDS[1]

    def to_config(self) -> EstimationConfig:
        """Build the estimation configuration these settings describe."""
        return EstimationConfig(
            quadrature=QuadratureConfig(n_points=self.quadrature_points),
            convergence=ConvergenceConfig(
                max_iterations=self.max_iterations,
                param_tolerance=self.tolerance,
            ),
            bounds=ParameterBounds(
                difficulty=(self.lower_bound, self.upper_bound)
            ),
            divergence=DivergenceConfig(beta=self.beta, gamma=self.gamma),
            scale=self.scale,
        )
