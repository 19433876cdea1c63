from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict

from robust_rasch.irt.estimation.enums import ConvergenceStatus, DivergenceFamily


@dataclass
class EStepResult:
    """
    Results from the E-step.

    Attributes:
        posteriors: Posterior weights, shape (n_examinees, n_quadrature_points).
            posteriors[i, m] = P(theta = theta_m | responses_i, difficulties).
        log_marginals: Log marginal likelihood of each examinee's
            responses, shape (n_examinees,).
    """

    posteriors: NDArray[np.float64]
    log_marginals: NDArray[np.float64]

    @property
    def log_likelihood(self) -> float:
        """Marginal log-likelihood summed over examinees."""
        return float(np.sum(self.log_marginals))


class RobustEstimationResult(BaseModel):
    """
    Result of one robust divergence estimator run.

    Attributes:
        family: Divergence family used for the M-step objective.
        hyperparameter: beta (DPD) or gamma (gamma-divergence).
        difficulties: Estimated item difficulties, one per item.
        n_iterations: Number of outer (E-step, M-step) iterations performed.
        max_change: Maximum absolute difficulty change in the last iteration.
        convergence_status: CONVERGED or MAX_ITERATIONS.
        model_version: Version string for reproducibility tracking.
    """

    model_config = ConfigDict(frozen=True)

    family: DivergenceFamily
    hyperparameter: float
    difficulties: tuple[float, ...]
    n_iterations: int
    max_change: float
    convergence_status: ConvergenceStatus
    model_version: str

    @property
    def n_items(self) -> int:
        """Number of items in the model."""
        return len(self.difficulties)

    @property
    def converged(self) -> bool:
        """Whether the estimator reached the parameter tolerance."""
        return self.convergence_status == ConvergenceStatus.CONVERGED


class MMLEResult(BaseModel):
    """
    Result of (optionally examinee-weighted) marginal maximum likelihood.

    Attributes:
        difficulties: Estimated item difficulties, one per item.
        log_likelihood: Final (weighted) marginal log-likelihood.
        n_iterations: Number of EM iterations performed.
        convergence_status: Status indicating how estimation terminated.
        weighted: Whether examinee weights were applied.
        model_version: Version string for reproducibility tracking.
    """

    model_config = ConfigDict(frozen=True)

    difficulties: tuple[float, ...]
    log_likelihood: float
    n_iterations: int
    convergence_status: ConvergenceStatus
    weighted: bool = False
    model_version: str

    @property
    def n_items(self) -> int:
        """Number of items in the model."""
        return len(self.difficulties)

    @property
    def converged(self) -> bool:
        """Whether estimation converged successfully."""
        return self.convergence_status == ConvergenceStatus.CONVERGED


class RobustAnalysisResult(BaseModel):
    """
    All estimates produced for one response matrix.

    Attributes:
        mmle: Ordinary MMLE, also the starting point of both robust runs.
        dpd: Density power divergence estimate.
        gamma: gamma-divergence estimate.
        weighted_mmle: Person-fit weighted MMLE comparison, if requested.
    """

    model_config = ConfigDict(frozen=True)

    mmle: MMLEResult
    dpd: RobustEstimationResult
    gamma: RobustEstimationResult
    weighted_mmle: MMLEResult | None = None
