"""
Robust Rasch estimator: alternating E-step / robust M-step.

Implements the Density Power Divergence and gamma-divergence estimators of
item difficulties. Each iteration refreshes the posterior over ability nodes
for the current difficulties, then minimizes the robust divergence objective
over the difficulty vector with L-BFGS-B inside fixed box constraints.
"""

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.optimize import minimize

from robust_rasch.core.data_models import ResponseMatrix
from robust_rasch.irt.estimation.config import EstimationConfig
from robust_rasch.irt.estimation.data_models import RobustEstimationResult
from robust_rasch.irt.estimation.enums import ConvergenceStatus, DivergenceFamily
from robust_rasch.irt.estimation.mmle import MMLEEstimator
from robust_rasch.irt.estimation.objectives import get_objective
from robust_rasch.irt.estimation.posterior import compute_posterior
from robust_rasch.irt.estimation.quadrature import (
    GaussHermiteQuadrature,
    get_quadrature,
)

logger = logging.getLogger(__name__)


class RobustEstimator:
    """
    Divergence-based robust estimator of Rasch item difficulties.

    The estimator only ever holds its configuration and quadrature. The
    difficulty vector lives in fit(); the E-step and M-step take it as an
    argument and return new arrays.

    Termination:
        - CONVERGED when max_j |b_new - b_old| < param_tolerance
        - MAX_ITERATIONS after max_iterations outer iterations (not an
          error, the last vector is returned)
    """

    def __init__(
        self,
        family: DivergenceFamily,
        config: EstimationConfig | None = None,
    ):
        """Initialize robust estimator for one divergence family."""
        self.family = DivergenceFamily(family)
        self.config = config or EstimationConfig()
        self._quadrature = get_quadrature(self.config.quadrature)
        self._objective, self._gradient = get_objective(self.family)

    @property
    def quadrature(self) -> GaussHermiteQuadrature:
        """Access quadrature points and weights."""
        return self._quadrature

    @property
    def hyperparameter(self) -> float:
        """beta for DPD, gamma for gamma-divergence."""
        if self.family == DivergenceFamily.DPD:
            return self.config.divergence.beta
        return self.config.divergence.gamma

    def fit(
        self,
        data: ResponseMatrix,
        initial_difficulties: ArrayLike | None = None,
    ) -> RobustEstimationResult:
        """
        Fit item difficulties by alternating E-step and robust M-step.

        Args:
            data: Response matrix.
            initial_difficulties: Starting difficulties, shape (n_items,).
                If None, the ordinary MMLE estimate is used. Values are
                clipped to the configured bounds.

        Returns:
            RobustEstimationResult with the final difficulties and status.
        """
        difficulties = self._initialize(data, initial_difficulties)
        tolerance = self.config.convergence.param_tolerance
        max_iterations = self.config.convergence.max_iterations

        convergence_status = ConvergenceStatus.MAX_ITERATIONS
        max_change = np.inf
        n_iterations = 0

        for iteration in range(max_iterations):
            n_iterations = iteration + 1

            e_result = compute_posterior(
                data, difficulties, self._quadrature, self.config.scale
            )
            updated = self.m_step(data, e_result.posteriors, difficulties)

            max_change = float(np.max(np.abs(updated - difficulties)))
            difficulties = updated

            logger.debug(
                f"{self.family.value} iteration {n_iterations}: "
                f"max |Δb| = {max_change:.2e}"
            )

            if max_change < tolerance:
                convergence_status = ConvergenceStatus.CONVERGED
                break

        logger.info(
            f"{self.family.value} estimator finished: "
            f"{convergence_status.value} after {n_iterations} iterations "
            f"(max |Δb| = {max_change:.2e})"
        )

        return RobustEstimationResult(
            family=self.family,
            hyperparameter=self.hyperparameter,
            difficulties=tuple(float(b) for b in difficulties),
            n_iterations=n_iterations,
            max_change=max_change,
            convergence_status=convergence_status,
            model_version=self.config.model_version,
        )

    def m_step(
        self,
        data: ResponseMatrix,
        posteriors: NDArray[np.float64],
        current: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """
        M-step: minimize the robust divergence objective.

        The optimizer's own non-convergence is logged and otherwise ignored;
        whatever point it returns becomes the next candidate.

        Args:
            data: Response matrix.
            posteriors: Posterior weights from the E-step,
                shape (n_examinees, n_points).
            current: Current difficulties, used as the starting point.

        Returns:
            New difficulties within the configured bounds.
        """
        bounds = [self.config.bounds.difficulty] * data.n_items
        x0 = np.clip(current, *self.config.bounds.difficulty)

        result = minimize(
            fun=self._objective,
            x0=x0,
            args=(
                self._quadrature.points,
                self._quadrature.weights,
                posteriors,
                data.indicator_tensor,
                data.responses.astype(np.float64),
                self.config.scale,
                self.hyperparameter,
            ),
            method="L-BFGS-B",
            jac=self._gradient,
            bounds=bounds,
            options={
                "maxiter": self.config.convergence.max_lbfgs_iterations,
                "ftol": self.config.convergence.lbfgs_ftol,
                "gtol": self.config.convergence.lbfgs_gtol,
            },
        )

        if not result.success:
            logger.debug(
                f"{self.family.value} M-step optimizer stopped: {result.message}"
            )

        return np.clip(result.x, *self.config.bounds.difficulty)

    def _initialize(
        self,
        data: ResponseMatrix,
        initial_difficulties: ArrayLike | None,
    ) -> NDArray[np.float64]:
        """
        Starting difficulties, clipped to the bounds.

        Raises:
            ValueError: If the provided vector does not have one entry per item.
        """
        if initial_difficulties is None:
            mmle = MMLEEstimator(self.config).fit(data)
            initial_difficulties = mmle.difficulties

        initial = np.asarray(initial_difficulties, dtype=np.float64)
        if initial.shape != (data.n_items,):
            raise ValueError(
                f"initial_difficulties must have shape ({data.n_items},), "
                f"got {initial.shape}"
            )
        return np.clip(initial, *self.config.bounds.difficulty)
