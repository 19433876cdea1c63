"""
Rasch estimator using MML-EM.

Implements ordinary marginal maximum likelihood for item difficulties, the
starting point of both robust estimators, and its examinee-weighted variant
used by the person-fit comparison path.
"""

import logging

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import minimize

from robust_rasch.core.data_models import ResponseMatrix
from robust_rasch.irt.estimation.config import EstimationConfig
from robust_rasch.irt.estimation.data_models import EStepResult, MMLEResult
from robust_rasch.irt.estimation.enums import ConvergenceStatus
from robust_rasch.irt.estimation.objectives import weighted_score
from robust_rasch.irt.estimation.posterior import compute_posterior
from robust_rasch.irt.estimation.quadrature import (
    GaussHermiteQuadrature,
    get_quadrature,
)
from robust_rasch.irt.rasch import log_icc_pair, sum_log_likelihoods

logger = logging.getLogger(__name__)


def starting_difficulties(
    data: ResponseMatrix,
    scale: float,
    bounds: tuple[float, float],
    add_constant: float = 0.5,
) -> NDArray[np.float64]:
    """
    Data-driven starting difficulties from smoothed proportions correct.

    b_j = -logit(p_j) / D, with additive smoothing so that items answered
    all right or all wrong stay finite.

    Args:
        data: Response matrix.
        scale: Scale constant D.
        bounds: (min, max) difficulty bounds; the result is clipped to them.
        add_constant: Additive smoothing constant.

    Returns:
        Array of shape (n_items,).
    """
    n_correct = data.responses.sum(axis=0, dtype=np.float64)
    smoothed = (n_correct + add_constant) / (
        data.n_examinees + 2.0 * add_constant
    )
    log_odds = np.log(smoothed) - np.log1p(-smoothed)
    return np.clip(-log_odds / scale, *bounds)


def negative_expected_log_likelihood(
    params: NDArray[np.float64],
    theta: NDArray[np.float64],
    weighted_posteriors: NDArray[np.float64],
    indicators: NDArray[np.float64],
    responses: NDArray[np.float64],
    scale: float,
) -> float:
    """
    Negative expected complete-data log-likelihood.

    -Σ_i Σ_m v_i G1[i, m] Σ_j log P(u_ij | θ_m, b_j), where the examinee
    weights v_i are already folded into weighted_posteriors.
    """
    log_p, log_q = log_icc_pair(theta, params, scale)
    term_sum = sum_log_likelihoods(indicators, log_p, log_q)
    return float(-np.sum(weighted_posteriors * term_sum))


def negative_expected_log_likelihood_gradient(
    params: NDArray[np.float64],
    theta: NDArray[np.float64],
    weighted_posteriors: NDArray[np.float64],
    indicators: NDArray[np.float64],
    responses: NDArray[np.float64],
    scale: float,
) -> NDArray[np.float64]:
    """Gradient of negative_expected_log_likelihood."""
    log_p, _ = log_icc_pair(theta, params, scale)
    result: NDArray[np.float64] = scale * weighted_score(
        weighted_posteriors, responses, log_p
    )
    return result


class MMLEEstimator:
    """
    Rasch difficulty estimator using MML-EM.

    The E-step computes posteriors over the quadrature nodes; the M-step
    maximizes the (optionally examinee-weighted) expected complete-data
    log-likelihood over all difficulties jointly with L-BFGS-B and an
    analytical gradient. EM stops on the absolute change of the marginal
    log-likelihood.
    """

    def __init__(self, config: EstimationConfig | None = None):
        """Initialize MMLE estimator."""
        self.config = config or EstimationConfig()
        self._quadrature = get_quadrature(self.config.quadrature)

    @property
    def quadrature(self) -> GaussHermiteQuadrature:
        """Access quadrature points and weights."""
        return self._quadrature

    def _check_convergence(self, current_ll: float, prev_ll: float) -> bool:
        """
        Check if EM has converged based on log-likelihood change.

        Args:
            current_ll: Current log-likelihood.
            prev_ll: Previous log-likelihood.

        Returns:
            True if converged.
        """
        if prev_ll == -np.inf:
            return False

        abs_change = abs(current_ll - prev_ll)
        return bool(abs_change < self.config.convergence.em_tolerance)

    def _e_step(
        self,
        data: ResponseMatrix,
        difficulties: NDArray[np.float64],
    ) -> EStepResult:
        return compute_posterior(
            data, difficulties, self._quadrature, self.config.scale
        )

    def fit(
        self,
        data: ResponseMatrix,
        examinee_weights: NDArray[np.float64] | None = None,
    ) -> MMLEResult:
        """
        Fit item difficulties by marginal maximum likelihood.

        Args:
            data: Response matrix.
            examinee_weights: Optional non-negative weight per examinee,
                shape (n_examinees,). Each examinee's log-likelihood
                contribution is multiplied by its weight.

        Returns:
            MMLEResult with estimated difficulties and fit statistics.

        Raises:
            PosteriorUnderflowError: If an E-step normalizer is not finite.
        """
        if examinee_weights is None:
            weights = np.ones(data.n_examinees, dtype=np.float64)
        else:
            weights = np.asarray(examinee_weights, dtype=np.float64)
            if weights.shape != (data.n_examinees,):
                raise ValueError(
                    f"examinee_weights must have shape ({data.n_examinees},), "
                    f"got {weights.shape}"
                )
            if (weights < 0).any():
                raise ValueError("examinee_weights must be non-negative")

        difficulties = starting_difficulties(
            data, self.config.scale, self.config.bounds.difficulty
        )

        prev_ll = -np.inf
        log_likelihood = -np.inf
        convergence_status = ConvergenceStatus.MAX_ITERATIONS
        max_iterations = self.config.convergence.max_em_iterations
        n_iterations = max_iterations

        for iteration in range(max_iterations):
            e_result = self._e_step(data, difficulties)
            log_likelihood = float(weights @ e_result.log_marginals)
            logger.debug(
                f"MMLE iteration {iteration + 1}: LL = {log_likelihood:.4f}"
            )

            if self._check_convergence(log_likelihood, prev_ll):
                convergence_status = ConvergenceStatus.CONVERGED
                n_iterations = iteration + 1
                break

            prev_ll = log_likelihood
            # Dividing by I keeps the M-step objective on a per-examinee scale
            per_examinee = weights / data.n_examinees
            difficulties = self._m_step(
                data,
                e_result.posteriors * per_examinee[:, np.newaxis],
                difficulties,
            )

        logger.info(
            f"MMLE finished: {convergence_status.value} "
            f"after {n_iterations} iterations (LL = {log_likelihood:.4f})"
        )

        return MMLEResult(
            difficulties=tuple(float(b) for b in difficulties),
            log_likelihood=log_likelihood,
            n_iterations=n_iterations,
            convergence_status=convergence_status,
            weighted=examinee_weights is not None,
            model_version=self.config.model_version,
        )

    def _m_step(
        self,
        data: ResponseMatrix,
        weighted_posteriors: NDArray[np.float64],
        current: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """
        M-step: maximize the expected log-likelihood given posteriors.

        Args:
            data: Response matrix.
            weighted_posteriors: Posteriors scaled by examinee weights.
            current: Current difficulties, used as the starting point.

        Returns:
            Updated difficulties.
        """
        bounds = [self.config.bounds.difficulty] * data.n_items

        result = minimize(
            fun=negative_expected_log_likelihood,
            x0=current,
            args=(
                self._quadrature.points,
                weighted_posteriors,
                data.indicator_tensor,
                data.responses.astype(np.float64),
                self.config.scale,
            ),
            method="L-BFGS-B",
            jac=negative_expected_log_likelihood_gradient,
            bounds=bounds,
            options={
                "maxiter": self.config.convergence.max_lbfgs_iterations,
                "ftol": self.config.convergence.lbfgs_ftol,
                "gtol": self.config.convergence.lbfgs_gtol,
            },
        )

        if not result.success:
            logger.debug(f"MMLE M-step optimizer stopped: {result.message}")

        return np.clip(result.x, *self.config.bounds.difficulty)
