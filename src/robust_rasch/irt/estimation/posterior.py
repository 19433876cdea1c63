"""
E-step: posterior weights over ability quadrature nodes.

For each examinee i and node m:
    G1[i, m] = w_m * P(u_i | theta_m, b) / Σ_m' w_m' * P(u_i | theta_m', b)

The quadrature weight acts as the prior mass of the node and the product
over items as the likelihood. Everything is computed in the log domain.
"""

import numpy as np
from numpy.typing import NDArray

from robust_rasch.core.data_models import ResponseMatrix
from robust_rasch.core.errors import PosteriorUnderflowError
from robust_rasch.core.numerics import rowwise_logsumexp
from robust_rasch.irt.estimation.data_models import EStepResult
from robust_rasch.irt.estimation.quadrature import GaussHermiteQuadrature
from robust_rasch.irt.rasch import DEFAULT_SCALE_CONSTANT, node_log_likelihoods


def compute_posterior(
    data: ResponseMatrix,
    difficulties: NDArray[np.float64],
    quadrature: GaussHermiteQuadrature,
    scale: float = DEFAULT_SCALE_CONSTANT,
) -> EStepResult:
    """
    Compute the posterior distribution over abilities for every examinee.

    Args:
        data: Response matrix.
        difficulties: Current item difficulties, shape (n_items,).
        quadrature: Ability nodes and prior weights.
        scale: Scale constant D.

    Returns:
        EStepResult with posteriors of shape (n_examinees, n_points), each
        row summing to 1, and per-examinee log marginal likelihoods.

    Raises:
        PosteriorUnderflowError: If some examinee's normalizing constant is
            not finite (every node has zero joint probability).
    """
    # Shape: (n_examinees, n_points)
    log_joint = node_log_likelihoods(
        data.indicator_tensor, difficulties, quadrature.points, scale
    )
    log_joint += quadrature.log_weights[np.newaxis, :]

    log_marginals = rowwise_logsumexp(log_joint)

    not_finite = ~np.isfinite(log_marginals)
    if not_finite.any():
        raise PosteriorUnderflowError(int(np.flatnonzero(not_finite)[0]))

    posteriors = np.exp(log_joint - log_marginals[:, np.newaxis])

    return EStepResult(posteriors=posteriors, log_marginals=log_marginals)
