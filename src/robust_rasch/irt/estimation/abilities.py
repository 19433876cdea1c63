"""
Ability estimation for the Rasch model.

This module provides Expected A Posteriori (EAP) ability estimation from the
same posterior weights the E-step computes.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from robust_rasch.core.data_models import ResponseMatrix
from robust_rasch.irt.estimation.config import EstimationConfig
from robust_rasch.irt.estimation.posterior import compute_posterior
from robust_rasch.irt.estimation.quadrature import get_quadrature


@dataclass(frozen=True)
class AbilityEstimates:
    """
    Ability estimates for examinees.

    Attributes:
        eap: Expected A Posteriori (posterior mean) estimates, shape (n_examinees,).
        se: Standard errors (posterior standard deviation), shape (n_examinees,).
    """

    eap: NDArray[np.float64]
    se: NDArray[np.float64]

    @property
    def n_examinees(self) -> int:
        """Number of examinees."""
        return len(self.eap)


def estimate_abilities(
    data: ResponseMatrix,
    difficulties: ArrayLike,
    config: EstimationConfig | None = None,
) -> AbilityEstimates:
    """
    Estimate abilities using Expected A Posteriori (EAP) method.

    EAP estimates are the posterior mean of ability given the responses
    and item difficulties:
        θ_EAP = E[θ | responses] = Σ_m θ_m * P(θ_m | responses)

    Standard errors are the posterior standard deviation:
        SE = sqrt(E[θ² | responses] - (E[θ | responses])²)

    Args:
        data: Response matrix.
        difficulties: Item difficulties, shape (n_items,).
        config: Estimation configuration. Uses defaults if None.

    Returns:
        AbilityEstimates with EAP estimates and standard errors.
    """
    if config is None:
        config = EstimationConfig()

    quadrature = get_quadrature(config.quadrature)

    posteriors = compute_posterior(
        data,
        np.asarray(difficulties, dtype=np.float64),
        quadrature,
        config.scale,
    ).posteriors

    eap, variance = quadrature.posterior_moments(posteriors)
    se = np.sqrt(variance)

    return AbilityEstimates(eap=eap, se=se)
