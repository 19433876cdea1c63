"""
Person-fit weighting for the weighted MMLE comparison estimator.

The standardized log-likelihood statistic (Drasgow, Levine & Williams, 1985)
for examinee i at ability θ_i is

    l0  = Σ_j [u_ij log P_ij + (1 - u_ij) log Q_ij]
    E   = Σ_j [P_ij log P_ij + Q_ij log Q_ij]
    V   = Σ_j P_ij Q_ij (log(P_ij / Q_ij))²
    l_z = (l0 - E) / sqrt(V)

Large negative l_z flags aberrant response patterns. Weights Φ(l_z),
rescaled to sum to the number of examinees, shrink their influence in a
weighted MMLE fit.
"""

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.stats import norm

from robust_rasch.core.data_models import ResponseMatrix
from robust_rasch.irt.estimation.abilities import estimate_abilities
from robust_rasch.irt.estimation.config import EstimationConfig
from robust_rasch.irt.estimation.data_models import MMLEResult
from robust_rasch.irt.estimation.mmle import MMLEEstimator
from robust_rasch.irt.rasch import DEFAULT_SCALE_CONSTANT, icc

logger = logging.getLogger(__name__)

# Floor on V; only reached when every P_ij is 0.5 or saturated
MIN_LZ_VARIANCE = 1e-12


def compute_lz(
    data: ResponseMatrix,
    difficulties: ArrayLike,
    abilities: NDArray[np.float64],
    scale: float = DEFAULT_SCALE_CONSTANT,
) -> NDArray[np.float64]:
    """
    Standardized log-likelihood person-fit statistic.

    Args:
        data: Response matrix.
        difficulties: Item difficulties, shape (n_items,).
        abilities: Ability estimate per examinee, shape (n_examinees,).
        scale: Scale constant D.

    Returns:
        l_z per examinee, shape (n_examinees,).
    """
    b = np.asarray(difficulties, dtype=np.float64)
    u = data.responses.astype(np.float64)

    p = icc(abilities[:, np.newaxis], b[np.newaxis, :], scale)
    q = 1.0 - p
    log_p = np.log(np.clip(p, 1e-300, None))
    log_q = np.log(np.clip(q, 1e-300, None))

    observed = np.sum(u * log_p + (1.0 - u) * log_q, axis=1)
    expected = np.sum(p * log_p + q * log_q, axis=1)
    variance = np.sum(p * q * (log_p - log_q) ** 2, axis=1)

    result: NDArray[np.float64] = (observed - expected) / np.sqrt(
        np.maximum(variance, MIN_LZ_VARIANCE)
    )
    return result


def person_fit_weights(lz: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Map l_z to examinee weights Φ(l_z), normalized to sum to n_examinees.
    """
    raw = norm.cdf(lz)
    result: NDArray[np.float64] = raw * (len(lz) / raw.sum())
    return result


def estimate_weighted_mmle(
    data: ResponseMatrix,
    config: EstimationConfig | None = None,
    mmle: MMLEResult | None = None,
) -> MMLEResult:
    """
    Weighted MMLE comparison estimate.

    Fits (or reuses) an ordinary MMLE, computes EAP abilities and l_z under
    it, converts l_z to weights and refits with those weights.

    Args:
        data: Response matrix.
        config: Estimation configuration. Uses defaults if None.
        mmle: Previously fitted ordinary MMLE to reuse.

    Returns:
        MMLEResult with weighted=True.
    """
    if config is None:
        config = EstimationConfig()

    estimator = MMLEEstimator(config)
    if mmle is None:
        mmle = estimator.fit(data)

    abilities = estimate_abilities(data, mmle.difficulties, config)
    lz = compute_lz(data, mmle.difficulties, abilities.eap, config.scale)
    weights = person_fit_weights(lz)

    logger.info(
        f"Person fit: {int(np.sum(lz < norm.ppf(0.05)))} of "
        f"{data.n_examinees} examinees below the 5% l_z cutoff"
    )

    return estimator.fit(data, examinee_weights=weights)
