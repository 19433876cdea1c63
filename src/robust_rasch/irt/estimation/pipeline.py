"""
End-to-end estimation for one response matrix.

Fits the ordinary MMLE once and uses it to seed two independent robust
estimators (DPD and gamma-divergence). The person-fit weighted MMLE
comparison is optional.
"""

import logging

from robust_rasch.core.data_models import ResponseMatrix
from robust_rasch.irt.estimation.config import EstimationConfig
from robust_rasch.irt.estimation.data_models import RobustAnalysisResult
from robust_rasch.irt.estimation.enums import DivergenceFamily
from robust_rasch.irt.estimation.estimator import RobustEstimator
from robust_rasch.irt.estimation.mmle import MMLEEstimator
from robust_rasch.irt.estimation.person_fit import estimate_weighted_mmle

logger = logging.getLogger(__name__)


def estimate_robust_difficulties(
    data: ResponseMatrix,
    config: EstimationConfig | None = None,
    n_examinees: int | None = None,
    n_items: int | None = None,
    include_weighted: bool = False,
) -> RobustAnalysisResult:
    """
    Run MMLE, DPD and gamma-divergence estimation on the same data.

    Args:
        data: Response matrix.
        config: Estimation configuration. Uses defaults if None.
        n_examinees: Declared number of examinees, checked against the data.
        n_items: Declared number of items, checked against the data.
        include_weighted: Also compute the person-fit weighted MMLE.

    Returns:
        RobustAnalysisResult with all estimates.

    Raises:
        DataValidationError: If declared counts do not match the data.
    """
    if config is None:
        config = EstimationConfig()

    if n_examinees is not None or n_items is not None:
        data.check_dimensions(
            n_examinees if n_examinees is not None else data.n_examinees,
            n_items if n_items is not None else data.n_items,
        )

    logger.info(
        f"Estimating {data.n_items} item difficulties from "
        f"{data.n_examinees} examinees"
    )

    mmle = MMLEEstimator(config).fit(data)

    dpd = RobustEstimator(DivergenceFamily.DPD, config).fit(
        data, initial_difficulties=mmle.difficulties
    )
    gamma = RobustEstimator(DivergenceFamily.GAMMA, config).fit(
        data, initial_difficulties=mmle.difficulties
    )

    weighted_mmle = None
    if include_weighted:
        weighted_mmle = estimate_weighted_mmle(data, config, mmle=mmle)

    return RobustAnalysisResult(
        mmle=mmle,
        dpd=dpd,
        gamma=gamma,
        weighted_mmle=weighted_mmle,
    )
