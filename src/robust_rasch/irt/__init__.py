"""
IRT (Item Response Theory) module.

This module provides:
- The Rasch item characteristic curve and derived probability matrices
- Sampling functions for generating and contaminating responses
- Robust (DPD, gamma-divergence) and MMLE estimation of item difficulties
"""

from robust_rasch.irt.estimation.enums import ConvergenceStatus, DivergenceFamily
from robust_rasch.irt.estimation.estimator import RobustEstimator
from robust_rasch.irt.estimation.mmle import MMLEEstimator
from robust_rasch.irt.estimation.pipeline import estimate_robust_difficulties
from robust_rasch.irt.rasch import icc
from robust_rasch.irt.sampling import (
    reverse_response_patterns,
    sample_rasch_responses,
)

__all__ = [
    "ConvergenceStatus",
    "DivergenceFamily",
    "MMLEEstimator",
    "RobustEstimator",
    "estimate_robust_difficulties",
    "icc",
    "reverse_response_patterns",
    "sample_rasch_responses",
]
