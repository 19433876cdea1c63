"""
Core shared types and utilities.

This module provides the validated response data, the numeric kernels used by
estimation, and the exceptions shared across the package.
"""

from robust_rasch.core.data_models import ResponseMatrix
from robust_rasch.core.errors import DataValidationError, PosteriorUnderflowError
from robust_rasch.core.utils import get_rng

__all__ = [
    "DataValidationError",
    "PosteriorUnderflowError",
    "ResponseMatrix",
    "get_rng",
]
