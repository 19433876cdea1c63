"""
Response sampling for the Rasch model.

This module provides functions to simulate binary responses from known
abilities and difficulties, and to contaminate a response matrix with
aberrant (fully reversed) response patterns.
"""

import numpy as np
from numpy.random import Generator
from numpy.typing import NDArray

from robust_rasch.core.utils import get_rng
from robust_rasch.irt.rasch import DEFAULT_SCALE_CONSTANT, icc


def sample_rasch_responses(
    abilities: NDArray[np.float64],
    difficulties: NDArray[np.float64],
    scale: float = DEFAULT_SCALE_CONSTANT,
    rng: Generator | None = None,
) -> NDArray[np.int8]:
    """
    Sample responses for all examinees and items.

    Args:
        abilities: Array of shape (n_examinees,) with ability values.
        difficulties: Array of shape (n_items,) with item difficulties.
        scale: Scale constant D.
        rng: Random number generator.

    Returns:
        Array of shape (n_examinees, n_items) with 0/1 responses.
    """
    if rng is None:
        rng = get_rng()

    probs = icc(abilities[:, np.newaxis], difficulties[np.newaxis, :], scale)
    u = rng.random(probs.shape)
    return (u < probs).astype(np.int8)


def reverse_response_patterns(
    responses: NDArray[np.int8],
    fraction: float,
    rng: Generator,
) -> tuple[NDArray[np.int8], NDArray[np.int64]]:
    """
    Flip every response of a random subset of examinees.

    Args:
        responses: Response matrix of shape (n_examinees, n_items).
        fraction: Share of examinees to reverse, in [0, 1].
        rng: Random number generator for reproducibility.

    Returns:
        Tuple of (modified responses array, sorted indices of the
        reversed examinees). The input array is not mutated.

    Raises:
        ValueError: If fraction is outside [0, 1].
    """
    if not (0.0 <= fraction <= 1.0):
        raise ValueError(f"fraction must be in [0, 1], got {fraction}")

    n_examinees = responses.shape[0]
    n_reversed = int(round(fraction * n_examinees))

    reversed_indices = np.sort(
        rng.choice(n_examinees, size=n_reversed, replace=False)
    ).astype(np.int64)

    # Copy to avoid mutating the caller's array
    new_responses = responses.astype(np.int8, copy=True)
    new_responses[reversed_indices] = 1 - new_responses[reversed_indices]

    return new_responses, reversed_indices
