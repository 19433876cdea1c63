"""
Discrete ability grid for marginalizing over the N(mean, std^2) prior.

The same nodes and weights serve three purposes: the prior mass of each node
in the E-step, the normalizing integral Σ_m w_m Π_j (P^(1+c) + Q^(1+c)) in the
robust objectives, and posterior moments for EAP abilities.
"""

from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from numpy.typing import NDArray
from scipy.special import roots_hermitenorm

from robust_rasch.irt.estimation.config import QuadratureConfig


@dataclass(frozen=True)
class GaussHermiteQuadrature:
    """
    Ability nodes with prior probability weights.

    Attributes:
        points: Ability nodes theta_m, shape (n_points,).
        weights: Prior mass w_m of each node, shape (n_points,), summing to 1.
    """

    points: NDArray[np.float64]
    weights: NDArray[np.float64]

    @property
    def n_points(self) -> int:
        return len(self.points)

    @property
    def log_weights(self) -> NDArray[np.float64]:
        """Log prior mass; zero weights map to -inf."""
        with np.errstate(divide="ignore"):
            result: NDArray[np.float64] = np.log(self.weights)
        return result

    def posterior_moments(
        self, posteriors: NDArray[np.float64]
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """
        Mean and variance of ability under each row of posterior weights.

        Args:
            posteriors: Shape (n_examinees, n_points), rows summing to 1.

        Returns:
            Tuple (mean, variance), each of shape (n_examinees,). The
            variance is floored at zero.
        """
        mean = posteriors @ self.points
        variance = np.maximum(posteriors @ self.points**2 - mean**2, 0.0)
        return mean, variance


@lru_cache(maxsize=8)
def get_quadrature(config: QuadratureConfig) -> GaussHermiteQuadrature:
    """
    Build the ability grid for a quadrature configuration.

    Nodes are the roots of the probabilists' Hermite polynomial, which
    integrate against exp(-x^2 / 2) directly, shifted and scaled to
    N(mean, std^2). Results are cached per configuration and the arrays are
    read-only.
    """
    nodes, raw_weights = roots_hermitenorm(config.n_points)

    points = (config.mean + config.std * nodes).astype(np.float64)
    weights = (raw_weights / raw_weights.sum()).astype(np.float64)
    points.setflags(write=False)
    weights.setflags(write=False)

    return GaussHermiteQuadrature(points=points, weights=weights)
