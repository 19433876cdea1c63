"""
Rasch (1PL) item response model.

The item characteristic curve is:
    P(U=1 | θ, b) = 1 / (1 + exp(-D * (θ - b)))

where D is a scale constant shared by all items (1.702 puts the logistic
curve on the normal-ogive metric). All functions are pure and broadcast over
numpy arrays.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import expit

DEFAULT_SCALE_CONSTANT = 1.702


def icc(
    theta: ArrayLike,
    b: ArrayLike,
    scale: float = DEFAULT_SCALE_CONSTANT,
) -> NDArray[np.float64]:
    """
    Probability of a correct response.

    Args:
        theta: Ability value(s).
        b: Item difficulty value(s), broadcast against theta.
        scale: Scale constant D.

    Returns:
        P(U=1 | θ, b) with the broadcast shape of theta and b.
    """
    z = scale * (np.asarray(theta, dtype=np.float64) - np.asarray(b))
    result: NDArray[np.float64] = expit(z)
    return result


def log_icc_pair(
    theta: NDArray[np.float64],
    difficulties: NDArray[np.float64],
    scale: float = DEFAULT_SCALE_CONSTANT,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Log probabilities of correct and incorrect responses.

    Uses log P = -log(1 + exp(-z)) and log(1 - P) = -log(1 + exp(z)) so that
    neither underflows to -inf for large |z|.

    Args:
        theta: Ability values, shape (n_theta,).
        difficulties: Item difficulties, shape (n_items,).
        scale: Scale constant D.

    Returns:
        Tuple (log_p, log_q), each of shape (n_theta, n_items).
    """
    z = scale * np.subtract.outer(theta, difficulties)
    log_p: NDArray[np.float64] = -np.logaddexp(0.0, -z)
    log_q: NDArray[np.float64] = -np.logaddexp(0.0, z)
    return log_p, log_q


def response_probability(
    u: ArrayLike,
    theta: ArrayLike,
    b: ArrayLike,
    scale: float = DEFAULT_SCALE_CONSTANT,
) -> NDArray[np.float64]:
    """Likelihood of binary outcome(s) u: P^u * (1 - P)^(1 - u)."""
    p = icc(theta, b, scale)
    result: NDArray[np.float64] = np.where(np.asarray(u) == 1, p, 1.0 - p)
    return result


def joint_row_probability(
    responses_row: ArrayLike,
    theta: float,
    difficulties: ArrayLike,
    scale: float = DEFAULT_SCALE_CONSTANT,
) -> float:
    """
    Likelihood of one examinee's full response vector at a fixed ability.

    The product over items is accumulated as a sum of logs.
    """
    row = np.asarray(responses_row)
    log_p, log_q = log_icc_pair(
        np.array([theta], dtype=np.float64),
        np.asarray(difficulties, dtype=np.float64),
        scale,
    )
    log_lik = np.where(row == 1, log_p[0], log_q[0]).sum()
    return float(np.exp(log_lik))


def item_probability_matrix(
    theta: NDArray[np.float64],
    b: float,
    scale: float = DEFAULT_SCALE_CONSTANT,
) -> NDArray[np.float64]:
    """
    Response probabilities for one item.

    Returns:
        Array of shape (n_theta, 2); column k is P(U=k | θ).
    """
    p = icc(theta, b, scale)
    return np.column_stack([1.0 - p, p])


def pattern_probability_matrix(
    theta: NDArray[np.float64],
    difficulties: NDArray[np.float64],
    pattern: ArrayLike,
    scale: float = DEFAULT_SCALE_CONSTANT,
) -> NDArray[np.float64]:
    """
    Probabilities of a fixed response pattern, item by item.

    Returns:
        Array of shape (n_theta, n_items); entry [t, j] is
        P(U_j = pattern[j] | theta[t], b_j).
    """
    p = icc(theta[:, np.newaxis], difficulties[np.newaxis, :], scale)
    result: NDArray[np.float64] = np.where(
        np.asarray(pattern)[np.newaxis, :] == 1, p, 1.0 - p
    )
    return result


def node_log_likelihoods(
    indicators: NDArray[np.float64],
    difficulties: NDArray[np.float64],
    theta: NDArray[np.float64],
    scale: float = DEFAULT_SCALE_CONSTANT,
) -> NDArray[np.float64]:
    """
    Total log-likelihood of each examinee's responses at each ability node.

    Args:
        indicators: Indicator tensor, shape (n_examinees, n_items, 2).
        difficulties: Item difficulties, shape (n_items,).
        theta: Ability nodes, shape (n_nodes,).
        scale: Scale constant D.

    Returns:
        Array of shape (n_examinees, n_nodes); entry [i, m] is
        Σ_j log P(u_ij | theta_m, b_j).
    """
    log_p, log_q = log_icc_pair(theta, difficulties, scale)
    return sum_log_likelihoods(indicators, log_p, log_q)


def sum_log_likelihoods(
    indicators: NDArray[np.float64],
    log_p: NDArray[np.float64],
    log_q: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Contract the indicator tensor with (n_nodes, n_items) log probabilities."""
    # Shape: (n_nodes, n_items, 2), last axis ordered by response value
    log_probs = np.stack([log_q, log_p], axis=-1)

    result: NDArray[np.float64] = np.einsum(
        "ijk,mjk->im", indicators, log_probs
    )
    return result
