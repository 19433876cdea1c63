"""
Robust M-step objectives and their analytical gradients.

Both objectives are functions of the candidate difficulty vector b for fixed
posterior weights G1 (n_examinees x n_nodes). With

    l[i, m] = Σ_j log P(u_ij | θ_m, b_j)                  (termSum)
    s[m]    = Σ_j log(P_mj^(1+c) + Q_mj^(1+c))            (log of Π_j)

the Density Power Divergence (DPD) objective with c = β is

    term1 = Σ_i Σ_m exp(β l[i, m]) G1[i, m] / (I β)
    term2 = Σ_m w_m exp(s[m]) / (1 + β)
    value = term2 - term1

and the gamma-divergence objective with c = γ is

    term1 = log(Σ_i Σ_m exp(γ l[i, m]) G1[i, m] / I) / γ
    term2 = log(Σ_m w_m exp(s[m])) / (1 + γ)
    value = term2 - term1

Gradients use ∂ log P(u | θ, b) / ∂b = -D (u - P) and
∂(P^(1+c) + Q^(1+c)) / ∂b = -(1+c) D P Q (P^c - Q^c).
"""

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy.special import logsumexp

from robust_rasch.core.numerics import log_sum_of_powers
from robust_rasch.irt.estimation.enums import DivergenceFamily
from robust_rasch.irt.rasch import log_icc_pair, sum_log_likelihoods

ObjectiveFn = Callable[..., float]
GradientFn = Callable[..., NDArray[np.float64]]


@dataclass(frozen=True)
class _NodeTerms:
    """Intermediate quantities shared by objective values and gradients."""

    log_p: NDArray[np.float64]  # (n_nodes, n_items)
    log_q: NDArray[np.float64]  # (n_nodes, n_items)
    log_h: NDArray[np.float64]  # (n_nodes, n_items), log(P^(1+c) + Q^(1+c))
    term_sum: NDArray[np.float64]  # (n_examinees, n_nodes)
    log_prod: NDArray[np.float64]  # (n_nodes,), Σ_j log_h

    def power_gradient_factor(self, c: float) -> NDArray[np.float64]:
        """P Q (P^c - Q^c) / (P^(1+c) + Q^(1+c)), shape (n_nodes, n_items)."""
        ratio = np.exp(self.log_p + self.log_q - self.log_h)
        result: NDArray[np.float64] = ratio * (
            np.exp(c * self.log_p) - np.exp(c * self.log_q)
        )
        return result


def _node_terms(
    params: NDArray[np.float64],
    theta: NDArray[np.float64],
    indicators: NDArray[np.float64],
    scale: float,
    c: float,
) -> _NodeTerms:
    log_p, log_q = log_icc_pair(theta, params, scale)
    term_sum = sum_log_likelihoods(indicators, log_p, log_q)
    log_h = log_sum_of_powers(log_p, log_q, 1.0 + c)
    return _NodeTerms(
        log_p=log_p,
        log_q=log_q,
        log_h=log_h,
        term_sum=term_sum,
        log_prod=log_h.sum(axis=1),
    )


def weighted_score(
    examinee_node_weights: NDArray[np.float64],
    responses: NDArray[np.float64],
    log_p: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Σ_i Σ_m A[i, m] (u_ij - P_mj) for every item j.

    Args:
        examinee_node_weights: A, shape (n_examinees, n_nodes).
        responses: Responses as floats, shape (n_examinees, n_items).
        log_p: Log probabilities of a correct response, (n_nodes, n_items).

    Returns:
        Array of shape (n_items,).
    """
    observed = responses.T @ examinee_node_weights.sum(axis=1)
    expected = np.exp(log_p).T @ examinee_node_weights.sum(axis=0)
    result: NDArray[np.float64] = observed - expected
    return result


def dpd_objective(
    params: NDArray[np.float64],
    theta: NDArray[np.float64],
    weights: NDArray[np.float64],
    posteriors: NDArray[np.float64],
    indicators: NDArray[np.float64],
    responses: NDArray[np.float64],
    scale: float,
    beta: float,
) -> float:
    """
    Density power divergence loss for candidate difficulties.

    Args:
        params: Candidate difficulties, shape (n_items,).
        theta: Quadrature points, shape (n_nodes,).
        weights: Quadrature weights, shape (n_nodes,).
        posteriors: Posterior weights G1, shape (n_examinees, n_nodes).
        indicators: Indicator tensor, shape (n_examinees, n_items, 2).
        responses: Responses as floats, shape (n_examinees, n_items).
        scale: Scale constant D.
        beta: DPD tuning constant (> 0).

    Returns:
        term2 - term1 (to minimize).
    """
    terms = _node_terms(params, theta, indicators, scale, beta)
    n_examinees = posteriors.shape[0]

    term1 = np.sum(np.exp(beta * terms.term_sum) * posteriors) / (
        n_examinees * beta
    )
    term2 = np.sum(weights * np.exp(terms.log_prod)) / (1.0 + beta)
    return float(term2 - term1)


def dpd_objective_gradient(
    params: NDArray[np.float64],
    theta: NDArray[np.float64],
    weights: NDArray[np.float64],
    posteriors: NDArray[np.float64],
    indicators: NDArray[np.float64],
    responses: NDArray[np.float64],
    scale: float,
    beta: float,
) -> NDArray[np.float64]:
    """Gradient of dpd_objective with respect to the difficulties."""
    terms = _node_terms(params, theta, indicators, scale, beta)
    n_examinees = posteriors.shape[0]

    powered = posteriors * np.exp(beta * terms.term_sum)
    grad_term1 = -(scale / n_examinees) * weighted_score(
        powered, responses, terms.log_p
    )

    node_mass = weights * np.exp(terms.log_prod)
    grad_term2 = -scale * (node_mass @ terms.power_gradient_factor(beta))

    result: NDArray[np.float64] = grad_term2 - grad_term1
    return result


def gamma_objective(
    params: NDArray[np.float64],
    theta: NDArray[np.float64],
    weights: NDArray[np.float64],
    posteriors: NDArray[np.float64],
    indicators: NDArray[np.float64],
    responses: NDArray[np.float64],
    scale: float,
    gamma: float,
) -> float:
    """
    gamma-divergence loss for candidate difficulties.

    Arguments mirror dpd_objective, with gamma (> 0) in place of beta.
    """
    terms = _node_terms(params, theta, indicators, scale, gamma)
    n_examinees = posteriors.shape[0]

    log_term1 = logsumexp(gamma * terms.term_sum, b=posteriors)
    term1 = (log_term1 - np.log(n_examinees)) / gamma
    term2 = logsumexp(terms.log_prod, b=weights) / (1.0 + gamma)
    return float(term2 - term1)


def gamma_objective_gradient(
    params: NDArray[np.float64],
    theta: NDArray[np.float64],
    weights: NDArray[np.float64],
    posteriors: NDArray[np.float64],
    indicators: NDArray[np.float64],
    responses: NDArray[np.float64],
    scale: float,
    gamma: float,
) -> NDArray[np.float64]:
    """Gradient of gamma_objective with respect to the difficulties."""
    terms = _node_terms(params, theta, indicators, scale, gamma)

    # Normalized exp(γ l) G1 weights: the derivative of the log-aggregate
    log_term1 = logsumexp(gamma * terms.term_sum, b=posteriors)
    normalized = posteriors * np.exp(gamma * terms.term_sum - log_term1)
    grad_term1 = -scale * weighted_score(normalized, responses, terms.log_p)

    log_term2 = logsumexp(terms.log_prod, b=weights)
    node_share = weights * np.exp(terms.log_prod - log_term2)
    grad_term2 = -scale * (node_share @ terms.power_gradient_factor(gamma))

    result: NDArray[np.float64] = grad_term2 - grad_term1
    return result


def get_objective(family: DivergenceFamily) -> tuple[ObjectiveFn, GradientFn]:
    """
    Look up the objective and gradient for a divergence family.

    Returns:
        Tuple (objective, gradient), both taking
        (params, theta, weights, posteriors, indicators, responses, scale,
        hyperparameter).
    """
    if family == DivergenceFamily.DPD:
        return dpd_objective, dpd_objective_gradient
    elif family == DivergenceFamily.GAMMA:
        return gamma_objective, gamma_objective_gradient
    else:
        raise ValueError(f"Unsupported divergence family: {family}")
