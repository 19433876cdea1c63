"""
Numeric kernels shared by the E-step and the robust objectives.

Products across items are always carried as sums of logs, with a single
exponentiation (or log-sum-exp) at the end.
"""

import math

import numpy as np
from numba import njit  # type: ignore
from numpy.typing import NDArray


@njit  # type: ignore
def rowwise_max(a: NDArray[np.float64]) -> NDArray[np.float64]:
    """numba compatible implementation of np.max(a, axis=1)"""
    n, m = a.shape
    out = np.empty(n)

    for i in range(n):
        mx = a[i, 0]
        for j in range(1, m):
            if a[i, j] > mx:
                mx = a[i, j]
        out[i] = mx
    return out


@njit  # type: ignore
def rowwise_logsumexp(a: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Row-wise log(sum(exp(a))) with max-shifting.

    Rows whose maximum is not finite return that maximum unchanged, so a
    row of all -inf yields -inf instead of nan.
    """
    n, m = a.shape
    maxima = rowwise_max(a)
    out = np.empty(n)

    for i in range(n):
        mx = maxima[i]
        if not math.isfinite(mx):
            out[i] = mx
            continue
        s = 0.0
        for j in range(m):
            s += math.exp(a[i, j] - mx)
        out[i] = mx + math.log(s)
    return out


def log_sum_of_powers(
    log_p: NDArray[np.float64],
    log_q: NDArray[np.float64],
    power: float,
) -> NDArray[np.float64]:
    """
    Elementwise log(P**power + Q**power) from log P and log Q.

    Args:
        log_p: Log probabilities of a correct response.
        log_q: Log probabilities of an incorrect response, same shape.
        power: Exponent (1 + beta or 1 + gamma).

    Returns:
        Array with the same shape as the inputs.
    """
    result: NDArray[np.float64] = np.logaddexp(power * log_p, power * log_q)
    return result
