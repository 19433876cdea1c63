"""
Tests for the Rasch item response model.
"""

import numpy as np

from robust_rasch.irt.rasch import (
    icc,
    item_probability_matrix,
    joint_row_probability,
    log_icc_pair,
    node_log_likelihoods,
    pattern_probability_matrix,
    response_probability,
)


class TestIcc:
    def test_value_at_difficulty(self) -> None:
        """P = 0.5 when theta equals b."""
        np.testing.assert_allclose(icc(0.7, 0.7), 0.5)

    def test_matches_logistic_formula(self) -> None:
        theta = np.array([-2.0, 0.0, 1.5])
        expected = 1.0 / (1.0 + np.exp(-1.702 * (theta - 0.3)))
        np.testing.assert_allclose(icc(theta, 0.3), expected, rtol=1e-12)

    def test_strictly_increasing_in_theta(self) -> None:
        theta = np.linspace(-4, 4, 81)
        assert np.all(np.diff(icc(theta, 0.5)) > 0)

    def test_strictly_decreasing_in_b(self) -> None:
        b = np.linspace(-4, 4, 81)
        assert np.all(np.diff(icc(0.5, b)) < 0)

    def test_complement_sums_to_one_exactly(self) -> None:
        theta = np.linspace(-6, 6, 121)
        p = icc(theta, 0.25)
        np.testing.assert_array_equal(p + (1.0 - p), 1.0)

    def test_scale_constant(self) -> None:
        """A larger D makes the curve steeper."""
        assert icc(1.0, 0.0, scale=2.0) > icc(1.0, 0.0, scale=1.0)


class TestLogIccPair:
    def test_matches_log_of_icc(self) -> None:
        theta = np.array([-1.0, 0.0, 2.0])
        b = np.array([0.5, -0.5])

        log_p, log_q = log_icc_pair(theta, b)

        p = icc(theta[:, np.newaxis], b[np.newaxis, :])
        assert log_p.shape == (3, 2)
        np.testing.assert_allclose(log_p, np.log(p), rtol=1e-12)
        np.testing.assert_allclose(log_q, np.log(1.0 - p), rtol=1e-10)

    def test_finite_at_extremes(self) -> None:
        """Log probabilities stay finite where 1 - P rounds to 0."""
        log_p, log_q = log_icc_pair(np.array([40.0]), np.array([-40.0]))
        assert np.isfinite(log_p).all()
        assert np.isfinite(log_q).all()
        assert log_q[0, 0] < -100


class TestResponseProbabilities:
    def test_response_probability(self) -> None:
        p = float(icc(0.3, -0.2))
        np.testing.assert_allclose(response_probability(1, 0.3, -0.2), p)
        np.testing.assert_allclose(response_probability(0, 0.3, -0.2), 1 - p)

    def test_joint_row_probability_is_product(self) -> None:
        row = np.array([1, 0, 1])
        b = np.array([-1.0, 0.0, 1.0])
        theta = 0.4

        expected = np.prod(
            [float(response_probability(u, theta, bj)) for u, bj in zip(row, b)]
        )
        np.testing.assert_allclose(
            joint_row_probability(row, theta, b), expected, rtol=1e-12
        )

    def test_item_probability_matrix(self) -> None:
        theta = np.array([-1.0, 0.0, 1.0])
        matrix = item_probability_matrix(theta, 0.2)

        assert matrix.shape == (3, 2)
        np.testing.assert_allclose(matrix[:, 1], icc(theta, 0.2))
        np.testing.assert_allclose(matrix.sum(axis=1), 1.0)

    def test_pattern_probability_matrix(self) -> None:
        theta = np.array([-1.0, 1.0])
        b = np.array([0.0, 0.5, -0.5])
        pattern = np.array([1, 0, 1])

        matrix = pattern_probability_matrix(theta, b, pattern)

        assert matrix.shape == (2, 3)
        for t in range(2):
            for j in range(3):
                np.testing.assert_allclose(
                    matrix[t, j],
                    response_probability(pattern[j], theta[t], b[j]),
                )


class TestNodeLogLikelihoods:
    def test_matches_joint_row_probability(self) -> None:
        responses = np.array([[1, 0, 1], [0, 0, 1]])
        indicators = np.stack([1 - responses, responses], axis=-1).astype(
            np.float64
        )
        b = np.array([-0.5, 0.3, 1.2])
        theta = np.array([-1.5, 0.0, 1.5, 2.5])

        log_lik = node_log_likelihoods(indicators, b, theta)

        assert log_lik.shape == (2, 4)
        for i in range(2):
            for m in range(4):
                np.testing.assert_allclose(
                    np.exp(log_lik[i, m]),
                    joint_row_probability(responses[i], theta[m], b),
                    rtol=1e-10,
                )
