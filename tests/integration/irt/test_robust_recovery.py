"""
Parameter recovery tests for the robust Rasch estimators.

Simulates responses from known difficulties, optionally contaminates them
with reversed response patterns, and checks how close each estimator gets.
"""

import numpy as np
import pytest

from robust_rasch.core.data_models import ResponseMatrix
from robust_rasch.irt.estimation.config import (
    ConvergenceConfig,
    DivergenceConfig,
    EstimationConfig,
)
from robust_rasch.irt.estimation.enums import DivergenceFamily
from robust_rasch.irt.estimation.estimator import RobustEstimator
from robust_rasch.irt.estimation.mmle import MMLEEstimator
from robust_rasch.irt.estimation.pipeline import estimate_robust_difficulties
from robust_rasch.irt.sampling import (
    reverse_response_patterns,
    sample_rasch_responses,
)

FAMILIES = [DivergenceFamily.DPD, DivergenceFamily.GAMMA]


def _simulate(
    n_examinees: int,
    difficulties: np.ndarray,
    seed: int,
    reversed_fraction: float = 0.0,
) -> ResponseMatrix:
    rng = np.random.default_rng(seed)
    abilities = rng.standard_normal(n_examinees)
    responses = sample_rasch_responses(abilities, difficulties, rng=rng)
    if reversed_fraction > 0:
        responses, _ = reverse_response_patterns(
            responses, reversed_fraction, rng
        )
    return ResponseMatrix(responses)


def _mean_abs_error(estimate: tuple[float, ...], truth: np.ndarray) -> float:
    return float(np.mean(np.abs(np.asarray(estimate) - truth)))


class TestCleanDataRecovery:
    TRUE_DIFFICULTIES = np.array([-1.0, -0.5, 0.0, 0.5, 1.0])

    @pytest.fixture(scope="class")
    def data(self) -> ResponseMatrix:
        return _simulate(2000, self.TRUE_DIFFICULTIES, seed=100)

    def test_all_estimators_recover(self, data: ResponseMatrix) -> None:
        config = EstimationConfig(
            convergence=ConvergenceConfig(max_iterations=200)
        )
        result = estimate_robust_difficulties(data, config, include_weighted=True)

        for estimate in (result.mmle, result.dpd, result.gamma):
            np.testing.assert_allclose(
                estimate.difficulties, self.TRUE_DIFFICULTIES, atol=0.3
            )

        assert result.dpd.converged
        assert result.gamma.converged
        assert result.weighted_mmle is not None
        assert np.isfinite(result.weighted_mmle.difficulties).all()


class TestContaminatedRecovery:
    TRUE_DIFFICULTIES = np.linspace(-2.0, 2.0, 10)

    @pytest.fixture(scope="class")
    def data(self) -> ResponseMatrix:
        return _simulate(
            3000, self.TRUE_DIFFICULTIES, seed=200, reversed_fraction=0.05
        )

    @pytest.fixture(scope="class")
    def mmle_error(self, data: ResponseMatrix) -> float:
        mmle = MMLEEstimator().fit(data)
        return _mean_abs_error(mmle.difficulties, self.TRUE_DIFFICULTIES)

    @pytest.mark.parametrize("family", FAMILIES)
    def test_robust_beats_mmle(
        self, data: ResponseMatrix, mmle_error: float, family: DivergenceFamily
    ) -> None:
        """Reversed patterns bias MMLE more than the divergence estimators."""
        config = EstimationConfig(
            convergence=ConvergenceConfig(max_iterations=200)
        )
        robust = RobustEstimator(family, config).fit(data)

        assert _mean_abs_error(robust.difficulties, self.TRUE_DIFFICULTIES) < (
            mmle_error
        )


class TestSmallHyperparameterLimit:
    @pytest.mark.parametrize("family", FAMILIES)
    def test_matches_mmle(self, family: DivergenceFamily) -> None:
        """With beta or gamma near 0 the robust estimate is the MMLE."""
        data = _simulate(800, np.array([-1.2, -0.3, 0.4, 1.1]), seed=300)
        config = EstimationConfig(
            divergence=DivergenceConfig(beta=1e-3, gamma=1e-3),
            convergence=ConvergenceConfig(max_iterations=200),
        )

        mmle = MMLEEstimator(config).fit(data)
        robust = RobustEstimator(family, config).fit(
            data, initial_difficulties=mmle.difficulties
        )

        np.testing.assert_allclose(
            robust.difficulties, mmle.difficulties, atol=0.05
        )
