"""
Tests for estimation configuration.
"""

import pytest

from robust_rasch.irt.estimation.config import (
    ConvergenceConfig,
    DivergenceConfig,
    EstimationConfig,
    ParameterBounds,
    QuadratureConfig,
    default_config,
)


class TestEstimationConfig:
    def test_defaults(self) -> None:
        config = default_config()

        assert config.scale == 1.702
        assert config.divergence.beta == 0.5
        assert config.divergence.gamma == 0.5
        assert config.bounds.difficulty == (-4.0, 4.0)
        assert config.convergence.max_iterations == 30
        assert config.convergence.param_tolerance == 1e-4
        assert config.quadrature.n_points == 41

    def test_model_version_from_project(self) -> None:
        assert default_config().model_version == "0.1.0"

    def test_frozen(self) -> None:
        config = default_config()
        with pytest.raises(AttributeError):
            config.scale = 1.0  # type: ignore[misc]

    def test_invalid_scale(self) -> None:
        with pytest.raises(ValueError, match="scale"):
            EstimationConfig(scale=0.0)


class TestComponentValidation:
    @pytest.mark.parametrize("beta", [0.0, -0.1])
    def test_beta_must_be_positive(self, beta: float) -> None:
        with pytest.raises(ValueError, match="beta must be > 0"):
            DivergenceConfig(beta=beta)

    @pytest.mark.parametrize("gamma", [0.0, -0.1])
    def test_gamma_must_be_positive(self, gamma: float) -> None:
        with pytest.raises(ValueError, match="gamma must be > 0"):
            DivergenceConfig(gamma=gamma)

    def test_bounds_order(self) -> None:
        with pytest.raises(ValueError, match="lower < upper"):
            ParameterBounds(difficulty=(1.0, -1.0))

    def test_quadrature_points(self) -> None:
        with pytest.raises(ValueError, match="n_points"):
            QuadratureConfig(n_points=1)

    def test_quadrature_std(self) -> None:
        with pytest.raises(ValueError, match="std"):
            QuadratureConfig(std=0.0)

    def test_convergence_iterations(self) -> None:
        with pytest.raises(ValueError, match="max_iterations"):
            ConvergenceConfig(max_iterations=0)

    def test_convergence_tolerance(self) -> None:
        with pytest.raises(ValueError, match="param_tolerance"):
            ConvergenceConfig(param_tolerance=0.0)
