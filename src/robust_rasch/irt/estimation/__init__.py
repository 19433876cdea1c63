"""
Rasch difficulty estimation module.

This module provides robust estimation of Rasch item difficulties by
alternating a quadrature-based E-step with a divergence-minimizing M-step.

Key components:
- EstimationConfig: Configuration for estimation
- compute_posterior: E-step posterior weights over ability nodes
- dpd_objective / gamma_objective: robust M-step objectives
- RobustEstimator: alternating estimator driver
- MMLEEstimator: ordinary (and weighted) marginal maximum likelihood
- estimate_abilities: EAP ability estimation
"""
