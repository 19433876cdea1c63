from enum import Enum


class ConvergenceStatus(str, Enum):
    CONVERGED = "converged"
    MAX_ITERATIONS = "max_iterations"


class DivergenceFamily(str, Enum):
    DPD = "dpd"
    GAMMA = "gamma"
