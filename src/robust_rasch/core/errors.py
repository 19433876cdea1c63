"""
Exceptions raised by data validation and estimation.
"""


class DataValidationError(ValueError):
    """Response data does not satisfy the binary I x J contract."""


class PosteriorUnderflowError(ArithmeticError):
    def __init__(self, examinee_idx: int) -> None:
        self.examinee_idx = examinee_idx
        super().__init__(
            f"Posterior normalisation underflowed for examinee {examinee_idx}"
        )
