"""
Response data for Rasch estimation.

This module defines:
- ResponseMatrix: validated, immutable binary examinee x item responses
- The derived indicator tensor used for vectorized likelihood computation
"""

from dataclasses import dataclass
from functools import cached_property

import numpy as np
from numpy.typing import NDArray

from robust_rasch.core.errors import DataValidationError

# Response values, in the order they index the last axis of the indicator tensor
RESPONSE_VALUES = (0, 1)


@dataclass(frozen=True)
class ResponseMatrix:
    """
    Binary response data for Rasch estimation.

    Attributes:
        responses: Array of shape (n_examinees, n_items) with entries 0
            (incorrect) or 1 (correct). Every examinee answers every item.
            Stored as a read-only int8 copy.
    """

    responses: NDArray[np.int8]

    def __post_init__(self) -> None:
        """Validate and freeze the response matrix."""
        raw = np.asarray(self.responses)
        if raw.ndim != 2:
            raise DataValidationError(
                f"responses must be 2D, got shape {raw.shape}"
            )
        if raw.shape[0] == 0 or raw.shape[1] == 0:
            raise DataValidationError(
                f"responses must be non-empty, got shape {raw.shape}"
            )
        is_binary = (raw == 0) | (raw == 1)
        if not is_binary.all():
            bad_row, bad_col = np.argwhere(~is_binary)[0]
            raise DataValidationError(
                f"responses must be binary (0/1), got {raw[bad_row, bad_col]!r} "
                f"at examinee {bad_row}, item {bad_col}"
            )

        frozen = raw.astype(np.int8, copy=True)
        frozen.setflags(write=False)
        object.__setattr__(self, "responses", frozen)

    @property
    def n_examinees(self) -> int:
        """Number of examinees (rows)."""
        return self.responses.shape[0]

    @property
    def n_items(self) -> int:
        """Number of items (columns)."""
        return self.responses.shape[1]

    @cached_property
    def indicator_tensor(self) -> NDArray[np.float64]:
        """
        One-hot encoding of the responses.

        Returns:
            Read-only array of shape (n_examinees, n_items, 2) where
            entry [i, j, k] is 1.0 iff responses[i, j] == k.
        """
        indicators = np.zeros(
            (self.n_examinees, self.n_items, len(RESPONSE_VALUES)),
            dtype=np.float64,
        )
        for k, value in enumerate(RESPONSE_VALUES):
            indicators[:, :, k] = self.responses == value
        indicators.setflags(write=False)
        return indicators

    def check_dimensions(self, n_examinees: int, n_items: int) -> None:
        """
        Check the matrix against declared examinee and item counts.

        Raises:
            DataValidationError: If either count does not match.
        """
        if (n_examinees, n_items) != self.responses.shape:
            raise DataValidationError(
                f"Declared {n_examinees} examinees x {n_items} items, "
                f"but responses have shape {self.responses.shape}"
            )

    def item_proportion_correct(self) -> NDArray[np.float64]:
        """Proportion of correct responses per item, shape (n_items,)."""
        result: NDArray[np.float64] = self.responses.mean(axis=0)
        return result

    def total_scores(self) -> NDArray[np.int64]:
        """Number-correct score per examinee, shape (n_examinees,)."""
        result: NDArray[np.int64] = self.responses.sum(
            axis=1, dtype=np.int64
        )
        return result
