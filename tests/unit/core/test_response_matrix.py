"""
Tests for the binary response matrix.
"""

import numpy as np
import pytest

from robust_rasch.core.data_models import ResponseMatrix
from robust_rasch.core.errors import DataValidationError


class TestResponseMatrix:
    def test_basic_construction(self) -> None:
        """Should construct from valid responses."""
        responses = np.array([[0, 1, 1], [1, 1, 0]], dtype=np.int8)
        rm = ResponseMatrix(responses=responses)

        assert rm.n_examinees == 2
        assert rm.n_items == 3
        assert rm.responses.dtype == np.int8

    def test_accepts_other_integer_dtypes(self) -> None:
        """int64 or bool input should be stored as int8."""
        rm = ResponseMatrix(responses=np.array([[True, False], [False, True]]))
        np.testing.assert_array_equal(rm.responses, [[1, 0], [0, 1]])
        assert rm.responses.dtype == np.int8

    def test_responses_are_read_only(self) -> None:
        """The stored matrix must not change after load."""
        rm = ResponseMatrix(responses=np.array([[0, 1]], dtype=np.int8))
        with pytest.raises(ValueError):
            rm.responses[0, 0] = 1

    def test_caller_array_not_aliased(self) -> None:
        """Mutating the caller's array should not affect the matrix."""
        raw = np.array([[0, 1], [1, 0]], dtype=np.int8)
        rm = ResponseMatrix(responses=raw)
        raw[0, 0] = 1
        assert rm.responses[0, 0] == 0

    def test_validation_non_2d(self) -> None:
        """Should reject non-2D responses."""
        with pytest.raises(DataValidationError, match="must be 2D"):
            ResponseMatrix(responses=np.array([0, 1, 1], dtype=np.int8))

    def test_validation_empty(self) -> None:
        """Should reject empty matrices."""
        with pytest.raises(DataValidationError, match="non-empty"):
            ResponseMatrix(responses=np.zeros((0, 3), dtype=np.int8))

    def test_validation_non_binary(self) -> None:
        """Should reject values other than 0/1 and report their position."""
        responses = np.array([[0, 1], [2, 0]], dtype=np.int8)
        with pytest.raises(DataValidationError, match="examinee 1, item 0"):
            ResponseMatrix(responses=responses)

    def test_validation_missing_value(self) -> None:
        """Missing responses (-1 or nan) are not supported."""
        with pytest.raises(DataValidationError, match="binary"):
            ResponseMatrix(responses=np.array([[0, -1]], dtype=np.int8))
        with pytest.raises(DataValidationError, match="binary"):
            ResponseMatrix(responses=np.array([[0.0, np.nan]]))

    def test_validation_error_is_value_error(self) -> None:
        """DataValidationError should be catchable as ValueError."""
        with pytest.raises(ValueError):
            ResponseMatrix(responses=np.array([[3]]))

    def test_check_dimensions(self) -> None:
        """Declared counts must match the matrix."""
        rm = ResponseMatrix(responses=np.zeros((4, 3), dtype=np.int8))
        rm.check_dimensions(4, 3)

        with pytest.raises(DataValidationError, match="Declared 5 examinees"):
            rm.check_dimensions(5, 3)
        with pytest.raises(DataValidationError, match=r"shape \(4, 3\)"):
            rm.check_dimensions(4, 2)

    def test_item_proportion_correct(self) -> None:
        responses = np.array([[1, 0], [1, 1], [0, 0], [1, 0]], dtype=np.int8)
        rm = ResponseMatrix(responses=responses)
        np.testing.assert_allclose(rm.item_proportion_correct(), [0.75, 0.25])

    def test_total_scores(self) -> None:
        responses = np.array([[1, 0, 1], [1, 1, 1], [0, 0, 0]], dtype=np.int8)
        rm = ResponseMatrix(responses=responses)
        np.testing.assert_array_equal(rm.total_scores(), [2, 3, 0])


class TestIndicatorTensor:
    def test_shape_and_encoding(self) -> None:
        """Entry [i, j, k] is 1 iff responses[i, j] == k."""
        responses = np.array([[0, 1, 1], [1, 0, 0]], dtype=np.int8)
        rm = ResponseMatrix(responses=responses)

        indicators = rm.indicator_tensor
        assert indicators.shape == (2, 3, 2)
        np.testing.assert_array_equal(indicators[:, :, 1], responses)
        np.testing.assert_array_equal(indicators[:, :, 0], 1 - responses)
        np.testing.assert_array_equal(indicators.sum(axis=2), 1.0)

    def test_computed_once(self) -> None:
        """The tensor is cached on first access."""
        rm = ResponseMatrix(responses=np.array([[0, 1]], dtype=np.int8))
        assert rm.indicator_tensor is rm.indicator_tensor

    def test_read_only(self) -> None:
        rm = ResponseMatrix(responses=np.array([[0, 1]], dtype=np.int8))
        with pytest.raises(ValueError):
            rm.indicator_tensor[0, 0, 0] = 0.0
