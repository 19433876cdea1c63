"""
CSV loading utilities for binary response data.
"""

from pathlib import Path

import numpy as np
import pandas as pd

from robust_rasch.core.data_models import ResponseMatrix
from robust_rasch.core.errors import DataValidationError

EXAMINEE_ID_COLUMN = "examinee_id"
RESPONSE_STRING_COLUMN = "response_string"


def _parse_response_string(response_string: str) -> list[int]:
    """Parse a string such as "01101" into a list of 0/1 responses."""
    responses: list[int] = []
    for char in response_string:
        if char == "0":
            responses.append(0)
        elif char == "1":
            responses.append(1)
        else:
            raise DataValidationError(
                f"Invalid character in response string: '{char}'"
            )
    return responses


def load_csv_to_response_matrix(
    path: Path,
) -> tuple[list[str], ResponseMatrix]:
    """Load a CSV file with binary responses into a ResponseMatrix.

    Expected CSV columns:
        - examinee_id: unique identifier for each examinee
        - response_string: one 0/1 character per item (e.g., "0110")

    Returns:
        Tuple of (examinee_ids, ResponseMatrix).

    Raises:
        DataValidationError: If CSV format is invalid or data is inconsistent.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)

    for column in (EXAMINEE_ID_COLUMN, RESPONSE_STRING_COLUMN):
        if column not in df.columns:
            raise DataValidationError(f"CSV must have '{column}' column")

    if df.empty:
        raise DataValidationError("CSV contains no examinees")

    examinee_ids: list[str] = df[EXAMINEE_ID_COLUMN].tolist()
    response_strings: list[str] = df[RESPONSE_STRING_COLUMN].tolist()

    lengths = {len(s) for s in response_strings}
    if len(lengths) != 1:
        raise DataValidationError(
            f"Inconsistent response string lengths: {sorted(lengths)}"
        )

    rows = [_parse_response_string(s) for s in response_strings]
    responses = np.array(rows, dtype=np.int8)

    return examinee_ids, ResponseMatrix(responses=responses)
