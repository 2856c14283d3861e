"""
Useful assertions

These raise [SourceFormatError][swecovid.exceptions.SourceFormatError]
(or a subclass) so that callers can treat any problem with the shape
of the input as fatal in the same way.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import Any

import pandas as pd

from swecovid.constants import MAX_WEEK_NUMBER, MIN_WEEK_NUMBER, WEEK_NUMBER
from swecovid.exceptions import MissingColumnsError, SourceFormatError


def assert_has_columns(
    indf: pd.DataFrame,
    columns: Collection[str],
    source: Any = None,
    sheet_name: str | int | None = None,
) -> None:
    """
    Assert that a [pd.DataFrame][pandas.DataFrame] has the given columns

    Parameters
    ----------
    indf
        Data to check

    columns
        Columns that must be in `indf`

    source
        Source of `indf`, only used to make the error message more helpful

    sheet_name
        Sheet of `source`, only used to make the error message more helpful

    Raises
    ------
    MissingColumnsError
        Some of `columns` are not in `indf`
    """
    missing = [c for c in columns if c not in indf.columns]
    if missing:
        raise MissingColumnsError(
            missing=missing,
            available=indf.columns.tolist(),
            source=source,
            sheet_name=sheet_name,
        )


def assert_unique_on(
    indf: pd.DataFrame,
    keys: Sequence[str],
    source: Any = None,
    sheet_name: str | int | None = None,
) -> None:
    """
    Assert that there is only one row for each combination of `keys`

    Parameters
    ----------
    indf
        Data to check

    keys
        Columns which, together, should identify each row

    source
        Source of `indf`, only used to make the error message more helpful

    sheet_name
        Sheet of `source`, only used to make the error message more helpful

    Raises
    ------
    SourceFormatError
        There are duplicate rows for some combinations of `keys`
    """
    duplicated = indf.duplicated(subset=list(keys), keep=False)
    if duplicated.any():
        duplicate_keys = (
            indf.loc[duplicated, list(keys)].drop_duplicates().to_dict("records")
        )
        raise SourceFormatError(
            f"Rows are not unique on {list(keys)}. Duplicates: {duplicate_keys}",
            source=source,
            sheet_name=sheet_name,
        )


def assert_week_numbers_valid(
    week_numbers: pd.Series[Any],
    source: Any = None,
    sheet_name: str | int | None = None,
) -> None:
    """
    Assert that week numbers are all present, integer and in range

    Parameters
    ----------
    week_numbers
        Week numbers to check

    source
        Source of `week_numbers`, only used to make the error message more helpful

    sheet_name
        Sheet of `source`, only used to make the error message more helpful

    Raises
    ------
    SourceFormatError
        Some week numbers are missing, non-integer or out of range
    """
    if week_numbers.isnull().any():
        raise SourceFormatError(
            f"Missing values in {WEEK_NUMBER}. "
            f"Rows: {week_numbers.index[week_numbers.isnull()].tolist()}",
            source=source,
            sheet_name=sheet_name,
        )

    if not pd.api.types.is_integer_dtype(week_numbers):
        raise SourceFormatError(
            f"{WEEK_NUMBER} must be integer, received dtype={week_numbers.dtype}",
            source=source,
            sheet_name=sheet_name,
        )

    out_of_range = (week_numbers < MIN_WEEK_NUMBER) | (week_numbers > MAX_WEEK_NUMBER)
    if out_of_range.any():
        raise SourceFormatError(
            f"{WEEK_NUMBER} must be between {MIN_WEEK_NUMBER} and {MAX_WEEK_NUMBER}. "
            f"Out of range values: {week_numbers[out_of_range].unique().tolist()}",
            source=source,
            sheet_name=sheet_name,
        )
