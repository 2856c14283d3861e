"""
Week number handling

All our sources are keyed by week number.
Converting week numbers to dates follows a single, pinned rule:
weeks start on Sunday and the days before the first Sunday of the year
are week 0 (the `%U` convention of `strftime`),
and the date of a week is the Monday within it.
In other words, the date of week `w` is
`datetime.strptime(f"{year}-{w}-1", "%Y-%U-%w")`.
This is not ISO week numbering.
For 2020, week 1 is Monday 6 January.

Every place that needs a date for a week number goes through
[week_to_date][(m).] so that they all agree.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Any

import numpy as np
import pandas as pd

from swecovid.assertions import assert_week_numbers_valid
from swecovid.constants import DATE, WEEK_NUMBER, YEAR
from swecovid.exceptions import SourceFormatError

WEEK_STRING_PATTERN = re.compile(r"^\s*(?:v|vecka)?\s*(\d{1,2})\s*$", re.IGNORECASE)
"""
Pattern for week numbers that are written as strings, e.g. `"12"`, `"v12"`, `"V 12"`
"""


def first_sunday(year: int) -> dt.date:
    """
    Get the first Sunday of a year

    Parameters
    ----------
    year
        Year of interest

    Returns
    -------
    :
        First Sunday of `year`, i.e. the first day of week 1
    """
    jan_first = dt.date(year, 1, 1)
    # Monday is 0, Sunday is 6
    days_until_sunday = (6 - jan_first.weekday()) % 7

    return jan_first + dt.timedelta(days=days_until_sunday)


def week_to_date(week_number: int, year: int = YEAR) -> dt.date:
    """
    Convert a week number to the date of the Monday in that week

    Parameters
    ----------
    week_number
        Week number (weeks start on Sunday, `%U` convention)

    year
        Year to which `week_number` refers

    Returns
    -------
    :
        Date of the Monday in week `week_number` of `year`

    Examples
    --------
    >>> week_to_date(1)
    datetime.date(2020, 1, 6)
    >>> week_to_date(10)
    datetime.date(2020, 3, 9)
    """
    return first_sunday(year) + dt.timedelta(weeks=int(week_number) - 1, days=1)


def add_week_start_date(
    indf: pd.DataFrame, year: int = YEAR, week_col: str = WEEK_NUMBER
) -> pd.DataFrame:
    """
    Add a date column derived from the week number

    The date column is inserted directly after the week number column.

    Parameters
    ----------
    indf
        Data to which to add the date

    year
        Year to which the week numbers refer

    week_col
        Column which holds the week numbers

    Returns
    -------
    :
        Copy of `indf` with a `date` column
        (see [week_to_date][(m).] for the rule used)
    """
    res = indf.copy()
    if DATE in res.columns:
        res = res.drop(columns=DATE)

    dates = pd.to_datetime(res[week_col].map(lambda w: week_to_date(w, year=year)))
    res.insert(res.columns.get_loc(week_col) + 1, DATE, dates)

    return res


def _parse_week_value(value: Any) -> int | None:
    if isinstance(value, (bool, np.bool_)):
        return None

    if isinstance(value, (int, np.integer)):
        return int(value)

    if isinstance(value, (float, np.floating)):
        if np.isnan(value) or not float(value).is_integer():
            return None

        return int(value)

    if isinstance(value, str):
        match = WEEK_STRING_PATTERN.match(value)
        if match is None:
            return None

        return int(match.group(1))

    return None


def parse_week_numbers(
    raw: pd.Series[Any],
    source: Any = None,
    sheet_name: str | int | None = None,
) -> pd.Series[int]:
    """
    Parse raw week numbers, as they appear in a spreadsheet, into integers

    Parameters
    ----------
    raw
        Raw week values

    source
        Source of `raw`, only used to make the error message more helpful

    sheet_name
        Sheet of `source`, only used to make the error message more helpful

    Returns
    -------
    :
        Week numbers as integers

    Raises
    ------
    SourceFormatError
        Any value is missing, can't be interpreted as a week number
        or is outside the range 1-53
    """
    parsed = raw.map(_parse_week_value)
    malformed = parsed.isnull()
    if malformed.any():
        raise SourceFormatError(
            f"Malformed {WEEK_NUMBER} values: {raw[malformed].tolist()}",
            source=source,
            sheet_name=sheet_name,
        )

    res = parsed.astype(np.int64).rename(WEEK_NUMBER)
    assert_week_numbers_valid(res, source=source, sheet_name=sheet_name)

    return res
