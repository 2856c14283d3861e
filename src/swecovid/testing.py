"""
Code to support our tests

This is here, rather than in our `tests` directory
because of the issues that come
when you turn your tests into a package using `__init__.py` files
(for details, see https://docs.pytest.org/en/7.1.x/explanation/goodpractices.html#choosing-an-import-mode).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from swecovid.constants import (
    CARE_MORTALITY_COLUMN_MAP,
    CARE_MORTALITY_SHEET_NAME,
    CARE_MORTALITY_SKIPROWS,
    NATIONAL_MORTALITY_COLUMN_MAP,
    NATIONAL_MORTALITY_SHEET_NAME,
    NATIONAL_MORTALITY_SKIPROWS,
    REGIONAL_COLUMN_MAP,
    REGIONAL_SHEET_NAME,
    TESTING_COLUMN_MAP,
    TESTING_SHEET_NAME,
)


def get_regional_df(
    rows: Iterable[tuple[str, int, float, float]],
    icu_admissions: float = 0.0,
    deaths: float = 0.0,
) -> pd.DataFrame:
    """
    Get a normalised regional table

    Parameters
    ----------
    rows
        Rows, each `(region, week_number, case_count, cases_per_100k)`

    icu_admissions
        Value to use for ICU admissions in every row

    deaths
        Value to use for deaths in every row

    Returns
    -------
    :
        Regional table, as returned by
        [load_regional_weekly][swecovid.loading.load_regional_weekly]
    """
    res = pd.DataFrame(
        list(rows),
        columns=["region", "week_number", "case_count", "cases_per_100k"],
    )
    res["week_number"] = res["week_number"].astype(np.int64)
    res["icu_admissions"] = icu_admissions
    res["deaths"] = deaths
    for col in ["case_count", "cases_per_100k", "icu_admissions", "deaths"]:
        res[col] = res[col].astype("Float64")

    return res


def get_weekly_df(data: Mapping[str, Iterable[Any]]) -> pd.DataFrame:
    """
    Get a normalised weekly table

    Parameters
    ----------
    data
        Columns of the table, must include `week_number`

    Returns
    -------
    :
        Table with integer week numbers and `Float64` values
    """
    res = pd.DataFrame({k: list(v) for k, v in data.items()})
    for col in res.columns:
        if col == "week_number":
            res[col] = res[col].astype(np.int64)
        else:
            res[col] = res[col].astype("Float64")

    return res


def _invert(column_map: Mapping[str, str]) -> dict[str, str]:
    return {v: k for k, v in column_map.items()}


def write_source_spreadsheet(
    normalised: pd.DataFrame,
    path: Path,
    column_map: Mapping[str, str],
    sheet_name: str | int,
    skiprows: int = 0,
) -> Path:
    """
    Write a normalised table back out in the layout of its source spreadsheet

    Parameters
    ----------
    normalised
        Normalised table

    path
        Path to write to

    column_map
        Map from source column names to normalised column names

    sheet_name
        Sheet to write. If an integer, a sheet called `"Sheet1"` is written.

    skiprows
        Number of (junk) header rows to write above the table

    Returns
    -------
    :
        `path`
    """
    out = normalised[list(column_map.values())].rename(columns=_invert(column_map))
    sheet = sheet_name if isinstance(sheet_name, str) else "Sheet1"

    with pd.ExcelWriter(path) as writer:
        if skiprows:
            header_lines = pd.DataFrame([[f"Header line {i + 1}"] for i in range(skiprows)])
            header_lines.to_excel(writer, sheet_name=sheet, index=False, header=False)

        out.to_excel(writer, sheet_name=sheet, index=False, startrow=skiprows)

    return path


def write_example_sources(  # noqa: PLR0913
    directory: Path,
    regional: pd.DataFrame,
    testing: pd.DataFrame,
    national_mortality: pd.DataFrame,
    care_mortality: pd.DataFrame,
    filenames: Mapping[str, str],
) -> None:
    """
    Write all four sources to `directory` in their spreadsheet layouts

    Parameters
    ----------
    directory
        Directory to write to

    regional
        Normalised regional table

    testing
        Normalised testing table

    national_mortality
        Normalised national mortality table

    care_mortality
        Normalised care-setting mortality table

    filenames
        File name to use for each source
    """
    write_source_spreadsheet(
        regional,
        directory / filenames["regional"],
        column_map=REGIONAL_COLUMN_MAP,
        sheet_name=REGIONAL_SHEET_NAME,
    )
    write_source_spreadsheet(
        testing,
        directory / filenames["testing"],
        column_map=TESTING_COLUMN_MAP,
        sheet_name=TESTING_SHEET_NAME,
    )
    write_source_spreadsheet(
        national_mortality,
        directory / filenames["national_mortality"],
        column_map=NATIONAL_MORTALITY_COLUMN_MAP,
        sheet_name=NATIONAL_MORTALITY_SHEET_NAME,
        skiprows=NATIONAL_MORTALITY_SKIPROWS,
    )
    write_source_spreadsheet(
        care_mortality,
        directory / filenames["care_mortality"],
        column_map=CARE_MORTALITY_COLUMN_MAP,
        sheet_name=CARE_MORTALITY_SHEET_NAME,
        skiprows=CARE_MORTALITY_SKIPROWS,
    )
