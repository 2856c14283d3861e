"""
Loading of the source spreadsheets

Each loader reads one sheet,
renames the source's columns to our normalised names
and parses the week numbers.
Anything unexpected (missing file, sheet or column, malformed week)
raises a [SourceFormatError][swecovid.exceptions.SourceFormatError].
Loaders do not drop rows, other than rows that are completely blank
(spreadsheet padding rather than records).
Filtering of known-incomplete records happens downstream, by rule.
"""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Mapping, Sequence
from pathlib import Path

import numpy as np
import pandas as pd

from swecovid.assertions import assert_has_columns, assert_unique_on
from swecovid.constants import (
    CARE_MORTALITY_COLUMN_MAP,
    CARE_MORTALITY_SHEET_NAME,
    CARE_MORTALITY_SKIPROWS,
    NATIONAL_MORTALITY_COLUMN_MAP,
    NATIONAL_MORTALITY_SHEET_NAME,
    NATIONAL_MORTALITY_SKIPROWS,
    REGION,
    REGIONAL_COLUMN_MAP,
    REGIONAL_SHEET_NAME,
    TESTING_COLUMN_MAP,
    TESTING_SHEET_NAME,
    WEEK_NUMBER,
)
from swecovid.exceptions import SourceFormatError
from swecovid.typing import PathLike, SheetName, WeeklyDataFrame
from swecovid.weeks import parse_week_numbers

logger = logging.getLogger(__name__)


def read_sheet(path: PathLike, sheet_name: SheetName, skiprows: int = 0) -> pd.DataFrame:
    """
    Read a single sheet from a spreadsheet

    Parameters
    ----------
    path
        Path to the spreadsheet

    sheet_name
        Name (or zero-based position) of the sheet to read

    skiprows
        Number of rows to skip before the header row

    Returns
    -------
    :
        Raw sheet contents, with completely blank rows removed
        and surrounding whitespace stripped from the column names

    Raises
    ------
    SourceFormatError
        The file or sheet could not be read
    """
    path = Path(path)
    try:
        raw = pd.read_excel(path, sheet_name=sheet_name, skiprows=skiprows)
    except FileNotFoundError as exc:
        raise SourceFormatError(
            "Source file does not exist", source=path, sheet_name=sheet_name
        ) from exc
    except ValueError as exc:
        # This is what pandas raises for unknown sheets
        raise SourceFormatError(
            f"Could not read sheet: {exc}", source=path, sheet_name=sheet_name
        ) from exc
    except zipfile.BadZipFile as exc:
        # xlsx files are zip archives, this is what a corrupt one gives
        raise SourceFormatError(
            f"Not a valid spreadsheet: {exc}", source=path, sheet_name=sheet_name
        ) from exc

    raw.columns = [c.strip() if isinstance(c, str) else c for c in raw.columns]

    return raw.dropna(how="all")


def to_numeric_column(
    raw: pd.Series,
    source: PathLike | None = None,
    sheet_name: SheetName | None = None,
) -> pd.Series:
    """
    Convert a raw spreadsheet column to nullable floats

    Blank cells become `pd.NA`.

    Parameters
    ----------
    raw
        Raw column

    source
        Source of `raw`, only used to make the error message more helpful

    sheet_name
        Sheet of `source`, only used to make the error message more helpful

    Returns
    -------
    :
        `raw` as a `Float64` series

    Raises
    ------
    SourceFormatError
        `raw` contains values which are neither blank nor numeric
    """
    if raw.dtype == object:
        raw = raw.replace(r"^\s*$", np.nan, regex=True)

    converted = pd.to_numeric(raw, errors="coerce")
    not_numeric = converted.isnull() & raw.notnull()
    if not_numeric.any():
        raise SourceFormatError(
            f"Non-numeric values in column {raw.name!r}: "
            f"{raw[not_numeric].unique().tolist()}",
            source=source,
            sheet_name=sheet_name,
        )

    return converted.astype("Float64")


def normalise_source(  # noqa: PLR0913
    raw: pd.DataFrame,
    column_map: Mapping[str, str],
    keys: Sequence[str] = (WEEK_NUMBER,),
    text_columns: Sequence[str] = (),
    source: PathLike | None = None,
    sheet_name: SheetName | None = None,
) -> WeeklyDataFrame:
    """
    Normalise a raw sheet into one of our tables

    Parameters
    ----------
    raw
        Raw sheet, as returned by [read_sheet][(m).]

    column_map
        Map from source column names to normalised column names

        Only the columns in this map are kept.
        One of the values must be `week_number`.

    keys
        Normalised columns which together identify each row

    text_columns
        Normalised columns which hold text.
        All other columns, except the week number, must be numeric.

    source
        Source of `raw`, only used to make error messages more helpful

    sheet_name
        Sheet of `source`, only used to make error messages more helpful

    Returns
    -------
    :
        Normalised table

    Raises
    ------
    SourceFormatError
        `raw` does not have the expected columns,
        has malformed week numbers or values,
        or is not unique on `keys`
    """
    if WEEK_NUMBER not in column_map.values():  # pragma: no cover
        raise AssertionError(f"{column_map=} does not map to {WEEK_NUMBER}")

    assert_has_columns(raw, column_map.keys(), source=source, sheet_name=sheet_name)

    res = raw[list(column_map)].rename(columns=dict(column_map))
    for col in res.columns:
        if col == WEEK_NUMBER:
            res[col] = parse_week_numbers(
                res[col], source=source, sheet_name=sheet_name
            )
        elif col in text_columns:
            if res[col].isnull().any():
                raise SourceFormatError(
                    f"Missing values in column {col!r}",
                    source=source,
                    sheet_name=sheet_name,
                )

            res[col] = res[col].astype(str).str.strip()
        else:
            res[col] = to_numeric_column(res[col], source=source, sheet_name=sheet_name)

    assert_unique_on(res, keys, source=source, sheet_name=sheet_name)

    return res.reset_index(drop=True)


def load_regional_weekly(
    path: PathLike,
    sheet_name: SheetName = REGIONAL_SHEET_NAME,
    column_map: Mapping[str, str] | None = None,
) -> WeeklyDataFrame:
    """
    Load weekly case, ICU and death counts per region

    Parameters
    ----------
    path
        Path to the spreadsheet

    sheet_name
        Sheet holding the weekly regional data

    column_map
        Map from source column names to normalised names.
        If not supplied, we use
        [REGIONAL_COLUMN_MAP][swecovid.constants.REGIONAL_COLUMN_MAP].

    Returns
    -------
    :
        One row per region and week, with columns
        `region, week_number, case_count, cases_per_100k, icu_admissions, deaths`
    """
    if column_map is None:
        column_map = REGIONAL_COLUMN_MAP

    res = normalise_source(
        read_sheet(path, sheet_name=sheet_name),
        column_map=column_map,
        keys=(REGION, WEEK_NUMBER),
        text_columns=(REGION,),
        source=path,
        sheet_name=sheet_name,
    )
    logger.info(
        "Loaded %d regional weekly rows (%d regions) from %s",
        res.shape[0],
        res[REGION].nunique(),
        path,
    )

    return res


def load_testing_weekly(
    path: PathLike,
    sheet_name: SheetName = TESTING_SHEET_NAME,
    column_map: Mapping[str, str] | None = None,
) -> WeeklyDataFrame:
    """
    Load the manually compiled weekly PCR test counts

    Parameters
    ----------
    path
        Path to the spreadsheet

    sheet_name
        Sheet holding the test counts

    column_map
        Map from source column names to normalised names.
        If not supplied, we use
        [TESTING_COLUMN_MAP][swecovid.constants.TESTING_COLUMN_MAP].

    Returns
    -------
    :
        One row per week, with columns `week_number, pcr_tests_performed`
    """
    if column_map is None:
        column_map = TESTING_COLUMN_MAP

    res = normalise_source(
        read_sheet(path, sheet_name=sheet_name),
        column_map=column_map,
        source=path,
        sheet_name=sheet_name,
    )
    logger.info("Loaded %d weekly testing rows from %s", res.shape[0], path)

    return res


def load_national_mortality(
    path: PathLike,
    sheet_name: SheetName = NATIONAL_MORTALITY_SHEET_NAME,
    skiprows: int = NATIONAL_MORTALITY_SKIPROWS,
    column_map: Mapping[str, str] | None = None,
) -> WeeklyDataFrame:
    """
    Load national weekly deaths compared to the 2015-2019 average

    Parameters
    ----------
    path
        Path to the spreadsheet

    sheet_name
        Sheet holding the weekly comparison

    skiprows
        Number of header rows above the table

    column_map
        Map from source column names to normalised names.
        If not supplied, we use
        [NATIONAL_MORTALITY_COLUMN_MAP][swecovid.constants.NATIONAL_MORTALITY_COLUMN_MAP].

    Returns
    -------
    :
        One row per week, with columns
        `week_number, baseline_mean_deaths_2015_2019, observed_deaths_2020,
        excess_deaths`
    """
    if column_map is None:
        column_map = NATIONAL_MORTALITY_COLUMN_MAP

    res = normalise_source(
        read_sheet(path, sheet_name=sheet_name, skiprows=skiprows),
        column_map=column_map,
        source=path,
        sheet_name=sheet_name,
    )
    logger.info("Loaded %d weekly national mortality rows from %s", res.shape[0], path)

    return res


def load_care_mortality(
    path: PathLike,
    sheet_name: SheetName = CARE_MORTALITY_SHEET_NAME,
    skiprows: int = CARE_MORTALITY_SKIPROWS,
    column_map: Mapping[str, str] | None = None,
) -> WeeklyDataFrame:
    """
    Load weekly deaths among people aged 70+, split by care setting

    Weeks which have not been reported yet are kept (with missing values).
    They are filtered out by
    [calculate_excess_by_cohort][swecovid.excess_mortality.calculate_excess_by_cohort].

    Parameters
    ----------
    path
        Path to the spreadsheet

    sheet_name
        Sheet holding the comparison with the 2016-2019 average

    skiprows
        Number of header rows above the table

    column_map
        Map from source column names to normalised names.
        If not supplied, we use
        [CARE_MORTALITY_COLUMN_MAP][swecovid.constants.CARE_MORTALITY_COLUMN_MAP].

    Returns
    -------
    :
        One row per week, with the 2020 and baseline deaths for each
        care setting (`nursing_home`, `home_care`, `no_care`)
    """
    if column_map is None:
        column_map = CARE_MORTALITY_COLUMN_MAP

    res = normalise_source(
        read_sheet(path, sheet_name=sheet_name, skiprows=skiprows),
        column_map=column_map,
        source=path,
        sheet_name=sheet_name,
    )
    logger.info("Loaded %d weekly care mortality rows from %s", res.shape[0], path)

    return res
