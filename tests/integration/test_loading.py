"""
Integration tests of `swecovid.loading`, reading real spreadsheets
"""

from __future__ import annotations

import re

import numpy as np
import pandas as pd
import pytest

from swecovid.constants import (
    CARE_MORTALITY_COLUMN_MAP,
    CARE_MORTALITY_SHEET_NAME,
    CARE_MORTALITY_SKIPROWS,
    NATIONAL_MORTALITY_COLUMN_MAP,
    NATIONAL_MORTALITY_SHEET_NAME,
    NATIONAL_MORTALITY_SKIPROWS,
)
from swecovid.exceptions import MissingColumnsError, SourceFormatError
from swecovid.loading import (
    load_care_mortality,
    load_national_mortality,
    load_regional_weekly,
    load_testing_weekly,
)
from swecovid.testing import get_weekly_df, write_source_spreadsheet


def write_regional_raw(path, **overrides):
    raw = pd.DataFrame(
        {
            "år": [2020, 2020, 2020, 2020],
            "veckonummer": [10, 10, 11, 11],
            "Region": ["Stockholm", "Skåne", "Stockholm", "Skåne"],
            "Antal_fall_vecka": [50, 30, 70, 40],
            "Antal_fall_100000inv_vecka": [2.1, 2.2, 2.9, 2.9],
            "Antal_intensivvårdade_vecka": [3, 1, 5, 2],
            "Antal_avlidna_vecka": [1, 0, 4, 1],
            "Kum_antal_fall": [50, 30, 120, 70],
        }
    )
    for col, values in overrides.items():
        raw[col] = values

    raw.to_excel(path, sheet_name="Veckodata Region", index=False)

    return path


def test_load_regional_weekly(tmp_path):
    path = write_regional_raw(tmp_path / "regional.xlsx")

    res = load_regional_weekly(path)

    assert res.columns.tolist() == [
        "region",
        "week_number",
        "case_count",
        "cases_per_100k",
        "icu_admissions",
        "deaths",
    ]
    assert res["region"].tolist() == ["Stockholm", "Skåne", "Stockholm", "Skåne"]
    assert res["week_number"].tolist() == [10, 10, 11, 11]
    assert res["week_number"].dtype == np.int64
    assert res["case_count"].dtype == "Float64"
    assert res["case_count"].tolist() == [50, 30, 70, 40]
    assert res["deaths"].tolist() == [1, 0, 4, 1]


def test_load_regional_weekly_missing_file(tmp_path):
    with pytest.raises(SourceFormatError, match="Source file does not exist"):
        load_regional_weekly(tmp_path / "not-there.xlsx")


def test_load_regional_weekly_corrupt_file(tmp_path):
    path = tmp_path / "regional.xlsx"
    # Zip signature, but not a zip archive
    path.write_bytes(b"PK\x03\x04" + b"\x00" * 60)

    with pytest.raises(SourceFormatError, match=re.escape("regional.xlsx")):
        load_regional_weekly(path)


def test_load_regional_weekly_missing_sheet(tmp_path):
    path = write_regional_raw(tmp_path / "regional.xlsx")

    with pytest.raises(SourceFormatError, match="Could not read sheet"):
        load_regional_weekly(path, sheet_name="Totalt antal per region")


def test_load_regional_weekly_missing_column(tmp_path):
    path = tmp_path / "regional.xlsx"
    pd.DataFrame(
        {
            "veckonummer": [10],
            "Region": ["Stockholm"],
            "Antal_fall_vecka": [50],
        }
    ).to_excel(path, sheet_name="Veckodata Region", index=False)

    with pytest.raises(MissingColumnsError, match="Antal_avlidna_vecka"):
        load_regional_weekly(path)


@pytest.mark.parametrize(
    "veckonummer, match",
    (
        pytest.param([10, 10, "elva", 11], "['elva']", id="text"),
        pytest.param([10, 10, 11.5, 11], "[11.5]", id="non-integral"),
        pytest.param([10, 10, 54, 54], "[54]", id="out-of-range"),
    ),
)
def test_load_regional_weekly_malformed_week(tmp_path, veckonummer, match):
    path = write_regional_raw(tmp_path / "regional.xlsx", veckonummer=veckonummer)

    with pytest.raises(SourceFormatError, match=re.escape(match)):
        load_regional_weekly(path)


def test_load_regional_weekly_duplicates(tmp_path):
    path = write_regional_raw(tmp_path / "regional.xlsx", veckonummer=[10, 10, 10, 11])

    with pytest.raises(SourceFormatError, match="not unique"):
        load_regional_weekly(path)


def test_load_regional_weekly_non_numeric_value(tmp_path):
    path = write_regional_raw(
        tmp_path / "regional.xlsx", Antal_fall_vecka=[50, "<5", 70, 40]
    )

    with pytest.raises(SourceFormatError, match=re.escape("['<5']")):
        load_regional_weekly(path)


def test_load_testing_weekly(tmp_path):
    path = tmp_path / "testing.xlsx"
    pd.DataFrame(
        {
            "veckonummer": [10, 11, None, 12],
            "Antal_PCR_tester": [1000, 1500, None, 2000],
        }
    ).to_excel(path, index=False)

    res = load_testing_weekly(path)

    # Completely blank rows are not records
    assert res["week_number"].tolist() == [10, 11, 12]
    assert res["pcr_tests_performed"].tolist() == [1000, 1500, 2000]


def test_load_testing_weekly_custom_column_map(tmp_path):
    path = tmp_path / "testing.xlsx"
    pd.DataFrame({"Vecka": ["v10", "v11"], "Tester": [1000, 1500]}).to_excel(
        path, sheet_name="PCR", index=False
    )

    res = load_testing_weekly(
        path,
        sheet_name="PCR",
        column_map={"Vecka": "week_number", "Tester": "pcr_tests_performed"},
    )

    assert res["week_number"].tolist() == [10, 11]


def test_load_national_mortality(tmp_path):
    exp = get_weekly_df(
        {
            "week_number": [1, 2, 3],
            "baseline_mean_deaths_2015_2019": [1900.2, 1950.4, 1880.0],
            "observed_deaths_2020": [1700, 2000, 1850],
            "excess_deaths": [-200.2, 49.6, -30.0],
        }
    )
    path = write_source_spreadsheet(
        exp,
        tmp_path / "national.xlsx",
        column_map=NATIONAL_MORTALITY_COLUMN_MAP,
        sheet_name=NATIONAL_MORTALITY_SHEET_NAME,
        skiprows=NATIONAL_MORTALITY_SKIPROWS,
    )

    res = load_national_mortality(path)

    pd.testing.assert_frame_equal(res, exp)


def test_load_national_mortality_wrong_skiprows(tmp_path):
    exp = get_weekly_df(
        {
            "week_number": [1, 2],
            "baseline_mean_deaths_2015_2019": [1900, 1950],
            "observed_deaths_2020": [1700, 2000],
            "excess_deaths": [-200, 50],
        }
    )
    path = write_source_spreadsheet(
        exp,
        tmp_path / "national.xlsx",
        column_map=NATIONAL_MORTALITY_COLUMN_MAP,
        sheet_name=NATIONAL_MORTALITY_SHEET_NAME,
        skiprows=NATIONAL_MORTALITY_SKIPROWS,
    )

    with pytest.raises(MissingColumnsError):
        load_national_mortality(path, skiprows=0)


def test_load_care_mortality_keeps_unreported_weeks(tmp_path):
    exp = get_weekly_df(
        {
            "week_number": [10, 11, 12],
            "deaths_nursing_home_2020": [500, 510, np.nan],
            "deaths_nursing_home_baseline": [490, 500.25, 495],
            "deaths_home_care_2020": [400, 410, np.nan],
            "deaths_home_care_baseline": [395, 400, 400.5],
            "deaths_no_care_2020": [300, 305, np.nan],
            "deaths_no_care_baseline": [300, 300, 299.75],
        }
    )
    path = write_source_spreadsheet(
        exp,
        tmp_path / "care.xlsx",
        column_map=CARE_MORTALITY_COLUMN_MAP,
        sheet_name=CARE_MORTALITY_SHEET_NAME,
        skiprows=CARE_MORTALITY_SKIPROWS,
    )

    res = load_care_mortality(path)

    pd.testing.assert_frame_equal(res, exp)
    assert res.loc[2, "deaths_nursing_home_2020"] is pd.NA
