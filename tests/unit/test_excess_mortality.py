"""
Tests of `swecovid.excess_mortality`
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from swecovid.excess_mortality import (
    add_care_excess,
    calculate_excess_by_cohort,
    melt_cohorts,
)
from swecovid.testing import get_weekly_df


@pytest.fixture
def mortality():
    return get_weekly_df(
        {
            "week_number": [1, 2, 3, 14, 15],
            "baseline_mean_deaths_2015_2019": [1800, 1850, 1800, 1750, 1700],
            "observed_deaths_2020": [1400, 1900, 1850, 2400, 2500],
            "excess_deaths": [-400, 50, 50, 650, 800],
        }
    )


@pytest.fixture
def care():
    return get_weekly_df(
        {
            "week_number": [1, 2, 3, 14, 15, 16],
            "deaths_nursing_home_2020": [500, 510, 505, 800, 850, np.nan],
            "deaths_nursing_home_baseline": [490, 500.25, 495, 500, 510, 500],
            "deaths_home_care_2020": [400, 410, 400, 600, 640, np.nan],
            "deaths_home_care_baseline": [395, 400, 400.5, 420, 430, 420],
            "deaths_no_care_2020": [300, 305, 300, 350, 400, np.nan],
            "deaths_no_care_baseline": [300, 300, 299.75, 310, 305, 300],
        }
    )


def test_add_care_excess(care):
    res = add_care_excess(care).set_index("week_number")

    assert res.loc[14, "excess_nursing_home"] == 300
    assert res.loc[14, "excess_home_care"] == 180
    assert res.loc[14, "excess_no_care"] == 40
    assert res.loc[14, "excess_over_70"] == 520
    assert res.loc[14, "total_over_70"] == 1750
    # Not reported yet so unknown
    assert res.loc[16, "excess_over_70"] is pd.NA
    assert res.loc[16, "total_over_70"] is pd.NA


def test_calculate_excess_by_cohort(mortality, care):
    res = calculate_excess_by_cohort(mortality, care)

    # Week 1 is never comparable, week 16 has no nursing home data yet
    assert res["week_number"].tolist() == [2, 3, 14, 15]
    assert res.columns.tolist() == [
        "week_number",
        "date",
        "excess_all",
        "total_2020",
        "excess_over_70",
        "excess_under_70",
        "excess_nursing_home",
        "excess_home_care",
        "excess_no_care",
        "total_over_70",
    ]

    res = res.set_index("week_number")
    assert res.loc[14, "date"] == pd.Timestamp("2020-04-06")
    assert res.loc[14, "excess_all"] == 650
    assert res.loc[14, "total_2020"] == 2400
    assert res.loc[14, "excess_over_70"] == 520
    assert res.loc[14, "excess_under_70"] == 130


def test_calculate_excess_by_cohort_partitions_excess(mortality, care):
    res = calculate_excess_by_cohort(mortality, care)

    np.testing.assert_allclose(
        (res["excess_over_70"] + res["excess_under_70"]).astype(float),
        res["excess_all"].astype(float),
    )
    np.testing.assert_allclose(
        (
            res["excess_nursing_home"]
            + res["excess_home_care"]
            + res["excess_no_care"]
        ).astype(float),
        res["excess_over_70"].astype(float),
    )


@pytest.mark.parametrize("first_comparable_week", (0, 1, 2))
def test_calculate_excess_by_cohort_never_includes_week_1(
    mortality, care, first_comparable_week
):
    res = calculate_excess_by_cohort(
        mortality, care, first_comparable_week=first_comparable_week
    )

    assert 1 not in res["week_number"].tolist()
    assert res["week_number"].min() == 2


def test_calculate_excess_by_cohort_later_first_week(mortality, care):
    res = calculate_excess_by_cohort(mortality, care, first_comparable_week=10)

    assert res["week_number"].tolist() == [14, 15]


def test_calculate_excess_by_cohort_negative_residual_kept(mortality, care, caplog):
    # Week 3: over 70 excess is 10 - 0.5 + 0.25 = 9.75
    mortality.loc[mortality["week_number"] == 3, "excess_deaths"] = 5.0

    with caplog.at_level("WARNING", logger="swecovid.excess_mortality"):
        res = calculate_excess_by_cohort(mortality, care)

    res = res.set_index("week_number")
    assert res.loc[3, "excess_under_70"] == 5.0 - 9.75
    assert "Negative under-70 excess mortality (residual) in weeks [3]" in caplog.text


def test_calculate_excess_by_cohort_missing_national_week(mortality, care):
    mortality = mortality.loc[mortality["week_number"] != 15]

    res = calculate_excess_by_cohort(mortality, care).set_index("week_number")

    # Care data drives the join, missing national data propagates
    assert res.loc[15, "excess_over_70"] == 645
    assert res.loc[15, "excess_all"] is pd.NA
    assert res.loc[15, "excess_under_70"] is pd.NA


def test_calculate_excess_by_cohort_does_not_modify_inputs(mortality, care):
    care_start = care.copy()
    mortality_start = mortality.copy()

    calculate_excess_by_cohort(mortality, care)

    pd.testing.assert_frame_equal(care, care_start)
    pd.testing.assert_frame_equal(mortality, mortality_start)


def test_melt_cohorts(mortality, care):
    excess_by_cohort = calculate_excess_by_cohort(mortality, care)

    res = melt_cohorts(excess_by_cohort)

    assert res.columns.tolist() == ["week_number", "date", "cohort", "excess_deaths"]
    assert res.shape[0] == 4 * excess_by_cohort.shape[0]
    assert res["cohort"].cat.categories.tolist() == [
        "nursing_home",
        "home_care",
        "no_care",
        "under_70",
    ]

    summed = res.groupby("week_number")["excess_deaths"].sum()
    np.testing.assert_allclose(
        summed.astype(float).to_numpy(),
        excess_by_cohort.set_index("week_number")["excess_all"]
        .astype(float)
        .to_numpy(),
    )
