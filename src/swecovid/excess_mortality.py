"""
Excess mortality by age and care-setting cohort

The care-setting source splits deaths among people aged 70+
into three cohorts (nursing home, home care, neither).
Subtracting their excess from the national excess gives a fourth,
residual cohort (under 70).
The residual is not measured independently.
If the national and care-setting sources are compiled differently,
it can come out negative.
We do not clamp it, we only warn.
"""

from __future__ import annotations

import logging

import pandas as pd

from swecovid.assertions import assert_has_columns, assert_unique_on
from swecovid.constants import (
    CARE_COHORTS,
    DATE,
    FIRST_COMPARABLE_WEEK,
    UNDER_70_COHORT,
    WEEK_NUMBER,
    YEAR,
)
from swecovid.typing import WeeklyDataFrame
from swecovid.weeks import add_week_start_date

logger = logging.getLogger(__name__)

COHORT_EXCESS_COLUMNS: tuple[str, ...] = (
    *(f"excess_{cohort}" for cohort in CARE_COHORTS),
    f"excess_{UNDER_70_COHORT}",
)
"""
Columns of the cohort table which partition the national excess
"""


def add_care_excess(care: WeeklyDataFrame) -> WeeklyDataFrame:
    """
    Add excess deaths for each care-setting cohort

    Parameters
    ----------
    care
        Care-setting mortality, see
        [load_care_mortality][swecovid.loading.load_care_mortality]

    Returns
    -------
    :
        Copy of `care` with `excess_{cohort}` for each cohort
        (2020 deaths minus the 2016-2019 average),
        `excess_over_70` (sum of the cohorts' excess)
        and `total_over_70` (sum of the cohorts' 2020 deaths)
    """
    observed_cols = [f"deaths_{cohort}_2020" for cohort in CARE_COHORTS]
    baseline_cols = [f"deaths_{cohort}_baseline" for cohort in CARE_COHORTS]
    assert_has_columns(care, [WEEK_NUMBER, *observed_cols, *baseline_cols])

    res = care.copy()
    excess_cols = []
    for cohort, observed, baseline in zip(CARE_COHORTS, observed_cols, baseline_cols):
        excess_col = f"excess_{cohort}"
        res[excess_col] = res[observed].astype("Float64") - res[baseline].astype(
            "Float64"
        )
        excess_cols.append(excess_col)

    # A cohort that isn't reported makes the totals unknown (NA propagates)
    res["excess_over_70"] = sum(res[c] for c in excess_cols)
    res["total_over_70"] = sum(res[c].astype("Float64") for c in observed_cols)

    return res


def calculate_excess_by_cohort(
    mortality: WeeklyDataFrame,
    care: WeeklyDataFrame,
    first_comparable_week: int = FIRST_COMPARABLE_WEEK,
    year: int = YEAR,
) -> WeeklyDataFrame:
    """
    Partition the national excess mortality into age and care-setting cohorts

    Steps:

    1. drop care-setting weeks without nursing home deaths for 2020
       (weeks which haven't been reported yet)
    1. calculate the excess for each over-70 cohort
    1. join the national excess (care-setting data is the driving side)
    1. calculate the under-70 excess as the residual
       `excess_all - excess_over_70`
    1. drop weeks before `first_comparable_week`

    Parameters
    ----------
    mortality
        National weekly mortality, see
        [load_national_mortality][swecovid.loading.load_national_mortality]

    care
        Care-setting mortality for people aged 70+, see
        [load_care_mortality][swecovid.loading.load_care_mortality]

    first_comparable_week
        First week to keep.
        The national source undercounts week 1,
        so anything lower than 2 is raised to 2.

    year
        Year to which the week numbers refer (used for the date column)

    Returns
    -------
    :
        One row per week with `week_number, date, excess_all, total_2020,
        excess_over_70, excess_under_70`, the excess of each over-70 cohort
        and `total_over_70`
    """
    assert_has_columns(
        mortality, [WEEK_NUMBER, "excess_deaths", "observed_deaths_2020"]
    )
    assert_unique_on(mortality, [WEEK_NUMBER])
    assert_unique_on(care, [WEEK_NUMBER])

    first_comparable_week = max(first_comparable_week, FIRST_COMPARABLE_WEEK)

    reported = care.loc[care["deaths_nursing_home_2020"].notna()]
    if reported.shape[0] < care.shape[0]:
        logger.info(
            "Dropping care-setting weeks without nursing home deaths for 2020: %s",
            care.loc[care["deaths_nursing_home_2020"].isna(), WEEK_NUMBER].tolist(),
        )

    care_excess = add_care_excess(reported)

    national = mortality[[WEEK_NUMBER, "excess_deaths", "observed_deaths_2020"]].rename(
        columns={"excess_deaths": "excess_all", "observed_deaths_2020": "total_2020"}
    )
    res = care_excess[
        [
            WEEK_NUMBER,
            "excess_over_70",
            *(f"excess_{cohort}" for cohort in CARE_COHORTS),
            "total_over_70",
        ]
    ].merge(national, on=WEEK_NUMBER, how="left", validate="one_to_one")

    unmatched = res.loc[res["excess_all"].isna(), WEEK_NUMBER].tolist()
    if unmatched:
        logger.warning("No national mortality data for weeks %s", unmatched)

    res["excess_all"] = res["excess_all"].astype("Float64")
    res["total_2020"] = res["total_2020"].astype("Float64")
    res[f"excess_{UNDER_70_COHORT}"] = res["excess_all"] - res["excess_over_70"]

    res = res.loc[res[WEEK_NUMBER] >= first_comparable_week]

    negative = res[f"excess_{UNDER_70_COHORT}"] < 0
    if negative.fillna(False).any():
        logger.warning(
            "Negative under-70 excess mortality (residual) in weeks %s",
            res.loc[negative.fillna(False), WEEK_NUMBER].tolist(),
        )

    res = add_week_start_date(
        res[
            [
                WEEK_NUMBER,
                "excess_all",
                "total_2020",
                "excess_over_70",
                f"excess_{UNDER_70_COHORT}",
                *(f"excess_{cohort}" for cohort in CARE_COHORTS),
                "total_over_70",
            ]
        ],
        year=year,
    )

    return res.sort_values(WEEK_NUMBER).reset_index(drop=True)


def melt_cohorts(excess_by_cohort: WeeklyDataFrame) -> pd.DataFrame:
    """
    Convert the cohort table to long format, e.g. for stacked area charts

    Parameters
    ----------
    excess_by_cohort
        Output of [calculate_excess_by_cohort][(m).]

    Returns
    -------
    :
        One row per week and cohort,
        with columns `week_number, date, cohort, excess_deaths`.
        The four cohorts partition `excess_all`.
    """
    assert_has_columns(excess_by_cohort, [WEEK_NUMBER, DATE, *COHORT_EXCESS_COLUMNS])

    res = excess_by_cohort.melt(
        id_vars=[WEEK_NUMBER, DATE],
        value_vars=list(COHORT_EXCESS_COLUMNS),
        var_name="cohort",
        value_name="excess_deaths",
    )
    res["cohort"] = pd.Categorical(
        res["cohort"].str.removeprefix("excess_"),
        categories=[*CARE_COHORTS, UNDER_70_COHORT],
        ordered=True,
    )

    return res.sort_values([WEEK_NUMBER, "cohort"]).reset_index(drop=True)
