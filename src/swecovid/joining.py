"""
Joining of national cases with testing and mortality data
"""

from __future__ import annotations

import logging

import pandas as pd

from swecovid.assertions import assert_has_columns, assert_unique_on
from swecovid.constants import WEEK_NUMBER, YEAR
from swecovid.typing import WeeklyDataFrame
from swecovid.weeks import add_week_start_date

logger = logging.getLogger(__name__)


def safe_rate(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    """
    Calculate a percentage, `100 * numerator / denominator`

    Where the rate is undefined (the denominator is zero or missing,
    or the numerator is missing) the result is `pd.NA`, never NaN or inf.
    A zero numerator with a valid denominator gives a real zero.

    Parameters
    ----------
    numerator
        Numerator

    denominator
        Denominator

    Returns
    -------
    :
        Rate, as a `Float64` series aligned with `numerator`
    """
    num = numerator.astype("Float64")
    den = denominator.astype("Float64")
    den = den.mask((den == 0).fillna(False))

    return 100 * num / den


def join_national_weekly(
    national_cases: WeeklyDataFrame,
    testing: WeeklyDataFrame,
    mortality: WeeklyDataFrame,
    year: int = YEAR,
) -> WeeklyDataFrame:
    """
    Join national case data with testing and mortality data

    The case data is the driving side of the join.
    Weeks without a matching testing or mortality row are kept,
    with missing values in the testing/mortality columns.

    Parameters
    ----------
    national_cases
        National weekly cases, ICU admissions and deaths, see
        [aggregate_regions][swecovid.aggregation.aggregate_regions]

    testing
        Weekly PCR test counts, see
        [load_testing_weekly][swecovid.loading.load_testing_weekly]

    mortality
        National weekly mortality, see
        [load_national_mortality][swecovid.loading.load_national_mortality]

    year
        Year to which the week numbers refer (used for the date column)

    Returns
    -------
    :
        One row per week in `national_cases`, with the week start date,
        all columns of the three inputs and the derived
        `test_positivity_rate` and `case_fatality_rate` (both percentages)
    """
    assert_has_columns(national_cases, [WEEK_NUMBER, "case_count", "deaths"])
    assert_has_columns(testing, [WEEK_NUMBER, "pcr_tests_performed"])
    assert_has_columns(mortality, [WEEK_NUMBER])
    for df in (national_cases, testing, mortality):
        assert_unique_on(df, [WEEK_NUMBER])

    res = national_cases.merge(
        testing, on=WEEK_NUMBER, how="left", validate="one_to_one"
    ).merge(mortality, on=WEEK_NUMBER, how="left", validate="one_to_one")
    logger.debug(
        "Joined %d case weeks with %d testing weeks and %d mortality weeks",
        national_cases.shape[0],
        testing.shape[0],
        mortality.shape[0],
    )

    for other, name in ((testing, "testing"), (mortality, "mortality")):
        unmatched = sorted(
            int(w)
            for w in set(national_cases[WEEK_NUMBER]).difference(other[WEEK_NUMBER])
        )
        if unmatched:
            logger.warning("No %s data for weeks %s", name, unmatched)

    value_cols = [c for c in res.columns if c != WEEK_NUMBER]
    res[value_cols] = res[value_cols].astype("Float64")

    res["test_positivity_rate"] = safe_rate(
        res["case_count"], res["pcr_tests_performed"]
    )
    res["case_fatality_rate"] = safe_rate(res["deaths"], res["case_count"])

    res = add_week_start_date(res, year=year)

    return res


def add_national_incidence(
    national: WeeklyDataFrame, population: float | None
) -> WeeklyDataFrame:
    """
    Add cases per 100 000 inhabitants at the national level

    Rates cannot be summed across regions,
    so we recompute the rate from the national case count
    and a national population.

    Parameters
    ----------
    national
        National weekly data, must have a `case_count` column

    population
        National population.
        If `None` or zero, the rate is missing for every week.

    Returns
    -------
    :
        Copy of `national` with a `cases_per_100k` column
    """
    res = national.copy()
    population_s = pd.Series(population, index=res.index, dtype="Float64")
    # safe_rate gives per 100, so scale to per 100 000
    res["cases_per_100k"] = safe_rate(res["case_count"], population_s) * 1000

    return res
