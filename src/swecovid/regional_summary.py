"""
Per-region summaries, used to group regions for display
"""

from __future__ import annotations

import logging

import pandas as pd

from swecovid.assertions import assert_has_columns
from swecovid.constants import (
    MAJOR_REGION_THRESHOLD,
    OTHER_REGIONS_GROUP,
    REGION,
    WEEK_NUMBER,
    YEAR,
)
from swecovid.typing import WeeklyDataFrame
from swecovid.weeks import add_week_start_date

logger = logging.getLogger(__name__)


def build_region_summary(
    regional: WeeklyDataFrame,
    major_region_threshold: float = MAJOR_REGION_THRESHOLD,
) -> pd.DataFrame:
    """
    Summarise each region over all weeks

    The population is estimated as
    `total_cases / sum(cases_per_100k) * 100 000`.
    This assumes the population is roughly constant over the weeks,
    so it is only an aid for display, not a census figure.

    Parameters
    ----------
    regional
        Regional weekly data, see
        [load_regional_weekly][swecovid.loading.load_regional_weekly]

    major_region_threshold
        Regions with strictly more cases than this keep their own
        display group, all others are grouped into `"Other"`

    Returns
    -------
    :
        One row per region, sorted by descending `total_cases`,
        with columns `region, total_cases, estimated_population, display_group`.

        `estimated_population` is missing if the region's summed rate is zero.
        `total_cases` and `estimated_population` are missing
        if any of the region's weekly values they are based on is missing
        (such regions are grouped into `"Other"` and sorted last).
        `display_group` is an ordered categorical,
        its categories are the reverse of the order in which
        the groups first appear in the (sorted) summary,
        so that the largest region ends up on top of horizontal bar charts.
    """
    assert_has_columns(regional, [REGION, "case_count", "cases_per_100k"])

    to_sum = regional[[REGION, "case_count", "cases_per_100k"]]
    # A blank week makes the region's totals unknown
    has_missing = (
        to_sum.drop(columns=REGION).isna().groupby(to_sum[REGION], sort=False).any()
    )
    grouped = to_sum.groupby(REGION, sort=False).sum().mask(has_missing)
    total_cases = grouped["case_count"].astype("Float64")
    rate_sum = grouped["cases_per_100k"].astype("Float64")

    estimated_population = (
        (total_cases / rate_sum.mask((rate_sum == 0).fillna(False)) * 100_000)
        .round()
        .astype("Int64")
    )

    res = (
        pd.DataFrame(
            {
                "total_cases": total_cases,
                "estimated_population": estimated_population,
            }
        )
        .rename_axis(REGION)
        .reset_index()
        .sort_values("total_cases", ascending=False, kind="stable")
        .reset_index(drop=True)
    )

    is_major = (res["total_cases"] > major_region_threshold).fillna(False)
    display_group = res[REGION].where(is_major, OTHER_REGIONS_GROUP)
    display_order = list(dict.fromkeys(display_group))[::-1]
    res["display_group"] = pd.Categorical(
        display_group, categories=display_order, ordered=True
    )
    logger.debug(
        "%d of %d regions have more than %s cases",
        is_major.sum(),
        res.shape[0],
        major_region_threshold,
    )

    return res


def estimate_national_population(summary: pd.DataFrame) -> int | None:
    """
    Estimate the national population from the regional estimates

    Parameters
    ----------
    summary
        Output of [build_region_summary][(m).]

    Returns
    -------
    :
        Sum of the regional population estimates,
        or `None` if any region's population could not be estimated
    """
    if summary.empty or summary["estimated_population"].isna().any():
        return None

    return int(summary["estimated_population"].sum())


def add_display_group(
    regional: WeeklyDataFrame, summary: pd.DataFrame, year: int = YEAR
) -> WeeklyDataFrame:
    """
    Attach each region's display group to the weekly regional data

    Parameters
    ----------
    regional
        Regional weekly data

    summary
        Output of [build_region_summary][(m).] for `regional`

    year
        Year to which the week numbers refer (used for the date column)

    Returns
    -------
    :
        Copy of `regional` with `date` and `display_group` columns,
        sorted by display group then week
    """
    assert_has_columns(regional, [REGION, WEEK_NUMBER])
    assert_has_columns(summary, [REGION, "display_group"])

    res = regional.merge(
        summary[[REGION, "display_group"]],
        on=REGION,
        how="left",
        validate="many_to_one",
    )
    res = add_week_start_date(res, year=year)

    return res.sort_values(
        ["display_group", WEEK_NUMBER, REGION], ascending=[False, True, True]
    ).reset_index(drop=True)
