"""
Aggregation of regional data to national totals
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pandas_openscm.grouping import groupby_except

from swecovid.assertions import assert_has_columns
from swecovid.constants import REGION, REGIONAL_SUM_COLUMNS, WEEK_NUMBER
from swecovid.typing import WeeklyDataFrame

logger = logging.getLogger(__name__)


def aggregate_regions(
    regional: WeeklyDataFrame,
    sum_columns: Sequence[str] = REGIONAL_SUM_COLUMNS,
) -> WeeklyDataFrame:
    """
    Sum regional weekly data to national weekly totals

    Only the enumerated `sum_columns` are summed.
    Rates (e.g. `cases_per_100k`) are not additive so are never carried
    through, and the region column is dropped
    because the output is national.
    If any region's value is missing for a week,
    the national total for that week is missing too
    (it is not treated as zero).

    Parameters
    ----------
    regional
        Regional weekly data, see
        [load_regional_weekly][swecovid.loading.load_regional_weekly]

    sum_columns
        Columns to sum across regions

    Returns
    -------
    :
        One row per week, with `week_number` and `sum_columns`,
        sorted by week number

    Raises
    ------
    MissingColumnsError
        `regional` does not have a region, week number or one of `sum_columns`
    """
    assert_has_columns(regional, [REGION, WEEK_NUMBER, *sum_columns])

    # Blind sum, if a region is reported twice we double count.
    # The loader checks uniqueness on region and week so this is fine.
    to_sum = regional.set_index([REGION, WEEK_NUMBER])[list(sum_columns)]
    # A blank in any region makes the national total unknown
    has_missing = groupby_except(to_sum.isna(), REGION).any()
    totals = groupby_except(to_sum, REGION).sum().mask(has_missing)
    weeks_missing = has_missing.index[has_missing.any(axis=1)].get_level_values(
        WEEK_NUMBER
    )
    if not weeks_missing.empty:
        logger.warning(
            "Missing regional values, national totals set to missing for weeks %s",
            sorted(int(w) for w in weeks_missing),
        )

    res = (
        totals.astype("Float64")
        .reset_index()
        .sort_values(WEEK_NUMBER)
        .reset_index(drop=True)
    )
    logger.debug(
        "Aggregated %d regional rows to %d national weeks",
        regional.shape[0],
        res.shape[0],
    )

    return res
