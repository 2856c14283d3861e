"""
Quick-look plotting of the national weekly table

Styling and export are left to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import pandas as pd

from swecovid.assertions import assert_has_columns
from swecovid.constants import DATE, WEEK_NUMBER
from swecovid.exceptions import MissingOptionalDependencyError

if TYPE_CHECKING:
    import seaborn as sns

DEFAULT_NATIONAL_MEASURES: tuple[str, ...] = (
    "case_count",
    "icu_admissions",
    "deaths",
    "pcr_tests_performed",
    "test_positivity_rate",
    "case_fatality_rate",
    "excess_deaths",
)


def melt_measures(
    national: pd.DataFrame, measures: Sequence[str] = DEFAULT_NATIONAL_MEASURES
) -> pd.DataFrame:
    """
    Convert measures of the national table to long format

    Parameters
    ----------
    national
        National weekly table,
        see [join_national_weekly][swecovid.joining.join_national_weekly]

    measures
        Columns to include

    Returns
    -------
    :
        One row per week and measure,
        with columns `week_number, date, measure, value`.
        Missing values are dropped so they show as gaps in line plots.
    """
    assert_has_columns(national, [WEEK_NUMBER, DATE, *measures])

    res = national.melt(
        id_vars=[WEEK_NUMBER, DATE],
        value_vars=list(measures),
        var_name="measure",
        value_name="value",
    )
    res["measure"] = pd.Categorical(res["measure"], categories=list(measures))
    res["value"] = res["value"].astype("Float64")

    return res.dropna(subset=["value"]).reset_index(drop=True)


def plot_national_weekly(
    national: pd.DataFrame,
    measures: Sequence[str] = DEFAULT_NATIONAL_MEASURES,
    col_wrap: int = 2,
    **kwargs: Any,
) -> sns.FacetGrid:
    """
    Plot measures of the national table, one facet per measure

    Parameters
    ----------
    national
        National weekly table

    measures
        Measures to plot

    col_wrap
        Number of facets per row

    **kwargs
        Passed to [seaborn.relplot][]

    Returns
    -------
    :
        The facet grid
    """
    try:
        import seaborn as sns
    except ImportError as exc:
        raise MissingOptionalDependencyError(
            "plot_national_weekly", requirement="seaborn"
        ) from exc

    to_plot = melt_measures(national, measures=measures)
    # seaborn wants plain numpy floats
    to_plot["value"] = to_plot["value"].astype(float)

    kwargs.setdefault("kind", "line")
    kwargs.setdefault("facet_kws", {"sharey": False})
    kwargs.setdefault("height", 2.5)
    kwargs.setdefault("aspect", 1.6)

    return sns.relplot(
        data=to_plot,
        x=DATE,
        y="value",
        col="measure",
        col_wrap=col_wrap,
        **kwargs,
    )
