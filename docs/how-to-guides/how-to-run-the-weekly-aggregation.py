# ---
# jupyter:
#   jupytext:
#     text_representation:
#       extension: .py
#       format_name: percent
#       format_version: '1.3'
#       jupytext_version: 1.16.6
#   kernelspec:
#     display_name: Python 3 (ipykernel)
#     language: python
#     name: python3
# ---

# %% [markdown]
# # How to run the weekly aggregation
#
# Here we demonstrate how to go from the four source spreadsheets
# to the tables used for the charts in the paper.
#
# The sources are:
#
# 1. weekly cases, ICU admissions and deaths per region
#    (Folkhälsomyndigheten, sheet "Veckodata Region")
# 1. weekly PCR test counts (compiled by hand)
# 1. national deaths compared to the 2015-2019 average
#    (SCB, sheet "Tabell 6")
# 1. deaths among people aged 70+ by care setting
#    (Socialstyrelsen, sheet "Jämf genomsnitt, antal")

# %% [markdown]
# ## Imports

# %%
import logging
import tempfile
from pathlib import Path

import numpy as np
import seaborn as sns

from swecovid.constants import DEFAULT_SOURCE_FILENAMES
from swecovid.excess_mortality import melt_cohorts
from swecovid.pipeline import SourcePaths, WeeklyEpidemiologicalAggregator
from swecovid.plotting import plot_national_weekly
from swecovid.testing import get_regional_df, get_weekly_df, write_example_sources

# %%
logging.basicConfig(level=logging.INFO)

# %% [markdown]
# ## Starting point
#
# Normally, you would download the sources and put them in one directory.
# Here we write some made-up data in the same layout instead
# (this is obviously a scrappy demo, the numbers mean nothing).

# %%
weeks = np.arange(1, 30)
epidemic_curve = np.exp(-(((weeks - 15) / 5.0) ** 2))

regional = get_regional_df(
    [
        (region, week, round(peak * curve), round(rate * curve, 1))
        for region, peak, rate in (
            ("Stockholm", 4000, 170.0),
            ("Västra Götaland", 1500, 85.0),
            ("Skåne", 600, 44.0),
            ("Gotland", 20, 33.0),
        )
        for week, curve in zip(weeks, epidemic_curve)
    ],
    icu_admissions=5.0,
    deaths=10.0,
)
testing = get_weekly_df(
    {"week_number": weeks[:-2], "pcr_tests_performed": 3000 + 1000 * weeks[:-2]}
)
national_mortality = get_weekly_df(
    {
        "week_number": weeks,
        "baseline_mean_deaths_2015_2019": np.full(weeks.size, 1800.0),
        "observed_deaths_2020": 1800.0 + 900.0 * epidemic_curve,
        "excess_deaths": 900.0 * epidemic_curve,
    }
)
care_mortality = get_weekly_df(
    {
        "week_number": weeks,
        "deaths_nursing_home_2020": 500.0 + 450.0 * epidemic_curve,
        "deaths_nursing_home_baseline": np.full(weeks.size, 500.0),
        "deaths_home_care_2020": 400.0 + 200.0 * epidemic_curve,
        "deaths_home_care_baseline": np.full(weeks.size, 400.0),
        "deaths_no_care_2020": 300.0 + 100.0 * epidemic_curve,
        "deaths_no_care_baseline": np.full(weeks.size, 300.0),
    }
)

tmp_dir = Path(tempfile.mkdtemp())
write_example_sources(
    tmp_dir,
    regional=regional,
    testing=testing,
    national_mortality=national_mortality,
    care_mortality=care_mortality,
    filenames=DEFAULT_SOURCE_FILENAMES,
)

# %% [markdown]
# ## Running
#
# The aggregator's defaults reproduce the analysis of 2020.
# The sources are loaded in full before anything is calculated,
# a problem with any source stops the whole run.

# %%
aggregator = WeeklyEpidemiologicalAggregator()
res = aggregator.run(SourcePaths.from_directory(tmp_dir))

# %% [markdown]
# ## National weekly data
#
# Note that positivity is missing where there is no testing data
# (the last two weeks here).
# It is never NaN or infinite.

# %%
res.national

# %%
plot_national_weekly(
    res.national,
    measures=["case_count", "pcr_tests_performed", "test_positivity_rate", "deaths"],
)

# %% [markdown]
# ## Excess mortality by cohort
#
# The under-70 cohort is a residual (national excess minus the 70+ cohorts),
# not a measurement.
# Week 1 is always excluded because the national source undercounts it.

# %%
res.excess_by_cohort

# %%
cohorts = melt_cohorts(res.excess_by_cohort)
cohorts["excess_deaths"] = cohorts["excess_deaths"].astype(float)
sns.relplot(data=cohorts, x="date", y="excess_deaths", hue="cohort", kind="line")

# %% [markdown]
# ## Regions
#
# Regions with more than 3000 cases are shown by name,
# everything else is grouped.

# %%
res.region_summary

# %%
sns.barplot(
    data=res.region_summary.astype({"total_cases": float}),
    y="display_group",
    x="total_cases",
    estimator="sum",
    errorbar=None,
)
