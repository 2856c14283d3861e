"""
Tests of the configuration classes in `swecovid.pipeline`
"""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from swecovid.constants import DEFAULT_SOURCE_FILENAMES
from swecovid.exceptions import MissingColumnsError
from swecovid.pipeline import (
    SourcePaths,
    SourceTables,
    WeeklyEpidemiologicalAggregator,
)
from swecovid.testing import get_regional_df, get_weekly_df


def test_source_paths_converts_to_path():
    res = SourcePaths(
        regional="a.xlsx",
        testing="b.xlsx",
        national_mortality="c.xlsx",
        care_mortality="d.xlsx",
    )

    assert res.regional == Path("a.xlsx")
    assert res.care_mortality == Path("d.xlsx")


def test_source_paths_from_directory(tmp_path):
    res = SourcePaths.from_directory(tmp_path, filenames={"testing": "tests.xlsx"})

    assert res.testing == tmp_path / "tests.xlsx"
    assert res.regional == tmp_path / DEFAULT_SOURCE_FILENAMES["regional"]
    assert res.national_mortality == (
        tmp_path / DEFAULT_SOURCE_FILENAMES["national_mortality"]
    )


def test_aggregator_defaults():
    res = WeeklyEpidemiologicalAggregator()

    assert res.year == 2020
    assert res.first_comparable_week == 2
    assert res.major_region_threshold == 3000
    assert res.regional_sheet_name == "Veckodata Region"
    assert res.national_mortality_sheet_name == "Tabell 6"
    assert res.national_mortality_skiprows == 11
    assert res.care_mortality_sheet_name == "Jämf genomsnitt, antal"
    assert res.care_mortality_skiprows == 3


@pytest.mark.parametrize("first_comparable_week", (0, 1))
def test_aggregator_first_comparable_week_validation(first_comparable_week):
    with pytest.raises(
        ValueError,
        match=re.escape(
            "first_comparable_week must be at least 2, "
            f"received {first_comparable_week}"
        ),
    ):
        WeeklyEpidemiologicalAggregator(first_comparable_week=first_comparable_week)


def test_aggregator_major_region_threshold_validation():
    with pytest.raises(ValueError, match="must not be negative"):
        WeeklyEpidemiologicalAggregator(major_region_threshold=-1)


def test_aggregator_column_maps_are_independent():
    first = WeeklyEpidemiologicalAggregator()
    second = WeeklyEpidemiologicalAggregator()

    assert first.regional_column_map == second.regional_column_map
    assert first.regional_column_map is not second.regional_column_map


def test_aggregator_regional_without_summable_column():
    # e.g. a regional column map which leaves out the ICU column
    sources = SourceTables(
        regional=get_regional_df([("RegionA", 10, 50, 25.0)]).drop(
            columns="icu_admissions"
        ),
        testing=get_weekly_df({"week_number": [10], "pcr_tests_performed": [100]}),
        national_mortality=get_weekly_df({"week_number": [10]}),
        care_mortality=get_weekly_df({"week_number": [10]}),
    )

    with pytest.raises(MissingColumnsError, match=re.escape("['icu_admissions']")):
        WeeklyEpidemiologicalAggregator()(sources)
