"""
The weekly epidemiological aggregator

This ties the pieces together in a fixed order:

1. load the four sources
1. aggregate the regional data to national totals
1. join national totals with testing and mortality data
1. partition excess mortality by cohort
1. summarise the regions

Everything is recomputed from the source files on each run,
there is no state between runs.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import attr
import pandas as pd
from attrs import define, field, frozen

from swecovid.aggregation import aggregate_regions
from swecovid.constants import (
    CARE_MORTALITY_COLUMN_MAP,
    CARE_MORTALITY_SHEET_NAME,
    CARE_MORTALITY_SKIPROWS,
    DEFAULT_SOURCE_FILENAMES,
    FIRST_COMPARABLE_WEEK,
    MAJOR_REGION_THRESHOLD,
    NATIONAL_MORTALITY_COLUMN_MAP,
    NATIONAL_MORTALITY_SHEET_NAME,
    NATIONAL_MORTALITY_SKIPROWS,
    REGIONAL_COLUMN_MAP,
    REGIONAL_SHEET_NAME,
    REGIONAL_SUM_COLUMNS,
    TESTING_COLUMN_MAP,
    TESTING_SHEET_NAME,
    YEAR,
)
from swecovid.excess_mortality import calculate_excess_by_cohort
from swecovid.joining import add_national_incidence, join_national_weekly
from swecovid.loading import (
    load_care_mortality,
    load_national_mortality,
    load_regional_weekly,
    load_testing_weekly,
)
from swecovid.regional_summary import (
    add_display_group,
    build_region_summary,
    estimate_national_population,
)
from swecovid.typing import PathLike, SheetName

logger = logging.getLogger(__name__)


@frozen
class SourcePaths:
    """
    Paths to the four source spreadsheets
    """

    regional: Path = field(converter=Path)
    """
    Weekly cases, ICU admissions and deaths per region
    """

    testing: Path = field(converter=Path)
    """
    Manually compiled weekly PCR test counts
    """

    national_mortality: Path = field(converter=Path)
    """
    National weekly deaths compared with the 2015-2019 average
    """

    care_mortality: Path = field(converter=Path)
    """
    Weekly deaths among people aged 70+ by care setting
    """

    @classmethod
    def from_directory(
        cls,
        directory: PathLike,
        filenames: Mapping[str, str] | None = None,
    ) -> SourcePaths:
        """
        Initialise from a directory which holds all the sources

        Parameters
        ----------
        directory
            Directory which holds the sources

        filenames
            File names of the sources in `directory`.
            Any source not given here uses its name in
            [DEFAULT_SOURCE_FILENAMES][swecovid.constants.DEFAULT_SOURCE_FILENAMES].

        Returns
        -------
        :
            Initialised paths
        """
        directory = Path(directory)
        names = {**DEFAULT_SOURCE_FILENAMES, **(filenames or {})}

        return cls(**{key: directory / names[key] for key in DEFAULT_SOURCE_FILENAMES})


@define
class SourceTables:
    """
    Normalised source tables, as returned by the loaders
    """

    regional: pd.DataFrame
    """
    Weekly regional data, see [load_regional_weekly][swecovid.loading.]
    """

    testing: pd.DataFrame
    """
    Weekly testing data, see [load_testing_weekly][swecovid.loading.]
    """

    national_mortality: pd.DataFrame
    """
    National mortality, see [load_national_mortality][swecovid.loading.]
    """

    care_mortality: pd.DataFrame
    """
    Care-setting mortality, see [load_care_mortality][swecovid.loading.]
    """


@define
class AggregationResult:
    """
    Results of running [WeeklyEpidemiologicalAggregator][(m).]
    """

    regional: pd.DataFrame
    """
    Weekly regional data with week start date and display group
    """

    national: pd.DataFrame
    """
    National weekly cases joined with testing and mortality, plus derived rates
    """

    excess_by_cohort: pd.DataFrame
    """
    Weekly excess mortality partitioned by age and care-setting cohort
    """

    region_summary: pd.DataFrame
    """
    Totals, estimated population and display group per region
    """


@frozen
class WeeklyEpidemiologicalAggregator:
    """
    Aggregator of the weekly Swedish Covid-19 sources

    The defaults reproduce the published analysis of 2020.
    """

    year: int = YEAR
    """
    Year to which all week numbers refer
    """

    first_comparable_week: int = field(default=FIRST_COMPARABLE_WEEK)
    """
    First week for which the national excess mortality is used
    """

    major_region_threshold: float = field(default=MAJOR_REGION_THRESHOLD)
    """
    Regions with strictly more cases than this are displayed by name
    """

    regional_sheet_name: SheetName = REGIONAL_SHEET_NAME
    regional_column_map: dict[str, str] = field(
        factory=lambda: dict(REGIONAL_COLUMN_MAP)
    )

    testing_sheet_name: SheetName = TESTING_SHEET_NAME
    testing_column_map: dict[str, str] = field(factory=lambda: dict(TESTING_COLUMN_MAP))

    national_mortality_sheet_name: SheetName = NATIONAL_MORTALITY_SHEET_NAME
    national_mortality_skiprows: int = NATIONAL_MORTALITY_SKIPROWS
    national_mortality_column_map: dict[str, str] = field(
        factory=lambda: dict(NATIONAL_MORTALITY_COLUMN_MAP)
    )

    care_mortality_sheet_name: SheetName = CARE_MORTALITY_SHEET_NAME
    care_mortality_skiprows: int = CARE_MORTALITY_SKIPROWS
    care_mortality_column_map: dict[str, str] = field(
        factory=lambda: dict(CARE_MORTALITY_COLUMN_MAP)
    )

    @first_comparable_week.validator
    def validate_first_comparable_week(
        self, attribute: attr.Attribute[Any], value: int
    ) -> None:
        """
        Validate the first comparable week

        Week 1 is never comparable, so anything lower than 2 is an error
        """
        if value < FIRST_COMPARABLE_WEEK:
            msg = (
                f"{attribute.name} must be at least {FIRST_COMPARABLE_WEEK}, "
                f"received {value}"
            )
            raise ValueError(msg)

    @major_region_threshold.validator
    def validate_major_region_threshold(
        self, attribute: attr.Attribute[Any], value: float
    ) -> None:
        """
        Validate the major region threshold
        """
        if value < 0:
            msg = f"{attribute.name} must not be negative, received {value}"
            raise ValueError(msg)

    def load(self, paths: SourcePaths) -> SourceTables:
        """
        Load all the sources

        Parameters
        ----------
        paths
            Paths to the sources

        Returns
        -------
        :
            Normalised source tables

        Raises
        ------
        SourceFormatError
            Any of the sources could not be loaded.
            There is no partial result, every output needs every source.
        """
        return SourceTables(
            regional=load_regional_weekly(
                paths.regional,
                sheet_name=self.regional_sheet_name,
                column_map=self.regional_column_map,
            ),
            testing=load_testing_weekly(
                paths.testing,
                sheet_name=self.testing_sheet_name,
                column_map=self.testing_column_map,
            ),
            national_mortality=load_national_mortality(
                paths.national_mortality,
                sheet_name=self.national_mortality_sheet_name,
                skiprows=self.national_mortality_skiprows,
                column_map=self.national_mortality_column_map,
            ),
            care_mortality=load_care_mortality(
                paths.care_mortality,
                sheet_name=self.care_mortality_sheet_name,
                skiprows=self.care_mortality_skiprows,
                column_map=self.care_mortality_column_map,
            ),
        )

    def __call__(self, sources: SourceTables) -> AggregationResult:
        """
        Run the aggregation

        Parameters
        ----------
        sources
            Normalised source tables

        Returns
        -------
        :
            Aggregation results
        """
        national_cases = aggregate_regions(
            sources.regional, sum_columns=REGIONAL_SUM_COLUMNS
        )
        logger.info("Aggregated regions to %d national weeks", national_cases.shape[0])

        national = join_national_weekly(
            national_cases,
            testing=sources.testing,
            mortality=sources.national_mortality,
            year=self.year,
        )

        excess_by_cohort = calculate_excess_by_cohort(
            mortality=sources.national_mortality,
            care=sources.care_mortality,
            first_comparable_week=self.first_comparable_week,
            year=self.year,
        )
        logger.info(
            "Calculated excess mortality by cohort for %d weeks",
            excess_by_cohort.shape[0],
        )

        region_summary = build_region_summary(
            sources.regional, major_region_threshold=self.major_region_threshold
        )
        national = add_national_incidence(
            national, population=estimate_national_population(region_summary)
        )

        regional = add_display_group(sources.regional, region_summary, year=self.year)

        return AggregationResult(
            regional=regional,
            national=national,
            excess_by_cohort=excess_by_cohort,
            region_summary=region_summary,
        )

    def run(self, paths: SourcePaths) -> AggregationResult:
        """
        Load the sources and run the aggregation

        Parameters
        ----------
        paths
            Paths to the sources

        Returns
        -------
        :
            Aggregation results
        """
        return self(self.load(paths))
