"""
Constants that define the sources and the normalised tables

The source column names are the (Swedish) names used
in the published spreadsheets.
Everything downstream of the loaders only uses the normalised names.
"""

from __future__ import annotations

WEEK_NUMBER = "week_number"
"""Name of the week number column in all normalised tables"""

REGION = "region"
"""Name of the region column"""

DATE = "date"
"""Name of the column that holds the week's start date"""

YEAR = 2020
"""Year to which all week numbers refer"""

MIN_WEEK_NUMBER = 1
MAX_WEEK_NUMBER = 53

FIRST_COMPARABLE_WEEK = 2
"""
First week for which national excess mortality is comparable

The national source undercounts week 1, so it is excluded.
"""

MAJOR_REGION_THRESHOLD = 3000
"""
Regions with strictly more total cases than this are shown by name in charts
"""

OTHER_REGIONS_GROUP = "Other"
"""Display group used for all regions at or below the threshold"""

# Regional weekly source (Folkhälsomyndigheten)
REGIONAL_SHEET_NAME = "Veckodata Region"
REGIONAL_COLUMN_MAP: dict[str, str] = {
    "Region": REGION,
    "veckonummer": WEEK_NUMBER,
    "Antal_fall_vecka": "case_count",
    "Antal_fall_100000inv_vecka": "cases_per_100k",
    "Antal_intensivvårdade_vecka": "icu_admissions",
    "Antal_avlidna_vecka": "deaths",
}

REGIONAL_SUM_COLUMNS: tuple[str, ...] = ("case_count", "icu_admissions", "deaths")
"""
Columns of the regional table that can be summed across regions

`cases_per_100k` is deliberately absent,
a per-capita rate cannot be added up across regions.
"""

# Manually compiled PCR testing source
TESTING_SHEET_NAME: str | int = 0
TESTING_COLUMN_MAP: dict[str, str] = {
    "veckonummer": WEEK_NUMBER,
    "Antal_PCR_tester": "pcr_tests_performed",
}

# National mortality source (SCB)
NATIONAL_MORTALITY_SHEET_NAME = "Tabell 6"
NATIONAL_MORTALITY_SKIPROWS = 11
NATIONAL_MORTALITY_COLUMN_MAP: dict[str, str] = {
    "Vecka": WEEK_NUMBER,
    "Medelvärde 2015-2019": "baseline_mean_deaths_2015_2019",
    "Tot 2020": "observed_deaths_2020",
    "Överdödl. Riket": "excess_deaths",
}

# Elderly care mortality source (Socialstyrelsen), all aged 70+
CARE_MORTALITY_SHEET_NAME = "Jämf genomsnitt, antal"
CARE_MORTALITY_SKIPROWS = 3
CARE_MORTALITY_COLUMN_MAP: dict[str, str] = {
    "Vecka": WEEK_NUMBER,
    "Särskilt boende 2020": "deaths_nursing_home_2020",
    "Särskilt boende 2016-2019": "deaths_nursing_home_baseline",
    "Hemtjänst 2020": "deaths_home_care_2020",
    "Hemtjänst 2016-2019": "deaths_home_care_baseline",
    "Ingen av dessa insatser 2020": "deaths_no_care_2020",
    "Ingen av dessa insatser 2016-2019": "deaths_no_care_baseline",
}

CARE_COHORTS: tuple[str, ...] = ("nursing_home", "home_care", "no_care")
"""
Care-setting cohorts of the population aged 70+

The columns of the care mortality table follow the pattern
`deaths_{cohort}_2020` and `deaths_{cohort}_baseline`.
"""

UNDER_70_COHORT = "under_70"

DEFAULT_SOURCE_FILENAMES: dict[str, str] = {
    "regional": "Folkhalsomyndigheten_Covid19.xlsx",
    "testing": "pcr_tester_per_vecka.xlsx",
    "national_mortality": "preliminar_statistik_over_doda.xlsx",
    "care_mortality": "statistik_covid19_avlidna_aldre.xlsx",
}
"""
Default file names used when all sources live in the same directory
"""
