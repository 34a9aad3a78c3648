"""
Constants used throughout

These are the defaults of the workflow.
Most can be overridden when configuring
[IncidencePipeline][malaria_incidence.pipeline.IncidencePipeline].
"""

from __future__ import annotations

PERIOD_COLUMN: str = "period"
"""Column holding the (monthly) reporting period"""

DISTRICT_COLUMN: str = "district"
"""Column holding the reporting district"""

RAW_DISTRICT_COLUMN: str = "reported_district"
"""Name of the district column in the raw input files"""

DATA_TYPE_COLUMN: str = "data_type"
"""Column holding the reporting category"""

AGE_GROUP_COLUMN: str = "age_group"
"""Column holding the age group"""

TOTAL_COLUMN: str = "total"
"""Column holding case counts"""

YEAR_COLUMN: str = "year"
"""Column holding the calendar year"""

POPULATION_COLUMN: str = "population"
"""Column holding population"""

PROVINCE_COLUMN: str = "province"
"""Column holding the province name in population reference tables"""

INCIDENCE_COLUMN: str = "incidence_per_1000"
"""Column holding monthly incidence per 1,000 population"""

TOTAL_INCIDENCE_COLUMN: str = "total_incidence"
"""Column holding incidence summed over a year"""

N_MONTHS_COLUMN: str = "n_months"
"""Column holding the number of distinct months reported in a year"""

PARTIAL_COLUMN: str = "partial"
"""Column flagging years with fewer than a full year of months"""

LABEL_COLUMN: str = "label"
"""Column holding the text to display for annual totals"""

CASE_RECORD_COLUMNS: tuple[str, ...] = (
    PERIOD_COLUMN,
    DISTRICT_COLUMN,
    DATA_TYPE_COLUMN,
    AGE_GROUP_COLUMN,
    TOTAL_COLUMN,
)
"""Columns of a case records table"""

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "Clinical",
    "Confirmed",
    "Confirmed_Passive_CHW",
)
"""
Reporting categories retained by default

Clinical cases are diagnosed without a test,
confirmed cases are tested at a health facility
and passive CHW cases are confirmed by community health workers.
"""

DEFAULT_ANNUAL_GROWTH_RATE: float = 1.028
"""Default multiplicative annual population growth factor (2.8% per year)"""

PER_POPULATION: int = 1000
"""Incidence is expressed per this many people"""

MONTHS_PER_YEAR: int = 12
"""Number of months in a complete year"""

PARTIAL_YEAR_MARKER: str = "*"
"""Appended to the label of annual totals for partial years"""
