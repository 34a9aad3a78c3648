"""
Loading of case reports and population reference data
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any, Union

import attr
import numpy as np
import pandas as pd
from attrs import define, field

from malaria_incidence.assertions import assert_has_columns
from malaria_incidence.constants import (
    AGE_GROUP_COLUMN,
    CASE_RECORD_COLUMNS,
    DATA_TYPE_COLUMN,
    DISTRICT_COLUMN,
    PERIOD_COLUMN,
    POPULATION_COLUMN,
    PROVINCE_COLUMN,
    RAW_DISTRICT_COLUMN,
    TOTAL_COLUMN,
    YEAR_COLUMN,
)
from malaria_incidence.exceptions import (
    DataFormatError,
    InvalidParameterError,
    MissingBaselineError,
)
from malaria_incidence.population import PopulationBaseline
from malaria_incidence.typing import NUMERIC_DATA, CaseRecordsDataFrame

logger = logging.getLogger(__name__)

FilePathOrBuffer = Union[str, Path, IO[str]]


def parse_periods(raw: pd.Series[Any], date_format: str | None = None) -> pd.Series:  # type: ignore # pandas-stubs confused
    """
    Parse raw period values into monthly periods

    The day of the month is ignored,
    e.g. "2022-01-01" and "2022-01-31" both become `Period("2022-01", "M")`.

    Parameters
    ----------
    raw
        Raw values

    date_format
        Format to pass to [pd.to_datetime][pandas.to_datetime].
        If not supplied, the format is inferred for each value separately,
        so files with mixed date formats can be read.

    Returns
    -------
    :
        Monthly periods

    Raises
    ------
    DataFormatError
        Any value could not be parsed (missing values included)
    """
    parsed = pd.to_datetime(
        raw,
        errors="coerce",
        format="mixed" if date_format is None else date_format,
    )
    unparseable = parsed.isnull()
    if unparseable.any():
        raise DataFormatError(
            column=PERIOD_COLUMN,
            problem="value(s) could not be parsed as dates",
            offending=raw.loc[unparseable],
        )

    return parsed.dt.to_period("M")


def parse_totals(raw: pd.Series[Any]) -> pd.Series[float]:  # type: ignore # pandas-stubs confused
    """
    Parse raw case counts

    Missing values are kept as missing.
    Turning them into zero is a decision for the aggregation step
    (see [aggregate_monthly_totals][malaria_incidence.aggregation.]).

    Parameters
    ----------
    raw
        Raw values

    Returns
    -------
    :
        Case counts as floats (so that missing values can be represented)

    Raises
    ------
    DataFormatError
        A value is not numeric, is negative or is not a whole number
    """
    totals = pd.to_numeric(raw, errors="coerce").astype(float)

    non_numeric = totals.isnull() & raw.notnull()
    if non_numeric.any():
        raise DataFormatError(
            column=TOTAL_COLUMN,
            problem="value(s) are not numeric",
            offending=raw.loc[non_numeric],
        )

    negative = totals < 0
    if negative.any():
        raise DataFormatError(
            column=TOTAL_COLUMN,
            problem="case counts cannot be negative",
            offending=raw.loc[negative],
        )

    not_whole = totals.notnull() & (np.floor(totals) != totals)
    if not_whole.any():
        raise DataFormatError(
            column=TOTAL_COLUMN,
            problem="case counts must be whole numbers",
            offending=raw.loc[not_whole],
        )

    return totals


def parse_case_records(
    raw: pd.DataFrame, date_format: str | None = None
) -> CaseRecordsDataFrame:
    """
    Convert raw case reports into a case records table

    Parameters
    ----------
    raw
        Raw case reports.
        The district may be in either a `reported_district` column
        (as in the raw files) or a `district` column.

    date_format
        Format of the period column, passed to [parse_periods][(m).]

    Returns
    -------
    :
        Case records, with the columns given by
        [CASE_RECORD_COLUMNS][malaria_incidence.constants.CASE_RECORD_COLUMNS]

    Raises
    ------
    DataFormatError
        A required column is missing or a value could not be interpreted
    """
    if RAW_DISTRICT_COLUMN in raw.columns:
        raw = raw.rename(columns={RAW_DISTRICT_COLUMN: DISTRICT_COLUMN})

    assert_has_columns(raw, CASE_RECORD_COLUMNS)

    res = pd.DataFrame(
        {
            PERIOD_COLUMN: parse_periods(raw[PERIOD_COLUMN], date_format=date_format),
            DISTRICT_COLUMN: raw[DISTRICT_COLUMN].astype(str),
            DATA_TYPE_COLUMN: raw[DATA_TYPE_COLUMN].astype(str),
            AGE_GROUP_COLUMN: raw[AGE_GROUP_COLUMN].astype(str),
            TOTAL_COLUMN: parse_totals(raw[TOTAL_COLUMN]),
        },
        index=raw.index,
    )

    return res


def load_case_records(
    path_or_buffer: FilePathOrBuffer, date_format: str | None = None
) -> CaseRecordsDataFrame:
    """
    Load case records from a CSV file

    Parameters
    ----------
    path_or_buffer
        File to load

    date_format
        Format of the period column, passed to [parse_periods][(m).]

    Returns
    -------
    :
        Case records

    Raises
    ------
    DataFormatError
        The file's content could not be interpreted
    """
    raw = pd.read_csv(
        path_or_buffer,
        dtype={
            RAW_DISTRICT_COLUMN: str,
            DATA_TYPE_COLUMN: str,
            AGE_GROUP_COLUMN: str,
            PERIOD_COLUMN: str,
        },
    )
    res = parse_case_records(raw, date_format=date_format)
    logger.info(
        "Loaded %d case records covering %d period(s)",
        res.shape[0],
        res[PERIOD_COLUMN].nunique(),
    )

    return res


@define
class PopulationReference:
    """
    Reference population, e.g. census results per province

    This is the source of the population baseline used in the incidence calculation.
    """

    table: pd.DataFrame = field()
    """
    Population table

    Must have the columns `province`, `year` and `population`.
    """

    @table.validator
    def validate_table(self, attribute: attr.Attribute[Any], value: pd.DataFrame) -> None:
        """
        Validate the population table
        """
        assert_has_columns(value, [PROVINCE_COLUMN, YEAR_COLUMN, POPULATION_COLUMN])

    def get_population(self, province: str, year: int) -> NUMERIC_DATA:
        """
        Get the population for a province in a given year

        Parameters
        ----------
        province
            Province of interest

        year
            Year of interest

        Returns
        -------
        :
            Population

        Raises
        ------
        MissingBaselineError
            There is no population for `province` in `year`

        InvalidParameterError
            The population found is not positive
        """
        locator = (self.table[PROVINCE_COLUMN] == province) & (
            self.table[YEAR_COLUMN] == year
        )
        res_l = self.table.loc[locator, POPULATION_COLUMN].tolist()

        if len(res_l) < 1:
            if (self.table[PROVINCE_COLUMN] == province).any():
                known = self.table.loc[
                    self.table[PROVINCE_COLUMN] == province, YEAR_COLUMN
                ].unique().tolist()
            else:
                known = self.table[PROVINCE_COLUMN].unique().tolist()

            raise MissingBaselineError(province=province, year=year, known=known)

        if len(res_l) > 1:
            msg = f"More than one population value for {province=} {year=}: {res_l}"
            raise AssertionError(msg)

        res = res_l[0]
        if not res > 0:
            raise InvalidParameterError(
                name=POPULATION_COLUMN,
                value=res,
                reason=f"Population for {province=} {year=} must be positive",
            )

        return res

    def get_baseline(self, province: str, year: int) -> PopulationBaseline:
        """
        Get a population baseline for a province

        Parameters
        ----------
        province
            Province of interest

        year
            Baseline year

        Returns
        -------
        :
            Population baseline
        """
        return PopulationBaseline(
            province=province,
            baseline_year=year,
            baseline_population=float(self.get_population(province, year)),
        )


def load_population_reference(path_or_buffer: FilePathOrBuffer) -> PopulationReference:
    """
    Load a population reference table from a CSV file

    Parameters
    ----------
    path_or_buffer
        File to load

    Returns
    -------
    :
        Population reference
    """
    table = pd.read_csv(path_or_buffer, dtype={PROVINCE_COLUMN: str})
    logger.info("Loaded population reference with %d row(s)", table.shape[0])

    return PopulationReference(table)
