"""
Roll-up of monthly incidence to calendar years

Years with fewer than twelve months of data are summed as they are,
but flagged as partial so that anything derived from them can be annotated.
Which years are partial is detected from the data,
never assumed.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from pandas_openscm.grouping import groupby_except

from malaria_incidence.assertions import assert_has_columns
from malaria_incidence.constants import (
    DATA_TYPE_COLUMN,
    INCIDENCE_COLUMN,
    LABEL_COLUMN,
    MONTHS_PER_YEAR,
    N_MONTHS_COLUMN,
    PARTIAL_COLUMN,
    PARTIAL_YEAR_MARKER,
    PERIOD_COLUMN,
    TOTAL_COLUMN,
    TOTAL_INCIDENCE_COLUMN,
    YEAR_COLUMN,
)
from malaria_incidence.exceptions import MissingYearError
from malaria_incidence.typing import IncidenceDataFrame

logger = logging.getLogger(__name__)


def round_half_up(values: pd.Series[float]) -> pd.Series[int]:  # type: ignore # pandas-stubs confused
    """
    Round to the nearest integer, rounding halves up

    This differs from Python's and numpy's default rounding,
    which round halves to the nearest even number.
    Only intended for non-negative values
    (halves of negative values are rounded towards positive infinity).

    Parameters
    ----------
    values
        Values to round

    Returns
    -------
    :
        Rounded values

    Examples
    --------
    >>> round_half_up(pd.Series([0.5, 1.5, 2.5, 2.4999, 0.49999999999999994])).tolist()
    [1, 2, 3, 2, 0]
    """
    floor = np.floor(values)
    # Fractional part, `values + 0.5` can round up in floating point
    rounded = np.where(values - floor >= 0.5, np.ceil(values), floor)

    return pd.Series(rounded, index=values.index, name=values.name).astype(int)


def count_months_per_year(incidence: IncidenceDataFrame) -> pd.Series[int]:  # type: ignore # pandas-stubs confused
    """
    Count the number of distinct months reported in each year

    Months are counted across all categories,
    i.e. a month counts if any category reported in it.

    Parameters
    ----------
    incidence
        Incidence data (must have `year` and `period` columns)

    Returns
    -------
    :
        Number of distinct periods, indexed by year
    """
    assert_has_columns(incidence, [YEAR_COLUMN, PERIOD_COLUMN])

    return (
        incidence.groupby(YEAR_COLUMN, sort=True)[PERIOD_COLUMN]
        .nunique()
        .rename(N_MONTHS_COLUMN)
    )


def summarise_annual_incidence(
    incidence: IncidenceDataFrame,
    months_per_year: int = MONTHS_PER_YEAR,
) -> pd.DataFrame:
    """
    Sum monthly incidence to annual incidence per category

    Parameters
    ----------
    incidence
        Monthly incidence, as returned by
        [calculate_incidence][malaria_incidence.incidence.]

    months_per_year
        Number of months which make a complete year

    Returns
    -------
    :
        Annual incidence with columns
        `data_type`, `year`, `total_incidence`, `n_months` and `partial`,
        sorted by `year` then `data_type`.
        `n_months` is the number of distinct periods in the year
        (across all categories)
        and `partial` is `True` if this is less than `months_per_year`.
    """
    assert_has_columns(
        incidence, [PERIOD_COLUMN, DATA_TYPE_COLUMN, YEAR_COLUMN, INCIDENCE_COLUMN]
    )

    monthly = incidence.set_index([DATA_TYPE_COLUMN, YEAR_COLUMN, PERIOD_COLUMN])[
        INCIDENCE_COLUMN
    ]
    annual = (
        groupby_except(monthly, PERIOD_COLUMN)
        .sum()
        .rename(TOTAL_INCIDENCE_COLUMN)
        .reset_index()
    )

    n_months = annual[YEAR_COLUMN].map(count_months_per_year(incidence))
    res = annual.assign(
        **{
            N_MONTHS_COLUMN: n_months.astype(int),
            PARTIAL_COLUMN: n_months < months_per_year,
        }
    )
    res = res.sort_values([YEAR_COLUMN, DATA_TYPE_COLUMN]).reset_index(drop=True)

    partial_years = sorted(res.loc[res[PARTIAL_COLUMN], YEAR_COLUMN].unique().tolist())
    if partial_years:
        logger.info("Partial year(s) in the data: %s", partial_years)

    return res


def get_annual_total_labels(
    summary: pd.DataFrame,
    partial_marker: str = PARTIAL_YEAR_MARKER,
) -> pd.DataFrame:
    """
    Get the total incidence per year across all categories, ready for labelling

    The totals across categories are calculated first
    and only then rounded (with [round_half_up][(m).]),
    so the label is not affected by rounding each category.

    Parameters
    ----------
    summary
        Annual incidence per category, as returned by
        [summarise_annual_incidence][(m).]

    partial_marker
        Marker to append to the label of partial years

    Returns
    -------
    :
        One row per year, with columns
        `year`, `total_incidence` (unrounded), `total` (rounded),
        `partial` and `label`
    """
    assert_has_columns(
        summary, [DATA_TYPE_COLUMN, YEAR_COLUMN, TOTAL_INCIDENCE_COLUMN, PARTIAL_COLUMN]
    )

    by_category = summary.set_index([YEAR_COLUMN, DATA_TYPE_COLUMN])
    totals = groupby_except(by_category[TOTAL_INCIDENCE_COLUMN], DATA_TYPE_COLUMN).sum()
    partial = groupby_except(by_category[PARTIAL_COLUMN], DATA_TYPE_COLUMN).any()
    partial = partial.reindex(totals.index).astype(bool)

    rounded = round_half_up(totals)
    labels = rounded.astype(str) + partial.map({True: partial_marker, False: ""})

    res = pd.DataFrame(
        {
            TOTAL_INCIDENCE_COLUMN: totals,
            TOTAL_COLUMN: rounded,
            PARTIAL_COLUMN: partial,
            LABEL_COLUMN: labels,
        }
    )
    res = res.sort_index().reset_index()

    return res


def assert_labels_consistent_with_summary(
    labels: pd.DataFrame, summary: pd.DataFrame
) -> None:
    """
    Assert that the annual labels are the once-rounded sum of the summary

    Parameters
    ----------
    labels
        Annual total labels, as returned by [get_annual_total_labels][(m).]

    summary
        Annual incidence per category

    Raises
    ------
    AssertionError
        The labels' totals are not the once-rounded sum of the summary
    """
    exp = round_half_up(summary.groupby(YEAR_COLUMN)[TOTAL_INCIDENCE_COLUMN].sum())
    res = labels.set_index(YEAR_COLUMN)[TOTAL_COLUMN]

    comparison = exp.compare(res.reindex(exp.index), result_names=("summary", "labels"))
    if not comparison.empty or len(res) != len(exp):
        msg = f"Labels are inconsistent with the summary:\n{comparison}"
        raise AssertionError(msg)


def calculate_percentage_change(
    labels: pd.DataFrame, from_year: int, to_year: int
) -> float:
    """
    Calculate the percentage change in annual total between two years

    The rounded totals are used,
    so the result matches what a reader would calculate from the labels.

    Parameters
    ----------
    labels
        Annual total labels, as returned by [get_annual_total_labels][(m).]

    from_year
        Year from which to calculate the change

    to_year
        Year to which to calculate the change

    Returns
    -------
    :
        Percentage change from `from_year` to `to_year`

    Raises
    ------
    MissingYearError
        `from_year` or `to_year` is not in `labels`

    ZeroDivisionError
        The total in `from_year` is zero
    """
    totals = labels.set_index(YEAR_COLUMN)[TOTAL_COLUMN]
    for year in (from_year, to_year):
        if year not in totals.index:
            raise MissingYearError(year=year, available_years=totals.index.tolist())

    start = totals.loc[from_year]
    if start == 0:
        msg = f"Cannot calculate a percentage change from {from_year=}, its total is zero"
        raise ZeroDivisionError(msg)

    return float((totals.loc[to_year] - start) / start * 100)
