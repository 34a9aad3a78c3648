"""
Aggregation of case records to monthly totals
"""

from __future__ import annotations

import logging
from collections.abc import Collection

import pandas as pd

from malaria_incidence.assertions import assert_has_columns
from malaria_incidence.constants import (
    DATA_TYPE_COLUMN,
    DEFAULT_CATEGORIES,
    PERIOD_COLUMN,
    TOTAL_COLUMN,
)
from malaria_incidence.typing import CaseRecordsDataFrame

logger = logging.getLogger(__name__)


def filter_categories(
    case_records: CaseRecordsDataFrame,
    categories: Collection[str] = DEFAULT_CATEGORIES,
) -> CaseRecordsDataFrame:
    """
    Keep only the case records in the given categories

    Records in other categories are dropped, they are not an error.

    Parameters
    ----------
    case_records
        Case records to filter

    categories
        Categories (values of the `data_type` column) to keep

    Returns
    -------
    :
        Case records in `categories`
    """
    keep = case_records[DATA_TYPE_COLUMN].isin(list(categories))
    if not keep.all():
        logger.debug(
            "Dropping %d case record(s) in categories %s",
            (~keep).sum(),
            sorted(case_records.loc[~keep, DATA_TYPE_COLUMN].unique()),
        )

    return case_records.loc[keep]


def fill_missing_totals(case_records: CaseRecordsDataFrame) -> CaseRecordsDataFrame:
    """
    Treat missing case counts as zero

    Parameters
    ----------
    case_records
        Case records

    Returns
    -------
    :
        A copy of `case_records` with missing totals set to zero
    """
    missing = case_records[TOTAL_COLUMN].isnull()
    if missing.any():
        logger.info("Treating %d missing total(s) as zero", missing.sum())

    return case_records.assign(**{TOTAL_COLUMN: case_records[TOTAL_COLUMN].fillna(0.0)})


def aggregate_monthly_totals(
    case_records: CaseRecordsDataFrame,
    categories: Collection[str] = DEFAULT_CATEGORIES,
) -> pd.DataFrame:
    """
    Aggregate case records to monthly totals per category

    Totals are summed across districts and age groups.

    Parameters
    ----------
    case_records
        Case records to aggregate

    categories
        Categories to retain, everything else is dropped

    Returns
    -------
    :
        Monthly totals with columns `period`, `data_type` and `total`.
        There is exactly one row per (`period`, `data_type`) combination
        that appears after filtering.
        Rows are sorted by `period`, then `data_type`.

    Raises
    ------
    DataFormatError
        A required column is missing from `case_records`

    Examples
    --------
    >>> case_records = pd.DataFrame(
    ...     {
    ...         "period": pd.PeriodIndex(["2022-01", "2022-01", "2022-01"], freq="M"),
    ...         "district": ["A", "B", "B"],
    ...         "data_type": ["Clinical", "Clinical", "Other"],
    ...         "age_group": ["Under5", "Over5", "Over5"],
    ...         "total": [3.0, None, 10.0],
    ...     }
    ... )
    >>> aggregate_monthly_totals(case_records)  # doctest: +NORMALIZE_WHITESPACE
        period  data_type  total
    0  2022-01   Clinical    3.0
    """
    assert_has_columns(case_records, [PERIOD_COLUMN, DATA_TYPE_COLUMN, TOTAL_COLUMN])

    retained = fill_missing_totals(filter_categories(case_records, categories))

    res = (
        retained.groupby([PERIOD_COLUMN, DATA_TYPE_COLUMN], observed=True, sort=True)[
            TOTAL_COLUMN
        ]
        .sum()
        .reset_index()
    )
    logger.info(
        "Aggregated %d case record(s) to %d monthly total(s)",
        retained.shape[0],
        res.shape[0],
    )

    return res
