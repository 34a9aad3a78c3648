"""
Code to support our tests and tutorials

This is here, rather than in our `tests` directory
because of the issues that come
when you turn your tests into a package using `__init__.py` files
(for details, see https://docs.pytest.org/en/7.1.x/explanation/goodpractices.html#choosing-an-import-mode).
"""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np
import pandas as pd

from malaria_incidence.constants import (
    AGE_GROUP_COLUMN,
    DATA_TYPE_COLUMN,
    DISTRICT_COLUMN,
    MONTHS_PER_YEAR,
    PERIOD_COLUMN,
    RAW_DISTRICT_COLUMN,
    TOTAL_COLUMN,
)
from malaria_incidence.typing import CaseRecordsDataFrame

DEMO_DISTRICTS: tuple[str, ...] = ("Gasabo", "Kicukiro")
DEMO_AGE_GROUPS: tuple[str, ...] = ("Under5", "Over5")
DEMO_CATEGORY_SHARES: dict[str, float] = {
    "Clinical": 0.2,
    "Confirmed": 0.5,
    "Confirmed_Passive_CHW": 0.3,
}
DEMO_EXCLUDED_CATEGORY: str = "Suspected"

NARRATIVE_ANNUAL_CASES: dict[int, int] = {
    # 529 per 1,000 with a population of 2,000,000
    2022: 529 * 2_000,
    # 698 per 1,000 with a population of 2,000,000 * 1.028
    2023: 698 * 2_056,
    2024: 1_000_000,
}
"""
Annual cases which give the totals quoted in the tutorial

With a baseline population of 2,000,000 in 2022
and a growth rate of 1.028,
these give annual totals of 529 (2022) and 698 (2023) per 1,000 population.
"""

NARRATIVE_MONTHS_REPORTED: dict[int, int] = {2022: 12, 2023: 12, 2024: 6}
"""Number of months reported in each year of the tutorial's data"""


def split_integer(total: int, n: int) -> list[int]:
    """
    Split an integer into `n` integer parts which differ by at most one

    Parameters
    ----------
    total
        Integer to split

    n
        Number of parts

    Returns
    -------
    :
        Parts, which sum to `total`

    Examples
    --------
    >>> split_integer(10, 3)
    [4, 3, 3]
    """
    base, remainder = divmod(total, n)

    return [base + 1 if i < remainder else base for i in range(n)]


def split_by_shares(total: int, shares: Mapping[str, float]) -> dict[str, int]:
    """
    Split an integer into integer parts according to shares

    Any remainder from rounding down goes to the last key.
    """
    res = {k: int(np.floor(total * v)) for k, v in shares.items()}
    last = list(shares)[-1]
    res[last] += total - sum(res.values())

    return res


def get_demo_case_records(
    annual_cases: Mapping[int, int] = NARRATIVE_ANNUAL_CASES,
    months_reported: Mapping[int, int] | None = None,
    include_excluded_category: bool = True,
    include_missing_totals: bool = True,
) -> CaseRecordsDataFrame:
    """
    Get demo case records

    The records are deterministic
    and the cases in the retained categories sum exactly to `annual_cases`.

    Parameters
    ----------
    annual_cases
        Total cases (across retained categories) in each year

    months_reported
        Number of months reported in each year (starting from January).
        Defaults to [NARRATIVE_MONTHS_REPORTED][(m).] for years it covers,
        twelve otherwise.

    include_excluded_category
        Should records in a category which is not retained by default be included?

    include_missing_totals
        Should records with missing totals be included?

    Returns
    -------
    :
        Case records
    """
    if months_reported is None:
        months_reported = {
            y: NARRATIVE_MONTHS_REPORTED.get(y, MONTHS_PER_YEAR) for y in annual_cases
        }

    n_splits = len(DEMO_DISTRICTS) * len(DEMO_AGE_GROUPS)
    rows = []
    for year, year_total in annual_cases.items():
        n_months = months_reported[year]
        for month, month_total in enumerate(split_integer(year_total, n_months), 1):
            period = pd.Period(year=year, month=month, freq="M")
            by_category = split_by_shares(month_total, DEMO_CATEGORY_SHARES)
            for data_type, category_total in by_category.items():
                parts = split_integer(category_total, n_splits)
                i = 0
                for district in DEMO_DISTRICTS:
                    for age_group in DEMO_AGE_GROUPS:
                        rows.append(
                            (period, district, data_type, age_group, float(parts[i]))
                        )
                        i += 1

            if include_excluded_category:
                rows.append(
                    (
                        period,
                        DEMO_DISTRICTS[0],
                        DEMO_EXCLUDED_CATEGORY,
                        DEMO_AGE_GROUPS[0],
                        1000.0,
                    )
                )

            if include_missing_totals:
                rows.append(
                    (period, DEMO_DISTRICTS[1], "Clinical", DEMO_AGE_GROUPS[1], np.nan)
                )

    res = pd.DataFrame(
        rows,
        columns=[
            PERIOD_COLUMN,
            DISTRICT_COLUMN,
            DATA_TYPE_COLUMN,
            AGE_GROUP_COLUMN,
            TOTAL_COLUMN,
        ],
    )

    return res.assign(**{PERIOD_COLUMN: res[PERIOD_COLUMN].astype("period[M]")})


def to_raw_case_reports(case_records: CaseRecordsDataFrame) -> pd.DataFrame:
    """
    Convert case records to the format of the raw input files

    Periods are written as dates on the 15th of the month
    (the day of the month carries no information)
    and the district column gets its raw name.

    Parameters
    ----------
    case_records
        Case records

    Returns
    -------
    :
        Raw case reports
    """
    return case_records.rename(columns={DISTRICT_COLUMN: RAW_DISTRICT_COLUMN}).assign(
        **{
            PERIOD_COLUMN: case_records[PERIOD_COLUMN].dt.strftime("%Y-%m-15"),
        }
    )
