"""
Conversion of monthly case totals to incidence per 1,000 population
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from malaria_incidence.assertions import assert_has_columns
from malaria_incidence.constants import (
    DATA_TYPE_COLUMN,
    DEFAULT_ANNUAL_GROWTH_RATE,
    INCIDENCE_COLUMN,
    PER_POPULATION,
    PERIOD_COLUMN,
    POPULATION_COLUMN,
    TOTAL_COLUMN,
    YEAR_COLUMN,
)
from malaria_incidence.exceptions import (
    MissingBaselineError,
    NonPositivePopulationError,
)
from malaria_incidence.population import PopulationBaseline, get_projected_population
from malaria_incidence.typing import IncidenceDataFrame

logger = logging.getLogger(__name__)


def calculate_incidence_from_population(
    monthly_totals: pd.DataFrame,
    population: pd.DataFrame,
) -> IncidenceDataFrame:
    """
    Calculate incidence from monthly totals and population per year

    Parameters
    ----------
    monthly_totals
        Monthly totals, as returned by
        [aggregate_monthly_totals][malaria_incidence.aggregation.]

    population
        Population per year, with columns `year` and `population`

    Returns
    -------
    :
        `monthly_totals` with the additional columns
        `year`, `population` and `incidence_per_1000`.
        There is one row per row in `monthly_totals`, in the same order.

    Raises
    ------
    MissingBaselineError
        There is no population for a year which appears in `monthly_totals`

    NonPositivePopulationError
        The population for a year which appears in `monthly_totals`
        is not strictly positive (or is not finite)
    """
    assert_has_columns(monthly_totals, [PERIOD_COLUMN, DATA_TYPE_COLUMN, TOTAL_COLUMN])
    assert_has_columns(population, [YEAR_COLUMN, POPULATION_COLUMN])

    population_by_year = population.set_index(YEAR_COLUMN)[POPULATION_COLUMN]
    if population_by_year.index.duplicated().any():
        msg = f"More than one population value per year:\n{population}"
        raise AssertionError(msg)

    years = monthly_totals[PERIOD_COLUMN].dt.year.astype(int)
    years_needed = set(years.unique().tolist())

    missing_years = years_needed.difference(population_by_year.index.tolist())
    if missing_years:
        raise MissingBaselineError(
            year=min(missing_years), known=population_by_year.index.tolist()
        )

    population_needed = population_by_year.loc[sorted(years_needed)].astype(float)
    invalid = ~(np.isfinite(population_needed) & (population_needed > 0))
    if invalid.any():
        raise NonPositivePopulationError(
            {int(y): float(p) for y, p in population_needed[invalid].items()}
        )

    row_population = years.map(population_needed)
    res = monthly_totals.assign(
        **{
            YEAR_COLUMN: years,
            POPULATION_COLUMN: row_population,
            INCIDENCE_COLUMN: monthly_totals[TOTAL_COLUMN]
            / row_population
            * PER_POPULATION,
        }
    )

    return res


def calculate_incidence(
    monthly_totals: pd.DataFrame,
    baseline: PopulationBaseline | None,
    annual_growth_rate: float = DEFAULT_ANNUAL_GROWTH_RATE,
) -> IncidenceDataFrame:
    """
    Calculate incidence per 1,000 population from monthly totals

    The population in each year is projected from `baseline`
    using [project_population][malaria_incidence.population.].

    Parameters
    ----------
    monthly_totals
        Monthly totals, as returned by
        [aggregate_monthly_totals][malaria_incidence.aggregation.]

    baseline
        Population baseline for the province the data covers

    annual_growth_rate
        Multiplicative growth factor per year

    Returns
    -------
    :
        `monthly_totals` with the additional columns
        `year`, `population` and `incidence_per_1000`

    Raises
    ------
    MissingBaselineError
        `baseline` is `None`

    NonPositivePopulationError
        The projected population is not strictly positive for some year
        (e.g. because of numerical underflow)
    """
    if baseline is None:
        raise MissingBaselineError()

    population = get_projected_population(
        baseline=baseline,
        years=monthly_totals[PERIOD_COLUMN].dt.year.unique().tolist(),
        annual_growth_rate=annual_growth_rate,
    )

    res = calculate_incidence_from_population(monthly_totals, population=population)
    logger.info(
        "Calculated incidence for %d monthly total(s) in %s using %d year(s) of population",
        res.shape[0],
        baseline.province,
        population.shape[0],
    )

    return res
