"""
Projection of population from a baseline year using compound growth
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import attr
import numpy as np
import pandas as pd
from attrs import define, field

from malaria_incidence.constants import POPULATION_COLUMN, YEAR_COLUMN
from malaria_incidence.exceptions import InvalidParameterError
from malaria_incidence.typing import NUMERIC_DATA

logger = logging.getLogger(__name__)


def assert_valid_year(name: str, value: Any) -> None:
    """
    Assert that a value can be used as a year

    Parameters
    ----------
    name
        Name of the parameter (used in the error message)

    value
        Value to check

    Raises
    ------
    InvalidParameterError
        `value` is not an integer
    """
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidParameterError(
            name=name, value=value, reason="Years must be integers"
        )


def assert_positive_finite(name: str, value: Any) -> None:
    """
    Assert that a value is a strictly positive, finite number

    Parameters
    ----------
    name
        Name of the parameter (used in the error message)

    value
        Value to check

    Raises
    ------
    InvalidParameterError
        `value` is not strictly positive and finite
    """
    try:
        ok = bool(np.isfinite(value) and value > 0)
    except TypeError as exc:
        raise InvalidParameterError(
            name=name, value=value, reason="Value must be a number"
        ) from exc

    if not ok:
        raise InvalidParameterError(
            name=name, value=value, reason="Value must be positive and finite"
        )


def project_population(
    baseline_population: NUMERIC_DATA,
    baseline_year: int,
    target_year: int,
    annual_growth_rate: NUMERIC_DATA,
) -> NUMERIC_DATA:
    """
    Project population from a baseline year to a target year

    The population is assumed to grow by a constant factor every year, i.e.

    ```
    population = baseline_population * annual_growth_rate ** (target_year - baseline_year)
    ```

    `target_year` can be before `baseline_year`,
    in which case the population is projected backwards.

    Parameters
    ----------
    baseline_population
        Population in `baseline_year`

    baseline_year
        Year in which the population is `baseline_population`

    target_year
        Year for which to get the population

    annual_growth_rate
        Multiplicative growth factor per year.
        This is a factor, not a percentage,
        e.g. use 1.028 for 2.8% growth per year.

    Returns
    -------
    :
        Population in `target_year`.
        If `target_year == baseline_year`, this is `baseline_population`, unchanged.

    Raises
    ------
    InvalidParameterError
        `baseline_population` or `annual_growth_rate` is not positive,
        or either of the years is not an integer,
        or the projected population overflows

    Examples
    --------
    >>> round(project_population(2_000_000, 2022, 2023, 1.028), 1)
    2056000.0
    >>> project_population(2_000_000, 2022, 2022, 1.028)
    2000000
    >>> round(project_population(2_000_000, 2022, 2020, 1.1), 1)
    1652892.6
    """
    assert_positive_finite("baseline_population", baseline_population)
    assert_positive_finite("annual_growth_rate", annual_growth_rate)
    assert_valid_year("baseline_year", baseline_year)
    assert_valid_year("target_year", target_year)

    n_years = int(target_year) - int(baseline_year)
    if n_years == 0:
        return baseline_population

    # Python floats so that integer rates work with negative exponents
    try:
        res = baseline_population * float(annual_growth_rate) ** n_years
    except OverflowError as exc:
        raise InvalidParameterError(
            name="target_year",
            value=target_year,
            reason=(
                f"Projecting from {baseline_year=} "
                f"with {annual_growth_rate=} overflows"
            ),
        ) from exc

    if not np.isfinite(res):
        raise InvalidParameterError(
            name="target_year",
            value=target_year,
            reason=(
                f"Projecting {baseline_population=} from {baseline_year=} "
                f"with {annual_growth_rate=} overflows"
            ),
        )

    return res


@define(frozen=True)
class PopulationBaseline:
    """
    Known population of a province in a reference year

    Typically this comes from a census.
    """

    province: str
    """Province to which the population applies"""

    baseline_year: int = field()
    """Year to which the population applies"""

    baseline_population: float = field()
    """Population in the baseline year"""

    @baseline_year.validator
    def validate_baseline_year(self, attribute: attr.Attribute[Any], value: int) -> None:
        """
        Validate the baseline year
        """
        assert_valid_year(attribute.name, value)

    @baseline_population.validator
    def validate_baseline_population(
        self, attribute: attr.Attribute[Any], value: float
    ) -> None:
        """
        Validate the baseline population
        """
        assert_positive_finite(attribute.name, value)


@define
class PopulationProjector:
    """
    Projects population from a baseline, remembering the result for each year

    Many rows of monthly data share the same year,
    so we only do the calculation once per year.
    """

    baseline: PopulationBaseline
    """Baseline from which to project"""

    annual_growth_rate: float = field()
    """Multiplicative growth factor per year (see [project_population][(m).])"""

    _cache: dict[int, NUMERIC_DATA] = field(factory=dict, init=False, repr=False)

    @annual_growth_rate.validator
    def validate_annual_growth_rate(
        self, attribute: attr.Attribute[Any], value: float
    ) -> None:
        """
        Validate the annual growth rate
        """
        assert_positive_finite(attribute.name, value)

    def __call__(self, year: int) -> NUMERIC_DATA:
        """
        Get the population in a given year

        Parameters
        ----------
        year
            Year of interest

        Returns
        -------
        :
            Projected population
        """
        assert_valid_year("year", year)
        year = int(year)
        if year not in self._cache:
            self._cache[year] = project_population(
                baseline_population=self.baseline.baseline_population,
                baseline_year=self.baseline.baseline_year,
                target_year=year,
                annual_growth_rate=self.annual_growth_rate,
            )
            logger.debug(
                "Projected population for %s in %d: %s",
                self.baseline.province,
                year,
                self._cache[year],
            )

        return self._cache[year]


def get_projected_population(
    baseline: PopulationBaseline,
    years: Iterable[int],
    annual_growth_rate: float,
) -> pd.DataFrame:
    """
    Get the projected population for a collection of years

    Parameters
    ----------
    baseline
        Baseline from which to project

    years
        Years of interest.
        Duplicates are removed.

    annual_growth_rate
        Multiplicative growth factor per year

    Returns
    -------
    :
        Projected population, one row per distinct year,
        sorted by year, with columns `year` and `population`
    """
    projector = PopulationProjector(
        baseline=baseline, annual_growth_rate=annual_growth_rate
    )
    distinct_years = sorted({int(y) for y in years})

    return pd.DataFrame(
        {
            YEAR_COLUMN: pd.Series(distinct_years, dtype=int),
            POPULATION_COLUMN: pd.Series(
                [projector(y) for y in distinct_years], dtype=float
            ),
        }
    )
