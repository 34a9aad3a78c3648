"""
The complete workflow, from case records to annual totals
"""

from __future__ import annotations

import logging
from typing import Any

import attr
import numpy as np
import pandas as pd
from attrs import define, field

from malaria_incidence.aggregation import aggregate_monthly_totals, filter_categories
from malaria_incidence.annual import (
    assert_labels_consistent_with_summary,
    get_annual_total_labels,
    summarise_annual_incidence,
)
from malaria_incidence.assertions import (
    assert_has_columns,
    assert_no_duplicate_keys,
    assert_totals_are_conserved,
)
from malaria_incidence.constants import (
    CASE_RECORD_COLUMNS,
    DATA_TYPE_COLUMN,
    DEFAULT_ANNUAL_GROWTH_RATE,
    DEFAULT_CATEGORIES,
    LABEL_COLUMN,
    MONTHS_PER_YEAR,
    PARTIAL_YEAR_MARKER,
    PERIOD_COLUMN,
    TOTAL_COLUMN,
)
from malaria_incidence.exceptions import InvalidParameterError, MissingBaselineError
from malaria_incidence.incidence import calculate_incidence_from_population
from malaria_incidence.population import (
    PopulationBaseline,
    assert_positive_finite,
    get_projected_population,
)
from malaria_incidence.typing import CaseRecordsDataFrame

logger = logging.getLogger(__name__)


@define
class IncidencePipelineResult:
    """
    Result of running [IncidencePipeline][(m).]

    Every intermediate table is kept
    so that each step can be inspected (and plotted) on its own.
    """

    monthly_totals: pd.DataFrame
    """
    Monthly totals per category, summed over districts and age groups
    """

    population: pd.DataFrame
    """
    Projected population for each year in the data
    """

    incidence: pd.DataFrame
    """
    Monthly incidence per 1,000 population per category
    """

    annual_summary: pd.DataFrame
    """
    Annual incidence per category, with partial years flagged
    """

    annual_labels: pd.DataFrame
    """
    Annual incidence across all categories, rounded and labelled
    """


@define
class IncidencePipeline:
    """
    Pipeline which turns case records into population-adjusted annual totals
    """

    baseline: PopulationBaseline | None
    """
    Population baseline of the province the case records cover

    `None` is accepted here so that the configuration can be built
    before the baseline is known, but running without one is an error.
    """

    annual_growth_rate: float = field(default=DEFAULT_ANNUAL_GROWTH_RATE)
    """
    Multiplicative population growth factor per year, e.g. 1.028 for 2.8% growth
    """

    categories: tuple[str, ...] = field(default=DEFAULT_CATEGORIES)
    """
    Categories (values of `data_type`) to include, everything else is dropped
    """

    months_per_year: int = field(default=MONTHS_PER_YEAR)
    """
    Number of months which make a complete year
    """

    partial_marker: str = PARTIAL_YEAR_MARKER
    """
    Marker appended to the labels of partial years
    """

    run_checks: bool = True
    """
    If `True`, run checks on both input and output data

    If you are sure about your workflow,
    you can disable the checks to speed things up.
    """

    @annual_growth_rate.validator
    def validate_annual_growth_rate(
        self, attribute: attr.Attribute[Any], value: float
    ) -> None:
        """
        Validate the annual growth rate
        """
        assert_positive_finite(attribute.name, value)

    @months_per_year.validator
    def validate_months_per_year(
        self, attribute: attr.Attribute[Any], value: int
    ) -> None:
        """
        Validate the number of months per year
        """
        if (
            isinstance(value, bool)
            or not isinstance(value, (int, np.integer))
            or value < 1
        ):
            raise InvalidParameterError(
                name=attribute.name,
                value=value,
                reason="Must be a positive integer",
            )

    @categories.validator
    def validate_categories(
        self, attribute: attr.Attribute[Any], value: tuple[str, ...]
    ) -> None:
        """
        Validate the categories
        """
        if isinstance(value, str) or len(value) < 1:
            raise InvalidParameterError(
                name=attribute.name,
                value=value,
                reason="Supply a non-empty collection of category names",
            )

    def __call__(self, case_records: CaseRecordsDataFrame) -> IncidencePipelineResult:
        """
        Run the pipeline

        Parameters
        ----------
        case_records
            Case records to process

        Returns
        -------
        :
            Results of each step
        """
        if self.run_checks:
            assert_has_columns(case_records, CASE_RECORD_COLUMNS)

        monthly_totals = aggregate_monthly_totals(
            case_records, categories=self.categories
        )
        if self.run_checks:
            assert_no_duplicate_keys(monthly_totals, [PERIOD_COLUMN, DATA_TYPE_COLUMN])
            retained = filter_categories(case_records, categories=self.categories)
            assert_totals_are_conserved(
                before=retained.groupby(PERIOD_COLUMN)[TOTAL_COLUMN].sum(),
                after=monthly_totals.groupby(PERIOD_COLUMN)[TOTAL_COLUMN].sum(),
            )

        if self.baseline is None:
            raise MissingBaselineError()

        population = get_projected_population(
            baseline=self.baseline,
            years=monthly_totals[PERIOD_COLUMN].dt.year.unique().tolist(),
            annual_growth_rate=self.annual_growth_rate,
        )
        incidence = calculate_incidence_from_population(
            monthly_totals, population=population
        )

        annual_summary = summarise_annual_incidence(
            incidence, months_per_year=self.months_per_year
        )
        annual_labels = get_annual_total_labels(
            annual_summary, partial_marker=self.partial_marker
        )
        if self.run_checks:
            assert_labels_consistent_with_summary(annual_labels, annual_summary)

        logger.info(
            "Pipeline complete: %d year(s), labels %s",
            annual_labels.shape[0],
            annual_labels[LABEL_COLUMN].tolist(),
        )

        return IncidencePipelineResult(
            monthly_totals=monthly_totals,
            population=population,
            incidence=incidence,
            annual_summary=annual_summary,
            annual_labels=annual_labels,
        )
