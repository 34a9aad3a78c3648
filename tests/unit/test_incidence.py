"""
Tests of `malaria_incidence.incidence`
"""

from __future__ import annotations

import re

import numpy as np
import pandas as pd
import pytest

from malaria_incidence.exceptions import (
    MissingBaselineError,
    NonPositivePopulationError,
)
from malaria_incidence.incidence import (
    calculate_incidence,
    calculate_incidence_from_population,
)
from malaria_incidence.population import PopulationBaseline


@pytest.fixture
def monthly_totals():
    res = pd.DataFrame(
        [
            ("2023-01", "Confirmed", 2056.0),
            ("2022-01", "Clinical", 1000.0),
            ("2022-02", "Clinical", 0.0),
            ("2023-01", "Clinical", 4112.0),
        ],
        columns=["period", "data_type", "total"],
    )

    return res.assign(period=res["period"].astype("period[M]"))


def test_calculate_incidence(monthly_totals, narrative_baseline):
    res = calculate_incidence(
        monthly_totals, baseline=narrative_baseline, annual_growth_rate=1.028
    )

    # One row per input row, in the same order
    pd.testing.assert_frame_equal(res[monthly_totals.columns], monthly_totals)
    assert res["year"].tolist() == [2023, 2022, 2022, 2023]
    np.testing.assert_allclose(
        res["population"].to_numpy(),
        [2_056_000.0, 2_000_000.0, 2_000_000.0, 2_056_000.0],
    )
    np.testing.assert_allclose(
        res["incidence_per_1000"].to_numpy(), [1.0, 0.5, 0.0, 2.0], rtol=1e-12
    )


def test_incidence_matches_formula(monthly_totals, narrative_baseline):
    res = calculate_incidence(
        monthly_totals, baseline=narrative_baseline, annual_growth_rate=1.1
    )

    np.testing.assert_allclose(
        res["incidence_per_1000"], res["total"] / res["population"] * 1000
    )


def test_calculate_incidence_does_not_mutate_input(monthly_totals, narrative_baseline):
    before = monthly_totals.copy()

    calculate_incidence(monthly_totals, baseline=narrative_baseline)

    pd.testing.assert_frame_equal(monthly_totals, before)


def test_missing_baseline(monthly_totals):
    with pytest.raises(MissingBaselineError, match="No population baseline available"):
        calculate_incidence(monthly_totals, baseline=None)


def test_population_missing_for_year(monthly_totals):
    population = pd.DataFrame({"year": [2022], "population": [2_000_000.0]})

    with pytest.raises(
        MissingBaselineError,
        match=re.escape("No population baseline available for year=2023"),
    ):
        calculate_incidence_from_population(monthly_totals, population=population)


@pytest.mark.parametrize(
    "bad_population",
    (
        pytest.param(0.0, id="zero"),
        pytest.param(-5.0, id="negative"),
        pytest.param(np.inf, id="infinite"),
        pytest.param(np.nan, id="nan"),
    ),
)
def test_non_positive_population(monthly_totals, bad_population):
    population = pd.DataFrame(
        {"year": [2022, 2023], "population": [2_000_000.0, bad_population]}
    )

    with pytest.raises(
        NonPositivePopulationError,
        match=re.escape(f"Offending population values: {{2023: {bad_population}}}"),
    ):
        calculate_incidence_from_population(monthly_totals, population=population)


def test_non_positive_population_is_a_division_error(monthly_totals):
    population = pd.DataFrame({"year": [2022, 2023], "population": [0.0, 1.0]})

    with pytest.raises(ZeroDivisionError):
        calculate_incidence_from_population(monthly_totals, population=population)


def test_underflowing_projection_is_an_error():
    monthly_totals = pd.DataFrame(
        {
            "period": pd.PeriodIndex(["3022-01"], freq="M"),
            "data_type": ["Clinical"],
            "total": [10.0],
        }
    )
    baseline = PopulationBaseline(
        province="Eastern", baseline_year=2022, baseline_population=1.0
    )

    with pytest.raises(NonPositivePopulationError, match="3022"):
        calculate_incidence(monthly_totals, baseline=baseline, annual_growth_rate=1e-5)
