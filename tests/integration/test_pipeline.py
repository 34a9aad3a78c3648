"""
Integration tests of `malaria_incidence.pipeline`
"""

from __future__ import annotations

import io

import numpy as np
import pandas as pd
import pytest

from malaria_incidence.annual import calculate_percentage_change, round_half_up
from malaria_incidence.exceptions import (
    InvalidParameterError,
    MissingBaselineError,
    NonPositivePopulationError,
)
from malaria_incidence.loading import load_case_records
from malaria_incidence.pipeline import IncidencePipeline
from malaria_incidence.population import PopulationBaseline
from malaria_incidence.testing import get_demo_case_records, to_raw_case_reports


def test_narrative_numbers(narrative_baseline):
    pipeline = IncidencePipeline(baseline=narrative_baseline, annual_growth_rate=1.028)

    res = pipeline(get_demo_case_records())

    np.testing.assert_allclose(
        res.population.set_index("year")["population"].loc[2023], 2_056_000.0
    )
    labels = res.annual_labels.set_index("year")
    assert labels["total"].loc[2022] == 529
    assert labels["total"].loc[2023] == 698
    assert labels["label"].tolist() == ["529", "698", "473*"]
    assert labels["partial"].tolist() == [False, False, True]

    percentage_increase = calculate_percentage_change(
        res.annual_labels, from_year=2022, to_year=2023
    )
    assert round(percentage_increase) == 32


def test_intermediate_tables(narrative_baseline):
    pipeline = IncidencePipeline(baseline=narrative_baseline)
    case_records = get_demo_case_records()

    res = pipeline(case_records)

    # 12 + 12 + 6 months, three categories each
    assert res.monthly_totals.shape[0] == 30 * 3
    assert res.incidence.shape[0] == res.monthly_totals.shape[0]
    assert set(res.monthly_totals["data_type"]) == {
        "Clinical",
        "Confirmed",
        "Confirmed_Passive_CHW",
    }
    assert res.annual_summary.shape[0] == 3 * 3
    assert res.annual_summary.loc[
        res.annual_summary["year"] == 2024, "n_months"
    ].unique().tolist() == [6]

    # Nothing was mutated along the way
    pd.testing.assert_frame_equal(case_records, get_demo_case_records())


def test_labels_are_rounded_sum_of_summary(narrative_baseline):
    res = IncidencePipeline(baseline=narrative_baseline)(get_demo_case_records())

    unrounded = res.annual_summary.groupby("year")["total_incidence"].sum()
    np.testing.assert_allclose(
        res.annual_labels.set_index("year")["total_incidence"], unrounded
    )
    assert (
        res.annual_labels.set_index("year")["total"]
        == round_half_up(unrounded)
    ).all()


def test_deterministic(narrative_baseline):
    pipeline = IncidencePipeline(baseline=narrative_baseline)

    first = pipeline(get_demo_case_records())
    second = pipeline(get_demo_case_records())

    for table in (
        "monthly_totals",
        "population",
        "incidence",
        "annual_summary",
        "annual_labels",
    ):
        first_csv = getattr(first, table).to_csv(index=False)
        second_csv = getattr(second, table).to_csv(index=False)
        assert first_csv == second_csv, table


def test_from_file(narrative_baseline):
    buffer = io.StringIO()
    to_raw_case_reports(get_demo_case_records()).to_csv(buffer, index=False)
    buffer.seek(0)

    res = IncidencePipeline(baseline=narrative_baseline)(load_case_records(buffer))

    assert res.annual_labels["label"].tolist() == ["529", "698", "473*"]


def test_run_checks_off_gives_same_result(narrative_baseline):
    case_records = get_demo_case_records()

    res_checked = IncidencePipeline(baseline=narrative_baseline)(case_records)
    res_unchecked = IncidencePipeline(baseline=narrative_baseline, run_checks=False)(
        case_records
    )

    pd.testing.assert_frame_equal(
        res_checked.annual_labels, res_unchecked.annual_labels
    )


def test_missing_baseline():
    pipeline = IncidencePipeline(baseline=None)

    with pytest.raises(MissingBaselineError):
        pipeline(get_demo_case_records())


def test_underflowing_population():
    pipeline = IncidencePipeline(
        baseline=PopulationBaseline(
            province="Eastern", baseline_year=1022, baseline_population=1.0
        ),
        annual_growth_rate=1e-5,
    )

    with pytest.raises(NonPositivePopulationError):
        pipeline(get_demo_case_records())


@pytest.mark.parametrize(
    "kwargs",
    (
        pytest.param({"annual_growth_rate": 0.0}, id="zero-growth-rate"),
        pytest.param({"annual_growth_rate": -1.0}, id="negative-growth-rate"),
        pytest.param({"categories": ()}, id="no-categories"),
        pytest.param({"categories": "Clinical"}, id="string-categories"),
        pytest.param({"months_per_year": 0}, id="zero-months-per-year"),
        pytest.param({"months_per_year": -12}, id="negative-months-per-year"),
        pytest.param({"months_per_year": 12.0}, id="float-months-per-year"),
    ),
)
def test_invalid_configuration(kwargs, narrative_baseline):
    with pytest.raises(InvalidParameterError):
        IncidencePipeline(baseline=narrative_baseline, **kwargs)
