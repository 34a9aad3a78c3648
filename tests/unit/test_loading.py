"""
Tests of `malaria_incidence.loading`
"""

from __future__ import annotations

import io
import re

import numpy as np
import pandas as pd
import pytest

from malaria_incidence.exceptions import (
    DataFormatError,
    InvalidParameterError,
    MissingBaselineError,
)
from malaria_incidence.loading import (
    PopulationReference,
    load_case_records,
    load_population_reference,
    parse_case_records,
    parse_periods,
    parse_totals,
)
from malaria_incidence.population import PopulationBaseline

CASE_REPORTS_CSV = """period,reported_district,data_type,age_group,total
2022-01-01,Gasabo,Clinical,Under5,12
2022-01-31,Gasabo,Confirmed,Over5,
2022-02-15,Kicukiro,Confirmed_Passive_CHW,Under5,7
"""

POPULATION_CSV = """province,year,population
Eastern,2022,2000000
Kigali,2022,1745555
"""


def test_load_case_records():
    res = load_case_records(io.StringIO(CASE_REPORTS_CSV))

    assert res.columns.tolist() == [
        "period",
        "district",
        "data_type",
        "age_group",
        "total",
    ]
    assert res["period"].tolist() == [
        pd.Period("2022-01", freq="M"),
        pd.Period("2022-01", freq="M"),
        pd.Period("2022-02", freq="M"),
    ]
    assert res["district"].tolist() == ["Gasabo", "Gasabo", "Kicukiro"]
    np.testing.assert_equal(res["total"].to_numpy(), [12.0, np.nan, 7.0])


def test_parse_case_records_accepts_district_column():
    raw = pd.DataFrame(
        {
            "period": ["2022-03-01"],
            "district": ["Gasabo"],
            "data_type": ["Clinical"],
            "age_group": ["Over5"],
            "total": [3],
        }
    )

    res = parse_case_records(raw)

    assert res["district"].tolist() == ["Gasabo"]
    assert res["period"].tolist() == [pd.Period("2022-03", freq="M")]


def test_parse_case_records_missing_column():
    raw = pd.DataFrame({"period": ["2022-03-01"], "total": [3]})

    with pytest.raises(DataFormatError, match="required column"):
        parse_case_records(raw)


@pytest.mark.parametrize(
    "raw",
    (
        pytest.param(["2022-01-01", "not a date"], id="unparseable"),
        pytest.param(["2022-01-01", None], id="missing"),
    ),
)
def test_parse_periods_error(raw):
    with pytest.raises(
        DataFormatError,
        match=re.escape(
            "Problem with column 'period': value(s) could not be parsed as dates"
        ),
    ):
        parse_periods(pd.Series(raw))


def test_parse_periods_day_of_month_is_ignored():
    res = parse_periods(pd.Series(["2023-07-01", "2023-07-31"]))

    assert res.nunique() == 1


@pytest.mark.parametrize(
    "raw, problem",
    (
        pytest.param(["1", "a few"], "value(s) are not numeric", id="non-numeric"),
        pytest.param([1, -3], "case counts cannot be negative", id="negative"),
        pytest.param([1, 2.5], "case counts must be whole numbers", id="fractional"),
    ),
)
def test_parse_totals_error(raw, problem):
    with pytest.raises(
        DataFormatError,
        match=re.escape(f"Problem with column 'total': {problem}"),
    ):
        parse_totals(pd.Series(raw, dtype=object))


def test_parse_totals_keeps_missing():
    res = parse_totals(pd.Series([1, None, 3], dtype=object))

    np.testing.assert_equal(res.to_numpy(), [1.0, np.nan, 3.0])


def test_population_reference():
    reference = load_population_reference(io.StringIO(POPULATION_CSV))

    assert reference.get_population("Eastern", 2022) == 2_000_000
    assert reference.get_baseline("Kigali", 2022) == PopulationBaseline(
        province="Kigali", baseline_year=2022, baseline_population=1_745_555.0
    )


@pytest.mark.parametrize(
    "province, year, exp_msg",
    (
        pytest.param(
            "Western",
            2022,
            "No population baseline available for province='Western' for year=2022. "
            "Known values: ['Eastern', 'Kigali']",
            id="unknown-province",
        ),
        pytest.param(
            "Eastern",
            2012,
            "No population baseline available for province='Eastern' for year=2012. "
            "Known values: [2022]",
            id="unknown-year",
        ),
    ),
)
def test_population_reference_not_found(province, year, exp_msg):
    reference = load_population_reference(io.StringIO(POPULATION_CSV))

    with pytest.raises(MissingBaselineError, match=re.escape(exp_msg)):
        reference.get_population(province, year)


def test_population_reference_non_positive():
    reference = PopulationReference(
        pd.DataFrame({"province": ["Eastern"], "year": [2022], "population": [0]})
    )

    with pytest.raises(InvalidParameterError, match="must be positive"):
        reference.get_population("Eastern", 2022)


def test_population_reference_validation():
    with pytest.raises(DataFormatError, match="population"):
        PopulationReference(pd.DataFrame({"province": ["Eastern"], "year": [2022]}))


def test_parse_periods_mixed_formats():
    res = parse_periods(pd.Series(["2022-01-15", "Feb 2022", "2022/03/31"]))

    assert res.tolist() == [
        pd.Period("2022-01", freq="M"),
        pd.Period("2022-02", freq="M"),
        pd.Period("2022-03", freq="M"),
    ]


def test_parse_periods_explicit_format():
    with pytest.raises(DataFormatError, match="could not be parsed as dates"):
        parse_periods(pd.Series(["2022-01-15", "Feb 2022"]), date_format="%Y-%m-%d")
