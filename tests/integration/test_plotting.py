"""
Integration tests of `malaria_incidence.plotting`
"""

from __future__ import annotations

import pytest

from malaria_incidence.exceptions import InvalidParameterError
from malaria_incidence.pipeline import IncidencePipeline
from malaria_incidence.plotting import (
    CategoryDisplayConfig,
    plot_annual_bars,
    plot_incidence_overview,
    plot_monthly_stacked_area,
)
from malaria_incidence.testing import get_demo_case_records

matplotlib = pytest.importorskip("matplotlib")
pytest.importorskip("seaborn")
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402


@pytest.fixture
def pipeline_result(narrative_baseline):
    return IncidencePipeline(baseline=narrative_baseline)(get_demo_case_records())


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_plot_monthly_stacked_area(pipeline_result):
    ax = plot_monthly_stacked_area(pipeline_result.incidence)

    legend_texts = [t.get_text() for t in ax.get_legend().get_texts()]
    # Legend reads top of the stack first
    assert legend_texts == [
        "Confirmed (community health worker)",
        "Confirmed (health facility)",
        "Clinical",
    ]


def test_plot_annual_bars(pipeline_result):
    ax = plot_annual_bars(pipeline_result.annual_summary, pipeline_result.annual_labels)

    texts = [t.get_text() for t in ax.texts]
    assert "529" in texts
    assert "698" in texts
    assert "473*" in texts
    assert "* Partial year (2024: 6 months)" in texts
    assert [t.get_text() for t in ax.get_xticklabels()] == ["2022", "2023", "2024"]


def test_plot_incidence_overview(pipeline_result):
    fig = plot_incidence_overview(
        pipeline_result.incidence,
        pipeline_result.annual_summary,
        pipeline_result.annual_labels,
        title="Incidence more than doubled",
    )

    assert len(fig.axes) == 2
    assert fig.get_suptitle() == "Incidence more than doubled"
    assert len(fig.legends) == 1
    # The panels don't have their own legends
    assert all(ax.get_legend() is None for ax in fig.axes)


def test_custom_display_order(pipeline_result):
    display_config = CategoryDisplayConfig(
        order=("Confirmed_Passive_CHW", "Confirmed", "Clinical"),
        colours={
            "Clinical": "tab:grey",
            "Confirmed": "tab:blue",
            "Confirmed_Passive_CHW": "tab:orange",
        },
    )

    ax = plot_monthly_stacked_area(
        pipeline_result.incidence, display_config=display_config
    )

    legend_texts = [t.get_text() for t in ax.get_legend().get_texts()]
    assert legend_texts[-1] == "Confirmed (community health worker)"


def test_display_config_requires_colours():
    with pytest.raises(InvalidParameterError, match="No colour for categories"):
        CategoryDisplayConfig(order=("Clinical", "Suspected"))


def test_unknown_category_in_data(pipeline_result):
    display_config = CategoryDisplayConfig(
        order=("Clinical",), colours={"Clinical": "tab:grey"}
    )

    with pytest.raises(InvalidParameterError, match="without a display order"):
        plot_monthly_stacked_area(
            pipeline_result.incidence, display_config=display_config
        )


def test_plotting_leaves_global_style_alone(pipeline_result):
    rc_before = dict(matplotlib.rcParams)

    plot_incidence_overview(
        pipeline_result.incidence,
        pipeline_result.annual_summary,
        pipeline_result.annual_labels,
    )

    changed = {
        k
        for k, v in matplotlib.rcParams.items()
        if k != "backend" and str(v) != str(rc_before.get(k))
    }
    assert not changed
