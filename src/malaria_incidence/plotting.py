"""
Plotting of incidence, e.g. for a presentation slide

The order in which categories are stacked, their names and their colours
are set explicitly with [CategoryDisplayConfig][(m).].
None of the calculations depend on this order.

This module requires matplotlib and seaborn,
which are optional dependencies (install with the `plots` extra).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import attr
import numpy as np
import pandas as pd
from attrs import define, field

from malaria_incidence.assertions import assert_has_columns
from malaria_incidence.constants import (
    DATA_TYPE_COLUMN,
    DEFAULT_CATEGORIES,
    INCIDENCE_COLUMN,
    LABEL_COLUMN,
    N_MONTHS_COLUMN,
    PARTIAL_COLUMN,
    PARTIAL_YEAR_MARKER,
    PERIOD_COLUMN,
    TOTAL_INCIDENCE_COLUMN,
    YEAR_COLUMN,
)
from malaria_incidence.exceptions import (
    InvalidParameterError,
    MissingOptionalDependencyError,
)

if TYPE_CHECKING:
    import matplotlib.axes
    import matplotlib.figure

DEFAULT_COLOURS: dict[str, str] = {
    "Clinical": "#c6dbef",
    "Confirmed": "#4292c6",
    "Confirmed_Passive_CHW": "#08306b",
}
"""Default colour of each category"""

DEFAULT_DISPLAY_NAMES: dict[str, str] = {
    "Clinical": "Clinical",
    "Confirmed": "Confirmed (health facility)",
    "Confirmed_Passive_CHW": "Confirmed (community health worker)",
}
"""Default name shown for each category"""


@define
class CategoryDisplayConfig:
    """
    How to display categories

    Categories are stacked in `order`, first at the bottom.
    """

    order: tuple[str, ...] = field(default=DEFAULT_CATEGORIES)
    """Order in which to stack the categories"""

    colours: dict[str, str] = field(factory=lambda: dict(DEFAULT_COLOURS))
    """Colour of each category"""

    display_names: dict[str, str] = field(factory=lambda: dict(DEFAULT_DISPLAY_NAMES))
    """
    Name to show for each category

    Categories without a display name are shown with their raw name.
    """

    @colours.validator
    def validate_colours(
        self, attribute: attr.Attribute[Any], value: dict[str, str]
    ) -> None:
        """
        Validate that every category in `self.order` has a colour
        """
        missing = [c for c in self.order if c not in value]
        if missing:
            raise InvalidParameterError(
                name=attribute.name,
                value=value,
                reason=f"No colour for categories {missing}",
            )

    def get_display_name(self, category: str) -> str:
        """
        Get the name to display for a category

        Parameters
        ----------
        category
            Category

        Returns
        -------
        :
            Display name
        """
        return self.display_names.get(category, category)

    def get_plot_order(self, categories_in_data: Any) -> list[str]:
        """
        Get the categories to plot, in display order

        Parameters
        ----------
        categories_in_data
            Categories which appear in the data

        Returns
        -------
        :
            Categories in `self.order` which are also in the data

        Raises
        ------
        InvalidParameterError
            The data contains categories which aren't in `self.order`
        """
        in_data = set(categories_in_data)
        unknown = sorted(in_data.difference(self.order))
        if unknown:
            raise InvalidParameterError(
                name="order",
                value=self.order,
                reason=f"The data contains categories without a display order: {unknown}",
            )

        return [c for c in self.order if c in in_data]


def get_pyplot(callable_name: str) -> Any:
    """
    Get matplotlib's pyplot, checking that seaborn is available too

    No styling is applied, that is left to the caller
    (e.g. with [seaborn.set_theme][]).

    Parameters
    ----------
    callable_name
        Name of the callable which needs pyplot (for error messages)

    Returns
    -------
    :
        [matplotlib.pyplot][]

    Raises
    ------
    MissingOptionalDependencyError
        matplotlib or seaborn is not installed
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError as exc:
        raise MissingOptionalDependencyError(
            callable_name, requirement="matplotlib"
        ) from exc

    try:
        import seaborn  # noqa: F401
    except ImportError as exc:
        raise MissingOptionalDependencyError(
            callable_name, requirement="seaborn"
        ) from exc

    return plt


def despine(ax: matplotlib.axes.Axes) -> None:
    """
    Remove the top and right spines from an axes
    """
    import seaborn as sns

    sns.despine(ax=ax)


def plot_monthly_stacked_area(
    incidence: pd.DataFrame,
    ax: matplotlib.axes.Axes | None = None,
    display_config: CategoryDisplayConfig | None = None,
    legend: bool = True,
) -> matplotlib.axes.Axes:
    """
    Plot monthly incidence as a stacked area chart

    Parameters
    ----------
    incidence
        Monthly incidence, as returned by
        [calculate_incidence][malaria_incidence.incidence.]

    ax
        Axes on which to plot. If not supplied, a new figure is created.

    display_config
        Display configuration. If not supplied, the defaults are used.

    legend
        Should a legend be added to `ax`?

    Returns
    -------
    :
        Axes on which the chart was drawn
    """
    plt = get_pyplot("plot_monthly_stacked_area")
    if display_config is None:
        display_config = CategoryDisplayConfig()

    if ax is None:
        _, ax = plt.subplots()

    assert_has_columns(incidence, [PERIOD_COLUMN, DATA_TYPE_COLUMN, INCIDENCE_COLUMN])
    categories = display_config.get_plot_order(incidence[DATA_TYPE_COLUMN].unique())

    # Months missing for a category mean no cases, not a gap
    wide = (
        incidence.pivot(
            index=PERIOD_COLUMN, columns=DATA_TYPE_COLUMN, values=INCIDENCE_COLUMN
        )
        .reindex(columns=categories)
        .sort_index()
        .fillna(0.0)
    )

    ax.stackplot(
        wide.index.to_timestamp(),
        *[wide[c].to_numpy() for c in categories],
        labels=[display_config.get_display_name(c) for c in categories],
        colors=[display_config.colours[c] for c in categories],
    )
    ax.set_ylabel("Monthly incidence\nper 1,000 population")
    ax.set_xlabel("")
    ax.set_ylim(bottom=0)
    despine(ax)

    if legend:
        handles, labels = ax.get_legend_handles_labels()
        # Reverse so the legend reads in the same order as the stack
        ax.legend(handles[::-1], labels[::-1], loc="upper left", frameon=False)

    return ax


def plot_annual_bars(  # noqa: PLR0913
    summary: pd.DataFrame,
    labels: pd.DataFrame,
    ax: matplotlib.axes.Axes | None = None,
    display_config: CategoryDisplayConfig | None = None,
    legend: bool = True,
    partial_marker: str = PARTIAL_YEAR_MARKER,
) -> matplotlib.axes.Axes:
    """
    Plot annual incidence as stacked bars, labelled with the annual total

    Parameters
    ----------
    summary
        Annual incidence per category, as returned by
        [summarise_annual_incidence][malaria_incidence.annual.]

    labels
        Annual total labels, as returned by
        [get_annual_total_labels][malaria_incidence.annual.]

    ax
        Axes on which to plot. If not supplied, a new figure is created.

    display_config
        Display configuration. If not supplied, the defaults are used.

    legend
        Should a legend be added to `ax`?

    partial_marker
        Marker used in `labels` for partial years.
        Used to add an explanatory note if any year is partial.

    Returns
    -------
    :
        Axes on which the chart was drawn
    """
    plt = get_pyplot("plot_annual_bars")
    if display_config is None:
        display_config = CategoryDisplayConfig()

    if ax is None:
        _, ax = plt.subplots()

    assert_has_columns(
        summary, [YEAR_COLUMN, DATA_TYPE_COLUMN, TOTAL_INCIDENCE_COLUMN]
    )
    assert_has_columns(labels, [YEAR_COLUMN, LABEL_COLUMN, PARTIAL_COLUMN])
    categories = display_config.get_plot_order(summary[DATA_TYPE_COLUMN].unique())

    wide = (
        summary.pivot(
            index=YEAR_COLUMN, columns=DATA_TYPE_COLUMN, values=TOTAL_INCIDENCE_COLUMN
        )
        .reindex(columns=categories)
        .sort_index()
        .fillna(0.0)
    )
    x = np.arange(wide.shape[0])
    bottom = np.zeros(wide.shape[0])
    for category in categories:
        heights = wide[category].to_numpy()
        ax.bar(
            x,
            heights,
            bottom=bottom,
            color=display_config.colours[category],
            label=display_config.get_display_name(category),
        )
        bottom = bottom + heights

    labels_by_year = labels.set_index(YEAR_COLUMN).reindex(wide.index)
    for xv, height, text in zip(x, bottom, labels_by_year[LABEL_COLUMN]):
        ax.annotate(
            text,
            xy=(xv, height),
            xytext=(0, 4),
            textcoords="offset points",
            ha="center",
            va="bottom",
            fontweight="bold",
        )

    ax.set_xticks(x)
    ax.set_xticklabels([str(y) for y in wide.index])
    ax.set_ylabel("Annual incidence\nper 1,000 population")
    ax.set_ylim(top=bottom.max() * 1.15 if bottom.size else None)
    despine(ax)

    partial = labels_by_year[labels_by_year[PARTIAL_COLUMN].astype(bool)]
    if not partial.empty:
        if N_MONTHS_COLUMN in summary.columns:
            months = summary.groupby(YEAR_COLUMN)[N_MONTHS_COLUMN].first()
            detail = ", ".join(f"{y}: {months[y]} months" for y in partial.index)
        else:
            detail = ", ".join(str(y) for y in partial.index)

        ax.annotate(
            f"{partial_marker} Partial year ({detail})",
            xy=(1.0, -0.12),
            xycoords="axes fraction",
            ha="right",
            va="top",
            fontsize="x-small",
        )

    if legend:
        handles, legend_labels = ax.get_legend_handles_labels()
        ax.legend(handles[::-1], legend_labels[::-1], loc="upper left", frameon=False)

    return ax


def plot_incidence_overview(  # noqa: PLR0913
    incidence: pd.DataFrame,
    summary: pd.DataFrame,
    labels: pd.DataFrame,
    title: str = "Malaria incidence per 1,000 population",
    display_config: CategoryDisplayConfig | None = None,
    figsize: tuple[float, float] = (16.0, 6.0),
) -> matplotlib.figure.Figure:
    """
    Plot monthly and annual incidence side by side, with a shared legend and title

    Parameters
    ----------
    incidence
        Monthly incidence

    summary
        Annual incidence per category

    labels
        Annual total labels

    title
        Title of the figure

    display_config
        Display configuration. If not supplied, the defaults are used.

    figsize
        Size of the figure

    Returns
    -------
    :
        Figure
    """
    plt = get_pyplot("plot_incidence_overview")
    if display_config is None:
        display_config = CategoryDisplayConfig()

    fig, (ax_monthly, ax_annual) = plt.subplots(
        ncols=2, figsize=figsize, gridspec_kw=dict(width_ratios=[2, 1])
    )
    plot_monthly_stacked_area(
        incidence, ax=ax_monthly, display_config=display_config, legend=False
    )
    plot_annual_bars(
        summary, labels, ax=ax_annual, display_config=display_config, legend=False
    )
    ax_monthly.set_title("Monthly")
    ax_annual.set_title("Annual")

    handles, legend_labels = ax_monthly.get_legend_handles_labels()
    fig.legend(
        handles,
        legend_labels,
        loc="lower center",
        ncol=len(handles),
        frameon=False,
    )
    fig.suptitle(title)
    fig.tight_layout(rect=(0.0, 0.08, 1.0, 1.0))

    return fig
