# ---
# jupyter:
#   jupytext:
#     text_representation:
#       extension: .py
#       format_name: percent
#       format_version: '1.3'
#       jupytext_version: 1.16.6
#   kernelspec:
#     display_name: Python 3 (ipykernel)
#     language: python
#     name: python3
# ---

# %% [markdown]
# # Improving a malaria incidence figure
#
# Here we take monthly malaria case reports
# and improve, step by step, a figure of them
# until it is ready to go on a presentation slide.
#
# The key steps are:
#
# 1. aggregating the reports to monthly totals
# 1. adjusting for population growth, i.e. moving from counts to incidence
# 1. summing to annual totals, taking care with years we only have part of
# 1. putting it all together in one figure with a clear message

# %% [markdown]
# ## Imports

# %%
import matplotlib.pyplot as plt
import seaborn as sns

from malaria_incidence.aggregation import aggregate_monthly_totals
from malaria_incidence.annual import (
    calculate_percentage_change,
    get_annual_total_labels,
    summarise_annual_incidence,
)
from malaria_incidence.incidence import calculate_incidence
from malaria_incidence.plotting import (
    CategoryDisplayConfig,
    plot_annual_bars,
    plot_incidence_overview,
    plot_monthly_stacked_area,
)
from malaria_incidence.population import PopulationBaseline, project_population
from malaria_incidence.testing import get_demo_case_records

# %%
sns.set_theme(style="ticks", context="talk")

# %% [markdown]
# ## Starting point
#
# The starting point is a table of case reports.
# There is one row per month, district, category (`data_type`) and age group.
# Here we use demo data,
# you would normally load your own with
# `malaria_incidence.loading.load_case_records`.

# %%
case_records = get_demo_case_records()
case_records.head(10)

# %% [markdown]
# Some rows have no total.
# We treat these as zero cases.
# There is also a category we aren't interested in
# (suspected cases, which are never tested).

# %%
case_records["data_type"].value_counts()

# %% [markdown]
# ## Monthly totals
#
# We sum over districts and age groups,
# keeping only the categories we want.

# %%
monthly_totals = aggregate_monthly_totals(case_records)
monthly_totals.head()

# %% [markdown]
# A first attempt at a figure is a stacked area chart of the raw counts.

# %%
display_config = CategoryDisplayConfig()

fig, ax = plt.subplots(figsize=(12, 5))
wide = monthly_totals.pivot(index="period", columns="data_type", values="total")
wide.index = wide.index.to_timestamp()
ax.stackplot(
    wide.index,
    *[wide[c] for c in display_config.order],
    labels=display_config.order,
    colors=[display_config.colours[c] for c in display_config.order],
)
ax.legend(loc="upper left")
ax.set_ylabel("Cases")

# %% [markdown]
# This is a start, but the population is growing.
# More cases could simply mean more people.

# %% [markdown]
# ## Adjusting for population
#
# We know the population from the 2022 census.
# We assume it grows by 2.8% per year,
# so the population in any other year is given by
#
# ```
# population = baseline_population * 1.028 ** (year - 2022)
# ```

# %%
baseline = PopulationBaseline(
    province="Eastern", baseline_year=2022, baseline_population=2_000_000
)
{
    year: project_population(
        baseline.baseline_population,
        baseline_year=baseline.baseline_year,
        target_year=year,
        annual_growth_rate=1.028,
    )
    for year in [2021, 2022, 2023, 2024]
}

# %% [markdown]
# With the population, we can calculate incidence,
# i.e. the number of cases per 1,000 people.

# %%
incidence = calculate_incidence(monthly_totals, baseline, annual_growth_rate=1.028)
incidence.head()

# %%
ax = plot_monthly_stacked_area(incidence)
ax.figure.set_size_inches(12, 5)

# %% [markdown]
# ## Annual totals
#
# Monthly data is noisy.
# For a slide, annual totals are easier to take in.
# However, we only have six months of data for 2024.
# Summing these as they are is fine,
# but anyone reading the figure has to know.
# The partial years are detected from the data
# (by counting the months reported)
# and are marked with an asterisk.

# %%
annual_summary = summarise_annual_incidence(incidence)
annual_summary

# %% [markdown]
# The totals across categories are rounded only after summing,
# so the labels aren't thrown off by rounding each category.
# Halves are rounded up.

# %%
annual_labels = get_annual_total_labels(annual_summary)
annual_labels

# %%
ax = plot_annual_bars(annual_summary, annual_labels)
ax.figure.set_size_inches(6, 5)

# %% [markdown]
# ## The message
#
# What is the headline?
# The incidence went up substantially from 2022 to 2023.

# %%
increase = calculate_percentage_change(annual_labels, from_year=2022, to_year=2023)
f"{increase:.0f}%"

# %% [markdown]
# ## Putting it all together
#
# Finally, we put the monthly and annual views side by side,
# with one legend and a title which states the message.

# %%
fig = plot_incidence_overview(
    incidence,
    annual_summary,
    annual_labels,
    title=f"Malaria incidence rose by {increase:.0f}% from 2022 to 2023",
    display_config=display_config,
)
