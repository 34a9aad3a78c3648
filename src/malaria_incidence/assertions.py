"""
Useful assertions
"""

from __future__ import annotations

from collections.abc import Collection, Sequence

import numpy as np
import pandas as pd

from malaria_incidence.exceptions import DataFormatError


def assert_has_columns(indf: pd.DataFrame, columns: Collection[str]) -> None:
    """
    Assert that a [pd.DataFrame][pandas.DataFrame] has the given columns

    Parameters
    ----------
    indf
        Data to verify

    columns
        Columns that must be present

    Raises
    ------
    DataFormatError
        One or more of `columns` is missing from `indf`
    """
    missing = [c for c in columns if c not in indf.columns]
    if missing:
        raise DataFormatError(
            column=", ".join(missing),
            problem=f"required column(s) missing. Available: {indf.columns.tolist()}",
        )


def assert_no_duplicate_keys(indf: pd.DataFrame, keys: Sequence[str]) -> None:
    """
    Assert that the combination of `keys` is unique within `indf`

    Parameters
    ----------
    indf
        Data to verify

    keys
        Columns which, together, should identify each row

    Raises
    ------
    AssertionError
        There are duplicate keys
    """
    duplicated = indf.duplicated(subset=list(keys), keep=False)
    if duplicated.any():
        msg = f"Duplicate {list(keys)} combinations:\n{indf.loc[duplicated]}"
        raise AssertionError(msg)


def assert_totals_are_conserved(
    before: pd.Series[float],  # type: ignore # pandas-stubs confused
    after: pd.Series[float],  # type: ignore # pandas-stubs confused
    rtol: float = 1e-10,
) -> None:
    """
    Assert that totals are the same before and after a transformation

    The two series are aligned on their index before comparing,
    missing values on either side count as a difference.

    Parameters
    ----------
    before
        Totals before the transformation

    after
        Totals after the transformation

    rtol
        Relative tolerance to use for the comparison

    Raises
    ------
    AssertionError
        The totals differ
    """
    before_aligned, after_aligned = before.align(after, join="outer")
    close = np.isclose(before_aligned, after_aligned, rtol=rtol, equal_nan=False)
    if not close.all():
        comparison = pd.DataFrame(
            {"before": before_aligned, "after": after_aligned}
        ).loc[~close]
        msg = f"Totals are not conserved:\n{comparison}"
        raise AssertionError(msg)
