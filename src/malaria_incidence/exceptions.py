"""
Exceptions that are used throughout
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Any


class MissingOptionalDependencyError(ImportError):
    """
    Raised when an optional dependency is missing

    For example, plotting dependencies like matplotlib
    """

    def __init__(self, callable_name: str, requirement: str) -> None:
        """
        Initialise the error

        Parameters
        ----------
        callable_name
            The name of the callable that requires the dependency

        requirement
            The name of the requirement
        """
        error_msg = f"`{callable_name}` requires {requirement} to be installed"
        super().__init__(error_msg)


class InvalidParameterError(ValueError):
    """
    Raised when a parameter has a value we cannot work with
    """

    def __init__(self, name: str, value: Any, reason: str) -> None:
        """
        Initialise the error

        Parameters
        ----------
        name
            Name of the parameter

        value
            Value of the parameter

        reason
            Why `value` is invalid
        """
        error_msg = f"Invalid value for `{name}`: {value!r}. {reason}"
        super().__init__(error_msg)


class MissingBaselineError(LookupError):
    """
    Raised when there is no population baseline for the requested province/year
    """

    def __init__(
        self,
        province: str | None = None,
        year: int | None = None,
        known: Collection[Any] | None = None,
    ) -> None:
        """
        Initialise the error

        Parameters
        ----------
        province
            Province for which a baseline was requested

        year
            Year for which a baseline was requested

        known
            Known values, shown to help the user fix the lookup
        """
        error_msg = "No population baseline available"
        if province is not None:
            error_msg = f"{error_msg} for {province=}"

        if year is not None:
            error_msg = f"{error_msg} for {year=}"

        if known is not None:
            error_msg = f"{error_msg}. Known values: {sorted(known)}"

        super().__init__(error_msg)


class NonPositivePopulationError(ZeroDivisionError):
    """
    Raised when a population we would divide by is not strictly positive

    Non-finite populations are also rejected,
    because dividing by them gives zero incidence silently.
    """

    def __init__(self, population_by_year: dict[int, float]) -> None:
        """
        Initialise the error

        Parameters
        ----------
        population_by_year
            The offending population values, keyed by year
        """
        error_msg = (
            "Cannot calculate incidence, "
            "the population must be positive and finite. "
            f"Offending population values: {population_by_year}"
        )
        super().__init__(error_msg)


class DataFormatError(ValueError):
    """
    Raised when input data cannot be interpreted
    """

    def __init__(self, column: str, problem: str, offending: Any = None) -> None:
        """
        Initialise the error

        Parameters
        ----------
        column
            Column in which the problem was found

        problem
            Description of the problem

        offending
            The offending rows (or values), if available
        """
        error_msg = f"Problem with column {column!r}: {problem}"
        if offending is not None:
            error_msg = f"{error_msg}. Offending rows:\n{offending}"

        super().__init__(error_msg)


class MissingYearError(LookupError):
    """
    Raised when a year is requested that isn't in the data
    """

    def __init__(self, year: int, available_years: Collection[int]) -> None:
        """
        Initialise the error

        Parameters
        ----------
        year
            Requested year

        available_years
            Years that are available
        """
        error_msg = f"{year=} is not available. {sorted(available_years)=}"
        super().__init__(error_msg)
