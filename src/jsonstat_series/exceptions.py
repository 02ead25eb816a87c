"""
Exceptions that are used throughout
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Collection, Sequence
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


class UnrecognisedValueError(ValueError):
    """
    Raised when a value is not one of the known values
    """

    def __init__(
        self, unrecognised_value: Any, name: str, known_values: Collection[Any]
    ) -> None:
        """
        Initialise the error

        Parameters
        ----------
        unrecognised_value
            The value that was not recognised

        name
            The name of the thing being looked up

            This is only used to provide a helpful error message.

        known_values
            The values that would have been recognised
        """
        error_msg = (
            f"{unrecognised_value!r} is not a recognised value for {name}. "
            f"{known_values=}"
        )
        super().__init__(error_msg)


class ShapeMismatchError(ValueError):
    """
    Raised when a flat value array doesn't match the shape of its dimensions
    """

    def __init__(
        self, expected: int, actual: int, dimension_sizes: Sequence[int]
    ) -> None:
        """
        Initialise the error

        Parameters
        ----------
        expected
            Number of values implied by the dimensions

        actual
            Number of values received

        dimension_sizes
            Size of each dimension that contributes to the cartesian product
        """
        error_msg = (
            f"Expected {expected} values "
            f"(the product of dimension sizes {list(dimension_sizes)}), "
            f"received {actual}"
        )
        super().__init__(error_msg)


class DateFormatError(ValueError):
    """
    Raised when a time label is in none of the recognised formats
    """

    def __init__(self, label: str) -> None:
        """
        Initialise the error

        Parameters
        ----------
        label
            The time label that could not be parsed
        """
        error_msg = (
            f"Could not parse time label {label!r}. "
            "Recognised formats are 'YYYYMmm' (e.g. '2020M03') and 'YYYY'."
        )
        super().__init__(error_msg)


class MissingReferenceError(ValueError):
    """
    Raised when no series carries the tag a caller wants to normalise against
    """

    def __init__(self, reference_tag: str, known_tags: Collection[str]) -> None:
        """
        Initialise the error

        Parameters
        ----------
        reference_tag
            The tag that was looked for

        known_tags
            The tags which are carried by the series that were searched
        """
        error_msg = (
            f"No series is tagged with {reference_tag!r}. "
            f"known_tags={sorted(known_tags)}"
        )
        super().__init__(error_msg)


class DegenerateGoalError(ValueError):
    """
    Raised when a goal's target date is not strictly after the data
    """

    def __init__(self, target_date: dt.date, final_date: dt.date) -> None:
        """
        Initialise the error

        Parameters
        ----------
        target_date
            Date at which the goal should be reached

        final_date
            Last date of the data the goal is projected from
        """
        error_msg = (
            f"The target date ({target_date:%Y-%m-%d}) "
            f"must be after the final date of the data ({final_date:%Y-%m-%d})"
        )
        super().__init__(error_msg)


class EmptySeriesError(ValueError):
    """
    Raised when an operation needs data but the series (or group) has none
    """

    def __init__(self, operation: str) -> None:
        """
        Initialise the error

        Parameters
        ----------
        operation
            The operation that was attempted
        """
        error_msg = f"Cannot {operation} of a series without any entries"
        super().__init__(error_msg)
