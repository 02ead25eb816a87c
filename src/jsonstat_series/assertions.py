"""
Useful assertions
"""

from __future__ import annotations

import math
from collections.abc import Sequence, Sized

import pandas as pd

from jsonstat_series.exceptions import EmptySeriesError, ShapeMismatchError


def assert_values_match_dimension_sizes(
    values: Sized, dimension_sizes: Sequence[int]
) -> None:
    """
    Assert that a flat value array fills the cartesian product of its dimensions

    Parameters
    ----------
    values
        Flat value array

    dimension_sizes
        Size of each dimension that contributes to the cartesian product

    Raises
    ------
    ShapeMismatchError
        The number of values is not the product of `dimension_sizes`
    """
    expected = math.prod(dimension_sizes)
    if len(values) != expected:
        raise ShapeMismatchError(
            expected=expected, actual=len(values), dimension_sizes=dimension_sizes
        )


def assert_series_not_empty(data: pd.Series, operation: str) -> None:
    """
    Assert that a [pd.Series][pandas.Series] has at least one entry

    Parameters
    ----------
    data
        Data to check

    operation
        Operation that needs the data, used in the error message

    Raises
    ------
    EmptySeriesError
        `data` is empty
    """
    if data.empty:
        raise EmptySeriesError(operation=operation)


def assert_unique_dates(dates: pd.DatetimeIndex) -> None:
    """
    Assert that no date appears more than once

    Parameters
    ----------
    dates
        Dates to check

    Raises
    ------
    ValueError
        Some dates appear more than once
    """
    if not dates.is_unique:
        duplicated = dates[dates.duplicated()].unique().strftime("%Y-%m-%d").tolist()
        msg = f"Each date may only have one value. Duplicated dates: {duplicated}"
        raise ValueError(msg)
