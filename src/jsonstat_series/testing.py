"""
Code to support our tests

This is here, rather than in our `tests` directory
because of the issues that come
when you turn your tests into a package using `__init__.py` files
(for details, see https://docs.pytest.org/en/7.1.x/explanation/goodpractices.html#choosing-an-import-mode).
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

import pandas as pd

from jsonstat_series.group import TimeSeriesGroup
from jsonstat_series.timeseries import TimeSeries


def get_jsonstat_like_response(  # noqa: PLR0913
    dimensions: Sequence[tuple[str, Sequence[str]]],
    metric_dimension: str,
    time_dimension: str,
    values: Sequence[int | None] | None = None,
    updated: str = "2020-05-11T08:00:00Z",
    label: str = "Test dataset",
) -> dict[str, Any]:
    """
    Get a JSON-stat data response for testing

    Parameters
    ----------
    dimensions
        Dimension ids and the labels of their values, in layout order

        Value ids are generated from the labels,
        except for `time_dimension` where (as is usual) ids and labels are the same.
        The category index of each dimension is written in reverse order,
        so consumers must order by position rather than by insertion.

    metric_dimension
        Id of the metric dimension

    time_dimension
        Id of the time dimension

    values
        Flat value array

        If not supplied, `0, 1, 2, ...` is used.

    updated
        Value of the dataset's `updated` field

    label
        Label of the dataset

    Returns
    -------
    :
        Decoded JSON of a data response
    """
    dimension: dict[str, Any] = {
        "id": [dimension_id for dimension_id, _ in dimensions],
        "size": [len(labels) for _, labels in dimensions],
        "role": {"metric": [metric_dimension], "time": [time_dimension]},
    }
    for dimension_id, labels in dimensions:
        if dimension_id == time_dimension:
            value_ids = list(labels)
        else:
            value_ids = [f"{dimension_id}{i}" for i in range(len(labels))]

        dimension[dimension_id] = {
            "label": dimension_id,
            "category": {
                "index": {
                    value_ids[i]: i for i in reversed(range(len(value_ids)))
                },
                "label": dict(zip(value_ids, labels)),
            },
        }

    if values is None:
        n_values = math.prod(
            len(labels)
            for dimension_id, labels in dimensions
            if dimension_id != metric_dimension
        )
        values = list(range(n_values))

    return {
        "dataset": {
            "dimension": dimension,
            "label": label,
            "source": "Test",
            "updated": updated,
            "value": list(values),
        }
    }


def get_table_info_like_response(
    table_id: str,
    variables: Sequence[tuple[str, Sequence[tuple[str, str]]]],
    time_variable: str,
    updated: str = "2020-05-11T08:00:00",
) -> dict[str, Any]:
    """
    Get a table-info response for testing

    Parameters
    ----------
    table_id
        Id of the table

    variables
        Variable ids and the (id, text) of each of their values

    time_variable
        Id of the time variable

    updated
        Value of the `updated` field

    Returns
    -------
    :
        Decoded JSON of a table-info response
    """
    return {
        "id": table_id,
        "text": f"Table {table_id}",
        "unit": "number",
        "updated": updated,
        "active": True,
        "variables": [
            {
                "id": variable_id,
                "text": variable_id.lower(),
                "elimination": variable_id != time_variable,
                "time": variable_id == time_variable,
                "values": [{"id": i, "text": text} for i, text in values],
            }
            for variable_id, values in variables
        ],
    }


def assert_timeseries_equal(res: TimeSeries, exp: TimeSeries) -> None:
    """
    Assert two [TimeSeries][(p).timeseries.] are equal

    Parameters
    ----------
    res
        Result

    exp
        Expected value

    Raises
    ------
    AssertionError
        The series aren't equal
    """
    if res.tags != exp.tags:
        msg = f"Differences in the tags: {res.tags=} {exp.tags=}"
        raise AssertionError(msg)

    pd.testing.assert_series_equal(res.to_series(), exp.to_series())


def assert_group_equal(res: TimeSeriesGroup, exp: TimeSeriesGroup) -> None:
    """
    Assert two [TimeSeriesGroup][(p).group.]'s are equal

    Members are compared in order.

    Parameters
    ----------
    res
        Result

    exp
        Expected value

    Raises
    ------
    AssertionError
        The groups aren't equal
    """
    if res.updated != exp.updated:
        msg = f"Differences in updated: {res.updated=} {exp.updated=}"
        raise AssertionError(msg)

    res_tags = [s.tags for s in res]
    exp_tags = [s.tags for s in exp]
    if res_tags != exp_tags:
        msg = f"Differences in the members: {res_tags=} {exp_tags=}"
        raise AssertionError(msg)

    for res_series, exp_series in zip(res, exp):
        assert_timeseries_equal(res_series, exp_series)
