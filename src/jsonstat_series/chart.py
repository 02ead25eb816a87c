"""
Chart configuration for rendering groups of timeseries with Chart.js
"""

from __future__ import annotations

from typing import Any

import pandas as pd

from jsonstat_series.exceptions import MissingOptionalDependencyError
from jsonstat_series.group import TimeSeriesGroup

X_LABEL_FORMAT: str = "%Y-%m"
"""
Format of the labels on the x-axis
"""


def get_scale_config(label: str, stacked: bool) -> dict[str, Any]:
    """
    Get the configuration of a single axis

    Parameters
    ----------
    label
        Axis label

    stacked
        Should the bars be stacked?

    Returns
    -------
    :
        Axis configuration
    """
    return {
        "stacked": stacked,
        "display": True,
        "scaleLabel": {"display": True, "labelString": label},
    }


def bar_chart_config(
    group: TimeSeriesGroup,
    title: str = "",
    x_label: str = "",
    y_label: str = "",
    stacked: bool = True,
) -> dict[str, Any]:
    """
    Get a Chart.js (version 2) bar chart configuration

    Parameters
    ----------
    group
        Series to plot, one dataset per member

    title
        Chart title

    x_label
        Label of the x-axis

    y_label
        Label of the y-axis

    stacked
        Should the bars be stacked?

    Returns
    -------
    :
        Configuration, ready to be encoded as JSON.
        The x-axis has one label per domain date of `group`.
        Members without an entry at a date have `None` there.

    Raises
    ------
    MissingOptionalDependencyError
        matplotlib (used for the colour map) is not installed
    """
    try:
        import matplotlib
        from matplotlib.colors import to_hex
    except ImportError as exc:
        raise MissingOptionalDependencyError(
            "bar_chart_config", requirement="matplotlib"
        ) from exc

    colour_map = matplotlib.colormaps["turbo"]
    df = group.to_timeseries_dataframe()
    n_series = df.shape[0]

    datasets = []
    for i, (label, row) in enumerate(df.iterrows()):
        colour = to_hex(colour_map(i / max(n_series - 1, 1)))
        datasets.append(
            {
                "label": label,
                "backgroundColor": colour,
                "borderColor": colour,
                "data": [None if pd.isna(v) else int(v) for v in row],
                "fill": False,
            }
        )

    return {
        "type": "bar",
        "data": {
            "labels": [d.strftime(X_LABEL_FORMAT) for d in df.columns],
            "datasets": datasets,
        },
        "options": {
            "responsive": True,
            "title": {"display": bool(title), "text": title},
            "tooltips": {"mode": "index", "intersect": False},
            "hover": {"mode": "nearest", "intersect": True},
            "scales": {
                "xAxes": [get_scale_config(x_label, stacked=stacked)],
                "yAxes": [get_scale_config(y_label, stacked=stacked)],
            },
        },
    }
