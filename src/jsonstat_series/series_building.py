"""
Grouping of data points into timeseries
"""

from __future__ import annotations

import re
from collections.abc import Iterable

import pandas as pd
from attrs import define
from loguru import logger
from pandas_openscm.grouping import groupby_except
from pandas_openscm.index_manipulation import update_index_levels_func

from jsonstat_series.dimensions import DataPoint
from jsonstat_series.exceptions import DateFormatError, UnrecognisedValueError
from jsonstat_series.group import TimeSeriesGroup
from jsonstat_series.timeseries import TimeSeries, to_tag_set
from jsonstat_series.typing import DATE_LIKE, TagSet

YEAR_MONTH_PATTERN = re.compile(r"(?P<year>\d{4})M(?P<month>\d{2})")
"""
Pattern of monthly time labels, e.g. `2020M03`
"""

YEAR_PATTERN = re.compile(r"(?P<year>\d{4})")
"""
Pattern of yearly time labels, e.g. `2020`
"""


def parse_time_label(label: str) -> pd.Timestamp:
    """
    Parse a time label into the date at which its period starts

    Parameters
    ----------
    label
        Time label

    Returns
    -------
    :
        First day of the month for monthly labels,
        first of January for yearly labels

    Raises
    ------
    DateFormatError
        `label` is neither a monthly nor a yearly label

    Examples
    --------
    >>> parse_time_label("2020M03")
    Timestamp('2020-03-01 00:00:00')
    >>> parse_time_label("2021")
    Timestamp('2021-01-01 00:00:00')
    """
    year_month = YEAR_MONTH_PATTERN.fullmatch(label)
    if year_month is not None:
        year, month = int(year_month["year"]), int(year_month["month"])

    elif YEAR_PATTERN.fullmatch(label) is not None:
        year, month = int(label), 1

    else:
        raise DateFormatError(label)

    try:
        return pd.Timestamp(year=year, month=month, day=1).as_unit("ns")
    except ValueError as exc:
        raise DateFormatError(label) from exc


@define
class SeriesBuilder:
    """
    Builder of [TimeSeries][(p).timeseries.] from [DataPoint][(p).dimensions.]'s

    Points are grouped by their tags other than time.
    Points whose remaining tags are the same set of labels
    (regardless of which dimensions the labels come from)
    end up in the same series, with values on the same date added together.
    """

    time_dimension: str
    """
    Id of the dimension which holds the time labels
    """

    def __call__(
        self, points: Iterable[DataPoint], updated: DATE_LIKE
    ) -> TimeSeriesGroup:
        """
        Build

        Parameters
        ----------
        points
            Points to group into series

        updated
            When the source data was last updated

        Returns
        -------
        :
            One series per distinct set of non-time labels, sorted by tags

        Raises
        ------
        UnrecognisedValueError
            The points aren't tagged with `self.time_dimension`

        DateFormatError
            A time label can't be parsed
        """
        points = list(points)
        if not points:
            return TimeSeriesGroup(updated=updated)

        levels = list(points[0].tags)
        if self.time_dimension not in levels:
            raise UnrecognisedValueError(
                unrecognised_value=self.time_dimension,
                name="the dimensions of the data points",
                known_values=levels,
            )

        values = pd.DataFrame(
            {"value": [p.value for p in points]},
            index=pd.MultiIndex.from_tuples(
                [tuple(p.tags[level] for level in levels) for p in points],
                names=levels,
            ),
        )
        dated = update_index_levels_func(
            values, {self.time_dimension: parse_time_label}
        )

        tag_levels = [level for level in levels if level != self.time_dimension]
        if tag_levels:
            groups = [gdf for _, gdf in groupby_except(dated, self.time_dimension)]
        else:
            groups = [dated]

        by_tags: dict[TagSet, TimeSeries] = {}
        for gdf in groups:
            tags = to_tag_set(
                gdf.index.to_frame(index=False)[tag_levels].iloc[0].tolist()
            )
            series = TimeSeries(
                tags=tags,
                data=gdf["value"].groupby(level=self.time_dimension).sum(),
            )
            if tags in by_tags:
                series = by_tags[tags].merge(series)

            by_tags[tags] = series

        logger.debug(
            "Built {} series from {} data points", len(by_tags), len(points)
        )

        return TimeSeriesGroup(
            updated=updated, series=[by_tags[tags] for tags in sorted(by_tags)]
        )


def build(
    points: Iterable[DataPoint], time_dimension: str, updated: DATE_LIKE
) -> TimeSeriesGroup:
    """
    Build a [TimeSeriesGroup][(p).group.] from data points

    Convenience wrapper around [SeriesBuilder][(m).].

    Parameters
    ----------
    points
        Points to group into series

    time_dimension
        Id of the dimension which holds the time labels

    updated
        When the source data was last updated

    Returns
    -------
    :
        One series per distinct set of non-time labels
    """
    return SeriesBuilder(time_dimension=time_dimension)(points, updated=updated)
