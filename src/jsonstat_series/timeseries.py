"""
A single labelled timeseries and the operators on it

A [TimeSeries][(m).] is a value:
every operator returns a new [TimeSeries][(m).]
and the underlying [pd.Series][pandas.Series] is copied on the way in and out,
so nothing a caller does to one value can leak into another.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Callable

import pandas as pd
from attrs import define, field

from jsonstat_series.assertions import assert_series_not_empty, assert_unique_dates
from jsonstat_series.typing import (
    DATE_LIKE,
    BoundaryPredicate,
    CombineFunction,
    TagSet,
)

TIME_LEVEL: str = "time"
"""
Name of the index of the data of every [TimeSeries][(m).]
"""


def to_tag_set(tags: Iterable[str]) -> TagSet:
    """
    Convert a collection of tags to a [TagSet][(p).typing.]

    Parameters
    ----------
    tags
        Tags to convert

    Returns
    -------
    :
        Unique tags, sorted

    Raises
    ------
    TypeError
        `tags` is a single string (which would otherwise be split into characters)

    Examples
    --------
    >>> to_tag_set(["Privat", "El", "Privat"])
    ('El', 'Privat')
    """
    if isinstance(tags, str):
        msg = f"tags must be a collection of strings, not a string. {tags=}"
        raise TypeError(msg)

    return tuple(sorted(set(tags)))


def to_timestamp(date: DATE_LIKE) -> pd.Timestamp:
    """
    Convert a date-like value to a [pd.Timestamp][pandas.Timestamp]

    Parameters
    ----------
    date
        Value to convert

    Returns
    -------
    :
        `date` as a nanosecond-resolution [pd.Timestamp][pandas.Timestamp]
    """
    return pd.Timestamp(date).as_unit("ns")


def to_data(data: pd.Series | Mapping[DATE_LIKE, int]) -> pd.Series:
    """
    Convert input to the data held by a [TimeSeries][(m).]

    Parameters
    ----------
    data
        Either a [pd.Series][pandas.Series] whose index holds dates
        or a mapping from date to value

    Returns
    -------
    :
        Copy of `data` as an `int64` [pd.Series][pandas.Series]
        with a sorted [pd.DatetimeIndex][pandas.DatetimeIndex] named `time`

    Raises
    ------
    ValueError
        `data` has more than one value for the same date
    """
    if isinstance(data, pd.Series):
        res = data.copy()
        res.index = pd.to_datetime(res.index)

    else:
        items = dict(data)
        res = pd.Series(
            list(items.values()),
            index=pd.to_datetime(list(items.keys())),
            dtype="int64",
        )

    # Rebuilding from the raw values also drops any `freq`
    res.index = pd.DatetimeIndex(res.index.to_numpy(), name=TIME_LEVEL).as_unit("ns")
    assert_unique_dates(res.index)
    res.name = None

    return res.sort_index().astype("int64")


def truncating_divide(numerator: int, denominator: int) -> int:
    """
    Integer division which truncates toward zero

    Python's `//` floors instead,
    which gives a different answer when the signs differ.

    Parameters
    ----------
    numerator
        Numerator

    denominator
        Denominator

    Returns
    -------
    :
        `numerator / denominator`, truncated toward zero

    Examples
    --------
    >>> truncating_divide(7, 2)
    3
    >>> truncating_divide(-7, 2)
    -3
    """
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient

    return quotient


def _format_data_for_repr(data: pd.Series) -> str:
    if data.empty:
        return "<no entries>"

    return (
        f"<{data.size} entries, "
        f"{data.index[0]:%Y-%m-%d} to {data.index[-1]:%Y-%m-%d}>"
    )


@define(frozen=True, eq=False)
class TimeSeries:
    """
    Labelled series of integer values indexed by date

    There is at most one value per date.
    """

    tags: TagSet = field(converter=to_tag_set)
    """
    Tags which identify the series, unique and sorted
    """

    _data: pd.Series = field(
        factory=dict, converter=to_data, repr=_format_data_for_repr
    )
    """
    Values, indexed by date
    """

    @classmethod
    def unit(cls, tags: Iterable[str], date: DATE_LIKE, value: int) -> TimeSeries:
        """
        Create a series with a single entry

        Parameters
        ----------
        tags
            Tags of the series

        date
            Date of the entry

        value
            Value of the entry

        Returns
        -------
        :
            Series with one entry
        """
        return cls(tags=tags, data={to_timestamp(date): value})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeSeries):
            return NotImplemented

        return self.tags == other.tags and self._data.equals(other._data)

    def __len__(self) -> int:
        return self._data.size

    def __add__(self, other: object) -> TimeSeries:
        if not isinstance(other, TimeSeries):
            return NotImplemented

        return self.merge(other)

    @property
    def label(self) -> str:
        """
        Display label of the series, i.e. its tags joined with commas
        """
        return ",".join(self.tags)

    @property
    def dates(self) -> pd.DatetimeIndex:
        """
        Dates on which the series has an entry, ascending
        """
        return self._data.index.copy()

    @property
    def first_date(self) -> pd.Timestamp:
        """
        First date on which the series has an entry

        Raises
        ------
        EmptySeriesError
            The series has no entries
        """
        assert_series_not_empty(self._data, operation="take the first date")

        return self._data.index[0]

    @property
    def last_date(self) -> pd.Timestamp:
        """
        Last date on which the series has an entry

        Raises
        ------
        EmptySeriesError
            The series has no entries
        """
        assert_series_not_empty(self._data, operation="take the last date")

        return self._data.index[-1]

    def get(self, date: DATE_LIKE, default: int = 0) -> int:
        """
        Get the value at a given date

        Parameters
        ----------
        date
            Date of interest

        default
            Value to return if the series has no entry at `date`

        Returns
        -------
        :
            Value at `date`
        """
        ts = to_timestamp(date)
        if ts not in self._data.index:
            return default

        return int(self._data.loc[ts])

    def items(self) -> Iterator[tuple[pd.Timestamp, int]]:
        """
        Iterate over (date, value) pairs in date order
        """
        for date, value in self._data.items():
            yield date, int(value)

    def to_series(self) -> pd.Series:
        """
        Get a copy of the data as a [pd.Series][pandas.Series]
        """
        return self._data.copy()

    def with_tags(self, tags: Iterable[str]) -> TimeSeries:
        """
        Get the same data with different tags

        Parameters
        ----------
        tags
            New tags

        Returns
        -------
        :
            Relabelled series
        """
        return TimeSeries(tags=tags, data=self._data)

    def accumulate(self, final_date: DATE_LIKE | None = None) -> TimeSeries:
        """
        Replace each value with the running total up to and including its date

        Parameters
        ----------
        final_date
            If supplied and the series has no entry at this date,
            an entry equal to the grand total is added at `final_date`.

            This lets series that stop early be read at a common date.

        Returns
        -------
        :
            Accumulated series

        Raises
        ------
        ValueError
            `final_date` is before the last date of the series
        """
        res = dict(self._data.cumsum().items())

        if final_date is not None:
            final = to_timestamp(final_date)
            if not self._data.empty and final < self._data.index[-1]:
                msg = (
                    f"final_date ({final:%Y-%m-%d}) must not be before "
                    f"the last date of the series ({self._data.index[-1]:%Y-%m-%d})"
                )
                raise ValueError(msg)

            if final not in res:
                res[final] = int(self._data.sum())

        return TimeSeries(tags=self.tags, data=res)

    def slice_from(self, date: DATE_LIKE) -> TimeSeries:
        """
        Keep only the entries strictly after a given date

        Parameters
        ----------
        date
            Entries on or before this date are dropped

        Returns
        -------
        :
            Sliced series
        """
        return TimeSeries(
            tags=self.tags, data=self._data[self._data.index > to_timestamp(date)]
        )

    def bucket_reduce(
        self, is_boundary: BoundaryPredicate, combine: CombineFunction
    ) -> TimeSeries:
        """
        Down-sample into buckets which end on boundary dates

        For every pair of adjacent entries, `combine(previous, current)` is added
        to a running total.
        At every date for which `is_boundary` is true,
        the running total is emitted at that date and reset to zero.
        Dates which aren't boundaries do not appear in the output.

        For example, weekly increments of a cumulative daily count are given by
        `is_boundary=lambda d: d.dayofweek == 6` (Sundays)
        and `combine=lambda previous, current: current - previous`.

        Parameters
        ----------
        is_boundary
            Whether a date closes a bucket

        combine
            Function of (previous value, current value)

        Returns
        -------
        :
            One entry per boundary date
        """
        res = {}
        accumulated = 0
        previous = None
        for date, value in self.items():
            if previous is not None:
                accumulated += combine(previous, value)

            if is_boundary(date):
                res[date] = accumulated
                accumulated = 0

            previous = value

        return TimeSeries(tags=self.tags, data=res)

    def map(self, value_fn: Callable[[int], int]) -> TimeSeries:
        """
        Apply a function to every value

        Parameters
        ----------
        value_fn
            Function to apply

        Returns
        -------
        :
            Series with the same dates and tags but transformed values
        """
        return TimeSeries(
            tags=self.tags, data={date: value_fn(value) for date, value in self.items()}
        )

    def scale(self, numerator: int, denominator: int = 1) -> TimeSeries:
        """
        Multiply every value by `numerator / denominator`

        The result is truncated toward zero.

        Parameters
        ----------
        numerator
            Numerator of the scale factor

        denominator
            Denominator of the scale factor

        Returns
        -------
        :
            Scaled series

        Raises
        ------
        ValueError
            `denominator` is zero
        """
        if denominator == 0:
            msg = "denominator must not be zero"
            raise ValueError(msg)

        return self.map(lambda v: truncating_divide(v * numerator, denominator))

    def merge(self, other: TimeSeries) -> TimeSeries:
        """
        Add two series

        Parameters
        ----------
        other
            Series to add

        Returns
        -------
        :
            Series tagged with the union of both series' tags,
            with an entry at every date in either series.
            Where both series have an entry, the values are summed.
        """
        # Filling while aligning keeps int64, so large values stay exact
        left, right = self._data.align(other._data, join="outer", fill_value=0)

        return TimeSeries(tags=[*self.tags, *other.tags], data=left + right)

    def ratio_to(self, other: TimeSeries) -> TimeSeries:
        """
        Express the series as a percentage of another series

        Parameters
        ----------
        other
            Series to divide by

        Returns
        -------
        :
            Series with this series' tags and an entry at every date in either series.
            The value is `100 * self / other`, truncated toward zero,
            or zero where `other` is zero or has no entry.
        """
        numerators, denominators = self._data.align(
            other._data, join="outer", fill_value=0
        )

        # Python ints, as `100 * numerator` can overflow int64
        return TimeSeries(
            tags=self.tags,
            data={
                date: 0 if den == 0 else truncating_divide(100 * int(num), int(den))
                for date, num, den in zip(numerators.index, numerators, denominators)
            },
        )


def get_value_at(series: Iterable[TimeSeries], date: DATE_LIKE) -> int:
    """
    Get the total of a collection of series at a given date

    Series without an entry at `date` contribute zero.

    Parameters
    ----------
    series
        Series to total

    date
        Date at which to read each series

    Returns
    -------
    :
        Total at `date`
    """
    return sum(s.get(date) for s in series)
