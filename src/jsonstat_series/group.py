"""
Collections of timeseries and the operators which act on all of them at once

Operators which need the members to line up in time
(accumulation, goal projection)
use the group's final date, i.e. the latest last date of any member.
"""

from __future__ import annotations

import functools
from collections.abc import Iterable, Iterator
from typing import Callable

import pandas as pd
from attrs import define, evolve, field
from loguru import logger

from jsonstat_series.exceptions import (
    DegenerateGoalError,
    EmptySeriesError,
    MissingReferenceError,
)
from jsonstat_series.timeseries import (
    TIME_LEVEL,
    TimeSeries,
    get_value_at,
    to_timestamp,
    truncating_divide,
)
from jsonstat_series.typing import DATE_LIKE, TimeseriesDataFrame

DEFAULT_GOAL_STEP: pd.Timedelta = pd.Timedelta(days=32)
"""
Default step used to move from one month to the next when projecting a goal
"""

MIN_GOAL_STEP: pd.Timedelta = pd.Timedelta(days=31)
"""
Shortest step which crosses into the next month from the first of any month
"""

MAX_GOAL_STEP: pd.Timedelta = pd.Timedelta(days=58)
"""
Longest step which never crosses two months from the first of any month
"""


def get_next_month_start(date: pd.Timestamp, step: pd.Timedelta) -> pd.Timestamp:
    """
    Get the first day of the month after the month of `date`

    Parameters
    ----------
    date
        Starting date

    step
        Step to add to the first of `date`'s month

        This must be long enough to leave the month
        but short enough not to skip the following one,
        i.e. between 31 and 58 days.

    Returns
    -------
    :
        First day of the next month

    Examples
    --------
    >>> get_next_month_start(pd.Timestamp("2020-01-31"), pd.Timedelta(days=32))
    Timestamp('2020-02-01 00:00:00')
    """
    return (date.replace(day=1) + step).replace(day=1)


@define(frozen=True)
class TimeSeriesGroup:
    """
    Ordered collection of [TimeSeries][(p).timeseries.] from a single source
    """

    updated: pd.Timestamp = field(converter=pd.Timestamp)
    """
    When the source data was last updated
    """

    series: tuple[TimeSeries, ...] = field(factory=tuple, converter=tuple)
    """
    Members of the group
    """

    def __len__(self) -> int:
        return len(self.series)

    def __iter__(self) -> Iterator[TimeSeries]:
        return iter(self.series)

    def _with_series(self, series: Iterable[TimeSeries]) -> TimeSeriesGroup:
        return evolve(self, series=tuple(series))

    def domain_dates(self) -> pd.DatetimeIndex:
        """
        Get every date on which any member has an entry

        Returns
        -------
        :
            Unique dates, ascending
        """
        dates = sorted({date for s in self.series for date in s.dates})

        return pd.DatetimeIndex(dates, name=TIME_LEVEL).as_unit("ns")

    def final_date(self) -> pd.Timestamp:
        """
        Get the latest last date of any member

        Members without entries are ignored.

        Returns
        -------
        :
            Final date of the group

        Raises
        ------
        EmptySeriesError
            No member has any entries
        """
        last_dates = [s.last_date for s in self.series if len(s) > 0]
        if not last_dates:
            raise EmptySeriesError(operation="take the final date")

        return max(last_dates)

    def apply(self, func: Callable[[TimeSeries], TimeSeries]) -> TimeSeriesGroup:
        """
        Apply a function to every member

        Parameters
        ----------
        func
            Function to apply,
            e.g. `lambda s: s.slice_from("2019-12-31")`

        Returns
        -------
        :
            Group of the transformed members
        """
        return self._with_series(func(s) for s in self.series)

    def accumulate(self) -> TimeSeriesGroup:
        """
        Accumulate every member up to the group's final date

        Every member of the result has an entry at the final date,
        so the members can be compared (or totalled) there.

        Returns
        -------
        :
            Group of accumulated members
        """
        final_date = self.final_date()

        return self._with_series(s.accumulate(final_date) for s in self.series)

    def sum(self, title: str) -> TimeSeriesGroup:
        """
        Replace the members with their sum

        Parameters
        ----------
        title
            Tag of the summed series

        Returns
        -------
        :
            Group with a single member, tagged only with `title`
        """
        total = functools.reduce(TimeSeries.merge, self.series, TimeSeries(tags=()))

        return self._with_series([total.with_tags([title])])

    def normalize(self, reference_tag: str) -> TimeSeriesGroup:
        """
        Express every member as a percentage of a reference member

        Parameters
        ----------
        reference_tag
            Tag of the reference member

            If several members carry this tag, the first is used.

        Returns
        -------
        :
            Every member apart from the reference,
            divided by the reference with
            [TimeSeries.ratio_to][(p).timeseries.TimeSeries.ratio_to]

        Raises
        ------
        MissingReferenceError
            No member carries `reference_tag`
        """
        for reference_index, reference in enumerate(self.series):
            if reference_tag in reference.tags:
                break

        else:
            raise MissingReferenceError(
                reference_tag=reference_tag,
                known_tags={tag for s in self.series for tag in s.tags},
            )

        return self._with_series(
            s.ratio_to(reference)
            for i, s in enumerate(self.series)
            if i != reference_index
        )

    def future_goal(
        self,
        title: str,
        target_date: DATE_LIKE,
        target_value: int,
        step_size_hint: pd.Timedelta = DEFAULT_GOAL_STEP,
    ) -> TimeSeriesGroup:
        """
        Add a series which projects the group's total linearly to a goal

        The projection starts from the total of all members at the final date.
        It has one entry on the first of each month after the final date,
        up to and including the first month start on or after `target_date`.
        Values are interpolated linearly (by days) between the starting total
        and `target_value`, truncated toward zero.
        The last point equals `target_value`,
        even if it falls after `target_date`.

        Parameters
        ----------
        title
            Tag of the projected series

        target_date
            Date at which `target_value` should be reached

        target_value
            Value to reach

        step_size_hint
            Step used to move to the next month,
            see [get_next_month_start][(m).]

        Returns
        -------
        :
            Group with the projected series appended

        Raises
        ------
        DegenerateGoalError
            `target_date` is not after the group's final date

        ValueError
            `step_size_hint` is not between 31 and 58 days
        """
        step = pd.Timedelta(step_size_hint)
        if not MIN_GOAL_STEP <= step <= MAX_GOAL_STEP:
            msg = (
                f"step_size_hint must be between {MIN_GOAL_STEP} and {MAX_GOAL_STEP} "
                f"so that exactly one month is crossed per step. {step_size_hint=}"
            )
            raise ValueError(msg)

        final_date = self.final_date()
        target = to_timestamp(target_date)
        total_days = (target - final_date).days
        if total_days <= 0:
            raise DegenerateGoalError(target_date=target, final_date=final_date)

        final_total = get_value_at(self.series, final_date)
        to_go = target_value - final_total

        points = {}
        current = final_date
        while current < target:
            current = get_next_month_start(current, step)
            # The last month start may fall after the target date
            days_elapsed = min((current - final_date).days, total_days)
            points[current] = final_total + truncating_divide(
                to_go * days_elapsed, total_days
            )

        logger.debug(
            "Projected {} from {} at {:%Y-%m-%d} to {} at {:%Y-%m-%d} in {} steps",
            title,
            final_total,
            final_date,
            target_value,
            target,
            len(points),
        )

        return self._with_series([*self.series, TimeSeries(tags=[title], data=points)])

    def to_timeseries_dataframe(self) -> TimeseriesDataFrame:
        """
        Convert to a [TimeseriesDataFrame][(p).typing.]

        Returns
        -------
        :
            One row per member, one column per domain date.
            Values have the nullable `Int64` dtype,
            with `<NA>` where a member has no entry.
        """
        domain = self.domain_dates()
        # Nullable integers keep full int64 precision alongside missing cells
        rows = [s.to_series().astype("Int64").reindex(domain) for s in self.series]

        res = pd.DataFrame(
            {
                i: pd.array([row.iloc[i] for row in rows], dtype="Int64")
                for i in range(len(domain))
            },
            index=pd.Index([s.label for s in self.series], name="tags"),
        )
        res.columns = domain

        return res
