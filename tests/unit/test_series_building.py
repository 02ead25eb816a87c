"""
Tests of `jsonstat_series.series_building`
"""

from __future__ import annotations

import re

import pandas as pd
import pytest

from jsonstat_series.dimensions import DataPoint
from jsonstat_series.exceptions import DateFormatError, UnrecognisedValueError
from jsonstat_series.group import TimeSeriesGroup
from jsonstat_series.series_building import SeriesBuilder, build, parse_time_label
from jsonstat_series.testing import assert_group_equal
from jsonstat_series.timeseries import TimeSeries

UPDATED = pd.Timestamp("2020-05-11T08:00:00Z")


@pytest.mark.parametrize(
    "label, exp",
    (
        pytest.param("2020M03", pd.Timestamp("2020-03-01"), id="year-month"),
        pytest.param("1999M12", pd.Timestamp("1999-12-01"), id="year-month-december"),
        pytest.param("2021", pd.Timestamp("2021-01-01"), id="year"),
    ),
)
def test_parse_time_label(label, exp):
    assert parse_time_label(label) == exp


@pytest.mark.parametrize(
    "label",
    (
        pytest.param("2020Q1", id="quarter"),
        pytest.param("2020M3", id="single-digit-month"),
        pytest.param("2020M13", id="month-out-of-range"),
        pytest.param("2020M00", id="month-zero"),
        pytest.param("20", id="short-year"),
        pytest.param("2020-03", id="iso-like"),
        pytest.param("", id="empty"),
    ),
)
def test_parse_time_label_invalid(label):
    with pytest.raises(
        DateFormatError,
        match=re.escape(f"Could not parse time label {label!r}"),
    ):
        parse_time_label(label)


def test_build_groups_by_non_time_tags():
    points = [
        DataPoint(tags={"DRIV": "El", "EJER": "Privat", "Tid": "2020M01"}, value=1),
        DataPoint(tags={"DRIV": "El", "EJER": "Privat", "Tid": "2020M02"}, value=2),
        DataPoint(tags={"DRIV": "El", "EJER": "Erhverv", "Tid": "2020M01"}, value=3),
        DataPoint(tags={"DRIV": "El", "EJER": "Erhverv", "Tid": "2020M02"}, value=4),
    ]

    res = build(points, time_dimension="Tid", updated=UPDATED)

    exp = TimeSeriesGroup(
        updated=UPDATED,
        series=[
            TimeSeries(
                tags=["El", "Erhverv"], data={"2020-01-01": 3, "2020-02-01": 4}
            ),
            TimeSeries(tags=["El", "Privat"], data={"2020-01-01": 1, "2020-02-01": 2}),
        ],
    )

    assert_group_equal(res, exp)


def test_build_sums_points_with_the_same_tags_and_date():
    points = [
        DataPoint(tags={"A": "x", "Tid": "2020M01"}, value=1),
        DataPoint(tags={"A": "x", "Tid": "2020M01"}, value=10),
        DataPoint(tags={"A": "x", "Tid": "2020M02"}, value=5),
    ]

    res = build(points, time_dimension="Tid", updated=UPDATED)

    assert len(res) == 1
    assert dict(res.series[0].items()) == {
        pd.Timestamp("2020-01-01"): 11,
        pd.Timestamp("2020-02-01"): 5,
    }


def test_build_identifies_series_by_the_set_of_labels():
    # The same labels in different dimensions make the same tag set
    points = [
        DataPoint(tags={"A": "x", "B": "y", "Tid": "2020M01"}, value=1),
        DataPoint(tags={"A": "y", "B": "x", "Tid": "2020M01"}, value=2),
        DataPoint(tags={"A": "y", "B": "x", "Tid": "2020M02"}, value=4),
    ]

    res = build(points, time_dimension="Tid", updated=UPDATED)

    assert [s.tags for s in res] == [("x", "y")]
    assert dict(res.series[0].items()) == {
        pd.Timestamp("2020-01-01"): 3,
        pd.Timestamp("2020-02-01"): 4,
    }


def test_build_only_time_dimension():
    points = [
        DataPoint(tags={"Tid": "2019"}, value=7),
        DataPoint(tags={"Tid": "2020"}, value=8),
    ]

    res = build(points, time_dimension="Tid", updated=UPDATED)

    exp = TimeSeriesGroup(
        updated=UPDATED,
        series=[TimeSeries(tags=[], data={"2019-01-01": 7, "2020-01-01": 8})],
    )

    assert_group_equal(res, exp)


def test_build_no_points():
    res = SeriesBuilder(time_dimension="Tid")([], updated=UPDATED)

    assert_group_equal(res, TimeSeriesGroup(updated=UPDATED))


def test_build_missing_time_dimension():
    points = [DataPoint(tags={"A": "x", "Tid": "2020M01"}, value=1)]

    with pytest.raises(
        UnrecognisedValueError,
        match=re.escape(
            "'Time' is not a recognised value for the dimensions of the data points"
        ),
    ):
        build(points, time_dimension="Time", updated=UPDATED)


def test_build_invalid_time_label():
    points = [DataPoint(tags={"A": "x", "Tid": "2020K1"}, value=1)]

    with pytest.raises(DateFormatError, match=re.escape("'2020K1'")):
        build(points, time_dimension="Tid", updated=UPDATED)


def test_build_output_sorted_by_tags():
    points = [
        DataPoint(tags={"DRIV": label, "Tid": "2020M01"}, value=i)
        for i, label in enumerate(["El", "Benzin", "Diesel"])
    ]

    res = build(points, time_dimension="Tid", updated=UPDATED)

    assert [s.tags for s in res] == [("Benzin",), ("Diesel",), ("El",)]
