"""
Integration tests of loading a table and transforming it into a chart
"""

from __future__ import annotations

import pandas as pd
import pytest

from jsonstat_series.group import TimeSeriesGroup
from jsonstat_series.table import TableMetadata, load_dataset


@pytest.fixture
def metadata(car_registrations_table_info):
    return TableMetadata.from_response(car_registrations_table_info)


def test_request_for_electric_cars(metadata):
    res = metadata.data_request({"DRIV": ["El"]})

    assert res == {
        "table": "BIL51",
        "format": "JSONSTAT",
        "variables": [
            {"code": "DRIV", "values": ["20225"]},
            {"code": "EJER", "values": ["*"]},
            {"code": "Tid", "values": ["*"]},
        ],
    }


def test_electric_cars_towards_a_goal(car_registrations_response, metadata):
    loaded = load_dataset(car_registrations_response, metadata=metadata)

    electric = TimeSeriesGroup(
        updated=loaded.updated, series=[s for s in loaded if "El" in s.tags]
    )
    # El,Erhverv is 15, 16, 17 and El,Privat is 12, 13, 14
    total = electric.accumulate().sum("Elbiler")

    assert list(total.series[0].items()) == [
        (pd.Timestamp("2020-01-01"), 27),
        (pd.Timestamp("2020-02-01"), 27 + 29),
        (pd.Timestamp("2020-03-01"), 27 + 29 + 31),
    ]

    res = total.future_goal("Mål", target_date="2020-06-01", target_value=87 + 92)

    assert [s.label for s in res] == ["Elbiler", "Mål"]
    goal = res.series[-1]
    assert goal.first_date == pd.Timestamp("2020-04-01")
    assert goal.last_date == pd.Timestamp("2020-06-01")
    assert goal.get("2020-06-01") == 179
    # 92 to go over 92 days
    assert goal.get("2020-04-01") == 87 + 31
    assert goal.get("2020-05-01") == 87 + 61


def test_share_of_total(car_registrations_response, metadata):
    loaded = load_dataset(car_registrations_response, metadata=metadata)

    with_total = TimeSeriesGroup(
        updated=loaded.updated,
        series=[*loaded.series, *loaded.sum("Total").series],
    )

    res = with_total.normalize("Total")

    assert len(res) == 6
    el_privat = res.series[-1]
    assert el_privat.tags == ("El", "Privat")
    # 0 + 3 + 6 + 9 + 12 + 15 registrations in January
    assert sum(s.get("2020-01-01") for s in loaded) == 45
    assert el_privat.get("2020-01-01") == (100 * 12) // 45


def test_to_chart(car_registrations_response, metadata):
    pytest.importorskip("matplotlib")

    from jsonstat_series.chart import bar_chart_config

    loaded = load_dataset(car_registrations_response, metadata=metadata)

    res = bar_chart_config(loaded.accumulate(), title="Registrations")

    assert res["data"]["labels"] == ["2020-01", "2020-02", "2020-03"]
    assert len(res["data"]["datasets"]) == 6
    assert res["data"]["datasets"][-1]["data"] == [12, 12 + 13, 12 + 13 + 14]
