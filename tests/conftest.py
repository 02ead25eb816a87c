"""
Re-useable fixtures etc. for tests

See https://docs.pytest.org/en/7.1.x/reference/fixtures.html#conftest-py-sharing-fixtures-across-multiple-files
"""

import pandas as pd
import pytest

from jsonstat_series.testing import (
    get_jsonstat_like_response,
    get_table_info_like_response,
)


@pytest.fixture(scope="session", autouse=True)
def pandas_terminal_width():
    # Set pandas terminal width so that doctests don't depend on terminal width.

    # We set the display width to 120 because examples should be short,
    # anything more than this is too wide to read in the source.
    pd.set_option("display.width", 120)

    # Display as many columns as you want (i.e. let the display width do the
    # truncation)
    pd.set_option("display.max_columns", 1000)


@pytest.fixture
def car_registrations_response():
    # Laid out as DRIV (slowest), EJER, ContentsCode (metric), Tid (fastest),
    # so the value for (El, Privat, 2020M02) is 2 * 6 + 0 * 3 + 1 = 13
    return get_jsonstat_like_response(
        dimensions=[
            ("DRIV", ["Benzin", "Diesel", "El"]),
            ("EJER", ["Privat", "Erhverv"]),
            ("ContentsCode", ["Antal"]),
            ("Tid", ["2020M01", "2020M02", "2020M03"]),
        ],
        metric_dimension="ContentsCode",
        time_dimension="Tid",
    )


@pytest.fixture
def car_registrations_table_info():
    return get_table_info_like_response(
        table_id="BIL51",
        variables=[
            ("DRIV", [("20200", "Benzin"), ("20205", "Diesel"), ("20225", "El")]),
            ("EJER", [("1000", "Privat"), ("1100", "Erhverv")]),
            ("Tid", [("2020M01", "2020M01"), ("2020M02", "2020M02")]),
        ],
        time_variable="Tid",
    )
