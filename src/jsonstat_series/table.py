"""
Table metadata and loading of data responses

A statistics table is described by a table-info document
(which variables it has, which values they can take,
which variable is time and when the table was last updated).
Data is requested by listing, for each variable, the value ids of interest
and comes back as a JSON-stat dataset.

Nothing here performs any I/O.
Callers fetch the documents however they like
and pass in the decoded JSON.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd
from attrs import define, field
from loguru import logger

from jsonstat_series.dimensions import DimensionDecoder, DimensionMetadata
from jsonstat_series.exceptions import UnrecognisedValueError
from jsonstat_series.group import TimeSeriesGroup
from jsonstat_series.series_building import SeriesBuilder

UPDATED_FORMAT: str = "%Y-%m-%dT%H:%M:%S"
"""
Format of the `updated` field of table-info documents
"""

DATA_FORMAT: str = "JSONSTAT"
"""
Format in which data is requested
"""

ALL_VALUES: str = "*"
"""
Wildcard which requests every value of a variable
"""


def parse_updated(updated: str) -> pd.Timestamp:
    """
    Parse the `updated` field of a table-info document

    Parameters
    ----------
    updated
        Value to parse

    Returns
    -------
    :
        Parsed timestamp, in UTC

    Examples
    --------
    >>> parse_updated("2020-05-11T08:00:00")
    Timestamp('2020-05-11 08:00:00+0000', tz='UTC')
    """
    return pd.to_datetime(updated, format=UPDATED_FORMAT, utc=True)


@define(frozen=True)
class VariableValue:
    """
    A value that a variable can take
    """

    id: str
    """
    Id used when requesting data
    """

    text: str
    """
    Human-readable text
    """


@define(frozen=True)
class Variable:
    """
    A variable of a table
    """

    id: str
    """
    Id of the variable
    """

    text: str
    """
    Human-readable name of the variable
    """

    time: bool = False
    """
    Whether this variable holds the time labels
    """

    elimination: bool = False
    """
    Whether the variable can be left out of a request (and summed over)
    """

    values: tuple[VariableValue, ...] = field(factory=tuple, converter=tuple)
    """
    Values the variable can take
    """

    def lookup_value_id(self, text: str) -> str:
        """
        Look up the id of a value from its text

        Parameters
        ----------
        text
            Text of the value

        Returns
        -------
        :
            Id of the value

        Raises
        ------
        UnrecognisedValueError
            No value of this variable has `text`
        """
        for value in self.values:
            if value.text == text:
                return value.id

        raise UnrecognisedValueError(
            unrecognised_value=text,
            name=f"the values of variable {self.id!r}",
            known_values=sorted(v.text for v in self.values),
        )


def variable_from_response(variable: Mapping[str, Any]) -> Variable:
    """
    Create a [Variable][(m).] from its entry in a table-info document

    Parameters
    ----------
    variable
        Decoded JSON of the variable

    Returns
    -------
    :
        Initialised variable
    """
    return Variable(
        id=variable["id"],
        text=variable.get("text", variable["id"]),
        time=bool(variable.get("time", False)),
        elimination=bool(variable.get("elimination", False)),
        values=[
            VariableValue(id=value["id"], text=value["text"])
            for value in variable.get("values", [])
        ],
    )


@define(frozen=True)
class TableMetadata:
    """
    Metadata of a statistics table
    """

    id: str
    """
    Id of the table
    """

    text: str
    """
    Human-readable title of the table
    """

    unit: str
    """
    Unit of the table's values
    """

    updated: pd.Timestamp
    """
    When the table was last updated
    """

    variables: tuple[Variable, ...] = field(converter=tuple)
    """
    Variables of the table
    """

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> TableMetadata:
        """
        Initialise from a table-info document

        Parameters
        ----------
        response
            Decoded JSON of the table-info document

        Returns
        -------
        :
            Initialised metadata
        """
        return cls(
            id=response["id"],
            text=response.get("text", ""),
            unit=response.get("unit", ""),
            updated=parse_updated(response["updated"]),
            variables=[variable_from_response(v) for v in response["variables"]],
        )

    @property
    def time_variable(self) -> Variable:
        """
        The variable which holds the time labels

        Raises
        ------
        ValueError
            The table doesn't have exactly one time variable
        """
        time_variables = [v for v in self.variables if v.time]
        if len(time_variables) != 1:
            msg = (
                "Expected exactly one time variable, found "
                f"{[v.id for v in time_variables]}"
            )
            raise ValueError(msg)

        return time_variables[0]

    def get_variable(self, variable_id: str) -> Variable:
        """
        Get a variable by its id

        Parameters
        ----------
        variable_id
            Id of the variable

        Returns
        -------
        :
            The variable

        Raises
        ------
        UnrecognisedValueError
            The table has no variable with id `variable_id`
        """
        for variable in self.variables:
            if variable.id == variable_id:
                return variable

        raise UnrecognisedValueError(
            unrecognised_value=variable_id,
            name=f"the variables of table {self.id!r}",
            known_values=[v.id for v in self.variables],
        )

    def translate_selector(
        self, selector: Mapping[str, Sequence[str]]
    ) -> dict[str, list[str]]:
        """
        Translate the value texts in a selector into value ids

        Parameters
        ----------
        selector
            Map from variable id to the texts of the values to select

        Returns
        -------
        :
            Map from variable id to the ids of the values to select

        Raises
        ------
        UnrecognisedValueError
            A variable id or value text is not known
        """
        return {
            variable_id: [
                self.get_variable(variable_id).lookup_value_id(text) for text in texts
            ]
            for variable_id, texts in selector.items()
        }

    def data_request(
        self, selector: Mapping[str, Sequence[str]] | None = None
    ) -> dict[str, Any]:
        """
        Create the body of a data request

        Parameters
        ----------
        selector
            Map from variable id to the texts of the values to select

            Variables which aren't in `selector` request all their values.

        Returns
        -------
        :
            Request body, ready to be encoded as JSON
        """
        value_ids = self.translate_selector(selector if selector is not None else {})

        return {
            "table": self.id,
            "format": DATA_FORMAT,
            "variables": [
                {"code": v.id, "values": value_ids.get(v.id, [ALL_VALUES])}
                for v in self.variables
            ],
        }


def load_dataset(
    response: Mapping[str, Any],
    metadata: TableMetadata | None = None,
    decoder: DimensionDecoder | None = None,
) -> TimeSeriesGroup:
    """
    Load a JSON-stat data response into a [TimeSeriesGroup][(p).group.]

    Parameters
    ----------
    response
        Decoded JSON of the data response,
        i.e. `{"dataset": {"dimension": ..., "value": [...], ...}}`

    metadata
        Metadata of the table

        If supplied, the time variable and updated timestamp are taken from here.
        Otherwise they are taken from the dataset's time role and `updated` field.

    decoder
        Decoder to use for the flat value array

        If not supplied, the default [DimensionDecoder][(p).dimensions.] is used.

    Returns
    -------
    :
        Loaded series
    """
    dataset = response["dataset"]
    dimensions = DimensionMetadata.from_jsonstat(dataset["dimension"])
    if decoder is None:
        decoder = DimensionDecoder()

    if metadata is not None:
        time_dimension = metadata.time_variable.id
        updated = metadata.updated
    else:
        time_dimension = dimensions.time_dimension
        updated = pd.Timestamp(dataset["updated"])

    logger.debug(
        "Loading {!r} with time dimension {!r}",
        dataset.get("label", ""),
        time_dimension,
    )
    points = decoder(dimensions, dataset["value"])

    return SeriesBuilder(time_dimension=time_dimension)(points, updated=updated)
