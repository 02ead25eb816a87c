"""
Decoding of JSON-stat style dimensions and flat value arrays into data points

A JSON-stat dataset stores its values as one flat array.
The position of a value in that array encodes which category of each dimension
it belongs to, like the digits of a mixed-radix number:
the first dimension varies slowest, the last fastest.
For example, with dimensions of sizes `[2, 3]`,
value 4 belongs to category 1 of the first dimension
and category 1 of the second (`4 = 1 * 3 + 1`).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

import attr
import numpy as np
from attrs import converters, define, field
from loguru import logger

from jsonstat_series.assertions import assert_values_match_dimension_sizes


def to_category_index(
    index: Mapping[str, int] | Sequence[str],
) -> dict[str, int]:
    """
    Convert a JSON-stat category index to a mapping from value id to position

    Parameters
    ----------
    index
        Either a mapping from value id to position
        or a sequence of value ids in position order
        (JSON-stat allows both)

    Returns
    -------
    :
        Mapping from value id to position

    Examples
    --------
    >>> to_category_index(["A", "B"])
    {'A': 0, 'B': 1}
    """
    if isinstance(index, Mapping):
        return {str(k): int(v) for k, v in index.items()}

    return {str(value_id): position for position, value_id in enumerate(index)}


@define(frozen=True)
class Category:
    """
    The values a dimension can take
    """

    index: dict[str, int] = field(converter=to_category_index)
    """
    Position of each value id
    """

    label: dict[str, str] = field(factory=dict, converter=dict)
    """
    Display label of each value id

    Value ids without a label are displayed using the id itself.
    """

    @index.validator
    def validate_index(
        self, attribute: attr.Attribute[Any], value: dict[str, int]
    ) -> None:
        """
        Validate that no two values share a position
        """
        positions = list(value.values())
        if len(set(positions)) != len(positions):
            msg = f"Each value must have a unique position. Received {value=}"
            raise ValueError(msg)

    @label.validator
    def validate_label(
        self, attribute: attr.Attribute[Any], value: dict[str, str]
    ) -> None:
        """
        Validate that only known value ids are labelled
        """
        unknown = sorted(set(value) - set(self.index))
        if unknown:
            msg = f"Labels were given for value ids not in the index: {unknown}"
            raise ValueError(msg)

    def __len__(self) -> int:
        return len(self.index)

    def labels_in_order(self) -> tuple[str, ...]:
        """
        Get the display labels, ordered by position

        Returns
        -------
        :
            Labels in the order in which they are laid out in the flat value array
        """
        value_ids = sorted(self.index, key=self.index.__getitem__)

        return tuple(self.label.get(value_id, value_id) for value_id in value_ids)


def _exactly_one_role(
    instance: DimensionMetadata, attribute: attr.Attribute[Any], value: tuple[str, ...]
) -> None:
    if len(value) != 1:
        msg = f"Exactly one dimension must have the {attribute.name} role. {value=}"
        raise ValueError(msg)

    if value[0] not in instance.id:
        msg = (
            f"The {attribute.name} dimension ({value[0]!r}) "
            f"is not one of the dimensions ({instance.id})"
        )
        raise ValueError(msg)


@define(frozen=True)
class DimensionMetadata:
    """
    Description of the dimensions of a dataset
    """

    id: tuple[str, ...] = field(converter=tuple)
    """
    Dimension ids, in the order in which they are laid out in the flat value array
    """

    dimension: dict[str, Category] = field(converter=dict)
    """
    Categories of each dimension
    """

    metric: tuple[str, ...] = field(converter=tuple, validator=_exactly_one_role)
    """
    Dimension which distinguishes the measured quantities

    This dimension is not part of the cartesian product
    that the flat value array is laid out over.
    """

    time: tuple[str, ...] = field(converter=tuple, validator=_exactly_one_role)
    """
    Dimension which holds the time labels
    """

    size: tuple[int, ...] | None = field(
        default=None, converter=converters.optional(tuple)
    )
    """
    Declared number of values in each dimension, if known
    """

    @dimension.validator
    def validate_dimension(
        self, attribute: attr.Attribute[Any], value: dict[str, Category]
    ) -> None:
        """
        Validate that every dimension has categories
        """
        missing = [d for d in self.id if d not in value]
        if missing:
            msg = f"No categories given for dimensions {missing}"
            raise ValueError(msg)

    @size.validator
    def validate_size(
        self, attribute: attr.Attribute[Any], value: tuple[int, ...] | None
    ) -> None:
        """
        Validate that declared sizes match the categories
        """
        if value is None:
            return

        category_sizes = tuple(len(self.dimension[d]) for d in self.id)
        if tuple(value) != category_sizes:
            msg = (
                f"Declared sizes {value} do not match "
                f"the number of categories of each dimension {category_sizes}"
            )
            raise ValueError(msg)

    @classmethod
    def from_jsonstat(cls, dimension: Mapping[str, Any]) -> DimensionMetadata:
        """
        Initialise from a JSON-stat `dimension` object

        Parameters
        ----------
        dimension
            Decoded JSON of the `dimension` object of a JSON-stat dataset.
            This has keys `id`, `role` and (optionally) `size`,
            plus one key per dimension id holding that dimension's `category`.

        Returns
        -------
        :
            Initialised metadata

        Raises
        ------
        ValueError
            A dimension id has no entry in `dimension`
        """
        ids = list(dimension["id"])
        missing = [d for d in ids if d not in dimension]
        if missing:
            msg = f"The dimension object has no entry for dimensions {missing}"
            raise ValueError(msg)

        role = dimension.get("role", {})

        return cls(
            id=ids,
            dimension={
                dimension_id: Category(
                    index=dimension[dimension_id]["category"]["index"],
                    label=dimension[dimension_id]["category"].get("label", {}),
                )
                for dimension_id in ids
            },
            metric=role.get("metric", ()),
            time=role.get("time", ()),
            size=dimension.get("size"),
        )

    @property
    def cross_product_ids(self) -> tuple[str, ...]:
        """
        Ids of the dimensions the flat value array is laid out over
        """
        return tuple(d for d in self.id if d not in self.metric)

    @property
    def time_dimension(self) -> str:
        """
        Id of the time dimension
        """
        return self.time[0]


def to_frozen_tags(tags: Mapping[str, str]) -> Mapping[str, str]:
    """
    Convert tags to a read-only mapping

    Parameters
    ----------
    tags
        Tags to convert

    Returns
    -------
    :
        Read-only copy of `tags`
    """
    return MappingProxyType(dict(tags))


@define(frozen=True)
class DataPoint:
    """
    A single value and the label it has in each dimension
    """

    tags: Mapping[str, str] = field(converter=to_frozen_tags)
    """
    Label of the point in each dimension, keyed by dimension id
    """

    value: int = field(converter=int)
    """
    Value
    """


def get_strides(dimension_sizes: Sequence[int]) -> tuple[int, ...]:
    """
    Get the stride of each dimension in the flat value array

    The stride of a dimension is the number of values
    between consecutive categories of that dimension,
    i.e. the product of the sizes of all dimensions after it.

    Parameters
    ----------
    dimension_sizes
        Size of each dimension, slowest-varying first

    Returns
    -------
    :
        Stride of each dimension

    Examples
    --------
    >>> get_strides([3, 2, 4])
    (8, 4, 1)
    """
    strides = []
    stride = 1
    for size in reversed(dimension_sizes):
        strides.append(stride)
        stride *= size

    return tuple(reversed(strides))


@define
class DimensionDecoder:
    """
    Decoder of flat value arrays into [DataPoint][(m).]'s
    """

    fill_value: int = 0
    """
    Value to use for missing (`None`) entries in the flat value array

    Note that this means a reported zero and a missing value
    can't be told apart after decoding.
    """

    def __call__(
        self,
        dimensions: DimensionMetadata,
        values: Sequence[int | None],
    ) -> list[DataPoint]:
        """
        Decode

        Parameters
        ----------
        dimensions
            Dimensions over which `values` is laid out

        values
            Flat value array

        Returns
        -------
        :
            One point per value, in the order of `values`

        Raises
        ------
        ShapeMismatchError
            The length of `values` is not the product of the sizes
            of the dimensions (excluding the metric dimension)
        """
        dimension_ids = dimensions.cross_product_ids
        labels = [dimensions.dimension[d].labels_in_order() for d in dimension_ids]
        sizes = [len(dimension_labels) for dimension_labels in labels]

        assert_values_match_dimension_sizes(values, sizes)

        flat = np.array(
            [self.fill_value if v is None else v for v in values], dtype=np.int64
        )
        # Row i holds the category position of value i in each dimension
        positions = (
            np.arange(flat.size, dtype=np.int64)[:, np.newaxis]
            // np.array(get_strides(sizes), dtype=np.int64)
        ) % np.array(sizes, dtype=np.int64)

        res = [
            DataPoint(
                tags={
                    dimension_id: dimension_labels[position]
                    for dimension_id, dimension_labels, position in zip(
                        dimension_ids, labels, row
                    )
                },
                value=value,
            )
            for row, value in zip(positions, flat)
        ]

        logger.debug(
            "Decoded {} data points over dimensions {}", len(res), dimension_ids
        )

        return res


def decode(
    dimensions: DimensionMetadata,
    values: Sequence[int | None],
    fill_value: int = 0,
) -> list[DataPoint]:
    """
    Decode a flat value array into [DataPoint][(m).]'s

    Convenience wrapper around [DimensionDecoder][(m).].

    Parameters
    ----------
    dimensions
        Dimensions over which `values` is laid out

    values
        Flat value array

    fill_value
        Value to use for missing entries

    Returns
    -------
    :
        One point per value, in the order of `values`
    """
    return DimensionDecoder(fill_value=fill_value)(dimensions, values)
