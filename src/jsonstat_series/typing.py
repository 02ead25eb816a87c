"""
Type hints that are used throughout
"""

from __future__ import annotations

import datetime as dt
from typing import Callable, Union

import pandas as pd
from typing_extensions import TypeAlias

DATE_LIKE: TypeAlias = Union[dt.date, pd.Timestamp, str]
"""
Type alias for anything we can turn into a [pd.Timestamp][pandas.Timestamp]
"""

TagSet: TypeAlias = tuple[str, ...]
"""
Type alias for the tags of a [TimeSeries][(p).timeseries.]

Tags are unique and sorted, so two tag sets with the same members compare equal
and join to the same display label.
"""

BoundaryPredicate: TypeAlias = Callable[[pd.Timestamp], bool]
"""
Type alias for a function that says whether a date closes a bucket
"""

CombineFunction: TypeAlias = Callable[[int, int], int]
"""
Type alias for a function of (previous value, current value)
"""

TimeseriesDataFrame: TypeAlias = pd.DataFrame
"""
Type alias for the [pandas.DataFrame][pd.DataFrame] shape we hand to rendering

For typing purposes, this is just a direct alias of [pandas.DataFrame][pd.DataFrame].
However, the point of defining this
is to provide greater clarity of the kind of data we expect.

We expect a collection of timeseries.
These timeseries are defined by the columns, which are dates.
The index has a single level, `tags`,
holding the comma-joined tags of each series.
Values are nullable integers (`Int64`), so large counts stay exact.
Dates on which a series has no entry are `<NA>`.

An example of this kind of data is given below.

```python
            2020-01-01  2020-02-01
tags
El,Privat            3           5
El,Erhverv           1        <NA>
```
"""
