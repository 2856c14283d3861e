"""
Type hints that are used throughout
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd
from typing_extensions import TypeAlias

NUMERIC_DATA: TypeAlias = Union[float, int, np.floating, np.integer]
"""
Type alias for a value that can appear in the numeric columns of our tables
"""

PathLike: TypeAlias = Union[str, Path]
"""
Type alias for something we can pass to the loaders as a path
"""

SheetName: TypeAlias = Union[str, int]
"""
Type alias for a sheet name or (zero-based) sheet position
"""

WeeklyDataFrame: TypeAlias = pd.DataFrame
"""
Type alias for the [pandas.DataFrame][pd.DataFrame] shape we use throughout

For typing purposes, this is just a direct alias of [pandas.DataFrame][pd.DataFrame].
However, the point of defining this
is to provide greater clarity of the kind of data we expect.

We expect one row per record, with a `week_number` column
(integer, 1-53, weeks start on Sunday as in `%U`)
plus normalised, English column names.
Any other key (e.g. `region`) is a plain column too,
so that the tables can be joined with [pandas.merge][pd.merge].

An example of this kind of data is given below.

```python
     region  week_number  case_count  cases_per_100k  icu_admissions  deaths
0  RegionA           10          50            25.0               1       0
1  RegionB           10          30            15.0               0       1
```
"""
