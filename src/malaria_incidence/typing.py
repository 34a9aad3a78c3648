"""
Type hints that are used throughout
"""

from __future__ import annotations

from typing import Union

import numpy as np
import pandas as pd
from typing_extensions import TypeAlias

NUMERIC_DATA: TypeAlias = Union[float, int, np.floating, np.integer]
"""
Type alias for a numeric value, e.g. a population or a case count
"""

CaseRecordsDataFrame: TypeAlias = pd.DataFrame
"""
Type alias for a table of case records

For typing purposes, this is just a direct alias of [pandas.DataFrame][pd.DataFrame].
However, the point of defining this
is to provide greater clarity of the kind of data we expect.

We expect one row per report,
with the columns given by
[CASE_RECORD_COLUMNS][malaria_incidence.constants.CASE_RECORD_COLUMNS].
An example is given below.

```python
    period   district  data_type age_group  total
0  2022-01  Gasabo     Clinical  Under5     12.0
1  2022-01  Gasabo     Confirmed Over5      NaN
```
"""

IncidenceDataFrame: TypeAlias = pd.DataFrame
"""
Type alias for a table of monthly incidence

One row per (period, data type),
with the incidence per 1,000 population in its own column.
"""
