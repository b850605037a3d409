from collections import abc
from typing import Any, Union

import sqlalchemy as sa


# Annotation for SqlAlchemy models
SAModel = type

# Annotation for things a query can select from: a model or a Table
SAModelOrTable = Union[SAModel, sa.Table]

# Annotation for dict rows (result rows returned as dicts)
SARowDict = dict

# A keyset: one value per sort key, positionally aligned with them
Keyset = tuple

# Anything that can be turned into a keyset: a list or a tuple of values
KeysetLike = abc.Sequence[Any]
