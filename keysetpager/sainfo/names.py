from functools import cache

import sqlalchemy as sa
import sqlalchemy.orm

from keysetpager.typing import SAModelOrTable


@cache
def table_of(Model: SAModelOrTable) -> sa.Table:
    """ Get the Table that a model is mapped to """
    if isinstance(Model, sa.Table):
        return Model
    else:
        return sa.orm.class_mapper(Model).local_table
