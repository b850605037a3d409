from functools import cache

import sqlalchemy as sa

from keysetpager.typing import SAModelOrTable
from .names import table_of


@cache
def primary_key_names(Model: SAModelOrTable) -> tuple[str, ...]:
    """ Get the list of primary key column names """
    return tuple(c.name for c in primary_key_columns(Model))


@cache
def primary_key_columns(Model: SAModelOrTable) -> tuple[sa.Column, ...]:
    """ Get the list of primary key columns """
    return tuple(table_of(Model).primary_key.columns)
