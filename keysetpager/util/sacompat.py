from collections import abc
from typing import Union

import sqlalchemy as sa


def add_columns_if_missing(stmt: sa.sql.Select, columns: abc.Iterable[Union[sa.Column, sa.sql.ColumnElement]]) -> sa.sql.Select:
    """ Add columns to an SQL Select statement, but only if they're not already added """
    # NOTE: since SqlAlchemy 1.4.23 add_columns() does not do de-duplication anymore.
    new_columns = (col for col in columns if not stmt.selected_columns.contains_column(col))

    # Further, `new_columns` may itself contain duplicates. Remove them
    # Removal method: use `col.key`, which is applicable both to labels and to Column objects. We expect no duplicate names.
    columns_to_add = {
        col.key: col for col in new_columns
    }.values()

    # Finally, done
    if not columns_to_add:
        return stmt
    return stmt.add_columns(*columns_to_add)
