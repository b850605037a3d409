from __future__ import annotations

from collections import abc

import sqlalchemy as sa

from keysetpager import exc


def resolve_column_by_name(table_name: str, column_name: str, tables: abc.Mapping[str, sa.Table], *, where: str) -> sa.Column:
    """ Find a column by name among the tables of a query

    Args:
        table_name: Name of the table that owns the column
        column_name: Name of the column
        tables: Tables available in the query, by name
        where: location identifier for error reporting

    Raises:
        exc.InvalidColumnError: no such table, or no such column in it
    """
    try:
        table = tables[table_name]
    except KeyError as e:
        raise exc.InvalidColumnError(table_name, column_name, where=where) from e

    try:
        return table.columns[column_name]
    except KeyError as e:
        raise exc.InvalidColumnError(table_name, column_name, where=where) from e


def is_column_unique(column: sa.Column) -> bool:
    """ Check whether a column's value is unique """
    return bool(column.primary_key or column.unique)
