""" Row count: the total number of rows matching a query, regardless of pagination """

from __future__ import annotations

from collections import abc
from typing import Optional

import sqlalchemy as sa

from keysetpager.query import BaseQuery
from keysetpager.sainfo.columns import resolve_column_by_name


def count_statement(query: BaseQuery, *, identity_column: str) -> sa.sql.Select:
    """ Build a SELECT that counts rows matching the query

    Ordering is unnecessary for a count, and grouping would return a count per group rather than the total.
    Both are removed. `COUNT(DISTINCT <identity>)` is used instead, so JOINs do not inflate the count.

    Args:
        query: The base query, with its filters and joins
        identity_column: Name of the identity column of the primary table
    """
    counter = query.without_order().without_group_by().with_limit(None)
    identity = resolve_column_by_name(counter.table.name, identity_column, counter.tables, where='count')
    return counter.statement(columns=[
        sa.func.count(sa.distinct(identity)).label('count'),
    ])


def parse_count_row(row: Optional[abc.Mapping]) -> Optional[int]:
    """ Get the count from an aggregate result row

    A row with exactly one field is the count, whatever its name is: some drivers use strange names.
    Otherwise, fall back to the field named "count".
    If there's no such field, the count is unknown: `None`.
    """
    if row is None:
        return None

    if len(row) == 1:
        value, = row.values()
    else:
        value = row.get('count')

    return None if value is None else int(value)
