from __future__ import annotations

import logging
from collections import abc
from dataclasses import dataclass
from enum import Enum

import sqlalchemy as sa

from keysetpager.query import BaseQuery, OrderDirective
from keysetpager.sainfo.columns import resolve_column_by_name, is_column_unique
from .base import Operation

logger = logging.getLogger(__name__)


class SortingDirection(Enum):
    ASC = 'asc'
    DESC = 'desc'

    @classmethod
    def parse(cls, direction: str) -> SortingDirection:
        """ Parse a direction string: "desc" is descending (case insensitive), anything else is ascending """
        if isinstance(direction, str) and direction.lower() == 'desc':
            return cls.DESC
        else:
            return cls.ASC

    def reversed(self) -> SortingDirection:
        return SortingDirection.ASC if self == SortingDirection.DESC else SortingDirection.DESC


@dataclass(frozen=True)
class SortKey:
    """ One component of the total order rows are paginated by """
    # Column name
    name: str

    # Name of the table that owns the column
    table_name: str

    # Sorting direction
    direction: SortingDirection

    __slots__ = 'name', 'table_name', 'direction'

    @property
    def is_desc(self) -> bool:
        return self.direction == SortingDirection.DESC

    def reversed(self) -> SortKey:
        """ The same column, sorted in the opposite direction """
        return SortKey(name=self.name, table_name=self.table_name, direction=self.direction.reversed())

    def directive(self) -> OrderDirective:
        """ Convert back to an ordering directive """
        return OrderDirective(f'{self.table_name}.{self.name}', self.direction.value)

    def column(self, query: BaseQuery) -> sa.Column:
        """ Resolve the column this key refers to """
        return resolve_column_by_name(self.table_name, self.name, query.tables, where='sort')

    def export(self) -> dict:
        return {'name': self.name, 'direction': self.direction.value, 'table_name': self.table_name}


class SortOperation(Operation):
    """ Sort operation: define the ordering of result rows

    Resolves the declared ordering directives into a list of sort keys.
    When applied to a query:
    * Replaces the ordering directives with the resolved ones (table-qualified)

    Unsorted queries are sorted by the identity column: pagination needs a well-defined order.
    """
    # Resolved sort keys, in the order of priority
    sort_keys: tuple[SortKey, ...]

    def __init__(self, query, settings):
        super().__init__(query, settings)
        self.sort_keys = resolve_sort_keys(query, default_column=settings.get_identity_column(query))

        # Validate: every key must be resolvable
        columns = [key.column(query) for key in self.sort_keys]

        # Keyset pagination may skip rows when the final column is not unique: ties can't be broken
        if not is_column_unique(columns[-1]):
            logger.debug('Final sort key %s.%s is not unique: rows with equal keys may be skipped between pages',
                         self.sort_keys[-1].table_name, self.sort_keys[-1].name)

    __slots__ = 'sort_keys',

    def apply_to_query(self, query: BaseQuery) -> BaseQuery:
        """ Modify the query: declare the resolved ordering """
        return query.with_order(*(key.directive() for key in self.sort_keys))


def resolve_sort_keys(query: BaseQuery, *, default_column: str) -> tuple[SortKey, ...]:
    """ Normalize the ordering directives of a query into a list of sort keys

    Args:
        query: The query with declared ordering directives
        default_column: The column to sort by when no ordering was declared. Ascending.
    """
    main_table_name = query.table.name

    # Not sorted? Sort by identity
    if not query.order:
        return (SortKey(name=default_column, table_name=main_table_name, direction=SortingDirection.ASC),)

    # Parse directives
    sort_keys = []
    for directive in query.order:
        table_name, _, column_name = directive.column.rpartition('.')
        sort_keys.append(SortKey(
            name=column_name,
            # Unqualified columns belong to the primary table
            table_name=table_name or main_table_name,
            direction=SortingDirection.parse(directive.direction),
        ))

    logger.debug('Resolved sort keys: %r', sort_keys)
    return tuple(sort_keys)


def reverse_sort_keys(sort_keys: abc.Iterable[SortKey]) -> tuple[SortKey, ...]:
    """ Flip the direction of every sort key. Columns and their positions are preserved. """
    return tuple(key.reversed() for key in sort_keys)


def get_sort_fields_with_direction(sort_keys: abc.Iterable[SortKey], query: BaseQuery) -> abc.Iterator[sa.sql.ColumnElement]:
    """ Get the list of expressions to sort by

    NULL is the largest value: it goes last when ascending, first when descending.
    This matches the PostgreSQL default, and the cursor predicate relies on it, so it is made explicit for every dialect.

    Args:
        sort_keys: The keys to sort by
        query: The query to resolve the columns against
    """
    for key in sort_keys:
        expr = key.column(query)

        # Make a sorting expression, depending on the direction
        if key.is_desc:
            yield expr.desc().nullsfirst()
        else:
            yield expr.asc().nullslast()
