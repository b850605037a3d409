from __future__ import annotations

import operator
from collections import abc
from enum import Enum
from typing import Optional, NamedTuple

import sqlalchemy as sa

from keysetpager import exc
from keysetpager.query import BaseQuery
from keysetpager.typing import Keyset, KeysetLike, SARowDict

from .base import Operation
from .extract import PageCursors, extract_cursors
from .sort import SortKey, reverse_sort_keys


class CursorKind(Enum):
    AFTER = 'after'
    BEFORE = 'before'


class Cursor(NamedTuple):
    """ A position in the sorted result set, and the direction to paginate in """
    # Paginate after this position, or before it
    kind: CursorKind

    # Sort key values, one per sort key
    values: Keyset

    @property
    def is_before(self) -> bool:
        return self.kind == CursorKind.BEFORE

    @classmethod
    def from_options(cls, *, after: Optional[KeysetLike] = None, before: Optional[KeysetLike] = None) -> Optional[Cursor]:
        """ Make a cursor from the `after`/`before` pagination options

        Raises:
            exc.CursorError: both are given, or the value is not a list
        """
        if after is not None and before is not None:
            raise exc.CursorError('Choose a pagination direction and use either "after" or "before", not both.')

        if after is not None:
            return cls(CursorKind.AFTER, ensure_keyset(after, 'after'))
        elif before is not None:
            return cls(CursorKind.BEFORE, ensure_keyset(before, 'before'))
        else:
            return None


class CursorOperation(Operation):
    """ Cursor operation: keyset pagination

    When applied to a query:
    * Adds a WHERE predicate that selects rows strictly after (or before) the cursor
    * Reverses the ordering when paginating backwards

    When applied to results:
    * Derives the cursors of the previous and the next pages from the edge rows
    """
    # The cursor, if any
    cursor: Optional[Cursor]

    # Sort keys, canonical order
    sort_keys: tuple[SortKey, ...]

    # Cursors: become available after inspecting the result rows
    cursors: PageCursors

    def __init__(self, query: BaseQuery, settings, *, sort_keys: tuple[SortKey, ...], cursor: Optional[Cursor]):
        super().__init__(query, settings)
        self.sort_keys = sort_keys
        self.cursor = cursor
        self.cursors = None  # type: ignore[assignment]

        # The cursor must have exactly one value per sort key
        if cursor is not None and len(cursor.values) != len(sort_keys):
            raise exc.CursorError(
                f'The cursor has {len(cursor.values)} values, but the query is sorted by {len(sort_keys)} columns. '
                f'Sort/cursor mismatch.'
            )

    __slots__ = 'cursor', 'sort_keys', 'cursors'

    def apply_to_query(self, query: BaseQuery) -> BaseQuery:
        """ Modify the query: add the seek predicate; reverse the order for "before" """
        if self.cursor is None:
            return query

        # Filter
        query = query.with_predicate(build_cursor_predicate(self.sort_keys, self.cursor, query))

        # "before" is just like "after" if we reverse the sort order
        if self.cursor.is_before:
            query = query.with_order(*(key.directive() for key in reverse_sort_keys(self.sort_keys)))

        # Done
        return query

    def apply_to_results(self, rows: list[SARowDict]) -> list[SARowDict]:
        """ Inspect the result set: get cursors """
        self.cursors = extract_cursors(
            self.sort_keys,
            self.cursor,
            rows,
            project=self.settings.project_cursor_value,
        )
        return rows


def build_cursor_predicate(sort_keys: abc.Sequence[SortKey], cursor: Optional[Cursor], query: BaseQuery) -> sa.sql.ColumnElement:
    """ Build a boolean expression that selects rows strictly beyond the cursor

    This is the lexicographic "seek" expansion:

        (col0 > val0)
        OR (col0 = val0 AND col1 > val1)
        OR (col0 = val0 AND col1 = val1 AND col2 > val2)
        ...

    where ">" becomes "<" for descending columns, and is flipped once more for "before" cursors.

    NULL is the largest value (see `get_sort_fields_with_direction()`), so:
    * `col > val` also includes `col IS NULL`
    * `col < NULL` means `col IS NOT NULL`
    * `col > NULL` matches nothing: nothing is larger than NULL. Such terms are dropped
    * equality with NULL is `col IS NULL`

    Args:
        sort_keys: The keys the query is sorted by, canonical order
        cursor: The cursor to paginate from. `None` produces an always-true expression.
        query: The query to resolve the columns against

    Raises:
        exc.CursorError: the number of cursor values does not match the number of sort keys
    """
    if cursor is None:
        return sa.true()

    if len(cursor.values) != len(sort_keys):
        raise exc.CursorError('Sort/cursor mismatch.')

    columns = [key.column(query) for key in sort_keys]

    # Every term: equality on all previous columns, and comparison on the current one
    terms = []
    for k, (key, column, value) in enumerate(zip(sort_keys, columns, cursor.values)):
        # Strictly beyond on this column. `None`: no row can be beyond, the term is dropped
        comparison = _seek_comparison(column, value, sign=_seek_sign(key, cursor))
        if comparison is None:
            continue

        terms.append(sa.and_(
            # Tie on every higher-priority column
            *(
                prev_column.is_(None) if prev_value is None else prev_column == prev_value
                for prev_column, prev_value in zip(columns[:k], cursor.values[:k])
            ),
            comparison,
        ))

    # No term can match: the cursor is past the last row
    if not terms:
        return sa.false()

    return sa.or_(*terms)


def _seek_sign(key: SortKey, cursor: Cursor) -> str:
    """ Get the comparison to seek with: '>' or '<' """
    sign = '<' if key.is_desc else '>'
    if cursor.is_before:
        sign = _REVERSE_SIGN[sign]
    return sign


def _seek_comparison(column: sa.Column, value, *, sign: str) -> Optional[sa.sql.ColumnElement]:
    """ Compare a column to a cursor value, NULL-aware """
    if value is not None:
        expr = _OPERATORS[sign](column, value)

        # `col > 'abc'` does not match rows where `col` is NULL. Include them explicitly
        if sign == '>':
            expr = sa.or_(expr, column.is_(None))
        return expr
    elif sign == '<':
        # `col < NULL` does not work. Every non-null value is less than NULL
        return column.is_not(None)
    else:
        # Nothing is greater than NULL
        return None


def ensure_keyset(value: KeysetLike, name: str) -> Keyset:
    """ Convert a cursor value into a tuple, or fail """
    if isinstance(value, (str, bytes)) or not isinstance(value, abc.Sequence):
        raise exc.CursorError(f'"{name}" must be a list of values, got: {value!r}')
    return tuple(value)


_OPERATORS = {'>': operator.gt, '<': operator.lt}
_REVERSE_SIGN = {'>': '<', '<': '>'}
