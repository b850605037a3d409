""" PageQuery: an object that binds operations together to fetch one page of a query """

from __future__ import annotations

import asyncio
import logging
from collections import abc
from functools import partial
from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncEngine

from keysetpager import operations
from keysetpager.operations.sort import get_sort_fields_with_direction
from keysetpager.query import BaseQuery
from keysetpager.typing import KeysetLike, SARowDict
from keysetpager.util.sacompat import add_columns_if_missing

from .loader import RowLoaderBase, PrimaryRowLoader
from .page import Page
from .settings import PagerSettings

logger = logging.getLogger(__name__)


class PageQuery:
    """ Page Query: fetches one page of a Base Query

    This class puts everything together: it takes the Base Query, lets every operation modify it (sort, cursor, limit),
    then uses a Loader object to fetch actual rows and the total count, concurrently.

    Example:
        q = PageQuery(BaseQuery(Car).order_by('description'), limit=10, after=['Civic'])
        page = await q.fetch_page(engine)
    """
    # The query to paginate. Never modified.
    query: BaseQuery

    # Pagination settings
    settings: PagerSettings

    # The cursor, if any
    cursor: Optional[operations.Cursor]

    # Loader used to fetch results from the statement
    loader: RowLoaderBase

    def __init__(self,
                 query: BaseQuery,
                 *,
                 limit: Any = None,
                 after: Optional[KeysetLike] = None,
                 before: Optional[KeysetLike] = None,
                 settings: PagerSettings = None):
        """ Prepare to fetch a page of the query

        Args:
            query: The query to paginate
            limit: Page size. Anything that is not a positive integer means "default"
            after: Cursor: fetch rows after this position
            before: Cursor: fetch rows before this position

        Raises:
            exc.CursorError: Invalid cursor: both "after" and "before", or cursor length mismatch
            exc.InvalidColumnError: Invalid column name mentioned in the ordering (programming error)
        """
        self.query = query
        self.settings = settings or self.DEFAULT_SETTINGS
        self.cursor = operations.Cursor.from_options(after=after, before=before)

        # Init loader
        self.loader = self.PrimaryRowLoader()

        # Init operations
        self.sort_op = self.SortOperation(query, self.settings)
        self.cursor_op = self.CursorOperation(query, self.settings, sort_keys=self.sort_op.sort_keys, cursor=self.cursor)
        self.limit_op = self.LimitOperation(query, self.settings, limit)

    __slots__ = 'query', 'settings', 'cursor', 'loader', 'sort_op', 'cursor_op', 'limit_op'

    # Default settings object
    DEFAULT_SETTINGS = PagerSettings()

    # Overridable classes: loader
    PrimaryRowLoader = PrimaryRowLoader

    # Overridable classes: operations
    SortOperation = operations.SortOperation
    CursorOperation = operations.CursorOperation
    LimitOperation = operations.LimitOperation

    @property
    def sort_keys(self) -> tuple[operations.SortKey, ...]:
        """ The keys rows are paginated by, canonical order """
        return self.sort_op.sort_keys

    @property
    def limit(self) -> int:
        """ The effective limit """
        return self.limit_op.limit

    def paginated_query(self) -> BaseQuery:
        """ Get the Base Query with every operation applied: sorted, filtered by the cursor, limited """
        query = self.query
        for op in (self.sort_op, self.cursor_op, self.limit_op):
            query = op.apply_to_query(query)
        return query

    def statement(self) -> sa.sql.Select:
        """ Build an SQL SELECT statement that loads the page """
        query = self.paginated_query()
        sort_keys = operations.resolve_sort_keys(query, default_column=self.settings.get_identity_column(query))

        # Select: columns of the primary table, plus sort columns of joined tables, labeled "table.column"
        stmt = query.statement(order_by=get_sort_fields_with_direction(sort_keys, query))
        stmt = add_columns_if_missing(stmt, [
            key.column(query).label(f'{key.table_name}.{key.name}')
            for key in sort_keys
            if key.table_name != query.table.name
        ])

        # Customize
        return self.settings.customize_statement(self, stmt)

    def count_statement(self) -> sa.sql.Select:
        """ Build an SQL SELECT statement that counts all rows of the query """
        return operations.count_statement(self.query, identity_column=self.settings.get_identity_column(self.query))

    async def fetch_page(self, engine: AsyncEngine, **fetch_options) -> Page:
        """ Fetch the page: rows and the total count, concurrently

        Args:
            engine: The engine to execute queries with
            **fetch_options: Pass-through execution options for the row query
        """
        # Load rows and count. These are independent reads
        stmt, count_stmt = self.statement(), self.count_statement()
        rows_task = asyncio.ensure_future(self.loader.load_results(engine, stmt, fetch_options))
        count_task = asyncio.ensure_future(self.loader.load_count(engine, count_stmt))
        try:
            rows, row_count = await asyncio.gather(rows_task, count_task)
        except BaseException:
            # One has failed: stop the other one and wait until it releases its connection
            for task in (rows_task, count_task):
                task.cancel()
            await asyncio.gather(rows_task, count_task, return_exceptions=True)
            raise

        # Apply operations to results
        rows = self._apply_operations_to_results(rows)

        # Page
        has_more = len(rows) == self.limit
        logger.debug('Fetched %d rows of %s (limit=%d, has_more=%s)', len(rows), row_count, self.limit, has_more)
        return Page(
            rows=rows,
            cursors=self.cursor_op.cursors,
            ordered_by=self.sort_keys,
            row_count=row_count,
            limit=self.limit,
            has_more=has_more,
            next=self._next_page_func(engine, fetch_options) if has_more else None,
        )

    def _apply_operations_to_results(self, rows: list[SARowDict]) -> list[SARowDict]:
        """ Apply operations to the result set """
        for op in (self.sort_op, self.cursor_op, self.limit_op):
            rows = op.apply_to_results(rows)
        return rows

    def _next_page_func(self, engine: AsyncEngine, fetch_options: abc.Mapping[str, Any]) -> abc.Callable[[], abc.Awaitable[Page]]:
        """ Make a function that fetches the next page in the same direction """
        cursors = self.cursor_op.cursors
        if self.cursor is not None and self.cursor.is_before:
            direction = dict(before=cursors.before)
        else:
            direction = dict(after=cursors.after)

        # Start over from the pristine base query: only the cursor is different
        return partial(
            self.__class__(self.query, limit=self.limit_op.input_limit, settings=self.settings, **direction).fetch_page,
            engine,
            **fetch_options
        )
