""" Fetch pages: the high-level interface """

from __future__ import annotations

from collections import abc
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from keysetpager.query import BaseQuery
from keysetpager.typing import KeysetLike

from .page import Page
from .page_query import PageQuery
from .settings import PagerSettings


async def fetch_page(engine: AsyncEngine,
                     query: BaseQuery,
                     *,
                     limit: Any = None,
                     after: Optional[KeysetLike] = None,
                     before: Optional[KeysetLike] = None,
                     settings: PagerSettings = None,
                     **fetch_options) -> Page:
    """ Fetch one page of the query

    Example:
        page = await fetch_page(engine, BaseQuery(Car).order_by('description'), limit=15)
        page = await fetch_page(engine, BaseQuery(Car).order_by('description'), limit=15, after=page.cursors.after)

    Args:
        engine: The engine to execute queries with
        query: The query to paginate
        limit: Page size. Default: `settings.default_limit`
        after: Fetch rows after this position: `Page.cursors.after`
        before: Fetch rows before this position: `Page.cursors.before`. Rows will come in the reverse order!
        settings: Pagination settings
        **fetch_options: Pass-through execution options for the row query

    Raises:
        exc.CursorError: Invalid cursor
        exc.InvalidColumnError: Invalid column name mentioned in the ordering
    """
    page_query = PageQuery(query, limit=limit, after=after, before=before, settings=settings)
    return await page_query.fetch_page(engine, **fetch_options)


async def iter_pages(engine: AsyncEngine, query: BaseQuery, **options) -> abc.AsyncIterator[Page]:
    """ Fetch pages one by one, following `Page.next`, until there are no more rows

    Pages are fetched sequentially: every page needs the cursors of the previous one.

    Example:
        async for page in iter_pages(engine, BaseQuery(Car), limit=100):
            ...

    Args:
        engine: The engine to execute queries with
        query: The query to paginate
        **options: Options for `fetch_page()`
    """
    page = await fetch_page(engine, query, **options)
    yield page

    while page.next is not None:
        page = await page.next()
        yield page
