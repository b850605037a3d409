from __future__ import annotations

from collections import abc
from dataclasses import dataclass
from typing import Optional

from keysetpager.operations.extract import PageCursors
from keysetpager.operations.sort import SortKey
from keysetpager.typing import SARowDict


@dataclass(frozen=True)
class Page:
    """ A page of rows, with pagination metadata

    When fetched with a "before" cursor, rows come in the reverse of the canonical order:
    the row closest to the cursor goes first. Reverse them yourself if you need the canonical order.
    Cursors, however, are always given in the canonical order.

    A page is a sequence of its rows: `len(page)`, `for row in page`.
    Like an empty list, an empty page is falsy: use `page.next` to tell whether there are more pages.
    """
    # Rows, as dicts. Yours now.
    rows: list[SARowDict]

    # Cursors of the previous and the next pages
    cursors: PageCursors

    # The keys the rows were paginated by, canonical order
    ordered_by: tuple[SortKey, ...]

    # Total number of rows matching the query, regardless of pagination.
    # `None` if the count could not be parsed from the aggregate result
    row_count: Optional[int]

    # The number of rows per page
    limit: int

    # Are there more rows? A heuristic: "the page is full".
    # It can't tell "exactly `limit` rows remained" from "more rows exist": in this case, `next()` gives an empty page.
    has_more: bool

    # Fetch the next page in the same direction; `None` when there are no more rows
    next: Optional[abc.Callable[[], abc.Awaitable[Page]]]

    def __len__(self):
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)
