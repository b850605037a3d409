""" Cursor extraction: get cursors for the previous and the next pages from the edge rows """

from __future__ import annotations

from collections import abc
from typing import Any, Optional, NamedTuple, TYPE_CHECKING

from keysetpager.typing import Keyset, SARowDict

from .sort import SortKey

if TYPE_CHECKING:
    from .cursor import Cursor


class PageCursors(NamedTuple):
    """ Cursors of a page: always expressed in canonical sort order """
    # Feed it to "before" to get the previous page. `None` when the page is empty
    before: Optional[Keyset]

    # Feed it to "after" to get the next page. `None` when the page is empty
    after: Optional[Keyset]


# Function that gets the cursor value of a row
CursorValueProjection = abc.Callable[[SARowDict, SortKey], Any]


def extract_cursors(sort_keys: abc.Sequence[SortKey], cursor: Optional[Cursor], rows: abc.Sequence[SARowDict], *, project: CursorValueProjection = None) -> PageCursors:
    """ Get cursors from the first and the last rows of a page

    When the query was executed with "before", rows come in the reverse order.
    The cursors are swapped to compensate: "before" always points towards the start of the canonical order,
    "after" always points towards its end.

    Args:
        sort_keys: The keys the query is sorted by, canonical order
        cursor: The cursor the page was fetched with, if any
        rows: Fetched rows, in the order they were fetched
        project: Function to get the cursor value of a row. Default: `row[sort_key.name]`
    """
    if not rows:
        return PageCursors(before=None, after=None)

    project = project or row_cursor_value
    first = tuple(project(rows[0], key) for key in sort_keys)
    last = tuple(project(rows[-1], key) for key in sort_keys)

    # The sort is reversed, so "after" is "before" and "before" is "after"
    if cursor is not None and cursor.is_before:
        return PageCursors(before=last, after=first)
    else:
        return PageCursors(before=first, after=last)


def row_cursor_value(row: SARowDict, sort_key: SortKey) -> Any:
    """ Default projection: get the field value by the column name

    Columns of joined tables are loaded under their "table.column" label, so this name is tried first.
    """
    label = f'{sort_key.table_name}.{sort_key.name}'
    if label in row:
        return row[label]
    else:
        return row[sort_key.name]
