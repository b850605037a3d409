""" Operations that implement keyset pagination

* sort: resolve the sort keys and define the order
* cursor: seek predicate, reversed order for "before", cursors from edge rows
* limit: the page size
* count: the total number of rows
"""

from .base import Operation
from .sort import SortOperation, SortKey, SortingDirection, resolve_sort_keys, reverse_sort_keys
from .cursor import CursorOperation, Cursor, CursorKind, build_cursor_predicate
from .extract import PageCursors, extract_cursors
from .limit import LimitOperation
from .count import count_statement, parse_count_row
