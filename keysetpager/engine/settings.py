from __future__ import annotations

import dataclasses
from collections import abc
from typing import Any, Optional, TYPE_CHECKING

from keysetpager.sainfo.primary_key import primary_key_names
from keysetpager.operations.extract import row_cursor_value


if TYPE_CHECKING:
    import sqlalchemy as sa
    from keysetpager.query import BaseQuery
    from keysetpager.operations.sort import SortKey
    from keysetpager.typing import SARowDict
    from .page_query import PageQuery


@dataclasses.dataclass
class PagerSettings:
    """ Settings for the pager

    This object defines additional behavior that may be used with paginated queries:
    default and max page sizes, the identity column, cursor values, statement customization.
    """
    # The `limit` you get by default, if not specified
    default_limit: int = 10

    # The max number of rows per page, regardless of the limit
    max_limit: Optional[int] = None

    # The identity column of the primary table.
    # Used to sort unsorted queries, and to count rows. Default: the first primary key column
    identity_column: Optional[str] = None

    # Custom cursor value projection: (row, sort key) -> value
    # Use it when a sort key's value has to be computed from the row, or is loaded under a different name
    cursor_value: Optional[abc.Callable[[SARowDict, SortKey], Any]] = None

    # ### Callbacks for PageQuery
    # PageQuery and Operations will use these methods to apply the settings

    def get_final_limit(self, limit: Optional[int]) -> int:
        """ Callback that fine-tunes the `limit` of a query by applying default and max limits

        Used by: the "limit" operation to decide how many rows to limit the page to.
        """
        # Apply default limit
        if not limit:
            limit = self.default_limit

        # Apply max limit
        if self.max_limit:
            limit = min(limit, self.max_limit)

        # Done
        return limit

    def get_identity_column(self, query: BaseQuery) -> str:
        """ Callback that gives the name of the identity column of the query's primary table

        Default behavior: use `identity_column`, fall back to the first primary key column, then to "id"
        """
        if self.identity_column:
            return self.identity_column

        pk = primary_key_names(query.Model)
        return pk[0] if pk else 'id'

    def project_cursor_value(self, row: SARowDict, sort_key: SortKey) -> Any:
        """ Callback that gets the cursor value of a row for the given sort key

        Used by: the "cursor" operation to make cursors from the edge rows of a page.

        Default behavior: use `cursor_value()`, if provided; fall back to the field with the column's name
        You can override this method for custom behavior
        """
        if self.cursor_value is not None:
            return self.cursor_value(row, sort_key)
        else:
            return row_cursor_value(row, sort_key)

    def customize_statement(self, query: PageQuery, stmt: sa.sql.Select) -> sa.sql.Select:
        """ Callback that customizes the page statement

        Used by: PageQuery to customize the statement after all operations were applied.
        Not applied to the count statement.

        Default behavior: none
        You can override this method for custom behavior
        """
        return stmt
