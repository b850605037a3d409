from __future__ import annotations

import logging
from typing import Any, Optional

from keysetpager.query import BaseQuery
from .base import Operation

logger = logging.getLogger(__name__)


class LimitOperation(Operation):
    """ Limit operation: the page size

    When applied to a query:
    * Adds LIMIT
    """
    # The limit the caller has provided, as is
    input_limit: Any

    # The effective limit: parsed, with defaults and max limit applied
    limit: int

    def __init__(self, query: BaseQuery, settings, limit: Any = None):
        super().__init__(query, settings)
        self.input_limit = limit
        self.limit = settings.get_final_limit(parse_positive_int(limit))
        logger.debug('Effective limit: %d (given: %r)', self.limit, limit)

    __slots__ = 'input_limit', 'limit'

    def apply_to_query(self, query: BaseQuery) -> BaseQuery:
        return query.with_limit(self.limit)


def parse_positive_int(value: Any) -> Optional[int]:
    """ Parse a positive integer, or give `None`

    Example:
        parse_positive_int(5)  #-> 5
        parse_positive_int('5')  #-> 5
        parse_positive_int('five')  #-> None
        parse_positive_int(0)  #-> None
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        value = int(value)
    except (TypeError, ValueError):
        return None

    return value if value > 0 else None
