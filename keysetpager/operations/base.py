from __future__ import annotations

from typing import TYPE_CHECKING

from keysetpager.query import BaseQuery
from keysetpager.typing import SARowDict


if TYPE_CHECKING:
    from keysetpager.engine.settings import PagerSettings


class Operation:
    """ Base for all operations. Defines the interface """
    query: BaseQuery
    settings: PagerSettings

    def __init__(self, query: BaseQuery, settings: PagerSettings):
        self.query = query
        self.settings = settings

    __slots__ = 'query', 'settings'

    def apply_to_query(self, query: BaseQuery) -> BaseQuery:
        """ Modify the query that produces resulting rows """
        raise NotImplementedError

    def apply_to_results(self, rows: list[SARowDict]) -> list[SARowDict]:
        """ Inspect or customize the resulting rows """
        return rows
