""" Loading strategies for PageQuery

* `RowLoaderBase`: base class
* `PrimaryRowLoader`: loads rows and counts with an async engine
"""

from __future__ import annotations

from collections import abc
from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncEngine

from keysetpager.operations.count import parse_count_row
from keysetpager.typing import SARowDict


class RowLoaderBase:
    """ Loader base

    Base for classes that actually execute statements: the row source.
    Operations, such as sort, cursor, limit, are out of scope here.
    """

    def prepare_statement(self, stmt: sa.sql.Select) -> sa.sql.Select:
        """ Hook: prepare the SELECT statement before it is executed

        Args:
             stmt: The statement with all operations applied
        """
        return stmt

    async def load_results(self, engine: AsyncEngine, stmt: sa.sql.Select, execution_options: abc.Mapping[str, Any]) -> list[SARowDict]:
        """ Execute the statement and fetch the rows

        Args:
            engine: The engine to execute the statement with
            stmt: The statement to execute
            execution_options: Pass-through options for the execution

        Returns:
            List of result dicts
        """
        raise NotImplementedError

    async def load_count(self, engine: AsyncEngine, stmt: sa.sql.Select) -> Optional[int]:
        """ Execute the count statement and get the count """
        raise NotImplementedError


class PrimaryRowLoader(RowLoaderBase):
    """ Primary loader: loads rows of the primary table

    Every call checks out its own connection: rows and count can be loaded concurrently.
    """
    __slots__ = ()

    async def load_results(self, engine: AsyncEngine, stmt: sa.sql.Select, execution_options: abc.Mapping[str, Any]) -> list[SARowDict]:
        async with engine.connect() as connection:
            # We use `.mappings()` to convert a list of rows `list[RowMapping]` into a list of dicts `list[dict]`
            res = await connection.execute(self.prepare_statement(stmt), execution_options=dict(execution_options))
            return [dict(row) for row in res.mappings()]

    async def load_count(self, engine: AsyncEngine, stmt: sa.sql.Select) -> Optional[int]:
        async with engine.connect() as connection:
            res = await connection.execute(stmt)
            return parse_count_row(res.mappings().first())
