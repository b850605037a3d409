""" BaseQuery: an immutable description of the query to paginate """

from __future__ import annotations

import dataclasses
from collections import abc
from functools import cached_property
from typing import Optional, Union, NamedTuple

import sqlalchemy as sa

from keysetpager.sainfo.names import table_of
from keysetpager.typing import SAModelOrTable


class OrderDirective(NamedTuple):
    """ A declared ordering directive: column reference + direction

    Example:
        OrderDirective('description')
        OrderDirective('cars.description', 'desc')
    """
    # Column reference: "column", or "table.column"
    column: str

    # Direction: "asc" or "desc" (case insensitive). Anything else means "asc"
    direction: str = 'asc'

    @classmethod
    def ensure(cls, directive: OrderDirectiveLike) -> OrderDirective:
        """ Convert a string or a tuple into an OrderDirective

        A leading "-" is a shorthand for descending order:

            OrderDirective.ensure('-id')  # -> OrderDirective('id', 'desc')
        """
        if isinstance(directive, OrderDirective):
            return directive
        elif isinstance(directive, str):
            if directive.startswith('-'):
                return cls(directive[1:], 'desc')
            else:
                return cls(directive, 'asc')
        else:
            return cls(*directive)


@dataclasses.dataclass(frozen=True, eq=False)
class BaseQuery:
    """ Base Query: the filters, joins and ordering of the query to paginate

    This object is immutable: every method returns a new query. The original is never mutated,
    so a query can be safely shared between concurrent page requests.

    Example:
        query = (
            BaseQuery(Car)
            .join(Manufacturer, Car.manufacturer_id == Manufacturer.id)
            .filter(Manufacturer.country == 'Sweden')
            .order_by('-cars.year', 'description')
        )
    """
    # The primary model (or Table) to select rows of
    Model: SAModelOrTable

    # WHERE clauses, combined with AND
    where: tuple[sa.sql.ColumnElement, ...] = ()

    # JOINs: (target, onclause, isouter)
    joins: tuple[tuple[SAModelOrTable, Optional[sa.sql.ColumnElement], bool], ...] = ()

    # GROUP BY columns
    groups: tuple[sa.sql.ColumnElement, ...] = ()

    # Declared ordering directives. Order matters
    order: tuple[OrderDirective, ...] = ()

    # LIMIT, if any
    limit: Optional[int] = None

    # region Builder methods

    def filter(self, *criteria: sa.sql.ColumnElement) -> BaseQuery:
        """ Add WHERE conditions """
        return dataclasses.replace(self, where=self.where + criteria)

    def join(self, target: SAModelOrTable, onclause: sa.sql.ColumnElement = None, *, isouter: bool = False) -> BaseQuery:
        """ Add a JOIN """
        return dataclasses.replace(self, joins=self.joins + ((target, onclause, isouter),))

    def outerjoin(self, target: SAModelOrTable, onclause: sa.sql.ColumnElement = None) -> BaseQuery:
        """ Add a LEFT OUTER JOIN """
        return self.join(target, onclause, isouter=True)

    def group_by(self, *columns: sa.sql.ColumnElement) -> BaseQuery:
        """ Add GROUP BY columns """
        return dataclasses.replace(self, groups=self.groups + columns)

    def order_by(self, *directives: OrderDirectiveLike) -> BaseQuery:
        """ Add ordering directives, after the existing ones """
        return dataclasses.replace(self, order=self.order + tuple(map(OrderDirective.ensure, directives)))

    def with_predicate(self, predicate: sa.sql.ColumnElement) -> BaseQuery:
        """ Add a boolean predicate (WHERE) """
        return self.filter(predicate)

    def with_order(self, *directives: OrderDirectiveLike) -> BaseQuery:
        """ Replace ordering directives """
        return dataclasses.replace(self, order=tuple(map(OrderDirective.ensure, directives)))

    def with_limit(self, limit: Optional[int]) -> BaseQuery:
        """ Set the row limit """
        return dataclasses.replace(self, limit=limit)

    def without_order(self) -> BaseQuery:
        return dataclasses.replace(self, order=())

    def without_group_by(self) -> BaseQuery:
        return dataclasses.replace(self, groups=())

    # endregion

    @property
    def table(self) -> sa.Table:
        """ The primary table """
        return table_of(self.Model)

    @cached_property
    def tables(self) -> dict[str, sa.Table]:
        """ Tables available to this query, by name: the primary table + joined tables """
        tables = {self.table.name: self.table}
        for target, _, _ in self.joins:
            joined = table_of(target)
            tables.setdefault(joined.name, joined)
        return tables

    def statement(self, columns: abc.Iterable[sa.sql.ColumnElement] = None, order_by: abc.Iterable[sa.sql.ColumnElement] = ()) -> sa.sql.Select:
        """ Build an SQL SELECT statement

        Ordering directives are not compiled here: they're names that need to be resolved against tables.
        The caller compiles them and passes them in as `order_by` expressions.

        Args:
            columns: Columns to select. Default: all columns of the primary table
            order_by: ORDER BY expressions
        """
        # SELECT ... FROM
        if columns is None:
            columns = self.table.columns
        stmt = sa.select(*columns).select_from(self.table)

        # JOIN
        for target, onclause, isouter in self.joins:
            if onclause is None:
                stmt = stmt.join(target, isouter=isouter)
            else:
                stmt = stmt.join(target, onclause, isouter=isouter)

        # WHERE, GROUP BY, ORDER BY, LIMIT
        if self.where:
            stmt = stmt.where(*self.where)
        if self.groups:
            stmt = stmt.group_by(*self.groups)
        stmt = stmt.order_by(*order_by)
        if self.limit is not None:
            stmt = stmt.limit(self.limit)

        # Done
        return stmt


# Things that can be converted into an OrderDirective: '-id', ('id', 'desc')
OrderDirectiveLike = Union[OrderDirective, str, tuple[str, str]]
