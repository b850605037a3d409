import pytest
import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncEngine

from keysetpager.engine import PageQuery, PagerSettings
from keysetpager.operations import count_statement, parse_count_row
from keysetpager.query import BaseQuery
from keysetpager.testing import stmt2sql

from .util.models import Car, Manufacturer
from .util.test_queries import assert_statement_lines, assert_no_statement_lines


def test_count_sql():
    """ Test: ordering, grouping and limit are removed; filters and joins are kept """
    query = (
        BaseQuery(Car)
        .join(Manufacturer)
        .filter(Manufacturer.country == 'Japan')
        .group_by(Car.id)
        .order_by('-manufacturers.name')
        .with_limit(5)
    )
    sql = stmt2sql(count_statement(query, identity_column='id'))
    assert_statement_lines(sql,
        'SELECT count(DISTINCT cars.id) AS count',
        'FROM cars JOIN manufacturers ON manufacturers.id = cars.manufacturer_id',
        'WHERE manufacturers.country = Japan',
    )
    assert_no_statement_lines(sql, 'ORDER BY', 'GROUP BY', 'LIMIT')


def test_count_sql_identity_column():
    """ Test: the identity column comes from the settings """
    q = PageQuery(BaseQuery(Car), settings=PagerSettings(identity_column='manufacturer_id'))
    assert_statement_lines(q.count_statement(), 'count(DISTINCT cars.manufacturer_id)')


@pytest.mark.parametrize(('row', 'expected_count'), [
    # No row
    (None, None),
    # One field: whatever its name is
    ({'count': 27}, 27),
    ({'count(DISTINCT cars.id)': '27'}, 27),
    # Many fields: fall back to "count"
    ({'count': 27, 'extra': 'field'}, 27),
    # Many fields, no "count": unknown
    ({'total': 27, 'extra': 'field'}, None),
    ({'count': None}, None),
])
def test_parse_count_row(row: dict, expected_count: int):
    assert parse_count_row(row) == expected_count


async def test_count_results(cars_engine: AsyncEngine):
    """ Test: the count does not depend on ordering, grouping, or the page """
    query = BaseQuery(Car)

    async def count(query: BaseQuery, **options) -> int:
        page = await PageQuery(query, **options).fetch_page(cars_engine)
        return page.row_count

    assert await count(query) == 27
    assert await count(query) == 27
    assert await count(query.order_by('-description')) == 27
    assert await count(query.group_by(Car.id)) == 27
    assert await count(query, after=[20], limit=2) == 27

    # Joins do not inflate the count; filters do reduce it
    japanese = query.join(Manufacturer).filter(Manufacturer.country == 'Japan')
    assert await count(japanese) == 10
    assert await count(query.join(Manufacturer).filter(Manufacturer.country == 'USA').order_by('manufacturers.name')) == 11
