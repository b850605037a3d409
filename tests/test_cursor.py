import pytest
import sqlalchemy as sa

from keysetpager import exc
from keysetpager.engine import PageQuery
from keysetpager.operations import Cursor, CursorKind, build_cursor_predicate
from keysetpager.query import BaseQuery
from keysetpager.testing import stmt2sql

from .util.models import Car, Movie
from .util.test_queries import typical_test_sql_query_text


@pytest.mark.parametrize(('query', 'options', 'expected_query_lines', 'unexpected_query_lines'), [
    # No cursor: no predicate
    (BaseQuery(Car), dict(), ['ORDER BY cars.id ASC NULLS LAST', 'LIMIT 10'], ['WHERE']),
    # After: ">", includes NULLs
    (BaseQuery(Car), dict(after=[5]), [
        'WHERE cars.id > 5 OR cars.id IS NULL',
        'ORDER BY cars.id ASC NULLS LAST',
    ], []),
    # Before: "<", reversed order
    (BaseQuery(Car), dict(before=[12]), [
        'WHERE cars.id < 12',
        'ORDER BY cars.id DESC NULLS FIRST',
    ], ['IS NULL']),
    # DESC column, after: "<"
    (BaseQuery(Car).order_by('-id'), dict(after=[12]), [
        'WHERE cars.id < 12',
        'ORDER BY cars.id DESC NULLS FIRST',
    ], ['IS NULL']),
    # DESC column, before: ">", reversed order
    (BaseQuery(Car).order_by('-id'), dict(before=[12]), [
        'WHERE cars.id > 12 OR cars.id IS NULL',
        'ORDER BY cars.id ASC NULLS LAST',
    ], []),
    # Two columns: tie-break on the first one
    (BaseQuery(Car).order_by('manufacturer_id', 'description'), dict(after=[8, 'Cruze']), [
        'cars.manufacturer_id > 8 OR cars.manufacturer_id IS NULL',
        'cars.manufacturer_id = 8 AND (cars.description > Cruze OR cars.description IS NULL)',
        'ORDER BY cars.manufacturer_id ASC NULLS LAST, cars.description ASC NULLS LAST',
    ], []),
    # Mixed directions
    (BaseQuery(Car).order_by('manufacturer_id', '-description'), dict(after=[8, 'Impala']), [
        'cars.manufacturer_id > 8 OR cars.manufacturer_id IS NULL',
        'cars.manufacturer_id = 8 AND cars.description < Impala',
        'ORDER BY cars.manufacturer_id ASC NULLS LAST, cars.description DESC NULLS FIRST',
    ], []),
    # Mixed directions, before: every direction is reversed
    (BaseQuery(Car).order_by('manufacturer_id', '-description'), dict(before=[8, 'Impala']), [
        'cars.manufacturer_id < 8',
        'cars.manufacturer_id = 8 AND (cars.description > Impala OR cars.description IS NULL)',
        'ORDER BY cars.manufacturer_id DESC NULLS FIRST, cars.description ASC NULLS LAST',
    ], []),
    # The cursor predicate is combined with the query's own filters
    (BaseQuery(Car).filter(Car.manufacturer_id == 6), dict(after=[6]), [
        'WHERE cars.manufacturer_id = 6 AND (cars.id > 6 OR cars.id IS NULL)',
    ], []),
])
def test_cursor_sql(query: BaseQuery, options: dict, expected_query_lines: list[str], unexpected_query_lines: list[str]):
    """ Typical test: what SQL is generated """
    typical_test_sql_query_text(PageQuery(query, **options), expected_query_lines, unexpected_query_lines)


@pytest.mark.parametrize(('options', 'expected_query_lines', 'unexpected_query_lines'), [
    # NULL on the first column: tie-break uses "IS NULL", not "="
    (dict(after=[None, 'Moon']), [
        'movies.description IS NULL AND (movies.name > Moon OR movies.name IS NULL)',
    ], ['movies.description =', 'movies.description > ']),
    # NULL, ascending, "after": nothing is greater than NULL. The term is dropped.
    (dict(after=[None, None]), [
        'WHERE false',
    ], []),
    # NULL, ascending, "before": every non-null value is less than NULL
    (dict(before=[None, 'Moon']), [
        'movies.description IS NOT NULL',
        'movies.description IS NULL AND movies.name < Moon',
    ], ['movies.description <']),
    # NULL on the second column
    (dict(after=['Space', None]), [
        'movies.description > Space OR movies.description IS NULL',
    ], ['movies.description = Space', 'movies.name >']),
])
def test_cursor_null_values_sql(options: dict, expected_query_lines: list[str], unexpected_query_lines: list[str]):
    """ Test: NULL cursor values """
    query = BaseQuery(Movie).order_by('description', 'name')
    typical_test_sql_query_text(PageQuery(query, **options), expected_query_lines, unexpected_query_lines)


def test_cursor_predicate_no_cursor():
    """ Test: no cursor, no filtering """
    query = BaseQuery(Car)
    assert isinstance(build_cursor_predicate([], None, query), sa.sql.elements.True_)


@pytest.mark.parametrize(('options', 'error'), [
    # Both directions
    (dict(after=[1], before=[2]), 'either "after" or "before"'),
    # Not a list
    (dict(after=5), '"after" must be a list'),
    (dict(before='5'), '"before" must be a list'),
    # Length mismatch
    (dict(after=[1, 2]), 'Sort/cursor mismatch'),
    (dict(before=[]), 'Sort/cursor mismatch'),
])
def test_cursor_validation(options: dict, error: str):
    """ Test: invalid cursors are reported immediately """
    with pytest.raises(exc.CursorError) as e:
        PageQuery(BaseQuery(Car), **options)
    assert error in str(e.value)

    # It's a ValueError too
    assert isinstance(e.value, ValueError)


def test_cursor_from_options():
    assert Cursor.from_options() is None
    assert Cursor.from_options(after=[1, 'a']) == Cursor(CursorKind.AFTER, (1, 'a'))
    assert Cursor.from_options(before=(None,)) == Cursor(CursorKind.BEFORE, (None,))
    assert Cursor.from_options(before=(None,)).is_before


def test_base_query_is_not_modified():
    """ Test: the base query remains pristine """
    query = BaseQuery(Car).order_by('description')
    q = PageQuery(query, before=['Civic'], limit=5)
    stmt2sql(q.statement())

    assert q.query is query
    assert query.where == ()
    assert query.limit is None
    assert [d.column for d in query.order] == ['description']


def test_cursor_predicate_null_terms_dropped():
    """ Test: a term that compares with ">" against NULL matches nothing and is left out of the predicate """
    query = BaseQuery(Movie).order_by('description', 'name')
    sort_keys = PageQuery(query).sort_keys

    # One term remains: the tie on the first column
    predicate = build_cursor_predicate(sort_keys, Cursor(CursorKind.AFTER, (None, 'Moon')), query)
    assert stmt2sql(predicate) == 'movies.description IS NULL AND (movies.name > Moon OR movies.name IS NULL)'

    # No term remains: nothing comes after the cursor
    predicate = build_cursor_predicate(sort_keys, Cursor(CursorKind.AFTER, (None, None)), query)
    assert isinstance(predicate, sa.sql.elements.False_)

    # Going backwards from NULL, every term remains
    predicate = build_cursor_predicate(sort_keys, Cursor(CursorKind.BEFORE, (None, None)), query)
    assert stmt2sql(predicate) == 'movies.description IS NOT NULL OR movies.description IS NULL AND movies.name IS NOT NULL'


def test_stmt2sql_renders_plain_parameters():
    """ Test: bound parameters are inserted as is, without driver-specific casts """
    query = BaseQuery(Car)
    sql = stmt2sql(PageQuery(query, after=[5]).statement())
    assert 'cars.id > 5 OR cars.id IS NULL' in sql
    assert '::' not in sql
