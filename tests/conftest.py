import os
import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from keysetpager.testing import created_tables

from .util.models import Base, MoviesBase, insert_cars, insert_movies


@pytest.fixture(scope='function')
async def engine(tmp_path) -> AsyncEngine:
    # Engine
    engine = create_async_engine(DATABASE_URL or f'sqlite+aiosqlite:///{tmp_path / "test_keysetpager.db"}')
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope='function')
async def cars_engine(engine: AsyncEngine) -> AsyncEngine:
    """ Engine with the "cars" and "manufacturers" tables filled with data """
    async with created_tables(engine, Base):
        await insert_cars(engine)
        yield engine


@pytest.fixture(scope='function')
async def movies_engine(engine: AsyncEngine) -> AsyncEngine:
    """ Engine with the "movies" table filled with data """
    async with created_tables(engine, MoviesBase):
        await insert_movies(engine)
        yield engine


# URL of the database to connect to. Default: a temporary SQLite database
# NOTE: expected row orders in tests assume binary string collation, like SQLite has
DATABASE_URL = os.getenv('DATABASE_URL')
