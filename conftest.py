import pytest
import sqlalchemy as sa
from sqlalchemy.pool import StaticPool

from music import config, database
from music.app import create_app
from music.persist import Conn


@pytest.fixture
def engine():
    engine = sa.create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    database.create(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def conn(engine):
    return Conn(engine)


@pytest.fixture
def cfg():
    return config.load({"SCOPE": "test"}, paths=[])


@pytest.fixture
def app(cfg, conn):
    app = create_app(cfg, conn)
    app.testing = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def drop(engine):
    """Drops a table so every statement against it fails."""

    def drop(table):
        with engine.begin() as c:
            c.execute(sa.text(f"DROP TABLE {table}"))

    return drop
