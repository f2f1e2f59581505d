import sqlalchemy as sa
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def create_engine(dsn, pool_size=5, **kwargs) -> sa.engine.Engine:
    """
    Builds an engine with a fixed ceiling of `pool_size` open connections and no overflow.
    """
    return sa.create_engine(dsn, pool_size=pool_size, max_overflow=0, **kwargs)


def create(engine):
    # registers the tables on Base.metadata
    from . import types  # noqa: F401
    Base.metadata.create_all(bind=engine)
