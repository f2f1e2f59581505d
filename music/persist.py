import logging
from typing import Any, NamedTuple, Optional, Protocol

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from . import logs
from .database import create_engine

L = logging.getLogger("music.persist")


def bind(q: str, args) -> tuple:
    """
    Turns a query with positional `?` placeholders into a SQLAlchemy text clause
    with named parameters, so the same SQL runs on every dialect.
    """
    parts = q.split("?")
    if len(parts) - 1 != len(args):
        raise ValueError(f"query expects {len(parts) - 1} arguments, got {len(args)}")
    stmt = parts[0]
    params = {}
    for i, (arg, part) in enumerate(zip(args, parts[1:])):
        stmt += f":p{i}" + part
        params[f"p{i}"] = arg
    return sa.text(stmt), params


class Result(NamedTuple):
    rowcount: int
    lastrowid: Optional[int]


class Rows:
    """
    Rows returned by a query. The underlying connection goes back to the pool
    once the rows are exhausted, the block they're used in is left, or close()
    is called.
    """

    def __init__(self, conn: sa.engine.Connection, result: sa.engine.CursorResult):
        self._conn = conn
        self._result = result
        self.closed = False

    def __iter__(self):
        try:
            for row in self._result:
                yield row
        finally:
            self.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def first(self):
        try:
            return self._result.first()
        finally:
            self.close()

    def close(self):
        if self.closed:
            return
        self.closed = True
        try:
            self._result.close()
            self._conn.close()
        except SQLAlchemyError as e:
            logs.info(L, "Error closing rows", err=str(e))


class Tx:
    def __init__(self, conn: sa.engine.Connection):
        self._conn = conn
        self._tx = conn.begin()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc is None:
            self.commit()
        else:
            self.rollback(exc)

    def exec(self, q: str, *args) -> Result:
        r = self._conn.execute(*bind(q, args))
        return Result(r.rowcount, getattr(r, "lastrowid", None))

    def commit(self):
        try:
            self._tx.commit()
        finally:
            self._conn.close()

    def rollback(self, original: Optional[BaseException] = None):
        """Rolls back; a failure here is logged along with the error that caused the rollback."""
        try:
            self._tx.rollback()
        except SQLAlchemyError as e:
            logs.info(L, "There was a problem rolling back!",
                      error=str(e), original=str(original) if original is not None else "")
        finally:
            self._conn.close()


class Querier(Protocol):
    def query(self, q: str, *args) -> Rows: ...

    def query_row(self, q: str, *args) -> Optional[Any]: ...

    def exec(self, q: str, *args) -> Result: ...

    def begin(self) -> Tx: ...

    def row_exists(self, table: str, condition: str, *args) -> bool: ...


class Conn:
    def __init__(self, engine: sa.engine.Engine):
        self.engine = engine

    @classmethod
    def from_config(cls, cfg) -> "Conn":
        engine = create_engine(cfg.dsn, pool_size=cfg.pool_size)
        with engine.connect() as c:
            c.execute(sa.text("SELECT 1"))
        return cls(engine)

    def query(self, q: str, *args) -> Rows:
        conn = self.engine.connect()
        try:
            return Rows(conn, conn.execute(*bind(q, args)))
        except BaseException:
            conn.close()
            raise

    def query_row(self, q: str, *args):
        return self.query(q, *args).first()

    def exec(self, q: str, *args) -> Result:
        with self.engine.begin() as conn:
            r = conn.execute(*bind(q, args))
            return Result(r.rowcount, getattr(r, "lastrowid", None))

    def begin(self) -> Tx:
        return Tx(self.engine.connect())

    def row_exists(self, table: str, condition: str, *args) -> bool:
        q = f"SELECT EXISTS (SELECT 1 FROM {table} WHERE {condition})"
        try:
            row = self.query_row(q, *args)
        except SQLAlchemyError as e:
            # a failed probe answers True
            L.debug(f"row_exists on {table} failed: {e}")
            return True
        return bool(row[0]) if row is not None else False
