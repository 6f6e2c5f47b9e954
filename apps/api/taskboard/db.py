from __future__ import annotations

from contextlib import asynccontextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any, AsyncIterator

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

Params = dict[str, Any]


def ensure_sqlite_parent(url: str) -> None:
  """Create the directory holding a file-backed SQLite database, if needed."""
  u = make_url(url)
  if u.get_backend_name() != "sqlite" or not u.database or u.database == ":memory:":
    return
  Path(u.database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def _sqlite_on_connect(dbapi_connection, _connection_record) -> None:
  # Let SQLAlchemy emit BEGIN itself so DDL participates in transactions too.
  dbapi_connection.isolation_level = None
  cursor = dbapi_connection.cursor()
  cursor.execute("PRAGMA foreign_keys = ON")
  cursor.close()


def _sqlite_on_begin(conn) -> None:
  conn.exec_driver_sql("BEGIN")


class Database:
  """
  Minimal execute / fetch_one / fetch_all surface over an async SQLAlchemy engine.

  Notes:
  - Every call outside `transaction()` runs and commits on its own connection.
  - Inside `transaction()` all calls share one connection and commit together.
  """

  def __init__(self, url: str, *, echo: bool = False, engine: AsyncEngine | None = None) -> None:
    self.url = url
    self.engine = engine or create_async_engine(url, echo=echo)
    if self.engine.dialect.name == "sqlite":
      event.listen(self.engine.sync_engine, "connect", _sqlite_on_connect)
      event.listen(self.engine.sync_engine, "begin", _sqlite_on_begin)
    self._tx: ContextVar[AsyncConnection | None] = ContextVar(f"taskboard_tx_{id(self)}", default=None)

  @property
  def dialect(self) -> str:
    return self.engine.dialect.name

  @asynccontextmanager
  async def _connection(self) -> AsyncIterator[AsyncConnection]:
    pinned = self._tx.get()
    if pinned is not None:
      yield pinned
      return
    async with self.engine.begin() as conn:
      yield conn

  async def execute(self, sql: str, params: Params | None = None) -> int:
    async with self._connection() as conn:
      res = await conn.execute(text(sql), params or {})
      return res.rowcount

  async def fetch_one(self, sql: str, params: Params | None = None) -> dict[str, Any] | None:
    async with self._connection() as conn:
      res = await conn.execute(text(sql), params or {})
      row = res.mappings().first()
      return dict(row) if row is not None else None

  async def fetch_all(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
    async with self._connection() as conn:
      res = await conn.execute(text(sql), params or {})
      return [dict(r) for r in res.mappings().all()]

  @asynccontextmanager
  async def transaction(self) -> AsyncIterator[None]:
    if self._tx.get() is not None:
      # nested: join the outer transaction
      yield
      return
    async with self.engine.begin() as conn:
      token = self._tx.set(conn)
      try:
        yield
      finally:
        self._tx.reset(token)

  async def dispose(self) -> None:
    await self.engine.dispose()
