"""
File-driven schema migrations.

A migrations directory holds `NNN_description.sql` scripts and, optionally, a
matching `NNN_description.rollback.sql` for each. Scripts run once each, in
filename order, and are recorded in the `migrations` ledger table. Only the
most recently applied script can be rolled back, one per call.

Statements are split on every `;`, so a literal or procedural block that
contains a semicolon will be cut in two. Scripts must avoid that.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from taskboard.db import Database
from taskboard.errors import MigrationError
from taskboard.models import utcnow_iso

logger = logging.getLogger(__name__)

SQL_SUFFIX = ".sql"
ROLLBACK_SUFFIX = ".rollback.sql"
LEDGER_TABLE = "migrations"

# Dropped by `reset`, children first.
CORE_TABLES = ("permissions", "tasks", "boards", "users", LEDGER_TABLE)

_LEDGER_DDL = {
  "sqlite": (
    "CREATE TABLE IF NOT EXISTS migrations ("
    " id INTEGER PRIMARY KEY AUTOINCREMENT,"
    " filename TEXT NOT NULL UNIQUE,"
    " executed_at TEXT NOT NULL"
    ")"
  ),
  "postgresql": (
    "CREATE TABLE IF NOT EXISTS migrations ("
    " id SERIAL PRIMARY KEY,"
    " filename TEXT NOT NULL UNIQUE,"
    " executed_at TEXT NOT NULL"
    ")"
  ),
}


def split_statements(sql: str) -> list[str]:
  return [s.strip() for s in sql.split(";") if s.strip()]


def rollback_filename(filename: str) -> str:
  if not filename.endswith(SQL_SUFFIX):
    raise ValueError(f"not a migration file: {filename}")
  return filename[: -len(SQL_SUFFIX)] + ROLLBACK_SUFFIX


def is_migration_file(name: str) -> bool:
  return name.endswith(SQL_SUFFIX) and ".rollback." not in name


@dataclass
class RollbackResult:
  status: str  # rolled_back | no_rollback_file | nothing_to_rollback
  filename: str | None = None

  @property
  def rolled_back(self) -> bool:
    return self.status == "rolled_back"


class Migrator:
  def __init__(self, db: Database, migrations_dir: str | Path, *, transactional: bool = False) -> None:
    self.db = db
    self.migrations_dir = Path(migrations_dir)
    self.transactional = transactional
    self.migrations_dir.mkdir(parents=True, exist_ok=True)

  async def ensure_ledger(self) -> None:
    ddl = _LEDGER_DDL.get(self.db.dialect, _LEDGER_DDL["sqlite"])
    await self.db.execute(ddl)

  def migration_files(self) -> list[str]:
    # Lexicographic order is the only ordering signal.
    return sorted(p.name for p in self.migrations_dir.iterdir() if p.is_file() and is_migration_file(p.name))

  async def is_executed(self, filename: str) -> bool:
    row = await self.db.fetch_one(
      "SELECT COUNT(*) AS count FROM migrations WHERE filename = :filename", {"filename": filename}
    )
    return bool(row and row["count"])

  async def run_migrations(self) -> list[str]:
    """Apply every pending script in order. Returns the filenames applied by this call."""
    logger.info("Checking for migrations in %s", self.migrations_dir)
    await self.ensure_ledger()
    files = self.migration_files()
    if not files:
      logger.info("No migration files found")
      return []

    applied: list[str] = []
    for filename in files:
      if await self.is_executed(filename):
        logger.debug("Skipping (already executed): %s", filename)
        continue
      logger.info("Running migration: %s", filename)
      await self.run_single_migration(filename)
      logger.info("Completed: %s", filename)
      applied.append(filename)

    if applied:
      logger.info("Applied %d migration(s)", len(applied))
    else:
      logger.info("Database is up to date")
    return applied

  async def run_single_migration(self, filename: str) -> None:
    sql = (self.migrations_dir / filename).read_text(encoding="utf-8")
    if self.transactional:
      async with self.db.transaction():
        await self._apply(filename, sql)
    else:
      await self._apply(filename, sql)

  async def _apply(self, filename: str, sql: str) -> None:
    await self._run_statements(filename, sql)
    await self.db.execute(
      "INSERT INTO migrations (filename, executed_at) VALUES (:filename, :executed_at)",
      {"filename": filename, "executed_at": utcnow_iso()},
    )

  async def _run_statements(self, filename: str, sql: str) -> None:
    for statement in split_statements(sql):
      try:
        await self.db.execute(statement)
      except Exception as exc:
        logger.error("Error running migration %s: %s", filename, exc)
        raise MigrationError(filename, statement, str(exc)) from exc

  async def last_executed(self) -> str | None:
    await self.ensure_ledger()
    row = await self.db.fetch_one("SELECT filename FROM migrations ORDER BY executed_at DESC, id DESC LIMIT 1")
    return row["filename"] if row else None

  async def rollback_last_migration(self) -> RollbackResult:
    filename = await self.last_executed()
    if filename is None:
      logger.info("No migrations to rollback")
      return RollbackResult(status="nothing_to_rollback")

    logger.info("Rolling back migration: %s", filename)
    path = self.migrations_dir / rollback_filename(filename)
    if not path.is_file():
      logger.warning("No rollback file found for: %s", filename)
      return RollbackResult(status="no_rollback_file", filename=filename)

    sql = path.read_text(encoding="utf-8")
    if self.transactional:
      async with self.db.transaction():
        await self._unapply(filename, path.name, sql)
    else:
      await self._unapply(filename, path.name, sql)
    logger.info("Rollback completed: %s", filename)
    return RollbackResult(status="rolled_back", filename=filename)

  async def _unapply(self, filename: str, rollback_name: str, sql: str) -> None:
    await self._run_statements(rollback_name, sql)
    await self.db.execute("DELETE FROM migrations WHERE filename = :filename", {"filename": filename})

  async def get_executed_migrations(self) -> list[str]:
    await self.ensure_ledger()
    rows = await self.db.fetch_all("SELECT filename FROM migrations ORDER BY executed_at ASC, id ASC")
    return [r["filename"] for r in rows]

  async def get_pending_migrations(self) -> list[str]:
    executed = set(await self.get_executed_migrations())
    return [f for f in self.migration_files() if f not in executed]

  async def reset(self) -> None:
    for table in CORE_TABLES:
      await self.db.execute(f"DROP TABLE IF EXISTS {table}")
    logger.warning("Dropped tables: %s", ", ".join(CORE_TABLES))
