"""Command-line interface for schema migrations.

    taskboard-migrate up        apply pending migrations
    taskboard-migrate rollback  undo the most recent migration
    taskboard-migrate status    list executed and pending migrations
    taskboard-migrate reset     drop every core table, ledger included
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import click

from taskboard.config import settings
from taskboard.db import Database, ensure_sqlite_parent
from taskboard.errors import TaskboardError
from taskboard.logs import configure_logging
from taskboard.migrations.engine import Migrator

T = TypeVar("T")


def _run(ctx: click.Context, action: Callable[[Migrator], Awaitable[T]]) -> T:
  opts = ctx.obj

  async def _go() -> T:
    ensure_sqlite_parent(opts["database_url"])
    db = Database(opts["database_url"])
    try:
      migrator = Migrator(db, opts["migrations_dir"], transactional=opts["transactional"])
      return await action(migrator)
    finally:
      await db.dispose()

  try:
    return asyncio.run(_go())
  except TaskboardError as exc:
    raise click.ClickException(exc.message) from exc


@click.group()
@click.option("--database-url", default=None, help="Override DATABASE_URL.")
@click.option("--migrations-dir", default=None, type=click.Path(file_okay=False), help="Override MIGRATIONS_DIR.")
@click.option("--transactional/--no-transactional", default=None, help="Wrap each migration file in a transaction.")
@click.option("--log-level", default=None, help="Override LOG_LEVEL.")
@click.pass_context
def cli(
  ctx: click.Context,
  database_url: str | None,
  migrations_dir: str | None,
  transactional: bool | None,
  log_level: str | None,
) -> None:
  """Schema migrations for the task board database."""
  configure_logging(log_level or settings.log_level)
  ctx.obj = {
    "database_url": database_url or settings.database_url,
    "migrations_dir": migrations_dir or settings.migrations_dir,
    "transactional": settings.migrations_transactional if transactional is None else transactional,
  }


@cli.command()
@click.pass_context
def up(ctx: click.Context) -> None:
  """Run all pending migrations."""

  async def _up(m: Migrator) -> tuple[list[str], int]:
    return await m.run_migrations(), len(m.migration_files())

  applied, found = _run(ctx, _up)
  if not found:
    click.echo(
      click.style(f"Warning: no migration files found in {ctx.obj['migrations_dir']}; check MIGRATIONS_DIR.", fg="yellow"),
      err=True,
    )
    return
  if not applied:
    click.echo("Database is up to date.")
    return
  for name in applied:
    click.echo(click.style(f"  applied  {name}", fg="green"))
  click.echo(f"{len(applied)} migration(s) applied.")


@cli.command()
@click.pass_context
def rollback(ctx: click.Context) -> None:
  """Roll back the most recently applied migration."""
  result = _run(ctx, lambda m: m.rollback_last_migration())
  if result.status == "nothing_to_rollback":
    click.echo("No migrations to roll back.")
  elif result.status == "no_rollback_file":
    click.echo(click.style(f"No rollback file found for {result.filename}; nothing changed.", fg="yellow"))
  else:
    click.echo(click.style(f"Rolled back {result.filename}", fg="green"))


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
  """Show executed and pending migrations."""

  async def _collect(m: Migrator) -> tuple[list[str], list[str]]:
    return await m.get_executed_migrations(), await m.get_pending_migrations()

  executed, pending = _run(ctx, _collect)
  if not executed:
    click.echo("No migrations executed yet.")
  else:
    click.echo("Executed migrations:")
    for name in executed:
      click.echo(f"  [x] {name}")
  if pending:
    click.echo("Pending migrations:")
    for name in pending:
      click.echo(f"  [ ] {name}")


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def reset(ctx: click.Context, yes: bool) -> None:
  """Drop all core tables, including the migrations ledger."""
  if not yes and not click.confirm("This drops every table. Continue?"):
    click.echo("Aborted.")
    return
  _run(ctx, lambda m: m.reset())
  click.echo(click.style("Database reset completed.", fg="green"))


def main() -> None:
  cli()


if __name__ == "__main__":
  main()
