from __future__ import annotations

import asyncio
import logging
import os
import secrets

from taskboard.db import ensure_sqlite_parent
from taskboard.logs import configure_logging
from taskboard.models import Board, Role, User
from taskboard.services import Services

logger = logging.getLogger(__name__)

OWNER_EMAIL = "owner@taskboard.local"
EDITOR_EMAIL = "editor@taskboard.local"
DEMO_BOARD_NAME = "Taskboard Demo"


def _bootstrap_password(env_key: str) -> tuple[str, bool]:
  configured = (os.getenv(env_key) or "").strip()
  if configured:
    return configured, False
  return secrets.token_urlsafe(14), True


async def _ensure_user(services: Services, email: str, env_key: str, boot_lines: list[str]) -> User:
  u = await services.users.get_user_by_email(email)
  if u:
    return u
  password, generated = _bootstrap_password(env_key)
  u = await services.users.create_user(email, password)
  boot_lines.append(f"{email}={password} (generated={str(generated).lower()})")
  return u


async def seed(services: Services) -> Board:
  """Idempotently create two demo users and a shared demo board with a few tasks."""
  await services.migrator.run_migrations()
  boot_lines: list[str] = []
  owner = await _ensure_user(services, OWNER_EMAIL, "SEED_OWNER_PASSWORD", boot_lines)
  editor = await _ensure_user(services, EDITOR_EMAIL, "SEED_EDITOR_PASSWORD", boot_lines)

  existing = [r.board for r in await services.boards.list_boards_for_user(owner.id) if r.board.name == DEMO_BOARD_NAME]
  if existing:
    board = existing[0]
  else:
    board = await services.boards.create_board(DEMO_BOARD_NAME, owner.id)
    await services.permissions.grant_permission(editor.email, board.id, Role.EDITOR)
    samples = ["Read the README", "Invite a teammate", "Clear completed tasks"]
    for description in samples:
      await services.tasks.create_task(board.id, description)

  for line in boot_lines:
    logger.info("Seeded user %s", line)
  return board


async def _main() -> None:
  services = Services.build()
  ensure_sqlite_parent(services.db.url)
  try:
    await seed(services)
  finally:
    await services.close()


if __name__ == "__main__":
  configure_logging()
  asyncio.run(_main())
