from __future__ import annotations

from dataclasses import dataclass

from taskboard.boards.repository import BoardRepository
from taskboard.boards.service import BoardService
from taskboard.config import Settings, settings as default_settings
from taskboard.db import Database
from taskboard.migrations.engine import Migrator
from taskboard.permissions.repository import PermissionRepository
from taskboard.permissions.service import PermissionService
from taskboard.security import TokenVerifier
from taskboard.tasks.repository import TaskRepository
from taskboard.tasks.service import TaskService
from taskboard.users.repository import UserRepository


@dataclass
class Services:
  """Everything a request handler or the CLI needs, wired once per process."""

  db: Database
  migrator: Migrator
  users: UserRepository
  permissions: PermissionService
  boards: BoardService
  tasks: TaskService
  tokens: TokenVerifier

  @classmethod
  def build(cls, cfg: Settings | None = None, *, db: Database | None = None) -> Services:
    cfg = cfg or default_settings
    db = db or Database(cfg.database_url)
    users = UserRepository(db)
    board_repo = BoardRepository(db)
    task_repo = TaskRepository(db)
    return cls(
      db=db,
      migrator=Migrator(db, cfg.migrations_dir, transactional=cfg.migrations_transactional),
      users=users,
      permissions=PermissionService(PermissionRepository(db, users)),
      boards=BoardService(board_repo, task_repo),
      tasks=TaskService(task_repo, board_repo),
      tokens=TokenVerifier(cfg.app_secret, ttl_seconds=cfg.access_token_ttl_minutes * 60),
    )

  async def close(self) -> None:
    await self.db.dispose()
