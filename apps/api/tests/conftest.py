from __future__ import annotations

import sys
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
  sys.path.insert(0, str(ROOT))

from taskboard.config import DEFAULT_MIGRATIONS_DIR, Settings
from taskboard.db import Database
from taskboard.main import create_app
from taskboard.migrations.engine import Migrator
from taskboard.models import Task, User
from taskboard.services import Services

TEST_SECRET = "test-secret-not-for-production"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
  return "asyncio"


@pytest.fixture
def db_url(tmp_path: Path) -> str:
  return f"sqlite+aiosqlite:///{tmp_path / 'taskboard_test.db'}"


@pytest.fixture
def migrations_dir(tmp_path: Path) -> Path:
  d = tmp_path / "migrations"
  d.mkdir()
  return d


@pytest.fixture
async def db(db_url: str) -> Database:
  database = Database(db_url)
  yield database
  await database.dispose()


@pytest.fixture
async def services(db_url: str) -> Services:
  cfg = Settings(database_url=db_url, migrations_dir=DEFAULT_MIGRATIONS_DIR, app_secret=TEST_SECRET)
  svc = Services.build(cfg)
  await svc.migrator.run_migrations()
  yield svc
  await svc.close()


@pytest.fixture
async def client(services: Services) -> AsyncClient:
  app = create_app(services)
  transport = ASGITransport(app=app)
  async with AsyncClient(transport=transport, base_url="http://localhost") as c:
    yield c


def write_sql(directory: Path, name: str, sql: str) -> Path:
  p = directory / name
  p.write_text(sql, encoding="utf-8")
  return p


async def table_exists(db: Database, name: str) -> bool:
  row = await db.fetch_one("SELECT name FROM sqlite_master WHERE type = 'table' AND name = :name", {"name": name})
  return row is not None


async def ledger_rows(db: Database) -> list[dict]:
  return await db.fetch_all("SELECT filename, executed_at FROM migrations ORDER BY id")


def make_migrator(db: Database, directory: Path, *, transactional: bool = False) -> Migrator:
  return Migrator(db, directory, transactional=transactional)


async def make_user(services: Services, email: str, password: str = "secret1234") -> User:
  return await services.users.create_user(email, password)


def auth_headers(services: Services, user: User) -> dict[str, str]:
  return {"Authorization": f"Bearer {services.tokens.issue(user.id)}"}


async def add_tasks(services: Services, board_id: str, count: int, *, done: int = 0) -> list[Task]:
  """Create `count` tasks on the board; the first `done` of them are marked completed."""
  created: list[Task] = []
  for i in range(count):
    t = await services.tasks.create_task(board_id, f"task {i:02d}")
    if i < done:
      await services.tasks.toggle_task_completion(t.id)
    created.append(t)
  return created
