from __future__ import annotations

import pytest

from conftest import TEST_SECRET, add_tasks, make_user
from taskboard.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from taskboard.models import Role
from taskboard.security import TokenVerifier, verify_password
from taskboard.seed import DEMO_BOARD_NAME, EDITOR_EMAIL, OWNER_EMAIL, seed
from taskboard.services import Services


@pytest.mark.anyio
async def test_delete_board_removes_tasks_and_permissions(services: Services) -> None:
  owner = await make_user(services, "owner@example.com")
  other = await make_user(services, "other@example.com")
  board = await services.boards.create_board("Temp", owner.id)
  await services.permissions.grant_permission(other.email, board.id, Role.EDITOR)
  await add_tasks(services, board.id, 3)

  await services.boards.delete_board(board.id)

  for table in ("tasks", "permissions"):
    row = await services.db.fetch_one(f"SELECT COUNT(*) AS n FROM {table} WHERE board_id = :b", {"b": board.id})
    assert row["n"] == 0
  with pytest.raises(NotFoundError):
    await services.boards.get_board(board.id)
  with pytest.raises(NotFoundError):
    await services.boards.delete_board(board.id)


@pytest.mark.anyio
async def test_board_name_is_required(services: Services) -> None:
  owner = await make_user(services, "owner@example.com")
  with pytest.raises(ValidationError):
    await services.boards.create_board("   ", owner.id)
  board = await services.boards.create_board("  Trimmed  ", owner.id)
  assert board.name == "Trimmed"
  with pytest.raises(NotFoundError):
    await services.boards.rename_board("no-such-board", "x")


@pytest.mark.anyio
async def test_duplicate_user_email_conflicts(services: Services) -> None:
  u = await make_user(services, "dup@example.com", "pw-one")
  assert verify_password("pw-one", u.password_hash)
  with pytest.raises(ConflictError):
    await make_user(services, "DUP@example.com")
  with pytest.raises(ValidationError):
    await make_user(services, "not-an-email")


def test_token_round_trip() -> None:
  tokens = TokenVerifier(TEST_SECRET, ttl_seconds=60)
  token = tokens.issue("user-1", now=1_000)
  assert tokens.verify(token, now=1_030) == "user-1"


def test_token_rejects_tampering_and_expiry() -> None:
  tokens = TokenVerifier(TEST_SECRET, ttl_seconds=60)
  token = tokens.issue("user-1", now=1_000)
  user_id, expires, sig = token.split(".")

  with pytest.raises(UnauthorizedError, match="expired"):
    tokens.verify(token, now=2_000)
  with pytest.raises(UnauthorizedError):
    tokens.verify(f"user-2.{expires}.{sig}", now=1_000)
  with pytest.raises(UnauthorizedError):
    TokenVerifier("another-secret").verify(token, now=1_000)
  with pytest.raises(UnauthorizedError):
    tokens.verify("garbage", now=1_000)


@pytest.mark.anyio
async def test_seed_is_idempotent(services: Services) -> None:
  board = await seed(services)
  again = await seed(services)
  assert again.id == board.id
  assert board.name == DEMO_BOARD_NAME

  owner = await services.users.get_user_by_email(OWNER_EMAIL)
  editor = await services.users.get_user_by_email(EDITOR_EMAIL)
  assert await services.permissions.get_user_role(owner.id, board.id) == Role.OWNER
  assert await services.permissions.get_user_role(editor.id, board.id) == Role.EDITOR
  assert (await services.tasks.get_all_tasks(board.id, "all", 1, 10)).total == 3
