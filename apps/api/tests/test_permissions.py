from __future__ import annotations

import pytest

from conftest import make_user
from taskboard.errors import ConflictError, NotFoundError, ValidationError
from taskboard.models import Role
from taskboard.services import Services


async def _board_with_owner(services: Services):
  owner = await make_user(services, "owner@example.com")
  board = await services.boards.create_board("Roadmap", owner.id)
  return owner, board


@pytest.mark.anyio
async def test_creator_is_implicit_owner_without_permission_rows(services: Services) -> None:
  owner, board = await _board_with_owner(services)

  rows = await services.db.fetch_all("SELECT * FROM permissions WHERE board_id = :b", {"b": board.id})
  assert rows == []
  assert await services.permissions.get_user_role(owner.id, board.id) == Role.OWNER
  assert await services.permissions.can_delete_board(owner.id, board.id)


@pytest.mark.anyio
async def test_role_capabilities_are_monotonic(services: Services) -> None:
  owner, board = await _board_with_owner(services)
  editor = await make_user(services, "editor@example.com")
  viewer = await make_user(services, "viewer@example.com")
  stranger = await make_user(services, "stranger@example.com")
  await services.permissions.grant_permission(editor.email, board.id, Role.EDITOR)
  await services.permissions.grant_permission(viewer.email, board.id, "viewer")

  expected = {
    owner.id: (True, True, True),
    editor.id: (True, True, False),
    viewer.id: (True, False, False),
    stranger.id: (False, False, False),
  }
  p = services.permissions
  for user_id, (access, edit, delete) in expected.items():
    got = (
      await p.can_access_board(user_id, board.id),
      await p.can_edit_board(user_id, board.id),
      await p.can_delete_board(user_id, board.id),
    )
    assert got == (access, edit, delete), user_id
    if got[2]:
      assert got[1] and got[0]
    if got[1]:
      assert got[0]


@pytest.mark.anyio
async def test_unknown_board_grants_nothing(services: Services) -> None:
  user = await make_user(services, "someone@example.com")
  assert await services.permissions.get_user_role(user.id, "no-such-board") is None
  assert not await services.permissions.can_access_board(user.id, "no-such-board")


@pytest.mark.anyio
async def test_grant_then_revoke_returns_to_no_access(services: Services) -> None:
  _, board = await _board_with_owner(services)
  viewer = await make_user(services, "viewer@example.com")

  await services.permissions.grant_permission("viewer@example.com", board.id, Role.VIEWER)
  assert await services.permissions.get_user_role(viewer.id, board.id) == Role.VIEWER

  await services.permissions.revoke_permission(viewer.id, board.id, Role.VIEWER)
  assert await services.permissions.get_user_role(viewer.id, board.id) is None
  assert not await services.permissions.can_access_board(viewer.id, board.id)


@pytest.mark.anyio
async def test_granting_same_role_twice_conflicts(services: Services) -> None:
  _, board = await _board_with_owner(services)
  await make_user(services, "viewer@example.com")
  await services.permissions.grant_permission("viewer@example.com", board.id, Role.VIEWER)

  with pytest.raises(ConflictError):
    await services.permissions.grant_permission("viewer@example.com", board.id, Role.VIEWER)


@pytest.mark.anyio
async def test_grant_resolves_email_case_insensitively(services: Services) -> None:
  _, board = await _board_with_owner(services)
  u = await make_user(services, "Mixed.Case@Example.com")
  await services.permissions.grant_permission("  MIXED.case@example.COM ", board.id, Role.EDITOR)
  assert await services.permissions.get_user_role(u.id, board.id) == Role.EDITOR


@pytest.mark.anyio
async def test_grant_of_different_role_replaces_existing_row(services: Services) -> None:
  _, board = await _board_with_owner(services)
  u = await make_user(services, "promote@example.com")
  await services.permissions.grant_permission(u.email, board.id, Role.VIEWER)

  await services.permissions.grant_permission(u.email, board.id, Role.EDITOR)

  rows = await services.db.fetch_all(
    "SELECT role FROM permissions WHERE user_id = :u AND board_id = :b", {"u": u.id, "b": board.id}
  )
  assert [r["role"] for r in rows] == ["editor"]
  assert await services.permissions.can_edit_board(u.id, board.id)


@pytest.mark.anyio
async def test_grant_to_unknown_email_is_not_found(services: Services) -> None:
  _, board = await _board_with_owner(services)
  with pytest.raises(NotFoundError):
    await services.permissions.grant_permission("ghost@example.com", board.id, Role.VIEWER)


@pytest.mark.anyio
async def test_grant_on_unknown_board_is_not_found(services: Services) -> None:
  await make_user(services, "viewer@example.com")
  with pytest.raises(NotFoundError):
    await services.permissions.grant_permission("viewer@example.com", "no-such-board", Role.VIEWER)


@pytest.mark.anyio
async def test_owner_role_is_never_grantable_or_revocable(services: Services) -> None:
  owner, board = await _board_with_owner(services)
  other = await make_user(services, "other@example.com")

  with pytest.raises(ValidationError):
    await services.permissions.grant_permission(other.email, board.id, Role.OWNER)
  with pytest.raises(ValidationError):
    await services.permissions.grant_permission(other.email, board.id, "admin")
  with pytest.raises(ValidationError):
    await services.permissions.revoke_permission(owner.id, board.id, Role.OWNER)
  assert await services.permissions.get_user_role(owner.id, board.id) == Role.OWNER


@pytest.mark.anyio
async def test_grant_to_owner_conflicts(services: Services) -> None:
  owner, board = await _board_with_owner(services)
  with pytest.raises(ConflictError):
    await services.permissions.grant_permission(owner.email, board.id, Role.EDITOR)


@pytest.mark.anyio
async def test_revoke_of_role_not_held_conflicts(services: Services) -> None:
  _, board = await _board_with_owner(services)
  u = await make_user(services, "viewer@example.com")

  with pytest.raises(ConflictError):
    await services.permissions.revoke_permission(u.id, board.id, Role.VIEWER)

  await services.permissions.grant_permission(u.email, board.id, Role.VIEWER)
  with pytest.raises(ConflictError):
    await services.permissions.revoke_permission(u.id, board.id, Role.EDITOR)
  assert await services.permissions.get_user_role(u.id, board.id) == Role.VIEWER


@pytest.mark.anyio
async def test_members_list_contains_owner_exactly_once(services: Services) -> None:
  owner, board = await _board_with_owner(services)
  editor = await make_user(services, "b.editor@example.com")
  viewer = await make_user(services, "a.viewer@example.com")
  await services.permissions.grant_permission(editor.email, board.id, Role.EDITOR)
  await services.permissions.grant_permission(viewer.email, board.id, Role.VIEWER)
  # a stray explicit row for the owner must not duplicate them
  await services.permissions.repo.insert_permission(owner.id, board.id, Role.VIEWER)

  members = await services.permissions.get_all_users_with_permissions(board.id)

  assert [(m.email, m.role) for m in members] == [
    ("owner@example.com", Role.OWNER),
    ("b.editor@example.com", Role.EDITOR),
    ("a.viewer@example.com", Role.VIEWER),
  ]
  # the stray row does not demote the owner either
  assert await services.permissions.get_user_role(owner.id, board.id) == Role.OWNER


@pytest.mark.anyio
async def test_user_permissions_filter_by_role(services: Services) -> None:
  owner = await make_user(services, "owner@example.com")
  b1 = await services.boards.create_board("One", owner.id)
  b2 = await services.boards.create_board("Two", owner.id)
  u = await make_user(services, "member@example.com")
  await services.permissions.grant_permission(u.email, b1.id, Role.EDITOR)
  await services.permissions.grant_permission(u.email, b2.id, Role.VIEWER)

  perms = services.permissions
  assert {p.board_id for p in await perms.get_user_permissions(u.id)} == {b1.id, b2.id}
  assert [p.board_id for p in await perms.get_user_permissions(u.id, "viewer")] == [b2.id]
  assert await perms.get_user_permissions(owner.id) == []
  with pytest.raises(ValidationError):
    await perms.get_user_permissions(u.id, Role.OWNER)


@pytest.mark.anyio
async def test_members_of_unknown_board_is_not_found(services: Services) -> None:
  with pytest.raises(NotFoundError):
    await services.permissions.get_all_users_with_permissions("no-such-board")
