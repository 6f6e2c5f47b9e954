from __future__ import annotations

import logging

from taskboard.errors import ConflictError, NotFoundError, ValidationError
from taskboard.models import GRANTABLE_ROLES, BoardMember, Permission, Role
from taskboard.permissions.repository import PermissionRepository

logger = logging.getLogger(__name__)


def grantable_role(role: Role | str) -> Role:
  try:
    r = Role(role)
  except ValueError:
    raise ValidationError(f"Unknown role: {role}") from None
  if r not in GRANTABLE_ROLES:
    raise ValidationError("Only editor and viewer roles can be granted or revoked")
  return r


class PermissionService:
  """
  Board authorization.

  A user's role on a board is `owner` when they created it, otherwise the role
  of their explicit grant, otherwise none. The predicates only answer yes/no;
  turning a "no" into a 403 is the caller's job.
  """

  def __init__(self, repo: PermissionRepository) -> None:
    self.repo = repo

  async def get_user_role(self, user_id: str, board_id: str) -> Role | None:
    return await self.repo.get_user_permission_for_board(user_id, board_id)

  async def can_access_board(self, user_id: str, board_id: str) -> bool:
    return await self.get_user_role(user_id, board_id) is not None

  async def can_edit_board(self, user_id: str, board_id: str) -> bool:
    role = await self.get_user_role(user_id, board_id)
    return role is not None and role.at_least(Role.EDITOR)

  async def can_delete_board(self, user_id: str, board_id: str) -> bool:
    return await self.get_user_role(user_id, board_id) == Role.OWNER

  async def can_manage_permissions(self, user_id: str, board_id: str) -> bool:
    return await self.get_user_role(user_id, board_id) == Role.OWNER

  async def get_all_users_with_permissions(self, board_id: str) -> list[BoardMember]:
    if await self.repo.get_board_owner_id(board_id) is None:
      raise NotFoundError("Board not found")
    return await self.repo.get_all_users_with_permissions(board_id)

  async def get_user_permissions(self, user_id: str, role: Role | str | None = None) -> list[Permission]:
    """Explicit grants held by `user_id`, optionally only those of `role`."""
    return await self.repo.list_permissions_for_user(user_id, grantable_role(role) if role is not None else None)

  async def grant_permission(self, email: str, board_id: str, role: Role | str) -> Role:
    role = grantable_role(role)
    owner_id = await self.repo.get_board_owner_id(board_id)
    if owner_id is None:
      raise NotFoundError("Board not found")
    user = await self.repo.get_user_by_email(email)
    if not user:
      raise NotFoundError("User not found with the provided email")
    if user.id == owner_id:
      raise ConflictError("The board owner already has full access")

    existing = await self.repo.get_explicit_permission(user.id, board_id)
    if existing and existing.role == role:
      raise ConflictError("Permission already exists for this user on this board")
    if existing:
      # one role per user per board: a new grant replaces the old one
      await self.repo.update_permission_role(user.id, board_id, role)
      logger.info("Changed role of user %s on board %s: %s -> %s", user.id, board_id, existing.role.value, role.value)
    else:
      await self.repo.insert_permission(user.id, board_id, role)
      logger.info("Granted %s on board %s to user %s", role.value, board_id, user.id)
    return role

  async def revoke_permission(self, user_id: str, board_id: str, role: Role | str) -> None:
    role = grantable_role(role)
    existing = await self.repo.get_explicit_permission(user_id, board_id)
    if not existing or existing.role != role:
      raise ConflictError("No such permission for this user on this board")
    await self.repo.delete_permission(user_id, board_id)
    logger.info("Revoked %s on board %s from user %s", role.value, board_id, user_id)
