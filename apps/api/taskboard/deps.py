from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from taskboard.errors import ForbiddenError, UnauthorizedError
from taskboard.models import User
from taskboard.services import Services


def get_services(request: Request) -> Services:
  return request.app.state.services


async def get_current_user(request: Request, services: Services = Depends(get_services)) -> User:
  auth = request.headers.get("authorization")
  if not auth or not auth.lower().startswith("bearer "):
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
  token = auth.split(" ", 1)[1].strip()
  try:
    user_id = services.tokens.verify(token)
  except UnauthorizedError as exc:
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message) from exc
  u = await services.users.get_user(user_id)
  if not u:
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
  return u


async def require_board_access(services: Services, user: User, board_id: str, *, action: str) -> None:
  """Raise 403 unless `user` may perform `action` (access | edit | delete | manage) on the board."""
  checks = {
    "access": services.permissions.can_access_board,
    "edit": services.permissions.can_edit_board,
    "delete": services.permissions.can_delete_board,
    "manage": services.permissions.can_manage_permissions,
  }
  if not await checks[action](user.id, board_id):
    raise ForbiddenError(f"You do not have permission to {action} this board")
