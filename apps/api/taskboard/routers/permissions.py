from __future__ import annotations

from fastapi import APIRouter, Depends

from taskboard.deps import get_current_user, get_services, require_board_access
from taskboard.models import User
from taskboard.schemas import GrantIn, MemberOut, RevokeIn
from taskboard.services import Services

router = APIRouter(prefix="/boards/{board_id}/permissions", tags=["permissions"])


@router.get("", response_model=list[MemberOut])
async def list_members(board_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)) -> list[MemberOut]:
  await require_board_access(services, user, board_id, action="access")
  members = await services.permissions.get_all_users_with_permissions(board_id)
  return [MemberOut.from_member(m) for m in members]


@router.post("", status_code=201)
async def grant_permission(
  board_id: str,
  payload: GrantIn,
  user: User = Depends(get_current_user),
  services: Services = Depends(get_services),
) -> dict:
  await require_board_access(services, user, board_id, action="manage")
  role = await services.permissions.grant_permission(payload.email, board_id, payload.role)
  return {"ok": True, "role": role.value}


@router.delete("")
async def revoke_permission(
  board_id: str,
  payload: RevokeIn,
  user: User = Depends(get_current_user),
  services: Services = Depends(get_services),
) -> dict:
  await require_board_access(services, user, board_id, action="manage")
  await services.permissions.revoke_permission(payload.userId, board_id, payload.role)
  return {"ok": True}
