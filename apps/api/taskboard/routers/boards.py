from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from taskboard.deps import get_current_user, get_services, require_board_access
from taskboard.models import Role, User
from taskboard.schemas import BoardIn, BoardOut
from taskboard.services import Services

router = APIRouter(prefix="/boards", tags=["boards"])


@router.get("", response_model=list[BoardOut])
async def list_boards(
  role: str | None = Query(default=None),
  user: User = Depends(get_current_user),
  services: Services = Depends(get_services),
) -> list[BoardOut]:
  rows = await services.boards.list_boards_for_user(user.id)
  if role == Role.OWNER.value:
    rows = [r for r in rows if r.role == Role.OWNER]
  elif role is not None:
    granted = {p.board_id for p in await services.permissions.get_user_permissions(user.id, role)}
    rows = [r for r in rows if r.board.id in granted and r.role != Role.OWNER]
  return [BoardOut.from_board(r.board, r.role.value) for r in rows]


@router.post("", response_model=BoardOut, status_code=201)
async def create_board(
  payload: BoardIn,
  user: User = Depends(get_current_user),
  services: Services = Depends(get_services),
) -> BoardOut:
  b = await services.boards.create_board(payload.name, user.id)
  return BoardOut.from_board(b, Role.OWNER.value)


@router.get("/{board_id}", response_model=BoardOut)
async def get_board(board_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)) -> BoardOut:
  await require_board_access(services, user, board_id, action="access")
  b = await services.boards.get_board(board_id)
  role = await services.permissions.get_user_role(user.id, board_id)
  return BoardOut.from_board(b, role.value if role else None)


@router.patch("/{board_id}", response_model=BoardOut)
async def rename_board(
  board_id: str,
  payload: BoardIn,
  user: User = Depends(get_current_user),
  services: Services = Depends(get_services),
) -> BoardOut:
  await require_board_access(services, user, board_id, action="edit")
  b = await services.boards.rename_board(board_id, payload.name)
  role = await services.permissions.get_user_role(user.id, board_id)
  return BoardOut.from_board(b, role.value if role else None)


@router.delete("/{board_id}")
async def delete_board(board_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)) -> dict:
  await require_board_access(services, user, board_id, action="delete")
  await services.boards.delete_board(board_id)
  return {"ok": True}
