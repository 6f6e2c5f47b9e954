from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from taskboard.config import settings
from taskboard.deps import get_current_user, get_services, require_board_access
from taskboard.models import User
from taskboard.schemas import ClearCompletedOut, TaskCreateIn, TaskOut, TaskPageOut, TaskUpdateIn, ToggleOut
from taskboard.services import Services

router = APIRouter(tags=["tasks"])


@router.get("/boards/{board_id}/tasks", response_model=TaskPageOut)
async def list_tasks(
  board_id: str,
  task_filter: str = Query(default="all", alias="filter"),
  page: int = Query(default=1),
  limit: int | None = Query(default=None),
  user: User = Depends(get_current_user),
  services: Services = Depends(get_services),
) -> TaskPageOut:
  await require_board_access(services, user, board_id, action="access")
  result = await services.tasks.get_all_tasks(board_id, task_filter, page, settings.default_page_limit if limit is None else limit)
  role = await services.permissions.get_user_role(user.id, board_id)
  return TaskPageOut(
    tasks=[TaskOut.from_task(t) for t in result.tasks],
    total=result.total,
    page=page,
    role=role.value if role else None,
  )


@router.post("/boards/{board_id}/tasks", response_model=TaskOut, status_code=201)
async def create_task(
  board_id: str,
  payload: TaskCreateIn,
  user: User = Depends(get_current_user),
  services: Services = Depends(get_services),
) -> TaskOut:
  await require_board_access(services, user, board_id, action="edit")
  t = await services.tasks.create_task(board_id, payload.description)
  return TaskOut.from_task(t)


@router.post("/boards/{board_id}/tasks/clear-completed", response_model=ClearCompletedOut)
async def clear_completed(
  board_id: str,
  user: User = Depends(get_current_user),
  services: Services = Depends(get_services),
) -> ClearCompletedOut:
  await require_board_access(services, user, board_id, action="edit")
  deleted = await services.tasks.clear_completed_tasks(board_id)
  return ClearCompletedOut(deleted=deleted)


@router.get("/tasks/{task_id}", response_model=TaskOut)
async def get_task(task_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)) -> TaskOut:
  t = await services.tasks.get_task(task_id)
  await require_board_access(services, user, t.board_id, action="access")
  return TaskOut.from_task(t)


@router.patch("/tasks/{task_id}", response_model=TaskOut)
async def update_task(
  task_id: str,
  payload: TaskUpdateIn,
  user: User = Depends(get_current_user),
  services: Services = Depends(get_services),
) -> TaskOut:
  t = await services.tasks.get_task(task_id)
  await require_board_access(services, user, t.board_id, action="edit")
  updated = await services.tasks.update_task_description(task_id, payload.description)
  return TaskOut.from_task(updated)


@router.post("/tasks/{task_id}/toggle", response_model=ToggleOut)
async def toggle_task(task_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)) -> ToggleOut:
  t = await services.tasks.get_task(task_id)
  await require_board_access(services, user, t.board_id, action="edit")
  completed = await services.tasks.toggle_task_completion(task_id)
  return ToggleOut(completed=completed)


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)) -> dict:
  t = await services.tasks.get_task(task_id)
  await require_board_access(services, user, t.board_id, action="edit")
  await services.tasks.delete_task(task_id)
  return {"ok": True}
