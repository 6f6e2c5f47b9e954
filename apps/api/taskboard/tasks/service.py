from __future__ import annotations

import logging
import math

from taskboard.boards.repository import BoardRepository
from taskboard.errors import NotFoundError, ValidationError
from taskboard.models import Task, TaskFilter, TaskPage, utcnow_iso
from taskboard.tasks.repository import TaskRepository

logger = logging.getLogger(__name__)


def parse_filter(value: TaskFilter | str) -> TaskFilter:
  try:
    return TaskFilter(value)
  except ValueError:
    raise ValidationError(f"Unknown filter: {value}") from None


def _clean_description(description: str) -> str:
  text = (description or "").strip()
  if not text:
    raise ValidationError("description is required")
  return text


class TaskService:
  def __init__(self, tasks: TaskRepository, boards: BoardRepository) -> None:
    self.tasks = tasks
    self.boards = boards

  async def get_all_tasks(self, board_id: str, task_filter: TaskFilter | str, page: int, limit: int) -> TaskPage:
    """
    One page of a board's tasks for `task_filter`, plus the filter's total.

    Pages are 1-based and ordered by (created_at, id). An empty result set is
    returned as-is; asking past the last page of a non-empty set is an error.
    """
    if not board_id or not isinstance(board_id, str) or not board_id.strip():
      raise ValidationError("Invalid board ID")
    if isinstance(page, bool) or isinstance(limit, bool) or not isinstance(page, int) or not isinstance(limit, int):
      raise ValidationError("Page and limit must be integers")
    if page < 1 or limit < 1:
      raise ValidationError("Page and limit must be greater than 0")
    f = parse_filter(task_filter)
    if not await self.boards.board_exists(board_id):
      raise NotFoundError("Board not found")

    total = await self.tasks.count_tasks(board_id, f)
    if total == 0:
      return TaskPage(tasks=[], total=0)
    if page > math.ceil(total / limit):
      raise ValidationError("Page number exceeds total pages")
    tasks = await self.tasks.list_tasks(board_id, f, limit=limit, offset=(page - 1) * limit)
    return TaskPage(tasks=tasks, total=total)

  async def get_task(self, task_id: str) -> Task:
    t = await self.tasks.get_task(task_id)
    if not t:
      raise NotFoundError("Task not found")
    return t

  async def create_task(self, board_id: str, description: str) -> Task:
    text = _clean_description(description)
    if not await self.boards.board_exists(board_id):
      raise NotFoundError("Board not found")
    return await self.tasks.create_task(board_id, text)

  async def update_task_description(self, task_id: str, description: str) -> Task:
    text = _clean_description(description)
    t = await self.get_task(task_id)
    t.description = text
    t.updated_at = utcnow_iso()
    await self.tasks.update_task(t)
    return t

  async def toggle_task_completion(self, task_id: str) -> bool:
    t = await self.get_task(task_id)
    t.completed = not t.completed
    t.updated_at = utcnow_iso()
    await self.tasks.update_task(t)
    return t.completed

  async def delete_task(self, task_id: str) -> None:
    if not await self.tasks.delete_task(task_id):
      raise NotFoundError("Task not found")

  async def clear_completed_tasks(self, board_id: str) -> int:
    deleted = await self.tasks.delete_completed(board_id)
    logger.info("Deleted %d completed task(s) from board %s", deleted, board_id)
    return deleted
