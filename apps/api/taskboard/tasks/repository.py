from __future__ import annotations

from taskboard.db import Database
from taskboard.models import Task, TaskFilter, new_id, utcnow_iso

# One WHERE clause per filter so counts and pages come from the store.
_FILTER_WHERE = {
  TaskFilter.ALL: "board_id = :board_id",
  TaskFilter.DONE: "board_id = :board_id AND completed = :done",
  TaskFilter.UNDONE: "board_id = :board_id AND completed = :undone",
}


class TaskRepository:
  def __init__(self, db: Database) -> None:
    self.db = db

  def _params(self, board_id: str, task_filter: TaskFilter) -> dict:
    params: dict = {"board_id": board_id}
    if task_filter is TaskFilter.DONE:
      params["done"] = True
    elif task_filter is TaskFilter.UNDONE:
      params["undone"] = False
    return params

  async def count_tasks(self, board_id: str, task_filter: TaskFilter) -> int:
    row = await self.db.fetch_one(
      f"SELECT COUNT(*) AS total FROM tasks WHERE {_FILTER_WHERE[task_filter]}",
      self._params(board_id, task_filter),
    )
    return int(row["total"]) if row else 0

  async def list_tasks(self, board_id: str, task_filter: TaskFilter, *, limit: int, offset: int) -> list[Task]:
    params = self._params(board_id, task_filter)
    params.update({"limit": limit, "offset": offset})
    rows = await self.db.fetch_all(
      f"SELECT * FROM tasks WHERE {_FILTER_WHERE[task_filter]} ORDER BY created_at ASC, id ASC LIMIT :limit OFFSET :offset",
      params,
    )
    return [Task.from_row(r) for r in rows]

  async def get_task(self, task_id: str) -> Task | None:
    row = await self.db.fetch_one("SELECT * FROM tasks WHERE id = :id", {"id": task_id})
    return Task.from_row(row) if row else None

  async def create_task(self, board_id: str, description: str) -> Task:
    now = utcnow_iso()
    t = Task(id=new_id(), board_id=board_id, description=description, completed=False, created_at=now, updated_at=now)
    await self.db.execute(
      "INSERT INTO tasks (id, board_id, description, completed, created_at, updated_at) "
      "VALUES (:id, :board_id, :description, :completed, :created_at, :updated_at)",
      {
        "id": t.id,
        "board_id": t.board_id,
        "description": t.description,
        "completed": t.completed,
        "created_at": t.created_at,
        "updated_at": t.updated_at,
      },
    )
    return t

  async def update_task(self, task: Task) -> None:
    await self.db.execute(
      "UPDATE tasks SET description = :description, completed = :completed, updated_at = :updated_at WHERE id = :id",
      {"description": task.description, "completed": task.completed, "updated_at": task.updated_at, "id": task.id},
    )

  async def delete_task(self, task_id: str) -> int:
    return await self.db.execute("DELETE FROM tasks WHERE id = :id", {"id": task_id})

  async def delete_completed(self, board_id: str) -> int:
    return await self.db.execute(
      "DELETE FROM tasks WHERE board_id = :board_id AND completed = :done", {"board_id": board_id, "done": True}
    )

  async def delete_for_board(self, board_id: str) -> int:
    return await self.db.execute("DELETE FROM tasks WHERE board_id = :board_id", {"board_id": board_id})
