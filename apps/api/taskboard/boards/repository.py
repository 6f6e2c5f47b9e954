from __future__ import annotations

from taskboard.db import Database
from taskboard.models import Board, BoardWithRole, Role, new_id, utcnow_iso


class BoardRepository:
  def __init__(self, db: Database) -> None:
    self.db = db

  async def get_board(self, board_id: str) -> Board | None:
    row = await self.db.fetch_one("SELECT * FROM boards WHERE id = :id", {"id": board_id})
    return Board.from_row(row) if row else None

  async def board_exists(self, board_id: str) -> bool:
    row = await self.db.fetch_one("SELECT id FROM boards WHERE id = :id", {"id": board_id})
    return row is not None

  async def list_boards_for_user(self, user_id: str) -> list[BoardWithRole]:
    rows = await self.db.fetch_all(
      """
      SELECT b.*,
        CASE WHEN b.created_by = :user_id THEN 'owner' ELSE p.role END AS role
      FROM boards b
      LEFT JOIN permissions p ON p.board_id = b.id AND p.user_id = :user_id
      WHERE b.created_by = :user_id OR p.user_id IS NOT NULL
      ORDER BY b.created_at DESC, b.id DESC
      """,
      {"user_id": user_id},
    )
    return [BoardWithRole(board=Board.from_row(r), role=Role(r["role"])) for r in rows]

  async def create_board(self, name: str, creator_id: str) -> Board:
    now = utcnow_iso()
    b = Board(id=new_id(), name=name, created_by=creator_id, created_at=now, updated_at=now)
    await self.db.execute(
      "INSERT INTO boards (id, name, created_by, created_at, updated_at) "
      "VALUES (:id, :name, :created_by, :created_at, :updated_at)",
      {"id": b.id, "name": b.name, "created_by": b.created_by, "created_at": b.created_at, "updated_at": b.updated_at},
    )
    return b

  async def rename_board(self, board_id: str, name: str) -> int:
    return await self.db.execute(
      "UPDATE boards SET name = :name, updated_at = :now WHERE id = :id",
      {"name": name, "now": utcnow_iso(), "id": board_id},
    )

  async def delete_permissions(self, board_id: str) -> int:
    return await self.db.execute("DELETE FROM permissions WHERE board_id = :board_id", {"board_id": board_id})

  async def delete_board(self, board_id: str) -> int:
    return await self.db.execute("DELETE FROM boards WHERE id = :id", {"id": board_id})
