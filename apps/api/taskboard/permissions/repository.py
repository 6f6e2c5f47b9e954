from __future__ import annotations

from taskboard.db import Database
from taskboard.models import BoardMember, Permission, Role, User, new_id, utcnow_iso
from taskboard.users.repository import UserRepository


class PermissionRepository:
  def __init__(self, db: Database, users: UserRepository | None = None) -> None:
    self.db = db
    self.users = users or UserRepository(db)

  async def get_board_owner_id(self, board_id: str) -> str | None:
    row = await self.db.fetch_one("SELECT created_by FROM boards WHERE id = :id", {"id": board_id})
    return row["created_by"] if row else None

  async def get_explicit_permission(self, user_id: str, board_id: str) -> Permission | None:
    row = await self.db.fetch_one(
      "SELECT * FROM permissions WHERE user_id = :user_id AND board_id = :board_id ORDER BY created_at, id LIMIT 1",
      {"user_id": user_id, "board_id": board_id},
    )
    return Permission.from_row(row) if row else None

  async def get_user_permission_for_board(self, user_id: str, board_id: str) -> Role | None:
    # The creator is the owner without a row of their own.
    owner_id = await self.get_board_owner_id(board_id)
    if owner_id is not None and owner_id == user_id:
      return Role.OWNER
    permission = await self.get_explicit_permission(user_id, board_id)
    return permission.role if permission else None

  async def get_all_users_with_permissions(self, board_id: str) -> list[BoardMember]:
    rows = await self.db.fetch_all(
      """
      SELECT u.id AS user_id, u.email AS email, 'owner' AS role
      FROM boards b
      JOIN users u ON u.id = b.created_by
      WHERE b.id = :board_id

      UNION ALL

      SELECT u.id AS user_id, u.email AS email, p.role AS role
      FROM permissions p
      JOIN users u ON u.id = p.user_id
      JOIN boards b ON b.id = p.board_id
      WHERE p.board_id = :board_id AND p.user_id <> b.created_by
      """,
      {"board_id": board_id},
    )
    members: list[BoardMember] = []
    seen: set[str] = set()
    for r in rows:
      if r["user_id"] in seen:
        continue
      seen.add(r["user_id"])
      members.append(BoardMember(user_id=r["user_id"], email=r["email"], role=Role(r["role"])))
    members.sort(key=lambda m: (-m.role.rank, m.email))
    return members

  async def list_permissions_for_user(self, user_id: str, role: Role | None = None) -> list[Permission]:
    if role is None:
      rows = await self.db.fetch_all(
        "SELECT * FROM permissions WHERE user_id = :user_id ORDER BY created_at, id", {"user_id": user_id}
      )
    else:
      rows = await self.db.fetch_all(
        "SELECT * FROM permissions WHERE user_id = :user_id AND role = :role ORDER BY created_at, id",
        {"user_id": user_id, "role": role.value},
      )
    return [Permission.from_row(r) for r in rows]

  async def get_user_by_email(self, email: str) -> User | None:
    return await self.users.get_user_by_email(email)

  async def insert_permission(self, user_id: str, board_id: str, role: Role) -> Permission:
    now = utcnow_iso()
    p = Permission(id=new_id(), user_id=user_id, board_id=board_id, role=role, created_at=now, updated_at=now)
    await self.db.execute(
      "INSERT INTO permissions (id, user_id, board_id, role, created_at, updated_at) "
      "VALUES (:id, :user_id, :board_id, :role, :created_at, :updated_at)",
      {
        "id": p.id,
        "user_id": p.user_id,
        "board_id": p.board_id,
        "role": p.role.value,
        "created_at": p.created_at,
        "updated_at": p.updated_at,
      },
    )
    return p

  async def update_permission_role(self, user_id: str, board_id: str, role: Role) -> int:
    return await self.db.execute(
      "UPDATE permissions SET role = :role, updated_at = :now WHERE user_id = :user_id AND board_id = :board_id",
      {"role": role.value, "now": utcnow_iso(), "user_id": user_id, "board_id": board_id},
    )

  async def delete_permission(self, user_id: str, board_id: str) -> int:
    return await self.db.execute(
      "DELETE FROM permissions WHERE user_id = :user_id AND board_id = :board_id",
      {"user_id": user_id, "board_id": board_id},
    )
