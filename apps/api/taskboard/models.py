from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utcnow() -> datetime:
  return datetime.now(timezone.utc)


def utcnow_iso() -> str:
  return utcnow().isoformat(timespec="microseconds")


def new_id() -> str:
  return str(uuid.uuid4())


class Role(str, Enum):
  OWNER = "owner"
  EDITOR = "editor"
  VIEWER = "viewer"

  @property
  def rank(self) -> int:
    return _ROLE_RANK[self]

  def at_least(self, other: Role) -> bool:
    return self.rank >= other.rank


# owner > editor > viewer
_ROLE_RANK = {Role.VIEWER: 0, Role.EDITOR: 1, Role.OWNER: 2}

# Roles that can be granted or revoked through the permissions API.
GRANTABLE_ROLES = (Role.EDITOR, Role.VIEWER)


class TaskFilter(str, Enum):
  ALL = "all"
  DONE = "done"
  UNDONE = "undone"


@dataclass
class User:
  id: str
  email: str
  password_hash: str
  created_at: str
  updated_at: str

  @classmethod
  def from_row(cls, row: dict[str, Any]) -> User:
    return cls(
      id=row["id"],
      email=row["email"],
      password_hash=row["password_hash"],
      created_at=row["created_at"],
      updated_at=row["updated_at"],
    )


@dataclass
class Board:
  id: str
  name: str
  created_by: str
  created_at: str
  updated_at: str

  @classmethod
  def from_row(cls, row: dict[str, Any]) -> Board:
    return cls(
      id=row["id"],
      name=row["name"],
      created_by=row["created_by"],
      created_at=row["created_at"],
      updated_at=row["updated_at"],
    )


@dataclass
class BoardWithRole:
  board: Board
  role: Role


@dataclass
class Task:
  id: str
  board_id: str
  description: str
  completed: bool
  created_at: str
  updated_at: str

  @classmethod
  def from_row(cls, row: dict[str, Any]) -> Task:
    # sqlite hands booleans back as 0/1
    return cls(
      id=row["id"],
      board_id=row["board_id"],
      description=row["description"],
      completed=bool(row["completed"]),
      created_at=row["created_at"],
      updated_at=row["updated_at"],
    )


@dataclass
class TaskPage:
  tasks: list[Task]
  total: int


@dataclass
class Permission:
  id: str
  user_id: str
  board_id: str
  role: Role
  created_at: str
  updated_at: str

  @classmethod
  def from_row(cls, row: dict[str, Any]) -> Permission:
    return cls(
      id=row["id"],
      user_id=row["user_id"],
      board_id=row["board_id"],
      role=Role(row["role"]),
      created_at=row["created_at"],
      updated_at=row["updated_at"],
    )


@dataclass
class BoardMember:
  user_id: str
  email: str
  role: Role
