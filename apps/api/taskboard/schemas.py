from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from taskboard.models import Board, BoardMember, Task, User


class BoardOut(BaseModel):
  id: str
  name: str
  createdBy: str
  createdAt: str
  updatedAt: str
  role: Literal["owner", "editor", "viewer"] | None = None

  @classmethod
  def from_board(cls, b: Board, role: str | None = None) -> BoardOut:
    return cls(id=b.id, name=b.name, createdBy=b.created_by, createdAt=b.created_at, updatedAt=b.updated_at, role=role)


class BoardIn(BaseModel):
  name: str = Field(min_length=1, max_length=200)


class TaskOut(BaseModel):
  id: str
  boardId: str
  description: str
  completed: bool
  createdAt: str
  updatedAt: str

  @classmethod
  def from_task(cls, t: Task) -> TaskOut:
    return cls(
      id=t.id,
      boardId=t.board_id,
      description=t.description,
      completed=t.completed,
      createdAt=t.created_at,
      updatedAt=t.updated_at,
    )


class TaskPageOut(BaseModel):
  tasks: list[TaskOut]
  total: int
  page: int
  role: Literal["owner", "editor", "viewer"] | None = None


class TaskCreateIn(BaseModel):
  description: str = Field(min_length=1, max_length=2000)


class TaskUpdateIn(BaseModel):
  description: str = Field(min_length=1, max_length=2000)


class ToggleOut(BaseModel):
  completed: bool


class ClearCompletedOut(BaseModel):
  deleted: int


class MemberOut(BaseModel):
  userId: str
  email: str
  role: Literal["owner", "editor", "viewer"]

  @classmethod
  def from_member(cls, m: BoardMember) -> MemberOut:
    return cls(userId=m.user_id, email=m.email, role=m.role.value)


class GrantIn(BaseModel):
  email: str = Field(min_length=3, max_length=320)
  role: str


class RevokeIn(BaseModel):
  userId: str
  role: str


class RegisterIn(BaseModel):
  email: str = Field(min_length=3, max_length=320)
  password: str = Field(min_length=8, max_length=200)


class LoginIn(BaseModel):
  email: str
  password: str


class PasswordChangeIn(BaseModel):
  currentPassword: str
  newPassword: str = Field(min_length=8, max_length=200)


class UserOut(BaseModel):
  id: str
  email: str
  createdAt: str

  @classmethod
  def from_user(cls, u: User) -> UserOut:
    return cls(id=u.id, email=u.email, createdAt=u.created_at)


class LoginOut(BaseModel):
  accessToken: str
  tokenType: str = "bearer"
  user: UserOut
