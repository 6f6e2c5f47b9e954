from __future__ import annotations

from taskboard.db import Database
from taskboard.errors import ConflictError, UnauthorizedError, ValidationError
from taskboard.models import User, new_id, utcnow_iso
from taskboard.security import hash_password, verify_password


def normalize_email(email: str) -> str:
  return (email or "").strip().lower()


class UserRepository:
  def __init__(self, db: Database) -> None:
    self.db = db

  async def get_user(self, user_id: str) -> User | None:
    row = await self.db.fetch_one("SELECT * FROM users WHERE id = :id", {"id": user_id})
    return User.from_row(row) if row else None

  async def get_user_by_email(self, email: str) -> User | None:
    row = await self.db.fetch_one("SELECT * FROM users WHERE email = :email", {"email": normalize_email(email)})
    return User.from_row(row) if row else None

  async def create_user(self, email: str, password: str) -> User:
    key = normalize_email(email)
    if "@" not in key:
      raise ValidationError("A valid email is required")
    if not password:
      raise ValidationError("password is required")
    if await self.get_user_by_email(key):
      raise ConflictError("A user with that email already exists")
    now = utcnow_iso()
    user = User(id=new_id(), email=key, password_hash=hash_password(password), created_at=now, updated_at=now)
    await self.db.execute(
      "INSERT INTO users (id, email, password_hash, created_at, updated_at) "
      "VALUES (:id, :email, :password_hash, :created_at, :updated_at)",
      {
        "id": user.id,
        "email": user.email,
        "password_hash": user.password_hash,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
      },
    )
    return user

  async def authenticate(self, email: str, password: str) -> User:
    u = await self.get_user_by_email(email)
    # same message for unknown email and wrong password
    if not u or not password or not verify_password(password, u.password_hash):
      raise UnauthorizedError("Invalid credentials")
    return u

  async def update_password(self, user_id: str, password: str) -> None:
    if not password:
      raise ValidationError("password is required")
    await self.db.execute(
      "UPDATE users SET password_hash = :password_hash, updated_at = :now WHERE id = :id",
      {"password_hash": hash_password(password), "now": utcnow_iso(), "id": user_id},
    )
