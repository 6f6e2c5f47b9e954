from __future__ import annotations

import hashlib
import hmac
import time

from passlib.context import CryptContext

from taskboard.errors import UnauthorizedError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
  return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
  return pwd_context.verify(password, password_hash)


class TokenVerifier:
  """
  Signs and checks bearer tokens of the form `<user_id>.<expires_at>.<hmac>`.

  Token issuance policy (cookies, refresh, revocation) lives with the caller;
  this only proves a token was minted with `secret` and has not expired.
  """

  def __init__(self, secret: str, *, ttl_seconds: int = 24 * 3600) -> None:
    if not secret:
      raise ValueError("token secret is required")
    self._key = secret.encode("utf-8")
    self.ttl_seconds = ttl_seconds

  def _sign(self, payload: str) -> str:
    return hmac.new(self._key, payload.encode("utf-8"), hashlib.sha256).hexdigest()

  def issue(self, user_id: str, *, now: int | None = None) -> str:
    expires_at = int(now if now is not None else time.time()) + self.ttl_seconds
    payload = f"{user_id}.{expires_at}"
    return f"{payload}.{self._sign(payload)}"

  def verify(self, token: str, *, now: int | None = None) -> str:
    parts = (token or "").strip().split(".")
    if len(parts) != 3 or not all(parts):
      raise UnauthorizedError("Invalid token")
    user_id, expires_raw, signature = parts
    if not hmac.compare_digest(self._sign(f"{user_id}.{expires_raw}"), signature):
      raise UnauthorizedError("Invalid token")
    try:
      expires_at = int(expires_raw)
    except ValueError:
      raise UnauthorizedError("Invalid token") from None
    if expires_at < int(now if now is not None else time.time()):
      raise UnauthorizedError("Token expired")
    return user_id
