from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from taskboard.deps import get_current_user, get_services
from taskboard.errors import NotFoundError, UnauthorizedError
from taskboard.models import User
from taskboard.schemas import LoginIn, LoginOut, PasswordChangeIn, RegisterIn, UserOut
from taskboard.security import verify_password
from taskboard.services import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=201)
async def register(payload: RegisterIn, services: Services = Depends(get_services)) -> UserOut:
  u = await services.users.create_user(payload.email, payload.password)
  logger.info("Registered user %s", u.id)
  return UserOut.from_user(u)


@router.post("/login", response_model=LoginOut)
async def login(payload: LoginIn, services: Services = Depends(get_services)) -> LoginOut:
  u = await services.users.authenticate(payload.email, payload.password)
  return LoginOut(accessToken=services.tokens.issue(u.id), user=UserOut.from_user(u))


@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)) -> UserOut:
  return UserOut.from_user(user)


@router.put("/password")
async def change_password(
  payload: PasswordChangeIn,
  user: User = Depends(get_current_user),
  services: Services = Depends(get_services),
) -> dict:
  if not verify_password(payload.currentPassword, user.password_hash):
    raise UnauthorizedError("Current password is incorrect")
  await services.users.update_password(user.id, payload.newPassword)
  logger.info("Password changed for user %s", user.id)
  return {"ok": True}


@router.get("/users/{user_id}", response_model=UserOut)
async def get_user(user_id: str, _: User = Depends(get_current_user), services: Services = Depends(get_services)) -> UserOut:
  u = await services.users.get_user(user_id)
  if not u:
    raise NotFoundError("User not found")
  return UserOut.from_user(u)
