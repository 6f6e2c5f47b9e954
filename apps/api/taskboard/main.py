from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.trustedhost import TrustedHostMiddleware

from taskboard.config import settings
from taskboard.db import ensure_sqlite_parent
from taskboard.errors import TaskboardError
from taskboard.logs import configure_logging
from taskboard.routers.auth import router as auth_router
from taskboard.routers.boards import router as boards_router
from taskboard.routers.permissions import router as permissions_router
from taskboard.routers.tasks import router as tasks_router
from taskboard.services import Services

logger = logging.getLogger(__name__)


async def _taskboard_error_handler(_, exc: TaskboardError) -> JSONResponse:
  if exc.status_code >= 500:
    logger.error("Request failed: %s", exc.message)
  return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(services: Services | None = None) -> FastAPI:
  app = FastAPI(
    title="Taskboard API",
    version=settings.app_version,
    docs_url="/docs" if settings.api_docs_enabled else None,
    redoc_url=None,
    openapi_url="/openapi.json" if settings.api_docs_enabled else None,
  )
  app.state.services = services or Services.build(settings)
  app.add_exception_handler(TaskboardError, _taskboard_error_handler)

  app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
  )
  app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_host_list())

  app.include_router(auth_router)
  app.include_router(boards_router)
  app.include_router(tasks_router)
  app.include_router(permissions_router)

  @app.get("/health")
  async def health() -> dict:
    return {"ok": True}

  @app.get("/version")
  async def version() -> dict:
    return {"version": settings.app_version}

  @app.on_event("startup")
  async def _startup() -> None:
    svc: Services = app.state.services
    ensure_sqlite_parent(svc.db.url)
    if settings.auto_migrate:
      logger.info("Auto-migrate enabled, running migrations")
      await svc.migrator.run_migrations()

  @app.on_event("shutdown")
  async def _shutdown() -> None:
    await app.state.services.close()

  return app


configure_logging()
app = create_app()
