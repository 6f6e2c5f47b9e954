from __future__ import annotations

import logging

from taskboard.config import settings


def configure_logging(level: str | None = None) -> None:
  logging.basicConfig(
    level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
  )
