from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MIGRATIONS_DIR = str(Path(__file__).resolve().parent / "migrations" / "sql")


class Settings(BaseSettings):
  model_config = SettingsConfigDict(env_file=".env", extra="ignore")

  database_url: str = "sqlite+aiosqlite:///./data/taskboard.db"
  migrations_dir: str = DEFAULT_MIGRATIONS_DIR
  auto_migrate: bool = False
  # Wrap each migration file (statements + ledger row) in one transaction.
  migrations_transactional: bool = False

  app_secret: str = "dev-secret-change-me"
  access_token_ttl_minutes: int = 60 * 24
  app_version: str = "0.1.0"
  api_docs_enabled: bool = True
  log_level: str = "INFO"

  default_page_limit: int = 10

  cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
  trusted_hosts: str = "localhost,127.0.0.1,0.0.0.0,testserver,api"

  def cors_origin_list(self) -> list[str]:
    return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

  def trusted_host_list(self) -> list[str]:
    return [h.strip() for h in self.trusted_hosts.split(",") if h.strip()]


settings = Settings()
