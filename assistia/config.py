from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from assistia.errors import ConfigError


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


def _optional(name: str) -> str | None:
    return os.getenv(name, "").strip() or None


@dataclass(frozen=True)
class Settings:
    database_url: str | None = None
    n8n_webhook_url: str | None = None
    public_n8n_webhook_url: str | None = None
    relay_endpoint_url: str | None = None
    relay_host: str = "127.0.0.1"
    relay_port: int = 8000
    log_level: str = "INFO"
    log_dir: str = "logs"

    @property
    def client_webhook_url(self) -> str | None:
        # A client-exposed destination wins over the server-side one.
        return self.public_n8n_webhook_url or self.n8n_webhook_url

    def require_database_url(self) -> str:
        if not self.database_url:
            raise ConfigError("DATABASE_URL is not set. Create a .env file with your connection string.")
        return self.database_url


def load_settings() -> Settings:
    load_env()
    return Settings(
        database_url=_optional("DATABASE_URL"),
        n8n_webhook_url=_optional("N8N_WEBHOOK_URL"),
        public_n8n_webhook_url=_optional("PUBLIC_N8N_WEBHOOK_URL"),
        relay_endpoint_url=_optional("RELAY_ENDPOINT_URL"),
        relay_host=os.getenv("RELAY_HOST", "127.0.0.1"),
        relay_port=int(os.getenv("RELAY_PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=os.getenv("LOG_DIR", "logs"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
