"""Application settings and environment loading utilities."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_ALLOWED_ORIGINS = ("http://localhost:3000", "http://localhost:3001")


def _load_dotenv() -> None:
    env_path = Path(".env")
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


_load_dotenv()


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}") from exc


def _origins_from_env(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return DEFAULT_ALLOWED_ORIGINS
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    """Runtime configuration derived from environment variables."""

    api_key: Optional[str] = None
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60
    rate_limit_sweep_every: int = 1000
    allowed_origins: Tuple[str, ...] = field(default=DEFAULT_ALLOWED_ORIGINS)
    environment: str = "development"
    port: int = 3000
    log_level: str = "INFO"
    service_name: str = "Enterprise API"
    version: str = "3.0.0"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls) -> "Settings":
        # An unset API_KEY is not fatal here: the gate answers every
        # protected request with a configuration error instead.
        api_key = os.getenv("API_KEY") or None

        return cls(
            api_key=api_key,
            rate_limit_requests=_int_from_env("RATE_LIMIT_MAX_REQUESTS", 100),
            rate_limit_window_seconds=_int_from_env("RATE_LIMIT_WINDOW_SECONDS", 15 * 60),
            rate_limit_sweep_every=_int_from_env("RATE_LIMIT_SWEEP_EVERY", 1000),
            allowed_origins=_origins_from_env(os.getenv("ALLOWED_ORIGINS")),
            environment=os.getenv("APP_ENV", "development"),
            port=_int_from_env("PORT", 3000),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings.from_env()
