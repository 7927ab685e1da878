"""Application-wide configuration loader.

This module
1. loads a ``.env`` file from the working directory (if present);
2. exposes a :class:`Settings` model whose defaults are read from the
   environment *at instantiation time*, so tests can tweak ``os.environ`` and
   simply build a fresh instance.

Every server variant of the starter (auth on/off, route path, CORS policy) is
expressed through these settings rather than through separate code paths.
"""

from __future__ import annotations

import logging
import os
import secrets
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[2]

DEFAULT_MODEL = "nova-3"


def _env(key: str, default: str = "") -> str:
    """Return ``os.getenv(key) or default``.

    docker-compose happily injects *empty* variables (``PORT=""``); treating
    falsy values as missing keeps the in-code default in that case.
    """
    return os.getenv(key) or default


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if not raw:
        return default
    return raw.strip().lower() in ("1", "true", "t", "yes", "on")


class Settings(BaseModel):
    """Runtime settings of the API server."""

    # Deepgram
    DEEPGRAM_API_KEY: str = Field(default_factory=lambda: _env("DEEPGRAM_API_KEY"))
    DEEPGRAM_API_URL: str = Field(default_factory=lambda: _env("DEEPGRAM_API_URL", "https://api.deepgram.com"))
    DEEPGRAM_TIMEOUT_SECONDS: float = Field(default_factory=lambda: float(_env("DEEPGRAM_TIMEOUT_SECONDS", "300")))
    DEFAULT_MODEL: str = Field(default_factory=lambda: _env("DEFAULT_MODEL", DEFAULT_MODEL))

    # Network
    HOST: str = Field(default_factory=lambda: _env("HOST", "0.0.0.0"))
    PORT: int = Field(default_factory=lambda: int(_env("PORT", "8081")))
    FRONTEND_PORT: int = Field(default_factory=lambda: int(_env("FRONTEND_PORT", "8080")))
    CORS_ORIGINS: str = Field(default_factory=lambda: _env("CORS_ORIGINS", "*"))
    # Where the frontend-only server points the page; derived from HOST/PORT if unset.
    API_BASE_URL: str = Field(default_factory=lambda: _env("API_BASE_URL"))

    # Variant switches
    REQUIRE_AUTH: bool = Field(default_factory=lambda: _env_bool("REQUIRE_AUTH", True))
    TRANSCRIPTION_ROUTE: str = Field(default_factory=lambda: _env("TRANSCRIPTION_ROUTE", "/api/transcription"))

    # Session auth
    SESSION_SECRET: Optional[str] = Field(default_factory=lambda: os.getenv("SESSION_SECRET") or None)
    SESSION_TOKEN_TTL_SECONDS: int = Field(default_factory=lambda: int(_env("SESSION_TOKEN_TTL_SECONDS", "3600")))
    NONCE_TTL_SECONDS: int = Field(default_factory=lambda: int(_env("NONCE_TTL_SECONDS", "300")))
    NONCE_SWEEP_INTERVAL_SECONDS: float = Field(
        default_factory=lambda: float(_env("NONCE_SWEEP_INTERVAL_SECONDS", "60"))
    )

    # Files
    STATIC_DIR: Path = Field(default_factory=lambda: Path(_env("STATIC_DIR", str(_PROJECT_ROOT / "frontend"))))
    METADATA_FILE: Path = Field(default_factory=lambda: Path(_env("METADATA_FILE", str(_PROJECT_ROOT / "deepgram.toml"))))

    # Logging
    LOG_DIR: Path = Field(default_factory=lambda: Path(_env("LOG_DIR", str(_PROJECT_ROOT / "logs"))))
    LOG_LEVEL: str = Field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))

    # Generated once per Settings instance when SESSION_SECRET is absent.
    generated_secret: str = Field(default_factory=lambda: secrets.token_hex(32))

    @property
    def nonce_required(self) -> bool:
        """Nonce enforcement is switched on by configuring a session secret."""
        return bool(self.SESSION_SECRET)

    @property
    def signing_secret(self) -> str:
        return self.SESSION_SECRET or self.generated_secret

    @property
    def api_base_url(self) -> str:
        if self.API_BASE_URL:
            return self.API_BASE_URL.rstrip("/")
        host = "localhost" if self.HOST in ("", "0.0.0.0", "::") else self.HOST
        return f"http://{host}:{self.PORT}"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


class MissingApiKeyError(RuntimeError):
    """Raised when ``DEEPGRAM_API_KEY`` is not configured."""


API_KEY_HELP = """
ERROR: Deepgram API key not found!

Please set your API key using one of these methods:

1. Create a .env file (recommended):
   DEEPGRAM_API_KEY=your_api_key_here

2. Environment variable:
   export DEEPGRAM_API_KEY=your_api_key_here

Get your API key at: https://console.deepgram.com
"""


def load_settings(dotenv_path: Optional[str | Path] = None) -> Settings:
    """Load ``.env`` (if any) and return a fresh :class:`Settings` instance.

    Precedence: OS environment, then the given ``dotenv_path`` or ``.env`` in
    the working directory. Existing environment variables are never
    overridden by the dotenv file.
    """
    if dotenv_path is not None:
        load_dotenv(dotenv_path)
    else:
        default_env = Path(".env")
        if default_env.exists():
            load_dotenv(default_env)
    return Settings()


def require_api_key(settings: Settings) -> str:
    """Return the Deepgram API key or raise :class:`MissingApiKeyError`."""
    if not settings.DEEPGRAM_API_KEY:
        raise MissingApiKeyError(API_KEY_HELP)
    return settings.DEEPGRAM_API_KEY
