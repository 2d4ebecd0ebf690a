"""Partitura settings (pydantic-settings, PARTITURA_* environment variables)."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import DotEnvSettingsSource, EnvSettingsSource

# ---- Defaults ---------------------------------------------------------------

MODULE_DIR = Path(__file__).resolve().parent
DEFAULT_API_ROOT = MODULE_DIR.parent.parent
DEFAULT_ALEMBIC_INI = DEFAULT_API_ROOT / "alembic.ini"
DEFAULT_STORAGE_ROOT = Path("./data")
DEFAULT_DB_FILENAME = "partitura.sqlite"
DEFAULT_SQLITE_PATH = DEFAULT_STORAGE_ROOT / "db" / DEFAULT_DB_FILENAME
DEFAULT_CORS_ORIGINS = ["http://localhost:5173"]

DEFAULT_UPLOAD_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_UPLOAD_CONTENT_TYPES = ["application/pdf"]
DEFAULT_UPLOAD_EXTENSIONS = ["pdf"]
DEFAULT_RECENT_LIMIT = 20

SheetAuthorizationMode = Literal["none", "owner"]

_RAW_LIST_FIELDS = frozenset(
    {
        "server_cors_origins",
        "upload_allowed_content_types",
        "upload_allowed_extensions",
    }
)

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _list_from_env(value: Any, *, default: list[str]) -> list[str]:
    """Accept a JSON array, a comma-separated string or a sequence.

    Blank entries are dropped and duplicates collapse in first-seen order; an
    empty value falls back to ``default``.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                value = json.loads(text)
            except json.JSONDecodeError as exc:
                raise ValueError("Expected a JSON array") from exc
            if not isinstance(value, list):
                raise ValueError("Expected a JSON array")
        else:
            value = text.split(",")
    elif value is None:
        value = []
    elif not isinstance(value, (list, tuple, set)):
        raise TypeError("Expected string or list")

    items = [str(item).strip() for item in value]
    cleaned = list(dict.fromkeys(item for item in items if item))
    return cleaned or list(default)


class _RawListsMixin:
    """Hand list-like fields to the validators as raw strings instead of JSON."""

    def prepare_field_value(self, field_name, field, value, value_is_complex):
        if field_name in _RAW_LIST_FIELDS and isinstance(value, str):
            return value
        return super().prepare_field_value(field_name, field, value, value_is_complex)


class _EnvSource(_RawListsMixin, EnvSettingsSource):
    pass


class _DotEnvSource(_RawListsMixin, DotEnvSettingsSource):
    pass


class Settings(BaseSettings):
    """Runtime configuration read from ``PARTITURA_*`` variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PARTITURA_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        shared = {
            "case_sensitive": env_settings.case_sensitive,
            "env_prefix": env_settings.env_prefix,
            "env_ignore_empty": env_settings.env_ignore_empty,
        }
        return (
            init_settings,
            _EnvSource(settings_cls, **shared),
            _DotEnvSource(settings_cls, env_file=dotenv_settings.env_file, **shared),
            file_secret_settings,
        )

    # Core
    app_name: str = "Partitura API"
    app_version: str = "0.4.0"
    api_docs_enabled: bool = True
    docs_url: str = "/docs"
    redoc_url: str = "/redoc"
    openapi_url: str = "/openapi.json"
    logging_level: str = "INFO"

    # Server
    server_host: str = "0.0.0.0"
    server_port: int = Field(8000, gt=0, lt=65536)
    server_cors_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    # Paths
    alembic_ini_path: Path = Field(default=DEFAULT_ALEMBIC_INI)

    # Database
    database_url: str | None = None
    database_echo: bool = False
    database_auto_create: bool = True
    database_sqlite_busy_timeout_ms: int = Field(30_000, ge=0)

    # Uploads
    upload_max_bytes: int = Field(DEFAULT_UPLOAD_MAX_BYTES, gt=0)
    upload_allowed_content_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_UPLOAD_CONTENT_TYPES)
    )
    upload_allowed_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_UPLOAD_EXTENSIONS)
    )
    upload_sniff_magic_bytes: bool = True

    # Catalog
    recent_limit: int = Field(DEFAULT_RECENT_LIMIT, ge=1, le=200)
    sheet_authorization: SheetAuthorizationMode = "none"

    # ---- Validators ----

    @field_validator("logging_level", mode="before")
    @classmethod
    def _v_log_level(cls, v: Any) -> str:
        level = ("" if v is None else str(v).strip()).upper() or "INFO"
        if level not in _LOG_LEVELS:
            allowed = ", ".join(_LOG_LEVELS)
            raise ValueError(f"PARTITURA_LOGGING_LEVEL must be one of {allowed}")
        return level

    @field_validator("server_cors_origins", mode="before")
    @classmethod
    def _v_cors(cls, v: Any) -> list[str]:
        return _list_from_env(v, default=DEFAULT_CORS_ORIGINS)

    @field_validator("upload_allowed_content_types", mode="before")
    @classmethod
    def _v_content_types(cls, v: Any) -> list[str]:
        return _list_from_env(v, default=DEFAULT_UPLOAD_CONTENT_TYPES)

    @field_validator("upload_allowed_extensions", mode="before")
    @classmethod
    def _v_extensions(cls, v: Any) -> list[str]:
        items = _list_from_env(v, default=DEFAULT_UPLOAD_EXTENSIONS)
        return [item.lower().lstrip(".") for item in items]

    @field_validator("sheet_authorization", mode="before")
    @classmethod
    def _v_authorization(cls, v: Any) -> str:
        if v in (None, ""):
            return "none"
        mode = str(v).strip().lower()
        if mode not in {"none", "owner"}:
            raise ValueError("PARTITURA_SHEET_AUTHORIZATION must be 'none' or 'owner'")
        return mode

    # ---- Finalize ----

    @model_validator(mode="after")
    def _finalize(self) -> Settings:
        self.alembic_ini_path = self.alembic_ini_path.expanduser().resolve()
        if not self.database_url:
            sqlite = DEFAULT_SQLITE_PATH.expanduser().resolve()
            self.database_url = f"sqlite:///{sqlite.as_posix()}"
        return self


@lru_cache(maxsize=1)
def _build_settings() -> Settings:
    return Settings()


def get_settings() -> Settings:
    return _build_settings()


def reload_settings() -> Settings:
    _build_settings.cache_clear()
    return _build_settings()


__all__ = [
    "DEFAULT_CORS_ORIGINS",
    "DEFAULT_DB_FILENAME",
    "DEFAULT_RECENT_LIMIT",
    "DEFAULT_UPLOAD_MAX_BYTES",
    "Settings",
    "SheetAuthorizationMode",
    "get_settings",
    "reload_settings",
]
