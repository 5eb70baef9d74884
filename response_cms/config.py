"""Configuration utilities for the Response CMS.

This module loads application configuration with the following rules:
- Primary source: `response_cms_config.json` at the project root.
- Overrides: environment variables (a local `.env` is honoured), then optional
  text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator, model_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("response_cms_config.json")
logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "dev-only-jwt-secret"
DEV_DELIVERY_API_KEY = "dev-only-delivery-key"
DEV_ADMIN_PASSWORD = "admin123"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(text: str | int) -> int:
    """Convert `24h`, `30m`, `7d`, `45s` or a bare number of seconds to seconds."""
    if isinstance(text, int):
        seconds = text
    else:
        m = _DURATION_RE.match(str(text))
        if not m:
            raise ValueError(f"invalid duration: {text!r}")
        seconds = int(m.group(1)) * _DURATION_UNITS[m.group(2).lower()]
    if seconds <= 0:
        raise ValueError("duration must be positive")
    return seconds


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class AuthConfig(BaseModel):
    admin_username: str = "admin"
    admin_password: str = DEV_ADMIN_PASSWORD
    jwt_secret: str
    jwt_expires_in: int = Field(default=24 * 3600, gt=0)
    jwt_algorithm: str = "HS256"

    @field_validator("admin_username", "jwt_secret")
    @classmethod
    def must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("must be a non-empty string")
        return v


class DeliveryConfig(BaseModel):
    api_key: str

    @field_validator("api_key")
    @classmethod
    def api_key_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("delivery.api_key must be a non-empty string")
        return v


class SheetsConfig(BaseModel):
    sheet_id: str = ""
    service_account_email: str = ""
    private_key: str = ""
    sheet_name: str = "Sheet1"
    sheet_gid: int = Field(default=0, ge=0)

    @field_validator("private_key")
    @classmethod
    def unescape_newlines(cls, v: str) -> str:
        # Keys pasted into env files carry literal "\n" sequences
        return (v or "").replace("\\n", "\n")

    @property
    def enabled(self) -> bool:
        return bool(self.sheet_id.strip())

    @model_validator(mode="after")
    def credentials_required_with_sheet(self) -> "SheetsConfig":
        if self.enabled and not (self.service_account_email.strip() and self.private_key.strip()):
            raise ValueError("sheets.service_account_email and sheets.private_key are required when sheet_id is set")
        return self


class ServerConfig(BaseModel):
    environment: str = "development"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"server.log_level must be one of {sorted(allowed)}")
        return v.upper()

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


class AppConfig(BaseModel):
    server: ServerConfig
    auth: AuthConfig
    delivery: DeliveryConfig
    sheets: SheetsConfig

    @model_validator(mode="after")
    def no_dev_secrets_in_production(self) -> "AppConfig":
        if self.server.is_production:
            if self.auth.jwt_secret == DEV_JWT_SECRET:
                raise ValueError("JWT_SECRET must be set in production")
            if self.delivery.api_key == DEV_DELIVERY_API_KEY:
                raise ValueError("DELIVERY_API_KEY must be set in production")
            if self.auth.admin_password == DEV_ADMIN_PASSWORD:
                raise ValueError("ADMIN_PASSWORD must be changed from the default in production")
        return self


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config(*, use_dotenv: bool = True) -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables (including a local `.env`, never overriding real env)
    2) Text files in `config/` (optional)
    3) response_cms_config.json at project root
    4) Safe defaults for development
    """
    if use_dotenv:
        load_dotenv(override=False)

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    def _pick(env_key: str, file_key: str, base_path: str, default: Optional[str] = None) -> Optional[str]:
        return _env(env_key) or _read_config_file(file_key) or _base(base_path, default)

    environment = _pick("APP_ENV", "app.env", "server.environment", "development").strip()
    origins_text = _pick("CORS_ORIGINS", "cors.origins", "server.cors_origins", "*")
    log_level = _pick("LOG_LEVEL", "log.level", "server.log_level", "INFO")

    try:
        cfg = AppConfig(
            server=ServerConfig(
                environment=environment,
                cors_origins=[o.strip() for o in str(origins_text).split(",") if o.strip()] or ["*"],
                log_level=str(log_level).strip(),
            ),
            auth=AuthConfig(
                admin_username=_pick("ADMIN_USERNAME", "admin.username", "auth.admin_username", "admin"),
                admin_password=_pick("ADMIN_PASSWORD", "admin.password", "auth.admin_password", DEV_ADMIN_PASSWORD),
                jwt_secret=_pick("JWT_SECRET", "jwt.secret", "auth.jwt_secret", DEV_JWT_SECRET),
                jwt_expires_in=parse_duration(_pick("JWT_EXPIRES_IN", "jwt.expires_in", "auth.jwt_expires_in", "24h")),
            ),
            delivery=DeliveryConfig(
                api_key=_pick("DELIVERY_API_KEY", "delivery.api_key", "delivery.api_key", DEV_DELIVERY_API_KEY),
            ),
            sheets=SheetsConfig(
                sheet_id=_pick("GOOGLE_SHEET_ID", "google.sheet_id", "sheets.sheet_id", "") or "",
                service_account_email=_pick(
                    "GOOGLE_SERVICE_ACCOUNT_EMAIL", "google.service_account_email", "sheets.service_account_email", ""
                ) or "",
                private_key=_pick("GOOGLE_PRIVATE_KEY", "google.private_key", "sheets.private_key", "") or "",
                sheet_name=_pick("GOOGLE_SHEET_NAME", "google.sheet_name", "sheets.sheet_name", "Sheet1"),
                sheet_gid=int(str(_pick("GOOGLE_SHEET_GID", "google.sheet_gid", "sheets.sheet_gid", "0")).strip()),
            ),
        )
    except (PydanticValidationError, ValueError) as e:
        logger.error("Invalid application configuration: %s", e)
        raise
    if not cfg.server.is_production and cfg.auth.jwt_secret == DEV_JWT_SECRET:
        logger.warning("JWT_SECRET not set; using development secret")
    return cfg


__all__ = [
    "AppConfig",
    "AuthConfig",
    "DeliveryConfig",
    "SheetsConfig",
    "ServerConfig",
    "load_config",
    "parse_duration",
]
