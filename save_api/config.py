"""
Configuration for the save API, read from the environment (and a local .env).

Login:
  LOGIN_USERNAME, LOGIN_PASSWORD   the single accepted credential pair
  JWT_SECRET                       HS256 signing key (required in production)

Storage (generic S3):
  S3_ENDPOINT, S3_REGION, S3_ACCESS_KEY_ID, S3_SECRET_ACCESS_KEY,
  S3_BUCKET, S3_FORCE_PATH_STYLE

Storage (Cloudflare R2, takes precedence over S3_ENDPOINT):
  R2_ACCOUNT_ID, R2_JURISDICTION

Misc:
  LIVE_URL, NODE_ENV, LOG_LEVEL, CORS_ALLOW_ORIGIN,
  SAVE_REQUIRE_FILENAME, BACKUP_ENABLED, BACKUP_RETENTION_DAYS
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from save_api.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "default-secret-change-in-production"
DEFAULT_REGION = "us-east-1"
DEFAULT_RETENTION_DAYS = 30


@dataclass(frozen=True)
class StorageSettings:
    bucket: str
    endpoint: Optional[str]
    region: str
    access_key_id: Optional[str]
    secret_access_key: Optional[str]
    force_path_style: bool


@dataclass(frozen=True)
class Settings:
    login_username: Optional[str]
    login_password: Optional[str]
    jwt_secret: str
    storage: StorageSettings
    live_url: Optional[str] = None
    production: bool = False
    log_level: str = "INFO"
    cors_allow_origin: Optional[str] = None
    require_filename: bool = False
    backup_enabled: bool = True
    backup_retention_days: int = DEFAULT_RETENTION_DAYS

    @property
    def credentials_configured(self):
        return bool(self.login_username) and bool(self.login_password)


def _flag(value, default=False):
    if value is None or value == "":
        return default
    return value.strip().lower() == "true"


def _blank_to_none(value):
    if value is None:
        return None
    value = value.strip()
    return value or None


def r2_endpoint(account_id, jurisdiction=None):
    """Build the R2 S3 API endpoint, e.g. https://<acct>.eu.r2.cloudflarestorage.com."""
    if jurisdiction:
        return f"https://{account_id}.{jurisdiction}.r2.cloudflarestorage.com"
    return f"https://{account_id}.r2.cloudflarestorage.com"


def load_storage_settings(env: Mapping[str, str]) -> StorageSettings:
    account_id = _blank_to_none(env.get("R2_ACCOUNT_ID"))
    common = dict(
        bucket=env.get("S3_BUCKET", "").strip(),
        access_key_id=_blank_to_none(env.get("S3_ACCESS_KEY_ID")),
        secret_access_key=_blank_to_none(env.get("S3_SECRET_ACCESS_KEY")),
    )

    if account_id:
        # R2 only understands path-style requests in the "auto" region
        return StorageSettings(
            endpoint=r2_endpoint(account_id, _blank_to_none(env.get("R2_JURISDICTION"))),
            region="auto",
            force_path_style=True,
            **common,
        )

    return StorageSettings(
        endpoint=_blank_to_none(env.get("S3_ENDPOINT")),
        region=_blank_to_none(env.get("S3_REGION")) or DEFAULT_REGION,
        force_path_style=_flag(env.get("S3_FORCE_PATH_STYLE")),
        **common,
    )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Read settings from the given mapping, or from os.environ after loading .env.

    Raises:
        ConfigurationError: JWT_SECRET is unset in production, LOG_LEVEL is
            not a level name, or a numeric value cannot be parsed.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    production = environ.get("NODE_ENV", "") == "production"

    jwt_secret = _blank_to_none(environ.get("JWT_SECRET"))
    if jwt_secret is None:
        if production:
            raise ConfigurationError("JWT_SECRET must be set when NODE_ENV=production")
        logger.warning(
            "JWT_SECRET is not set; signing tokens with the built-in development secret"
        )
        jwt_secret = DEFAULT_JWT_SECRET

    raw_retention = environ.get("BACKUP_RETENTION_DAYS", "")
    try:
        retention_days = int(raw_retention) if raw_retention.strip() else DEFAULT_RETENTION_DAYS
    except ValueError:
        raise ConfigurationError(
            f"BACKUP_RETENTION_DAYS must be an integer, got {raw_retention!r}"
        )
    if retention_days <= 0:
        raise ConfigurationError("BACKUP_RETENTION_DAYS must be positive")

    log_level = (_blank_to_none(environ.get("LOG_LEVEL")) or "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(f"LOG_LEVEL must be a logging level name, got {log_level!r}")

    live_url = _blank_to_none(environ.get("LIVE_URL"))

    return Settings(
        login_username=_blank_to_none(environ.get("LOGIN_USERNAME")),
        login_password=environ.get("LOGIN_PASSWORD") or None,
        jwt_secret=jwt_secret,
        storage=load_storage_settings(environ),
        live_url=live_url.rstrip("/") if live_url else None,
        production=production,
        log_level=log_level,
        cors_allow_origin=_blank_to_none(environ.get("CORS_ALLOW_ORIGIN")),
        require_filename=_flag(environ.get("SAVE_REQUIRE_FILENAME")),
        backup_enabled=_flag(environ.get("BACKUP_ENABLED"), default=True),
        backup_retention_days=retention_days,
    )
