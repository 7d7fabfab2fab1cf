"""Configuration module for the WebMarcas application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from webmarcas.core.exceptions import ConfigurationError

load_dotenv()

PRODUCTION_SITE_URL = "https://webmarcas.net"

DEFAULT_OTS_CALENDAR_SERVERS = (
    "https://a.pool.opentimestamps.org",
    "https://b.pool.opentimestamps.org",
    "https://alice.btc.calendar.opentimestamps.org",
    "https://bob.btc.calendar.opentimestamps.org",
)


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_list(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if not value:
        return default
    items = tuple(item.strip().rstrip("/") for item in value.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class Config:
    """Runtime configuration with validation."""

    APP_NAME: str
    APP_VERSION: str
    ENV: str
    DEBUG: bool
    DATABASE_URL: str
    DB_CONNECTIVITY_REQUIRED: bool
    ASAAS_API_URL: str
    ASAAS_API_KEY: str | None
    ASAAS_TIMEOUT_SECONDS: int
    ASAAS_WEBHOOK_TOKEN: str | None
    PROMO_PRICE: Decimal
    STANDARD_PRICE: Decimal
    CARD_INSTALLMENTS: int
    BOLETO_INSTALLMENTS: int
    BOLETO_TOTAL: Decimal
    PAYMENT_DUE_DAYS: int
    PROMO_EXPIRY_HOURS: int
    SITE_URL: str
    SIGNATURE_LINK_EXPIRY_DAYS: int
    OTS_CALENDAR_SERVERS: tuple[str, ...]
    OTS_TIMEOUT_SECONDS: int
    STORAGE_BACKEND: str
    STORAGE_ROOT: str
    STORAGE_PUBLIC_URL: str
    S3_BUCKET: str | None
    S3_ENDPOINT_URL: str | None
    S3_REGION: str | None
    SMTP_SERVER: str | None
    SMTP_PORT: int
    SMTP_USERNAME: str | None
    SMTP_PASSWORD: str | None
    SMTP_FROM_EMAIL: str
    SMTP_SANDBOX_MODE: bool
    WHATSAPP_API_URL: str | None
    WHATSAPP_API_KEY: str | None
    WHATSAPP_INSTANCE: str | None
    JWT_SECRET: str
    JWT_ACCESS_TTL_MINUTES: int
    JWT_REFRESH_TTL_DAYS: int
    JWT_PERMISSIONS_VERSION: int
    CELERY_BROKER_URL: str
    CELERY_RESULT_BACKEND: str
    IMPORT_BATCH_SIZE: int
    API_PREFIX: str
    LOG_LEVEL: str
    LOG_FILE: str

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=(resolved_env != "production"))
    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    config = Config(
        APP_NAME="WebMarcas",
        APP_VERSION=os.getenv("APP_VERSION", "1.0.0"),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./webmarcas.db"),
        DB_CONNECTIVITY_REQUIRED=_as_bool(os.getenv("DB_CONNECTIVITY_REQUIRED"), default=resolved_env == "production"),
        ASAAS_API_URL=os.getenv("ASAAS_API_URL", "https://api.asaas.com/v3").rstrip("/"),
        ASAAS_API_KEY=os.getenv("ASAAS_API_KEY"),
        ASAAS_TIMEOUT_SECONDS=int(os.getenv("ASAAS_TIMEOUT_SECONDS", "60")),
        ASAAS_WEBHOOK_TOKEN=os.getenv("ASAAS_WEBHOOK_TOKEN"),
        PROMO_PRICE=Decimal(os.getenv("PROMO_PRICE", "699.00")),
        STANDARD_PRICE=Decimal(os.getenv("STANDARD_PRICE", "1194.00")),
        CARD_INSTALLMENTS=int(os.getenv("CARD_INSTALLMENTS", "6")),
        BOLETO_INSTALLMENTS=int(os.getenv("BOLETO_INSTALLMENTS", "3")),
        BOLETO_TOTAL=Decimal(os.getenv("BOLETO_TOTAL", "1197.00")),
        PAYMENT_DUE_DAYS=int(os.getenv("PAYMENT_DUE_DAYS", "3")),
        PROMO_EXPIRY_HOURS=int(os.getenv("PROMO_EXPIRY_HOURS", "24")),
        SITE_URL=os.getenv("SITE_URL", PRODUCTION_SITE_URL).rstrip("/"),
        SIGNATURE_LINK_EXPIRY_DAYS=int(os.getenv("SIGNATURE_LINK_EXPIRY_DAYS", "7")),
        OTS_CALENDAR_SERVERS=_as_list(os.getenv("OTS_CALENDAR_SERVERS"), DEFAULT_OTS_CALENDAR_SERVERS),
        OTS_TIMEOUT_SECONDS=int(os.getenv("OTS_TIMEOUT_SECONDS", "10")),
        STORAGE_BACKEND=os.getenv("STORAGE_BACKEND", "local").strip().lower(),
        STORAGE_ROOT=os.getenv("STORAGE_ROOT", "./storage"),
        STORAGE_PUBLIC_URL=os.getenv("STORAGE_PUBLIC_URL", "http://localhost:8000/storage").rstrip("/"),
        S3_BUCKET=os.getenv("S3_BUCKET"),
        S3_ENDPOINT_URL=os.getenv("S3_ENDPOINT_URL"),
        S3_REGION=os.getenv("S3_REGION"),
        SMTP_SERVER=os.getenv("SMTP_SERVER"),
        SMTP_PORT=int(os.getenv("SMTP_PORT", "587")),
        SMTP_USERNAME=os.getenv("SMTP_USERNAME"),
        SMTP_PASSWORD=os.getenv("SMTP_PASSWORD"),
        SMTP_FROM_EMAIL=os.getenv("SMTP_FROM_EMAIL", os.getenv("SMTP_USERNAME") or "contato@webmarcas.net"),
        SMTP_SANDBOX_MODE=_as_bool(os.getenv("SMTP_SANDBOX_MODE"), default=True),
        WHATSAPP_API_URL=(os.getenv("WHATSAPP_API_URL") or "").rstrip("/") or None,
        WHATSAPP_API_KEY=os.getenv("WHATSAPP_API_KEY"),
        WHATSAPP_INSTANCE=os.getenv("WHATSAPP_INSTANCE"),
        JWT_SECRET=os.getenv("JWT_SECRET", "change_me_jwt_secret"),
        JWT_ACCESS_TTL_MINUTES=int(os.getenv("JWT_ACCESS_TTL_MINUTES", "15")),
        JWT_REFRESH_TTL_DAYS=int(os.getenv("JWT_REFRESH_TTL_DAYS", "14")),
        JWT_PERMISSIONS_VERSION=int(os.getenv("JWT_PERMISSIONS_VERSION", "1")),
        CELERY_BROKER_URL=os.getenv("CELERY_BROKER_URL", redis_url),
        CELERY_RESULT_BACKEND=os.getenv("CELERY_RESULT_BACKEND", redis_url),
        IMPORT_BATCH_SIZE=int(os.getenv("IMPORT_BATCH_SIZE", "5")),
        API_PREFIX=os.getenv("API_PREFIX", "/api/v1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE", "webmarcas.log"),
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg2"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    _validate_database_url(config.DATABASE_URL)

    if config.ASAAS_TIMEOUT_SECONDS < 1:
        raise ConfigurationError("ASAAS_TIMEOUT_SECONDS must be >= 1.")
    if config.OTS_TIMEOUT_SECONDS < 1:
        raise ConfigurationError("OTS_TIMEOUT_SECONDS must be >= 1.")
    if config.SIGNATURE_LINK_EXPIRY_DAYS < 1:
        raise ConfigurationError("SIGNATURE_LINK_EXPIRY_DAYS must be >= 1.")
    if config.CARD_INSTALLMENTS < 1 or config.BOLETO_INSTALLMENTS < 1:
        raise ConfigurationError("Installment counts must be >= 1.")
    if config.IMPORT_BATCH_SIZE < 1:
        raise ConfigurationError("IMPORT_BATCH_SIZE must be >= 1.")
    if config.STORAGE_BACKEND not in {"local", "s3"}:
        raise ConfigurationError("STORAGE_BACKEND must be one of local/s3.")
    if config.STORAGE_BACKEND == "s3" and not config.S3_BUCKET:
        raise ConfigurationError("S3_BUCKET is required when STORAGE_BACKEND=s3.")
    if config.JWT_ACCESS_TTL_MINUTES < 1:
        raise ConfigurationError("JWT_ACCESS_TTL_MINUTES must be >= 1.")
    if config.JWT_REFRESH_TTL_DAYS < 1:
        raise ConfigurationError("JWT_REFRESH_TTL_DAYS must be >= 1.")
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if config.is_production and "change_me" in config.JWT_SECRET:
        raise ConfigurationError("Production JWT_SECRET uses a placeholder value.")
    if config.is_production and "change_me" in config.DATABASE_URL.lower():
        raise ConfigurationError("Production DATABASE_URL uses placeholder credentials.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
