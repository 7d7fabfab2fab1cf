from __future__ import annotations

from decimal import Decimal

import pytest

from webmarcas.core.config import DEFAULT_OTS_CALENDAR_SERVERS, _build_config
from webmarcas.core.exceptions import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "DATABASE_URL",
        "JWT_SECRET",
        "STORAGE_BACKEND",
        "S3_BUCKET",
        "OTS_CALENDAR_SERVERS",
        "SITE_URL",
        "LOG_LEVEL",
        "PROMO_PRICE",
        "DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = _build_config("development")
    assert config.PROMO_PRICE == Decimal("699.00")
    assert config.STANDARD_PRICE == Decimal("1194.00")
    assert config.BOLETO_TOTAL == Decimal("1197.00")
    assert config.SITE_URL == "https://webmarcas.net"
    assert config.OTS_CALENDAR_SERVERS == DEFAULT_OTS_CALENDAR_SERVERS
    assert config.DEBUG is True
    assert not config.is_production


def test_environment_overrides(clean_env):
    clean_env.setenv("OTS_CALENDAR_SERVERS", "https://one.test/, https://two.test")
    clean_env.setenv("SITE_URL", "https://staging.webmarcas.net/")
    clean_env.setenv("LOG_LEVEL", "debug")
    config = _build_config("development")
    assert config.OTS_CALENDAR_SERVERS == ("https://one.test", "https://two.test")
    assert config.SITE_URL == "https://staging.webmarcas.net"
    assert config.LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize(
    "name, value",
    [
        ("STORAGE_BACKEND", "ftp"),
        ("STORAGE_BACKEND", "s3"),
        ("DATABASE_URL", "mysql://db/webmarcas"),
        ("DATABASE_URL", "postgresql:///webmarcas"),
        ("LOG_LEVEL", "LOUD"),
    ],
)
def test_invalid_values_are_rejected(clean_env, name, value):
    clean_env.setenv(name, value)
    with pytest.raises(ConfigurationError):
        _build_config("development")


def test_production_rejects_placeholder_secret(clean_env):
    with pytest.raises(ConfigurationError, match="JWT_SECRET"):
        _build_config("production")

    clean_env.setenv("JWT_SECRET", "a-real-production-secret")
    config = _build_config("production")
    assert config.is_production
    assert config.DEBUG is False
