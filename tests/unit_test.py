"""Unit tests that do not require a running API or external services."""
from decimal import Decimal

import pytest
from pydantic import ValidationError

from schoolpay.config import Settings, settings
from schoolpay.database import build_async_url


def test_settings_load():
    """Settings load from environment (e.g. CI env vars)."""
    assert settings.API_V1_PREFIX == "/api/v1"
    assert settings.APP_NAME == "SchoolPay Backend"


def test_environment_flag():
    """Environment flags reflect ENVIRONMENT value."""
    assert settings.is_development == (settings.ENVIRONMENT.lower() == "development")
    assert settings.is_production == (settings.ENVIRONMENT.lower() == "production")


def test_origins_are_split():
    assert isinstance(settings.ALLOWED_ORIGINS, list)


@pytest.mark.parametrize("fraction", ["1", "-0.1", "2"])
def test_plan_fractions_are_validated(fraction):
    with pytest.raises(ValidationError):
        Settings(DATABASE_URL="postgresql://x", SECRET_KEY="k", DEPOSIT_FRACTION=fraction)


def test_plan_fraction_override():
    custom = Settings(DATABASE_URL="postgresql://x", SECRET_KEY="k", PLATFORM_FEE_FRACTION="0.05")
    assert custom.PLATFORM_FEE_FRACTION == Decimal("0.05")


def test_async_url_translates_sslmode():
    url, connect_args = build_async_url("postgresql://u:p@db.example.com/app?sslmode=require")
    assert url == "postgresql+asyncpg://u:p@db.example.com/app"
    assert "ssl" in connect_args


def test_async_url_keeps_other_params():
    url, connect_args = build_async_url("postgresql://u:p@localhost/app?application_name=api")
    assert url == "postgresql+asyncpg://u:p@localhost/app?application_name=api"
    assert connect_args == {}
