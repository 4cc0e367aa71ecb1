"""
Tests for configuration validation
"""
import pytest
from pydantic import ValidationError
from app.core.config import Settings


def _prod(**overrides):
    values = {
        "DATABASE_URL": "postgresql://test",
        "APP_ENV": "prod",
        "ALLOWED_ORIGINS": "https://barangay.example.ph",
        "INITIAL_ADMIN_PASSWORD": "Str0ng-Admin-Pass",
    }
    values.update(overrides)
    return Settings(**values)


def test_defaults():
    settings = Settings()

    assert settings.SESSION_TTL_HOURS == 8
    assert settings.SESSION_WARNING_MINUTES == 5
    assert settings.LOGIN_MAX_FAILED_ATTEMPTS == 5
    assert settings.LOGIN_LOCKOUT_MINUTES == 15
    assert settings.TZ == "Asia/Manila"
    assert settings.NOTIFICATIONS_ENABLED is False


def test_valid_prod_settings_pass():
    _prod().validate_production()


def test_prod_settings_rejects_wildcard_origins():
    with pytest.raises(ValueError, match="ALLOWED_ORIGINS"):
        _prod(ALLOWED_ORIGINS="*").validate_production()


def test_prod_settings_rejects_default_admin_password():
    with pytest.raises(ValueError, match="INITIAL_ADMIN_PASSWORD"):
        _prod(INITIAL_ADMIN_PASSWORD="Admin@12345").validate_production()


def test_prod_settings_requires_email_key_for_notifications():
    with pytest.raises(ValueError, match="EMAIL_API_KEY"):
        _prod(NOTIFICATIONS_ENABLED=True).validate_production()

    _prod(NOTIFICATIONS_ENABLED=True, EMAIL_API_KEY="re_123").validate_production()


def test_local_settings_allows_wildcard_origins():
    """Test that local settings allow wildcard origins"""
    settings = Settings(
        DATABASE_URL="postgresql://test",
        APP_ENV="local",
        ALLOWED_ORIGINS="*"
    )

    # Should not raise error
    settings.validate_production()

    assert settings.get_allowed_origins_list() == ["*"]


def test_get_allowed_origins_list():
    """Test parsing of ALLOWED_ORIGINS"""
    settings = Settings(
        DATABASE_URL="postgresql://test",
        ALLOWED_ORIGINS="https://example.com, https://app.example.com,"
    )
    assert settings.get_allowed_origins_list() == ["https://example.com", "https://app.example.com"]


def test_invalid_app_env():
    with pytest.raises(ValidationError):
        Settings(APP_ENV="production")


def test_log_level_normalized():
    assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"
