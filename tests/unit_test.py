"""Unit tests that do not require a running API or external services."""
from backoffice.config import settings


def test_settings_load():
    """Settings load from environment (the test conftest sets them)."""
    assert settings.API_V1_PREFIX == "/api/v1"
    assert settings.APP_NAME == "Dealer Bill Back-Office"
    assert settings.is_sqlite


def test_environment_flag():
    """Environment flags reflect ENVIRONMENT value."""
    assert settings.ENVIRONMENT.lower() in ("development", "test", "production")
    assert settings.is_development == (settings.ENVIRONMENT.lower() == "development")
    assert settings.is_production == (settings.ENVIRONMENT.lower() == "production")


def test_upload_policy_from_settings():
    policy = settings.upload_policy()
    assert policy.directory == settings.UPLOAD_DIR
    assert policy.max_bytes == 5 * 1024 * 1024
    assert policy.allowed_extensions == frozenset({"jpeg", "jpg", "png", "pdf"})
