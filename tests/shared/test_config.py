"""Tests for shared/config.py."""

import pytest
from unittest.mock import patch
import os

from shared.config import DEFAULT_JWT_SECRET, Settings, get_settings


class TestSettings:
    def test_default_values(self):
        """Settings should have sensible defaults."""
        settings = Settings(_env_file=None)
        assert settings.app_name == "Solutil API"
        assert settings.debug is False
        assert settings.port == 8000
        assert settings.jwt_algorithm == "HS256"
        assert settings.token_expire_seconds == 7 * 24 * 60 * 60
        assert settings.admin_subject_id == "admin"
        assert settings.rate_limit_max_attempts == 5
        assert settings.rate_limit_window_seconds == 900
        assert settings.store_retry_seconds == 30

    def test_loads_from_env(self):
        """Settings should load from environment variables."""
        with patch.dict(os.environ, {"DEBUG": "true", "PORT": "9000"}):
            settings = Settings(_env_file=None)
            assert settings.debug is True
            assert settings.port == 9000

    def test_loads_credentials_from_env(self):
        with patch.dict(os.environ, {
            "JWT_SECRET": "operator-secret",
            "ADMIN_EMAIL": "ops@solutil.test",
            "ADMIN_PASSWORD": "hunter2",
            "RATE_LIMIT_MAX_ATTEMPTS": "3",
        }):
            settings = Settings(_env_file=None)
            assert settings.jwt_secret == "operator-secret"
            assert settings.admin_email == "ops@solutil.test"
            assert settings.admin_password == "hunter2"
            assert settings.rate_limit_max_attempts == 3

    def test_loads_supabase_config_from_env(self):
        """Settings should load Supabase configuration from environment variables."""
        with patch.dict(os.environ, {
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_SERVICE_ROLE_KEY": "test-service-key",
        }):
            settings = Settings(_env_file=None)
            assert settings.supabase_url == "https://test.supabase.co"
            assert settings.supabase_service_role_key == "test-service-key"

    def test_default_secret_is_flagged(self):
        """Running on the built-in secret should be detectable."""
        with patch.dict(os.environ, {}, clear=True):
            assert Settings(_env_file=None).uses_default_secret is True
        assert Settings(_env_file=None, jwt_secret="x").uses_default_secret is False
        assert DEFAULT_JWT_SECRET

    @pytest.mark.parametrize(
        "environment,expected",
        [("development", True), ("test", True), ("Local", True), ("production", False)],
    )
    def test_is_development(self, environment, expected):
        assert Settings(_env_file=None, environment=environment).is_development is expected


class TestGetSettings:
    def test_returns_cached_instance(self):
        """get_settings should return the same instance."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
