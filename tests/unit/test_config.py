"""Tests for application settings."""

import pytest

from requestflow.core.config import Settings, get_settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("NOTIFICATION_BACKEND", raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.app_name == "RequestFlow"
        assert settings.notification_backend == "celery"
        assert settings.routing_config_path is None
        assert settings.log_level == "INFO"
        assert settings.file_logging is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SMTP_HOST", "mail.example.com")
        monkeypatch.setenv("WEBHOOK_TIMEOUT", "5")
        settings = Settings(_env_file=None)

        assert settings.smtp_host == "mail.example.com"
        assert settings.webhook_timeout == 5

    def test_environment_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("log_level", "DEBUG")
        assert Settings(_env_file=None).log_level == "DEBUG"

    def test_celery_falls_back_to_redis(self, monkeypatch):
        monkeypatch.delenv("CELERY_BROKER_URL", raising=False)
        monkeypatch.delenv("CELERY_RESULT_BACKEND", raising=False)
        settings = Settings(_env_file=None, redis_url="redis://cache:6379/2")

        assert settings.celery_broker == "redis://cache:6379/2"
        assert settings.celery_backend == "redis://cache:6379/2"

    def test_explicit_celery_broker(self):
        settings = Settings(_env_file=None, celery_broker_url="amqp://rabbit//")
        assert settings.celery_broker == "amqp://rabbit//"

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("APP_NAME=Travel Desk\nUNRELATED_SETTING=1\n")

        assert Settings(_env_file=str(env_file)).app_name == "Travel Desk"

    def test_invalid_value(self, monkeypatch):
        monkeypatch.setenv("SMTP_PORT", "not-a-port")
        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
