"""Unit tests for configuration management."""

import json
import logging
from unittest.mock import patch

import pytest

from negative_conflict_finder.core.config import (
    ConflictCheckConfig,
    GoogleAdsConfig,
    LogFormat,
    LoggingConfig,
    Settings,
    get_settings,
    setup_logging,
)
from negative_conflict_finder.core.exceptions import ConfigurationError
from negative_conflict_finder.models.keyword import UnknownMatchTypePolicy


class TestGoogleAdsConfig:
    """Test Google Ads configuration."""

    def test_required_fields(self):
        """Test that credentials are stored as secrets."""
        config = GoogleAdsConfig(
            developer_token="test-token",
            client_id="test-client-id",
            client_secret="test-secret",
            refresh_token="test-refresh",
        )
        assert config.developer_token.get_secret_value() == "test-token"
        assert config.client_secret.get_secret_value() == "test-secret"
        assert "test-secret" not in repr(config)
        assert config.login_customer_id is None

    def test_customer_id_validation(self):
        """Test customer ID validation and cleaning."""
        config = GoogleAdsConfig(
            developer_token="test",
            client_id="test",
            client_secret="test",
            refresh_token="test",
            login_customer_id="123-456-7890",
        )
        assert config.login_customer_id == "1234567890"

        with pytest.raises(ValueError, match="Customer ID must be 10 digits"):
            GoogleAdsConfig(
                developer_token="test",
                client_id="test",
                client_secret="test",
                refresh_token="test",
                login_customer_id="123",
            )


class TestConflictCheckConfig:
    """Test conflict check configuration."""

    def test_defaults(self):
        config = ConflictCheckConfig()
        assert config.unknown_match_type_policy == UnknownMatchTypePolicy.SKIP
        assert config.max_runtime_seconds == 1740
        assert config.progress_log_interval == 1000
        assert config.account_label is None
        assert config.output_csv is None

    def test_runtime_budget_must_be_positive(self):
        with pytest.raises(ValueError):
            ConflictCheckConfig(max_runtime_seconds=0)


class TestSettings:
    """Test settings loading."""

    def test_defaults(self):
        settings = Settings()
        assert settings.google_ads is None
        assert settings.logging.format == LogFormat.TEXT
        assert settings.conflicts.max_runtime_seconds == 1740

    def test_nested_environment_variables(self, monkeypatch):
        monkeypatch.setenv("NCF_CONFLICTS__UNKNOWN_MATCH_TYPE_POLICY", "broad")
        monkeypatch.setenv("NCF_CONFLICTS__ACCOUNT_LABEL", "CM - Search")
        monkeypatch.setenv("NCF_CONFLICTS__MAX_RUNTIME_SECONDS", "600")
        monkeypatch.setenv("NCF_LOGGING__FORMAT", "json")

        settings = Settings()

        assert settings.conflicts.unknown_match_type_policy == UnknownMatchTypePolicy.BROAD
        assert settings.conflicts.account_label == "CM - Search"
        assert settings.conflicts.max_runtime_seconds == 600
        assert settings.logging.format == LogFormat.JSON

    def test_prefixed_google_ads_credentials(self, monkeypatch):
        monkeypatch.setenv("NCF_GOOGLE_ADS__DEVELOPER_TOKEN", "dev")
        monkeypatch.setenv("NCF_GOOGLE_ADS__CLIENT_ID", "id")
        monkeypatch.setenv("NCF_GOOGLE_ADS__CLIENT_SECRET", "secret")
        monkeypatch.setenv("NCF_GOOGLE_ADS__REFRESH_TOKEN", "refresh")

        settings = Settings.from_env()

        assert settings.google_ads.client_id == "id"
        settings.validate_required_settings()

    def test_legacy_google_ads_variables(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_ADS_DEVELOPER_TOKEN", "dev")
        monkeypatch.setenv("GOOGLE_ADS_CLIENT_ID", "id")
        monkeypatch.setenv("GOOGLE_ADS_CLIENT_SECRET", "secret")
        monkeypatch.setenv("GOOGLE_ADS_REFRESH_TOKEN", "refresh")
        monkeypatch.setenv("GOOGLE_ADS_LOGIN_CUSTOMER_ID", "999-888-7777")

        settings = Settings.from_env()

        assert settings.google_ads.developer_token.get_secret_value() == "dev"
        assert settings.google_ads.login_customer_id == "9998887777"

    def test_from_env_loads_given_dotenv_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("NCF_DEBUG=true\n")

        with patch("negative_conflict_finder.core.config.load_dotenv") as mock_load:
            Settings.from_env(env_file)

        mock_load.assert_called_once_with(env_file)

    def test_validate_required_settings_lists_missing_credentials(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings().validate_required_settings()

        message = str(exc_info.value)
        assert "NCF_GOOGLE_ADS__DEVELOPER_TOKEN" in message
        assert "NCF_GOOGLE_ADS__REFRESH_TOKEN" in message

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestSetupLogging:
    """Test logging configuration."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root_logger = logging.getLogger()
        handlers = list(root_logger.handlers)
        level = root_logger.level
        yield
        for handler in root_logger.handlers:
            if handler not in handlers:
                handler.close()
        root_logger.handlers = handlers
        root_logger.setLevel(level)

    def test_json_logging_to_file(self, tmp_path):
        log_file = tmp_path / "logs" / "ncf.log"
        settings = Settings(
            logging=LoggingConfig(level="DEBUG", format=LogFormat.JSON, log_file=log_file)
        )

        setup_logging(settings)
        logging.getLogger("negative_conflict_finder.test").warning("conflict found")
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["message"] == "conflict found"
        assert record["level"] == "WARNING"
        assert record["logger"] == "negative_conflict_finder.test"
        assert logging.getLogger().level == logging.DEBUG

    def test_text_logging(self, tmp_path):
        log_file = tmp_path / "ncf.log"
        settings = Settings(logging=LoggingConfig(level="INFO", log_file=log_file))

        setup_logging(settings)
        logging.getLogger("negative_conflict_finder.test").info("plain message")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "negative_conflict_finder.test - INFO - plain message" in log_file.read_text()
