"""Configuration management for the negative conflict finder."""

import logging
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from negative_conflict_finder.core.exceptions import ConfigurationError
from negative_conflict_finder.models.keyword import UnknownMatchTypePolicy

# Legacy un-prefixed variable names accepted for the Google Ads credentials
GOOGLE_ADS_ENV_FALLBACKS = {
    "developer_token": "GOOGLE_ADS_DEVELOPER_TOKEN",
    "client_id": "GOOGLE_ADS_CLIENT_ID",
    "client_secret": "GOOGLE_ADS_CLIENT_SECRET",
    "refresh_token": "GOOGLE_ADS_REFRESH_TOKEN",
    "login_customer_id": "GOOGLE_ADS_LOGIN_CUSTOMER_ID",
}


class LogFormat(str, Enum):
    """Log format options."""

    JSON = "json"
    TEXT = "text"


class GoogleAdsConfig(BaseModel):
    """Google Ads API configuration."""

    developer_token: SecretStr = Field(..., min_length=1)
    client_id: str = Field(..., min_length=1)
    client_secret: SecretStr = Field(..., min_length=1)
    refresh_token: SecretStr = Field(..., min_length=1)
    login_customer_id: str | None = None

    @field_validator("login_customer_id")
    @classmethod
    def validate_customer_id(cls, v: str | None) -> str | None:
        """Validate and clean customer ID."""
        if v:
            # Remove dashes from customer ID
            cleaned = v.replace("-", "")
            if not cleaned.isdigit() or len(cleaned) != 10:
                raise ValueError("Customer ID must be 10 digits")
            return cleaned
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: LogFormat = LogFormat.TEXT
    log_file: Path | None = Field(
        default=None, description="Optional file that receives a copy of all log records"
    )


class ConflictCheckConfig(BaseModel):
    """Settings that shape a conflict check run."""

    unknown_match_type_policy: UnknownMatchTypePolicy = Field(
        default=UnknownMatchTypePolicy.SKIP,
        description="What to do with keywords whose match type is not EXACT, PHRASE or BROAD",
    )
    account_label: str | None = Field(
        default=None,
        description="Account label used to select accounts under a manager account",
    )
    max_runtime_seconds: float = Field(
        default=1740.0,
        gt=0,
        description="Wall-clock budget for a multi-account run; no new account starts after it",
    )
    progress_log_interval: int = Field(
        default=1000, ge=1, description="Log progress every N source rows"
    )
    output_csv: Path | None = Field(
        default=None, description="Default CSV file that receives conflict rows"
    )


class Settings(BaseSettings):
    """Application settings.

    Environment Variables:
        Google Ads API:
            NCF_GOOGLE_ADS__DEVELOPER_TOKEN=your_dev_token
            NCF_GOOGLE_ADS__CLIENT_ID=your_client_id
            NCF_GOOGLE_ADS__CLIENT_SECRET=your_client_secret
            NCF_GOOGLE_ADS__REFRESH_TOKEN=your_refresh_token
            NCF_GOOGLE_ADS__LOGIN_CUSTOMER_ID=1234567890

        Conflict checks:
            NCF_CONFLICTS__UNKNOWN_MATCH_TYPE_POLICY=skip   (or broad)
            NCF_CONFLICTS__ACCOUNT_LABEL="CM - Search"
            NCF_CONFLICTS__MAX_RUNTIME_SECONDS=1740

        Logging:
            NCF_LOGGING__LEVEL=INFO
            NCF_LOGGING__FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="NCF_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    google_ads: GoogleAdsConfig | None = None
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    conflicts: ConflictCheckConfig = Field(default_factory=ConflictCheckConfig)

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "Settings":
        """Load settings from the environment, optionally reading a .env file first."""
        if env_file:
            load_dotenv(env_file)
        else:
            # Try to load .env from project root
            root_dir = Path(__file__).parent.parent.parent.parent
            env_path = root_dir / ".env"
            if env_path.exists():
                load_dotenv(env_path)

        overrides: dict[str, Any] = {}
        if not any(k.upper().startswith("NCF_GOOGLE_ADS__") for k in os.environ):
            google_ads = {
                field: os.environ[env_name]
                for field, env_name in GOOGLE_ADS_ENV_FALLBACKS.items()
                if os.environ.get(env_name)
            }
            if google_ads:
                overrides["google_ads"] = google_ads

        return cls(**overrides)

    def validate_required_settings(self) -> None:
        """Ensure the Google Ads credentials needed for live runs are present.

        Raises:
            ConfigurationError: If credentials are missing
        """
        if self.google_ads is None:
            missing = [
                f"NCF_GOOGLE_ADS__{field.upper()}"
                for field in ("developer_token", "client_id", "client_secret", "refresh_token")
            ]
            raise ConfigurationError(
                f"Missing Google Ads configuration: {', '.join(missing)}"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    try:
        return Settings.from_env()
    except (ValidationError, ValueError) as e:
        logging.error(f"Configuration error: {e}")
        raise


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper())

    if settings.logging.format == LogFormat.JSON:
        import json

        class JsonFormatter(logging.Formatter):
            def format(self, record: logging.LogRecord) -> str:
                log_data = {
                    "timestamp": self.formatTime(record),
                    "level": record.levelname,
                    "logger": record.name,
                    "message": record.getMessage(),
                    "module": record.module,
                    "function": record.funcName,
                    "line": record.lineno,
                }
                if record.exc_info:
                    log_data["exception"] = self.formatException(record.exc_info)
                return json.dumps(log_data)

        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.logging.log_file:
        settings.logging.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.logging.log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
