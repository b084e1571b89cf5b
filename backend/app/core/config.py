# backend/app/core/config.py
import logging
import os
from pathlib import Path
from typing import List, Set

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME, DEFAULT_MATCH_PAGE_SIZE, MAX_MATCH_PAGE_SIZE


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


PROD_SITE_MODES: Set[str] = {"prod", "production", "live"}


def _classify_environment(raw_site_mode: str | None) -> str:
    normalized = (raw_site_mode or "").strip().lower()
    return "production" if normalized in PROD_SITE_MODES else "development"


class Settings(BaseSettings):
    app_name: str = BRAND_NAME

    # Environment (derived from SITE_MODE)
    environment: str = _classify_environment(os.getenv("SITE_MODE", "local"))
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Raw database URLs - use get_database_url() instead
    database_url_raw: str = Field(
        default="sqlite:///./trade.db",
        validation_alias=AliasChoices("database_url", "DATABASE_URL"),
    )
    test_database_url_raw: str = Field(
        default="sqlite+pysqlite:///:memory:",
        validation_alias=AliasChoices("test_database_url", "TEST_DATABASE_URL"),
    )
    is_testing: bool = False  # Set to True when running tests

    # Outbound collaborator API (event match search, chat polling)
    trade_api_base_url: str = Field(
        default="http://localhost:8000/api/v1",
        description="Base URL of the trade API consumed by client workflows",
    )
    trade_api_timeout_seconds: float = Field(
        default=10.0,
        description="Per-request timeout applied by the outbound HTTP client",
    )

    # Chat polling contract
    chat_poll_interval_seconds: float = Field(
        default=5.0,
        description="Recommended client poll interval while the chat view is visible",
    )
    chat_poll_hidden_interval_seconds: float = Field(
        default=30.0,
        description="Back-off interval while the chat view is hidden",
    )
    chat_message_max_length: int = 1000

    # Event match workflow
    event_match_page_size: int = Field(default=DEFAULT_MATCH_PAGE_SIZE, ge=1, le=MAX_MATCH_PAGE_SIZE)

    # Offers
    offer_content_max_length: int = 1000

    # CORS for the web client
    cors_allowed_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("chat_poll_hidden_interval_seconds")
    @classmethod
    def _hidden_interval_not_shorter(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("chat_poll_hidden_interval_seconds must be positive")
        return value

    @field_validator("trade_api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def get_database_url(self) -> str:
        """Get the appropriate database URL based on context."""
        if self.is_testing or is_running_tests():
            return self.test_database_url_raw
        return self.database_url_raw


settings = Settings()
logger.info(
    "[CONFIG] environment=%s trade_api_base_url=%s",
    settings.environment,
    settings.trade_api_base_url,
)
