"""
Name: Console Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the console's observed behavior

Collaborators:
  - container.py: builds adapters (REST, auth, storage, change feed) from settings
  - crosscutting/logger.py: reads log_level / log_json
  - application/csv_codec.py: locale labels and time zone

Constraints:
  - No business logic, pure configuration

Notes:
  - Singleton via lru_cache
  - An empty backend_url selects the in-memory adapters (local runs, tests)
"""

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Console settings loaded from environment variables.

    Attributes:
        backend_url: Base URL of the managed backend (REST + auth)
        backend_anon_key: Public API key sent with every backend call
        database_url: PostgreSQL DSN used only for LISTEN (change feed)
        s3_endpoint_url: S3-compatible endpoint for public buckets
        storage_public_url: Base URL under which bucket objects are public
        max_avatar_bytes: Avatar upload limit (default: 2MB)
        max_system_asset_bytes: Logo/favicon upload limit (default: 2MB)
        max_attachment_bytes: Resource attachment limit (default: 10MB)
        audit_log_limit: Entries returned by the activity log (default: 100)
        page_size: Rows per page in list screens (default: 10)
        timezone: Console time zone for day bounds and CSV dates
    """

    # Environment
    app_env: str = "development"

    # Managed backend (REST rows + auth)
    backend_url: str = ""
    backend_anon_key: str = ""
    rest_path: str = "/rest/v1"
    auth_path: str = "/auth/v1"
    http_timeout_seconds: float = 10.0

    # Change feed (LISTEN/NOTIFY)
    database_url: str = ""
    change_feed_channel: str = "vault_changes"
    change_feed_poll_seconds: float = 1.0

    # Storage - S3-compatible public buckets
    s3_endpoint_url: str = ""
    s3_access_key: str = ""
    s3_secret_key: str = ""
    s3_region: str = ""
    storage_public_url: str = ""
    avatar_bucket: str = "avatars"
    system_asset_bucket: str = "system-assets"
    attachment_bucket: str = "resource-attachments"

    # Upload limits
    max_avatar_bytes: int = 2 * 1024 * 1024
    max_system_asset_bytes: int = 2 * 1024 * 1024
    max_attachment_bytes: int = 10 * 1024 * 1024

    # Console behavior
    audit_log_limit: int = 100
    page_size: int = 10
    min_password_length: int = 6
    timezone: str = "Asia/Ho_Chi_Minh"

    # CSV vocabulary
    csv_yes_label: str = "Có"
    csv_no_label: str = "Không"
    csv_wildcard_label: str = "ALL"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown time zone: {v}") from exc
        return v

    @field_validator("page_size", "audit_log_limit", "min_password_length")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator(
        "max_avatar_bytes", "max_system_asset_bytes", "max_attachment_bytes"
    )
    @classmethod
    def validate_upload_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("upload limits must be positive")
        return v

    @field_validator("backend_url", "storage_public_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return (v or "").strip().rstrip("/")

    @model_validator(mode="after")
    def validate_production_backend(self) -> "Settings":
        if self.is_production() and not (self.backend_url and self.backend_anon_key):
            raise ValueError(
                "backend_url and backend_anon_key are required in production"
            )
        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() in {"production", "prod"}

    def uses_in_memory_backend(self) -> bool:
        return self.app_env.strip().lower() == "test" or not self.backend_url

    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()
