# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the
assignment backend. Settings are loaded from environment variables with
sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.assignment.page_size
    10
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration for assignment and enrollment data.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "shiksha"
    password: SecretStr = SecretStr("shiksha_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "shiksha"
    pool_size: int = 10
    max_overflow: int = 20

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class StorageSettings(BaseSettings):
    """Object storage configuration for assignment documents.

    Attributes:
        bucket_name: S3 bucket holding uploaded files.
        region: AWS region of the bucket.
        endpoint_url: Custom endpoint for S3-compatible stores (R2, MinIO).
        access_key_id: Access key, falls back to the boto3 credential chain.
        secret_access_key: Secret key, falls back to the boto3 credential chain.
        upload_prefix: Key prefix for assignment documents.
        max_file_size: Maximum upload size in bytes.
        allowed_content_types: Accepted MIME types.
        allowed_extensions: Accepted filename extensions (lowercase).
        presign_urls: Return presigned download URLs instead of public ones.
        presign_expiry_seconds: Lifetime of presigned URLs.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore",
    )

    bucket_name: str = "shiksha-assignments"
    region: str = "us-east-1"
    endpoint_url: str | None = None
    access_key_id: SecretStr | None = None
    secret_access_key: SecretStr | None = None
    upload_prefix: str = "assignments"
    max_file_size: int = 10 * 1024 * 1024
    allowed_content_types: list[str] = Field(default_factory=lambda: ["application/pdf"])
    allowed_extensions: list[str] = Field(default_factory=lambda: [".pdf"])
    presign_urls: bool = False
    presign_expiry_seconds: int = 3600


class AssignmentSettings(BaseSettings):
    """Assignment validation and listing configuration.

    Attributes:
        min_grade_level: Lowest grade an assignment can target.
        max_grade_level: Highest grade an assignment can target.
        title_max_length: Maximum title length after trimming.
        description_max_length: Maximum description length after trimming.
        page_size: Number of assignments per page.
        feed_merge_mode: How the student feed combines subjects.
            "per_subject" pages every subject separately and merges the
            pages; "single_query" pages once over all subjects.
    """

    model_config = SettingsConfigDict(
        env_prefix="ASSIGNMENT_",
        extra="ignore",
    )

    min_grade_level: int = 9
    max_grade_level: int = 12
    title_max_length: int = 255
    description_max_length: int = 5000
    page_size: int = Field(default=10, ge=1)
    feed_merge_mode: Literal["per_subject", "single_query"] = "per_subject"

    @model_validator(mode="after")
    def validate_grade_range(self) -> Self:
        """Ensure the grade range is not inverted."""
        if self.min_grade_level > self.max_grade_level:
            raise ValueError(
                "ASSIGNMENT_MIN_GRADE_LEVEL must not exceed ASSIGNMENT_MAX_GRADE_LEVEL"
            )
        return self


class NotificationSettings(BaseSettings):
    """Assignment notification configuration.

    Attributes:
        platform_name: Signature used in notification bodies and sender name.
        sender_email: From address of notification emails.
        fallback_sender_name: Teacher name used when lookup fails.
        fallback_recipient_name: Recipient name used when none is stored.
        no_due_date_label: Text shown when an assignment has no due date.
        subject_label_template: Format for the subject shown to students.
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTIFICATION_",
        extra="ignore",
    )

    platform_name: str = "Shiksha LMS"
    sender_email: str = "no-reply@shiksha.local"
    fallback_sender_name: str = "Teacher"
    fallback_recipient_name: str = "Student"
    no_due_date_label: str = "No due date specified"
    subject_label_template: str = "Subject-{subject_id}"


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
        workers: Number of worker processes.
        reload: Whether to enable auto-reload.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8080
    workers: int = 2
    reload: bool = False


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Database settings.
        storage: Object storage settings.
        assignment: Assignment validation and listing settings.
        notification: Notification rendering settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    assignment: AssignmentSettings = Field(default_factory=AssignmentSettings)
    notification: NotificationSettings = Field(default_factory=NotificationSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.database.password.get_secret_value() == "shiksha_password":
                raise ValueError(
                    "Database password must be changed from default in production. "
                    "Set DB_PASSWORD environment variable."
                )
            if self.debug:
                raise ValueError("DEBUG must be disabled in production.")
            if not self.storage.bucket_name.strip():
                raise ValueError(
                    "Storage bucket must be configured in production. "
                    "Set STORAGE_BUCKET_NAME environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
