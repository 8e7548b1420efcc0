"""
Azure Blob Storage Sample - Configuration

Pydantic-based configuration management for the demo driver.
All settings are loaded from environment variables or a local .env file.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PAGE_SIZE = 512


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Azure Storage
    storage_connection_string: str = Field(
        default="UseDevelopmentStorage=true",
        description="Azure Storage connection string (defaults to the local emulator)",
    )
    container_public_access: Optional[Literal["blob", "container"]] = Field(
        default=None,
        description="Public access level for demo containers, None keeps them private",
    )

    # Demo inputs and outputs
    image_to_upload: str = Field(
        default="HelloWorld.png",
        description="Local file uploaded as a block blob",
    )
    download_directory: str = Field(
        default=".",
        description="Directory the downloaded copy is written to",
    )

    # Shared access signatures
    sas_expiry_hours: int = Field(
        default=24,
        description="Lifetime of the generated account SAS token",
    )

    # Page blobs and listings
    page_blob_size: int = Field(
        default=PAGE_SIZE * 2,
        description="Size of the demo page blob, a multiple of 512 bytes",
    )
    list_max_results: int = Field(
        default=5000,
        description="Maximum number of blobs per listing segment",
    )

    # Console behaviour
    pause_on_exit: bool = Field(
        default=True,
        description="Wait for Enter before exiting or re-raising a fatal error",
    )
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = Field(
        default="WARNING",
        description="Root logging level",
    )

    @field_validator("container_public_access", mode="before")
    @classmethod
    def _parse_public_access(cls, value):
        # "None" or an empty value in the environment means a private container
        if isinstance(value, str) and value.strip().lower() in ("", "none"):
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("page_blob_size")
    @classmethod
    def _check_page_blob_size(cls, value: int) -> int:
        if value <= 0 or value % PAGE_SIZE:
            raise ValueError(
                f"page_blob_size must be a positive multiple of {PAGE_SIZE}, got {value}"
            )
        return value

    def validate_required(self) -> list[str]:
        """
        Validate that all required settings are present.

        Returns:
            List of missing required field names.
        """
        missing = []

        if not self.storage_connection_string:
            missing.append("STORAGE_CONNECTION_STRING")
        if not self.image_to_upload:
            missing.append("IMAGE_TO_UPLOAD")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: The application settings.
    """
    return Settings()

