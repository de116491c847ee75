"""
Configuration Management for ExpenseAI

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here so every tunable (storage location,
receipt scanning latency, upload limits) is validated once at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding one JSON file per storage key"
    )
    expenses_key: str = Field(
        default="expenses",
        min_length=1,
        description="Key under which the expense list is stored"
    )
    budget_key: str = Field(
        default="budget",
        min_length=1,
        description="Key under which the budget configuration is stored"
    )

    @field_validator('expenses_key', 'budget_key')
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Keys become file names, so path separators are not allowed."""
        if "/" in v or "\\" in v or v.startswith("."):
            raise ValueError(f"Invalid storage key: {v!r}")
        return v


class ReceiptSettings(BaseSettings):
    """Simulated receipt scanning configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RECEIPT_",
        extra="ignore"
    )

    min_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Lower bound of the artificial processing delay"
    )
    max_delay_seconds: float = Field(
        default=4.0,
        ge=0.0,
        description="Upper bound of the artificial processing delay"
    )
    min_confidence: float = Field(
        default=0.95,
        ge=0.0,
        le=1.0,
        description="Lower bound of the simulated extraction confidence"
    )
    max_confidence: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Upper bound of the simulated extraction confidence"
    )
    supported_formats: str = Field(
        default="jpg,jpeg,png,webp,gif,pdf",
        description="Comma-separated list of accepted receipt file extensions"
    )
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum receipt upload size in MB"
    )

    @model_validator(mode='after')
    def validate_ranges(self) -> 'ReceiptSettings':
        if self.max_delay_seconds < self.min_delay_seconds:
            raise ValueError("max_delay_seconds cannot be below min_delay_seconds")
        if self.max_confidence < self.min_confidence:
            raise ValueError("max_confidence cannot be below min_confidence")
        return self

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported formats as a list."""
        return [fmt.strip().lower().lstrip(".") for fmt in self.supported_formats.split(",") if fmt.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Presentation
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol prefixed to currency amounts in messages"
    )
    trend_days: int = Field(
        default=7,
        ge=1,
        le=365,
        description="Default number of days in the spending trend chart"
    )
    load_sample_data: bool = Field(
        default=True,
        description="Seed sample expenses when the store is empty at startup"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def receipts(self) -> ReceiptSettings:
        return ReceiptSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every invalid section.
    """
    results = {}
    settings = get_settings()

    for name in ("storage", "receipts", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
