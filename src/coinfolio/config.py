"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RefreshSettings(BaseSettings):
    """Periodic catalog and ledger refresh parameters."""

    model_config = SettingsConfigDict(env_prefix="REFRESH_")

    interval_seconds: float = Field(default=60.0, gt=0)
    auto_start: bool = True  # start the scheduler when the app boots


class DashboardSettings(BaseSettings):
    """Dashboard server configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    host: str = "127.0.0.1"
    port: int = 8080
    enabled: bool = True


class SeedSettings(BaseSettings):
    """Initial data loaded into the catalog and ledger at startup."""

    model_config = SettingsConfigDict(env_prefix="SEED_")

    sample_data: bool = True
    default_favorites: list[str] = ["BTC", "ETH"]  # symbols flagged on first load


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str | None = None
    refresh: RefreshSettings = RefreshSettings()
    dashboard: DashboardSettings = DashboardSettings()
    seed: SeedSettings = SeedSettings()
