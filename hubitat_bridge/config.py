"""
Centralized configuration management using Pydantic Settings.

Configuration is loaded from environment variables with sensible defaults.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HubitatConfig(BaseSettings):
    """Maker API connection configuration."""

    model_config = SettingsConfigDict(env_prefix="HUBITAT_HUB_", env_file=".env", extra="ignore")

    host: Optional[str] = Field(default=None, description="Hub IP address or hostname")
    app_id: Optional[str] = Field(default=None, description="Maker API app ID")
    access_token: Optional[str] = Field(default=None, description="Maker API access token")
    request_timeout: float = Field(default=10.0, gt=0, description="HTTP request timeout in seconds")

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.app_id and self.access_token)


class SyncConfig(BaseSettings):
    """State synchronisation timing."""

    model_config = SettingsConfigDict(env_prefix="HUBITAT_SYNC_", env_file=".env", extra="ignore")

    cooldown_ms: int = Field(
        default=2000, ge=0,
        description="Ignore observations for a capability this long after commanding it",
    )
    poll_interval_seconds: float = Field(
        default=30.0, gt=0,
        description="Seconds between periodic polls (webhooks provide real-time updates)",
    )
    repoll_delay_ms: int = Field(
        default=500, ge=0,
        description="Delay before re-polling a device after a successful command",
    )
    debounce_ms: int = Field(
        default=100, ge=0,
        description="Coalescing window for slider-style writes (hue/saturation)",
    )
    fan_speed_tolerance: float = Field(
        default=0.05, ge=0, le=1,
        description="Minimum fan speed change applied from an observation",
    )


class Settings(BaseSettings):
    """Application-wide settings."""

    model_config = SettingsConfigDict(
        env_prefix="HUBITAT_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    server_host: str = Field(default="0.0.0.0", description="Bind address for the webhook server")
    server_port: int = Field(default=8000, description="Port for the webhook server")

    hub: HubitatConfig = Field(default_factory=HubitatConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)


# Singleton settings instance
settings = Settings()
