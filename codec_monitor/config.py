"""
Configuration for the Codec Monitor.

Provides settings for the codec connection, telemetry polling,
state reconciliation and overlay export.
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CodecSettings(BaseSettings):
    """Codec REST API connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CODEC_",
        env_file=".env",
        extra="ignore",
    )

    host: Optional[str] = Field(default=None, description="Codec IP address or hostname")
    port: int = Field(default=80, ge=1, le=65535, description="Codec HTTP port")
    username: str = Field(default="admin", description="HTTP Basic auth user")
    password: str = Field(default="", description="HTTP Basic auth password")
    timeout: float = Field(default=5.0, description="Request timeout in seconds")
    mute_channel: str = Field(default="tx", description="Default channel for mute commands")


class PollingSettings(BaseSettings):
    """Telemetry polling configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CODEC_POLLING_",
        env_file=".env",
        extra="ignore",
    )

    interval: float = Field(default=2.0, description="Poll interval (seconds)")
    min_interval: float = Field(default=0.1, description="Minimum poll interval (seconds)")
    skip_overlapping: bool = Field(
        default=True,
        description="Skip a tick while the previous poll cycle is still running",
    )


class ReconcileSettings(BaseSettings):
    """State reconciliation configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CODEC_RECONCILE_",
        env_file=".env",
        extra="ignore",
    )

    falsy_as_absent: bool = Field(
        default=False,
        description="Treat 0/false/empty values in snapshots as missing",
    )


class ExportSettings(BaseSettings):
    """Overlay export configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CODEC_EXPORT_",
        env_file=".env",
        extra="ignore",
    )

    output_path: Optional[Path] = Field(
        default=None,
        description="File the overlay JSON is written to on every tick",
    )
    indent: int = Field(default=2, description="JSON indentation")


class MonitorSettings(BaseSettings):
    """Main configuration for the Codec Monitor."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Codec Monitor")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Sub-settings
    codec: CodecSettings = Field(default_factory=CodecSettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)
    reconcile: ReconcileSettings = Field(default_factory=ReconcileSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)

    @property
    def base_url(self) -> Optional[str]:
        """Base URL of the configured codec, if a host is set."""
        if not self.codec.host:
            return None
        return f"http://{self.codec.host}:{self.codec.port}"


@lru_cache()
def get_monitor_settings() -> MonitorSettings:
    """
    Get cached monitor settings.

    Uses LRU cache to avoid re-reading environment variables on every access.
    """
    return MonitorSettings()
