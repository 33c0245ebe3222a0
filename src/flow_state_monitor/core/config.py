"""Application configuration."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Allow extra env vars without error
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_prefix: str = Field(default="/api/v1", description="API prefix")

    # Telemetry store (ThingSpeak-compatible time-series API)
    telemetry_base_url: str = Field(
        default="https://api.thingspeak.com",
        description="Base URL of the telemetry time-series API",
    )
    telemetry_channel_id: str = Field(default="", description="Telemetry channel identifier")
    telemetry_write_key: str | None = Field(
        default=None,
        description="Write API key used by the sensing node",
    )
    telemetry_read_key: str | None = Field(
        default=None,
        description="Read API key used by the forecast task",
    )
    telemetry_timeout_seconds: float = Field(
        default=10.0,
        description="HTTP timeout for telemetry requests (seconds)",
    )

    # Forecast settings
    forecast_enabled: bool = Field(
        default=True,
        description="Enable the periodic forecast task",
    )
    forecast_interval_minutes: int = Field(
        default=60,
        description="How often to run the forecast (minutes)",
    )
    forecast_on_startup: bool = Field(
        default=True,
        description="Run a forecast immediately on startup",
    )
    history_days: int = Field(
        default=7,
        description="How many days of history to analyse",
    )
    history_results: int | None = Field(
        default=None,
        description="Max rows per history query (None = history_days at 5-minute cadence)",
    )
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used to bin records by day-of-week and hour",
    )

    # Sensing node
    node_enabled: bool = Field(
        default=False,
        description="Run the sensing node inside the server process",
    )
    acquisition_interval_ms: int = Field(default=100, description="Acquisition tick period")
    display_interval_ms: int = Field(default=500, description="Display tick period")
    indicator_interval_ms: int = Field(default=100, description="Indicator tick period")
    diagnostic_interval_ms: int = Field(default=5000, description="Diagnostic tick period")
    upload_interval_ms: int = Field(default=8000, description="Telemetry upload tick period")
    noise_window_ms: int = Field(
        default=50,
        description="Peak-to-peak capture window for the noise channel (ms)",
    )
    noise_reference: float = Field(
        default=1.0,
        description="Peak-to-peak count that maps to noise_floor_db",
    )
    noise_floor_db: float = Field(
        default=20.0,
        description="dB level reported at the reference peak-to-peak amplitude",
    )
    noise_smoothing: float = Field(
        default=0.2,
        description="Exponential smoothing factor for the noise level (0-1)",
    )
    finger_threshold: int = Field(
        default=50000,
        description="Optical intensity above which a finger is considered present",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )

    def history_query_size(self) -> int:
        """Number of rows to request for the history window.

        Defaults to one row every five minutes over ``history_days``.
        """
        if self.history_results is not None:
            return self.history_results
        return self.history_days * 24 * 60 // 5


# Global settings instance
settings = Settings()
