"""Configuration models for the offline sync service."""

from pydantic import BaseModel, Field, HttpUrl, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RemoteConfig(BaseModel):
    """Configuration for the remote news backend."""

    demo: bool = Field(
        default=True, description="Serve data from bundled JSON assets instead of HTTP"
    )
    base_url: HttpUrl | None = Field(default=None, description="Backend base URL")
    timeout_seconds: float = Field(
        default=30.0, gt=0.0, le=300.0, description="HTTP request timeout in seconds"
    )
    assets_dir: str | None = Field(
        default=None, description="Directory holding topics.json and news.json for demo mode"
    )
    max_retries: int = Field(
        default=3, ge=0, le=10, description="Retries per HTTP request on transient errors"
    )
    retry_base_delay: float = Field(
        default=1.0, ge=0.0, le=60.0, description="Initial HTTP retry delay in seconds"
    )
    retry_max_delay: float = Field(
        default=60.0, ge=0.0, le=600.0, description="Maximum HTTP retry delay in seconds"
    )

    @model_validator(mode="after")
    def require_base_url_outside_demo(self) -> "RemoteConfig":
        """A real backend needs a URL."""
        if not self.demo and self.base_url is None:
            raise ValueError("base_url is required when demo is false")
        return self


class StorageConfig(BaseModel):
    """Configuration for local persistence."""

    data_directory: str = Field(
        default="./data", description="Directory for version and cache JSON files"
    )
    persist: bool = Field(
        default=True, description="If False, keep versions and caches in memory only"
    )


class SyncConfig(BaseModel):
    """Configuration for sync scheduling and batching."""

    max_attempts: int = Field(
        default=3, ge=1, le=20, description="Orchestration attempts before giving up"
    )
    base_delay: float = Field(
        default=1.0, ge=0.0, le=600.0, description="Initial retry delay in seconds"
    )
    max_delay: float = Field(
        default=60.0, ge=0.0, le=3600.0, description="Maximum retry delay in seconds"
    )
    news_batch_size: int = Field(
        default=40, ge=1, le=500, description="News resource ids fetched per request"
    )


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        description="If True, output JSON logs. If False, use console format.",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional path to log file. If None, logs only to stdout.",
    )


class AppConfig(BaseSettings):
    """Main application configuration.

    Loaded from environment variables with the OFFLINE_SYNC_ prefix, e.g.
    ``OFFLINE_SYNC_REMOTE__BASE_URL`` or ``OFFLINE_SYNC_SYNC__MAX_ATTEMPTS``.
    """

    model_config = SettingsConfigDict(
        env_prefix="OFFLINE_SYNC_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
