"""Application configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# A booking becomes eligible for no-show review this long after its start
DEFAULT_LOOKBACK_HOURS = 24
# The reconciliation job fires every N hours, on the hour
DEFAULT_INTERVAL_HOURS = 1


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="null",
    )

    # Application
    app_name: str = Field(default="Urology No-Show Service", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    api_v1_prefix: str = Field(default="/api/v1", alias="API_V1_PREFIX")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    reload: bool = Field(default=False, alias="RELOAD")

    # Database
    database_url: str = Field(..., alias="DATABASE_URL")
    database_pool_size: int = Field(default=5, ge=1, alias="DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(default=5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    database_pool_recycle: int = Field(default=3600, alias="DATABASE_POOL_RECYCLE")

    # Redis
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_username: str = Field(default="default", alias="REDIS_USERNAME")
    redis_password: str = Field(default="", alias="REDIS_PASSWORD")
    redis_decode_responses: bool = Field(default=True, alias="REDIS_DECODE_RESPONSES")

    # Operator endpoints
    admin_secret: str = Field(
        default="test-admin-secret-for-development-only",
        alias="ADMIN_SECRET",
        description="Secret key for triggering a manual no-show run",
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    # Clinic clock. Appointment dates and times are stored as wall-clock values
    clinic_timezone: str = Field(default="UTC", alias="CLINIC_TIMEZONE")

    # No-show reconciliation
    noshow_scheduler_enabled: bool = Field(default=True, alias="NOSHOW_SCHEDULER_ENABLED")
    noshow_run_on_startup: bool = Field(default=True, alias="NOSHOW_RUN_ON_STARTUP")
    noshow_lookback_hours: int = Field(
        default=DEFAULT_LOOKBACK_HOURS,
        ge=1,
        alias="NOSHOW_LOOKBACK_HOURS",
    )
    noshow_interval_hours: int = Field(
        default=DEFAULT_INTERVAL_HOURS,
        ge=1,
        le=24,
        alias="NOSHOW_INTERVAL_HOURS",
    )
    noshow_run_minute: int = Field(default=0, ge=0, le=59, alias="NOSHOW_RUN_MINUTE")
    noshow_run_timeout_seconds: float = Field(
        default=300,
        gt=0,
        alias="NOSHOW_RUN_TIMEOUT_SECONDS",
    )
    noshow_distributed_lock: bool = Field(default=False, alias="NOSHOW_DISTRIBUTED_LOCK")
    noshow_lock_ttl_seconds: int = Field(default=600, ge=1, alias="NOSHOW_LOCK_TTL_SECONDS")

    @property
    def async_database_url(self) -> str:
        """Get the database URL with the asyncpg driver selected."""
        return self.database_url.replace("postgresql://", "postgresql+asyncpg://")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance
settings = get_settings()
