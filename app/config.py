"""Application configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


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
    app_name: str = Field(default="Arogyam API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    api_prefix: str = Field(default="/api", alias="API_PREFIX")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=4000, alias="PORT")
    reload: bool = Field(default=False, alias="RELOAD")

    # Database
    database_url: str = Field(..., alias="DATABASE_URL")

    # Redis
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_username: str = Field(default="default", alias="REDIS_USERNAME")
    redis_password: str = Field(default="", alias="REDIS_PASSWORD")

    # JWT
    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_days: int = Field(default=7, alias="REFRESH_TOKEN_EXPIRE_DAYS")
    refresh_cookie_name: str = Field(default="refresh_token", alias="REFRESH_COOKIE_NAME")

    # Seeded consultant account (replaces env-only login)
    consultant_email: str | None = Field(default=None, alias="CONSULTANT_EMAIL")
    consultant_password: str | None = Field(default=None, alias="CONSULTANT_PASSWORD")

    # Reminders
    reminder_schedule: str = Field(
        default="24h before,1h before,10m before",
        alias="REMINDER_SCHEDULE",
        description="Comma separated lead times, e.g. '24h before,10m before'",
    )
    reminder_interval_seconds: int = Field(default=60, alias="REMINDER_INTERVAL_SECONDS")
    reminders_enabled: bool = Field(default=True, alias="REMINDERS_ENABLED")

    # Availability
    availability_timezone: str = Field(default="UTC", alias="AVAILABILITY_TIMEZONE")

    # Mail
    smtp_host: str = Field(default="", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: str = Field(default="", alias="SMTP_USERNAME")
    smtp_password: str = Field(default="", alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")
    email_from: str = Field(default="no-reply@arogyam.com", alias="EMAIL_FROM")

    # Video
    video_provider: str = Field(default="", alias="VIDEO_PROVIDER")
    daily_api_key: str = Field(default="", alias="DAILY_API_KEY")
    daily_api_url: str = Field(default="https://api.daily.co/v1", alias="DAILY_API_URL")
    video_base_url: str = Field(default="https://daily.co", alias="VIDEO_BASE_URL")

    # CORS
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def reminder_lead_times(self) -> list[str]:
        """Get reminder lead time entries as a list."""
        return [entry.strip() for entry in self.reminder_schedule.split(",") if entry.strip()]

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

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
