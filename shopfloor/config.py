from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    debug: bool = Field(default=False)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # SQL Server (one instance, one database per partition)
    db_server: str = Field(default="localhost")  # "host" or "host,port"
    db_port: int | None = Field(default=None)
    db_user: str = Field(default="")
    db_password: str = Field(default="")
    db_name: str = Field(default="")  # Legacy single-database name
    db_name_kol: str = Field(default="")
    db_name_ahm: str = Field(default="")
    db_odbc_driver: str = Field(default="ODBC Driver 18 for SQL Server")
    db_pool_size: int = Field(default=10)

    # Procedure execution
    sync_procedure_timeout_seconds: float = Field(default=300.0)
    job_execution_timeout_seconds: float | None = Field(default=None)  # None = wait forever

    # Background jobs
    job_retention_seconds: float = Field(default=300.0)
    job_sweep_interval_seconds: int = Field(default=60)
    scheduler_enabled: bool = Field(default=True)

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)  # One JSON object per line on stderr

    # Rate limiting
    login_rate_limit: str = Field(default="30/minute")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
