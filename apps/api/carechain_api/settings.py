"""Application settings and configuration."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_SALT_BYTES = 16


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: Optional[str] = None
    postgres_user: str = "carechain"
    postgres_password: str = "carechain_dev_password"
    postgres_db: str = "carechain"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    # API
    api_port: int = 8000
    api_host: str = "0.0.0.0"
    environment: str = "development"
    admin_api_key: Optional[str] = None  # Required outside development

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Ledger
    hash_salt_bytes: int = MIN_SALT_BYTES

    # Access control
    default_access_level: str = "view"

    # Uploads are stubbed: records only carry a reference under this prefix
    upload_url_prefix: str = "/uploads"

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    @property
    def database_url_computed(self) -> str:
        """Compute database URL if not explicitly set."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() in ("development", "dev")

    def validate_production_settings(self):
        """Validate settings for non-development environments."""
        if self.hash_salt_bytes < MIN_SALT_BYTES:
            raise ValueError(
                f"HASH_SALT_BYTES must be at least {MIN_SALT_BYTES}, got {self.hash_salt_bytes}."
            )
        env = self.environment.lower()
        if env not in ("development", "test", "dev"):
            if self.database_url_computed.startswith("sqlite"):
                raise ValueError(
                    "SQLite is not allowed outside development and test. "
                    "Set DATABASE_URL to a PostgreSQL instance."
                )
            if not self.admin_api_key:
                raise ValueError("ADMIN_API_KEY is required outside development and test.")
            if self.postgres_password == "carechain_dev_password" and not self.database_url:
                raise ValueError(
                    "POSTGRES_PASSWORD must be changed from the development default in production."
                )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
