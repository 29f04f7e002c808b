"""Configuration management using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Service
    HOST: str = "localhost"
    PORT: int = 3000
    DEBUG: bool = False
    LOG_LEVEL: str = "info"
    LOG_REQUESTS: bool = True
    SERVICE_NAME: str = "Billing Bridge"

    # Security
    API_KEY: str = ""  # Empty disables the x-api-key check
    CORS_ORIGINS: str = "*"  # Comma-separated list

    # Rate Limiting (applied to /api/ only)
    RATE_LIMIT_WINDOW_SECONDS: int = 900  # 15 minutes
    RATE_LIMIT_MAX_REQUESTS: int = 100

    # Salesforce
    SALESFORCE_LOGIN_URL: str = "https://login.salesforce.com"
    SALESFORCE_USERNAME: str = ""
    SALESFORCE_PASSWORD: str = ""
    SALESFORCE_SECURITY_TOKEN: str = ""
    SALESFORCE_API_VERSION: str = "58.0"
    SALESFORCE_TIMEOUT_SECONDS: float = 30.0

    # Tool Execution
    SUMMARY_PAGE_SIZE: int = 1000
    VALIDATE_TOOL_PARAMS: bool = False

    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
