"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # Cognito user pool - issues the identity tokens used by the web UI
    cognito_region: str = Field(default="us-east-1", validation_alias="COGNITO_REGION")
    cognito_user_pool_id: str = Field(default="", validation_alias="USER_POOL_ID")
    cognito_client_id: str = Field(default="", validation_alias="USER_POOL_CLIENT_ID")
    jwks_cache_seconds: int = Field(default=3600, validation_alias="JWKS_CACHE_SECONDS")

    # OpenWeatherMap
    openweather_api_key: str = Field(default="", validation_alias="OPENWEATHER_API_KEY")
    openweather_base_url: str = Field(
        default="https://api.openweathermap.org/data/2.5",
        validation_alias="OPENWEATHER_BASE_URL",
    )
    openweather_timeout: float = Field(default=10.0, validation_alias="OPENWEATHER_TIMEOUT")

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def cognito_issuer(self) -> str:
        """Get the Cognito user pool issuer URL."""
        return (
            f"https://cognito-idp.{self.cognito_region}.amazonaws.com/"
            f"{self.cognito_user_pool_id}"
        )

    @property
    def cognito_jwks_url(self) -> str:
        """Get the Cognito JWKS URL for fetching public keys."""
        return f"{self.cognito_issuer}/.well-known/jwks.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
