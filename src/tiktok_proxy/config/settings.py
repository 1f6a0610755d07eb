"""Configuration management using Pydantic Settings.

Loads configuration from environment variables with .env file support.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration."""

    # TikTok Shop upstream hosts (sandbox or production)
    api_host: str = "https://open-api.tiktokglobalshop.com"
    auth_host: str = "https://auth.tiktok-shops.com"

    # Signed request configuration
    # Subtracted from the local clock; 320 compensated the drift seen in production
    clock_skew_seconds: int = 0
    request_timeout: float = 30.0

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    environment: str = "development"

    # Credential persistence
    credentials_file: str = "config/tiktok_credentials.json"

    # Document merge service (waybill PDFs)
    merge_service_url: Optional[str] = None
    merge_service_key: Optional[str] = None

    # Bulk operations
    bulk_action_delay_seconds: float = 0.5

    # GlitchTip Error Monitoring
    glitchtip_dsn: Optional[str] = None

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Create a global settings instance
settings = Settings()
