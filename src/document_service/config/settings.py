"""
Document Service Settings

Configuration management using Pydantic settings with environment variable support.
"""

from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Document portal configuration"""

    # Service Configuration
    service_name: str = Field(default="ouderschap-document-service", description="Service name")
    environment: str = Field(default="development", description="Environment (development, production)")
    port: int = Field(default=8005, description="Service port")
    host: str = Field(default="0.0.0.0", description="Service host")

    # Database Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./ouderschap_documents.db",
        description="Database connection URL"
    )

    # User session (set by the API gateway after session validation)
    # SKIP_AUTH must never be enabled outside local development
    skip_auth: bool = Field(default=False, description="Bypass user session check (development only)")
    dev_user_id: int = Field(default=1, description="User ID used when skip_auth is enabled")

    # Guest access
    guest_token_expiry_days: int = Field(default=30, description="Default guest token lifetime in days")
    guest_token_max_expiry_days: int = Field(default=365, description="Maximum guest token lifetime in days")
    guest_portal_url: str = Field(
        default="https://i-docx.nl",
        description="Base URL of the guest portal frontend"
    )

    # Documents
    # NOTE: STORAGE_PROVIDER and provider credentials are read directly by
    # infrastructure/storage/factory.py via os.getenv()
    download_url_expiry_minutes: int = Field(default=15, description="Lifetime of download URLs")
    category_cache_ttl_seconds: int = Field(default=300, description="Document category cache TTL")

    # Audit log pagination
    default_page_size: int = Field(default=50, description="Default page size")
    max_page_size: int = Field(default=100, description="Maximum page size")

    # CORS Configuration
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def guest_access_url(self, plain_token: str) -> str:
        """Build the guest portal link for a freshly issued token"""
        return f"{self.guest_portal_url.rstrip('/')}/documenten/toegang?token={plain_token}"


# Global settings instance
settings = Settings()
