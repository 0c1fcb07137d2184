"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: Optional[str] = Field(
        None,
        description="Supabase project URL"
    )
    supabase_key: Optional[str] = Field(
        None,
        description="Supabase anon/service key"
    )
    products_table: str = Field(
        default="products",
        min_length=1,
        description="Table holding one row per product SKU"
    )

    # ===================
    # GEMINI
    # ===================
    gemini_image_api_key: Optional[str] = Field(
        None,
        description="API key used for image generation calls"
    )
    gemini_text_api_key: Optional[str] = Field(
        None,
        description="API key used for text generation calls"
    )
    gemini_image_model: str = Field(
        default="gemini-2.5-flash-image",
        description="Model for edits, filters and adjustments"
    )
    gemini_text_model: str = Field(
        default="gemini-2.5-flash",
        description="Model for descriptions and meta text"
    )

    # ===================
    # OBJECT STORAGE
    # ===================
    storage_bucket: Optional[str] = Field(
        None,
        description="Bucket receiving product images"
    )
    storage_endpoint_url: Optional[str] = Field(
        None,
        description="S3-compatible endpoint (leave empty for AWS)"
    )
    storage_region: str = Field(
        default="us-east-1",
        description="Storage region"
    )
    storage_access_key_id: Optional[str] = Field(
        None,
        description="Storage access key"
    )
    storage_secret_access_key: Optional[str] = Field(
        None,
        description="Storage secret key"
    )
    cdn_base_url: str = Field(
        default="https://cdn.example.com/images",
        description="Public base URL in front of the bucket"
    )

    # ===================
    # EDITOR CLIENT
    # ===================
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Where the editor sends save requests"
    )
    api_timeout_seconds: int = Field(
        default=60,
        ge=1,
        le=600,
        description="Timeout for editor -> API requests"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        description="Origins allowed to call the API"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def database_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def storage_configured(self) -> bool:
        return bool(self.storage_bucket)

    @property
    def gemini_configured(self) -> bool:
        """Both keys are required; image and text calls use separate quotas."""
        return bool(self.gemini_image_api_key and self.gemini_text_api_key)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
