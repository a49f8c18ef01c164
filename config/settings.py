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
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # STORE LAYOUT
    # ===================
    products_table: str = Field(
        default="product",
        description="Table holding product rows"
    )
    images_bucket: str = Field(
        default="productsimgs",
        description="Storage bucket for product images"
    )
    sheets_bucket: str = Field(
        default="sheets",
        description="Storage bucket for uploaded workbooks"
    )

    # ===================
    # PRODUCTS
    # ===================
    products_page_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Products shown per page"
    )

    # ===================
    # SHEETS
    # ===================
    public_app_url: str = Field(
        default="http://localhost:3000",
        description="Dashboard origin used to build shareable viewer links"
    )
    fetch_timeout_seconds: float = Field(
        default=30,
        gt=0,
        le=300,
        description="Timeout for fetching a stored workbook"
    )
    sheets_list_limit: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Maximum number of stored sheets fetched per listing"
    )
    sheets_page_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Sheets shown per page"
    )

    # ===================
    # IMAGE UPLOADS
    # ===================
    upload_max_workers: int = Field(
        default=4,
        ge=1,
        le=16,
        description="Concurrent uploads per image batch"
    )
    failed_upload_policy: str = Field(
        default="keep",
        pattern="^(keep|cleanup)$",
        description="What to do with already-uploaded images when a batch fails"
    )
    delete_product_images: bool = Field(
        default=False,
        description="Remove a product's images from storage when the product is deleted"
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

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def cleanup_failed_uploads(self) -> bool:
        """Check if partial uploads are removed when a batch fails."""
        return self.failed_upload_policy == "cleanup"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
