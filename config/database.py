"""
Store client construction.

The Supabase client is built once at application startup and handed to
services explicitly; nothing here caches a module-level connection.
"""

from supabase import create_client, Client
from typing import Optional
import structlog

from config.settings import Settings, settings as default_settings
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


def create_supabase_client(config: Optional[Settings] = None) -> Client:
    """
    Build a Supabase client from settings.

    Args:
        config: Settings to use (defaults to the loaded application settings)

    Returns:
        Client: Supabase client

    Raises:
        DatabaseError: If the client cannot be created
    """
    config = config or default_settings

    try:
        logger.info(
            "connecting_to_supabase",
            url=config.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            config.supabase_url,
            config.supabase_key
        )

        logger.info("supabase_client_created")

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise DatabaseError("connect", str(e)) from e


def create_admin_client(config: Optional[Settings] = None) -> Optional[Client]:
    """
    Build a Supabase client with the service role key.

    Only available if SUPABASE_SERVICE_KEY is configured.

    Returns:
        Client: Admin Supabase client, or None if not configured
    """
    config = config or default_settings

    if not config.supabase_service_key:
        logger.warning("admin_client_not_configured")
        return None

    try:
        return create_client(
            config.supabase_url,
            config.supabase_service_key
        )
    except Exception as e:
        logger.error(
            "admin_client_failed",
            error=str(e)
        )
        return None


def check_connection(client: Client, table: Optional[str] = None) -> dict:
    """
    Check store connection health.

    Args:
        client: Supabase client to check
        table: Table to count (defaults to the products table)

    Returns:
        dict: Connection status with details
    """
    table = table or default_settings.products_table

    try:
        products = client.table(table).select("id", count="exact").execute()

        return {
            "status": "healthy",
            "products_count": products.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }
