"""
Database connection management.

Builds the Supabase client used for product reads and updates. The client is
created once by the application lifespan and handed to services explicitly.
"""

from supabase import create_client, Client
from typing import Optional
import structlog

from config.settings import Settings

logger = structlog.get_logger(__name__)


class SupabaseConnectionError(Exception):
    """Failed to connect to database."""
    pass


def create_supabase_client(settings: Settings) -> Client:
    """
    Create a Supabase client and verify it can reach the products table.

    Args:
        settings: Application settings

    Returns:
        Client: Supabase client

    Raises:
        SupabaseConnectionError: If configuration is missing or connection fails
    """
    if not settings.database_configured:
        raise SupabaseConnectionError("SUPABASE_URL and SUPABASE_KEY must be set")

    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        # Test connection with simple query
        client.table(settings.products_table).select("sku").limit(1).execute()

        logger.info(
            "supabase_connected",
            table=settings.products_table
        )

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise SupabaseConnectionError(f"Failed to connect to Supabase: {e}") from e


def check_connection(client: Optional[Client], table: str) -> dict:
    """
    Check database connection health.

    Returns:
        dict: Connection status with details
    """
    if client is None:
        return {
            "status": "unhealthy",
            "error": "database client not initialised"
        }

    try:
        products = client.table(table).select("sku", count="exact").execute()

        return {
            "status": "healthy",
            "products_count": products.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }
