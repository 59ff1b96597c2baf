"""
Database connection management.

Provides the Supabase client singleton and the tenant-scoping helper
shared by every service that reads tenant data.
"""

from supabase import create_client, Client
from functools import lru_cache
from typing import Optional
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


class DatabaseError(Exception):
    """Base exception for database errors."""
    pass


class ConnectionError(DatabaseError):
    """Failed to connect to database."""
    pass


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        ConnectionError: If connection fails
    """
    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        logger.info("supabase_connected", status="success")

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ConnectionError(f"Failed to connect to Supabase: {e}") from e


def scope_to_tenant(query, tenant_id: Optional[str]):
    """
    Restrict a query builder to one tenant.

    A tenant_id of None selects the global dataset (rows whose tenant_id
    IS NULL), never "all tenants".
    """
    if tenant_id is None:
        return query.is_("tenant_id", "null")
    return query.eq("tenant_id", tenant_id)


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check database connection health.

    Returns:
        dict: Connection status with details
    """
    try:
        client = get_supabase_client()

        products = client.table("products").select("id", count="exact").limit(1).execute()
        uploads = client.table("upload_history").select("id", count="exact").limit(1).execute()

        return {
            "status": "healthy",
            "products_count": products.count,
            "uploads_count": uploads.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }

