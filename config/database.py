"""
Database connection management.

Provides the Supabase client singleton used by the record store
and the progress sink.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        DatabaseError: If credentials are missing or connection fails
    """
    if not settings.supabase_configured:
        logger.error("supabase_not_configured")
        raise DatabaseError("connect", "Supabase is not configured. Set SUPABASE_URL and SUPABASE_KEY.")

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
        client.table(settings.accounts_table).select("id").limit(1).execute()

        logger.info(
            "supabase_connected",
            status="success"
        )

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise DatabaseError("connect", str(e)) from e


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check database connection health.

    Returns:
        dict: Connection status with record counts
    """
    try:
        client = get_supabase_client()

        accounts = client.table(settings.accounts_table).select("id", count="exact").execute()
        subjects = client.table(settings.subjects_table).select("id", count="exact").execute()

        return {
            "status": "healthy",
            "accounts_count": accounts.count,
            "subjects_count": subjects.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }
