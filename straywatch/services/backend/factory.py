"""
Factory for the process-wide backend client.

Provides a cached singleton so every store and view shares one HTTP
client and one session.
"""

from straywatch.config import get_logger, get_settings

from .base import ReportBackend
from .supabase import SupabaseBackend

logger = get_logger(__name__)

_backend: ReportBackend | None = None


def get_backend() -> ReportBackend:
    """
    Get or create the backend client from settings.

    An unconfigured backend is still returned: reads degrade to empty
    results and writes raise BackendNotConfiguredError.

    Returns:
        ReportBackend instance
    """
    global _backend

    if _backend is None:
        settings = get_settings()
        _backend = SupabaseBackend(
            url=settings.supabase_url,
            anon_key=settings.supabase_anon_key.get_secret_value(),
            timeout=settings.request_timeout_seconds,
            max_retries=settings.request_max_retries,
            backoff=settings.request_backoff_seconds,
            reports_table=settings.reports_table,
        )
        if settings.is_backend_configured:
            logger.info("Created backend client", url=settings.supabase_url)
        else:
            logger.warning(
                "Backend not configured; reads return no reports",
            )

    return _backend


async def close_backend() -> None:
    """
    Close the cached backend client.

    Should be called during application shutdown to clean up resources.
    """
    global _backend

    if _backend is not None:
        try:
            await _backend.close()
            logger.info("Closed backend client")
        except Exception as e:
            logger.error("Error closing backend client", error=str(e))
        _backend = None


def clear_backend_cache() -> None:
    """
    Drop the cached backend without closing connections.

    Primarily used for testing purposes.
    """
    global _backend
    _backend = None
