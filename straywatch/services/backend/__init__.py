"""
Backend collaborator abstraction layer.

Provides a unified interface to the service that owns authentication and
report persistence.

Example usage:
    from straywatch.services.backend import get_backend

    backend = get_backend()
    session = await backend.sign_in("me@example.com", "secret123")
    reports = await backend.select_reports(owner_id=session.user.id)
"""

from .base import AuthListener, ReportBackend
from .factory import clear_backend_cache, close_backend, get_backend
from .supabase import SupabaseBackend

__all__ = [
    # Base classes
    "ReportBackend",
    "AuthListener",
    # Implementations
    "SupabaseBackend",
    # Factory functions
    "get_backend",
    "close_backend",
    "clear_backend_cache",
]
