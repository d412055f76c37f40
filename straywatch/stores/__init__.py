"""Shared client-side state stores."""

from straywatch.stores.auth import AuthState, AuthStore, get_auth_store
from straywatch.stores.base import Store
from straywatch.stores.ui import UIState, UIStore, get_ui_store

__all__ = [
    "Store",
    "AuthState",
    "AuthStore",
    "get_auth_store",
    "UIState",
    "UIStore",
    "get_ui_store",
]
