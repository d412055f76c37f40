"""
Session-wide test setup.

Environment variables are pinned before any straywatch import so the
cached settings never pick up a developer's real project.
"""

import os

# ── Set env vars BEFORE any straywatch.* import (handles @lru_cache on get_settings) ─
for _name in (
    "SUPABASE_URL",
    "PUBLIC_SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "PUBLIC_SUPABASE_ANON_KEY",
):
    os.environ.pop(_name, None)
os.environ["ENVIRONMENT"] = "development"
os.environ["TOAST_DURATION_SECONDS"] = "5"
os.environ["STRICT_COUNT_VALIDATION"] = "true"

# Clear lru_cache so settings picks up test env vars
from straywatch.config.settings import get_settings  # noqa: E402

get_settings.cache_clear()
