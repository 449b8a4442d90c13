"""Shared Supabase client.

The document store, auth provider and object storage all wrap this one
client. It authenticates with the project's secret key, so row level
security does not apply; callers authorize requests before touching it.
"""

import logging
from functools import lru_cache
from typing import Any

from supabase import Client, create_client

from src.core.config import get_settings

logger = logging.getLogger(__name__)

PROBE_TABLE = "businesses"


@lru_cache
def get_supabase_client() -> Client:
    """Return the process-wide Supabase client, creating it on first use."""
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_secret_key)


async def check_database_connection() -> dict[str, Any]:
    """Probe the database with a one-row read of the directory table.

    Returns:
        dict: ``healthy`` and, on failure, the ``error`` text.
    """
    try:
        get_supabase_client().table(PROBE_TABLE).select("id").limit(1).execute()
    except Exception as e:
        logger.warning("Database probe failed: %s", e)
        return {"healthy": False, "error": str(e)}
    return {"healthy": True}
