"""Supabase client for the dispatch backend."""

import logging

from supabase import AsyncClient, acreate_client

from ..config import settings

_client: AsyncClient | None = None


async def get_supabase_client() -> AsyncClient | None:
    """Get the shared async Supabase client.

    Returns:
        AsyncClient instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    global _client
    if _client is not None:
        return _client

    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        _client = await acreate_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None
    return _client


def reset_supabase_client() -> None:
    """Forget the shared client so the next call reconnects with current settings."""
    global _client
    _client = None
