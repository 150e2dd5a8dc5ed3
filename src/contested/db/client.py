"""
Contested - Supabase Client.

Supabase is optional; callers check for None and fall back to memory.
"""

from supabase import Client, create_client

from contested.config import settings

# Singleton client instance
_client: Client | None = None


def get_client() -> Client | None:
    """
    Get the Supabase client, or None when Supabase is not configured.

    Uses singleton pattern to reuse connection.
    """
    global _client

    if not settings.supabase_configured:
        return None

    if _client is None:
        _client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _client
