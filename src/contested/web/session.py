"""
Session service for onboarding.

Sessions are opaque ids handed to the wizard before the first step. They are
persisted to the Supabase `sessions` table when Supabase is configured; any
database failure falls back to an in-memory record so onboarding can proceed.
"""

import hashlib
import logging
import secrets
import time
from datetime import datetime, timezone
from typing import Any

from contested.db.client import get_client

logger = logging.getLogger(__name__)

SESSIONS_TABLE = "sessions"

# Fallback store used when the database is unavailable
_memory_sessions: dict[str, dict[str, Any]] = {}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_session_id(timestamp: float | None = None) -> str:
    """
    First 16 hex chars of SHA-256 over the millisecond timestamp and a random salt.

    The salt keeps ids distinct for sessions created in the same millisecond.
    """
    if timestamp is None:
        timestamp = time.time()
    millis = str(round(timestamp * 1000))
    seed = f"{millis}:{secrets.token_hex(8)}"
    return hashlib.sha256(seed.encode()).hexdigest()[:16]


def _memory_session(session_id: str) -> dict[str, Any]:
    now = _utc_now()
    session = {
        "session_id": session_id,
        "user_type": None,
        "data": {},
        "profile_completed": False,
        "created_at": now,
        "updated_at": now,
        "last_login": now,
    }
    _memory_sessions[session_id] = session
    return session


# =============================================================================
# Operations
# =============================================================================


def create_session(session_id: str | None = None) -> dict[str, Any]:
    """
    Create a session row, or an in-memory record when the DB is unavailable.

    Never raises for database problems.
    """
    session_id = session_id or create_session_id()
    client = get_client()
    if client is None:
        logger.info(f"Supabase not configured; session {session_id} kept in memory")
        return _memory_session(session_id)

    now = _utc_now()
    try:
        result = (
            client.table(SESSIONS_TABLE)
            .insert({
                "session_id": session_id,
                "data": {},
                "created_at": now,
                "updated_at": now,
                "last_login": now,
            })
            .execute()
        )
        return result.data[0]
    except Exception as e:
        logger.warning(f"Failed to create session {session_id} in DB, using memory: {e}")
        return _memory_session(session_id)


def get_session(session_id: str) -> dict[str, Any] | None:
    """Look up a session; memory records are checked first."""
    if session_id in _memory_sessions:
        return _memory_sessions[session_id]

    client = get_client()
    if client is None:
        return None

    try:
        result = (
            client.table(SESSIONS_TABLE)
            .select("*")
            .eq("session_id", session_id)
            .maybe_single()
            .execute()
        )
    except Exception as e:
        logger.warning(f"Failed to load session {session_id} from DB: {e}")
        return None

    if result is None:
        return None
    return result.data or None


def reset_session(session_id: str) -> dict[str, Any]:
    """Clear a session's data by deleting it and creating it again under the same id."""
    _memory_sessions.pop(session_id, None)

    client = get_client()
    if client is not None:
        try:
            client.table(SESSIONS_TABLE).delete().eq("session_id", session_id).execute()
        except Exception as e:
            logger.warning(f"Could not delete session {session_id}; it may not exist: {e}")

    return create_session(session_id)
