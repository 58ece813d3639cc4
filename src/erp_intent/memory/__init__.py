"""
Session memory: pending multi-turn exchanges with a bounded TTL.
"""
from .session import PendingResolution, Session
from .session_store import SESSION_ID_PREFIX, SessionStore, new_session_id
from .session_sweeper import SessionSweeper

__all__ = [
    "PendingResolution",
    "Session",
    "SESSION_ID_PREFIX",
    "SessionStore",
    "new_session_id",
    "SessionSweeper",
]
