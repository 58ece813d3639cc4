"""
In-memory, TTL-bounded session store.

Each entry carries its own lock so unrelated sessions never serialize
against each other; a short table lock only guards membership. Lock order
is always entry lock before table lock.
"""
import logging
import threading
import time
import uuid
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from .session import PendingResolution, Session

logger = logging.getLogger(__name__)

SESSION_ID_PREFIX = "sess_"
DEFAULT_TTL_SECONDS = 15 * 60


def new_session_id() -> str:
    return f"{SESSION_ID_PREFIX}{uuid.uuid4().hex}"


class _Entry:
    __slots__ = ("session", "lock", "removed")

    def __init__(self, session: Session):
        self.session = session
        self.lock = threading.Lock()
        self.removed = False


class SessionStore:
    """
    Owns every pending session.

    Usage:
        with store.lock_session(session_id) as session:
            if session is None:
                ...  # unknown or expired: treat as fresh
            session.update_payload(payload)
            if session.is_complete():
                store.discard(session)
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        id_factory: Callable[[], str] = new_session_id,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._id_factory = id_factory
        self._entries: Dict[str, _Entry] = {}
        self._table_lock = threading.Lock()

    def create(self, pending: PendingResolution, caller_context: Any = None) -> Session:
        """
        Open a session for a pending resolution.

        :return: The stored Session (with its new id)
        """
        with self._table_lock:
            session_id = self._id_factory()
            while session_id in self._entries:
                session_id = self._id_factory()
            session = Session(
                id=session_id,
                pending=pending,
                caller_context=caller_context,
                created_at=self._clock(),
            )
            self._entries[session_id] = _Entry(session)

        logger.info(f"Opened session {session_id} for {pending.endpoint.route}")
        return session

    @contextmanager
    def lock_session(self, session_id: Optional[str]) -> Iterator[Optional[Session]]:
        """
        Hold a session's lock for a read-modify-write.

        Yields None when the id is unknown, already removed, or expired.
        Expired sessions found here are removed.
        """
        entry = self._lookup(session_id)
        if entry is None:
            yield None
            return

        with entry.lock:
            if entry.removed:
                yield None
                return
            if self.is_expired(entry.session):
                self._remove_locked(entry, reason="expired")
                yield None
                return
            yield entry.session

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        """Current session for an id, or None if unknown or expired."""
        with self.lock_session(session_id) as session:
            return session

    def delete(self, session_id: str) -> bool:
        """Remove a session. Must not be called while holding its lock."""
        entry = self._lookup(session_id)
        if entry is None:
            return False
        with entry.lock:
            return self._remove_locked(entry, reason="deleted")

    def discard(self, session: Session) -> bool:
        """
        Remove a session from inside ``lock_session``.

        :param session: The session yielded by ``lock_session``
        """
        entry = self._lookup(session.id)
        if entry is None or entry.session is not session:
            return False
        return self._remove_locked(entry, reason="completed")

    def is_expired(self, session: Session, now: Optional[float] = None) -> bool:
        """TTL is measured from creation and never refreshed."""
        now = self._clock() if now is None else now
        return now - session.created_at >= self.ttl_seconds

    def sweep(self) -> int:
        """
        Remove every expired session.

        Takes each entry's lock before removing it, so a follow-up in
        progress always finishes before its session can be swept.

        :return: Number of sessions removed
        """
        with self._table_lock:
            entries = list(self._entries.values())

        removed = 0
        for entry in entries:
            with entry.lock:
                if not entry.removed and self.is_expired(entry.session):
                    if self._remove_locked(entry, reason="expired"):
                        removed += 1
        if removed:
            logger.info(f"Swept {removed} expired session(s)")
        return removed

    def session_ids(self) -> List[str]:
        with self._table_lock:
            return list(self._entries.keys())

    def clear(self) -> None:
        with self._table_lock:
            for entry in self._entries.values():
                entry.removed = True
            self._entries.clear()

    def __len__(self) -> int:
        with self._table_lock:
            return len(self._entries)

    def __contains__(self, session_id: str) -> bool:
        with self._table_lock:
            return session_id in self._entries

    def _lookup(self, session_id: Optional[str]) -> Optional[_Entry]:
        if not session_id:
            return None
        with self._table_lock:
            return self._entries.get(session_id)

    def _remove_locked(self, entry: _Entry, reason: str) -> bool:
        # Caller holds entry.lock
        if entry.removed:
            return False
        entry.removed = True
        with self._table_lock:
            if self._entries.get(entry.session.id) is entry:
                del self._entries[entry.session.id]
        logger.debug(f"Session {entry.session.id} {reason}")
        return True
