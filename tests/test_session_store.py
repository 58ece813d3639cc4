"""
Tests for the session store, session objects and the background sweeper.
"""
import threading
import time
from unittest.mock import Mock

import pytest

from erp_intent.interaction import CrudAction
from erp_intent.memory import PendingResolution, SessionStore, SessionSweeper, new_session_id
from erp_intent.resolution import Payload


@pytest.fixture
def pending(demo_catalog):
    endpoint = demo_catalog.get_by_id(201)
    return PendingResolution(
        module="VENTAS",
        action=CrudAction.CREATE,
        endpoint=endpoint,
        payload=Payload.empty_for(endpoint),
        confidence=0.5,
        erp_id="demo",
    )


class TestSession:
    """Tests for Session derived state."""

    def test_missing_parameters_derived_from_payload(self, store, pending):
        """Test missing parameters follow the payload."""
        session = store.create(pending)
        assert [p.param for p in session.missing_parameters] == ["nombre"]
        assert not session.is_complete()

        endpoint = pending.endpoint
        session.update_payload(session.pending.payload.with_values(endpoint, {"nombre": "ACME"}))
        assert session.missing_parameters == []
        assert session.is_complete()
        assert session.pending.payload.to_dict()["nombre"] == "ACME"


class TestSessionStore:
    """Tests for SessionStore."""

    def test_session_ids_are_prefixed_and_unique(self, store, pending):
        """Test generated ids carry the prefix and never collide."""
        ids = {store.create(pending).id for _ in range(50)}
        assert len(ids) == 50
        assert all(i.startswith("sess_") for i in ids)
        assert new_session_id().startswith("sess_")

    def test_id_collision_retries(self, clock, pending):
        """Test an id already in use is regenerated."""
        factory = Mock(side_effect=["sess_a", "sess_a", "sess_b"])
        store = SessionStore(clock=clock, id_factory=factory)
        assert store.create(pending).id == "sess_a"
        assert store.create(pending).id == "sess_b"

    def test_get_and_delete(self, store, pending):
        """Test basic lookup and removal."""
        session = store.create(pending)
        assert store.get(session.id) is session
        assert store.delete(session.id) is True
        assert store.get(session.id) is None
        assert store.delete(session.id) is False

    def test_unknown_id_yields_none(self, store):
        """Test unknown and missing ids yield None."""
        with store.lock_session("sess_missing") as session:
            assert session is None
        with store.lock_session(None) as session:
            assert session is None

    def test_ttl_expiry(self, store, pending, clock):
        """Test sessions expire exactly at the TTL and are removed on access."""
        session = store.create(pending)
        clock.advance(store.ttl_seconds - 1)
        assert store.get(session.id) is session
        clock.advance(1)
        assert store.get(session.id) is None
        assert session.id not in store

    def test_ttl_not_refreshed_by_access(self, store, pending, clock):
        """Test reading a session does not extend its lifetime."""
        session = store.create(pending)
        for _ in range(3):
            clock.advance(store.ttl_seconds / 3 - 1)
            assert store.get(session.id) is session
        clock.advance(10)
        assert store.get(session.id) is None

    def test_sweep_removes_only_expired(self, store, pending, clock):
        """Test sweep removes expired sessions and keeps live ones."""
        old = store.create(pending)
        clock.advance(store.ttl_seconds - 10)
        young = store.create(pending)
        clock.advance(10)
        assert store.sweep() == 1
        assert old.id not in store
        assert young.id in store
        assert store.sweep() == 0

    def test_discard_inside_lock(self, store, pending):
        """Test a session can be removed while its lock is held."""
        session = store.create(pending)
        with store.lock_session(session.id) as locked:
            assert store.discard(locked) is True
        assert len(store) == 0
        with store.lock_session(session.id) as locked:
            assert locked is None

    def test_waiter_sees_removed_session_as_none(self, store, pending):
        """Test a follow-up blocked on a session that gets completed sees None."""
        session = store.create(pending)
        entered = threading.Event()
        seen = []

        def waiter():
            entered.wait()
            with store.lock_session(session.id) as locked:
                seen.append(locked)

        thread = threading.Thread(target=waiter)
        thread.start()
        with store.lock_session(session.id) as locked:
            entered.set()
            time.sleep(0.05)
            store.discard(locked)
        thread.join(timeout=5)
        assert seen == [None]

    def test_sweep_waits_for_holder(self, store, pending, clock):
        """Test sweep never removes a session while a follow-up holds it."""
        session = store.create(pending)
        clock.advance(store.ttl_seconds + 1)
        swept = []

        with store.lock_session(session.id) as locked:
            # Expired on entry, so the store already removed it
            assert locked is None

        session = store.create(pending)
        with store.lock_session(session.id) as locked:
            assert locked is session
            clock.advance(store.ttl_seconds + 1)
            thread = threading.Thread(target=lambda: swept.append(store.sweep()))
            thread.start()
            time.sleep(0.05)
            assert session.id in store
        thread.join(timeout=5)
        assert swept == [1]
        assert session.id not in store

    def test_invalid_ttl(self):
        """Test TTL must be positive."""
        with pytest.raises(ValueError):
            SessionStore(ttl_seconds=0)

    def test_clear(self, store, pending):
        """Test clear removes every session."""
        store.create(pending)
        store.create(pending)
        store.clear()
        assert len(store) == 0
        assert store.session_ids() == []


class TestSessionSweeper:
    """Tests for SessionSweeper."""

    def test_start_and_stop(self, store):
        """Test the sweeper thread lifecycle."""
        sweeper = SessionSweeper(store, interval_seconds=60)
        sweeper.start()
        assert sweeper.is_running
        sweeper.start()
        assert sweeper.is_running
        sweeper.stop()
        assert not sweeper.is_running

    def test_sweeps_periodically(self, store, pending, clock):
        """Test expired sessions are removed by the background thread."""
        session = store.create(pending)
        clock.advance(store.ttl_seconds + 1)
        sweeper = SessionSweeper(store, interval_seconds=0.01)
        sweeper.start()
        try:
            deadline = time.monotonic() + 5
            while session.id in store and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            sweeper.stop()
        assert session.id not in store

    def test_sweep_failure_keeps_thread_alive(self):
        """Test an exception in a sweep does not kill the sweeper."""
        store = Mock()
        calls = threading.Event()

        def failing_sweep():
            calls.set()
            raise RuntimeError("boom")

        store.sweep.side_effect = failing_sweep
        sweeper = SessionSweeper(store, interval_seconds=0.01)
        sweeper.start()
        try:
            assert calls.wait(5)
            time.sleep(0.05)
            assert sweeper.is_running
            assert store.sweep.call_count >= 2
        finally:
            sweeper.stop()

    def test_invalid_interval(self, store):
        """Test interval must be positive."""
        with pytest.raises(ValueError):
            SessionSweeper(store, interval_seconds=0)
