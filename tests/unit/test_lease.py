"""Tests for the per-room generation lease."""

from unittest.mock import MagicMock

from tests.support import FakeClock
from tripsync.generation.lease import (
    LEASE_PREFIX,
    InMemoryLeaseStore,
    RedisLeaseStore,
    lease_key,
)


def test_lease_key() -> None:
    """Test lease keys are namespaced per room."""
    assert lease_key(42) == "trip:create:lock:42"
    assert lease_key(42).startswith(LEASE_PREFIX)


class TestInMemoryLeaseStore:
    """In-process lease semantics."""

    def test_acquire_is_exclusive(self) -> None:
        """Test a held lease cannot be acquired again."""
        store = InMemoryLeaseStore()

        token = store.acquire("k", "WAITING", 600)

        assert token is not None
        assert store.acquire("k", "WAITING", 600) is None
        assert store.get("k") == "WAITING"

    def test_lease_expires(self) -> None:
        """Test an expired lease disappears and can be re-acquired."""
        clock = FakeClock()
        store = InMemoryLeaseStore(clock=clock)
        store.acquire("k", "WAITING", 600)

        clock.now += 601

        assert store.get("k") is None
        assert store.acquire("k", "WAITING", 600) is not None

    def test_renew_changes_state_and_ttl(self) -> None:
        """Test the owner can move the lease to RUNNING with a longer TTL."""
        clock = FakeClock()
        store = InMemoryLeaseStore(clock=clock)
        token = store.acquire("k", "WAITING", 600)
        assert token is not None

        assert store.renew("k", token, "RUNNING", 900) is True
        clock.now += 800

        assert store.get("k") == "RUNNING"

    def test_only_owner_can_renew_or_release(self) -> None:
        """Test a stale token cannot touch a newer holder's lease."""
        clock = FakeClock()
        store = InMemoryLeaseStore(clock=clock)
        stale = store.acquire("k", "WAITING", 10)
        assert stale is not None
        clock.now += 11
        fresh = store.acquire("k", "WAITING", 600)
        assert fresh is not None

        assert store.renew("k", stale, "RUNNING", 900) is False
        assert store.release("k", stale) is False
        assert store.get("k") == "WAITING"
        assert store.release("k", fresh) is True
        assert store.get("k") is None

    def test_active_keys(self) -> None:
        """Test listing live leases under a prefix."""
        clock = FakeClock()
        store = InMemoryLeaseStore(clock=clock)
        store.acquire(lease_key(2), "WAITING", 600)
        store.acquire(lease_key(1), "RUNNING", 10)
        store.acquire("other:key", "WAITING", 600)

        assert store.active_keys() == [lease_key(1), lease_key(2)]
        clock.now += 11
        assert store.active_keys() == [lease_key(2)]


class TestRedisLeaseStore:
    """Redis lease store command usage."""

    def _store(self) -> tuple[RedisLeaseStore, MagicMock, MagicMock, MagicMock]:
        client = MagicMock()
        renew_script = MagicMock(name="renew")
        release_script = MagicMock(name="release")
        client.register_script.side_effect = [renew_script, release_script]
        return RedisLeaseStore(client), client, renew_script, release_script

    def test_acquire_uses_set_nx_ex(self) -> None:
        """Test acquire is a single SET NX EX."""
        store, client, _, _ = self._store()
        client.set.return_value = True

        token = store.acquire("trip:create:lock:1", "WAITING", 600)

        assert token is not None
        client.set.assert_called_once_with(
            "trip:create:lock:1", f"WAITING|{token}", nx=True, ex=600
        )

    def test_acquire_conflict(self) -> None:
        """Test a failed SET NX means the lease is held."""
        store, client, _, _ = self._store()
        client.set.return_value = None

        assert store.acquire("trip:create:lock:1", "WAITING", 600) is None

    def test_get_decodes_state(self) -> None:
        """Test the state is the part before the token."""
        store, client, _, _ = self._store()
        client.get.side_effect = [b"RUNNING|abc", None]

        assert store.get("k") == "RUNNING"
        assert store.get("k") is None

    def test_renew_and_release_run_scripts(self) -> None:
        """Test renew and release are compare-and-set scripts keyed by token."""
        store, _, renew_script, release_script = self._store()
        renew_script.return_value = 1
        release_script.return_value = 0

        assert store.renew("k", "tok", "RUNNING", 900) is True
        renew_script.assert_called_once_with(keys=["k"], args=["tok", "RUNNING|tok", 900])
        assert store.release("k", "tok") is False
        release_script.assert_called_once_with(keys=["k"], args=["tok"])

    def test_active_keys_scans_prefix(self) -> None:
        """Test active leases are found with SCAN."""
        store, client, _, _ = self._store()
        client.scan_iter.return_value = iter([b"trip:create:lock:2", "trip:create:lock:1"])

        assert store.active_keys() == ["trip:create:lock:1", "trip:create:lock:2"]
        client.scan_iter.assert_called_once_with(match="trip:create:lock:*")
