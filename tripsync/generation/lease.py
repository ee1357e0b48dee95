"""Per-room generation lease.

A lease is a TTL-bound marker holding a state and an ownership token. Only
the holder of the token may renew or release it, so a worker whose lease
already expired cannot remove a newer holder's lease.
"""

import threading
import time
import uuid
from collections.abc import Callable
from typing import Protocol

import redis

LEASE_PREFIX = "trip:create:lock:"


def lease_key(room_id: int) -> str:
    """Lease key for a room's generation."""
    return f"{LEASE_PREFIX}{room_id}"


class LeaseStore(Protocol):
    """Protocol for lease storage."""

    def acquire(self, key: str, state: str, ttl_seconds: int) -> str | None:
        """Set the lease if absent.

        Args:
            key: Lease key
            state: State to store
            ttl_seconds: Expiry in seconds

        Returns:
            Ownership token, or None if the lease is already held
        """
        ...

    def renew(self, key: str, token: str, state: str, ttl_seconds: int) -> bool:
        """Overwrite state and TTL if ``token`` still owns the lease."""
        ...

    def get(self, key: str) -> str | None:
        """Current state, or None if no lease exists."""
        ...

    def release(self, key: str, token: str) -> bool:
        """Delete the lease if ``token`` still owns it."""
        ...

    def active_keys(self, prefix: str = LEASE_PREFIX) -> list[str]:
        """Keys of all live leases under a prefix."""
        ...


def _encode(state: str, token: str) -> str:
    return f"{state}|{token}"


def _decode(raw: str) -> tuple[str, str]:
    state, _, token = raw.partition("|")
    return state, token


# KEYS[1]=key ARGV[1]=token ARGV[2]=new value ARGV[3]=ttl
_RENEW_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if not current then return 0 end
local sep = string.find(current, '|', 1, true)
if not sep or string.sub(current, sep + 1) ~= ARGV[1] then return 0 end
redis.call('SET', KEYS[1], ARGV[2], 'EX', tonumber(ARGV[3]))
return 1
"""

# KEYS[1]=key ARGV[1]=token
_RELEASE_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if not current then return 0 end
local sep = string.find(current, '|', 1, true)
if not sep or string.sub(current, sep + 1) ~= ARGV[1] then return 0 end
return redis.call('DEL', KEYS[1])
"""


class RedisLeaseStore:
    """Redis-based lease store using SET NX EX plus Lua compare-and-set."""

    def __init__(self, redis_client: redis.Redis) -> None:
        """Initialize lease store.

        Args:
            redis_client: Redis client created with decode_responses=True
        """
        self._redis = redis_client
        self._renew = redis_client.register_script(_RENEW_SCRIPT)
        self._release = redis_client.register_script(_RELEASE_SCRIPT)

    def acquire(self, key: str, state: str, ttl_seconds: int) -> str | None:
        """Atomic set-if-absent with TTL."""
        token = uuid.uuid4().hex
        if self._redis.set(key, _encode(state, token), nx=True, ex=ttl_seconds):
            return token
        return None

    def renew(self, key: str, token: str, state: str, ttl_seconds: int) -> bool:
        """Overwrite state and TTL if still owned."""
        result = self._renew(keys=[key], args=[token, _encode(state, token), ttl_seconds])
        return bool(result)

    def get(self, key: str) -> str | None:
        """Current state, or None if no lease exists."""
        raw = self._redis.get(key)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        return _decode(raw)[0]

    def release(self, key: str, token: str) -> bool:
        """Compare-and-delete."""
        return bool(self._release(keys=[key], args=[token]))

    def active_keys(self, prefix: str = LEASE_PREFIX) -> list[str]:
        """Keys of all live leases under a prefix."""
        keys = []
        for key in self._redis.scan_iter(match=f"{prefix}*"):
            keys.append(key.decode() if isinstance(key, bytes) else key)
        return sorted(keys)


class InMemoryLeaseStore:
    """In-process lease store for tests and single-node runs."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._leases: dict[str, tuple[str, str, float]] = {}

    def _live(self, key: str) -> tuple[str, str, float] | None:
        entry = self._leases.get(key)
        if entry is None:
            return None
        if entry[2] <= self._clock():
            del self._leases[key]
            return None
        return entry

    def acquire(self, key: str, state: str, ttl_seconds: int) -> str | None:
        """Set-if-absent with TTL."""
        with self._lock:
            if self._live(key) is not None:
                return None
            token = uuid.uuid4().hex
            self._leases[key] = (state, token, self._clock() + ttl_seconds)
            return token

    def renew(self, key: str, token: str, state: str, ttl_seconds: int) -> bool:
        """Overwrite state and TTL if still owned."""
        with self._lock:
            entry = self._live(key)
            if entry is None or entry[1] != token:
                return False
            self._leases[key] = (state, token, self._clock() + ttl_seconds)
            return True

    def get(self, key: str) -> str | None:
        """Current state, or None if no lease exists."""
        with self._lock:
            entry = self._live(key)
            return entry[0] if entry else None

    def release(self, key: str, token: str) -> bool:
        """Compare-and-delete."""
        with self._lock:
            entry = self._live(key)
            if entry is None or entry[1] != token:
                return False
            del self._leases[key]
            return True

    def active_keys(self, prefix: str = LEASE_PREFIX) -> list[str]:
        """Keys of all live leases under a prefix."""
        with self._lock:
            return sorted(k for k in list(self._leases) if k.startswith(prefix) and self._live(k))
