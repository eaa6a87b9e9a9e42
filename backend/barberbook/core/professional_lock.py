"""
Per-professional booking lock.

Every create for a professional runs its check-then-insert under this lock so
two requests for the same professional can never interleave. Requests for
different professionals use different keys and never wait on each other.

Two layers:
- an in-process keyed lock, always taken, serializing threads of one worker
- a Redis lock (``professional_lock_backend = "redis"``), serializing every
  API instance sharing the Redis server

When Redis is unreachable the Redis layer fails open and only the in-process
lock is held; the database advisory lock and exclusion constraint still guard
the calendar in that case.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
import time
from typing import Dict, Iterator, Optional

from redis import Redis
from redis.exceptions import LockError, RedisError
from redis.lock import Lock as RedisLock

from ..monitoring.prometheus_metrics import prometheus_metrics
from .config import settings
from .exceptions import ProfessionalLockTimeout

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()


class _KeyedLockRegistry:
    """
    One ``threading.Lock`` per key, created on demand and dropped once no
    thread holds or waits on it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._refcounts: Dict[str, int] = {}

    def acquire(self, key: str, timeout: float) -> bool:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            self._refcounts[key] = self._refcounts.get(key, 0) + 1

        acquired = lock.acquire(timeout=timeout)
        if not acquired:
            self._unref(key)
        return acquired

    def release(self, key: str) -> None:
        with self._guard:
            lock = self._locks[key]
        lock.release()
        self._unref(key)

    def _unref(self, key: str) -> None:
        with self._guard:
            remaining = self._refcounts[key] - 1
            if remaining <= 0:
                del self._refcounts[key]
                del self._locks[key]
            else:
                self._refcounts[key] = remaining

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


_local_locks = _KeyedLockRegistry()


def _lock_key(professional_id: str) -> str:
    return f"professional:{professional_id}:booking"


def _namespaced_key(key: str) -> str:
    return f"{settings.lock_namespace}:lock:{key}"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(settings.redis_url, decode_responses=True)
            client.ping()
        except RedisError as exc:
            logger.warning("professional_lock_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


def _acquire_redis_lock(
    professional_id: str, ttl_s: int, timeout_s: float
) -> Optional[RedisLock]:
    """
    Take the distributed lock. Returns the held lock, or None when Redis is
    unavailable (fail open). Raises ProfessionalLockTimeout when another
    instance holds the lock past ``timeout_s``.
    """
    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_professional_lock("redis", "acquire", "redis_unavailable")
        logger.warning(
            "professional_lock_redis_unavailable",
            extra={"professional_id": professional_id},
        )
        return None

    lock = client.lock(
        _namespaced_key(_lock_key(professional_id)),
        timeout=ttl_s,
        blocking_timeout=timeout_s,
    )
    try:
        acquired = lock.acquire()
    except RedisError as exc:
        prometheus_metrics.record_professional_lock("redis", "acquire", "error")
        logger.warning(
            "professional_lock_redis_acquire_failed",
            extra={
                "professional_id": professional_id,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )
        return None

    if not acquired:
        prometheus_metrics.record_professional_lock("redis", "acquire", "timeout")
        raise ProfessionalLockTimeout(professional_id, timeout_s)

    prometheus_metrics.record_professional_lock("redis", "acquire", "success")
    return lock


def _release_redis_lock(professional_id: str, lock: RedisLock) -> None:
    try:
        lock.release()
        prometheus_metrics.record_professional_lock("redis", "release", "success")
    except LockError as exc:
        # TTL elapsed while the critical section was still running
        prometheus_metrics.record_professional_lock("redis", "release", "expired")
        logger.warning(
            "professional_lock_redis_expired",
            extra={"professional_id": professional_id, "error": str(exc)},
        )
    except RedisError as exc:
        prometheus_metrics.record_professional_lock("redis", "release", "error")
        logger.warning(
            "professional_lock_redis_release_failed",
            extra={
                "professional_id": professional_id,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )


@contextmanager
def professional_lock(
    professional_id: str,
    *,
    backend: Optional[str] = None,
    ttl_s: Optional[int] = None,
    timeout_s: Optional[float] = None,
) -> Iterator[None]:
    """
    Hold the booking lock for ``professional_id`` for the duration of the block.

    Raises:
        ProfessionalLockTimeout: If the lock is not obtained within ``timeout_s``
    """
    backend = backend or settings.professional_lock_backend
    ttl_s = ttl_s or settings.professional_lock_ttl_s
    timeout_s = timeout_s if timeout_s is not None else settings.professional_lock_timeout_s

    started = time.monotonic()
    if not _local_locks.acquire(professional_id, timeout_s):
        prometheus_metrics.record_professional_lock("local", "acquire", "timeout")
        logger.warning(
            "professional_lock_timeout",
            extra={"professional_id": professional_id, "timeout_s": timeout_s},
        )
        raise ProfessionalLockTimeout(professional_id, timeout_s)
    prometheus_metrics.record_professional_lock("local", "acquire", "success")

    redis_lock: Optional[RedisLock] = None
    try:
        if backend == "redis":
            remaining = max(timeout_s - (time.monotonic() - started), 0.0)
            redis_lock = _acquire_redis_lock(professional_id, ttl_s, remaining)
        prometheus_metrics.observe_professional_lock_wait(backend, time.monotonic() - started)
        yield
    finally:
        if redis_lock is not None:
            _release_redis_lock(professional_id, redis_lock)
        _local_locks.release(professional_id)
        prometheus_metrics.record_professional_lock("local", "release", "success")
