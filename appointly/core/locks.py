# appointly/core/locks.py
"""
Per-staff booking locks.

The availability check reads a snapshot of existing appointments and the
insert happens afterwards, so two requests for the same staff member must not
interleave between the two. Appointment creation holds
staff_booking_lock(staff_id) across recheck, insert and commit.

Backends:
    local - threading.Lock per staff id; serializes within one process
    redis - redis-py lock shared by every API worker; falls back to the
            local lock when Redis is unreachable
"""
from contextlib import contextmanager
import logging
import threading
from typing import Iterator, Optional
import weakref

import redis

from appointly.config.redis import RedisKeys, get_redis
from appointly.config.settings import get_settings
from appointly.core.exceptions import SlotUnavailableError

logger = logging.getLogger(__name__)

# Entries live only while some request holds or waits on the lock
_LOCAL_LOCKS: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_LOCAL_LOCKS_GUARD = threading.Lock()


def _local_lock_for(staff_id: str) -> threading.Lock:
    with _LOCAL_LOCKS_GUARD:
        lock = _LOCAL_LOCKS.get(staff_id)
        if lock is None:
            lock = threading.Lock()
            _LOCAL_LOCKS[staff_id] = lock
        return lock


def _lock_busy(staff_id: str) -> SlotUnavailableError:
    return SlotUnavailableError(
        "Another booking for this staff member is in progress, please retry",
        code="BookingLockTimeout",
        details={"staff_id": staff_id},
    )


@contextmanager
def _local_staff_lock(staff_id: str, timeout: float) -> Iterator[None]:
    lock = _local_lock_for(staff_id)
    if not lock.acquire(timeout=timeout):
        raise _lock_busy(staff_id)
    try:
        yield
    finally:
        lock.release()


@contextmanager
def _redis_staff_lock(staff_id: str, timeout: float, ttl: int) -> Iterator[None]:
    key = RedisKeys.STAFF_BOOKING_LOCK.format(staff_id=staff_id)
    lock = get_redis().lock(key, timeout=ttl, blocking_timeout=timeout)
    try:
        acquired = lock.acquire()
    except redis.RedisError as e:
        logger.warning(f"Redis booking lock unavailable for staff {staff_id}, using local lock: {e}")
        lock = None

    if lock is None:
        with _local_staff_lock(staff_id, timeout):
            yield
        return

    if not acquired:
        raise _lock_busy(staff_id)
    try:
        yield
    finally:
        try:
            lock.release()
        except redis.RedisError as e:
            # TTL expiry frees the key if the release itself fails
            logger.warning(f"Failed to release booking lock {key}: {e}")


@contextmanager
def staff_booking_lock(
        staff_id: str,
        backend: Optional[str] = None,
        timeout: Optional[float] = None,
) -> Iterator[None]:
    """
    Hold the booking mutex for one staff member.

    Raises:
        SlotUnavailableError: if the lock cannot be acquired within timeout
    """
    settings = get_settings()
    backend = backend or settings.BOOKING_LOCK_BACKEND
    timeout = settings.BOOKING_LOCK_TIMEOUT_SECONDS if timeout is None else timeout
    staff_id = str(staff_id)

    if backend == "redis":
        with _redis_staff_lock(staff_id, timeout, settings.BOOKING_LOCK_TTL_SECONDS):
            yield
    elif backend == "local":
        with _local_staff_lock(staff_id, timeout):
            yield
    else:
        raise ValueError(f"Unknown booking lock backend: {backend}")
