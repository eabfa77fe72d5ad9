"""
Concurrency Control: Pessimistic Resource Locks

Per-resource re-entrant locks for the enrollment critical sections. Resources
are named strings (``course:CS201``, ``student:S001``); several resources are
always acquired in sorted order so two callers can never deadlock on them.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

import structlog

from registrar.domain.entities import utcnow
from registrar.domain.exceptions import LockAcquisitionError

logger = structlog.get_logger(__name__)


def course_resource(course_code: str) -> str:
    return f"course:{course_code}"


def student_resource(student_id: str) -> str:
    return f"student:{student_id}"


class Lock:
    """
    Record of a held resource lock.

    ``depth`` counts re-entrant acquisitions by the owning thread.
    """

    def __init__(self, resource_id: str, lock_id: UUID, owner: str, thread_id: int):
        """
        Initialize lock record.

        Args:
            resource_id: Resource being locked
            lock_id: Unique lock identifier
            owner: Lock owner description (operation name)
            thread_id: Identifier of the holding thread
        """
        self.resource_id = resource_id
        self.lock_id = lock_id
        self.owner = owner
        self.thread_id = thread_id
        self.acquired_at: datetime = utcnow()
        self.depth = 0

    def held_seconds(self) -> float:
        return (utcnow() - self.acquired_at).total_seconds()


class LockManager:
    """
    Manages pessimistic locks for resources.

    Thread-safe; a thread holding a resource may acquire it again.
    """

    def __init__(self, wait_timeout: float | None = None):
        """
        Initialize lock manager.

        Args:
            wait_timeout: Default seconds to wait for a held lock (None = wait forever)
        """
        self.wait_timeout = wait_timeout
        self._mutexes: dict[str, threading.RLock] = {}
        self._held: dict[str, Lock] = {}
        self._lock = threading.Lock()  # Protects _mutexes and _held
        logger.info("Lock manager initialized", wait_timeout=wait_timeout)

    def _mutex_for(self, resource_id: str) -> threading.RLock:
        with self._lock:
            mutex = self._mutexes.get(resource_id)
            if mutex is None:
                mutex = threading.RLock()
                self._mutexes[resource_id] = mutex
            return mutex

    def acquire(
        self,
        resource_id: str,
        owner: str,
        wait_timeout: float | None = None,
    ) -> Lock | None:
        """
        Acquire a lock on a resource, blocking while another thread holds it.

        Args:
            resource_id: Resource to lock
            owner: Lock owner description
            wait_timeout: Maximum seconds to wait (defaults to the manager's)

        Returns:
            Lock record if acquired, None on timeout
        """
        timeout = wait_timeout if wait_timeout is not None else self.wait_timeout
        mutex = self._mutex_for(resource_id)

        acquired = mutex.acquire() if timeout is None else mutex.acquire(timeout=timeout)
        if not acquired:
            logger.warning(
                "Lock acquisition timeout",
                resource_id=resource_id,
                owner=owner,
                wait_timeout=timeout,
            )
            return None

        with self._lock:
            lock = self._held.get(resource_id)
            if lock is None:
                lock = Lock(
                    resource_id=resource_id,
                    lock_id=uuid4(),
                    owner=owner,
                    thread_id=threading.get_ident(),
                )
                self._held[resource_id] = lock
            lock.depth += 1

        logger.debug(
            "Lock acquired",
            resource_id=resource_id,
            owner=owner,
            lock_id=str(lock.lock_id),
            depth=lock.depth,
        )
        return lock

    def release(self, resource_id: str) -> bool:
        """
        Release one acquisition of a resource held by the calling thread.

        Returns:
            True if released, False if not held by this thread
        """
        with self._lock:
            lock = self._held.get(resource_id)

            if lock is None:
                logger.warning("Lock not found", resource_id=resource_id)
                return False

            if lock.thread_id != threading.get_ident():
                logger.warning(
                    "Lock owner mismatch",
                    resource_id=resource_id,
                    lock_owner=lock.owner,
                )
                return False

            lock.depth -= 1
            if lock.depth == 0:
                del self._held[resource_id]
            mutex = self._mutexes[resource_id]

        mutex.release()
        logger.debug("Lock released", resource_id=resource_id, lock_id=str(lock.lock_id))
        return True

    @contextmanager
    def hold(
        self,
        *resource_ids: str,
        owner: str,
        wait_timeout: float | None = None,
    ) -> Iterator[list[Lock]]:
        """
        Hold several resources for the duration of a ``with`` block.

        Resources are acquired in sorted order and released in reverse.

        Raises:
            LockAcquisitionError: If any resource cannot be locked in time
        """
        acquired: list[Lock] = []
        try:
            for resource_id in sorted(set(resource_ids)):
                lock = self.acquire(resource_id, owner, wait_timeout=wait_timeout)
                if lock is None:
                    raise LockAcquisitionError(
                        resource_id,
                        wait_timeout=wait_timeout if wait_timeout is not None else self.wait_timeout,
                        context={"owner": owner},
                    )
                acquired.append(lock)
            yield acquired
        finally:
            for lock in reversed(acquired):
                self.release(lock.resource_id)

    def is_locked(self, resource_id: str) -> bool:
        """Check if resource is currently held by any thread."""
        with self._lock:
            return resource_id in self._held

    def get_lock_info(self, resource_id: str) -> dict[str, Any] | None:
        """Get information about the current holder of a resource."""
        with self._lock:
            lock = self._held.get(resource_id)
            if lock is None:
                return None
            return {
                "resource_id": lock.resource_id,
                "lock_id": str(lock.lock_id),
                "owner": lock.owner,
                "acquired_at": lock.acquired_at.isoformat(),
                "held_seconds": lock.held_seconds(),
                "depth": lock.depth,
            }

    def get_all_locks(self) -> dict[str, dict[str, Any]]:
        """Get information about all held locks."""
        with self._lock:
            return {
                resource_id: {
                    "lock_id": str(lock.lock_id),
                    "owner": lock.owner,
                    "acquired_at": lock.acquired_at.isoformat(),
                    "depth": lock.depth,
                }
                for resource_id, lock in self._held.items()
            }
