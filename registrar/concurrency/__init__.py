"""Resource locking for the enrollment critical sections."""

from registrar.concurrency.locking import (
    Lock,
    LockManager,
    course_resource,
    student_resource,
)

__all__ = [
    "Lock",
    "LockManager",
    "course_resource",
    "student_resource",
]
