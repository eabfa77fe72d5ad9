"""
Core Entity Hierarchy

DomainEntity → Student, with Enrollment as the relationship record shared by
a Student and a Course.

Features:
- Lifecycle timestamps and business-rule validation on every entity
- Assignment validation through Pydantic (identities are frozen fields)
- Identifier-based relationships: an Enrollment stores the student id and the
  course code instead of live references
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def remove_by_identity(items: list[Any], target: Any) -> bool:
    """
    Remove ``target`` from ``items`` comparing by object identity.

    Returns:
        bool: True if the exact object was found and removed
    """
    for index, item in enumerate(items):
        if item is target:
            del items[index]
            return True
    return False


class DomainEntity(BaseModel, ABC):
    """
    Base abstract entity class providing lifecycle timestamps.

    All mutable domain entities inherit from this class.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        use_enum_values=False,
        arbitrary_types_allowed=True,
    )

    created_at: datetime = Field(default_factory=utcnow, description="Entity creation timestamp")
    updated_at: datetime = Field(default_factory=utcnow, description="Last update timestamp")

    @abstractmethod
    def validate_business_rules(self) -> bool:
        """
        Validate entity-specific business rules.

        Returns:
            bool: True if all business rules are satisfied

        Raises:
            ValueError: If business rules are violated
        """

    def mark_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utcnow()


class Enrollment(BaseModel):
    """
    Relationship record linking one student to one course.

    Immutable; equality and hashing use (student_id, course_code) only.
    """

    model_config = ConfigDict(frozen=True)

    student_id: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)
    enrolled_at: datetime = Field(default_factory=utcnow)
    overridden: bool = Field(default=False, description="Created through the admin override path")

    @property
    def key(self) -> tuple[str, str]:
        return (self.student_id, self.course_code)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Enrollment):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"Enrollment[{self.student_id}->{self.course_code}]"


class Student(DomainEntity):
    """
    Student with completed coursework and current enrollments.

    ``completed_courses`` only grows. ``enrollments`` mirrors the rosters of the
    courses the student is in and is mutated only by the enrollment coordinator.
    """

    id: str = Field(..., min_length=1, frozen=True, description="Student identifier")
    name: str = Field(..., min_length=1, max_length=200)
    completed_courses: set[str] = Field(default_factory=set)
    enrollments: list[Enrollment] = Field(default_factory=list)

    def validate_business_rules(self) -> bool:
        """Every enrollment in the list must name this student."""
        for enrollment in self.enrollments:
            if enrollment.student_id != self.id:
                raise ValueError(f"{enrollment} does not belong to student {self.id}")
        return True

    def add_completed_course(self, course_code: str) -> None:
        """Record a passed course."""
        self.completed_courses.add(course_code)
        self.mark_updated()

    def find_enrollment(self, course_code: str) -> Enrollment | None:
        """Find the enrollment for a course code, if any."""
        return next(
            (e for e in self.enrollments if e.course_code == course_code), None
        )

    def is_enrolled_in(self, course_code: str) -> bool:
        return self.find_enrollment(course_code) is not None

    def add_enrollment(self, enrollment: Enrollment) -> None:
        self.enrollments.append(enrollment)
        self.mark_updated()

    def remove_enrollment(self, enrollment: Enrollment) -> bool:
        removed = remove_by_identity(self.enrollments, enrollment)
        if removed:
            self.mark_updated()
        return removed

    def __str__(self) -> str:
        return f"Student[{self.id}:{self.name}]"
