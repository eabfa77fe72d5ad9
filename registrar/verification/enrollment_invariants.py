"""
Runtime Verification: Enrollment Invariants

Checks a registry snapshot against the enrollment invariants:

1. Bidirectional consistency: an enrollment is in a student's list iff it is
   in the course's roster.
2. No duplicates: a (student, course) pair is enrolled at most once.
3. No dangling references: every enrollment names a registered student and course.
4. Capacity: roster size does not exceed capacity. Admin overrides and capacity
   reductions may break this deliberately, so it is reported but is not a
   consistency failure.
5. No schedule overlap between a student's courses (also overridable).
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from registrar.database.registry import InMemoryRegistry

logger = structlog.get_logger(__name__)


class InvariantViolationType(Enum):
    """Types of invariant violations."""
    ONE_SIDED_ENROLLMENT = "one_sided_enrollment"
    DOUBLE_ENROLLMENT = "double_enrollment"
    DANGLING_REFERENCE = "dangling_reference"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    TIME_OVERLAP = "time_overlap"


CONSISTENCY_VIOLATIONS = frozenset({
    InvariantViolationType.ONE_SIDED_ENROLLMENT,
    InvariantViolationType.DOUBLE_ENROLLMENT,
    InvariantViolationType.DANGLING_REFERENCE,
})


@dataclass
class InvariantViolation:
    """A single detected violation."""
    type: InvariantViolationType
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_consistency_violation(self) -> bool:
        return self.type in CONSISTENCY_VIOLATIONS


class InvariantMonitor:
    """
    Runtime monitor for enrollment invariants.

    Keeps running counts across verifications for reporting.
    """

    def __init__(self):
        self.verification_count = 0
        self.violation_count = 0

    def verify_registry(self, registry: InMemoryRegistry) -> tuple[bool, list[InvariantViolation]]:
        """
        Verify every student and course in a registry.

        Returns:
            Tuple of (no consistency violations, list of all violations)
        """
        self.verification_count += 1
        violations: list[InvariantViolation] = []

        students = {s.id: s for s in registry.list_students()}
        courses = {c.code: c for c in registry.list_courses()}

        student_side: Counter[tuple[str, str]] = Counter()
        for student in students.values():
            for enrollment in list(student.enrollments):
                student_side[enrollment.key] += 1
                if enrollment.student_id != student.id or enrollment.course_code not in courses:
                    violations.append(InvariantViolation(
                        InvariantViolationType.DANGLING_REFERENCE,
                        f"{enrollment} in student {student.id} has no matching course",
                        {"student_id": student.id, "course_code": enrollment.course_code},
                    ))

        course_side: Counter[tuple[str, str]] = Counter()
        for course in courses.values():
            for enrollment in list(course.roster):
                course_side[enrollment.key] += 1
                if enrollment.course_code != course.code or enrollment.student_id not in students:
                    violations.append(InvariantViolation(
                        InvariantViolationType.DANGLING_REFERENCE,
                        f"{enrollment} on roster of {course.code} has no matching student",
                        {"student_id": enrollment.student_id, "course_code": course.code},
                    ))

            if len(course.roster) > course.capacity:
                violations.append(InvariantViolation(
                    InvariantViolationType.CAPACITY_EXCEEDED,
                    f"Course {course.code} exceeds capacity: {len(course.roster)}/{course.capacity}",
                    {
                        "course_code": course.code,
                        "enrolled": len(course.roster),
                        "capacity": course.capacity,
                        "overridden": sum(1 for e in course.roster if e.overridden),
                    },
                ))

        for key in sorted(set(student_side) | set(course_side)):
            student_id, course_code = key
            if student_side[key] != course_side[key]:
                violations.append(InvariantViolation(
                    InvariantViolationType.ONE_SIDED_ENROLLMENT,
                    f"Enrollment {student_id}->{course_code} recorded {student_side[key]} time(s) "
                    f"by the student and {course_side[key]} time(s) by the course",
                    {"student_id": student_id, "course_code": course_code},
                ))
            if max(student_side[key], course_side[key]) > 1:
                violations.append(InvariantViolation(
                    InvariantViolationType.DOUBLE_ENROLLMENT,
                    f"Student {student_id} is enrolled in {course_code} more than once",
                    {"student_id": student_id, "course_code": course_code},
                ))

        for student in students.values():
            seen: dict[str, str] = {}
            for enrollment in list(student.enrollments):
                course = courses.get(enrollment.course_code)
                if course is None:
                    continue
                other = seen.get(course.schedule)
                if other is not None and other != course.code:
                    violations.append(InvariantViolation(
                        InvariantViolationType.TIME_OVERLAP,
                        f"Student {student.id} is enrolled in overlapping courses: "
                        f"{other} and {course.code}",
                        {"student_id": student.id, "courses": [other, course.code]},
                    ))
                seen.setdefault(course.schedule, course.code)

        self.violation_count += len(violations)
        consistent = not any(v.is_consistency_violation for v in violations)
        if violations:
            logger.warning(
                "Enrollment invariant violations detected",
                count=len(violations),
                consistent=consistent,
                types=sorted({v.type.value for v in violations}),
            )
        return consistent, violations

    def get_statistics(self) -> dict[str, Any]:
        """Get monitoring statistics."""
        return {
            "verification_count": self.verification_count,
            "violation_count": self.violation_count,
        }


def assert_registry_consistent(registry: InMemoryRegistry) -> None:
    """
    Assert that no enrollment is one-sided, duplicated or dangling.

    Raises:
        AssertionError: If a consistency violation is found
    """
    consistent, violations = InvariantMonitor().verify_registry(registry)
    if not consistent:
        messages = "; ".join(v.message for v in violations if v.is_consistency_violation)
        raise AssertionError(f"Enrollment invariant violated: {messages}")
