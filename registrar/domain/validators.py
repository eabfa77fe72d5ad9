"""
Enrollment Validators

Strategy pattern for pluggable enrollment rules. Each validator is a callable
``(student, course) -> ValidationResult`` with no side effects on its
arguments, and additionally exposes ``validate() -> bool`` / ``reason()`` for
callers that only want the boolean and the last failure message.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from registrar.domain.academic import Course
from registrar.domain.entities import Student

logger = structlog.get_logger(__name__)

COURSE_FULL_REASON = "course is full"

CourseLookup = Callable[[str], Course | None]


class ValidationResult(BaseModel):
    """Result of validating one candidate enrollment."""

    model_config = ConfigDict(frozen=True)

    passed: bool = Field(..., description="Whether the rule allows the enrollment")
    validator: str = Field(..., description="Name of the validator that produced this result")
    reason: str = Field(default="", description="Human-readable failure reason")
    violated_rules: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class EnrollmentValidator(ABC):
    """
    Abstract base class for enrollment validators (Strategy pattern).

    ``check`` is pure and safe to call from several threads. ``validate``
    memoizes the last failure reason on the instance, so a single instance
    should not be shared between concurrent ``validate`` callers.
    """

    def __init__(self, name: str):
        self.name = name
        self._last_reason = ""

    @abstractmethod
    def check(self, student: Student, course: Course) -> ValidationResult:
        """
        Evaluate the rule for a candidate enrollment.

        Args:
            student: Student attempting to enroll
            course: Target course

        Returns:
            ValidationResult: Evaluation result
        """

    def __call__(self, student: Student, course: Course) -> ValidationResult:
        return self.check(student, course)

    def validate(self, student: Student, course: Course) -> bool:
        result = self.check(student, course)
        self._last_reason = "" if result.passed else result.reason
        return result.passed

    def reason(self) -> str:
        """Reason for the most recent failed ``validate`` call ("" after a pass)."""
        return self._last_reason

    def _pass(self, **metadata: Any) -> ValidationResult:
        return ValidationResult(passed=True, validator=self.name, metadata=metadata)

    def _fail(self, reason: str, rule: str, **metadata: Any) -> ValidationResult:
        return ValidationResult(
            passed=False,
            validator=self.name,
            reason=reason,
            violated_rules=[rule],
            metadata=metadata,
        )


class PrerequisiteValidator(EnrollmentValidator):
    """Student must have completed every prerequisite of the course."""

    def __init__(self) -> None:
        super().__init__("prerequisite_check")

    def check(self, student: Student, course: Course) -> ValidationResult:
        # Sorted so the named prerequisite is stable between runs
        for prerequisite in sorted(course.prerequisites):
            if prerequisite not in student.completed_courses:
                return self._fail(
                    f"Missing prerequisite: {prerequisite}",
                    "prerequisite_requirement",
                    missing_prerequisite=prerequisite,
                )
        return self._pass(prerequisites_checked=sorted(course.prerequisites))


class CapacityValidator(EnrollmentValidator):
    """Course must have a free seat."""

    def __init__(self) -> None:
        super().__init__("capacity_check")

    def check(self, student: Student, course: Course) -> ValidationResult:
        enrolled = len(course.roster)
        if enrolled >= course.capacity:
            return self._fail(
                COURSE_FULL_REASON,
                "capacity_limit",
                capacity=course.capacity,
                enrolled=enrolled,
            )
        return self._pass(available_seats=course.capacity - enrolled)


class TimeConflictValidator(EnrollmentValidator):
    """
    Candidate course must not share a schedule token with any current enrollment.

    Enrollments only carry course codes, so schedules are resolved through the
    supplied course lookup. Codes the lookup cannot resolve are skipped.
    """

    def __init__(self, course_lookup: CourseLookup):
        super().__init__("time_conflict_check")
        self.course_lookup = course_lookup

    def check(self, student: Student, course: Course) -> ValidationResult:
        for enrollment in list(student.enrollments):
            enrolled_course = self.course_lookup(enrollment.course_code)
            if enrolled_course is None:
                logger.warning(
                    "Enrolled course missing from catalog",
                    student_id=student.id,
                    course_code=enrollment.course_code,
                )
                continue
            if enrolled_course.schedule == course.schedule:
                return self._fail(
                    f"Time conflict with {enrolled_course.code}",
                    "no_time_conflict",
                    conflicting_course=enrolled_course.code,
                    schedule=course.schedule,
                )
        return self._pass()


ValidatorFactory = Callable[[CourseLookup], Sequence[EnrollmentValidator]]


def create_default_validators(course_lookup: CourseLookup) -> tuple[EnrollmentValidator, ...]:
    """
    Create the standard validator chain.

    Order decides only which failure is reported first: prerequisites,
    capacity, then time conflicts.

    Args:
        course_lookup: Resolves a course code to a Course (used for schedules)

    Returns:
        Fresh tuple of validators
    """
    return (
        PrerequisiteValidator(),
        CapacityValidator(),
        TimeConflictValidator(course_lookup),
    )


def run_validators(
    validators: Sequence[EnrollmentValidator], student: Student, course: Course
) -> ValidationResult | None:
    """
    Run validators in order and stop at the first failure.

    Returns:
        The failing result, or None when every validator passed
    """
    for validator in validators:
        result = validator.check(student, course)
        if not result.passed:
            logger.info(
                "Validation failed",
                validator=validator.name,
                student_id=student.id,
                course_code=course.code,
                reason=result.reason,
            )
            return result
    return None
