"""
Grading Service

Faculty-facing gradebook: roster views, grade entry with letter validation,
and the submit/approve lifecycle. Grades are keyed by (student id, course
code); a correction after submission supersedes the old record with a new
Pending one instead of moving the old record backwards.
"""

import threading

import structlog
from pydantic import BaseModel, Field

from registrar.database.registry import InMemoryRegistry
from registrar.domain.academic import Grade
from registrar.domain.entities import Student
from registrar.domain.exceptions import (
    BusinessRuleViolationError,
    DomainException,
    EntityNotFoundError,
    InvalidGradeLetterError,
)
from registrar.domain.grading import GradeState, TransitionOutcome
from registrar.events.base import Topic
from registrar.events.bus import EventBus

logger = structlog.get_logger(__name__)

DEFAULT_GRADE_LETTERS = ("A", "B", "C", "D", "F", "P")


class GradeBatchResult(BaseModel):
    """Per-student results of a batch submission."""

    course_code: str = Field(...)
    submitted: list[str] = Field(default_factory=list, description="Student ids whose grade was submitted")
    rejected: dict[str, str] = Field(
        default_factory=dict, description="Student id -> reason the entry was not submitted"
    )

    @property
    def all_submitted(self) -> bool:
        return not self.rejected


class FacultyService:
    """
    Gradebook for one service process.

    Publishes ``grade`` notifications whenever a submit or approve is applied.
    """

    def __init__(
        self,
        registry: InMemoryRegistry,
        event_bus: EventBus,
        valid_letters: list[str] | tuple[str, ...] = DEFAULT_GRADE_LETTERS,
    ):
        self.registry = registry
        self.event_bus = event_bus
        self.valid_letters = tuple(valid_letters)
        self._grades: dict[tuple[str, str], Grade] = {}
        self._superseded: list[Grade] = []
        self._lock = threading.Lock()

    def roster(self, course_code: str) -> list[Student]:
        """
        Students enrolled in a course.

        Raises:
            EntityNotFoundError: If the course is unknown
        """
        course = self.registry.get_course(course_code)
        return self.registry.roster_students(course)

    def validate_letter(self, letter: str | None) -> str:
        """
        Normalize and check a grade letter.

        Raises:
            InvalidGradeLetterError: If the letter is not on the grading scale
        """
        normalized = letter.strip().upper() if letter else ""
        if normalized not in self.valid_letters:
            raise InvalidGradeLetterError(letter, list(self.valid_letters))
        return normalized

    def record_grade(self, student_id: str, course_code: str, letter: str) -> Grade:
        """
        Enter or correct a grade.

        A Pending grade is updated in place; a Submitted or Final grade is
        superseded by a new Pending record.

        Raises:
            EntityNotFoundError: If the student or course is unknown
            InvalidGradeLetterError: If the letter is not on the grading scale
            BusinessRuleViolationError: If the student is not on the roster
        """
        student = self.registry.get_student(student_id)
        course = self.registry.get_course(course_code)
        normalized = self.validate_letter(letter)

        if not student.is_enrolled_in(course.code):
            raise BusinessRuleViolationError(
                f"Student {student.id} is not enrolled in {course.code}",
                rule_name="grade_requires_enrollment",
            )

        key = (student.id, course.code)
        with self._lock:
            existing = self._grades.get(key)
            if existing is None:
                grade = Grade(student_id=student.id, course_code=course.code, letter=normalized)
            elif existing.state == GradeState.PENDING:
                existing.set_letter(normalized)
                grade = existing
            else:
                grade = existing.create_regrade(normalized)
                self._superseded.append(existing)
            self._grades[key] = grade

        logger.info(
            "Grade recorded",
            student_id=student.id,
            course_code=course.code,
            letter=normalized,
            version=grade.version,
        )
        return grade

    def get_grade(self, student_id: str, course_code: str) -> Grade:
        """
        Current grade record for a student in a course.

        Raises:
            EntityNotFoundError: If no grade has been recorded
        """
        with self._lock:
            grade = self._grades.get((student_id, course_code))
        if grade is None:
            raise EntityNotFoundError("Grade", f"{student_id}:{course_code}")
        return grade

    def grades_for_course(self, course_code: str) -> list[Grade]:
        with self._lock:
            return [g for (_, code), g in self._grades.items() if code == course_code]

    def grade_history(self, student_id: str, course_code: str) -> list[Grade]:
        """All records for a student in a course, oldest first."""
        key = (student_id, course_code)
        with self._lock:
            history = [g for g in self._superseded if g.key == key]
            current = self._grades.get(key)
        if current is not None:
            history.append(current)
        return sorted(history, key=lambda g: g.version)

    def submit_grade(self, student_id: str, course_code: str) -> TransitionOutcome:
        grade = self.get_grade(student_id, course_code)
        outcome = grade.submit()
        if outcome.applied:
            self.event_bus.publish(
                Topic.GRADE,
                f"Grade {grade.letter} submitted for student {student_id} in course {course_code}",
            )
        return outcome

    def approve_grade(self, student_id: str, course_code: str) -> TransitionOutcome:
        grade = self.get_grade(student_id, course_code)
        outcome = grade.approve()
        if outcome.applied:
            self.event_bus.publish(
                Topic.GRADE,
                f"Grade {grade.letter} approved for student {student_id} in course {course_code}",
            )
        return outcome

    def submit_batch(self, course_code: str, letters: dict[str, str]) -> GradeBatchResult:
        """
        Record and submit several grades; bad entries do not stop the rest.

        Args:
            course_code: Course being graded
            letters: Student id -> grade letter

        Returns:
            GradeBatchResult: Which entries were submitted and why others were not
        """
        result = GradeBatchResult(course_code=course_code)
        for student_id, letter in letters.items():
            try:
                self.record_grade(student_id, course_code, letter)
                outcome = self.submit_grade(student_id, course_code)
            except DomainException as e:
                logger.warning(
                    "Error processing grade; instructor can correct and resubmit",
                    student_id=student_id,
                    course_code=course_code,
                    error=e.message,
                )
                result.rejected[student_id] = e.message
                continue

            if outcome.applied:
                result.submitted.append(student_id)
            else:
                result.rejected[student_id] = outcome.message

        logger.info(
            "Grade batch processed",
            course_code=course_code,
            submitted=len(result.submitted),
            rejected=len(result.rejected),
        )
        return result
