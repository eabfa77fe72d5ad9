"""
Academic Domain Models

Courses with their rosters, and grade records driven through the
Pending → Submitted → Final lifecycle.
"""

import threading
from datetime import datetime
from uuid import UUID, uuid4

import structlog
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from registrar.domain.entities import DomainEntity, Enrollment, remove_by_identity, utcnow
from registrar.domain.grading import GradeOperation, GradeState, TransitionOutcome, next_state

logger = structlog.get_logger(__name__)


class Course(DomainEntity):
    """
    Course offering with a capacity and a roster.

    ``len(roster) <= capacity`` is enforced by the capacity validator, not here;
    the admin override path may deliberately exceed it.
    """

    code: str = Field(..., min_length=1, frozen=True, description="Unique course code (e.g., CS201)")
    name: str = Field(..., min_length=1, max_length=200)
    capacity: int = Field(..., ge=0, description="Seats available for validated enrollment")
    prerequisites: set[str] = Field(
        default_factory=set, description="Prerequisite course codes"
    )
    schedule: str = Field(..., description="Opaque schedule token used for conflict detection")
    roster: list[Enrollment] = Field(default_factory=list)

    def validate_business_rules(self) -> bool:
        """Validate course business rules."""
        if self.capacity < 0:
            raise ValueError("Capacity cannot be negative")
        for enrollment in self.roster:
            if enrollment.course_code != self.code:
                raise ValueError(f"{enrollment} does not belong to course {self.code}")
        return True

    def add_prerequisite(self, course_code: str) -> None:
        self.prerequisites.add(course_code)
        self.mark_updated()

    def set_capacity(self, capacity: int) -> None:
        """Change capacity (rejected by assignment validation if negative)."""
        self.capacity = capacity
        self.mark_updated()

    def is_full(self) -> bool:
        """Check if course is at capacity."""
        return len(self.roster) >= self.capacity

    def seats_available(self) -> int:
        return max(0, self.capacity - len(self.roster))

    def add_enrollment(self, enrollment: Enrollment) -> None:
        self.roster.append(enrollment)
        self.mark_updated()

    def remove_enrollment(self, enrollment: Enrollment) -> bool:
        removed = remove_by_identity(self.roster, enrollment)
        if removed:
            self.mark_updated()
        return removed

    def __str__(self) -> str:
        return f"Course[{self.code}:{self.name}]"


class Grade(BaseModel):
    """
    Grade record for one student in one course.

    The letter is free-form here; checking it against the grading scale is the
    caller's job. Lifecycle decisions live in ``next_state``; the grade only
    holds its current state and applies the successor.

    Corrections after submission are new records (see ``create_regrade``),
    linked to the superseded grade through ``previous_grade_id``.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(default_factory=uuid4)
    student_id: str = Field(..., min_length=1, frozen=True)
    course_code: str = Field(..., min_length=1, frozen=True)
    letter: str | None = Field(default=None, max_length=2)
    state: GradeState = Field(default=GradeState.PENDING)
    created_at: datetime = Field(default_factory=utcnow)

    # Audit
    previous_grade_id: UUID | None = Field(
        default=None, description="Grade this record supersedes (if regrade)"
    )
    version: int = Field(default=1, ge=1)

    _lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    @property
    def key(self) -> tuple[str, str]:
        return (self.student_id, self.course_code)

    def set_letter(self, letter: str | None) -> None:
        self.letter = letter

    def state_name(self) -> str:
        """Name of the current lifecycle state."""
        return self.state.value

    def submit(self) -> TransitionOutcome:
        """Pending → Submitted; reported no-op otherwise."""
        return self._apply(GradeOperation.SUBMIT)

    def approve(self) -> TransitionOutcome:
        """Submitted → Final; reported no-op otherwise."""
        return self._apply(GradeOperation.APPROVE)

    def _apply(self, operation: GradeOperation) -> TransitionOutcome:
        with self._lock:
            new_state, outcome = next_state(self.state, operation)
            if outcome.applied:
                self.state = new_state

        log = logger.info if outcome.applied else logger.warning
        log(
            outcome.message,
            student_id=self.student_id,
            course_code=self.course_code,
            operation=operation.value,
            from_state=outcome.from_state.value,
            to_state=outcome.to_state.value,
        )
        return outcome

    def create_regrade(self, letter: str) -> "Grade":
        """
        Create a new Pending grade superseding this one.

        Returns:
            Grade: New grade record linked to this one
        """
        return Grade(
            student_id=self.student_id,
            course_code=self.course_code,
            letter=letter,
            previous_grade_id=self.id,
            version=self.version + 1,
        )

    def __str__(self) -> str:
        return f"Grade[{self.student_id}:{self.course_code}={self.letter} ({self.state_name()})]"
