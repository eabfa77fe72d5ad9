"""
Registrar Domain Models

Core entities, the enrollment validator chain and the grade lifecycle.

Relationships:
- Student has-many Enrollment (by course code)
- Course has-many Enrollment (roster, by student id)
- Grade is keyed by (student id, course code) and holds a GradeState
"""

from registrar.domain.academic import Course, Grade
from registrar.domain.entities import DomainEntity, Enrollment, Student
from registrar.domain.grading import (
    GradeOperation,
    GradeState,
    TransitionOutcome,
    is_terminal,
    next_state,
)
from registrar.domain.validators import (
    COURSE_FULL_REASON,
    CapacityValidator,
    EnrollmentValidator,
    PrerequisiteValidator,
    TimeConflictValidator,
    ValidationResult,
    create_default_validators,
    run_validators,
)

__all__ = [
    # Entities
    "DomainEntity",
    "Student",
    "Course",
    "Enrollment",
    "Grade",
    # Grade lifecycle
    "GradeState",
    "GradeOperation",
    "TransitionOutcome",
    "next_state",
    "is_terminal",
    # Validation
    "EnrollmentValidator",
    "PrerequisiteValidator",
    "CapacityValidator",
    "TimeConflictValidator",
    "ValidationResult",
    "COURSE_FULL_REASON",
    "create_default_validators",
    "run_validators",
]
