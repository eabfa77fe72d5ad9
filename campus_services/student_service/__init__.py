"""Student service: enrollment coordination and the student-facing facade."""

from campus_services.student_service.enrollment_service import (
    EnrollmentCoordinator,
    EnrollmentOutcome,
)
from campus_services.student_service.service import StudentService

__all__ = ["EnrollmentCoordinator", "EnrollmentOutcome", "StudentService"]
