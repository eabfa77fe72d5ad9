"""
Student Service

Identifier-based entry points for students: browse courses, enroll, drop.
Unknown ids raise EntityNotFoundError; enrollment decisions come back as
outcomes, never as exceptions.
"""

import structlog

from campus_services.student_service.enrollment_service import (
    EnrollmentCoordinator,
    EnrollmentOutcome,
)
from registrar.database.registry import InMemoryRegistry
from registrar.domain.academic import Course

logger = structlog.get_logger(__name__)


class StudentService:
    """Student-facing operations over the shared registry."""

    def __init__(self, registry: InMemoryRegistry, coordinator: EnrollmentCoordinator):
        self.registry = registry
        self.coordinator = coordinator

    def list_courses(self) -> list[Course]:
        return self.registry.list_courses()

    def list_enrollments(self, student_id: str) -> list[Course]:
        """
        Courses the student is currently enrolled in.

        Raises:
            EntityNotFoundError: If the student is unknown
        """
        student = self.registry.get_student(student_id)
        return self.registry.enrolled_courses(student)

    def enroll(self, student_id: str, course_code: str) -> EnrollmentOutcome:
        """
        Enroll a student by id in a course by code.

        Raises:
            EntityNotFoundError: If the student or course is unknown
        """
        student = self.registry.get_student(student_id)
        course = self.registry.get_course(course_code)
        outcome = self.coordinator.try_enroll(student, course)
        logger.info(
            "Enrollment request handled",
            student_id=student_id,
            course_code=course_code,
            success=outcome.success,
            reason=outcome.reason,
        )
        return outcome

    def drop(self, student_id: str, course_code: str) -> bool:
        """
        Drop a course by code.

        Raises:
            EntityNotFoundError: If the student or course is unknown
        """
        student = self.registry.get_student(student_id)
        course = self.registry.get_course(course_code)
        return self.coordinator.drop(student, course)
