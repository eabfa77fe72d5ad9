"""
Admin Facade

Privileged operations that cut across services: enrollment overrides,
capacity changes, enrollment reports and invariant audits.
"""

import structlog

from campus_services.admin_service.reports import EnrollmentReport, ReportFormat
from campus_services.student_service.enrollment_service import EnrollmentCoordinator
from registrar.database.registry import InMemoryRegistry
from registrar.domain.academic import Course
from registrar.domain.exceptions import ValidationError
from registrar.verification.enrollment_invariants import InvariantMonitor, InvariantViolation

logger = structlog.get_logger(__name__)


class AdminFacade:
    """Single entry point for administrative callers."""

    def __init__(self, registry: InMemoryRegistry, coordinator: EnrollmentCoordinator):
        self.registry = registry
        self.coordinator = coordinator
        self.monitor = InvariantMonitor()

    def force_add(self, student_id: str, course_code: str) -> bool:
        """
        Enroll a student bypassing prerequisites, capacity and time conflicts.

        Raises:
            EntityNotFoundError: If the student or course is unknown
        """
        student = self.registry.get_student(student_id)
        course = self.registry.get_course(course_code)
        added = self.coordinator.force_add(student, course)
        logger.info(
            "Force-add handled",
            student_id=student_id,
            course_code=course_code,
            added=added,
            enrolled=len(course.roster),
        )
        return added

    def set_capacity(self, course_code: str, capacity: int) -> Course:
        """
        Change a course's capacity. Lowering it below the roster size is
        allowed; it only blocks new validated enrollments.

        Raises:
            EntityNotFoundError: If the course is unknown
            ValidationError: If capacity is negative
        """
        if capacity < 0:
            raise ValidationError("Capacity cannot be negative", field="capacity", value=capacity)
        course = self.registry.get_course(course_code)
        self.coordinator.set_capacity(course, capacity)
        return course

    def enrollment_report(self, format: ReportFormat = ReportFormat.CSV) -> bytes:
        """Enrollment counts of every registered course."""
        return EnrollmentReport(self.registry.list_courses()).generate_report(format)

    def audit(self) -> list[InvariantViolation]:
        """Check the registry against the enrollment invariants."""
        _, violations = self.monitor.verify_registry(self.registry)
        return violations
