"""
Enrollment Service

Core enrollment business logic: validator chain, paired roster/student
mutation with rollback, and notification publishing.
"""

import threading

import structlog
from pydantic import BaseModel, ConfigDict, Field

from registrar.concurrency.locking import LockManager, course_resource, student_resource
from registrar.database.registry import InMemoryRegistry
from registrar.domain.academic import Course
from registrar.domain.entities import Enrollment, Student
from registrar.domain.exceptions import LockAcquisitionError
from registrar.domain.validators import (
    ValidatorFactory,
    create_default_validators,
    run_validators,
)
from registrar.events.base import Topic
from registrar.events.bus import EventBus

logger = structlog.get_logger(__name__)

RESOURCE_BUSY_REASON = "resource busy, retry"
RECORDING_FAILED_REASON = "enrollment could not be recorded"
NOT_REGISTERED_REASON = "student or course not registered"


class EnrollmentOutcome(BaseModel):
    """Result of an enrollment attempt."""

    model_config = ConfigDict(frozen=True)

    success: bool = Field(...)
    student_id: str = Field(...)
    course_code: str = Field(...)
    reason: str | None = Field(default=None, description="Failure reason, if any")
    failed_validator: str | None = Field(default=None)


class EnrollmentCoordinator:
    """
    Service orchestrating enrollment changes.

    Implements:
    - Validator-chain enforcement (first failure wins, nothing mutated)
    - Enrollment added to / removed from roster and student list as one unit
    - Per-course and per-student critical sections
    - Notifications after the mutation is committed
    - A privileged override path that skips validation

    Every operation runs to completion on the caller's thread while holding
    the course and student locks; notification listeners therefore run inside
    the critical section too.
    """

    def __init__(
        self,
        registry: InMemoryRegistry,
        event_bus: EventBus,
        lock_manager: LockManager | None = None,
        validator_factory: ValidatorFactory = create_default_validators,
    ):
        """
        Initialize enrollment coordinator.

        Args:
            registry: Data store used to resolve enrolled course codes
            event_bus: Bus that receives enrollment, drop and waitlist notifications
            lock_manager: Resource locks (a private manager is created if omitted)
            validator_factory: Builds the validator chain for each attempt
        """
        self.registry = registry
        self.event_bus = event_bus
        self.lock_manager = lock_manager or LockManager()
        self.validator_factory = validator_factory
        self._local = threading.local()

    @property
    def last_failure_reason(self) -> str | None:
        """Reason of the calling thread's most recent failed operation."""
        return getattr(self._local, "last_failure_reason", None)

    def _remember(self, outcome: EnrollmentOutcome) -> EnrollmentOutcome:
        self._local.last_failure_reason = outcome.reason
        return outcome

    def _resources(self, student: Student, course: Course) -> tuple[str, str]:
        return course_resource(course.code), student_resource(student.id)

    def _is_registered(self, student: Student, course: Course) -> bool:
        """Both entities must be the instances the registry holds under their ids."""
        registered = (
            self.registry.find_student(student.id) is student
            and self.registry.find_course(course.code) is course
        )
        if not registered:
            logger.warning(
                "Entity not held by registry",
                student_id=student.id,
                course_code=course.code,
            )
        return registered

    # --- Enroll -----------------------------------------------------------------

    def enroll(self, student: Student, course: Course) -> bool:
        """Enroll a student; False (with ``last_failure_reason`` set) if rejected."""
        return self.try_enroll(student, course).success

    def try_enroll(self, student: Student, course: Course) -> EnrollmentOutcome:
        """
        Enroll a student in a course after running the validator chain.

        Process:
        1. Lock the course and the student
        2. Refuse entities the registry does not hold (schedules of enrolled
           courses are resolved through it)
        3. Run validators in factory order, stopping at the first failure
        4. Append the enrollment to the roster and the student's list as one unit
        5. Publish an ``enrollment`` notification

        Returns:
            EnrollmentOutcome: Success flag with the failure reason, if any
        """
        logger.info("Attempting enrollment", student_id=student.id, course_code=course.code)

        try:
            with self.lock_manager.hold(*self._resources(student, course), owner="enroll"):
                if not self._is_registered(student, course):
                    return self._remember(EnrollmentOutcome(
                        success=False,
                        student_id=student.id,
                        course_code=course.code,
                        reason=NOT_REGISTERED_REASON,
                    ))

                validators = self.validator_factory(self.registry.find_course)
                failure = run_validators(validators, student, course)
                if failure is not None:
                    logger.info(
                        "Enrollment denied by validator",
                        student_id=student.id,
                        course_code=course.code,
                        validator=failure.validator,
                        reason=failure.reason,
                    )
                    return self._remember(EnrollmentOutcome(
                        success=False,
                        student_id=student.id,
                        course_code=course.code,
                        reason=failure.reason,
                        failed_validator=failure.validator,
                    ))

                enrollment = Enrollment(student_id=student.id, course_code=course.code)
                if not self._commit(student, course, enrollment):
                    return self._remember(EnrollmentOutcome(
                        success=False,
                        student_id=student.id,
                        course_code=course.code,
                        reason=RECORDING_FAILED_REASON,
                    ))

                self.event_bus.publish(
                    Topic.ENROLLMENT, f"Student {student.id} enrolled in {course.code}"
                )
        except LockAcquisitionError:
            return self._remember(EnrollmentOutcome(
                success=False,
                student_id=student.id,
                course_code=course.code,
                reason=RESOURCE_BUSY_REASON,
            ))

        logger.info(
            "Enrollment successful",
            student_id=student.id,
            course_code=course.code,
            enrolled=len(course.roster),
            capacity=course.capacity,
        )
        return self._remember(EnrollmentOutcome(
            success=True, student_id=student.id, course_code=course.code
        ))

    # --- Drop -------------------------------------------------------------------

    def drop(self, student: Student, course: Course) -> bool:
        """
        Drop a student's enrollment in a course.

        Publishes ``drop`` and then ``waitlist`` (a seat opened) on success.

        Returns:
            False if the student was not enrolled (nothing published)
        """
        logger.info("Dropping enrollment", student_id=student.id, course_code=course.code)

        try:
            with self.lock_manager.hold(*self._resources(student, course), owner="drop"):
                enrollment = student.find_enrollment(course.code)
                if enrollment is None:
                    logger.info(
                        "Student not enrolled in course",
                        student_id=student.id,
                        course_code=course.code,
                    )
                    self._local.last_failure_reason = "student not enrolled in course"
                    return False

                if not self._release(student, course, enrollment):
                    self._local.last_failure_reason = "enrollment could not be removed"
                    return False

                self.event_bus.publish(Topic.DROP, f"Student {student.id} dropped {course.code}")
                self.event_bus.publish(Topic.WAITLIST, f"Seat opened in {course.code}")
        except LockAcquisitionError:
            self._local.last_failure_reason = RESOURCE_BUSY_REASON
            return False

        self._local.last_failure_reason = None
        return True

    # --- Override ---------------------------------------------------------------

    def force_add(self, student: Student, course: Course) -> bool:
        """
        Enroll without running validators (admin override, may exceed capacity).

        Returns:
            False if the student is already enrolled in the course or either
            entity is not held by the registry
        """
        try:
            with self.lock_manager.hold(*self._resources(student, course), owner="force_add"):
                if not self._is_registered(student, course):
                    self._local.last_failure_reason = NOT_REGISTERED_REASON
                    return False

                if student.is_enrolled_in(course.code):
                    logger.warning(
                        "Force-add skipped, already enrolled",
                        student_id=student.id,
                        course_code=course.code,
                    )
                    self._local.last_failure_reason = "student already enrolled in course"
                    return False

                enrollment = Enrollment(
                    student_id=student.id, course_code=course.code, overridden=True
                )
                if not self._commit(student, course, enrollment):
                    self._local.last_failure_reason = RECORDING_FAILED_REASON
                    return False

                self.event_bus.publish(
                    Topic.ENROLLMENT,
                    f"Student {student.id} enrolled in {course.code} (override)",
                )
        except LockAcquisitionError:
            self._local.last_failure_reason = RESOURCE_BUSY_REASON
            return False

        logger.info(
            "Force-added student",
            student_id=student.id,
            course_code=course.code,
            enrolled=len(course.roster),
            capacity=course.capacity,
        )
        self._local.last_failure_reason = None
        return True

    def set_capacity(self, course: Course, capacity: int) -> None:
        """Change a course's capacity while holding its lock."""
        with self.lock_manager.hold(course_resource(course.code), owner="set_capacity"):
            previous = course.capacity
            course.set_capacity(capacity)
        logger.info(
            "Course capacity changed",
            course_code=course.code,
            previous=previous,
            capacity=capacity,
        )

    # --- Paired mutation --------------------------------------------------------

    def _commit(self, student: Student, course: Course, enrollment: Enrollment) -> bool:
        """Append to roster then student list; undo the roster append on failure."""
        course.add_enrollment(enrollment)
        try:
            student.add_enrollment(enrollment)
        except Exception as e:
            course.remove_enrollment(enrollment)
            logger.error(
                "Enrollment failed, rolled back",
                student_id=student.id,
                course_code=course.code,
                error=str(e),
            )
            return False
        return True

    def _release(self, student: Student, course: Course, enrollment: Enrollment) -> bool:
        """
        Remove from student list then roster; restore the student side on failure.

        The roster must hold the same object as the student list. A one-sided
        enrollment is left in place for the invariant audit to report.
        """
        if not any(e is enrollment for e in course.roster):
            logger.error(
                "Enrollment missing from course roster",
                student_id=student.id,
                course_code=course.code,
            )
            return False

        position = next(i for i, e in enumerate(student.enrollments) if e is enrollment)
        student.remove_enrollment(enrollment)
        try:
            course.remove_enrollment(enrollment)
        except Exception as e:
            student.enrollments.insert(position, enrollment)
            logger.error(
                "Drop failed, rolled back",
                student_id=student.id,
                course_code=course.code,
                error=str(e),
            )
            return False
        return True
