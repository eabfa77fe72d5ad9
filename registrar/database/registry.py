"""
In-Memory Registry

Centralized arenas mapping student ids and course codes to their entities.
Enrollments hold identifiers only; callers resolve them here.
"""

import threading

import structlog

from registrar.domain.academic import Course
from registrar.domain.entities import Enrollment, Student
from registrar.domain.exceptions import EntityAlreadyExistsError, EntityNotFoundError

logger = structlog.get_logger(__name__)


class InMemoryRegistry:
    """
    Thread-safe store of students and courses for one service process.

    Only the maps are guarded here; entity collections are protected by the
    enrollment coordinator's resource locks.
    """

    def __init__(self) -> None:
        self._students: dict[str, Student] = {}
        self._courses: dict[str, Course] = {}
        self._lock = threading.Lock()

    # --- Students ---------------------------------------------------------------

    def add_student(self, student: Student) -> Student:
        """
        Register a student.

        Raises:
            EntityAlreadyExistsError: If the id is taken
        """
        with self._lock:
            if student.id in self._students:
                raise EntityAlreadyExistsError("Student", student.id)
            self._students[student.id] = student
        logger.info("Student registered", student_id=student.id)
        return student

    def find_student(self, student_id: str) -> Student | None:
        with self._lock:
            return self._students.get(student_id)

    def get_student(self, student_id: str) -> Student:
        """
        Resolve a student id.

        Raises:
            EntityNotFoundError: If no such student is registered
        """
        student = self.find_student(student_id)
        if student is None:
            raise EntityNotFoundError("Student", student_id)
        return student

    def list_students(self) -> list[Student]:
        with self._lock:
            return list(self._students.values())

    # --- Courses ----------------------------------------------------------------

    def add_course(self, course: Course) -> Course:
        """
        Register a course.

        Raises:
            EntityAlreadyExistsError: If the code is taken
        """
        with self._lock:
            if course.code in self._courses:
                raise EntityAlreadyExistsError("Course", course.code)
            self._courses[course.code] = course
        logger.info("Course registered", course_code=course.code, capacity=course.capacity)
        return course

    def find_course(self, course_code: str) -> Course | None:
        with self._lock:
            return self._courses.get(course_code)

    def get_course(self, course_code: str) -> Course:
        """
        Resolve a course code.

        Raises:
            EntityNotFoundError: If no such course is registered
        """
        course = self.find_course(course_code)
        if course is None:
            raise EntityNotFoundError("Course", course_code)
        return course

    def list_courses(self) -> list[Course]:
        with self._lock:
            return list(self._courses.values())

    # --- Relationships ----------------------------------------------------------

    def roster_students(self, course: Course) -> list[Student]:
        """Students on a course roster, in enrollment order."""
        students = []
        for enrollment in list(course.roster):
            student = self.find_student(enrollment.student_id)
            if student is not None:
                students.append(student)
        return students

    def enrolled_courses(self, student: Student) -> list[Course]:
        """Courses a student is enrolled in, in enrollment order."""
        courses = []
        for enrollment in list(student.enrollments):
            course = self.find_course(enrollment.course_code)
            if course is not None:
                courses.append(course)
        return courses

    def resolve(self, enrollment: Enrollment) -> tuple[Student, Course]:
        """Resolve both sides of an enrollment."""
        return self.get_student(enrollment.student_id), self.get_course(enrollment.course_code)
