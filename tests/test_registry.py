"""Unit Tests: InMemoryRegistry arenas."""

import pytest

from registrar.domain.academic import Course
from registrar.domain.entities import Enrollment, Student
from registrar.domain.exceptions import EntityAlreadyExistsError, EntityNotFoundError


def test_duplicate_ids_rejected(registry):
    with pytest.raises(EntityAlreadyExistsError):
        registry.add_student(Student(id="S001", name="Alice Again"))
    with pytest.raises(EntityAlreadyExistsError):
        registry.add_course(Course(code="CS201", name="Duplicate", capacity=1, schedule="Mon9-11"))


def test_find_returns_none_get_raises(registry):
    assert registry.find_student("S404") is None
    assert registry.find_course("NOPE999") is None
    with pytest.raises(EntityNotFoundError):
        registry.get_course("NOPE999")


def test_resolve_enrollment(registry, alice, cs201):
    student, course = registry.resolve(Enrollment(student_id="S001", course_code="CS201"))

    assert student is alice
    assert course is cs201


def test_relationship_views(coordinator, registry, alice, bob, bus101):
    coordinator.enroll(bob, bus101)
    coordinator.enroll(alice, bus101)

    assert registry.roster_students(bus101) == [bob, alice]
    assert registry.enrolled_courses(alice) == [bus101]
