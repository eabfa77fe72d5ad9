"""Unit Tests: enrollment validator chain.

Invariants:
    - Validators never mutate the student or course they inspect
    - validate()/reason() memoize the last failure; reason is empty after a pass
    - The default chain is prerequisites, capacity, time conflict, in that order
"""

from registrar.domain.academic import Course
from registrar.domain.entities import Enrollment, Student
from registrar.domain.validators import (
    COURSE_FULL_REASON,
    CapacityValidator,
    PrerequisiteValidator,
    TimeConflictValidator,
    create_default_validators,
    run_validators,
)


def _enroll_directly(student, course):
    enrollment = Enrollment(student_id=student.id, course_code=course.code)
    course.add_enrollment(enrollment)
    student.add_enrollment(enrollment)


# -- Prerequisites -------------------------------------------------------------


def test_prerequisite_satisfied(alice, cs201):
    validator = PrerequisiteValidator()

    assert validator.validate(alice, cs201) is True
    assert validator.reason() == ""


def test_prerequisite_missing_names_course(carol, cs201):
    validator = PrerequisiteValidator()

    assert validator.validate(carol, cs201) is False
    assert validator.reason() == "Missing prerequisite: CS101"


def test_prerequisite_reports_first_missing_in_sorted_order():
    student = Student(id="S020", name="Eve")
    course = Course(
        code="CS401", name="Distributed Systems", capacity=5,
        prerequisites={"CS301", "CS201"}, schedule="Thu1-3",
    )

    result = PrerequisiteValidator().check(student, course)

    assert not result.passed
    assert result.reason == "Missing prerequisite: CS201"
    assert result.metadata["missing_prerequisite"] == "CS201"
    assert result.violated_rules == ["prerequisite_requirement"]


def test_reason_cleared_after_pass(alice, carol, cs201):
    validator = PrerequisiteValidator()
    validator.validate(carol, cs201)

    validator.validate(alice, cs201)

    assert validator.reason() == ""


# -- Capacity ------------------------------------------------------------------


def test_capacity_full(alice, bob, cs201):
    _enroll_directly(alice, cs201)
    validator = CapacityValidator()

    assert validator.validate(bob, cs201) is False
    assert validator.reason() == COURSE_FULL_REASON == "course is full"


def test_capacity_zero_rejects_everyone(alice):
    closed = Course(code="CS000", name="Closed", capacity=0, schedule="Sat")

    result = CapacityValidator()(alice, closed)

    assert not result.passed
    assert result.metadata == {"capacity": 0, "enrolled": 0}


def test_capacity_reports_available_seats(alice, bus101):
    result = CapacityValidator().check(alice, bus101)

    assert result.passed
    assert result.metadata["available_seats"] == 50


# -- Time conflicts ------------------------------------------------------------


def test_time_conflict_with_enrolled_course(registry, alice, cs201, math210):
    _enroll_directly(alice, cs201)
    validator = TimeConflictValidator(registry.find_course)

    assert validator.validate(alice, math210) is False
    assert validator.reason() == "Time conflict with CS201"


def test_no_time_conflict_on_different_schedule(registry, alice, cs201, bus101):
    _enroll_directly(alice, cs201)

    assert TimeConflictValidator(registry.find_course).validate(alice, bus101) is True


def test_time_conflict_skips_unknown_courses(registry, alice, math210):
    alice.add_enrollment(Enrollment(student_id=alice.id, course_code="GONE101"))

    assert TimeConflictValidator(registry.find_course).validate(alice, math210) is True


# -- Chain ---------------------------------------------------------------------


def test_default_chain_order(registry):
    validators = create_default_validators(registry.find_course)

    assert [type(v) for v in validators] == [
        PrerequisiteValidator,
        CapacityValidator,
        TimeConflictValidator,
    ]


def test_default_chain_is_fresh_each_call(registry):
    first = create_default_validators(registry.find_course)
    second = create_default_validators(registry.find_course)

    assert all(a is not b for a, b in zip(first, second))


def test_chain_stops_at_first_failure(registry, alice, bob, carol, cs201):
    _enroll_directly(alice, cs201)
    validators = create_default_validators(registry.find_course)

    # Carol both lacks CS101 and finds the course full; prerequisites run first
    failure = run_validators(validators, carol, cs201)

    assert failure.validator == "prerequisite_check"
    assert failure.reason == "Missing prerequisite: CS101"
    assert run_validators(validators, bob, cs201).reason == "course is full"


def test_chain_passes(registry, alice, cs201):
    assert run_validators(create_default_validators(registry.find_course), alice, cs201) is None


def test_validators_do_not_mutate_arguments(registry, alice, cs201):
    before_student = alice.model_dump()
    before_course = cs201.model_dump()

    run_validators(create_default_validators(registry.find_course), alice, cs201)

    assert alice.model_dump() == before_student
    assert cs201.model_dump() == before_course
