"""Unit Tests: enrollment invariant monitor.

Invariants:
    - Consistency violations (one-sided, duplicate, dangling) fail the check
    - Capacity and schedule overlaps are reported but do not
"""

import pytest

from registrar.domain.entities import Enrollment
from registrar.verification.enrollment_invariants import (
    InvariantMonitor,
    InvariantViolationType,
    assert_registry_consistent,
)


def _pair(student, course):
    enrollment = Enrollment(student_id=student.id, course_code=course.code)
    course.add_enrollment(enrollment)
    student.add_enrollment(enrollment)
    return enrollment


def test_empty_registry_is_consistent(registry):
    consistent, violations = InvariantMonitor().verify_registry(registry)

    assert consistent
    assert violations == []


def test_student_side_only(registry, alice, bus101):
    alice.add_enrollment(Enrollment(student_id=alice.id, course_code=bus101.code))

    consistent, violations = InvariantMonitor().verify_registry(registry)

    assert not consistent
    assert [v.type for v in violations] == [InvariantViolationType.ONE_SIDED_ENROLLMENT]


def test_double_enrollment(registry, alice, bus101):
    _pair(alice, bus101)
    _pair(alice, bus101)

    _, violations = InvariantMonitor().verify_registry(registry)

    assert InvariantViolationType.DOUBLE_ENROLLMENT in {v.type for v in violations}


def test_dangling_course_reference(registry, alice):
    alice.add_enrollment(Enrollment(student_id=alice.id, course_code="GONE101"))

    _, violations = InvariantMonitor().verify_registry(registry)

    assert InvariantViolationType.DANGLING_REFERENCE in {v.type for v in violations}


def test_time_overlap_is_reported_only(registry, alice, cs201, math210):
    _pair(alice, cs201)
    _pair(alice, math210)

    consistent, violations = InvariantMonitor().verify_registry(registry)

    assert consistent
    assert [v.type for v in violations] == [InvariantViolationType.TIME_OVERLAP]
    assert violations[0].details["courses"] == ["CS201", "MATH210"]


def test_assert_registry_consistent_raises(registry, bob, cs201):
    cs201.add_enrollment(Enrollment(student_id=bob.id, course_code=cs201.code))

    with pytest.raises(AssertionError, match="Enrollment invariant violated"):
        assert_registry_consistent(registry)


def test_statistics_accumulate(registry, alice, bus101):
    monitor = InvariantMonitor()
    monitor.verify_registry(registry)
    alice.add_enrollment(Enrollment(student_id=alice.id, course_code=bus101.code))
    monitor.verify_registry(registry)

    assert monitor.get_statistics() == {"verification_count": 2, "violation_count": 1}
