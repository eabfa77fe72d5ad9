"""Integration Tests: AdminFacade overrides, capacity, reports and audits.

Invariants:
    - Overrides may exceed capacity but never break bidirectional consistency
    - Reports render the same counts in every format
"""

import json

import pytest

from campus_services.admin_service.facade import AdminFacade
from campus_services.admin_service.reports import EnrollmentReport, ReportFormat
from registrar.domain.entities import Enrollment
from registrar.domain.exceptions import EntityNotFoundError, ValidationError
from registrar.verification.enrollment_invariants import InvariantViolationType


@pytest.fixture
def admin(registry, coordinator) -> AdminFacade:
    return AdminFacade(registry, coordinator)


# -- Overrides and capacity ----------------------------------------------------


def test_force_add_over_capacity(admin, coordinator, alice, cs201):
    coordinator.enroll(alice, cs201)

    assert admin.force_add("S002", "CS201") is True
    assert len(cs201.roster) == 2

    violations = admin.audit()
    assert [v.type for v in violations] == [InvariantViolationType.CAPACITY_EXCEEDED]
    assert violations[0].details["overridden"] == 1
    assert not violations[0].is_consistency_violation


def test_force_add_unknown_student(admin):
    with pytest.raises(EntityNotFoundError):
        admin.force_add("S404", "CS201")


def test_set_capacity_opens_seats(admin, coordinator, alice, bob, cs201):
    coordinator.enroll(alice, cs201)

    course = admin.set_capacity("CS201", 2)

    assert course is cs201
    assert coordinator.enroll(bob, cs201) is True


def test_set_capacity_rejects_negative(admin, cs201):
    with pytest.raises(ValidationError) as exc_info:
        admin.set_capacity("CS201", -1)

    assert exc_info.value.context == {"field": "capacity", "value": "-1"}
    assert cs201.capacity == 1


# -- Reports -------------------------------------------------------------------


def test_csv_report(admin, coordinator, alice):
    coordinator.enroll(alice, coordinator.registry.get_course("BUS101"))

    report = admin.enrollment_report(ReportFormat.CSV).decode("utf-8")

    assert report.splitlines() == [
        "Course,Enrolled,Capacity",
        "CS201,0,1",
        "BUS101,1,50",
        "MATH210,0,30",
    ]


def test_json_report(admin, coordinator, alice, cs201):
    coordinator.enroll(alice, cs201)

    report = json.loads(admin.enrollment_report(ReportFormat.JSON))

    assert report["report"] == "enrollment"
    assert report["data"][0] == {"course": "CS201", "enrolled": 1, "capacity": 1}
    assert len(report["data"]) == 3


def test_report_snapshot_is_stable(cs201, coordinator, alice):
    report = EnrollmentReport([cs201])
    coordinator.enroll(alice, cs201)

    assert json.loads(report.generate_report(ReportFormat.JSON))["data"][0]["enrolled"] == 0
    assert report.get_report_metadata().parameters == {"courses": 1}


# -- Audit ---------------------------------------------------------------------


def test_audit_clean_registry(admin, coordinator, alice, cs201):
    coordinator.enroll(alice, cs201)

    assert admin.audit() == []


def test_audit_detects_one_sided_enrollment(admin, alice, cs201):
    cs201.add_enrollment(Enrollment(student_id=alice.id, course_code=cs201.code))

    types = {v.type for v in admin.audit()}

    assert InvariantViolationType.ONE_SIDED_ENROLLMENT in types
    assert admin.monitor.get_statistics()["verification_count"] == 1
