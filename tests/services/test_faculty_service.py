"""Integration Tests: FacultyService gradebook.

Invariants:
    - Only letters on the grading scale are accepted (case and whitespace normalized)
    - Grades exist only for enrolled students
    - A "grade" notification is published only when a transition is applied
    - Corrections after submission create a new Pending record
"""

import pytest

from campus_services.faculty_service.grading_service import FacultyService
from registrar.domain.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    ErrorCode,
    InvalidGradeLetterError,
)
from registrar.domain.grading import GradeState


@pytest.fixture
def faculty(registry, bus) -> FacultyService:
    return FacultyService(registry, bus)


@pytest.fixture
def graded_class(coordinator, bob, alice, bus101):
    coordinator.enroll(alice, bus101)
    coordinator.enroll(bob, bus101)
    return bus101


# -- Letters -------------------------------------------------------------------


@pytest.mark.parametrize("letter", ["A", "b", " c ", "P"])
def test_validate_letter_accepts_scale(faculty, letter):
    assert faculty.validate_letter(letter) == letter.strip().upper()


@pytest.mark.parametrize("letter", ["E", "A+", "", None])
def test_validate_letter_rejects_others(faculty, letter):
    with pytest.raises(InvalidGradeLetterError) as exc_info:
        faculty.validate_letter(letter)

    assert exc_info.value.error_code == ErrorCode.INVALID_GRADE_LETTER
    assert exc_info.value.context["allowed"] == ["A", "B", "C", "D", "F", "P"]


def test_custom_scale(registry, bus):
    faculty = FacultyService(registry, bus, valid_letters=["S", "U"])

    assert faculty.validate_letter("s") == "S"
    with pytest.raises(InvalidGradeLetterError):
        faculty.validate_letter("A")


# -- Recording -----------------------------------------------------------------


def test_roster(faculty, graded_class):
    assert [s.id for s in faculty.roster("BUS101")] == ["S001", "S002"]


def test_record_requires_enrollment(faculty):
    with pytest.raises(BusinessRuleViolationError) as exc_info:
        faculty.record_grade("S002", "CS201", "A")

    assert exc_info.value.context["rule_name"] == "grade_requires_enrollment"


def test_record_unknown_course(faculty):
    with pytest.raises(EntityNotFoundError):
        faculty.record_grade("S002", "NOPE999", "A")


def test_pending_grade_updated_in_place(faculty, graded_class):
    first = faculty.record_grade("S002", "BUS101", "B")
    second = faculty.record_grade("S002", "BUS101", "a")

    assert second is first
    assert second.letter == "A"
    assert second.version == 1


def test_get_grade_missing(faculty):
    with pytest.raises(EntityNotFoundError) as exc_info:
        faculty.get_grade("S002", "BUS101")

    assert exc_info.value.entity_id == "S002:BUS101"


# -- Lifecycle -----------------------------------------------------------------


def test_submit_and_approve_publish(faculty, recorder, graded_class):
    faculty.record_grade("S002", "BUS101", "A")

    faculty.submit_grade("S002", "BUS101")
    faculty.approve_grade("S002", "BUS101")
    outcome = faculty.submit_grade("S002", "BUS101")

    assert not outcome.applied
    assert faculty.get_grade("S002", "BUS101").state_name() == "Final"
    grade_events = [m for t, m in recorder.received if t == "grade"]
    assert grade_events == [
        "Grade A submitted for student S002 in course BUS101",
        "Grade A approved for student S002 in course BUS101",
    ]


def test_approve_pending_is_reported_not_raised(faculty, recorder, graded_class):
    faculty.record_grade("S001", "BUS101", "C")

    outcome = faculty.approve_grade("S001", "BUS101")

    assert not outcome.applied
    assert outcome.message == "Cannot approve: grade still pending"
    assert "grade" not in recorder.topics


def test_correction_after_final_supersedes(faculty, graded_class):
    original = faculty.record_grade("S002", "BUS101", "B")
    faculty.submit_grade("S002", "BUS101")
    faculty.approve_grade("S002", "BUS101")

    corrected = faculty.record_grade("S002", "BUS101", "A")

    assert corrected is not original
    assert corrected.previous_grade_id == original.id
    assert corrected.state == GradeState.PENDING
    assert original.state == GradeState.FINAL
    assert faculty.get_grade("S002", "BUS101") is corrected
    assert [g.version for g in faculty.grade_history("S002", "BUS101")] == [1, 2]


def test_grades_for_course(faculty, graded_class):
    faculty.record_grade("S001", "BUS101", "A")
    faculty.record_grade("S002", "BUS101", "B")

    assert {g.student_id for g in faculty.grades_for_course("BUS101")} == {"S001", "S002"}
    assert faculty.grades_for_course("CS201") == []


# -- Batch ---------------------------------------------------------------------


def test_submit_batch_continues_past_bad_entries(faculty, graded_class):
    result = faculty.submit_batch("BUS101", {"S001": "A", "S002": "Z", "S003": "B"})

    assert result.submitted == ["S001"]
    assert set(result.rejected) == {"S002", "S003"}
    assert result.rejected["S002"] == "Invalid grade letter: Z"
    assert not result.all_submitted
    assert faculty.get_grade("S001", "BUS101").state == GradeState.SUBMITTED


def test_submit_batch_resubmission_of_submitted_grade(faculty, graded_class):
    faculty.submit_batch("BUS101", {"S001": "A"})

    # The second entry supersedes the submitted grade and submits the new record
    result = faculty.submit_batch("BUS101", {"S001": "B"})

    assert result.all_submitted
    assert faculty.get_grade("S001", "BUS101").letter == "B"
    assert faculty.get_grade("S001", "BUS101").version == 2
