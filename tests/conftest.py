"""Root conftest: shared fixtures for registrar tests.

The standard catalog:
Alice and Bob have completed CS101; CS201 requires it and has one seat.
"""

import pytest

from campus_services.student_service.enrollment_service import EnrollmentCoordinator
from registrar.concurrency.locking import LockManager
from registrar.database.registry import InMemoryRegistry
from registrar.domain.academic import Course
from registrar.domain.entities import Student
from registrar.events.bus import EventBus, NotificationListener


class RecordingListener(NotificationListener):
    """Listener that remembers every (topic, message) it receives."""

    def __init__(self):
        self.received: list[tuple[str, str]] = []

    def on_notify(self, topic: str, message: str) -> None:
        self.received.append((topic, message))

    @property
    def topics(self) -> list[str]:
        return [topic for topic, _ in self.received]


@pytest.fixture
def registry() -> InMemoryRegistry:
    registry = InMemoryRegistry()
    registry.add_student(Student(id="S001", name="Alice", completed_courses={"CS101"}))
    registry.add_student(Student(id="S002", name="Bob", completed_courses={"CS101"}))
    registry.add_student(Student(id="S003", name="Carol"))
    registry.add_course(Course(
        code="CS201", name="Algorithms", capacity=1,
        prerequisites={"CS101"}, schedule="Mon9-11",
    ))
    registry.add_course(Course(code="BUS101", name="Intro Business", capacity=50, schedule="Tue10-12"))
    registry.add_course(Course(code="MATH210", name="Linear Algebra", capacity=30, schedule="Mon9-11"))
    return registry


@pytest.fixture
def alice(registry) -> Student:
    return registry.get_student("S001")


@pytest.fixture
def bob(registry) -> Student:
    return registry.get_student("S002")


@pytest.fixture
def carol(registry) -> Student:
    return registry.get_student("S003")


@pytest.fixture
def cs201(registry) -> Course:
    return registry.get_course("CS201")


@pytest.fixture
def bus101(registry) -> Course:
    return registry.get_course("BUS101")


@pytest.fixture
def math210(registry) -> Course:
    return registry.get_course("MATH210")


@pytest.fixture
def bus() -> EventBus:
    return EventBus(name="test")


@pytest.fixture
def recorder(bus) -> RecordingListener:
    listener = RecordingListener()
    bus.subscribe(listener)
    return listener


@pytest.fixture
def lock_manager() -> LockManager:
    return LockManager()


@pytest.fixture
def coordinator(registry, bus, lock_manager) -> EnrollmentCoordinator:
    return EnrollmentCoordinator(registry=registry, event_bus=bus, lock_manager=lock_manager)
