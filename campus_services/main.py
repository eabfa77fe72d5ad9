"""Registrar Application

Composition root: builds the shared registry, event bus and lock manager
once, and hands them to the student, faculty and admin services.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from campus_services.admin_service.facade import AdminFacade
from campus_services.faculty_service.grading_service import FacultyService
from campus_services.student_service.enrollment_service import EnrollmentCoordinator
from campus_services.student_service.service import StudentService
from registrar.concurrency.locking import LockManager
from registrar.config import Settings, get_settings
from registrar.database.registry import InMemoryRegistry
from registrar.events.bus import EventBus, LoggingListener, ThreadPoolEventBus
from registrar.logging import setup_logging

logger = structlog.get_logger(__name__)


def create_event_bus(settings: Settings) -> EventBus:
    """Build the bus selected by configuration."""
    if settings.event_bus_async:
        return ThreadPoolEventBus(
            name=settings.service_name,
            max_history=settings.event_history_limit,
            max_workers=settings.event_bus_workers,
        )
    return EventBus(name=settings.service_name, max_history=settings.event_history_limit)


class RegistrarApplication:
    """
    Wires the services of one process around a single registry and bus.

    The bus lives from construction until ``shutdown()``.
    """

    def __init__(self, settings: Settings | None = None, registry: InMemoryRegistry | None = None):
        self.settings = settings or get_settings()
        self.registry = registry or InMemoryRegistry()
        self.event_bus = create_event_bus(self.settings)
        self.lock_manager = LockManager(wait_timeout=self.settings.lock_wait_timeout)
        self.coordinator = EnrollmentCoordinator(
            registry=self.registry,
            event_bus=self.event_bus,
            lock_manager=self.lock_manager,
        )
        self.student_service = StudentService(self.registry, self.coordinator)
        self.faculty_service = FacultyService(
            self.registry,
            self.event_bus,
            valid_letters=self.settings.valid_grade_letters,
        )
        self.admin = AdminFacade(self.registry, self.coordinator)
        self._started = False

    def start(self, configure_logging: bool = True) -> None:
        if self._started:
            return
        if configure_logging:
            setup_logging(self.settings)
        self.event_bus.subscribe(LoggingListener(self.settings.service_name))
        self._started = True
        logger.info(
            "Registrar started",
            environment=self.settings.environment,
            async_bus=self.settings.event_bus_async,
        )

    def shutdown(self) -> None:
        if self.event_bus.closed:
            return
        self.event_bus.close()
        self._started = False
        logger.info("Registrar shutdown complete")


@contextmanager
def lifespan(
    settings: Settings | None = None, configure_logging: bool = True
) -> Iterator[RegistrarApplication]:
    """Application lifespan manager."""
    app = RegistrarApplication(settings)
    app.start(configure_logging=configure_logging)
    try:
        yield app
    finally:
        app.shutdown()
