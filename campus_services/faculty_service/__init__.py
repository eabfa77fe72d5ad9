"""Faculty service: rosters and the gradebook."""

from campus_services.faculty_service.grading_service import FacultyService, GradeBatchResult

__all__ = ["FacultyService", "GradeBatchResult"]
