"""Admin service: overrides, capacity management, reports and audits."""

from campus_services.admin_service.facade import AdminFacade
from campus_services.admin_service.reports import EnrollmentReport, ReportFormat

__all__ = ["AdminFacade", "EnrollmentReport", "ReportFormat"]
