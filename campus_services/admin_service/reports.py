"""
Enrollment Report Generation

Per-course enrollment counts rendered as CSV or JSON.
"""

import csv
import io
import json
from datetime import datetime
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, Field

from registrar.domain.academic import Course
from registrar.domain.entities import utcnow

logger = structlog.get_logger(__name__)


class ReportFormat(str, Enum):
    """Supported report output formats."""

    JSON = "json"
    CSV = "csv"


class ReportMetadata(BaseModel):
    """Report metadata."""

    report_type: str = Field(..., description="Report type identifier")
    title: str = Field(..., description="Report title")
    generated_at: datetime = Field(default_factory=utcnow)
    parameters: dict[str, Any] = Field(default_factory=dict)


class EnrollmentReport:
    """
    Enrollment snapshot of a set of courses.

    Counts are captured when the report is created, so every format renders
    the same numbers.
    """

    CSV_HEADER = ["Course", "Enrolled", "Capacity"]

    def __init__(self, courses: list[Course]):
        self.rows = [
            {"course": c.code, "enrolled": len(c.roster), "capacity": c.capacity}
            for c in courses
        ]
        self.generated_at = utcnow()

    def generate_report(self, format: ReportFormat) -> bytes:
        """Render the report in the requested format."""
        if format == ReportFormat.CSV:
            content = self._generate_csv()
        elif format == ReportFormat.JSON:
            content = self._generate_json()
        else:
            raise ValueError(f"Unsupported format: {format}")
        logger.info("Report generated", report_type="enrollment", format=format.value, size_bytes=len(content))
        return content

    def get_report_metadata(self) -> ReportMetadata:
        return ReportMetadata(
            report_type="enrollment",
            title="Enrollment Report",
            generated_at=self.generated_at,
            parameters={"courses": len(self.rows)},
        )

    def _generate_json(self) -> bytes:
        data = {"report": "enrollment", "data": self.rows}
        return json.dumps(data).encode("utf-8")

    def _generate_csv(self) -> bytes:
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(self.CSV_HEADER)
        for row in self.rows:
            writer.writerow([row["course"], row["enrolled"], row["capacity"]])
        return output.getvalue().encode("utf-8")
