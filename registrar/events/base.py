"""
Base Notification Types

Topics and the immutable record kept for every published notification.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from registrar.domain.entities import utcnow


class Topic(str, Enum):
    """Notification topics published by the registrar."""

    ENROLLMENT = "enrollment"
    DROP = "drop"
    WAITLIST = "waitlist"
    GRADE = "grade"


class Notification(BaseModel):
    """A published (topic, message) pair with tracking metadata."""

    model_config = ConfigDict(frozen=True)

    notification_id: UUID = Field(default_factory=uuid4, description="Unique notification ID")
    topic: str = Field(..., description="Topic the message was published on")
    message: str = Field(..., description="Human-readable message")
    published_at: datetime = Field(default_factory=utcnow)
