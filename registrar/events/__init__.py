"""
Notification System

In-process publish/subscribe used to decouple the enrollment coordinator
from whoever reacts to enrollments, drops, freed seats and grade changes.
"""

from registrar.events.base import Notification, Topic
from registrar.events.bus import (
    CallbackListener,
    EventBus,
    LoggingListener,
    NotificationListener,
    ThreadPoolEventBus,
)

__all__ = [
    "Topic",
    "Notification",
    "NotificationListener",
    "CallbackListener",
    "LoggingListener",
    "EventBus",
    "ThreadPoolEventBus",
]
