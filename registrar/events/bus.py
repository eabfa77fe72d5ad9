"""
Event Bus for Publish/Subscribe

In-process fan-out of (topic, message) notifications to registered listeners.

Delivery is synchronous by default: ``publish`` calls every listener on the
publisher's thread, in registration order, before returning. A slow listener
therefore delays the publishing call (including an enrollment holding its
course lock). ``ThreadPoolEventBus`` moves delivery to a worker thread for
callers that cannot afford that.

Buses are constructed explicitly at service start and shared by reference;
``close()`` ends their lifetime at shutdown.
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

import structlog

from registrar.events.base import Notification, Topic

logger = structlog.get_logger(__name__)


class NotificationListener(ABC):
    """Capability for receiving notifications from an event bus."""

    @abstractmethod
    def on_notify(self, topic: str, message: str) -> None:
        """
        Handle a notification.

        Args:
            topic: Topic the message was published on
            message: Human-readable message
        """


class CallbackListener(NotificationListener):
    """Adapts a plain ``(topic, message)`` callable to a listener."""

    def __init__(self, callback: Callable[[str, str], None], name: str | None = None):
        self.callback = callback
        self.name = name or getattr(callback, "__name__", "callback")

    def on_notify(self, topic: str, message: str) -> None:
        self.callback(topic, message)

    def __repr__(self) -> str:
        return f"CallbackListener({self.name})"


class LoggingListener(NotificationListener):
    """Writes every notification to the structured log."""

    def __init__(self, service: str):
        self.service = service

    def on_notify(self, topic: str, message: str) -> None:
        logger.info("Notification received", service=self.service, topic=topic, message=message)


def _topic_value(topic: Topic | str) -> str:
    return topic.value if isinstance(topic, Topic) else topic


class EventBus:
    """
    Synchronous publish/subscribe hub.

    Supports:
    - Duplicate registrations (each is invoked once per publish)
    - Unsubscribe by listener identity
    - Listener fault isolation
    - Bounded notification history
    """

    def __init__(self, name: str = "registrar", max_history: int | None = None):
        """
        Initialize event bus.

        Args:
            name: Bus identifier used in log lines
            max_history: Notifications kept in history (None = unlimited)
        """
        self.name = name
        self._listeners: list[NotificationListener] = []
        self._history: list[Notification] = []
        self._max_history = max_history
        self._closed = False
        self._lock = threading.Lock()
        logger.info("Event bus created", bus=name)

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: NotificationListener) -> None:
        """
        Register a listener (no duplicate detection).

        Args:
            listener: Listener to append to the registration list
        """
        with self._lock:
            self._listeners.append(listener)
        logger.info(
            "Subscriber registered",
            bus=self.name,
            subscriber=listener.__class__.__name__,
        )

    def unsubscribe(self, listener: NotificationListener) -> bool:
        """
        Remove one registration of ``listener`` (matched by identity).

        Returns:
            True if a registration was removed
        """
        with self._lock:
            for index, registered in enumerate(self._listeners):
                if registered is listener:
                    del self._listeners[index]
                    break
            else:
                return False
        logger.info(
            "Subscriber unregistered",
            bus=self.name,
            subscriber=listener.__class__.__name__,
        )
        return True

    def publish(self, topic: Topic | str, message: str) -> int:
        """
        Publish a notification to every currently registered listener.

        Args:
            topic: Notification topic
            message: Human-readable message

        Returns:
            Number of listeners the notification was handed to
        """
        notification = Notification(topic=_topic_value(topic), message=message)

        with self._lock:
            if self._closed:
                logger.warning(
                    "Publish on closed bus ignored",
                    bus=self.name,
                    topic=notification.topic,
                )
                return 0
            self._record(notification)
            listeners = list(self._listeners)

        logger.debug(
            "Publishing notification",
            bus=self.name,
            topic=notification.topic,
            message=notification.message,
            subscribers=len(listeners),
        )
        self._dispatch(listeners, notification)
        return len(listeners)

    def _dispatch(self, listeners: list[NotificationListener], notification: Notification) -> None:
        _deliver(self.name, listeners, notification)

    def _record(self, notification: Notification) -> None:
        self._history.append(notification)
        if self._max_history is not None and len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:] if self._max_history else []

    def get_history(self, topic: Topic | str | None = None) -> list[Notification]:
        """
        Get published notifications, oldest first.

        Args:
            topic: Optional topic filter
        """
        with self._lock:
            history = list(self._history)
        if topic is None:
            return history
        wanted = _topic_value(topic)
        return [n for n in history if n.topic == wanted]

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()
        logger.info("Notification history cleared", bus=self.name)

    def get_subscriber_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def close(self) -> None:
        """End the bus lifetime: drop all listeners and refuse further publishes."""
        with self._lock:
            self._closed = True
            self._listeners.clear()
        logger.info("Event bus closed", bus=self.name)


class ThreadPoolEventBus(EventBus):
    """
    Event bus that delivers on a worker thread.

    With the default single worker, notifications are delivered in publish
    order and, within one notification, in registration order.
    """

    def __init__(
        self,
        name: str = "registrar",
        max_history: int | None = None,
        max_workers: int = 1,
    ):
        super().__init__(name=name, max_history=max_history)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=f"{name}-bus"
        )

    def _dispatch(self, listeners: list[NotificationListener], notification: Notification) -> None:
        # close() flips _closed under the same lock before shutting the executor down
        with self._lock:
            if self._closed:
                logger.warning(
                    "Publish on closed bus ignored",
                    bus=self.name,
                    topic=notification.topic,
                )
                return
            self._executor.submit(_deliver, self.name, listeners, notification)

    def drain(self, timeout: float | None = None) -> None:
        """Block until notifications queued before this call were delivered."""
        with self._lock:
            if self._closed:
                return
            marker: Future[None] = self._executor.submit(lambda: None)
        marker.result(timeout=timeout)

    def close(self) -> None:
        super().close()
        self._executor.shutdown(wait=True)


def _deliver(
    bus_name: str, listeners: list[NotificationListener], notification: Notification
) -> None:
    for listener in listeners:
        try:
            listener.on_notify(notification.topic, notification.message)
        except Exception as e:
            logger.error(
                "Subscriber error",
                bus=bus_name,
                topic=notification.topic,
                subscriber=listener.__class__.__name__,
                error=str(e),
            )
