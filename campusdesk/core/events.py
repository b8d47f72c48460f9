"""
Portal Event Bus - in-process pub/sub

Services publish after their changes are flushed; WebSocket handlers and
other listeners subscribe per topic.

Topics:
    no_due:student:{student_id}   every change to one student's no-due request
    students:updated              any student profile change
    timetable:updated             assignment added, edited or removed
    *                             everything

``subscribe`` hands back a disposer; calling it more than once is a no-op.
"""

from typing import Dict, Any, List, Optional, Callable, Tuple
from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime
from collections import defaultdict
import asyncio
import json
import threading

from campusdesk.core.logging_config import logger


STUDENTS_TOPIC = "students:updated"
TIMETABLE_TOPIC = "timetable:updated"
WILDCARD = "*"


def no_due_topic(student_id: str) -> str:
    return f"no_due:student:{student_id}"


class EventType(str, Enum):
    """Events published by the portal services"""

    # No-due workflow
    NO_DUE_CREATED = "no_due_created"
    NO_DUE_APPROVED = "no_due_approved"
    NO_DUE_COMPLETED = "no_due_completed"
    NO_DUE_FORM_GENERATED = "no_due_form_generated"

    # Students
    STUDENT_UPDATED = "student_updated"

    # Timetable
    ASSIGNMENT_CREATED = "assignment_created"
    ASSIGNMENT_UPDATED = "assignment_updated"
    ASSIGNMENT_DELETED = "assignment_deleted"


@dataclass
class PortalEvent:
    """One message on the bus"""
    type: EventType
    topic: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "topic": self.topic,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


EventHandler = Callable[[PortalEvent], Any]


class EventBus:
    """
    Topic-based event bus.

    Handlers may be plain functions or coroutines. A handler that raises is
    logged and skipped; the publisher and the remaining handlers carry on.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._event_count = 0

    def subscribe(self, topic: str, handler: EventHandler) -> Callable[[], None]:
        """Register ``handler`` for ``topic`` and return its disposer"""
        with self._lock:
            self._handlers[topic].append(handler)
        logger.debug(f"[EventBus] Registered handler for {topic}")

        disposed = False

        def unsubscribe() -> None:
            nonlocal disposed
            if disposed:
                return
            disposed = True
            with self._lock:
                handlers = self._handlers.get(topic)
                if handlers and handler in handlers:
                    handlers.remove(handler)
                if handlers is not None and not handlers:
                    del self._handlers[topic]
            logger.debug(f"[EventBus] Removed handler for {topic}")

        return unsubscribe

    async def publish(self, event: PortalEvent) -> None:
        """Deliver ``event`` to topic handlers, then wildcard handlers"""
        self._event_count += 1
        logger.debug(f"[EventBus] Publishing {event.type.value} on {event.topic}")

        with self._lock:
            handlers = list(self._handlers.get(event.topic, []))
            if event.topic != WILDCARD:
                handlers.extend(self._handlers.get(WILDCARD, []))

        for handler in handlers:
            try:
                result = handler(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(
                    f"[EventBus] Handler error for {event.type.value} on {event.topic}: {e}",
                    exc_info=True
                )

    async def emit(self, event_type: EventType, topic: str,
                   data: Optional[Dict[str, Any]] = None) -> None:
        """Build and publish an event in one call"""
        await self.publish(PortalEvent(type=event_type, topic=topic, data=data or {}))

    def open_queue(self, topic: str, max_size: int = 100) -> Tuple[asyncio.Queue, Callable[[], None]]:
        """
        Subscribe a bounded queue to ``topic``.

        Used by WebSocket handlers; events are dropped with a warning when the
        consumer falls behind.
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=max_size)

        def enqueue(event: PortalEvent) -> None:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"[EventBus] Queue full for {topic}, dropping {event.type.value}")

        return queue, self.subscribe(topic, enqueue)

    def handler_count(self, topic: Optional[str] = None) -> int:
        with self._lock:
            if topic is not None:
                return len(self._handlers.get(topic, []))
            return sum(len(h) for h in self._handlers.values())

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "total_events": self._event_count,
                "topics": len(self._handlers),
                "handler_count": sum(len(h) for h in self._handlers.values()),
            }


event_bus = EventBus()


def get_event_bus() -> EventBus:
    """FastAPI dependency returning the process-wide bus"""
    return event_bus
