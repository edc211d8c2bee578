import logging
import time
from dataclasses import dataclass
from typing import NamedTuple, Callable, Dict, List, Any

logger = logging.getLogger(__name__)

NOTIFICATION = "NOTIFICATION"

_PAST_TENSE = {"create": "created", "update": "updated", "delete": "deleted"}


class Event(NamedTuple):
    name: str
    payload: Dict[str, Any]
    timestamp: float


@dataclass(frozen=True)
class Notification:
    """User-facing toast produced by a create/update/delete"""
    success: bool
    action: str
    entity: str = "Book"

    @property
    def title(self) -> str:
        return "Success" if self.success else "Error"

    @property
    def message(self) -> str:
        if self.success:
            return f"{self.entity} {_PAST_TENSE.get(self.action, self.action)} successfully!"
        return f"Failed to {self.action} {self.entity.lower()}. Please try again."


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event], None]]] = {}

    def subscribe(self, event_type: str, handler: Callable[[Event], None]) -> None:
        """Subscribe handler to event type"""
        self._subscribers.setdefault(event_type, []).append(handler)

    def publish(self, event_type: str, payload: Dict[str, Any]) -> Event:
        """Publish event to all subscribers"""
        event = Event(event_type, payload, time.time())

        for handler in self._subscribers.get(event_type, []):
            try:
                handler(event)
            except Exception:
                # Handler failures never reach the publisher
                logger.exception(f"Error in {event_type} handler {handler!r}")
        return event

    def notify(self, notification: Notification) -> Event:
        return self.publish(NOTIFICATION, {"notification": notification})
