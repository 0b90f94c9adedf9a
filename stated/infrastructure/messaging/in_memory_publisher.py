"""
In-memory event publisher. Keeps every event in publish order so callers
(tests, mostly) can inspect what a flow did after its handle is gone.
"""
import structlog

from stated.application.interfaces.event_publisher import EventPublisher
from stated.domain.events.domain_events import CustomerStateChangedEvent, DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventPublisher(EventPublisher):
    def __init__(self) -> None:
        self._events: list[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self._events.append(event)
        logger.debug(
            "event_recorded",
            event_type=type(event).__name__,
            recorded=len(self._events),
        )

    @property
    def events(self) -> list[DomainEvent]:
        return list(self._events)

    def state_changes(self) -> list[CustomerStateChangedEvent]:
        """Return only the state change events, in publish order."""
        return [e for e in self._events if isinstance(e, CustomerStateChangedEvent)]

    def clear(self) -> None:
        self._events.clear()
