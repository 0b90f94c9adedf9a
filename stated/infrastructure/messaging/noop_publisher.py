"""
No-op event publisher, the default when a flow is started without one.
"""
import structlog

from stated.application.interfaces.event_publisher import EventPublisher
from stated.domain.events.domain_events import DomainEvent

logger = structlog.get_logger(__name__)


class NoOpEventPublisher(EventPublisher):
    """Discards all events."""

    def publish(self, event: DomainEvent) -> None:
        logger.debug("noop_event_discarded", event_type=type(event).__name__)
