from abc import ABC, abstractmethod

from stated.domain.events.domain_events import DomainEvent


class EventPublisher(ABC):
    """Port for publishing domain events emitted by a shopping flow."""

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        ...
