from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from stated.domain.enums.customer_state import CustomerState
from stated.domain.enums.operation import Operation


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class CustomerStateChangedEvent(DomainEvent):
    """Published for every operation of a shopping flow, including the entry."""

    session_id: UUID = field(default_factory=uuid4)
    from_state: CustomerState | None = None
    to_state: CustomerState = CustomerState.BROWSING
    operation: Operation | None = None
    # Cart contents after the operation
    cart: tuple[int, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.to_state.is_terminal
