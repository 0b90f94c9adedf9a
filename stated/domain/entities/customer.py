"""
Typestate customer for the online shop flow.

Each logical state is its own class exposing only the operations legal in
that state, so a type checker rejects an illegal call before the program
runs. Every operation hands the cart over to a fresh handle and poisons the
receiver. Python cannot stop a caller from keeping the old reference, so
reuse is caught at runtime with CustomerConsumedError.

    browsing = visit_site()
    shopping = browsing.add_item(20)
    checkout = shopping.proceed_to_checkout()
    checkout.finalise_payment()
"""
from typing import Any, ClassVar, TypeVar
from uuid import UUID, uuid4

import structlog

from stated.application.interfaces.event_publisher import EventPublisher
from stated.domain.enums.customer_state import CustomerState
from stated.domain.enums.operation import Operation
from stated.domain.events.domain_events import CustomerStateChangedEvent
from stated.domain.state_machine.shopping_state_machine import (
    ShoppingFlowError,
    ShoppingStateMachine,
)
from stated.infrastructure.messaging.noop_publisher import NoOpEventPublisher

logger = structlog.get_logger(__name__)

_state_machine = ShoppingStateMachine()

# Only holders of this token may construct a handle.
_FLOW_TOKEN = object()

_C = TypeVar("_C", bound="_CustomerHandle")


class CustomerConsumedError(ShoppingFlowError):
    """Raised when a handle is used after it was passed to an operation."""

    def __init__(self, state: CustomerState, session_id: UUID) -> None:
        self.state = state
        self.session_id = session_id
        super().__init__(
            f"{state.value} customer handle for session {session_id} has already been "
            f"consumed. Use the value returned by the last operation instead."
        )


class DirectConstructionError(ShoppingFlowError):
    def __init__(self, class_name: str) -> None:
        self.class_name = class_name
        super().__init__(
            f"{class_name} cannot be constructed directly. Start a flow with visit_site()."
        )


class _CustomerHandle:
    """Cart storage and handle bookkeeping shared by every state class."""

    state: ClassVar[CustomerState]

    def __init__(
        self,
        token: object,
        cart: list[int],
        session_id: UUID,
        publisher: EventPublisher,
        log: Any,
    ) -> None:
        if token is not _FLOW_TOKEN:
            raise DirectConstructionError(type(self).__name__)
        self._cart: list[int] | None = cart
        self._session_id = session_id
        self._publisher = publisher
        self._log = log

    @property
    def cart(self) -> tuple[int, ...]:
        return tuple(self._live_cart())

    @property
    def session_id(self) -> UUID:
        return self._session_id

    @property
    def is_consumed(self) -> bool:
        return self._cart is None

    def __repr__(self) -> str:
        if self._cart is None:
            return f"{type(self).__name__}(<consumed>)"
        return f"{type(self).__name__}(cart={self._cart!r})"

    # -------------------------------------------------------------------------
    # Handle bookkeeping
    # -------------------------------------------------------------------------

    def _live_cart(self) -> list[int]:
        if self._cart is None:
            raise CustomerConsumedError(self.state, self._session_id)
        return self._cart

    def _take_cart(self) -> list[int]:
        """Copy of the cart to build the successor from; self stays live."""
        return list(self._live_cart())

    def _publish(self, operation: Operation, cart: list[int]) -> None:
        to_state = _state_machine.validate_operation(self.state, operation)
        self._publisher.publish(
            CustomerStateChangedEvent(
                session_id=self._session_id,
                from_state=self.state,
                to_state=to_state,
                operation=operation,
                cart=tuple(cart),
            )
        )

    def _commit(
        self, operation: Operation, cart: list[int], event: str, level: str, fields: dict[str, Any]
    ) -> None:
        # Trace only once the event is out; a raising publisher leaves self live.
        self._publish(operation, cart)
        getattr(self._log, level)(event, **fields)
        self._cart = None

    def _become(
        self,
        cls: type[_C],
        cart: list[int],
        operation: Operation,
        event: str,
        /,
        level: str = "info",
        **fields: Any,
    ) -> _C:
        self._commit(operation, cart, event, level, fields)
        return cls(_FLOW_TOKEN, cart, self._session_id, self._publisher, self._log)

    def _finish(
        self, operation: Operation, cart: list[int], event: str, /, **fields: Any
    ) -> None:
        self._commit(operation, cart, event, "info", fields)


class BrowsingCustomer(_CustomerHandle):
    state = CustomerState.BROWSING

    @classmethod
    def visit_site(
        cls,
        *,
        publisher: EventPublisher | None = None,
        log: Any = None,
    ) -> "BrowsingCustomer":
        """Entry point of the flow: a browsing customer with an empty cart."""
        session_id = uuid4()
        sink = publisher or NoOpEventPublisher()
        log = (log or logger).bind(session_id=str(session_id))

        sink.publish(
            CustomerStateChangedEvent(
                session_id=session_id,
                from_state=None,
                to_state=cls.state,
                operation=None,
                cart=(),
            )
        )
        log.info("customer_visited_site")
        return cls(_FLOW_TOKEN, [], session_id, sink, log)

    def leave(self) -> None:
        """Leave without buying anything. Ends the flow."""
        cart = self._take_cart()
        self._finish(Operation.LEAVE, cart, "customer_left")

    def add_item(self, item: int) -> "ShoppingCustomer":
        cart = self._take_cart()
        cart.append(item)
        return self._become(
            ShoppingCustomer, cart, Operation.ADD_ITEM, "item_added", item=item, cart=list(cart)
        )


class ShoppingCustomer(_CustomerHandle):
    state = CustomerState.SHOPPING

    def add_item(self, item: int) -> "ShoppingCustomer":
        cart = self._take_cart()
        cart.append(item)
        return self._become(
            ShoppingCustomer, cart, Operation.ADD_ITEM, "item_added", item=item, cart=list(cart)
        )

    def pop_item(self) -> "ShoppingCustomer":
        """Remove the last item. An empty cart is left as is."""
        cart = self._take_cart()
        if not cart:
            return self._become(
                ShoppingCustomer, cart, Operation.POP_ITEM, "pop_on_empty_cart", level="debug", cart=[]
            )
        popped = cart.pop()
        return self._become(
            ShoppingCustomer, cart, Operation.POP_ITEM, "item_removed", item=popped, cart=list(cart)
        )

    def clear_cart(self) -> BrowsingCustomer:
        self._live_cart()
        return self._become(BrowsingCustomer, [], Operation.CLEAR_CART, "cart_cleared")

    def proceed_to_checkout(self) -> "CheckoutCustomer":
        cart = self._take_cart()
        return self._become(
            CheckoutCustomer, cart, Operation.PROCEED_TO_CHECKOUT, "checkout_started", cart=list(cart)
        )


class CheckoutCustomer(_CustomerHandle):
    state = CustomerState.CHECKOUT

    def cancel_checkout(self) -> ShoppingCustomer:
        cart = self._take_cart()
        return self._become(
            ShoppingCustomer, cart, Operation.CANCEL_CHECKOUT, "checkout_cancelled", cart=list(cart)
        )

    def finalise_payment(self) -> None:
        """Pay for the cart. Ends the flow."""
        cart = self._take_cart()
        self._finish(Operation.FINALISE_PAYMENT, cart, "payment_finalised", cart=list(cart))


Customer = BrowsingCustomer | ShoppingCustomer | CheckoutCustomer


def visit_site(
    *,
    publisher: EventPublisher | None = None,
    log: Any = None,
) -> BrowsingCustomer:
    """Start a shopping flow. See BrowsingCustomer.visit_site."""
    return BrowsingCustomer.visit_site(publisher=publisher, log=log)
