from typing import TYPE_CHECKING, Any

import structlog

from stated.domain.enums.customer_state import CustomerState
from stated.domain.enums.operation import Operation

if TYPE_CHECKING:
    from stated.domain.entities.customer import Customer

logger = structlog.get_logger(__name__)


# Mapping of legal operations: from_state -> {operation: to_state}
VALID_TRANSITIONS: dict[CustomerState, dict[Operation, CustomerState]] = {
    CustomerState.BROWSING: {
        Operation.LEAVE: CustomerState.LEFT,
        Operation.ADD_ITEM: CustomerState.SHOPPING,
    },
    CustomerState.SHOPPING: {
        Operation.ADD_ITEM: CustomerState.SHOPPING,
        Operation.POP_ITEM: CustomerState.SHOPPING,
        Operation.CLEAR_CART: CustomerState.BROWSING,
        Operation.PROCEED_TO_CHECKOUT: CustomerState.CHECKOUT,
    },
    CustomerState.CHECKOUT: {
        Operation.CANCEL_CHECKOUT: CustomerState.SHOPPING,
        Operation.FINALISE_PAYMENT: CustomerState.LEFT,
    },
    # Terminal state: no legal operations
    CustomerState.LEFT: {},
}


class ShoppingFlowError(Exception):
    """Base class for every error raised by the shopping flow."""


class InvalidTransitionError(ShoppingFlowError):
    """Raised when an operation is not legal in the customer's current state."""

    def __init__(self, from_state: CustomerState, operation: Operation) -> None:
        self.from_state = from_state
        self.operation = operation
        allowed = sorted(op.value for op in VALID_TRANSITIONS.get(from_state, {}))
        super().__init__(
            f"Operation {operation.value} is not allowed in state {from_state.value}. "
            f"Allowed operations: {allowed}"
        )


class MissingItemError(ShoppingFlowError):
    def __init__(self, operation: Operation) -> None:
        self.operation = operation
        super().__init__(f"Operation {operation.value} requires an item.")


class UnexpectedItemError(ShoppingFlowError):
    def __init__(self, operation: Operation, item: int) -> None:
        self.operation = operation
        self.item = item
        super().__init__(f"Operation {operation.value} takes no item (got {item}).")


class ShoppingStateMachine:
    """
    Validates operations against the shopping flow transition table.

    The customer classes already expose only their legal operations, so a type
    checker rejects illegal calls statically. This class backs the runtime
    side: computing target states for events, and dispatching operations that
    arrive as data, where an illegal call fails on first use instead.

    Stateless. Call methods with explicit states.
    """

    def can_perform(self, state: CustomerState, operation: Operation) -> bool:
        """Return True if operation is legal in state."""
        if state.is_terminal:
            return False
        return operation in VALID_TRANSITIONS.get(state, {})

    def validate_operation(self, state: CustomerState, operation: Operation) -> CustomerState:
        """Return the state operation leads to, or raise InvalidTransitionError."""
        if not self.can_perform(state, operation):
            raise InvalidTransitionError(state, operation)
        return VALID_TRANSITIONS[state][operation]

    def get_allowed_operations(self, state: CustomerState) -> frozenset[Operation]:
        """Return the set of operations legal in state."""
        return frozenset(VALID_TRANSITIONS.get(state, {}))

    def perform(
        self,
        customer: "Customer",
        operation: Operation,
        item: int | None = None,
    ) -> "Customer | None":
        """
        Apply operation to customer and return the successor handle.

        Terminal operations return None. The operation is checked against the
        table before anything runs, so a rejected call leaves the customer
        untouched and still usable.
        """
        self.validate_operation(customer.state, operation)

        if operation.takes_item and item is None:
            raise MissingItemError(operation)
        if not operation.takes_item and item is not None:
            raise UnexpectedItemError(operation, item)

        logger.debug(
            "dispatching_operation",
            state=customer.state.value,
            operation=operation.value,
        )

        method: Any = getattr(customer, operation.value)
        if operation.takes_item:
            return method(item)
        return method()
