from enum import Enum


class CustomerState(str, Enum):
    """Logical states of a customer in the online shop flow."""

    BROWSING = "BROWSING"
    SHOPPING = "SHOPPING"
    CHECKOUT = "CHECKOUT"
    # Never has a handle; only reached through a consuming operation.
    LEFT = "LEFT"

    @property
    def is_terminal(self) -> bool:
        """Terminal states cannot be transitioned out of."""
        return self is CustomerState.LEFT
