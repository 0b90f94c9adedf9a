from enum import Enum


class Operation(str, Enum):
    """Operations a customer handle can be asked to perform.

    Values match the method names on the customer classes.
    """

    LEAVE = "leave"
    ADD_ITEM = "add_item"
    POP_ITEM = "pop_item"
    CLEAR_CART = "clear_cart"
    PROCEED_TO_CHECKOUT = "proceed_to_checkout"
    CANCEL_CHECKOUT = "cancel_checkout"
    FINALISE_PAYMENT = "finalise_payment"

    @property
    def takes_item(self) -> bool:
        return self is Operation.ADD_ITEM
