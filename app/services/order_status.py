# app/services/order_status.py
from typing import Protocol

from app.core.errors import ValidationFailed
from app.models.order import OrderStatus


class StatusPolicy(Protocol):
    """
    Decides whether an order may move from `current` to `new`.
    Raises ValidationFailed to reject.
    """

    def check(self, current: OrderStatus, new: OrderStatus) -> None: ...


class PermissiveStatusPolicy:
    """
    Admin callers are trusted: any enumerated status is accepted
    from any other status.
    """

    def check(self, current: OrderStatus, new: OrderStatus) -> None:
        return None


class StrictStatusPolicy:
    """
    Simple state machine:

      Pending    -> Processing, Cancelled
      Processing -> Shipped, Cancelled
      Shipped    -> Delivered, Cancelled
      Delivered  -> (no change)
      Cancelled  -> (no change)
    """

    allowed: dict[OrderStatus, set[OrderStatus]] = {
        OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
        OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
        OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
        OrderStatus.DELIVERED: set(),
        OrderStatus.CANCELLED: set(),
    }

    def check(self, current: OrderStatus, new: OrderStatus) -> None:
        if current == new:
            return
        if new not in self.allowed.get(current, set()):
            raise ValidationFailed(
                f"Invalid status transition: {current.value} -> {new.value}"
            )


def get_status_policy(name: str) -> StatusPolicy:
    """
    Map the ORDER_STATUS_POLICY setting to a policy instance.
    """
    if name == "strict":
        return StrictStatusPolicy()
    return PermissiveStatusPolicy()
