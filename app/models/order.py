# app/models/order.py
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class OrderStatus(str, Enum):
    """
    Order lifecycle:

      Pending -> Processing -> Shipped -> Delivered
      Cancelled is reachable from any non-terminal state.
    """

    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


# Statuses counted as realised revenue
REVENUE_STATUSES: tuple[OrderStatus, ...] = (
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)

# Checkout maps violations of this constraint to OrderNumberConflict
ORDER_NUMBER_CONSTRAINT = "uq_orders_order_number"


class Order(SQLModel, table=True):
    """
    Customer order, created only by checkout.

    Everything except `status` and `updated_at` is frozen once the
    row exists; `total_amount` is never recomputed.
    """

    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("order_number", name=ORDER_NUMBER_CONSTRAINT),
    )

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    user_id: int = Field(
        foreign_key="users.id",
        index=True,
    )

    order_number: str = Field(
        max_length=50,
        index=True,
        description="Human-readable unique order number",
    )

    total_amount: Decimal = Field(
        max_digits=18,
        decimal_places=2,
        description="Sum of the order items' total_price at checkout",
    )

    status: str = Field(
        default=OrderStatus.PENDING.value,
        max_length=50,
        index=True,
        description="Order status lifecycle",
    )

    shipping_address: str | None = Field(default=None, max_length=200)
    shipping_city: str | None = Field(default=None, max_length=100)
    shipping_postal_code: str | None = Field(default=None, max_length=20)
    shipping_country: str | None = Field(default=None, max_length=100)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last status change (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.

    unit_price is a snapshot of Product.price at checkout and
    total_price = quantity * unit_price, stored for auditability.
    """

    __tablename__ = "order_items"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    order_id: int = Field(
        foreign_key="orders.id",
        ondelete="CASCADE",
        index=True,
    )

    product_id: int = Field(
        foreign_key="products.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    unit_price: Decimal = Field(
        max_digits=18,
        decimal_places=2,
        description="Unit price at time of order",
    )

    total_price: Decimal = Field(
        max_digits=18,
        decimal_places=2,
        description="quantity * unit_price",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
