# app/schemas/order.py
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.models.order import OrderStatus


class CheckoutRequest(SQLModel):
    """
    Payload for turning the current cart into an order.

    User provides the shipping address; the backend derives:
      - status = 'Pending'
      - order_number
      - total_amount and items from the cart
    """

    model_config = ConfigDict(extra="forbid")

    shipping_address: str = Field(max_length=200)
    shipping_city: str = Field(max_length=100)
    shipping_postal_code: str = Field(max_length=20)
    shipping_country: str = Field(max_length=100)

    @field_validator(
        "shipping_address",
        "shipping_city",
        "shipping_postal_code",
        "shipping_country",
    )
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.

    Prices come from the frozen order row; product_* fields are
    display data looked up from the catalog.
    """

    id: int
    product_id: int
    product_name: str | None = None
    product_description: str | None = None
    team: str | None = None
    driver: str | None = None
    size: str | None = None
    image_path: str | None = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    created_at: datetime


class OrderRead(SQLModel):
    """
    Full order view including items.
    """

    id: int
    user_id: int
    order_number: str
    total_amount: Decimal
    status: OrderStatus
    shipping_address: str | None
    shipping_city: str | None
    shipping_postal_code: str | None
    shipping_country: str | None
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemRead]


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
