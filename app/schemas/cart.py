# app/schemas/cart.py
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: int = Field(gt=0)
    quantity: int = Field(gt=0)


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(gt=0)


class CartItemRead(SQLModel):
    """
    Read model for a single cart line, with live product data
    and total_price = price * quantity.
    """

    id: int
    product_id: int
    product_name: str
    product_description: str | None = None
    team: str | None = None
    driver: str | None = None
    size: str | None = None
    image_path: str | None = None
    price: Decimal
    quantity: int
    total_price: Decimal
    created_at: datetime
    updated_at: datetime


class CartRead(SQLModel):
    """
    Full cart response model with total.

    id/created_at/updated_at are None for the synthesized empty view
    of a user who never added anything.
    """

    id: int | None = None
    user_id: int
    items: list[CartItemRead] = []
    total_amount: Decimal = Decimal("0.00")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def empty(cls, user_id: int) -> "CartRead":
        return cls(user_id=user_id)
