# app/models/product.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry (team merchandise).

    `price` is the live catalog price: carts always read it at request
    time, orders copy it into OrderItem.unit_price at checkout.
    """

    __tablename__ = "products"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    product_name: str = Field(
        max_length=200,
        index=True,
        description="Display name of the product",
    )

    price: Decimal = Field(
        max_digits=18,
        decimal_places=2,
        gt=0,
        description="Current unit price",
    )

    team: str | None = Field(default=None, max_length=100)
    driver: str | None = Field(default=None, max_length=100)
    size: str | None = Field(default=None, max_length=10)

    description: str | None = Field(
        default=None,
        max_length=1000,
    )

    image_path: str | None = Field(
        default=None,
        max_length=500,
        description="Relative path or URL of the product image",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp (UTC)",
    )
