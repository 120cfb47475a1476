# app/models/user.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Customer record consumed by the cart and checkout flows.

    Only identity/contact data lives here; carts and orders
    reference users by id.
    """

    __tablename__ = "users"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    username: str = Field(
        max_length=50,
        unique=True,
        index=True,
    )

    email: str = Field(
        max_length=100,
        unique=True,
        index=True,
    )

    phone_number: str = Field(
        max_length=20,
        description="Contact phone number",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp (UTC)",
    )
