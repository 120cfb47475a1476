# app/schemas/product.py
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ProductCreate(SQLModel):
    """
    Payload for creating a product.
    """

    model_config = ConfigDict(extra="forbid")

    product_name: str = Field(max_length=200)
    price: Decimal = Field(gt=0, max_digits=18, decimal_places=2)
    team: str | None = Field(default=None, max_length=100)
    driver: str | None = Field(default=None, max_length=100)
    size: str | None = Field(default=None, max_length=10)
    description: str | None = Field(default=None, max_length=1000)
    image_path: str | None = Field(default=None, max_length=500)

    @field_validator("product_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("product_name cannot be empty")
        return v


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: int
    product_name: str
    price: Decimal
    team: str | None
    driver: str | None
    size: str | None
    description: str | None
    image_path: str | None
    created_at: datetime
    updated_at: datetime


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    product_name: str | None = Field(default=None, max_length=200)
    price: Decimal | None = Field(default=None, gt=0, max_digits=18, decimal_places=2)
    team: str | None = Field(default=None, max_length=100)
    driver: str | None = Field(default=None, max_length=100)
    size: str | None = Field(default=None, max_length=10)
    description: str | None = Field(default=None, max_length=1000)
    image_path: str | None = Field(default=None, max_length=500)

    @field_validator("product_name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("product_name cannot be empty")
        return v
