# app/schemas/user.py
from datetime import datetime

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class UserCreate(SQLModel):
    """
    Payload for registering a customer.

    Validation rules:
      - email must be a valid EmailStr
      - username / phone_number cannot be empty or whitespace
    """

    model_config = ConfigDict(extra="forbid")

    username: str = Field(max_length=50)
    email: EmailStr
    phone_number: str = Field(max_length=20)

    @field_validator("username", "phone_number")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class UserRead(SQLModel):
    """Response schema returned to clients."""

    id: int
    username: str
    email: str
    phone_number: str
    created_at: datetime
    updated_at: datetime
