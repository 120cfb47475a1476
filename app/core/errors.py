# app/core/errors.py
"""
Error taxonomy shared by the services.

Every error is an HTTPException so services can raise it directly and
FastAPI renders it as {"detail": ...} with the matching status code:

  ValidationFailed (400) - request is well-formed but breaks a business rule
  NotFound         (404) - referenced entity is missing
  Conflict         (409) - uniqueness violation the caller can react to
  InternalError    (500) - persistence failure, already rolled back
"""
from typing import Any

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: Any = "Internal server error"

    def __init__(self, detail: Any = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail if detail is not None else self.default_detail,
        )


# ---- 400 ----


class ValidationFailed(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class EmptyCartError(ValidationFailed):
    default_detail = "Cart is empty"


class CartValidationError(ValidationFailed):
    default_detail = "Cart validation failed"


# ---- 404 ----


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ProductNotFound(NotFound):
    default_detail = "Product not found"


class UserNotFound(NotFound):
    default_detail = "User not found"


class OrderNotFound(NotFound):
    default_detail = "Order not found"


class CartItemNotFound(NotFound):
    default_detail = "Cart item not found"


# ---- 409 ----


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class OrderNumberConflict(Conflict):
    default_detail = "Could not allocate a unique order number"


class DuplicateUserError(Conflict):
    default_detail = "Username or email already registered"


# ---- 500 ----


class InternalError(ServiceError):
    pass


class CheckoutFailed(InternalError):
    default_detail = "Checkout failed, no order was created"
