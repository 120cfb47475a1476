# app/routers/cart.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import CartItemNotFound, NotFound
from app.database import get_session
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository
from app.schemas.cart import CartRead, CartItemCreate, CartItemUpdate
from app.schemas.order import CheckoutRequest, OrderRead
from app.services.cart_service import CartService
from app.services.checkout_service import CheckoutService, OrderNumberGenerator

settings = get_settings()

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo, UserRepository())
checkout_service = CheckoutService(
    cart_repo,
    OrderRepository(),
    product_repo,
    OrderNumberGenerator(
        prefix=settings.ORDER_NUMBER_PREFIX,
        max_attempts=settings.ORDER_NUMBER_MAX_ATTEMPTS,
    ),
)


@router.get("/{user_id}", response_model=CartRead)
def get_cart(
    user_id: int,
    session: Session = Depends(get_session),
):
    """
    Get the user's cart with live prices.

    Users without a cart get an empty cart view.
    """
    cart = service.get_cart(session, user_id)
    if cart is None:
        return CartRead.empty(user_id)
    return cart


@router.post("/{user_id}/items", response_model=CartRead)
def add_to_cart(
    user_id: int,
    payload: CartItemCreate,
    session: Session = Depends(get_session),
):
    """
    Add a product to the user's cart.

    Adding a product already in the cart increases its quantity.
    Returns the updated cart.
    """
    return service.add_item(session, user_id, payload)


@router.put("/{user_id}/items/{cart_item_id}", response_model=CartRead)
def update_cart_item(
    user_id: int,
    cart_item_id: int,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
):
    """
    Set the quantity of a cart line.

    Returns the updated cart.
    """
    cart = service.update_item_quantity(session, user_id, cart_item_id, payload)
    if cart is None:
        raise CartItemNotFound()
    return cart


@router.delete("/{user_id}/items/{cart_item_id}")
def remove_cart_item(
    user_id: int,
    cart_item_id: int,
    session: Session = Depends(get_session),
) -> dict[str, str]:
    """
    Remove a line from the cart.
    """
    if not service.remove_item(session, user_id, cart_item_id):
        raise CartItemNotFound()
    return {"message": "Item removed from cart successfully"}


@router.delete("/{user_id}")
def clear_cart(
    user_id: int,
    session: Session = Depends(get_session),
) -> dict[str, str]:
    """
    Clear the entire cart.
    """
    if not service.clear_cart(session, user_id):
        raise NotFound("Cart not found")
    return {"message": "Cart cleared successfully"}


@router.post(
    "/{user_id}/checkout",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
)
def checkout(
    user_id: int,
    payload: CheckoutRequest,
    session: Session = Depends(get_session),
):
    """
    Create an order from the user's cart and empty the cart.

    Errors:
      - 400 if the cart is empty
      - 409 if no unique order number could be allocated
      - 500 if the order could not be stored (nothing is kept)
    """
    return checkout_service.checkout(session, user_id, payload)
