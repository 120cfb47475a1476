# app/services/checkout_service.py
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from app.core.errors import (
    CartValidationError,
    CheckoutFailed,
    EmptyCartError,
    OrderNumberConflict,
)
from app.models.order import ORDER_NUMBER_CONSTRAINT, Order, OrderItem, OrderStatus
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.schemas.order import CheckoutRequest, OrderRead
from app.services.catalog import ProductCatalog
from app.services.order_service import build_order_dto

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_order_number_violation(exc: IntegrityError) -> bool:
    """
    True when `exc` comes from the unique order number constraint.

    Postgres drivers expose the constraint name on `orig.diag`; SQLite
    only names the column in its message.
    """
    diag = getattr(exc.orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name:
        return constraint_name == ORDER_NUMBER_CONSTRAINT
    message = str(exc.orig)
    return ORDER_NUMBER_CONSTRAINT in message or "orders.order_number" in message


class OrderNumberGenerator:
    """
    Produces candidate order numbers of the form

        <prefix>-<yyyyMMddHHmmss>-<user_id>

    followed by -2, -3, ... variants for when the base number is
    already taken (two checkouts by one user within the same second).
    """

    def __init__(
        self,
        prefix: str = "ORD",
        max_attempts: int = 20,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.prefix = prefix
        self.max_attempts = max_attempts
        self.clock = clock

    def candidates(self, user_id: int) -> Iterator[str]:
        base = f"{self.prefix}-{self.clock():%Y%m%d%H%M%S}-{user_id}"
        yield base
        for i in range(2, self.max_attempts + 1):
            yield f"{base}-{i}"


class CheckoutService:
    """
    Converts a user's cart into an order.

    Steps (single transaction, one commit):
      1. Load cart items; error if there are none.
      2. Resolve live product prices; error if a product vanished.
      3. Compute total_amount from live prices.
      4. Allocate a unique order number.
      5. Create Order row (status='Pending').
      6. Create OrderItem rows with the unit price frozen.
      7. Clear the cart lines (the cart row stays).
      8. Commit and return the full order.

    Any database failure rolls everything back, so there is never an
    order without a cleared cart or a cleared cart without an order.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        order_repo: OrderRepository,
        catalog: ProductCatalog,
        number_generator: OrderNumberGenerator | None = None,
    ):
        self.cart_repo = cart_repo
        self.order_repo = order_repo
        self.catalog = catalog
        self.number_generator = number_generator or OrderNumberGenerator()

    def _allocate_order_number(self, session: Session, user_id: int) -> str:
        for candidate in self.number_generator.candidates(user_id):
            if not self.order_repo.order_number_exists(session, candidate):
                return candidate
            logger.warning("Order number %s already taken, retrying", candidate)
        raise OrderNumberConflict()

    def checkout(
        self,
        session: Session,
        user_id: int,
        payload: CheckoutRequest,
    ) -> OrderRead:
        # 1) Load cart
        cart = self.cart_repo.get_for_user(session, user_id)
        cart_items = self.cart_repo.list_items(session, cart.id) if cart else []
        if not cart_items:
            raise EmptyCartError()

        # 2) Live prices
        products = self.catalog.get_many(
            session, [ci.product_id for ci in cart_items]
        )
        missing = [ci.product_id for ci in cart_items if ci.product_id not in products]
        if missing:
            raise CartValidationError(
                {"message": "Cart validation failed", "missing_product_ids": missing}
            )

        # 3) Total from current catalog prices
        total_amount = sum(
            (products[ci.product_id].price * ci.quantity for ci in cart_items),
            Decimal("0.00"),
        ).quantize(CENTS)

        try:
            # 4) + 5) Order row
            order_number = self._allocate_order_number(session, user_id)
            order = self.order_repo.create_order(
                session,
                Order(
                    user_id=user_id,
                    order_number=order_number,
                    total_amount=total_amount,
                    status=OrderStatus.PENDING.value,
                    shipping_address=payload.shipping_address,
                    shipping_city=payload.shipping_city,
                    shipping_postal_code=payload.shipping_postal_code,
                    shipping_country=payload.shipping_country,
                ),
            )

            # 6) Snapshot prices into order items
            order_items: list[OrderItem] = []
            for ci in cart_items:
                unit_price = products[ci.product_id].price
                order_items.append(
                    OrderItem(
                        order_id=order.id,
                        product_id=ci.product_id,
                        quantity=ci.quantity,
                        unit_price=unit_price,
                        total_price=(unit_price * ci.quantity).quantize(CENTS),
                    )
                )
            order_items = self.order_repo.create_items(session, order_items)

            # 7) Clear cart
            self.cart_repo.clear_items(session, cart.id)
            self.cart_repo.touch(session, cart)

            # 8) Commit transaction
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            if is_order_number_violation(exc):
                logger.warning("Order number collision for user %s", user_id)
                raise OrderNumberConflict()
            logger.exception("Checkout failed for user %s", user_id)
            raise CheckoutFailed()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Checkout failed for user %s", user_id)
            raise CheckoutFailed()

        logger.info(
            "Created order %s for user %s (total %s, %d items)",
            order.order_number,
            user_id,
            total_amount,
            len(order_items),
        )
        return build_order_dto(order, order_items, products)
