# app/services/cart_service.py
import logging
from decimal import Decimal

from sqlmodel import Session

from app.core.errors import ProductNotFound, UserNotFound
from app.models.cart import Cart
from app.repositories.cart_repo import CartRepository
from app.repositories.user_repo import UserRepository
from app.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartItemRead,
    CartRead,
)
from app.services.catalog import ProductCatalog

logger = logging.getLogger(__name__)


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - lazily create the user's single cart
      - validate product and user existence on add
      - merge repeated adds of a product into one line
      - compute line totals and cart totals from live product prices

    "Absent" outcomes (no cart, foreign/unknown item) are returned as
    None / False, not raised.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        catalog: ProductCatalog,
        user_repo: UserRepository,
    ):
        self.cart_repo = cart_repo
        self.catalog = catalog
        self.user_repo = user_repo

    # ---- internal helpers ----

    def _build_cart_dto(self, session: Session, cart: Cart) -> CartRead:
        """
        Compose CartRead with current catalog data.
        Totals are never stored; they are recomputed on every read.
        """
        items = self.cart_repo.list_items(session, cart.id)
        products = self.catalog.get_many(session, [it.product_id for it in items])

        item_reads: list[CartItemRead] = []
        total_amount = Decimal("0.00")

        for it in items:
            product = products.get(it.product_id)
            if product is None:
                logger.warning(
                    "Cart %s references missing product %s", cart.id, it.product_id
                )
                continue

            line_total = product.price * it.quantity
            total_amount += line_total

            item_reads.append(
                CartItemRead(
                    id=it.id,
                    product_id=it.product_id,
                    product_name=product.product_name,
                    product_description=product.description,
                    team=product.team,
                    driver=product.driver,
                    size=product.size,
                    image_path=product.image_path,
                    price=product.price,
                    quantity=it.quantity,
                    total_price=line_total,
                    created_at=it.created_at,
                    updated_at=it.updated_at,
                )
            )

        return CartRead(
            id=cart.id,
            user_id=cart.user_id,
            items=item_reads,
            total_amount=total_amount,
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )

    # ---- public operations ----

    def get_cart(self, session: Session, user_id: int) -> CartRead | None:
        """
        Return the user's cart with live product data, or None if the
        user never added anything.
        """
        cart = self.cart_repo.get_for_user(session, user_id)
        if cart is None:
            return None
        return self._build_cart_dto(session, cart)

    def get_or_create_cart(self, session: Session, user_id: int) -> Cart:
        """
        Lookup-or-create the user's cart (flushed, not committed).
        """
        return self.cart_repo.get_or_create(session, user_id)

    def add_item(
        self,
        session: Session,
        user_id: int,
        payload: CartItemCreate,
    ) -> CartRead:
        """
        Add a product to the user's cart.

        Rules:
          - product must exist (404)
          - user must exist (404)
          - an existing line for the product has its quantity increased
        """
        if self.catalog.get_by_id(session, payload.product_id) is None:
            raise ProductNotFound()
        if self.user_repo.get_by_id(session, user_id) is None:
            raise UserNotFound()

        cart = self.get_or_create_cart(session, user_id)
        self.cart_repo.add_or_increment(
            session,
            cart_id=cart.id,
            product_id=payload.product_id,
            quantity=payload.quantity,
        )
        self.cart_repo.touch(session, cart)
        session.commit()

        return self._build_cart_dto(session, cart)

    def update_item_quantity(
        self,
        session: Session,
        user_id: int,
        cart_item_id: int,
        payload: CartItemUpdate,
    ) -> CartRead | None:
        """
        Replace the quantity of one line.

        Returns None if the user has no cart or the item is not in it.
        """
        cart = self.cart_repo.get_for_user(session, user_id)
        if cart is None:
            return None

        item = self.cart_repo.get_item(session, cart.id, cart_item_id)
        if item is None:
            return None

        item.quantity = payload.quantity
        self.cart_repo.update_item(session, item)
        self.cart_repo.touch(session, cart)
        session.commit()

        return self._build_cart_dto(session, cart)

    def remove_item(self, session: Session, user_id: int, cart_item_id: int) -> bool:
        """
        Remove one line. False if there was nothing to remove.
        """
        cart = self.cart_repo.get_for_user(session, user_id)
        if cart is None:
            return False

        item = self.cart_repo.get_item(session, cart.id, cart_item_id)
        if item is None:
            return False

        self.cart_repo.delete_item(session, item)
        self.cart_repo.touch(session, cart)
        session.commit()
        return True

    def clear_cart(self, session: Session, user_id: int) -> bool:
        """
        Remove every line; the cart row itself is kept.
        False if the user has no cart.
        """
        cart = self.cart_repo.get_for_user(session, user_id)
        if cart is None:
            return False

        self.cart_repo.clear_items(session, cart.id)
        self.cart_repo.touch(session, cart)
        session.commit()
        return True
