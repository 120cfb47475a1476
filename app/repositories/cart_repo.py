# app/repositories/cart_repo.py
from datetime import datetime, timezone

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import Session, select

from app.models.cart import Cart, CartItem

# Dialects with INSERT ... ON CONFLICT support
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class CartRepository:
    """
    Data access layer for carts and cart_items.

    NOTE:
      - No commits here; checkout clears the cart inside the same
        transaction that creates the order. Services commit.
      - get_or_create / add_or_increment are single statements on
        Postgres and SQLite so concurrent requests cannot create a
        second cart or a duplicate (cart, product) line.
    """

    @staticmethod
    def _upsert_insert(session: Session):
        return _UPSERT_INSERTS.get(session.get_bind().dialect.name)

    # ---- Carts ----

    def get_for_user(self, session: Session, user_id: int) -> Cart | None:
        stmt = select(Cart).where(Cart.user_id == user_id)
        return session.exec(stmt).first()

    def get_or_create(self, session: Session, user_id: int) -> Cart:
        insert = self._upsert_insert(session)
        if insert is None:
            cart = self.get_for_user(session, user_id)
            if cart is None:
                cart = Cart(user_id=user_id)
                session.add(cart)
                session.flush()
            return cart

        now = datetime.now(timezone.utc)
        stmt = (
            insert(Cart)
            .values(user_id=user_id, created_at=now, updated_at=now)
            .on_conflict_do_nothing(index_elements=["user_id"])
        )
        session.exec(stmt)
        return self.get_for_user(session, user_id)

    def touch(self, session: Session, cart: Cart) -> Cart:
        cart.updated_at = datetime.now(timezone.utc)
        session.add(cart)
        session.flush()
        return cart

    # ---- Cart items ----

    def list_items(self, session: Session, cart_id: int) -> list[CartItem]:
        stmt = select(CartItem).where(CartItem.cart_id == cart_id)
        return list(session.exec(stmt).all())

    def get_item(
        self, session: Session, cart_id: int, item_id: int
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.id == item_id, CartItem.cart_id == cart_id
        )
        return session.exec(stmt).first()

    def add_or_increment(
        self,
        session: Session,
        cart_id: int,
        product_id: int,
        quantity: int,
    ) -> None:
        """
        Insert a new line, or add `quantity` to the existing line
        for the same product.
        """
        now = datetime.now(timezone.utc)
        insert = self._upsert_insert(session)

        if insert is None:
            stmt = select(CartItem).where(
                CartItem.cart_id == cart_id, CartItem.product_id == product_id
            )
            existing = session.exec(stmt).first()
            if existing:
                existing.quantity += quantity
                existing.updated_at = now
                session.add(existing)
            else:
                session.add(
                    CartItem(
                        cart_id=cart_id,
                        product_id=product_id,
                        quantity=quantity,
                    )
                )
            session.flush()
            return

        stmt = insert(CartItem).values(
            cart_id=cart_id,
            product_id=product_id,
            quantity=quantity,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["cart_id", "product_id"],
            set_={
                "quantity": CartItem.quantity + stmt.excluded.quantity,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        session.exec(stmt)

    def update_item(self, session: Session, item: CartItem) -> CartItem:
        item.updated_at = datetime.now(timezone.utc)
        session.add(item)
        session.flush()
        session.refresh(item)
        return item

    def delete_item(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.flush()

    def clear_items(self, session: Session, cart_id: int) -> int:
        """
        Delete every line of the cart. Returns how many were removed.
        """
        rows = self.list_items(session, cart_id)
        for row in rows:
            session.delete(row)
        session.flush()
        return len(rows)
