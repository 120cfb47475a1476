# app/repositories/order_repo.py
from sqlmodel import Session, select

from app.models.order import Order, OrderItem


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; order creation is a multi-step transaction.
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def list_for_user(self, session: Session, user_id: int) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(session.exec(stmt).all())

    def list_by_status(self, session: Session, status: str) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.status == status)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(session.exec(stmt).all())

    def list_all(self, session: Session) -> list[Order]:
        stmt = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        return list(session.exec(stmt).all())

    def get_by_id(self, session: Session, order_id: int) -> Order | None:
        return session.get(Order, order_id)

    def get_by_order_number(self, session: Session, order_number: str) -> Order | None:
        stmt = select(Order).where(Order.order_number == order_number)
        return session.exec(stmt).first()

    def order_number_exists(self, session: Session, order_number: str) -> bool:
        stmt = select(Order.id).where(Order.order_number == order_number)
        return session.exec(stmt).first() is not None

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        session.refresh(order)
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def delete_order(self, session: Session, order: Order) -> None:
        """
        Hard delete; items go first so it also works without
        ON DELETE CASCADE support (e.g. SQLite without foreign_keys).
        """
        for item in self.list_items_for_order(session, order.id):
            session.delete(item)
        session.flush()
        session.delete(order)
        session.flush()

    # ---- Order items ----

    def list_items_for_order(self, session: Session, order_id: int) -> list[OrderItem]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id)
        return list(session.exec(stmt).all())

    def list_items_for_orders(
        self,
        session: Session,
        order_ids: list[int],
    ) -> list[OrderItem]:
        if not order_ids:
            return []
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id.in_(order_ids))
            .order_by(OrderItem.order_id, OrderItem.id)
        )
        return list(session.exec(stmt).all())

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        for item in items:
            session.refresh(item)
        return items
