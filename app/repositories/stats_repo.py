# app/repositories/stats_repo.py
from decimal import Decimal

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.order import Order, OrderStatus


class StatsRepository:
    """
    Read-only aggregated queries over orders.
    """

    def count_orders(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Order)
        # SQLModel's Session.exec() -> ScalarResult -> use .one()
        value = session.exec(stmt).one()
        return int(value or 0)

    def total_revenue(
        self,
        session: Session,
        statuses: tuple[OrderStatus, ...],
    ) -> Decimal:
        """
        Sum of total_amount over orders in the given statuses.
        """
        stmt = (
            select(func.coalesce(func.sum(Order.total_amount), 0))
            .where(Order.status.in_([s.value for s in statuses]))
        )
        value = session.exec(stmt).one()
        return Decimal(str(value or 0))
