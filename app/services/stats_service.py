# app/services/stats_service.py
from decimal import Decimal

from sqlmodel import Session

from app.models.order import REVENUE_STATUSES
from app.repositories.stats_repo import StatsRepository


class StatsService:
    """
    Order aggregates for the admin dashboard.

    Revenue only counts orders that are Processing, Shipped or
    Delivered; Pending and Cancelled orders are excluded. The order
    count has no status filter.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def total_revenue(self, session: Session) -> Decimal:
        value = self.repo.total_revenue(session, REVENUE_STATUSES)
        return value.quantize(Decimal("0.01"))

    def total_orders(self, session: Session) -> int:
        return self.repo.count_orders(session)
