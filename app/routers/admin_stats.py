# app/routers/admin_stats.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.repositories.stats_repo import StatsRepository
from app.schemas.stats import OrderCountRead, RevenueRead
from app.services.stats_service import StatsService

router = APIRouter(prefix="/orders/analytics", tags=["Admin Stats"])

repo = StatsRepository()
service = StatsService(repo)


@router.get("/revenue", response_model=RevenueRead)
def get_total_revenue(session: Session = Depends(get_session)):
    """
    Total revenue of Processing, Shipped and Delivered orders.
    """
    return RevenueRead(total_revenue=service.total_revenue(session))


@router.get("/count", response_model=OrderCountRead)
def get_total_orders_count(session: Session = Depends(get_session)):
    """
    Number of orders in any status.
    """
    return OrderCountRead(total_orders=service.total_orders(session))
