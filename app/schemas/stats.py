# app/schemas/stats.py
from decimal import Decimal

from sqlmodel import SQLModel


class RevenueRead(SQLModel):
    """
    Revenue over Processing, Shipped and Delivered orders.
    """

    total_revenue: Decimal


class OrderCountRead(SQLModel):
    total_orders: int
