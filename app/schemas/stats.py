# app/schemas/stats.py
from pydantic import ConfigDict
from sqlmodel import SQLModel

from app.schemas.order import OrderRead, OrderStatusCounts


class AdminDashboardStats(SQLModel):
    """
    Full payload for admin dashboard.
    """
    model_config = ConfigDict(extra="forbid")

    total_categories: int
    total_products: int
    orders: OrderStatusCounts
    # Sum of total_price over orders that were not cancelled
    total_revenue: float
    latest_orders: list[OrderRead]
