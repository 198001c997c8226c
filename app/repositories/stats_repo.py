# app/repositories/stats_repo.py
from sqlalchemy import func
from sqlmodel import Session, select

from app.models.order import Order
from app.models.product import Category, Product


class StatsRepository:
    """
    Read-only aggregated queries for admin dashboard.
    """

    def count_categories(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Category)
        # SQLModel's Session.exec() -> ScalarResult -> use .one()
        value = session.exec(stmt).one()
        return int(value or 0)

    def count_products(self, session: Session) -> int:
        stmt = select(func.count()).select_from(Product)
        value = session.exec(stmt).one()
        return int(value or 0)

    def total_revenue(self, session: Session) -> float:
        """
        Sum of total_price for all non-cancelled orders.
        """
        stmt = (
            select(func.coalesce(func.sum(Order.total_price), 0.0))
            .where(Order.status != "cancelled")
        )
        value = session.exec(stmt).one()
        return float(value or 0.0)

    def latest_orders(
        self,
        session: Session,
        limit: int = 5,
    ) -> list[Order]:
        """
        Latest N orders by created_at (any status).
        """
        stmt = (
            select(Order)
            .order_by(Order.created_at.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())
