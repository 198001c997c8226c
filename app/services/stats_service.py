# app/services/stats_service.py
from sqlmodel import Session

from app.repositories.order_repo import OrderRepository
from app.repositories.stats_repo import StatsRepository
from app.schemas.stats import AdminDashboardStats
from app.services.order_service import build_status_counts, to_read


class StatsService:
    """
    Orchestrates aggregated admin dashboard statistics.
    """

    def __init__(self, repo: StatsRepository, order_repo: OrderRepository):
        self.repo = repo
        self.order_repo = order_repo

    def get_admin_dashboard_stats(
        self,
        session: Session,
        latest_n_orders: int = 5,
    ) -> AdminDashboardStats:
        return AdminDashboardStats(
            total_categories=self.repo.count_categories(session),
            total_products=self.repo.count_products(session),
            orders=build_status_counts(self.order_repo.count_by_status(session)),
            total_revenue=self.repo.total_revenue(session),
            latest_orders=[
                to_read(o) for o in self.repo.latest_orders(session, limit=latest_n_orders)
            ],
        )
