# app/routers/admin_stats.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.order_repo import OrderRepository
from app.repositories.stats_repo import StatsRepository
from app.schemas.stats import AdminDashboardStats
from app.services.stats_service import StatsService

router = APIRouter(prefix="/admin/stats", tags=["Admin Stats"])

repo = StatsRepository()
service = StatsService(repo, OrderRepository())


@router.get(
    "",
    response_model=AdminDashboardStats,
    dependencies=[Depends(require_admin)],
)
def get_admin_dashboard_stats(
    latest: int = 5,
    session: Session = Depends(get_session),
):
    """
    Aggregated statistics for the admin dashboard.

    Query params (optional):
      - latest: number of recent orders to include (default 5)

    Accessible to any signed-in Supabase account.
    """
    return service.get_admin_dashboard_stats(session=session, latest_n_orders=latest)
