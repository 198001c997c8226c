# app/routers/admin_orders.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.order_repo import OrderRepository
from app.schemas.order import (
    OrderRead,
    OrderStatus,
    OrderStatusCounts,
    OrderStatusUpdate,
    OrderWithItemsRead,
)
from app.services.order_service import OrderService

router = APIRouter(prefix="/admin/orders", tags=["Admin Orders"])

order_repo = OrderRepository()
service = OrderService(order_repo)


@router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_admin)],
)
def list_orders(
    session: Session = Depends(get_session),
    status: OrderStatus | None = None,
    skip: int = 0,
    limit: int = 100,
):
    """
    Orders, newest first, optionally only those with one status.
    """
    return service.list_orders(session, status=status, skip=skip, limit=limit)


@router.get(
    "/counts",
    response_model=OrderStatusCounts,
    dependencies=[Depends(require_admin)],
)
def order_counts(session: Session = Depends(get_session)):
    """
    Number of orders per status (filter chips of the orders page).
    """
    return service.status_counts(session)


@router.get(
    "/{order_id}",
    response_model=OrderWithItemsRead,
    dependencies=[Depends(require_admin)],
)
def get_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get any order with items (admin only).
    """
    return service.get_order(session, order_id)


@router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Move an order to any of:

      pending, confirmed, processing, completed, cancelled
    """
    return service.update_status(session, order_id, payload)


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete an order and its items.
    """
    service.delete_order(session, order_id)
    return None
