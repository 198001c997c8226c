# app/services/order_service.py
import logging
import uuid
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.exceptions import NotFoundError
from app.models.order import Order
from app.repositories.order_repo import OrderRepository
from app.schemas.order import (
    ORDER_STATUSES,
    OrderRead,
    OrderStatusCounts,
    OrderStatusUpdate,
    OrderWithItemsRead,
)
from app.services.checkout_service import build_order_with_items_dto

logger = logging.getLogger(__name__)


def to_read(order: Order) -> OrderRead:
    return OrderRead(
        id=order.id,
        customer_name=order.customer_name,
        customer_note=order.customer_note,
        total_price=order.total_price,
        status=order.status,  # string compatible with OrderStatus Literal
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def build_status_counts(counts: dict[str, int]) -> OrderStatusCounts:
    """
    Fill every status (missing ones are 0) and the overall total.
    """
    per_status = {s: counts.get(s, 0) for s in ORDER_STATUSES}
    return OrderStatusCounts(**per_status, total=sum(counts.values()))


class OrderService:
    """
    Business logic for the admin orders page.

    Orders are created by the checkout flow only; here they are listed,
    moved between statuses and deleted.
    """

    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    def list_orders(
        self,
        session: Session,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[OrderRead]:
        orders = self.order_repo.list_all(session, status=status, skip=skip, limit=limit)
        return [to_read(o) for o in orders]

    def status_counts(self, session: Session) -> OrderStatusCounts:
        return build_status_counts(self.order_repo.count_by_status(session))

    def _get_order(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def get_order(self, session: Session, order_id: uuid.UUID) -> OrderWithItemsRead:
        order = self._get_order(session, order_id)
        items = self.order_repo.list_items_for_order(session, order.id)
        return build_order_with_items_dto(order, items)

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> OrderRead:
        """
        Set the order status. Any status may follow any other; the admin
        can undo a mistaken change.
        """
        order = self._get_order(session, order_id)
        previous = order.status

        order.status = payload.status
        order.updated_at = datetime.now(timezone.utc)
        order = self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)

        logger.info("Order %s status %s -> %s", order.id, previous, order.status)
        return to_read(order)

    def delete_order(self, session: Session, order_id: uuid.UUID) -> None:
        order = self._get_order(session, order_id)
        self.order_repo.delete_order(session, order)
        session.commit()
        logger.info("Order %s deleted", order_id)
