# app/schemas/order.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

OrderStatus = Literal["pending", "confirmed", "processing", "completed", "cancelled"]

ORDER_STATUSES: tuple[str, ...] = (
    "pending",
    "confirmed",
    "processing",
    "completed",
    "cancelled",
)


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    customer_name: str
    customer_note: str | None
    total_price: float
    status: OrderStatus
    created_at: datetime
    updated_at: datetime


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID | None
    product_name: str
    product_price: float
    quantity: int
    subtotal: float


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus


class OrderStatusCounts(SQLModel):
    """
    Number of orders per status, for the filter chips of the orders page.
    """

    pending: int = 0
    confirmed: int = 0
    processing: int = 0
    completed: int = 0
    cancelled: int = 0
    total: int = 0


class CheckoutCreate(SQLModel):
    """
    Checkout form.

    The name is checked by the checkout flow (blank => 422) rather than
    here, so the flow enforces it for every caller.
    """

    model_config = ConfigDict(extra="forbid")

    customer_name: str = Field(default="", max_length=100)
    customer_note: str | None = Field(default=None, max_length=500)
