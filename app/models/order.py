# app/models/order.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(SQLModel, table=True):
    """
    Order placed from the storefront checkout.

    Matches the `orders` table:
      - id, customer_name, customer_note, total_price,
        status, created_at, updated_at
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    customer_name: str = Field(
        max_length=100,
        description="Name typed by the customer at checkout",
    )
    customer_note: str | None = Field(
        default=None,
        description="Optional note (e.g. 'tidak pakai sambal')",
    )

    # Sum of the order items' subtotals at creation time
    total_price: float = Field(
        ge=0,
        description="Order total in Rupiah",
    )

    # pending | confirmed | processing | completed | cancelled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    created_at: datetime = Field(
        default_factory=_utcnow,
        index=True,
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        description="Last status change (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.

    Name and price are copied from the product at checkout, so editing or
    deleting the product later does not change historical orders.
    `product_id` is kept for reference only and is not a foreign key.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID | None = Field(
        default=None,
        description="Product the line was taken from (may no longer exist)",
    )

    product_name: str = Field(
        description="Product name at time of order",
    )

    product_price: float = Field(
        ge=0,
        description="Unit price at time of order",
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    subtotal: float = Field(
        ge=0,
        description="product_price * quantity",
    )

    # Line order as it appeared in the cart
    position: int = Field(default=0, ge=0)
