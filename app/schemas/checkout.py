# app/schemas/checkout.py
from enum import Enum

from sqlmodel import SQLModel

from app.schemas.cart import CartSummary
from app.schemas.order import OrderWithItemsRead


class CheckoutState(str, Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class CheckoutView(SQLModel):
    """
    What the checkout modal shows when it opens.
    """

    state: CheckoutState
    cart: CartSummary
    site_name: str
    whatsapp_number: str | None = None
    last_error: str | None = None


class CheckoutResult(SQLModel):
    """
    Outcome of a successful checkout.

    `whatsapp_url` is None when no vendor number is configured or the
    link could not be built; `warning` then says why. The order is
    placed either way.
    """

    state: CheckoutState
    order: OrderWithItemsRead
    whatsapp_url: str | None = None
    warning: str | None = None
