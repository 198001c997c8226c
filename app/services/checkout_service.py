# app/services/checkout_service.py
"""
Checkout: turn a cart into an order and hand the order to the vendor.

Two separate steps:
  1. place_order(): Order + OrderItems written in one transaction.
  2. notify_vendor(): build the WhatsApp message and pass it to the
     notifier. Best-effort; it never turns a placed order into a failure.

CheckoutFlow drives both steps for one cart and tracks the state the
storefront modal is in.
"""

import logging
import threading
from datetime import timezone
from typing import Callable, Protocol
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.config import get_settings
from app.core.exceptions import CheckoutStateError, PersistenceError, ValidationError
from app.core.whatsapp import build_order_message
from app.models.order import Order, OrderItem
from app.repositories.order_repo import OrderRepository
from app.schemas.cart import CartLine
from app.schemas.checkout import CheckoutResult, CheckoutState
from app.schemas.order import OrderItemRead, OrderWithItemsRead
from app.schemas.settings import SiteSettingsRead
from app.services.cart_store import CartStore

logger = logging.getLogger(__name__)
settings = get_settings()

NO_WHATSAPP_WARNING = (
    "WhatsApp number is not configured yet. "
    "Please contact the shop to confirm your order."
)
NOTIFY_FAILED_WARNING = (
    "Your order was saved but WhatsApp could not be opened. "
    "Please contact the shop to confirm your order."
)

EDITABLE_STATES = (CheckoutState.COLLECTING, CheckoutState.FAILED)


class OrderNotifier(Protocol):
    """Outbound channel to the vendor. Returns a link/handle or None."""

    def send(self, number: str, message: str) -> str | None: ...


PlaceOrder = Callable[[list[CartLine], float, str, str | None], OrderWithItemsRead]
NotifyVendor = Callable[[OrderWithItemsRead], tuple[str | None, str | None]]


def build_order_with_items_dto(order: Order, items: list[OrderItem]) -> OrderWithItemsRead:
    """
    Compose OrderWithItemsRead from ORM models.
    """
    return OrderWithItemsRead(
        id=order.id,
        customer_name=order.customer_name,
        customer_note=order.customer_note,
        total_price=order.total_price,
        status=order.status,  # Literal
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[
            OrderItemRead(
                id=it.id,
                order_id=it.order_id,
                product_id=it.product_id,
                product_name=it.product_name,
                product_price=it.product_price,
                quantity=it.quantity,
                subtotal=it.subtotal,
            )
            for it in items
        ],
    )


class CheckoutService:
    """
    Stateless checkout steps shared by every cart session.

    Responsibilities:
      - persist Order (status='pending') + snapshot OrderItems atomically
      - compose the vendor message and hand it to the notifier
    """

    def __init__(self, order_repo: OrderRepository, notifier: OrderNotifier):
        self.order_repo = order_repo
        self.notifier = notifier

    def place_order(
        self,
        session: Session,
        lines: list[CartLine],
        total_price: float,
        customer_name: str,
        customer_note: str | None,
    ) -> OrderWithItemsRead:
        """
        Write the order and one item per cart line, then commit once.

        Any database error rolls back both inserts, so an order never
        exists without its items.

        Raises:
            PersistenceError: the transaction failed; nothing was saved.
        """
        try:
            order = self.order_repo.create_order(
                session,
                Order(
                    customer_name=customer_name,
                    customer_note=customer_note,
                    total_price=total_price,
                    status="pending",
                ),
            )
            items = self.order_repo.create_items(
                session,
                [
                    OrderItem(
                        order_id=order.id,
                        product_id=line.product.product_id,
                        product_name=line.product.name,
                        product_price=line.product.price,
                        quantity=line.quantity,
                        subtotal=line.subtotal,
                        position=position,
                    )
                    for position, line in enumerate(lines)
                ],
            )
            session.commit()
            session.refresh(order)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Creating order for %r failed: %s", customer_name, exc)
            raise PersistenceError("Failed to create order, please try again") from exc

        logger.info(
            "Order %s placed: %d lines, total %.0f", order.id, len(items), order.total_price
        )
        return build_order_with_items_dto(order, items)

    def notify_vendor(
        self,
        order: OrderWithItemsRead,
        site_settings: SiteSettingsRead,
    ) -> tuple[str | None, str | None]:
        """
        Fire-and-forget hand-off of the order summary.

        Returns:
            (link, warning): the notifier's link, or None plus a warning
            for the customer. Never raises.
        """
        number = site_settings.whatsapp_number
        if not number:
            logger.warning("Order %s placed but no WhatsApp number is configured", order.id)
            return None, NO_WHATSAPP_WARNING

        try:
            # Stored as UTC; the database may hand it back naive
            ordered_at = order.created_at
            if ordered_at.tzinfo is None:
                ordered_at = ordered_at.replace(tzinfo=timezone.utc)
            ordered_at = ordered_at.astimezone(ZoneInfo(settings.TIMEZONE))

            message = build_order_message(
                site_name=site_settings.site_name,
                customer_name=order.customer_name,
                lines=[(it.product_name, it.product_price, it.quantity) for it in order.items],
                total_price=order.total_price,
                ordered_at=ordered_at,
                note=order.customer_note,
            )
            return self.notifier.send(number, message), None
        except Exception:
            logger.exception("Notifying vendor about order %s failed", order.id)
            return None, NOTIFY_FAILED_WARNING


class CheckoutFlow:
    """
    Checkout state machine of one cart.

        idle -> collecting -> submitting -> succeeded
                    ^              |
                    |              v
                    +-------- failed (editable, cart kept)

    The SUBMITTING state doubles as the in-flight flag: a second submit
    while one is running is refused.
    """

    def __init__(self, cart: CartStore):
        self.cart = cart
        self.state = CheckoutState.IDLE
        self.last_error: str | None = None
        self.last_result: CheckoutResult | None = None
        self._lock = threading.Lock()

    @property
    def is_editable(self) -> bool:
        return self.state in EDITABLE_STATES

    def open(self) -> CheckoutState:
        """Open the form. A form left in `failed` keeps its error."""
        with self._lock:
            if self.state == CheckoutState.SUBMITTING:
                raise CheckoutStateError("Order is being submitted")
            if self.state in (CheckoutState.IDLE, CheckoutState.SUCCEEDED):
                self.state = CheckoutState.COLLECTING
                self.last_error = None
                self.last_result = None
            return self.state

    def close(self) -> CheckoutState:
        with self._lock:
            if self.state == CheckoutState.SUBMITTING:
                raise CheckoutStateError("Order is being submitted")
            self.state = CheckoutState.IDLE
            self.last_error = None
            self.last_result = None
            return self.state

    def submit(
        self,
        customer_name: str | None,
        customer_note: str | None,
        place_order: PlaceOrder,
        notify_vendor: NotifyVendor,
    ) -> CheckoutResult:
        """
        Validate, persist, notify, clear the cart.

        Raises:
            CheckoutStateError: form not open, or a submit is in flight.
            ValidationError: empty cart or blank customer name; nothing
                was sent to the backend and the state is unchanged.
            PersistenceError: saving failed; state becomes `failed` and
                the cart is left as it was.
        """
        with self._lock:
            if self.state == CheckoutState.SUBMITTING:
                raise CheckoutStateError("Order is already being submitted")
            if not self.is_editable:
                raise CheckoutStateError("Checkout is not open")

            if self.cart.is_empty:
                raise ValidationError("Cart is empty")
            name = (customer_name or "").strip()
            if not name:
                raise ValidationError("Customer name is required")
            note = (customer_note or "").strip() or None

            lines = [line.model_copy(deep=True) for line in self.cart.lines]
            total_price = self.cart.total_price
            self.state = CheckoutState.SUBMITTING
            self.last_error = None

        try:
            order = place_order(lines, total_price, name, note)
        except Exception as exc:
            with self._lock:
                self.state = CheckoutState.FAILED
                self.last_error = getattr(exc, "message", "Failed to create order")
            raise

        # The order is saved from here on; the hand-off must not undo that
        try:
            whatsapp_url, warning = notify_vendor(order)
        except Exception:
            logger.exception("Vendor hand-off for order %s failed", order.id)
            whatsapp_url, warning = None, NOTIFY_FAILED_WARNING

        with self._lock:
            self.cart.clear()
            self.state = CheckoutState.SUCCEEDED
            self.last_result = CheckoutResult(
                state=self.state,
                order=order,
                whatsapp_url=whatsapp_url,
                warning=warning,
            )
            return self.last_result
