# app/routers/checkout.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.config import get_settings
from app.core.whatsapp import WhatsAppLinkNotifier
from app.database import get_session
from app.repositories.order_repo import OrderRepository
from app.schemas.checkout import CheckoutResult, CheckoutView
from app.schemas.order import CheckoutCreate
from app.services.cart_sessions import CartSession, get_cart_session
from app.services.checkout_service import CheckoutService
from app.services.settings_service import settings_cache

router = APIRouter(prefix="/checkout", tags=["Checkout"])

settings = get_settings()

order_repo = OrderRepository()
service = CheckoutService(order_repo, WhatsAppLinkNotifier(settings.WHATSAPP_COUNTRY_CODE))


def _view(cart_session: CartSession) -> CheckoutView:
    site = settings_cache.get_or_load()
    return CheckoutView(
        state=cart_session.checkout.state,
        cart=cart_session.cart.summary(),
        site_name=site.site_name,
        whatsapp_number=site.whatsapp_number,
        last_error=cart_session.checkout.last_error,
    )


@router.get("", response_model=CheckoutView)
def open_checkout(cart_session: CartSession = Depends(get_cart_session)):
    """
    Open the checkout form for this shopper.

    Returns the cart to confirm and the shop's WhatsApp number.
    """
    with cart_session.lock:
        cart_session.checkout.open()
        return _view(cart_session)


@router.post("", response_model=CheckoutResult)
def submit_checkout(
    payload: CheckoutCreate,
    session: Session = Depends(get_session),
    cart_session: CartSession = Depends(get_cart_session),
):
    """
    Place the order.

    - 422: empty cart or blank name (nothing saved)
    - 409: checkout not open, or already submitting
    - 502: saving failed; the cart is kept and the form can be resent

    On success the cart is emptied and `whatsapp_url` opens a chat with
    the shop, prefilled with the order summary.
    """
    with cart_session.lock:
        return cart_session.checkout.submit(
            payload.customer_name,
            payload.customer_note,
            place_order=lambda lines, total, name, note: service.place_order(
                session, lines, total, name, note
            ),
            notify_vendor=lambda order: service.notify_vendor(
                order, settings_cache.get_or_load()
            ),
        )


@router.delete("", response_model=CheckoutView)
def close_checkout(cart_session: CartSession = Depends(get_cart_session)):
    """
    Close the checkout form and reset it.
    """
    with cart_session.lock:
        cart_session.checkout.close()
        return _view(cart_session)
