# tests/test_checkout_flow.py
import threading
import uuid
from datetime import datetime, timezone
from urllib.parse import unquote

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from app.core.exceptions import CheckoutStateError, PersistenceError, ValidationError
from app.core.whatsapp import WhatsAppLinkNotifier
from app.models.order import Order, OrderItem
from app.repositories.order_repo import OrderRepository
from app.schemas.cart import ProductSnapshot
from app.schemas.checkout import CheckoutState
from app.schemas.order import OrderWithItemsRead
from app.schemas.settings import SiteSettingsRead
from app.services import checkout_service
from app.services.cart_store import CartStore
from app.services.checkout_service import (
    NO_WHATSAPP_WARNING,
    NOTIFY_FAILED_WARNING,
    CheckoutFlow,
    CheckoutService,
)

SITE = SiteSettingsRead(site_name="Warung Bu Sri", whatsapp_number="0812-3456-789")


def snapshot(name, price):
    return ProductSnapshot(product_id=uuid.uuid4(), name=name, price=price)


@pytest.fixture
def service():
    return CheckoutService(OrderRepository(), WhatsAppLinkNotifier("62"))


@pytest.fixture
def cart():
    store = CartStore()
    nasi = snapshot("Nasi Goreng", 15000)
    store.add_item(nasi)
    store.add_item(nasi)
    store.add_item(snapshot("Es Teh", 5000))
    return store


def submit(flow, service, session, name="Budi", note=None, site=SITE):
    return flow.submit(
        name,
        note,
        place_order=lambda lines, total, n, c: service.place_order(session, lines, total, n, c),
        notify_vendor=lambda order: service.notify_vendor(order, site),
    )


def test_successful_checkout(service, cart, session):
    flow = CheckoutFlow(cart)
    flow.open()

    result = submit(flow, service, session, name="  Budi  ", note="tidak pakai sambal")

    assert result.state == CheckoutState.SUCCEEDED
    assert flow.state == CheckoutState.SUCCEEDED
    assert result.order.status == "pending"
    assert result.order.customer_name == "Budi"
    assert result.order.total_price == 35000
    assert [(i.product_name, i.quantity, i.subtotal) for i in result.order.items] == [
        ("Nasi Goreng", 2, 30000),
        ("Es Teh", 1, 5000),
    ]
    assert result.warning is None
    assert result.whatsapp_url.startswith("https://wa.me/628123456789?text=")
    assert cart.is_empty

    orders = session.exec(select(Order)).all()
    items = session.exec(select(OrderItem)).all()
    assert len(orders) == 1
    assert len(items) == 2


def test_whatsapp_message_contents(service, cart, session):
    flow = CheckoutFlow(cart)
    flow.open()

    result = submit(flow, service, session, note="pedas")

    message = unquote(result.whatsapp_url.split("?text=", 1)[1])
    assert message.startswith("*Pesanan Baru dari Warung Bu Sri*")
    assert "*Nama:* Budi" in message
    assert "1. Nasi Goreng\n   2x Rp 15.000 = Rp 30.000" in message
    assert "2. Es Teh\n   1x Rp 5.000 = Rp 5.000" in message
    assert "*Total: Rp 35.000*" in message
    assert "*Catatan:* pedas" in message
    assert message.endswith("Terima kasih!")


def test_empty_cart_is_rejected_without_backend_call():
    flow = CheckoutFlow(CartStore())
    flow.open()
    calls = []

    with pytest.raises(ValidationError, match="Cart is empty"):
        flow.submit(
            "Budi",
            None,
            place_order=lambda *args: calls.append(args),
            notify_vendor=lambda order: (None, None),
        )

    assert calls == []
    assert flow.state == CheckoutState.COLLECTING


def test_blank_name_is_rejected(service, cart, session):
    flow = CheckoutFlow(cart)
    flow.open()

    with pytest.raises(ValidationError, match="Customer name is required"):
        submit(flow, service, session, name="   ")

    assert session.exec(select(Order)).all() == []
    assert flow.state == CheckoutState.COLLECTING
    assert cart.total_items == 3


def test_submit_requires_open_form(service, cart, session):
    flow = CheckoutFlow(cart)

    with pytest.raises(CheckoutStateError):
        submit(flow, service, session)

    assert cart.total_items == 3


def test_persistence_failure_rolls_back_and_keeps_cart(service, cart, session, monkeypatch):
    def broken_create_items(self, session, items):
        raise SQLAlchemyError("insert into order_items failed")

    monkeypatch.setattr(OrderRepository, "create_items", broken_create_items)
    flow = CheckoutFlow(cart)
    flow.open()

    with pytest.raises(PersistenceError):
        submit(flow, service, session)

    assert session.exec(select(Order)).all() == []
    assert session.exec(select(OrderItem)).all() == []
    assert flow.state == CheckoutState.FAILED
    assert flow.last_error == "Failed to create order, please try again"
    assert flow.is_editable
    assert cart.total_items == 3
    assert cart.total_price == 35000


def test_resubmit_after_failure(service, cart, session, monkeypatch):
    original = OrderRepository.create_items
    attempts = []

    def flaky_create_items(self, session, items):
        attempts.append(1)
        if len(attempts) == 1:
            raise SQLAlchemyError("connection reset")
        return original(self, session, items)

    monkeypatch.setattr(OrderRepository, "create_items", flaky_create_items)
    flow = CheckoutFlow(cart)
    flow.open()

    with pytest.raises(PersistenceError):
        submit(flow, service, session)
    result = submit(flow, service, session)

    assert result.state == CheckoutState.SUCCEEDED
    assert len(session.exec(select(Order)).all()) == 1


def test_missing_whatsapp_number_is_a_warning(service, cart, session):
    flow = CheckoutFlow(cart)
    flow.open()

    result = submit(flow, service, session, site=SiteSettingsRead())

    assert result.state == CheckoutState.SUCCEEDED
    assert result.whatsapp_url is None
    assert result.warning == NO_WHATSAPP_WARNING
    assert len(session.exec(select(Order)).all()) == 1
    assert cart.is_empty


def test_notifier_failure_does_not_fail_checkout(cart, session):
    class BrokenNotifier:
        def send(self, number, message):
            raise RuntimeError("cannot open WhatsApp")

    service = CheckoutService(OrderRepository(), BrokenNotifier())
    flow = CheckoutFlow(cart)
    flow.open()

    result = submit(flow, service, session)

    assert result.state == CheckoutState.SUCCEEDED
    assert result.whatsapp_url is None
    assert result.warning == NOTIFY_FAILED_WARNING
    assert cart.is_empty


def test_raising_vendor_hand_off_still_completes_checkout(service, cart, session):
    flow = CheckoutFlow(cart)
    flow.open()

    def broken_notify(order):
        raise RuntimeError("settings lookup failed")

    result = flow.submit(
        "Budi",
        None,
        place_order=lambda lines, total, n, c: service.place_order(session, lines, total, n, c),
        notify_vendor=broken_notify,
    )

    assert result.state == CheckoutState.SUCCEEDED
    assert flow.state == CheckoutState.SUCCEEDED
    assert result.whatsapp_url is None
    assert result.warning == NOTIFY_FAILED_WARNING
    assert cart.is_empty
    assert len(session.exec(select(Order)).all()) == 1
    assert flow.open() == CheckoutState.COLLECTING


def test_bad_timezone_setting_is_a_notify_warning(service, monkeypatch):
    monkeypatch.setattr(checkout_service.settings, "TIMEZONE", "Not/AZone")

    url, warning = service.notify_vendor(_fake_order(0, "Budi"), SITE)

    assert url is None
    assert warning == NOTIFY_FAILED_WARNING


def test_second_submit_while_in_flight_is_rejected(cart):
    flow = CheckoutFlow(cart)
    flow.open()
    started = threading.Event()
    release = threading.Event()
    placed = []

    def slow_place_order(lines, total, name, note):
        started.set()
        release.wait(5)
        placed.append(name)
        return _fake_order(total, name)

    worker = threading.Thread(
        target=flow.submit,
        args=("Budi", None, slow_place_order, lambda order: (None, None)),
    )
    worker.start()
    assert started.wait(5)

    assert flow.state == CheckoutState.SUBMITTING
    with pytest.raises(CheckoutStateError):
        flow.submit("Budi", None, slow_place_order, lambda order: (None, None))
    with pytest.raises(CheckoutStateError):
        flow.close()

    release.set()
    worker.join(5)
    assert placed == ["Budi"]
    assert flow.state == CheckoutState.SUCCEEDED


def test_open_after_success_starts_a_new_form(service, cart, session):
    flow = CheckoutFlow(cart)
    flow.open()
    submit(flow, service, session)

    assert flow.open() == CheckoutState.COLLECTING
    assert flow.last_result is None


def test_order_time_in_message_uses_local_timezone(service):
    order = OrderWithItemsRead(
        id=uuid.uuid4(),
        customer_name="Budi",
        customer_note=None,
        total_price=0,
        status="pending",
        # 07:07 UTC is 14:07 in Asia/Jakarta
        created_at=datetime(2026, 3, 5, 7, 7),
        updated_at=datetime(2026, 3, 5, 7, 7, tzinfo=timezone.utc),
        items=[],
    )

    url, warning = service.notify_vendor(order, SITE)

    assert warning is None
    assert "*Tanggal:* 5 Maret 2026 pukul 14.07" in unquote(url)


def _fake_order(total, name):
    now = datetime.now(timezone.utc)
    return OrderWithItemsRead(
        id=uuid.uuid4(),
        customer_name=name,
        customer_note=None,
        total_price=total,
        status="pending",
        created_at=now,
        updated_at=now,
        items=[],
    )
