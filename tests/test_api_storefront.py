# tests/test_api_storefront.py
import uuid
from urllib.parse import unquote

from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from app.main import app
from app.models.order import Order, OrderItem
from app.models.site_settings import SiteSettings
from app.repositories.order_repo import OrderRepository
from app.schemas.settings import SiteSettingsRead
from app.services.settings_service import settings_cache

API = "/api/v1"


# -------- Menu --------


def test_menu_categories_count_active_products(client, menu):
    res = client.get(f"{API}/menu/categories")

    assert res.status_code == 200
    body = {c["name"]: c["product_count"] for c in res.json()}
    # Es Teh is inactive
    assert body == {"Makanan": 2, "Minuman": 0}


def test_menu_categories_hide_inactive_category(client, menu, session):
    minuman = menu["minuman"]
    minuman.is_active = False
    session.add(minuman)
    session.commit()

    res = client.get(f"{API}/menu/categories")

    assert [c["name"] for c in res.json()] == ["Makanan"]


def test_menu_products_only_active_sorted_by_name(client, menu):
    res = client.get(f"{API}/menu/products")

    assert res.status_code == 200
    products = res.json()
    assert [p["name"] for p in products] == ["Mie Ayam", "Nasi Goreng"]
    assert products[0]["category"]["name"] == "Makanan"


def test_menu_products_search_and_filter(client, menu):
    by_description = client.get(f"{API}/menu/products", params={"q": "TELUR"}).json()
    assert [p["name"] for p in by_description] == ["Nasi Goreng"]

    by_category = client.get(
        f"{API}/menu/products", params={"category_id": str(menu["minuman"].id)}
    ).json()
    assert by_category == []


def test_menu_product_detail(client, menu):
    res = client.get(f"{API}/menu/products/{menu['nasi'].id}")
    assert res.status_code == 200
    assert res.json()["price"] == 15000

    inactive = client.get(f"{API}/menu/products/{menu['teh'].id}")
    assert inactive.status_code == 404
    assert inactive.json() == {"detail": "Product not found"}


# -------- Cart --------


def test_cart_sets_session_cookie(client):
    res = client.get(f"{API}/cart")

    assert res.status_code == 200
    assert res.json() == {"items": [], "total_items": 0, "total_price": 0}
    assert "cart_session" in res.cookies


def test_cart_add_update_remove(client, menu):
    nasi, mie = str(menu["nasi"].id), str(menu["mie"].id)

    client.post(f"{API}/cart", json={"product_id": nasi})
    client.post(f"{API}/cart", json={"product_id": mie})
    res = client.post(f"{API}/cart", json={"product_id": nasi})
    body = res.json()
    assert [(i["name"], i["quantity"]) for i in body["items"]] == [
        ("Nasi Goreng", 2),
        ("Mie Ayam", 1),
    ]
    assert body["total_items"] == 3
    assert body["total_price"] == 42000

    body = client.patch(f"{API}/cart/{nasi}", json={"quantity": 5}).json()
    assert body["total_price"] == 5 * 15000 + 12000

    body = client.patch(f"{API}/cart/{mie}", json={"quantity": 0}).json()
    assert [i["name"] for i in body["items"]] == ["Nasi Goreng"]

    body = client.delete(f"{API}/cart/{nasi}").json()
    assert body["total_items"] == 0


def test_cart_clear(client, menu):
    client.post(f"{API}/cart", json={"product_id": str(menu["nasi"].id)})

    body = client.delete(f"{API}/cart").json()

    assert body == {"items": [], "total_items": 0, "total_price": 0}


def test_cart_rejects_missing_and_inactive_products(client, menu):
    missing = client.post(f"{API}/cart", json={"product_id": str(uuid.uuid4())})
    inactive = client.post(f"{API}/cart", json={"product_id": str(menu["teh"].id)})

    assert missing.status_code == 404
    assert inactive.status_code == 400


def test_carts_are_separate_per_cookie(client, menu):
    client.post(f"{API}/cart", json={"product_id": str(menu["nasi"].id)})
    other = TestClient(app)

    assert other.get(f"{API}/cart").json()["total_items"] == 0
    assert client.get(f"{API}/cart").json()["total_items"] == 1


def test_unknown_cookie_is_replaced_with_a_server_id(client, menu):
    client.cookies.set("cart_session", "chosen-by-client")
    res = client.post(f"{API}/cart", json={"product_id": str(menu["nasi"].id)})

    assert res.status_code == 200
    issued = res.cookies["cart_session"]
    assert issued != "chosen-by-client"

    other = TestClient(app)
    other.cookies.set("cart_session", "chosen-by-client")
    assert other.get(f"{API}/cart").json()["total_items"] == 0

    client.cookies.set("cart_session", issued)
    assert client.get(f"{API}/cart").json()["total_items"] == 1


# -------- Checkout --------


def _fill_cart(client, menu):
    client.post(f"{API}/cart", json={"product_id": str(menu["nasi"].id)})
    client.post(f"{API}/cart", json={"product_id": str(menu["nasi"].id)})
    client.post(f"{API}/cart", json={"product_id": str(menu["mie"].id)})


def test_checkout_happy_path(client, menu, session):
    settings_cache.write(
        SiteSettingsRead(site_name="Warung Bu Sri", whatsapp_number="0812-3456-789")
    )
    _fill_cart(client, menu)

    view = client.get(f"{API}/checkout").json()
    assert view["state"] == "collecting"
    assert view["cart"]["total_price"] == 42000
    assert view["whatsapp_number"] == "0812-3456-789"

    res = client.post(
        f"{API}/checkout", json={"customer_name": "Budi", "customer_note": "  "}
    )

    assert res.status_code == 200
    result = res.json()
    assert result["state"] == "succeeded"
    assert result["warning"] is None
    assert result["order"]["status"] == "pending"
    assert result["order"]["customer_note"] is None
    assert result["order"]["total_price"] == 42000
    assert len(result["order"]["items"]) == 2
    assert result["whatsapp_url"].startswith("https://wa.me/628123456789?text=")
    assert "*Pesanan Baru dari Warung Bu Sri*" in unquote(result["whatsapp_url"])

    assert client.get(f"{API}/cart").json()["total_items"] == 0
    assert len(session.exec(select(Order)).all()) == 1


def test_checkout_without_whatsapp_number_warns(client, menu):
    _fill_cart(client, menu)
    client.get(f"{API}/checkout")

    result = client.post(f"{API}/checkout", json={"customer_name": "Budi"}).json()

    assert result["state"] == "succeeded"
    assert result["whatsapp_url"] is None
    assert "not configured" in result["warning"]


def test_checkout_empty_cart_is_422(client, session):
    client.get(f"{API}/checkout")

    res = client.post(f"{API}/checkout", json={"customer_name": "Budi"})

    assert res.status_code == 422
    assert res.json() == {"detail": "Cart is empty"}
    assert session.exec(select(Order)).all() == []


def test_checkout_blank_name_is_422(client, menu):
    _fill_cart(client, menu)
    client.get(f"{API}/checkout")

    res = client.post(f"{API}/checkout", json={"customer_name": "   "})

    assert res.status_code == 422
    assert res.json() == {"detail": "Customer name is required"}
    assert client.get(f"{API}/cart").json()["total_items"] == 3


def test_checkout_without_opening_is_409(client, menu):
    _fill_cart(client, menu)

    res = client.post(f"{API}/checkout", json={"customer_name": "Budi"})

    assert res.status_code == 409


def test_checkout_persistence_failure_is_502_and_keeps_cart(client, menu, session, monkeypatch):
    def broken_create_items(self, session, items):
        raise SQLAlchemyError("insert failed")

    monkeypatch.setattr(OrderRepository, "create_items", broken_create_items)
    _fill_cart(client, menu)
    client.get(f"{API}/checkout")

    res = client.post(f"{API}/checkout", json={"customer_name": "Budi"})

    assert res.status_code == 502
    assert res.json() == {"detail": "Failed to create order, please try again"}
    assert session.exec(select(Order)).all() == []
    assert session.exec(select(OrderItem)).all() == []
    assert client.get(f"{API}/cart").json()["total_items"] == 3

    view = client.get(f"{API}/checkout").json()
    assert view["state"] == "failed"
    assert view["last_error"] == "Failed to create order, please try again"


def test_checkout_close_resets(client, menu):
    client.get(f"{API}/checkout")

    view = client.delete(f"{API}/checkout").json()

    assert view["state"] == "idle"


# -------- Settings --------


def test_public_settings_cold_cache_reads_database(client, session):
    session.add(SiteSettings(site_name="Warung Pak Joko", whatsapp_number="0811"))
    session.commit()

    body = client.get(f"{API}/settings").json()

    assert body["site_name"] == "Warung Pak Joko"
    assert body["whatsapp_number"] == "0811"


def test_public_settings_defaults_without_row(client):
    body = client.get(f"{API}/settings").json()

    assert body["site_name"] == "Menu Warung"
    assert body["slogan"] == "Makanan Enak & Terjangkau"
    assert body["logo_url"] is None


def test_public_settings_serves_cache_then_refreshes(client, session):
    settings_cache.write(SiteSettingsRead(site_name="Old Name"))
    session.add(SiteSettings(site_name="New Name"))
    session.commit()

    first = client.get(f"{API}/settings").json()
    second = client.get(f"{API}/settings").json()

    assert first["site_name"] == "Old Name"
    assert second["site_name"] == "New Name"
