# tests/conftest.py
import os

# Settings are read once at import time; point them at test values first.
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ["DATABASE_URL"] = "sqlite://"

import time
import uuid

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session, SQLModel

from app.core import storage_utils
from app.database import engine, get_session
from app.main import app
from app.models.product import Category, Product
from app.schemas.settings import SiteSettingsRead
from app.services.cart_sessions import cart_registry
from app.services.settings_service import settings_cache

JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


@pytest.fixture(autouse=True)
def db():
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def fresh_state():
    cart_registry.clear()
    settings_cache._value = SiteSettingsRead()
    settings_cache._warm = False
    yield
    cart_registry.clear()


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def client(session):
    # No `with`: the lifespan handler would create tables and warm the
    # settings cache, which the fixtures above already control.
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeBucket:
    """Records uploads/removals instead of calling Supabase Storage."""

    def __init__(self):
        self.uploads: dict[str, tuple[bytes, str]] = {}
        self.removed: list[str] = []

    def public_url(self, path: str) -> str:
        return (
            f"{os.environ['SUPABASE_URL']}/storage/v1/object/public/"
            f"{storage_utils.BUCKET}/{path}"
        )

    def upload(self, path: str, file_bytes: bytes, content_type: str = "image/jpeg") -> str:
        self.uploads[path] = (file_bytes, content_type)
        return self.public_url(path)

    def remove(self, path: str) -> None:
        self.removed.append(path)


@pytest.fixture
def fake_storage(monkeypatch):
    bucket = FakeBucket()
    monkeypatch.setattr(storage_utils, "upload_to_storage", bucket.upload)
    monkeypatch.setattr(storage_utils, "delete_from_storage", bucket.remove)
    return bucket


def make_token(role: str = "authenticated", sub: str | None = None) -> str:
    return jwt.encode(
        {
            "sub": sub or str(uuid.uuid4()),
            "email": "admin@warung.test",
            "role": role,
            "exp": int(time.time()) + 3600,
        },
        JWT_SECRET,
        algorithm="HS256",
    )


@pytest.fixture
def auth_headers():
    """Build Authorization headers for a token with the given claims."""
    return lambda **claims: {"Authorization": f"Bearer {make_token(**claims)}"}


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers()


@pytest.fixture
def menu(session):
    """
    Two categories and three products:
      Makanan: Nasi Goreng (15000), Mie Ayam (12000)
      Minuman: Es Teh (5000, inactive)
    """
    makanan = Category(name="Makanan")
    minuman = Category(name="Minuman")
    session.add(makanan)
    session.add(minuman)
    session.commit()

    nasi = Product(
        name="Nasi Goreng",
        category_id=makanan.id,
        description="Nasi goreng spesial telur",
        price=15000,
    )
    mie = Product(name="Mie Ayam", category_id=makanan.id, price=12000)
    teh = Product(name="Es Teh", category_id=minuman.id, price=5000, is_active=False)
    for p in (nasi, mie, teh):
        session.add(p)
    session.commit()
    for obj in (makanan, minuman, nasi, mie, teh):
        session.refresh(obj)

    return {"makanan": makanan, "minuman": minuman, "nasi": nasi, "mie": mie, "teh": teh}
