# app/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Category(SQLModel, table=True):
    """
    Menu section (e.g. "Makanan", "Minuman", "Snack").

    The number of products in a category is computed at read time,
    never stored.
    """

    __tablename__ = "categories"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        index=True,
        description="Display name of the category",
    )

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this category is shown on the storefront",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class Product(SQLModel, table=True):
    """
    Menu item.

    Matches the `products` table:
      - id, name, category_id, description, price,
        image_url, is_active, created_at
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        index=True,
        description="Display name of the dish/drink",
    )

    category_id: uuid.UUID = Field(
        foreign_key="categories.id",
        index=True,
    )

    description: str | None = Field(
        default=None,
        description="Optional short description",
    )

    price: float = Field(
        ge=0,
        description="Unit price in Rupiah",
    )

    image_url: str | None = Field(
        default=None,
        description="Public URL in the product-images bucket",
    )

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
