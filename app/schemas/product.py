# app/schemas/product.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ProductCreate(SQLModel):
    """
    Payload for creating a menu item.

    The picture is uploaded separately (POST /admin/products/{id}/image).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    category_id: uuid.UUID
    description: str | None = None
    price: float = Field(ge=0)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("description")
    @classmethod
    def blank_description(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    category_id: uuid.UUID | None = None
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class CategoryRef(SQLModel):
    """
    Category embedded in product responses.
    """

    id: uuid.UUID
    name: str


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: uuid.UUID
    name: str
    category_id: uuid.UUID
    description: str | None = None
    price: float
    image_url: str | None = None
    is_active: bool
    created_at: datetime
    category: CategoryRef | None = None
