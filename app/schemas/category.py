# app/schemas/category.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class CategoryCreate(SQLModel):
    """
    Payload for creating a category.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class CategoryUpdate(SQLModel):
    """
    Partial update payload for categories.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
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


class CategoryRead(SQLModel):
    id: uuid.UUID
    name: str
    is_active: bool
    created_at: datetime


class CategoryWithCount(CategoryRead):
    """
    Category plus the number of products in it (computed per request).
    """

    product_count: int = 0
