# app/schemas/cart.py
import uuid

from sqlmodel import SQLModel, Field


class ProductSnapshot(SQLModel):
    """
    Copy of the product fields the cart needs, taken when the product
    was first added. Later catalog edits do not touch it.
    """

    product_id: uuid.UUID
    name: str
    price: float = Field(ge=0)
    image_url: str | None = None


class CartLine(SQLModel):
    """
    One product plus its quantity inside a cart.
    """

    product: ProductSnapshot
    quantity: int = Field(gt=0)

    @property
    def subtotal(self) -> float:
        return self.product.price * self.quantity


class CartItemCreate(SQLModel):
    """
    Payload for adding a product to the cart (always +1).
    """

    product_id: uuid.UUID


class CartItemUpdate(SQLModel):
    """
    Payload for setting the quantity of a cart line.

    0 or less removes the line.
    """

    quantity: int


class CartLineRead(SQLModel):
    """
    Read model for a single cart line, including subtotal.
    """

    product_id: uuid.UUID
    name: str
    price: float
    image_url: str | None = None
    quantity: int
    subtotal: float


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartLineRead]
    total_items: int
    total_price: float
