# app/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import CartSummary, CartItemCreate, CartItemUpdate
from app.services.cart_service import CartService
from app.services.cart_sessions import CartSession, get_cart_session

router = APIRouter(prefix="/cart", tags=["Cart"])

product_repo = ProductRepository()
service = CartService(product_repo)


@router.get("", response_model=CartSummary)
def get_my_cart(cart_session: CartSession = Depends(get_cart_session)):
    """
    Get the current shopper's cart summary.

    No sign-in: the cart is found through the `cart_session` cookie,
    which is set on the first call.
    """
    return service.get_cart_summary(cart_session)


@router.post("", response_model=CartSummary)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    cart_session: CartSession = Depends(get_cart_session),
):
    """
    Add one of a product to the cart.

    Returns the updated cart summary.
    """
    return service.add_to_cart(session, cart_session, payload)


@router.patch("/{product_id}", response_model=CartSummary)
def update_cart_item(
    product_id: uuid.UUID,
    payload: CartItemUpdate,
    cart_session: CartSession = Depends(get_cart_session),
):
    """
    Set the quantity of a product in the cart (0 removes it).

    Returns the updated cart summary.
    """
    return service.update_quantity(cart_session, product_id, payload)


@router.delete("/{product_id}", response_model=CartSummary)
def remove_cart_item(
    product_id: uuid.UUID,
    cart_session: CartSession = Depends(get_cart_session),
):
    """
    Remove a product from the cart.

    Returns the updated cart summary.
    """
    return service.remove_item(cart_session, product_id)


@router.delete("", response_model=CartSummary)
def clear_cart(cart_session: CartSession = Depends(get_cart_session)):
    """
    Empty the cart.
    """
    return service.clear_cart(cart_session)
