# app/services/cart_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import CartItemCreate, CartItemUpdate, CartSummary
from app.services.cart_sessions import CartSession


class CartService:
    """
    HTTP-facing cart operations on top of a session's CartStore.

    Responsibilities:
      - validate product existence and active flag before adding
      - serialize edits with the session lock (checkout holds it while submitting)
      - return the refreshed summary after each change
    """

    def __init__(self, product_repo: ProductRepository):
        self.product_repo = product_repo

    # ---- internal helpers ----

    def _get_valid_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        if not product.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product is inactive",
            )
        return product

    # ---- public operations ----

    def get_cart_summary(self, cart_session: CartSession) -> CartSummary:
        with cart_session.lock:
            return cart_session.cart.summary()

    def add_to_cart(
        self,
        session: Session,
        cart_session: CartSession,
        payload: CartItemCreate,
    ) -> CartSummary:
        """
        +1 of the product. A new line snapshots the product as it is now.
        """
        product = self._get_valid_product(session, payload.product_id)
        with cart_session.lock:
            cart_session.cart.add_item(product)
            return cart_session.cart.summary()

    def update_quantity(
        self,
        cart_session: CartSession,
        product_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartSummary:
        """
        Absolute quantity; 0 or less removes the line.
        """
        with cart_session.lock:
            cart_session.cart.set_quantity(product_id, payload.quantity)
            return cart_session.cart.summary()

    def remove_item(self, cart_session: CartSession, product_id: uuid.UUID) -> CartSummary:
        with cart_session.lock:
            cart_session.cart.remove_item(product_id)
            return cart_session.cart.summary()

    def clear_cart(self, cart_session: CartSession) -> CartSummary:
        with cart_session.lock:
            cart_session.cart.clear()
            return cart_session.cart.summary()
