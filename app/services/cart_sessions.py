# app/services/cart_sessions.py
"""
Anonymous shopper sessions.

Shoppers never sign in. The first cart or checkout request gets a random
`cart_session` cookie; every later request with that cookie reaches the
same CartStore and CheckoutFlow. A cookie value the registry did not issue
is replaced, never adopted.
"""

import logging
import threading
import time
import uuid

from fastapi import Request, Response

from app.core.config import get_settings
from app.services.cart_store import CartStore
from app.services.checkout_service import CheckoutFlow

logger = logging.getLogger(__name__)
settings = get_settings()

# A shopping session does not need to outlive a day
COOKIE_MAX_AGE = 60 * 60 * 24


class CartSession:
    """
    The cart and checkout flow of one browser session, plus a lock that
    serializes that session's requests (sync routes run in a thread pool).
    """

    def __init__(self, session_id: str):
        self.id = session_id
        self.cart = CartStore()
        self.checkout = CheckoutFlow(self.cart)
        self.lock = threading.RLock()
        self.touched_at = time.monotonic()


class CartRegistry:
    """
    Maps `cart_session` cookie values to their CartSession.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, CartSession] = {}
        self._lock = threading.Lock()

    def get_or_create(self, session_id: str | None) -> CartSession:
        """
        Return the session for `session_id`. A missing or unknown id gets a
        new session under a freshly minted id; ids only ever come from here.
        """
        with self._lock:
            cart_session = self._sessions.get(session_id) if session_id else None
            if cart_session is None:
                self._prune_expired()
                session_id = uuid.uuid4().hex
                cart_session = CartSession(session_id)
                self._sessions[session_id] = cart_session
                logger.debug("New cart session %s", session_id)
            cart_session.touched_at = time.monotonic()
            return cart_session

    def _prune_expired(self) -> None:
        """Drop sessions idle for longer than the cookie lifetime (lock held)."""
        cutoff = time.monotonic() - COOKIE_MAX_AGE
        expired = [sid for sid, s in self._sessions.items() if s.touched_at < cutoff]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Dropped %d idle cart sessions", len(expired))

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


cart_registry = CartRegistry()


def get_cart_session(request: Request, response: Response) -> CartSession:
    """
    FastAPI dependency resolving (and if needed minting) the shopper's
    cart session from the `cart_session` cookie.
    """
    cookie_value = request.cookies.get(settings.CART_COOKIE_NAME)
    cart_session = cart_registry.get_or_create(cookie_value)

    if cookie_value != cart_session.id:
        response.set_cookie(
            settings.CART_COOKIE_NAME,
            cart_session.id,
            max_age=COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
        )
    return cart_session
