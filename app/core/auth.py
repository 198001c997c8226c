# app/core/auth.py
import uuid
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel

from app.core.config import get_settings

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so the storefront routes can share dependencies with guests.
bearer_scheme = HTTPBearer(auto_error=False)

# Supabase puts "authenticated" in the role claim of signed-in sessions
AUTHENTICATED_ROLE = "authenticated"


class AdminIdentity(BaseModel):
    """Who is calling an admin route, as told by the Supabase JWT."""

    id: uuid.UUID
    email: str | None = None
    role: str


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT).

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Raises:
        HTTPException(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AdminIdentity | None:
    """
    Resolve the caller from a Supabase JWT.

    Flow:
      1. If no Authorization header => guest => return None.
      2. Decode JWT => extract 'sub', 'email' and 'role'.
      3. Convert 'sub' to UUID.

    Raises:
        HTTPException(401): if token is malformed or missing required claims.
    """
    if credentials is None:
        return None  # guest mode

    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    if not sub:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub",
        )

    try:
        sub_uuid = uuid.UUID(sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid sub in token",
        )

    return AdminIdentity(
        id=sub_uuid,
        email=payload.get("email"),
        role=payload.get("role") or "",
    )


def require_admin(identity: AdminIdentity | None = Depends(get_current_identity)) -> AdminIdentity:
    """
    Enforce a signed-in Supabase session.

    Every account in the project's Supabase Auth is a shop admin; anonymous
    (anon-key) tokens are rejected.

    Raises:
        HTTPException(401): if no token was sent.
        HTTPException(403): if the token is not a signed-in session.
    """
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    if identity.role != AUTHENTICATED_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return identity
