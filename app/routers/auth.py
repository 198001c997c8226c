# app/routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials

from app.core.auth import AdminIdentity, bearer_scheme, require_admin
from app.core.supabase_client import supabase_admin, supabase_auth_client
from app.schemas.auth import LoginRequest, LoginResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest):
    """
    Sign an admin in with Supabase Auth.

    Any account of the Supabase project is a shop admin; accounts are
    created in the Supabase dashboard, never through this API.
    """
    try:
        result = supabase_auth_client().auth.sign_in_with_password(
            {"email": payload.email.strip(), "password": payload.password}
        )
    except Exception as exc:
        logger.info("Admin sign-in for %r rejected: %s", payload.email, exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    session = result.session
    if session is None or result.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    logger.info("Admin %s signed in", result.user.id)
    return LoginResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        user_id=result.user.id,
        email=result.user.email,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    identity: AdminIdentity = Depends(require_admin),
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
):
    """
    Revoke the caller's Supabase session (best-effort).

    The access token stays valid until it expires; the admin panel drops
    it either way.
    """
    try:
        supabase_admin().auth.admin.sign_out(credentials.credentials)
    except Exception as exc:
        logger.warning("Sign-out of %s failed: %s", identity.id, exc)
    return None
