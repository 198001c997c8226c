# app/schemas/auth.py
import uuid

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class LoginRequest(SQLModel):
    """
    Admin sign-in form (Supabase Auth email + password).
    """

    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)


class LoginResponse(SQLModel):
    """
    Supabase session handed back to the admin panel.

    `access_token` goes into `Authorization: Bearer ...` for /admin routes.
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int | None = None
    user_id: uuid.UUID
    email: str | None = None
