# app/schemas/settings.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

DEFAULT_SITE_NAME = "Menu Warung"
DEFAULT_SLOGAN = "Makanan Enak & Terjangkau"

# Stored when the admin saves the form with an empty site name
FALLBACK_SITE_NAME = "Pesan Warung"


class SiteSettingsRead(SQLModel):
    """
    Branding shown by the storefront header and the admin login screen.

    Also the value held by the settings cache. With no row in the
    database every field keeps its default.
    """

    site_name: str = DEFAULT_SITE_NAME
    logo_url: str | None = None
    slogan: str | None = DEFAULT_SLOGAN
    whatsapp_number: str | None = None
    updated_at: datetime | None = None


class SiteSettingsUpdate(SQLModel):
    """
    Admin payload for saving the settings form (full replace).

    Blank strings are stored as null; a blank site name falls back
    to FALLBACK_SITE_NAME.
    """

    model_config = ConfigDict(extra="forbid")

    site_name: str = Field(default=FALLBACK_SITE_NAME, max_length=100)
    logo_url: str | None = None
    slogan: str | None = None
    whatsapp_number: str | None = Field(default=None, max_length=30)

    @field_validator("logo_url", "slogan", "whatsapp_number", mode="before")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None

    @field_validator("site_name", mode="before")
    @classmethod
    def default_site_name(cls, v: str | None) -> str:
        if v is None:
            return FALLBACK_SITE_NAME
        v = v.strip()
        return v or FALLBACK_SITE_NAME


class LogoUploadRead(SQLModel):
    url: str
