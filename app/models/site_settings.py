# app/models/site_settings.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class SiteSettings(SQLModel, table=True):
    """
    Shop branding and contact details.

    Singleton: at most one row exists. Writes go through
    SettingsRepository.upsert().
    """

    __tablename__ = "site_settings"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
    )

    site_name: str = Field(
        default="Pesan Warung",
        max_length=100,
    )

    logo_url: str | None = None
    slogan: str | None = None

    # Vendor number receiving order messages, as typed by the admin
    whatsapp_number: str | None = None

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
