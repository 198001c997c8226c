# app/services/settings_service.py
import logging

from sqlmodel import Session

from app.core.config import get_settings
from app.core.storage_utils import SITE_FOLDER, delete_public_url, upload_image
from app.database import engine
from app.models.site_settings import SiteSettings
from app.repositories.settings_repo import SettingsRepository
from app.schemas.settings import SiteSettingsRead, SiteSettingsUpdate
from app.services.settings_cache import SettingsCache

logger = logging.getLogger(__name__)
app_settings = get_settings()

repo = SettingsRepository()


def to_read(row: SiteSettings | None) -> SiteSettingsRead:
    if row is None:
        return SiteSettingsRead()
    return SiteSettingsRead(
        site_name=row.site_name,
        logo_url=row.logo_url,
        slogan=row.slogan,
        whatsapp_number=row.whatsapp_number,
        updated_at=row.updated_at,
    )


def load_site_settings() -> SiteSettingsRead:
    """
    Backend read used by the settings cache. Opens its own session because
    refreshes also run as background tasks, after the request session closed.
    """
    with Session(engine) as session:
        return to_read(repo.get(session))


settings_cache = SettingsCache(
    load_site_settings,
    cache_file=app_settings.SETTINGS_CACHE_FILE,
)


class SettingsService:
    """
    Business logic for the site settings form.

    Responsibilities:
      - upsert the singleton row
      - remove the previous logo from Storage when it is replaced
      - push the saved value into the settings cache
    """

    def __init__(self, repo: SettingsRepository, cache: SettingsCache):
        self.repo = repo
        self.cache = cache

    def get_settings(self, session: Session) -> SiteSettingsRead:
        """Fresh read for the admin form (bypasses the cache)."""
        return to_read(self.repo.get(session))

    def save_settings(
        self,
        session: Session,
        payload: SiteSettingsUpdate,
    ) -> SiteSettingsRead:
        """
        Save the settings form.

        - If the logo changed, the old file is deleted (best-effort).
        - The cache is overwritten with what was saved, so every
          subscriber sees the new branding without another read.
        """
        current = self.repo.get(session)
        old_logo = current.logo_url if current else None

        if old_logo and payload.logo_url != old_logo:
            delete_public_url(old_logo)

        row = self.repo.upsert(session, payload.model_dump())
        saved = to_read(row)

        self.cache.write(saved)
        logger.info("Site settings saved (site_name=%r)", saved.site_name)
        return saved

    def upload_logo(self, content_type: str | None, file_bytes: bytes) -> str:
        """
        Compress and upload a logo; returns its public URL.

        The URL is only attached to the settings when the form is saved.
        """
        return upload_image(SITE_FOLDER, file_bytes, content_type)

