# app/repositories/settings_repo.py
from datetime import datetime, timezone

from sqlmodel import Session, select

from app.models.site_settings import SiteSettings


class SettingsRepository:
    """
    Data access for the singleton `site_settings` row.
    """

    def get(self, session: Session) -> SiteSettings | None:
        stmt = select(SiteSettings).order_by(SiteSettings.updated_at.desc())
        return session.exec(stmt).first()

    def upsert(self, session: Session, values: dict) -> SiteSettings:
        """
        Update the existing row, or insert one if the table is empty.
        """
        row = self.get(session)
        if row is None:
            row = SiteSettings(**values)
        else:
            for key, value in values.items():
                setattr(row, key, value)
        row.updated_at = datetime.now(timezone.utc)

        session.add(row)
        session.commit()
        session.refresh(row)
        return row
