# app/routers/admin_settings.py
from fastapi import APIRouter, Depends, File, UploadFile
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.settings_repo import SettingsRepository
from app.schemas.settings import LogoUploadRead, SiteSettingsRead, SiteSettingsUpdate
from app.services.settings_service import SettingsService, settings_cache

router = APIRouter(prefix="/admin/settings", tags=["Admin Settings"])

repo = SettingsRepository()
service = SettingsService(repo, settings_cache)


@router.get(
    "",
    response_model=SiteSettingsRead,
    dependencies=[Depends(require_admin)],
)
def get_settings_form(session: Session = Depends(get_session)):
    """
    Current settings read straight from the database.
    """
    return service.get_settings(session)


@router.put(
    "",
    response_model=SiteSettingsRead,
    dependencies=[Depends(require_admin)],
)
def save_settings(
    payload: SiteSettingsUpdate,
    session: Session = Depends(get_session),
):
    """
    Save the whole settings form.

    The storefront sees the new branding on its next settings read.
    """
    return service.save_settings(session, payload)


@router.post(
    "/logo",
    response_model=LogoUploadRead,
    dependencies=[Depends(require_admin)],
    summary="Upload a logo picture",
)
def upload_logo(file: UploadFile = File(...)):
    """
    Compress and store a logo; returns its URL.

    Send the URL back in `logo_url` with PUT /admin/settings to use it.
    """
    url = service.upload_logo(file.content_type, file.file.read())
    return LogoUploadRead(url=url)
