# app/routers/settings.py
from fastapi import APIRouter, BackgroundTasks

from app.schemas.settings import SiteSettingsRead
from app.services.settings_service import settings_cache

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=SiteSettingsRead)
def get_site_settings(background_tasks: BackgroundTasks):
    """
    Site branding for the storefront header and the admin login page.

    Answers from the cache right away and refreshes it in the background
    after the response is sent. Only a cold cache is loaded before
    answering.
    """
    if not settings_cache.is_warm:
        return settings_cache.refresh()

    background_tasks.add_task(settings_cache.refresh)
    return settings_cache.current
