# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)
      - DATABASE_URL (Supabase Postgres connection string)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (only used for admin Supabase client)
      - SETTINGS_CACHE_FILE (local copy of the site branding settings)
    """

    PROJECT_NAME: str = "Menu Warung API"
    API_V1_STR: str = "/api/v1"

    # Supabase / DB config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Service role key bypasses RLS (backend only)
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # Storage bucket holding product pictures and the site logo
    STORAGE_BUCKET: str = "product-images"

    # Images larger than this are recompressed before upload
    IMAGE_MAX_BYTES: int = 4 * 1024 * 1024
    IMAGE_MAX_DIMENSION: int = 2048

    # WhatsApp numbers are normalized to this country code (Indonesia)
    WHATSAPP_COUNTRY_CODE: str = "62"

    # Order timestamps in WhatsApp messages use this zone
    TIMEZONE: str = "Asia/Jakarta"

    # Where the settings cache keeps its local copy; None => memory only
    SETTINGS_CACHE_FILE: str | None = None

    # Cookie carrying the anonymous cart session id
    CART_COOKIE_NAME: str = "cart_session"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
