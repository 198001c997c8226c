# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.core.exceptions import WarungError
from app.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from app.models import product as _product_models  # noqa: F401
from app.models import order as _order_models  # noqa: F401
from app.models import site_settings as _settings_models  # noqa: F401

from app.services.settings_service import settings_cache

# Routers
from app.routers.auth import router as auth_router
from app.routers.menu import router as menu_router
from app.routers.cart import router as cart_router
from app.routers.checkout import router as checkout_router
from app.routers.settings import router as settings_router
from app.routers.admin_stats import router as admin_stats_router
from app.routers.admin_categories import router as admin_categories_router
from app.routers.admin_products import router as admin_products_router
from app.routers.admin_orders import router as admin_orders_router
from app.routers.admin_settings import router as admin_settings_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


def _log_settings_change(value):
    logger.info("Site settings now %r (WhatsApp %s)", value.site_name, value.whatsapp_number or "-")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.
      - Warm the site settings cache.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to Postgres...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise

    unsubscribe = settings_cache.subscribe(_log_settings_change)
    settings_cache.refresh()
    yield
    unsubscribe()


app = FastAPI(
    title=settings.PROJECT_NAME or "Menu Warung API",
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WarungError)
async def warung_error_handler(request: Request, exc: WarungError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Versioned API prefix, e.g. /api/v1
app.include_router(auth_router, prefix=settings.API_V1_STR)
app.include_router(menu_router, prefix=settings.API_V1_STR)
app.include_router(cart_router, prefix=settings.API_V1_STR)
app.include_router(checkout_router, prefix=settings.API_V1_STR)
app.include_router(settings_router, prefix=settings.API_V1_STR)
app.include_router(admin_stats_router, prefix=settings.API_V1_STR)
app.include_router(admin_categories_router, prefix=settings.API_V1_STR)
app.include_router(admin_products_router, prefix=settings.API_V1_STR)
app.include_router(admin_orders_router, prefix=settings.API_V1_STR)
app.include_router(admin_settings_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "warung-backend"}
