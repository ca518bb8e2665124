# localcooks/main.py
"""
LocalCooks marketplace API.

Routers are mounted under /api/v1; the web client authenticates every call
with a Firebase ID token.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Dict

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .core.config import is_running_tests, settings
from .core.constants import BRAND_NAME
from .database import init_db
from .errors import register_error_handlers
from .routes.v1 import (
    applications as applications_v1,
    locations as locations_v1,
    metrics as metrics_v1,
    microlearning as microlearning_v1,
    storage_checkouts as storage_checkouts_v1,
    stripe_connect as stripe_connect_v1,
    users as users_v1,
    webhooks_stripe as webhooks_stripe_v1,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Backend for the Local Cooks food marketplace"


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up (site_mode={settings.site_mode})")
    if not settings.is_production and not is_running_tests():
        init_db()
        logger.info("Database tables ensured for local mode")
    if not settings.stripe_configured:
        logger.warning("Stripe secret key not configured - Stripe Connect routes will fail")
    yield
    logger.info(f"{BRAND_NAME} API shutting down")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)
logger.info("CORS allow_origins=%s", settings.cors_origins)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(users_v1.router, prefix="/users")
api_v1.include_router(locations_v1.router)
api_v1.include_router(storage_checkouts_v1.router)
api_v1.include_router(stripe_connect_v1.manager_router, prefix="/manager/stripe-connect")
api_v1.include_router(stripe_connect_v1.chef_router, prefix="/chef/stripe-connect")
api_v1.include_router(webhooks_stripe_v1.router, prefix="/webhooks")
api_v1.include_router(microlearning_v1.router, prefix="/microlearning")
api_v1.include_router(applications_v1.router, prefix="/applications")
api_v1.include_router(metrics_v1.router)
app.include_router(api_v1)


@app.get("/health", include_in_schema=False)
async def health() -> Dict[str, str]:
    return {"status": "healthy", "service": API_TITLE, "version": __version__}


# ASGI entry point alias
fastapi_app = app
