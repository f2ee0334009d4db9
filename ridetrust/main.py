"""
RideTrust Backend - FastAPI Application

Admin API for trust scores, rating moderation, rider verification and
the audit trail.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ridetrust.config import settings
from ridetrust.database import close_mongodb, get_db, init_mongodb
from ridetrust.errors import install_error_handlers
from ridetrust.routers import audit, ratings, trust, users
from ridetrust.utils.telegram_log_handler import setup_telegram_logging


logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Connect to MongoDB on startup and disconnect on shutdown."""
    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)

    await init_mongodb()

    if settings.telegram_bot_token and settings.telegram_alert_chat_id:
        setup_telegram_logging(settings.telegram_bot_token, settings.telegram_alert_chat_id)

    try:
        await get_db().client.admin.command("ping")
        logger.info("Connected to db")
    except Exception as e:
        logger.error(f"FAILED to connect to db: {e}")

    if not settings.admin_api_secret:
        logger.warning("ADMIN_API_SECRET is not set; every admin request will be rejected")

    yield

    await close_mongodb()


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="RideTrust API",
    description="""
    RideTrust - Reputation and moderation backend for ride sharing

    ## Authentication
    Admin endpoints require `X-Admin-Uid` and `X-Admin-Secret` headers.
    """,
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)


# =============================================================================
# Routers
# =============================================================================

ADMIN_PREFIX = f"{settings.api_v1_str}/admin"

app.include_router(trust.router, prefix=ADMIN_PREFIX, tags=["Trust"])
app.include_router(ratings.router, prefix=ADMIN_PREFIX, tags=["Ratings"])
app.include_router(users.router, prefix=ADMIN_PREFIX, tags=["Users"])
app.include_router(audit.router, prefix=ADMIN_PREFIX, tags=["Audit"])


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {"status": "healthy", "version": VERSION}
