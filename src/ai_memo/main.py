"""
AI Memo Backend Application

FastAPI application entrypoint with async lifespan management.
Handles startup checks (database, Redis) and graceful shutdown.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import text

from ai_memo.api.v1.ai import note_ai_router
from ai_memo.api.v1.ai import router as ai_router
from ai_memo.api.v1.auth import redirect_router as auth_redirect_router
from ai_memo.api.v1.auth import router as auth_router
from ai_memo.api.v1.notes import router as notes_router
from ai_memo.api.v1.storage import drafts_router, history_router
from ai_memo.core.cache import check_redis, close_redis
from ai_memo.core.config import settings
from ai_memo.core.database import dispose_engine, engine
from ai_memo.core.logging import setup_logging
from ai_memo.services import gemini

# Initialize logging before any log statements
setup_logging()
logger = logging.getLogger(__name__)


async def wait_for_db(retries: int = 10, delay: int = 1) -> bool:
    """
    Wait for PostgreSQL to become available.

    Useful in containerized environments where the database may start
    after the application. Implements retry logic with linear delay.

    Args:
        retries: Maximum connection attempts.
        delay: Seconds between attempts.

    Returns:
        True if connection established, False if all retries exhausted.
    """
    for i in range(retries):
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                logger.info("Postgres connection established")
                return True
        except Exception as e:
            logger.warning(f"Waiting for Postgres ({i + 1}/{retries})... Error: {e}")
            await asyncio.sleep(delay)

    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
        - Validates database connectivity (required, blocks startup on failure)
        - Checks Redis connectivity (optional, drafts/history degrade)
        - Reports whether the Gemini key is configured (AI features optional)

    Shutdown:
        - Closes the Redis client and disposes the connection pool
    """
    logger.info("Starting AI Memo...")
    logger.info(f"Log Level: {settings.LOG_LEVEL}")

    if not await wait_for_db():
        logger.critical("Could not connect to Postgres. Shutting down.")
        raise RuntimeError("Database connection failed")

    if not await check_redis():
        logger.warning("Redis not reachable - drafts and AI history unavailable")

    if not gemini.has_api_key():
        logger.warning("GEMINI_API_KEY not set - AI features will return errors")

    yield  # Application runs here

    logger.info("Shutting down AI Memo...")
    await close_redis()
    await dispose_engine()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

app.include_router(notes_router, prefix="/api/v1/notes", tags=["Notes"])
app.include_router(note_ai_router, prefix="/api/v1/notes", tags=["AI"])
app.include_router(ai_router, prefix="/api/v1/ai", tags=["AI"])
app.include_router(auth_router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(auth_redirect_router, prefix="/auth", tags=["Auth"])
app.include_router(drafts_router, prefix="/api/v1/drafts", tags=["Storage"])
app.include_router(history_router, prefix="/api/v1/history", tags=["Storage"])


@app.get("/health")
async def health_check():
    """
    Health check endpoint for load balancers and orchestrators.

    Returns:
        Static health status.
    """
    return {
        "status": "ok",
        "service": "ai-memo",
        "environment": os.getenv("ENVIRONMENT", "unknown"),
        "db": "connected",
        "redis": "connected",
    }
