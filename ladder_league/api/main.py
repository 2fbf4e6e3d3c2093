"""
Pickleball Ladder League API Server

FastAPI server for game day scheduling, scoring, standings and court movement.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
import uvicorn

from ladder_league.api.routes import router
from ladder_league.database import db
from ladder_league.services.stats_queue import get_stats_queue

# Set up logging
# Allow log level to be configured via environment variable (default: INFO)
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
numeric_level = getattr(logging, log_level, logging.INFO)
logging.basicConfig(
    level=numeric_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup and shutdown events."""
    logger.info("Starting up Ladder League API...")

    # Create tables if they don't exist
    try:
        await db.init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    # Register the standings calculation (must be done before starting worker)
    try:
        from ladder_league.services.data_service import register_stats_queue_callbacks

        register_stats_queue_callbacks()
        logger.info("Standings calculation callback registered")
    except Exception as e:
        logger.error(f"Failed to register standings calculation callback: {e}", exc_info=True)

    try:
        queue = get_stats_queue()
        queue.start_background_worker()
        logger.info("Standings calculation queue worker started")
    except Exception as e:
        logger.error(f"Failed to start standings calculation queue worker: {e}", exc_info=True)

    yield  # App is running

    logger.info("Shutting down Ladder League API...")

    try:
        queue = get_stats_queue()
        queue.stop_background_worker()
        logger.info("Standings calculation queue worker stopped")
    except Exception as e:
        logger.error(f"Error stopping standings calculation queue worker: {e}", exc_info=True)

    await db.engine.dispose()


app = FastAPI(
    title="Pickleball Ladder League API",
    description="API for ladder league game days, rotations, standings and court movement",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware, origins configured via ALLOWED_ORIGINS env var
allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(router)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
