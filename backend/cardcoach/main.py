import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from cardcoach.config import get_scheduler_settings
from cardcoach.db import get_settings, verify_connection, close_client
from cardcoach.routers import (
    sets_router,
    cards_router,
    reviews_router,
    practice_router,
    seed_router,
)

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings = get_settings()
    scheduler_settings = get_scheduler_settings()

    logger.info(
        "Scheduler: mastery after %d top-band successes, difficult at band <= %d, session TTL %ds",
        scheduler_settings.mastery_streak,
        scheduler_settings.difficult_threshold,
        scheduler_settings.session_ttl_seconds,
    )

    if settings.is_configured():
        if verify_connection():
            logger.info("Connected to Cosmos DB")
        else:
            logger.error("Failed to connect to Cosmos DB - check configuration")
    else:
        logger.warning("Cosmos DB not configured (COSMOS_ENDPOINT/COSMOS_EMULATOR not set)")

    yield

    # Shutdown
    close_client()
    logger.info("Cosmos DB connection closed")


app = FastAPI(
    title="Cardcoach API",
    description="A spaced-repetition flashcard API",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration
cors_origins = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
).split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(sets_router)
app.include_router(cards_router)
app.include_router(reviews_router)
app.include_router(practice_router)
app.include_router(seed_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Cardcoach API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/healthz",
            "sets": "/sets",
            "cards": "/sets/{set_id}/cards",
            "reviews": "/cards",
            "practice": "/practice",
            "seed": "/seed",
        },
    }


@app.get("/healthz")
async def healthz():
    """Health check endpoint."""
    return {"status": "healthy"}
