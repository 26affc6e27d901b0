"""
Playoff Pick'em Odds - FastAPI Application

Main entry point for the web API.
"""

import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import odds_router, picks_router
from .core import settings, setup_logging
from .db import create_tables


logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging(settings.LOG_LEVEL)
    try:
        await create_tables()
    except Exception as e:
        logger.error(f"Failed to create tables on startup: {e}")
        # App still starts; the DB may become available later
    yield
    # Shutdown


# Create FastAPI app
app = FastAPI(
    title="Playoff Pick'em Odds",
    description="Pick'em game for the NFL playoffs with Monte Carlo win probabilities for each league member.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

# CORS configuration
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(odds_router, prefix="/api")
app.include_router(picks_router, prefix="/api")


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Playoff Pick'em Odds API",
        "version": "1.0.0",
        "docs": "/api/docs",
        "health": "/api/health"
    }
