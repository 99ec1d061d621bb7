"""
Main FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from listing_cashflow.config import get_settings
from listing_cashflow.api import router as api_router
from listing_cashflow.db.database import init_db

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on first run."""
    init_db()
    yield


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Rental property cash flow analysis for real estate listings",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": "0.1.0"}


def run():
    """Run the development server."""
    import uvicorn

    uvicorn.run(
        "listing_cashflow.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
