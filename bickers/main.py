"""Bickers Holidays — FastAPI Application Factory."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bickers.common.exceptions import register_exception_handlers
from bickers.config import settings
from bickers.holidays.router import router as holidays_router


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="Bickers Holidays",
        description="Holiday allowance, half-day and balance calculations for the Bickers Action workforce app",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    app.include_router(holidays_router, prefix="/api/v1/holidays", tags=["holidays"])

    return app


app = create_app()
