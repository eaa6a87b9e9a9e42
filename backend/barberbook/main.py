# backend/barberbook/main.py
"""
barberbook API application.

Run with: uvicorn barberbook.main:app
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .core.config import settings
from .errors import register_error_handlers
from .routes import health
from .routes.v1 import api_v1

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="barberbook API",
        description="Appointment scheduling for barbershops",
        version=__version__,
    )

    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PATCH"],
        allow_headers=["*"],
    )
    logger.info("CORS allow_origins=%s", settings.cors_origins)

    app.include_router(health.router)
    app.include_router(api_v1)

    logger.info(
        "barberbook API started",
        extra={
            "environment": settings.environment,
            "lock_backend": settings.professional_lock_backend,
        },
    )
    return app


app = create_app()
