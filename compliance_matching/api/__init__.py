"""
FastAPI application factory and API package.

Run with:
    uvicorn compliance_matching.api:app --reload --port 8000

Or via main.py:
    python -m compliance_matching --serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from compliance_matching.config import get_settings
from compliance_matching.catalog.loader import catalog_summary
from compliance_matching.api.routes import (
    catalog_router,
    compliance_router,
    duplicates_router,
    get_compliance_service,
    health_router,
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()

    application = FastAPI(
        title="Compliance Document Matching API",
        description="Missing-document and duplicate analysis for ISO document corpora",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS: allow the frontend (adjust origins in production)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(catalog_router, prefix="/api/catalog", tags=["Catalog"])
    application.include_router(compliance_router, prefix="/api/compliance", tags=["Compliance"])
    application.include_router(duplicates_router, prefix="/api/duplicates", tags=["Duplicates"])

    @application.on_event("startup")
    async def startup():
        logger.info(f"Starting {settings.app_name} API")
        summary = catalog_summary(get_compliance_service().catalog)
        for standard in settings.default_standards:
            counts = summary.get(standard)
            if counts is None:
                logger.warning(f"Catalog has no requirements for {standard}")
                continue
            logger.info(
                f"  {standard}: {counts['Required']} required, "
                f"{counts['Optional']} optional documents"
            )

    return application


# Module-level instance for `uvicorn compliance_matching.api:app`
app = create_app()
