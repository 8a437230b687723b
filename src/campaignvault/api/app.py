"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from campaignvault.api.routes import campaigns, health
from campaignvault.core.config import AppSettings
from campaignvault.core.exceptions import (
    CampaignNotFoundError,
    CorruptedCampaignError,
    IngestionError,
    UploadTooLargeError,
)
from campaignvault.core.logging_config import configure_logging
from campaignvault.crypto.fernet_cipher import create_cipher
from campaignvault.ingest.pipeline import CampaignPipeline
from campaignvault.persistence import create_persistence


def build_pipeline(settings: AppSettings) -> CampaignPipeline:
    return CampaignPipeline(
        cipher=create_cipher(settings.encryption),
        store=create_persistence(settings),
        settings=settings,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and tear down application resources."""
    settings = getattr(app.state, "settings", None) or AppSettings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    if getattr(app.state, "pipeline", None) is None:
        app.state.pipeline = build_pipeline(settings)
    yield


async def _ingestion_error(request: Request, exc: IngestionError) -> JSONResponse:
    status = 413 if isinstance(exc, UploadTooLargeError) else 400
    return JSONResponse(status_code=status, content={"message": str(exc)})


async def _not_found(request: Request, exc: CampaignNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"message": "Campaign not found"})


async def _corrupted(request: Request, exc: CorruptedCampaignError) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"message": "Campaign data could not be decrypted", "campaign_id": exc.campaign_id},
    )


def create_app(
    settings: AppSettings | None = None,
    pipeline: CampaignPipeline | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="CampaignVault",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.pipeline = pipeline
    app.add_exception_handler(IngestionError, _ingestion_error)
    app.add_exception_handler(CampaignNotFoundError, _not_found)
    app.add_exception_handler(CorruptedCampaignError, _corrupted)
    app.include_router(health.router)
    app.include_router(campaigns.router, prefix="/campaigns")
    return app
