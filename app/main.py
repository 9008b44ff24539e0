"""
FastAPI application entry point for the order tracking support agent.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.api.v1 import api_router
from app.services.chat import ChatService
from app.services.tracking import TrackingService

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Builds the process-wide tracking service (upstream cache and
    verification sessions) on startup and closes the upstream client on
    shutdown.
    """
    # Startup
    tracking_service = TrackingService.from_settings(settings)
    app.state.tracking_service = tracking_service
    app.state.chat_service = ChatService(tracking_service, settings)
    logger.info(f"{settings.app_name} started for store {settings.store_id}")
    yield
    # Shutdown
    await tracking_service.aclose()


def create_application() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.app_name,
        description="""
        ## Order Tracking Support Agent

        Customer support backend for grocery delivery orders:

        - **Identity verification**: prove ownership of an order with a phone
          number, email or name already on the order
        - **Live tracking**: status, route progress and ETA of verified orders
        - **Driver location**: live GPS position while out for delivery
        - **Chat**: conversational access to all of the above

        Order data comes from the upstream order system and is cached for a
        few seconds; nothing is persisted.
        """,
        version=settings.app_version,
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        docs_url=f"{settings.api_v1_prefix}/docs",
        redoc_url=f"{settings.api_v1_prefix}/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API router
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    return app


# Create application instance
app = create_application()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": f"{settings.api_v1_prefix}/docs",
        "openapi": f"{settings.api_v1_prefix}/openapi.json",
    }
