"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from app.api.errors import register_exception_handlers
from app.api.middleware import RequestContextMiddleware
from app.api.responses import Tags
from app.api.routes.v1.categories import router as categories_router
from app.api.routes.v1.endpoints.health import router as health_router
from app.api.routes.v1.products import router as products_router
from app.core.config import settings
from app.core.events import shutdown_event_handlers, startup_event_handlers
from app.core.logging import configure_logging
from app.core.metrics import setup_metrics
from app.core.tracing import setup_tracing


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan event handler for startup and shutdown events.
    """
    # Configure Sentry
    if settings.SENTRY_DSN:
        sentry_logging = LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            integrations=[
                FastApiIntegration(),
                sentry_logging,
            ],
            environment=settings.ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            release=f"{settings.PROJECT_NAME}@{settings.VERSION}",
        )
        logger.info("Sentry initialized")

    for startup_handler in startup_event_handlers:
        await startup_handler(app)

    yield

    for shutdown_handler in shutdown_event_handlers:
        await shutdown_handler(app)


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    configure_logging()

    application = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.PROJECT_DESCRIPTION,
        version=settings.VERSION,
        docs_url="/api/docs" if not settings.ENVIRONMENT == "production" else None,
        redoc_url="/api/redoc" if not settings.ENVIRONMENT == "production" else None,
        openapi_url="/api/openapi.json" if not settings.ENVIRONMENT == "production" else None,
        lifespan=lifespan,
        swagger_ui_parameters={
            "deepLinking": True,
            "displayRequestDuration": True,
            "filter": True,
            "tryItOutEnabled": True,
        },
        openapi_tags=[
            {"name": Tags.HEALTH, "description": "Health check and readiness endpoints"},
            {"name": Tags.CATEGORIES, "description": "Category hierarchy management"},
            {"name": Tags.PRODUCTS, "description": "Products with variants, attributes and images"},
        ],
    )

    # Register exception handlers
    register_exception_handlers(application)

    # Add CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.CORS_ORIGINS_STR == "*" else settings.CORS_ORIGINS_STR.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID and response language
    application.add_middleware(RequestContextMiddleware)

    # Setup Prometheus metrics middleware if enabled
    if settings.ENABLE_METRICS:
        setup_metrics(application)
        logger.info("Prometheus metrics enabled")

    # Setup OpenTelemetry tracing if enabled
    if settings.ENABLE_TRACING:
        setup_tracing(application)
        logger.info("OpenTelemetry tracing enabled")

    # Include routers
    application.include_router(health_router, prefix="/api/health", tags=[Tags.HEALTH])
    application.include_router(categories_router, prefix=f"{settings.API_V1_STR}/categories")
    application.include_router(products_router, prefix=f"{settings.API_V1_STR}/products")

    return application


app = create_application()
