"""FastAPI application entry point with global error handling."""
from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from callbridge import __version__
from callbridge.api.routes import calls, health, sms, tools
from callbridge.core.config import get_settings
from callbridge.core.exceptions import (
    CallBridgeError,
    ConfigurationError,
    ProviderError,
    ValidationError,
)
from callbridge.core.logging_config import (
    bind_request_id,
    get_logger,
    reset_request_id,
    setup_logging,
)
from callbridge.crm.ghl_client import reset_crm_client
from callbridge.voice.ultravox_client import reset_ultravox_client

LOGGER = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def check_startup_configuration() -> None:
    """
    Refuse to serve traffic without Twilio and Ultravox credentials.

    Raises:
        ConfigurationError: Listing every missing variable.
    """
    settings = get_settings()
    missing = settings.missing_required()
    if missing:
        LOGGER.error(f"Missing required environment variables: {missing}")
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Sets up logging, validates configuration, and logs startup/shutdown events.
    Shared provider HTTP clients are closed on shutdown.
    A ConfigurationError here aborts startup before any request is served.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level, json_format=settings.log_format == "json")

    check_startup_configuration()

    if settings.is_public_base_url_local():
        LOGGER.warning(
            f"No public URL configured; tool callbacks will use {settings.public_base_url()}"
        )

    LOGGER.info(
        "API application starting",
        extra={"extra_data": {
            "environment": settings.environment,
            "enabled_services": settings.get_enabled_services(),
            "public_base_url": settings.public_base_url(),
        }}
    )
    yield
    reset_ultravox_client()
    reset_crm_client()
    LOGGER.info("API application shutting down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance with:
        - Request logging middleware (binds X-Request-ID to log records)
        - Global exception handlers
        - All API routes
    """
    application = FastAPI(
        title="Ultravox Call Bridge",
        description="Outbound Twilio calls bridged to Ultravox voice agents, with SMS and CRM tools",
        version=__version__,
        lifespan=lifespan,
    )

    # -------------------------------------------------------------------------
    # Request logging
    # -------------------------------------------------------------------------

    @application.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        token = bind_request_id(request_id)
        try:
            LOGGER.info(f"{request.method} {request.url.path}")
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    # -------------------------------------------------------------------------
    # Global Exception Handlers
    # -------------------------------------------------------------------------

    @application.exception_handler(ValidationError)
    async def validation_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        """Handle validation errors."""
        LOGGER.warning(f"Validation error: {exc}", extra={"extra_data": {"path": request.url.path}})
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": str(exc),
            },
        )

    @application.exception_handler(ProviderError)
    async def provider_handler(
        request: Request, exc: ProviderError
    ) -> JSONResponse:
        """Handle downstream API failures."""
        LOGGER.error(
            f"Provider error: {exc}",
            extra={"extra_data": {"path": request.url.path, "code": exc.code}},
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "provider_error",
                "message": str(exc),
            },
        )

    @application.exception_handler(ConfigurationError)
    async def configuration_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        """Handle configuration errors."""
        LOGGER.error(f"Configuration error: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "configuration_error",
                "message": "Service misconfiguration",
            },
        )

    @application.exception_handler(CallBridgeError)
    async def app_error_handler(
        request: Request, exc: CallBridgeError
    ) -> JSONResponse:
        """Handle all other application errors."""
        LOGGER.error(f"Application error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "application_error",
                "message": str(exc),
            },
        )

    # -------------------------------------------------------------------------
    # Include Routers
    # -------------------------------------------------------------------------
    application.include_router(health.router, tags=["Health"])
    application.include_router(calls.router, tags=["Calls"])
    application.include_router(sms.router, tags=["SMS"])
    application.include_router(tools.router, tags=["Tools"])

    return application


# Create the application instance
app = create_app()
