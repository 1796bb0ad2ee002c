"""Widget relay API - Main FastAPI Application."""

import argparse
import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from widget_relay.api.deps import RelayServices
from widget_relay.api.routes import chat, feedback, health
from widget_relay.core.config import Settings, get_settings
from widget_relay.core.exceptions import RelayException

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Set up root logging based on LOG_FORMAT.

    json: Structured JSON via python-json-logger (for log shippers).
    text: Human-readable format (for local development).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicate output
    root_logger.handlers.clear()

    handler = logging.StreamHandler()

    if settings.LOG_FORMAT == "json":
        from pythonjsonlogger.json import JsonFormatter

        formatter = JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "service",
            },
            static_fields={"app": "widget-relay"},
        )
        handler.setFormatter(formatter)
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.addHandler(handler)
    # httpx logs full request URLs, which include the Telegram bot token
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build shared services on startup; drain lead tasks on shutdown."""
    settings: Settings = app.state.settings
    settings.validate_startup()

    logger.info("Starting widget relay...")
    services = RelayServices.from_settings(settings)
    app.state.services = services
    try:
        yield
    finally:
        logger.info("Shutting down widget relay...")
        await services.aclose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Settings override; defaults to the cached environment settings.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Widget Relay API",
        description="Streams assistant answers to the website chat widget",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(chat.router)
    app.include_router(feedback.router)
    app.include_router(health.router)

    app.add_exception_handler(RelayException, relay_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)
    return app


async def relay_exception_handler(request: Request, exc: RelayException) -> JSONResponse:
    """Handle relay-specific exceptions raised outside the event stream.

    Returns:
        JSON error response with consistent format.
    """
    request_id = str(uuid.uuid4())
    logger.warning(
        "Relay exception occurred",
        extra={
            "code": exc.code,
            "status_code": exc.status_code,
            "request_id": request_id,
            "path": request.url.path,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "code": exc.code,
            "request_id": request_id,
        },
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request body parsing and validation errors."""
    request_id = str(uuid.uuid4())
    logger.warning(
        "Request validation error",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "error_count": len(exc.errors()),
        },
    )
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Request validation error",
            "code": "REQUEST_VALIDATION_ERROR",
            "request_id": request_id,
            "errors": exc.errors(),
        },
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions without leaking internals."""
    request_id = str(uuid.uuid4())
    logger.exception(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "request_id": request_id,
            "path": request.url.path,
        },
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An internal server error occurred",
            "code": "INTERNAL_ERROR",
            "request_id": request_id,
        },
    )


app = create_app()


def main(argv: list[str] | None = None) -> None:
    """Run the relay under uvicorn."""
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Run the widget relay API.")
    parser.add_argument("--host", default="0.0.0.0", help="Host interface to bind.")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Port to bind.")
    args = parser.parse_args(argv)

    application = create_app(settings)
    logger.info("Starting widget relay on %s:%d", args.host, args.port)
    uvicorn.run(application, host=args.host, port=args.port, proxy_headers=True)


if __name__ == "__main__":
    main()
