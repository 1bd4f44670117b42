"""Carrier API Simulator - Main Application Module."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from beartype import beartype
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field
from starlette.exceptions import HTTPException

from . import __version__
from .api.response_patterns import error_code_for_status, error_envelope
from .api.v1 import router as v1_router
from .core.config import get_settings
from .core.logging_utils import configure_logging, get_logger
from .models.base import BaseModelConfig

logger = get_logger(__name__)


class APIInfo(BaseModelConfig):
    """API information response."""

    name: str = Field(..., description="API name")
    version: str = Field(..., description="API version")
    status: str = Field(..., description="API status")
    environment: str = Field(..., description="Environment name")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()
    configure_logging(level=settings.log_level_value)
    get_logger("carrier_simulator", level=settings.log_level_value)
    logger.info(
        "Starting %s on port %d in %s mode",
        settings.app_name,
        settings.api_port,
        settings.api_env,
    )

    yield

    logger.info("Shutting down %s", settings.app_name)


@beartype
def _validation_details(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic errors into ``{field, message, constraints}`` entries."""
    details = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        details.append(
            {
                "field": ".".join(location),
                "message": error.get("msg", "Validation failed"),
                "constraints": [error.get("type", "value_error")],
            }
        )
    return details


@beartype
def register_exception_handlers(app: FastAPI, hide_internal_errors: bool) -> None:
    """Render every failure with the ``{"success": false, "error": ...}`` envelope."""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=error_envelope(
                "INVALID_REQUEST",
                "Request validation failed",
                details=_validation_details(exc),
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        if isinstance(exc.detail, dict) and "code" in exc.detail:
            content = {"success": False, "error": exc.detail}
        else:
            content = error_envelope(
                error_code_for_status(exc.status_code), str(exc.detail)
            )
        logger.warning(
            "HTTP %d on %s: %s", exc.status_code, request.url.path, content["error"]
        )
        return JSONResponse(
            status_code=exc.status_code, content=content, headers=exc.headers
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception("Unhandled exception on %s", request.url.path)
        message = (
            "An unexpected error occurred" if hide_internal_errors else str(exc)
        )
        return JSONResponse(
            status_code=500, content=error_envelope("INTERNAL_ERROR", message)
        )


@beartype
def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Simulated insurance carrier quoting and policy servicing API",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, hide_internal_errors=settings.is_production)

    # Include API routers
    app.include_router(v1_router)

    # Root endpoint
    @app.get("/")
    async def root() -> APIInfo:
        """Root endpoint returning API information."""
        return APIInfo(
            name=settings.app_name,
            version=__version__,
            status="operational",
            environment=settings.api_env,
        )

    return app


# Create the application instance
app = create_app()


@beartype
def main() -> None:
    """Run the main application entry point."""
    settings = get_settings()

    uvicorn.run(
        "carrier_simulator.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level="info" if not settings.is_production else "error",
    )


if __name__ == "__main__":
    main()
