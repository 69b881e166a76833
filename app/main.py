"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.router import api_router
from app.config import settings
from app.core.exceptions import AppException
from app.core.logging import configure_logging
from app.core.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from app.database import close_db, init_db
from app.domain.booking_rules import RuleNotFoundError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    if settings.debug:
        await init_db()

    yield

    await close_db()


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=exc.headers,
    )


async def rule_not_found_handler(request: Request, exc: RuleNotFoundError) -> JSONResponse:
    """A meal type without rules is a configuration defect, not a client error."""
    logger.error("%s (%s %s)", exc, request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Booking rules are not configured for this meal type"},
    )


def _install_middleware(app: FastAPI) -> None:
    # Each add_middleware call wraps the previous ones: gzip ends up outermost,
    # security headers innermost
    app.add_middleware(SecurityHeadersMiddleware)
    if settings.environment != "development":
        app.add_middleware(RateLimitMiddleware, requests_per_minute=settings.rate_limit_per_minute)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)


async def health_check() -> dict:
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": datetime.now(UTC).isoformat(),
    }


def create_application() -> FastAPI:
    """Build the MealDesk API: handlers, middleware, routes."""
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="MealDesk - Corporate Meal Booking API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RuleNotFoundError, rule_not_found_handler)
    _install_middleware(app)

    app.include_router(api_router, prefix=settings.api_prefix)
    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers,
    )
