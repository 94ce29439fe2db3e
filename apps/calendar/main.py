"""
Calendar Service

Aggregates remote ICS feeds into one JSON document or a server-rendered page.
Configuration is re-read on every request; feeds are never cached.
"""
import logging
import os
from typing import Callable, Optional

import httpx
from fastapi import FastAPI, APIRouter, Depends, Request, Security, status
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from apps.calendar.client import aggregate_calendars, build_client, resolve_calendars
from apps.calendar.config import load_config
from apps.calendar.page import render_page
from apps.calendar.schemas import AppConfig, CalendarResult
from apps.shared.auth import auth_header_scheme, auth_query_scheme, verify_shared_token
from apps.shared.cors import setup_cors
from apps.shared.errors import (
    AggregationSetupError,
    AuthorizationError,
    ConfigError,
    log_and_sanitize_error,
)
from apps.shared.security_headers import setup_security_headers

logger = logging.getLogger("calendar-service")
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

ClientFactory = Callable[[Optional[float]], httpx.AsyncClient]

app = FastAPI(
    title="Calendar Service",
    version="1.0.0",
    description="Aggregates remote ICS calendar feeds",
    docs_url="/api/docs",
    redoc_url=None,
    openapi_url="/api/openapi.json",
)

setup_cors(app)
# Swagger UI loads its assets from a CDN, so it is served without the CSP
setup_security_headers(app, exclude_paths=[app.docs_url])


def error_response(message: str, category: str, status_code: int) -> JSONResponse:
    """Consistent error payloads across the API."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "category": category,
        },
    )


@app.exception_handler(ConfigError)
async def config_exception_handler(request: Request, exc: ConfigError):
    message, _ = log_and_sanitize_error(exc, "Config load", "Service is misconfigured")
    return error_response(
        message=message,
        category="configuration",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@app.exception_handler(AuthorizationError)
async def authorization_exception_handler(request: Request, exc: AuthorizationError):
    return error_response(
        message="Unauthorized",
        category="security",
        status_code=status.HTTP_401_UNAUTHORIZED,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = (
        detail.get("message") if isinstance(detail, dict) else str(detail)
    ) or "Request failed."

    if exc.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        category = "security"
    elif exc.status_code >= 500:
        category = "server_error"
    else:
        category = "client_error"

    return error_response(
        message=message,
        category=category,
        status_code=exc.status_code,
    )


@app.exception_handler(Exception)
async def unexpected_exception_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error on %s", request.url.path, exc_info=exc)
    return error_response(
        message="An unexpected server error occurred. Please try again later.",
        category="server_error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def get_client_factory() -> ClientFactory:
    """
    Dependency returning the factory for the per-request HTTP client.
    Overridden in tests to route feeds through a mock transport.
    """
    return build_client


async def load_results(config: AppConfig, client_factory: ClientFactory) -> list[CalendarResult]:
    """Resolve the calendar list and fetch every feed."""
    calendars = resolve_calendars(config)
    async with client_factory(config.fetch_timeout) as client:
        return await aggregate_calendars(calendars, client)


# Router setup
router = APIRouter(prefix="/api")


@router.get("/health")
def health():
    """Health check endpoint"""
    return {"status": "ok", "service": "calendar"}


@router.get("/calendars", response_model=list[CalendarResult])
async def list_calendars(
    auth_header: Optional[str] = Security(auth_header_scheme),
    auth_query: Optional[str] = Security(auth_query_scheme),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    """
    Aggregated events of every configured calendar.

    A failing feed shows up with an empty event list. If the configuration
    itself cannot be used, or aggregation fails unexpectedly, the response
    is an empty list with status 500.
    Requires the shared token only when `protectApi` is enabled.
    """
    try:
        config = load_config()
    except ConfigError as e:
        logger.error("Failed to load calendars: %s", e)
        return JSONResponse(content=[], status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if config.protect_api:
        verify_shared_token(config.auth_token, auth_header, auth_query)

    try:
        return await load_results(config, client_factory)
    except AggregationSetupError as e:
        logger.error("Failed to load calendars: %s", e)
        return JSONResponse(content=[], status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    except Exception as e:
        log_and_sanitize_error(e, "Calendar aggregation")
        return JSONResponse(content=[], status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


app.include_router(router)


@app.get("/", response_class=HTMLResponse)
async def calendar_page(
    auth_header: Optional[str] = Security(auth_header_scheme),
    auth_query: Optional[str] = Security(auth_query_scheme),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    """Server-rendered overview of all calendars."""
    config = load_config()
    verify_shared_token(config.auth_token, auth_header, auth_query)

    try:
        results = await load_results(config, client_factory)
    except AggregationSetupError as e:
        logger.error("Failed to load calendars: %s", e)
        results = []

    return render_page(results)
