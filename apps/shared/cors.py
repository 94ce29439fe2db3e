"""Centralized CORS configuration for the calendar service."""

import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


# Development origins (dev environment only)
DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://localhost:8000",
]


def get_allowed_origins() -> list[str]:
    """Build the list of allowed CORS origins for the current environment."""
    origins = []

    # Comma separated list, e.g. "https://cal.example.com,https://example.com"
    extra = os.getenv("CORS_ORIGINS", "")
    for origin in extra.split(","):
        clean = origin.strip().rstrip("/")
        if clean and clean not in origins:
            origins.append(clean)

    frontend_url = os.getenv("FRONTEND_URL")
    if frontend_url:
        clean_url = frontend_url.rstrip("/")
        if clean_url not in origins:
            origins.append(clean_url)

    env = os.getenv("ENVIRONMENT", "development")
    if env != "production":
        origins.extend(o for o in DEV_ORIGINS if o not in origins)

    return origins


def setup_cors(app: FastAPI) -> None:
    """Add CORS middleware to a FastAPI app. Only GET is exposed."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["Authorization"],
    )
