"""Security and caching headers for the calendar service."""

from fastapi import FastAPI, Request
from fastapi.responses import Response


# The rendered page uses inline styles only; no scripts are served
DEFAULT_CSP = (
    "default-src 'none'; "
    "style-src 'unsafe-inline'; "
    "img-src 'self' data:; "
    "frame-ancestors 'none'"
)

DEFAULT_HEADERS = {
    "Content-Security-Policy": DEFAULT_CSP,
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    # Aggregated feeds are fetched fresh on every request
    "Cache-Control": "no-cache, no-store, must-revalidate",
}


def setup_security_headers(
    app: FastAPI,
    headers: dict[str, str] = None,
    exclude_paths: list[str] = None,
) -> None:
    """
    Add default security headers to every response unless already set.

    Paths in exclude_paths (e.g. the interactive docs) get every header
    except the Content-Security-Policy.
    """
    extra = dict(DEFAULT_HEADERS)
    if headers:
        extra.update(headers)
    excluded = [path for path in (exclude_paths or []) if path]

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next) -> Response:
        response = await call_next(request)
        skip_csp = any(request.url.path.startswith(path) for path in excluded)
        for name, value in extra.items():
            if skip_csp and name == "Content-Security-Policy":
                continue
            response.headers.setdefault(name, value)
        return response
