"""
Shared Token Access Gate

Optional single-secret authorization for the calendar service.
When an auth token is configured, a request must carry it either as the raw
Authorization header value or as the `auth` query parameter.
"""

import hmac
import logging
from typing import Optional

from fastapi.security import APIKeyHeader, APIKeyQuery

from apps.shared.errors import AuthorizationError

logger = logging.getLogger(__name__)

AUTH_HEADER = "Authorization"
AUTH_QUERY_PARAM = "auth"

# FastAPI security schemes; auto_error=False so a missing value reaches the gate
auth_header_scheme = APIKeyHeader(name=AUTH_HEADER, auto_error=False)
auth_query_scheme = APIKeyQuery(name=AUTH_QUERY_PARAM, auto_error=False)


def _matches(candidate: Optional[str], expected: str) -> bool:
    if candidate is None:
        return False
    # bytes, because compare_digest rejects non-ASCII str
    return hmac.compare_digest(candidate.encode(), expected.encode())


def verify_shared_token(
    expected: Optional[str],
    header_value: Optional[str],
    query_value: Optional[str],
) -> None:
    """
    Enforce the shared token.

    Open access when no token is configured. Otherwise the header or the
    query parameter must equal the token exactly.

    Raises:
        AuthorizationError: If a token is configured and neither value matches
    """
    if not expected:
        return

    if _matches(header_value, expected) or _matches(query_value, expected):
        return

    logger.warning("Rejected request with missing or invalid auth token")
    raise AuthorizationError("Unauthorized")
