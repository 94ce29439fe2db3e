"""
Error taxonomy and secure error handling

Defines the exceptions raised while resolving configuration, checking access
and aggregating calendar feeds, plus a helper for logging failures without
leaking details to the client.
"""

import logging
import uuid
from typing import Optional

logger = logging.getLogger(__name__)


class CalendarServiceError(Exception):
    """Base class for all calendar service errors."""


class ConfigError(CalendarServiceError):
    """Configuration source is missing or malformed. Aborts the request."""


class AuthorizationError(CalendarServiceError):
    """Shared token missing or mismatched. Surfaced as 401."""


class AggregationSetupError(CalendarServiceError):
    """The configured calendar list itself could not be read."""


class CalendarFetchError(CalendarServiceError):
    """A single calendar feed could not be downloaded."""


class CalendarParseError(CalendarServiceError):
    """A single calendar feed could not be parsed as ICS."""


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return sanitized message for client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "Config load")
        user_message: Optional custom message to show user. If None, uses generic message.

    Returns:
        Tuple of (sanitized_message, error_id) for client response
    """
    # Short id to correlate the client response with the server log line
    error_id = str(uuid.uuid4())[:8]

    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=error
    )

    if user_message:
        sanitized = f"{user_message} (Error ID: {error_id})"
    else:
        sanitized = f"{context} failed. Please try again later. (Error ID: {error_id})"

    return sanitized, error_id
