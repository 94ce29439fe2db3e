"""
Calendar feed client

Fetches every configured ICS feed concurrently and degrades a failing feed to
an empty event list instead of failing the whole aggregation.
"""
import asyncio
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from apps.calendar.ics import parse_calendar
from apps.calendar.schemas import AppConfig, CalendarConfig, CalendarResult
from apps.shared.errors import (
    AggregationSetupError,
    CalendarFetchError,
    CalendarParseError,
)

logger = logging.getLogger(__name__)

USER_AGENT = "calendar-aggregator/1.0"


def resolve_calendars(config: AppConfig) -> list[Any]:
    """
    Return the configured calendar entries, unvalidated.

    Entries are validated one by one while fetching, so a broken entry only
    affects its own result.

    Raises:
        AggregationSetupError: If the list is missing or not a list
    """
    if config.calendars is None:
        raise AggregationSetupError("Config has no 'calendars' list")

    if not isinstance(config.calendars, list):
        raise AggregationSetupError(
            f"'calendars' must be a list, got {type(config.calendars).__name__}"
        )

    return list(config.calendars)


def entry_name(entry: Any) -> str:
    """Best-effort display name of a possibly malformed entry."""
    if isinstance(entry, CalendarConfig):
        return entry.name
    if isinstance(entry, dict) and isinstance(entry.get("name"), str):
        return entry["name"]
    return ""


def normalize_url(url: str) -> str:
    """webcal:// is plain HTTPS for our purposes."""
    if url.lower().startswith("webcal://"):
        return "https://" + url[len("webcal://"):]
    return url


def build_client(timeout: Optional[float] = None, **kwargs) -> httpx.AsyncClient:
    """HTTP client for feed downloads. timeout=None disables timeouts."""
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
        **kwargs,
    )


async def download_feed(calendar: CalendarConfig, client: httpx.AsyncClient) -> str:
    """
    Download the raw ICS text of a calendar.

    Raises:
        CalendarFetchError: On a missing URL, transport failure or a non-2xx status
    """
    if not calendar.ics_url.strip():
        raise CalendarFetchError("No ICS URL configured")

    try:
        response = await client.get(normalize_url(calendar.ics_url))
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise CalendarFetchError(f"{type(e).__name__}: {e}") from e

    if not response.is_success:
        raise CalendarFetchError(f"HTTP {response.status_code}: {response.reason_phrase}")

    return response.text


async def fetch_calendar(entry: Any, client: httpx.AsyncClient) -> CalendarResult:
    """
    Validate, fetch and parse one calendar entry.

    Never raises for a malformed entry or a failing feed; the result then
    carries no events.
    """
    name = entry_name(entry)

    try:
        calendar = CalendarConfig.model_validate(entry)
    except ValidationError as e:
        logger.error("Invalid calendar entry %r: %s", name, e)
        return CalendarResult(name=name, events=[])

    try:
        text = await download_feed(calendar, client)
        events = parse_calendar(text)
    except (CalendarFetchError, CalendarParseError) as e:
        logger.error("Failed to load calendar %s: %s", calendar.name, e)
        return CalendarResult(name=calendar.name, events=[])

    logger.info("Loaded %d events for calendar %s", len(events), calendar.name)
    return CalendarResult(name=calendar.name, events=events)


async def aggregate_calendars(
    calendars: list[Any],
    client: httpx.AsyncClient,
) -> list[CalendarResult]:
    """
    Fetch all calendars concurrently.

    Returns one result per entry, in configuration order.
    """
    return list(
        await asyncio.gather(*(fetch_calendar(c, client) for c in calendars))
    )
