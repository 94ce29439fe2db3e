import json

import httpx
import pytest
from fastapi.testclient import TestClient

from apps.calendar.client import build_client
from apps.calendar.main import app, get_client_factory


SAMPLE_ICS = "\r\n".join([
    "BEGIN:VCALENDAR",
    "VERSION:2.0",
    "PRODID:-//Example//Calendar//EN",
    "BEGIN:VEVENT",
    "UID:standup-1@example.com",
    "DTSTAMP:20261001T080000Z",
    "DTSTART:20261020T090000Z",
    "DTEND:20261020T093000Z",
    "SUMMARY:Team standup",
    "LOCATION:Room 4",
    "CATEGORIES:WORK,MEETING",
    "RRULE:FREQ=WEEKLY;BYDAY=TU",
    "END:VEVENT",
    "BEGIN:VEVENT",
    "UID:holiday-1@example.com",
    "DTSTAMP:20261001T080000Z",
    "DTSTART;VALUE=DATE:20261024",
    "SUMMARY:Holiday",
    "END:VEVENT",
    "BEGIN:VEVENT",
    "UID:review-1@example.com",
    "DTSTAMP:20261001T080000Z",
    "DTSTART:20261021T140000Z",
    "DURATION:PT1H",
    "SUMMARY:Design review",
    "END:VEVENT",
    "END:VCALENDAR",
    "",
])

GOOD_URL = "https://good.example.com/calendar.ics"
BAD_URL = "https://bad.example.com/calendar.ics"


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """No config leaks in from the environment or the working directory."""
    monkeypatch.delenv("CONFIG", raising=False)
    monkeypatch.delenv("CONFIG_PATH", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def set_config(monkeypatch):
    def _set(document):
        monkeypatch.setenv("CONFIG", json.dumps(document))
    return _set


@pytest.fixture
def feeds():
    """URL -> (status, body) or an exception to raise."""
    return {
        GOOD_URL: (200, SAMPLE_ICS),
        BAD_URL: (500, "Internal Server Error"),
    }


@pytest.fixture
def transport(feeds):
    def handler(request: httpx.Request) -> httpx.Response:
        outcome = feeds.get(str(request.url))
        if outcome is None:
            return httpx.Response(404, text="Not Found")
        if isinstance(outcome, Exception):
            raise outcome
        status_code, body = outcome
        return httpx.Response(status_code, text=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def client_timeouts():
    """Timeouts the service asked for, one per created HTTP client."""
    return []


@pytest.fixture
def client(transport, client_timeouts):
    def factory(timeout=None):
        client_timeouts.append(timeout)
        return build_client(timeout, transport=transport)

    app.dependency_overrides[get_client_factory] = lambda: factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
