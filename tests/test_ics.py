from datetime import date, datetime, timedelta, timezone

import pytest

from apps.calendar.ics import parse_calendar
from apps.shared.errors import CalendarParseError

from conftest import SAMPLE_ICS


def test_parses_all_events_in_order():
    events = parse_calendar(SAMPLE_ICS)

    assert [e.summary for e in events] == ["Team standup", "Holiday", "Design review"]


def test_parsing_is_deterministic():
    first = parse_calendar(SAMPLE_ICS)
    second = parse_calendar(SAMPLE_ICS)

    assert len(first) == len(second) == 3
    assert first == second


def test_timed_event_fields():
    standup = parse_calendar(SAMPLE_ICS)[0]

    assert standup.uid == "standup-1@example.com"
    assert standup.location == "Room 4"
    assert standup.start == datetime(2026, 10, 20, 9, 0, tzinfo=timezone.utc)
    assert standup.end == datetime(2026, 10, 20, 9, 30, tzinfo=timezone.utc)
    assert standup.all_day is False
    assert standup.categories == ["WORK", "MEETING"]
    assert "FREQ=WEEKLY" in standup.recurrence_rule
    assert "BYDAY=TU" in standup.recurrence_rule


def test_all_day_event():
    holiday = parse_calendar(SAMPLE_ICS)[1]

    assert holiday.start == date(2026, 10, 24)
    assert holiday.all_day is True
    assert holiday.end is None
    assert holiday.categories == []
    assert holiday.recurrence_rule is None


def test_end_derived_from_duration():
    review = parse_calendar(SAMPLE_ICS)[2]

    assert review.end - review.start == timedelta(hours=1)


def test_calendar_without_events():
    text = "BEGIN:VCALENDAR\r\nVERSION:2.0\r\nPRODID:-//Example//EN\r\nEND:VCALENDAR\r\n"

    assert parse_calendar(text) == []


@pytest.mark.parametrize("text", [
    "",
    "this is not an ics document",
    "BEGIN:VEVENT\r\nSUMMARY:Orphan\r\nEND:VEVENT\r\n",
])
def test_invalid_documents_raise(text):
    with pytest.raises(CalendarParseError):
        parse_calendar(text)


def test_event_serializes_with_camel_case_keys():
    holiday = parse_calendar(SAMPLE_ICS)[1]

    data = holiday.model_dump(by_alias=True, mode="json")

    assert data["allDay"] is True
    assert data["start"] == "2026-10-24"
    assert "recurrenceRule" in data
