"""
ICS parsing

Thin boundary around the icalendar library: turns a VCALENDAR document into
typed Event records. The grammar itself is left to icalendar.
"""
from datetime import date, datetime, timedelta
from typing import Optional, Union

import icalendar

from apps.calendar.schemas import Event
from apps.shared.errors import CalendarParseError


def _text(component, key: str) -> Optional[str]:
    value = component.get(key)
    if value is None:
        return None
    return str(value)


def _moment(component, key: str) -> Optional[Union[datetime, date]]:
    prop = component.get(key)
    if prop is None:
        return None
    return getattr(prop, "dt", None)


def _categories(component) -> list[str]:
    prop = component.get("CATEGORIES")
    if prop is None:
        return []
    # One CATEGORIES line gives a single vCategory, several give a list
    items = prop if isinstance(prop, list) else [prop]
    result = []
    for item in items:
        for cat in getattr(item, "cats", [item]):
            result.append(str(cat))
    return result


def _recurrence_rule(component) -> Optional[str]:
    rrule = component.get("RRULE")
    if rrule is None:
        return None
    return rrule.to_ical().decode()


def event_from_component(component) -> Event:
    """Convert a single VEVENT component."""
    start = _moment(component, "DTSTART")
    end = _moment(component, "DTEND")

    if end is None and start is not None:
        duration = component.decoded("DURATION") if "DURATION" in component else None
        if isinstance(duration, timedelta):
            end = start + duration

    return Event(
        uid=_text(component, "UID"),
        summary=_text(component, "SUMMARY"),
        description=_text(component, "DESCRIPTION"),
        location=_text(component, "LOCATION"),
        url=_text(component, "URL"),
        status=_text(component, "STATUS"),
        start=start,
        end=end,
        all_day=isinstance(start, date) and not isinstance(start, datetime),
        categories=_categories(component),
        recurrence_rule=_recurrence_rule(component),
    )


def parse_calendar(text: str) -> list[Event]:
    """
    Parse ICS text into events, in document order.

    Raises:
        CalendarParseError: If the text is not a VCALENDAR document
    """
    try:
        calendar = icalendar.Calendar.from_ical(text)
    except Exception as e:
        raise CalendarParseError(f"Invalid ICS data: {e}") from e

    if calendar.name != "VCALENDAR":
        raise CalendarParseError(f"Expected VCALENDAR, got {calendar.name}")

    try:
        return [event_from_component(c) for c in calendar.walk("VEVENT")]
    except Exception as e:
        raise CalendarParseError(f"Invalid VEVENT: {e}") from e
