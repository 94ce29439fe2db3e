"""
Pydantic schemas for the Calendar service.

Configuration documents and API responses use camelCase keys.
"""
from datetime import date, datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema accepting and emitting camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CalendarConfig(CamelModel):
    """A named remote ICS feed."""
    model_config = ConfigDict(frozen=True)

    name: str
    ics_url: str


class AppConfig(CamelModel):
    """
    Service configuration, loaded fresh for every request.

    `calendars` is kept as raw JSON here. Its entries are validated one by
    one during aggregation, so a broken entry only affects its own result.
    """
    model_config = ConfigDict(extra="ignore")

    auth_token: Optional[str] = None
    calendars: Any = None
    # Seconds per feed; None means no timeout
    fetch_timeout: Optional[float] = Field(None, gt=0)
    protect_api: bool = False


class Event(CamelModel):
    """A single VEVENT from a calendar feed."""
    uid: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    url: Optional[str] = None
    status: Optional[str] = None
    start: Optional[Union[datetime, date]] = None
    end: Optional[Union[datetime, date]] = None
    all_day: bool = False
    categories: list[str] = Field(default_factory=list)
    recurrence_rule: Optional[str] = None


class CalendarResult(CamelModel):
    """Events of one configured calendar. Empty when the feed failed."""
    name: str
    events: list[Event] = Field(default_factory=list)
