"""
Server-rendered calendar page

Plain HTML, no client-side script. Every value coming from a remote feed is
escaped before it is embedded.
"""
from datetime import date, datetime
from html import escape
from typing import Optional, Union

from apps.calendar.schemas import CalendarResult, Event

PAGE_TITLE = "Calendars"

STYLE = """
    body { font-family: system-ui, -apple-system, sans-serif; max-width: 960px; margin: 0 auto; padding: 2rem; line-height: 1.5; color: #333; }
    h1 { margin-bottom: 2rem; }
    .grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(280px, 1fr)); gap: 1.5rem; }
    .card { border: 1px solid #e1e4e8; padding: 1.5rem; border-radius: 8px; background: white; }
    .card h2 { margin-top: 0; font-size: 1.2rem; color: #24292e; }
    ul { list-style: none; padding-left: 0; margin: 0; }
    li { padding: 0.5rem 0; border-top: 1px solid #f0f0f0; }
    .when { color: #586069; font-size: 0.85rem; }
    .where { color: #586069; font-size: 0.85rem; font-style: italic; }
    .empty { color: #959da5; }
"""


def format_moment(value: Optional[Union[datetime, date]]) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    return value.strftime("%Y-%m-%d")


def render_event(event: Event) -> str:
    when = format_moment(event.start)
    if event.all_day:
        when = f"{when} (all day)"
    elif event.end is not None:
        when = f"{when} - {format_moment(event.end)}"

    parts = [f'<strong>{escape(event.summary or "(No title)")}</strong>']
    if when:
        parts.append(f'<div class="when">{escape(when)}</div>')
    if event.location:
        parts.append(f'<div class="where">{escape(event.location)}</div>')
    return f"<li>{''.join(parts)}</li>"


def render_calendar(result: CalendarResult) -> str:
    if result.events:
        body = "<ul>" + "".join(render_event(e) for e in result.events) + "</ul>"
    else:
        body = '<p class="empty">No events</p>'
    return f'<section class="card"><h2>{escape(result.name)}</h2>{body}</section>'


def render_page(calendars: list[CalendarResult]) -> str:
    """Render the full HTML document for the aggregated calendars."""
    if calendars:
        content = '<div class="grid">' + "".join(render_calendar(c) for c in calendars) + "</div>"
    else:
        content = '<p class="empty">No calendars configured.</p>'

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{PAGE_TITLE}</title>
    <style>{STYLE}</style>
</head>
<body>
    <h1>{PAGE_TITLE}</h1>
    {content}
</body>
</html>
"""
