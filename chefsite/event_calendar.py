"""
"Add to calendar" exports for events.

:func:`icalendar_file` renders an RFC 5545 ``.ics`` document; the link
helpers build Google Calendar and Outlook compose URLs. Event times are
free text ("6:00 PM - 9:00 PM", "18:00"), so they are parsed leniently and
exported as floating local times.
"""

import re
from datetime import datetime, time, timedelta
from typing import Optional
from urllib.parse import urlencode

from . import schemas
from .crud.base import slugify
from .models import utcnow

PRODID = "-//Chef Site//Events Calendar//EN"
DEFAULT_DURATION = timedelta(hours=2)
GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"
OUTLOOK_CALENDAR_URL = "https://outlook.live.com/calendar/0/deeplink/compose"

_CLOCK = re.compile(r"(\d{1,2})(?::(\d{2}))?(?:\s*([AaPp])\.?\s*[Mm]\.?)?")


def _clock_time(hour: str, minute: Optional[str], meridiem: Optional[str]) -> Optional[time]:
    h, m = int(hour), int(minute or 0)
    if meridiem:
        if h > 12:
            return None
        h = h % 12 + (12 if meridiem.lower() == "p" else 0)
    if h > 23 or m > 59:
        return None
    return time(h, m)


def parse_times(text: str) -> list[time]:
    """
    Read up to two clock times from an event's ``time`` text.

    A start without AM/PM takes the meridiem of the end time.

    >>> parse_times("6:00 - 9:30 PM")
    [datetime.time(18, 0), datetime.time(21, 30)]
    >>> parse_times("18:00")
    [datetime.time(18, 0)]
    """
    found = _CLOCK.findall(text or "")[:2]
    if len(found) == 2 and not found[0][2] and found[1][2]:
        found[0] = (found[0][0], found[0][1], found[1][2])
    times = [_clock_time(*parts) for parts in found]
    return [t for t in times if t is not None]


def event_window(event: schemas.EventOut) -> tuple[datetime, datetime]:
    """
    Start and end of ``event``.

    Without a parsable time the event starts at midnight; without an end it
    lasts :data:`DEFAULT_DURATION`. An end before the start runs past midnight.
    """
    times = parse_times(event.time or "")
    start = datetime.combine(event.date, times[0] if times else time())
    if len(times) > 1:
        end = datetime.combine(event.date, times[1])
        if end <= start:
            end += timedelta(days=1)
    else:
        end = start + DEFAULT_DURATION
    return start, end


def _stamp(value: datetime) -> str:
    return value.strftime("%Y%m%dT%H%M%S")


def escape_text(value: str) -> str:
    r"""
    Escape a value for an iCalendar TEXT property.

    >>> escape_text("Wine, cheese; more\nfun")
    'Wine\\, cheese\\; more\\nfun'
    """
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def _fold(line: str, limit: int = 75) -> str:
    # content lines are at most 75 octets; continuations start with a space
    parts, current = [], ""
    for char in line:
        if len((current + char).encode("utf-8")) > limit:
            parts.append(current)
            current = " " + char
        else:
            current += char
    parts.append(current)
    return "\r\n".join(parts)


def icalendar_file(event: schemas.EventOut, now: Optional[datetime] = None) -> str:
    """
    Render ``event`` as an iCalendar document.

    Args:
        event (EventOut): Event to export.
        now (datetime | None): Creation stamp, defaults to UTC now.

    Returns:
        str: CRLF separated ``VCALENDAR`` with one ``VEVENT``.
    """
    start, end = event_window(event)
    now = now or utcnow()
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        f"UID:event-{event.id}@chefsite",
        f"DTSTAMP:{_stamp(now)}Z",
        f"DTSTART:{_stamp(start)}",
        f"DTEND:{_stamp(end)}",
        f"SUMMARY:{escape_text(event.title)}",
        f"DESCRIPTION:{escape_text(event.description)}",
    ]
    if event.location:
        lines.append(f"LOCATION:{escape_text(event.location)}")
    lines += ["END:VEVENT", "END:VCALENDAR"]
    return "\r\n".join(_fold(line) for line in lines) + "\r\n"


def calendar_filename(event: schemas.EventOut) -> str:
    return f"{slugify(event.title) or 'event'}.ics"


def google_calendar_url(event: schemas.EventOut) -> str:
    """Google Calendar "create event" link prefilled with ``event``."""
    start, end = event_window(event)
    params = {
        "action": "TEMPLATE",
        "text": event.title,
        "dates": f"{_stamp(start)}/{_stamp(end)}",
        "details": event.description,
    }
    if event.location:
        params["location"] = event.location
    return f"{GOOGLE_CALENDAR_URL}?{urlencode(params)}"


def outlook_calendar_url(event: schemas.EventOut) -> str:
    """Outlook.com compose link prefilled with ``event``."""
    start, end = event_window(event)
    params = {
        "path": "/calendar/action/compose",
        "rru": "addevent",
        "subject": event.title,
        "startdt": start.isoformat(),
        "enddt": end.isoformat(),
        "body": event.description,
    }
    if event.location:
        params["location"] = event.location
    return f"{OUTLOOK_CALENDAR_URL}?{urlencode(params)}"
