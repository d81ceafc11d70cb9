from datetime import date, datetime, time, timezone

from chefsite import schemas
from chefsite.event_calendar import (
    escape_text,
    event_window,
    icalendar_file,
    outlook_calendar_url,
    parse_times,
)

CREATED = datetime(2025, 1, 1, tzinfo=timezone.utc)


def event(**extra):
    data = {
        "id": "e1",
        "title": "Italian Night",
        "date": date(2025, 3, 1),
        "description": "Pasta, wine\nand friends",
        "created_at": CREATED,
        **extra,
    }
    return schemas.EventOut(**data)


def test_parse_times():
    assert parse_times("6:00 PM - 9:00 PM") == [time(18, 0), time(21, 0)]
    assert parse_times("6 - 9:30 pm") == [time(18, 0), time(21, 30)]
    assert parse_times("12:00 AM") == [time(0, 0)]
    assert parse_times("18:00") == [time(18, 0)]
    assert parse_times("evening") == []
    assert parse_times("") == []


def test_window_defaults_and_overnight():
    assert event_window(event()) == (
        datetime(2025, 3, 1, 0, 0),
        datetime(2025, 3, 1, 2, 0),
    )
    assert event_window(event(time="7:30 PM")) == (
        datetime(2025, 3, 1, 19, 30),
        datetime(2025, 3, 1, 21, 30),
    )
    assert event_window(event(time="10:00 PM - 1:00 AM"))[1] == datetime(2025, 3, 2, 1, 0)


def test_escape_text():
    assert escape_text("a,b;c\\d\ne") == "a\\,b\\;c\\\\d\\ne"


def test_icalendar_file():
    ics = icalendar_file(event(time="6:00 PM"), now=datetime(2025, 2, 1, 9, 30))
    lines = ics.split("\r\n")

    assert lines[0] == "BEGIN:VCALENDAR"
    assert "UID:event-e1@chefsite" in lines
    assert "DTSTAMP:20250201T093000Z" in lines
    assert "DTSTART:20250301T180000" in lines
    assert "DTEND:20250301T200000" in lines
    assert "DESCRIPTION:Pasta\\, wine\\nand friends" in lines
    assert not any(line.startswith("LOCATION") for line in lines)
    assert ics.endswith("END:VEVENT\r\nEND:VCALENDAR\r\n")


def test_long_lines_are_folded():
    ics = icalendar_file(event(description="x" * 200), now=CREATED)

    assert all(len(line.encode()) <= 75 for line in ics.split("\r\n"))
    assert "\r\n x" in ics


def test_outlook_link_includes_location():
    url = outlook_calendar_url(event(location="Dallas"))

    assert "rru=addevent" in url
    assert "location=Dallas" in url
    assert "startdt=2025-03-01T00%3A00%3A00" in url
