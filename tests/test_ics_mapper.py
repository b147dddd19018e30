"""Tests for mapping iCalendar events to Google Calendar event bodies."""

import textwrap

import pytest
from icalendar import Calendar

from gcal.file_backend.ics_mapper import map_record, record_summary

from conftest import TZ_NAME


def vevents(body):
    text = ("BEGIN:VCALENDAR\r\nVERSION:2.0\r\nPRODID:-//gcal tests//EN\r\n"
            + textwrap.dedent(body).strip().replace("\n", "\r\n")
            + "\r\nEND:VCALENDAR\r\n")
    return Calendar.from_ical(text).walk("VEVENT")


def one(body):
    (vevent,) = vevents(body)
    return vevent


def test_named_timezone():
    event = map_record(one("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:Standup
        DTSTART;TZID=Europe/Berlin:20260115T100000
        DTEND;TZID=Europe/Berlin:20260115T103000
        LOCATION:Room 5
        DESCRIPTION:Daily sync
        END:VEVENT
    """), TZ_NAME)
    assert event["summary"] == "Standup"
    assert event["location"] == "Room 5"
    assert event["description"] == "Daily sync"
    assert event["start"]["timeZone"] == "Europe/Berlin"
    assert event["start"]["dateTime"].startswith("2026-01-15T10:00:00")
    assert event["end"]["timeZone"] == "Europe/Berlin"
    assert event["end"]["dateTime"].startswith("2026-01-15T10:30:00")


def test_utc_time():
    event = map_record(one("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:Call
        DTSTART:20260115T150000Z
        DTEND:20260115T160000Z
        END:VEVENT
    """), TZ_NAME)
    assert event["start"]["timeZone"] == "UTC"
    assert event["start"]["dateTime"].startswith("2026-01-15T15:00:00")


def test_floating_time_uses_local_zone():
    event = map_record(one("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:Lunch
        DTSTART:20260115T120000
        DTEND:20260115T130000
        END:VEVENT
    """), TZ_NAME)
    assert event["start"] == {"dateTime": "2026-01-15T12:00:00-05:00",
                              "timeZone": TZ_NAME}
    assert event["end"] == {"dateTime": "2026-01-15T13:00:00-05:00",
                            "timeZone": TZ_NAME}


def test_all_day():
    event = map_record(one("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:Holiday
        DTSTART;VALUE=DATE:20260115
        DTEND;VALUE=DATE:20260116
        END:VEVENT
    """), TZ_NAME)
    assert event["start"] == {"date": "2026-01-15"}
    assert event["end"] == {"date": "2026-01-16"}


def test_all_day_without_end_lasts_one_day():
    event = map_record(one("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:Holiday
        DTSTART;VALUE=DATE:20260115
        END:VEVENT
    """), TZ_NAME)
    assert event["end"] == {"date": "2026-01-16"}


def test_duration_instead_of_end():
    event = map_record(one("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:Review
        DTSTART:20260115T090000
        DURATION:PT45M
        END:VEVENT
    """), TZ_NAME)
    assert event["end"]["dateTime"] == "2026-01-15T09:45:00-05:00"


def test_missing_summary():
    event = map_record(one("""
        BEGIN:VEVENT
        UID:1
        DTSTART:20260115T090000
        END:VEVENT
    """), TZ_NAME)
    assert event["summary"] == "Untitled Event"
    assert "location" not in event
    assert "description" not in event


def test_attendees():
    event = map_record(one("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:Planning
        DTSTART:20260115T090000
        ATTENDEE;CN=Bob:mailto:bob@example.com
        ATTENDEE:MAILTO:amy@example.com
        END:VEVENT
    """), TZ_NAME)
    assert event["attendees"] == [
        {"email": "bob@example.com", "displayName": "Bob"},
        {"email": "amy@example.com"}]


def test_recurrence():
    event = map_record(one("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:Weekly
        DTSTART:20260115T090000
        RRULE:FREQ=WEEKLY;COUNT=3
        END:VEVENT
    """), TZ_NAME)
    assert event["recurrence"] == ["RRULE:FREQ=WEEKLY;COUNT=3"]


def test_missing_start():
    with pytest.raises(ValueError, match="DTSTART"):
        map_record(one("""
            BEGIN:VEVENT
            UID:1
            SUMMARY:Nothing
            END:VEVENT
        """), TZ_NAME)


def test_mixed_date_and_date_time():
    with pytest.raises(ValueError, match="both be dates"):
        map_record(one("""
            BEGIN:VEVENT
            UID:1
            SUMMARY:Odd
            DTSTART;VALUE=DATE:20260115
            DTEND:20260115T100000
            END:VEVENT
        """), TZ_NAME)


def test_record_summary():
    (named, unnamed) = vevents("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:Named
        END:VEVENT
        BEGIN:VEVENT
        UID:2
        END:VEVENT
    """)
    assert record_summary(named) == "Named"
    assert record_summary(unnamed) == "unknown"


def test_windows_zone_name_is_sent_as_iana():
    event = map_record(one("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:Outlook invite
        DTSTART;TZID=Eastern Standard Time:20260115T100000
        DTEND;TZID=Eastern Standard Time:20260115T110000
        END:VEVENT
    """), "Europe/Berlin")
    assert event["start"]["timeZone"] == "America/New_York"
    assert event["start"]["dateTime"] == "2026-01-15T10:00:00-05:00"
    assert event["end"]["timeZone"] == "America/New_York"


def test_several_recurrence_rules():
    event = map_record(one("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:Twice a week
        DTSTART:20260115T090000
        RRULE:FREQ=WEEKLY;BYDAY=MO
        RRULE:FREQ=WEEKLY;BYDAY=TH
        END:VEVENT
    """), TZ_NAME)
    assert event["recurrence"] == ["RRULE:FREQ=WEEKLY;BYDAY=MO",
                                   "RRULE:FREQ=WEEKLY;BYDAY=TH"]


@pytest.mark.parametrize("attendees", [
    "ATTENDEE:",
    "ATTENDEE:mailto:amy@example.com\nATTENDEE:",
])
def test_attendee_without_address(attendees):
    vevent = one("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:Planning
        DTSTART:20260115T090000
        {}
        END:VEVENT
    """.replace("{}", attendees.replace("\n", "\n        ")))
    with pytest.raises(ValueError, match="attendee without an address"):
        map_record(vevent, TZ_NAME)


def test_blank_summary():
    (vevent,) = vevents("""
        BEGIN:VEVENT
        UID:1
        SUMMARY:{}
        DTSTART:20260115T090000
        END:VEVENT
    """.replace("{}", " " * 3))
    assert map_record(vevent, TZ_NAME)["summary"] == "Untitled Event"
    assert record_summary(vevent) == "unknown"
