"""Tests for importing .ics files."""

import pytest

from gcal.google_backend import ApiError
from gcal.utils import Aborted, UsageError

ICS = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//gcal tests//EN
BEGIN:VEVENT
UID:1
SUMMARY:First
DTSTART:20260201T090000
DTEND:20260201T100000
END:VEVENT
BEGIN:VEVENT
UID:2
SUMMARY:Broken
DTSTART;VALUE=DATE:20260202
DTEND:20260202T100000
END:VEVENT
BEGIN:VEVENT
UID:3
SUMMARY:Third
DTSTART;VALUE=DATE:20260203
END:VEVENT
END:VCALENDAR
""".replace("\n", "\r\n")


@pytest.fixture
def ics_file(tmp_path):
    path = tmp_path / "meeting.ics"
    path.write_text(ICS, encoding="utf-8")
    return path


def test_bad_record_does_not_stop_the_batch(make_interface, api, ics_file,
                                            capsys):
    result = make_interface().import_ics(str(ics_file))
    assert result.imported == 2
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Broken: ")

    created = [c[0][0]["summary"] for c in api.create_event.call_args_list]
    assert created == ["First", "Third"]
    assert api.create_event.call_args[0][1] == "primary"

    captured = capsys.readouterr()
    assert "Importing: meeting.ics" in captured.out
    assert "Found 3 event(s)" in captured.out
    assert "  + First" in captured.out
    assert "  + Third" in captured.out
    assert "2 event(s) imported" in captured.out
    assert "1 error(s)" in captured.out
    assert "! Failed: Broken" in captured.err


def test_create_failure_is_recorded(make_interface, api, ics_file):
    api.create_event.side_effect = [
        ApiError("create event", 500, "boom"), {"id": "b"}]
    result = make_interface(calendar="work").import_ics(str(ics_file))
    assert result.imported == 1
    assert result.errors[0] == "First: Failed to create event: 500 boom"
    assert result.errors[1].startswith("Broken: ")
    assert api.create_event.call_args[0][1] == "work"


def test_abort_stops_the_batch(make_interface, api, ics_file):
    api.create_event.side_effect = Aborted()
    with pytest.raises(Aborted):
        make_interface().import_ics(str(ics_file))
    assert api.create_event.call_count == 1


def test_missing_file(make_interface, connect, tmp_path):
    with pytest.raises(UsageError, match="File not found"):
        make_interface().import_ics(str(tmp_path / "nope.ics"))
    connect.assert_not_called()


def test_unparseable_file(make_interface, connect, tmp_path):
    path = tmp_path / "junk.ics"
    path.write_text("this is not a calendar\n")
    with pytest.raises(ValueError, match="Parse error"):
        make_interface().import_ics(str(path))
    connect.assert_not_called()
