"""Tests for the Calendar v3 REST client."""

from unittest.mock import MagicMock

import pytest
import requests

from gcal.google_backend.api_client import (
    CALENDAR_API_BASE, ApiError, GoogleCalendarAPI)
from gcal.utils import Aborted, CancelToken


def response(data=None, status=200, text=""):
    res = MagicMock()
    res.ok = status < 400
    res.status_code = status
    res.text = text
    res.json.return_value = data or {}
    return res


@pytest.fixture
def session():
    return MagicMock()


def test_sets_bearer_token(session):
    GoogleCalendarAPI("tok", session=session)
    headers = session.headers.update.call_args[0][0]
    assert headers["Authorization"] == "Bearer tok"


def test_events_url_quotes_ids():
    assert GoogleCalendarAPI.events_url("a@b.com", "x/y") == \
        f"{CALENDAR_API_BASE}/calendars/a%40b.com/events/x%2Fy"


def test_list_events_follows_pages(session):
    session.request.side_effect = [
        response({"items": [{"id": "a"}, {"id": "b"}],
                  "nextPageToken": "t"}),
        response({"items": [{"id": "c"}]}),
    ]
    api = GoogleCalendarAPI("tok", session=session)
    events = api.list_events("primary", 10, time_max="2026-04-14T00:00:00Z")
    assert [e["id"] for e in events] == ["a", "b", "c"]
    assert session.request.call_count == 2
    method, url = session.request.call_args[0]
    params = session.request.call_args[1]["params"]
    assert method == "GET"
    assert url == f"{CALENDAR_API_BASE}/calendars/primary/events"
    assert params["pageToken"] == "t"
    assert params["maxResults"] == 8
    assert params["singleEvents"] == "true"
    assert params["orderBy"] == "startTime"
    assert params["timeMax"] == "2026-04-14T00:00:00Z"


def test_list_events_stops_at_max_results(session):
    session.request.return_value = response(
        {"items": [{"id": "a"}, {"id": "b"}, {"id": "c"}],
         "nextPageToken": "t"})
    api = GoogleCalendarAPI("tok", session=session)
    assert len(api.list_events("primary", 2)) == 2
    assert session.request.call_count == 1


def test_create_event_posts_body(session):
    session.request.return_value = response({"id": "new"})
    api = GoogleCalendarAPI("tok", session=session)
    assert api.create_event({"summary": "x"}, "work") == {"id": "new"}
    args, kwargs = session.request.call_args
    assert args == ("POST", f"{CALENDAR_API_BASE}/calendars/work/events")
    assert kwargs["json"] == {"summary": "x"}


def test_update_event_patches(session):
    session.request.return_value = response({"id": "abc"})
    api = GoogleCalendarAPI("tok", session=session)
    api.update_event("abc", {"summary": "y"})
    assert session.request.call_args[0] == (
        "PATCH", f"{CALENDAR_API_BASE}/calendars/primary/events/abc")


def test_error_status(session):
    session.request.return_value = response(status=403, text="forbidden")
    api = GoogleCalendarAPI("tok", session=session)
    with pytest.raises(ApiError) as exc_info:
        api.delete_event("abc")
    assert exc_info.value.status == 403
    assert str(exc_info.value) == "Failed to delete event: 403 forbidden"


def test_cancelled_before_request(session):
    token = CancelToken()
    token.cancel()
    api = GoogleCalendarAPI("tok", token, session=session)
    with pytest.raises(Aborted):
        api.list_calendars()
    session.request.assert_not_called()


def test_cancelled_during_request(session):
    token = CancelToken()

    def interrupted(*args, **kwargs):
        token.cancel()
        raise requests.ConnectionError("reset")

    session.request.side_effect = interrupted
    api = GoogleCalendarAPI("tok", token, session=session)
    with pytest.raises(Aborted):
        api.list_calendars()


def test_network_error_without_cancel(session):
    session.request.side_effect = requests.ConnectionError("reset")
    api = GoogleCalendarAPI("tok", session=session)
    with pytest.raises(requests.ConnectionError):
        api.list_calendars()
