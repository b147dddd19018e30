#!/usr/bin/env python

# The GoogleCalendarAPI class exposes the Calendar v3 REST calls the
# command line needs: list calendars, list events, and create, update
# (patch) and delete a single event.

# It is initialized with a bearer token and a CancelToken:

# api = GoogleCalendarAPI(token, cancel_token)

# Every request checks the cancel token before and after the call.
# Non-2xx responses raise ApiError carrying the status and body text.
# Nothing is retried. That is left to the user.

import logging
from datetime import datetime, timezone
from urllib.parse import quote

import requests

from gcal.utils import Aborted, CancelToken

logger = logging.getLogger('gcal')

CALENDAR_API_BASE = 'https://www.googleapis.com/calendar/v3'
PAGE_SIZE = 250


class ApiError(Exception):
    def __init__(self, action, status, body):
        self.action = action
        self.status = status
        self.body = body
        super().__init__(f'Failed to {action}: {status} {body}')


class GoogleCalendarAPI:

    def __init__(self, access_token, cancel_token=None, session=None,
                 timeout=30):
        r"""Initialize GoogleCalendarAPI

        Parameters
        ----------
        access_token : OAuth bearer token
        cancel_token : CancelToken shared with the SIGINT handler
        session : requests.Session (a new one if None)
        timeout : seconds per request
        """
        self.cancel_token = cancel_token or CancelToken()
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {access_token}',
            'Content-Type': 'application/json'})
        self.timeout = timeout

    @staticmethod
    def events_url(calendar_id, event_id=None):
        url = f'{CALENDAR_API_BASE}/calendars/{quote(calendar_id, safe="")}'
        url += '/events'
        if event_id:
            url += '/' + quote(event_id, safe='')
        return url

    def request(self, action, method, url, **kwargs):
        r"""Perform one HTTP request

        Parameters
        ----------
        action : description used in error messages ("list events")
        method : HTTP verb
        url : string

        Returns
        -------
        requests.Response
        """
        self.cancel_token.raise_if_cancelled()
        logger.debug('%s %s', method, url)
        try:
            res = self.session.request(method, url, timeout=self.timeout,
                                       **kwargs)
        except requests.RequestException:
            if self.cancel_token.cancelled:
                raise Aborted()
            raise
        self.cancel_token.raise_if_cancelled()
        if not res.ok:
            raise ApiError(action, res.status_code, res.text or res.reason)
        return res

    def list_calendars(self):
        res = self.request('list calendars', 'GET',
                           f'{CALENDAR_API_BASE}/users/me/calendarList')
        return res.json().get('items', [])

    def list_events(self, calendar_id='primary', max_results=10,
                    time_min=None, time_max=None):
        r"""List upcoming events, recurring events expanded

        Parameters
        ----------
        calendar_id : string
        max_results : int
        time_min : RFC3339 string (defaults to now)
        time_max : RFC3339 string or None

        Returns
        -------
        list of event dicts ordered by start time
        """
        params = {
            'singleEvents': 'true',
            'orderBy': 'startTime',
            'timeMin': time_min or _utc_now(),
        }
        if time_max:
            params['timeMax'] = time_max
        events = []
        while len(events) < max_results:
            params['maxResults'] = min(max_results - len(events), PAGE_SIZE)
            data = self.request('list events', 'GET',
                                self.events_url(calendar_id),
                                params=params).json()
            events += data.get('items', [])
            if not data.get('nextPageToken'):
                break
            params['pageToken'] = data['nextPageToken']
        return events[:max_results]

    def create_event(self, event, calendar_id='primary'):
        res = self.request('create event', 'POST',
                           self.events_url(calendar_id), json=event)
        return res.json()

    def update_event(self, event_id, body, calendar_id='primary'):
        res = self.request('update event', 'PATCH',
                           self.events_url(calendar_id, event_id), json=body)
        return res.json()

    def delete_event(self, event_id, calendar_id='primary'):
        self.request('delete event', 'DELETE',
                     self.events_url(calendar_id, event_id))


def _utc_now():
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
