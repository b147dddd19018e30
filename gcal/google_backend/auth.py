#!/usr/bin/env python

# The OAuthTokenProvider class hands out bearer tokens for the
# Google Calendar API. Read-only and read-write access use separate
# token files so that listing never asks for write permission.

# Intended usage:

# auth = OAuthTokenProvider(credentials_file)
# token = auth.get_access_token(user, write_access=True)

# The first call for a user opens a browser for consent; later calls
# reuse (and if needed refresh) the token stored in the user directory.

import logging
import os

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from gcal.config import ensure_user_dir

logger = logging.getLogger('gcal')

CALENDAR_SCOPE_READ = 'https://www.googleapis.com/auth/calendar.readonly'
CALENDAR_SCOPE_WRITE = 'https://www.googleapis.com/auth/calendar'


class CredentialsNotFound(Exception):
    def __init__(self, path):
        super().__init__(
            f'Credentials file not found: {path}\n'
            'Download an OAuth client (Desktop app) from the Google Cloud '
            'Console and save it there, or pass --credentials')


class OAuthTokenProvider:
    def __init__(self, credentials_file, printer=None):
        r"""Initialize OAuthTokenProvider

        Parameters
        ----------
        credentials_file : path to the OAuth client secrets json
        printer : Printer for progress messages (optional)
        """
        self.credentials_file = credentials_file
        self.printer = printer

    def get_access_token(self, user, write_access=False,
                         force_refresh=False):
        r"""Return a bearer token for user

        Parameters
        ----------
        user : normalized user name
        write_access : boolean, request the read-write scope
        force_refresh : boolean, discard the cached token first

        Returns
        -------
        string
        """
        if not os.path.isfile(self.credentials_file):
            raise CredentialsNotFound(self.credentials_file)
        paths = ensure_user_dir(user)
        scopes = [CALENDAR_SCOPE_WRITE if write_access
                  else CALENDAR_SCOPE_READ]
        token_file = (paths.token_write_file if write_access
                      else paths.token_file)

        if force_refresh and os.path.isfile(token_file):
            os.unlink(token_file)
            logger.info('Discarded cached token %s', token_file)

        creds = None
        if os.path.isfile(token_file):
            creds = Credentials.from_authorized_user_file(token_file, scopes)
        if not creds or not creds.valid:
            creds = self.refresh_or_login(creds, scopes)
            with open(token_file, 'w') as fp:
                fp.write(creds.to_json())
        return creds.token

    def refresh_or_login(self, creds, scopes):
        if creds and creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
                logger.info('Access token refreshed')
                return creds
            except RefreshError as exc:
                logger.info('Token refresh failed (%s), logging in again',
                            exc)
        if self.printer:
            self.printer.msg('Launching browser for authentication...\n')
        flow = InstalledAppFlow.from_client_secrets_file(
            self.credentials_file, scopes)
        return flow.run_local_server(port=0)
