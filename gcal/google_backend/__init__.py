from gcal.google_backend.api_client import GoogleCalendarAPI, ApiError  # noqa F401
from gcal.google_backend.auth import OAuthTokenProvider, CredentialsNotFound  # noqa F401
