__program__ = 'gcal'
__version__ = 'v1.0.0'
__author__ = 'The gcal authors'
from gcal.gcal import GcalInterface  # noqa F401
from gcal.google_backend import GoogleCalendarAPI  # noqa F401
from gcal.file_backend.ics_interface import ICSInterface  # noqa F401
