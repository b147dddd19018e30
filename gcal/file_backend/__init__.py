from gcal.file_backend.ics_interface import ICSInterface  # noqa F401
from gcal.file_backend.ics_mapper import map_record  # noqa F401
