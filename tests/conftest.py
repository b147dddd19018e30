"""Shared test fixtures."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from dateutil.tz import gettz

from gcal.gcal import GcalInterface
from gcal.printer import Printer

TZ_NAME = "America/New_York"
TZ = gettz(TZ_NAME)
# a Wednesday
NOW = datetime(2026, 1, 14, 9, 30, tzinfo=TZ)


@pytest.fixture(autouse=True)
def gcal_home(tmp_path, monkeypatch):
    """Keep config and tokens out of the real home directory."""
    monkeypatch.setenv("GCAL_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def api():
    return MagicMock()


@pytest.fixture
def connect(api):
    return MagicMock(return_value=api)


@pytest.fixture
def make_interface(connect):
    def make(**options):
        options.setdefault("calendar", "primary")
        options.setdefault("timezone", TZ_NAME)
        gi = GcalInterface(connect, Printer(use_color=False), **options)
        gi.now = NOW
        return gi
    return make
