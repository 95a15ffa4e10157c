"""Shared fixtures for checklist scheduler tests."""

from collections.abc import Iterator
from zoneinfo import ZoneInfo

import pytest

from checklist_scheduler.utils import dt_utils


@pytest.fixture(autouse=True)
def reset_default_timezone() -> Iterator[None]:
    """Run every test on a UTC local wall clock unless it opts into another."""
    original = dt_utils.get_default_timezone()
    dt_utils.set_default_timezone(ZoneInfo("UTC"))
    yield
    dt_utils.set_default_timezone(original)


@pytest.fixture
def london_tz() -> Iterator[ZoneInfo]:
    """Switch the local wall clock to Europe/London (DST-observing)."""
    tz = ZoneInfo("Europe/London")
    dt_utils.set_default_timezone(tz)
    yield tz
