"""
Shared fixtures for the timeline tests.
"""

from datetime import time

import pytest

from apptimeline.domain.models import BreakPeriod, LayoutOptions, WorkingHours

from builders import TZ, monday_hours


@pytest.fixture
def options() -> LayoutOptions:
    return LayoutOptions(row_height_px=80, minimum_block_height_px=40, timezone=TZ)


@pytest.fixture
def working_hours() -> WorkingHours:
    return monday_hours()


@pytest.fixture
def lunch_hours() -> WorkingHours:
    return monday_hours(breaks=[BreakPeriod(start=time(12, 0), end=time(13, 0), label="Lunch")])
