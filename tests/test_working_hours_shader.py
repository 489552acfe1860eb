"""
Tests for working-hours shading of the hour slots.
"""

from datetime import time

import pytest

from apptimeline.domain.models import BreakPeriod, LayoutOptions, VisibleRange
from apptimeline.domain.working_hours_shader import WorkingHoursShader, format_hour_label

from builders import MONDAY, TZ, at, monday_hours

RANGE = VisibleRange(start_hour=8, end_hour=19)


def _working(slots):
    return [slot.hour for slot in slots if slot.is_within_working_hours]


class TestWorkingHoursShader:
    """Tests for WorkingHoursShader."""

    def test_one_slot_per_hour(self, options, working_hours):
        slots = WorkingHoursShader(options).shade(RANGE, MONDAY, working_hours)

        assert [slot.hour for slot in slots] == list(range(8, 19))

    def test_hours_inside_working_day(self, options, working_hours):
        slots = WorkingHoursShader(options).shade(RANGE, MONDAY, working_hours)

        assert _working(slots) == list(range(9, 18))

    def test_full_hour_break_is_not_working_time(self, options, lunch_hours):
        slots = WorkingHoursShader(options).shade(RANGE, MONDAY, lunch_hours)
        noon = next(slot for slot in slots if slot.hour == 12)

        assert 12 not in _working(slots)
        assert noon.break_label == "Lunch"
        assert all(slot.break_label is None for slot in slots if slot.hour != 12)

    def test_partial_break_keeps_hour_within_working_hours(self, options):
        working_hours = monday_hours(breaks=[BreakPeriod(start=time(12, 30), end=time(13, 0))])

        slots = WorkingHoursShader(options).shade(RANGE, MONDAY, working_hours)

        assert 12 in _working(slots)
        assert all(slot.break_label is None for slot in slots)

    def test_multi_hour_break(self, options):
        working_hours = monday_hours(breaks=[BreakPeriod(start=time(12, 0), end=time(14, 30), label="Errands")])

        slots = WorkingHoursShader(options).shade(RANGE, MONDAY, working_hours)

        assert _working(slots) == [9, 10, 11, 14, 15, 16, 17]
        assert [slot.hour for slot in slots if slot.break_label == "Errands"] == [12, 13]

    def test_half_hour_start_and_end_mark_partial_hours(self, options):
        """Hours 9 and 17 are only partly worked and still count as working."""
        working_hours = monday_hours(start=time(9, 30), end=time(17, 30))

        slots = WorkingHoursShader(options).shade(RANGE, MONDAY, working_hours)

        assert _working(slots) == list(range(9, 18))

    def test_disabled_day_has_no_working_hours(self, options):
        slots = WorkingHoursShader(options).shade(RANGE, MONDAY, monday_hours(enabled=False))

        assert _working(slots) == []

    def test_missing_config_has_no_working_hours(self, options):
        slots = WorkingHoursShader(options).shade(RANGE, MONDAY, None)

        assert len(slots) == 11
        assert _working(slots) == []

    def test_inconsistent_config_does_not_crash(self, options):
        working_hours = monday_hours(breaks=[BreakPeriod(start=time(7), end=time(8))])

        slots = WorkingHoursShader(options).shade(RANGE, MONDAY, working_hours)

        assert _working(slots) == []
        assert all(slot.break_label is None for slot in slots)

    def test_current_hour_is_flagged_on_today(self, options, working_hours):
        slots = WorkingHoursShader(options).shade(RANGE, MONDAY, working_hours, now=at("10:30"))

        assert [slot.hour for slot in slots if slot.is_current_hour] == [10]

    def test_current_hour_is_not_flagged_on_other_days(self, options, working_hours):
        now = at("10:30", day="2024-11-24")

        slots = WorkingHoursShader(options).shade(RANGE, MONDAY, working_hours, now=now)

        assert not any(slot.is_current_hour for slot in slots)

    def test_labels_follow_clock_format(self, working_hours):
        options = LayoutOptions(clock_format="24h", timezone=TZ)

        slots = WorkingHoursShader(options).shade(RANGE, MONDAY, working_hours)

        assert slots[0].label == "08:00"
        assert slots[-1].label == "18:00"


@pytest.mark.parametrize(
    "hour, expected",
    [(0, "12 AM"), (9, "9 AM"), (11, "11 AM"), (12, "12 PM"), (15, "3 PM"), (23, "11 PM")],
)
def test_format_hour_label_12h(hour, expected):
    assert format_hour_label(hour) == expected


def test_format_hour_label_24h():
    assert format_hour_label(7, "24h") == "07:00"
