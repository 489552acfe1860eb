"""
Tests for the visible range resolution.
"""

from datetime import time

import pendulum
import pytest

from apptimeline.domain.models import DaySchedule, LayoutOptions, VisibleRange, WorkingHours
from apptimeline.domain.time_range_resolver import TimeRangeResolver

from builders import MONDAY, TZ, appointment, monday_hours


class TestTimeRangeResolver:
    """Tests for TimeRangeResolver."""

    def test_working_hours_are_padded(self, options, working_hours):
        """09:00-18:00 becomes 08:00-19:00."""
        resolver = TimeRangeResolver(options)

        visible_range = resolver.resolve(MONDAY, [], working_hours)

        assert visible_range == VisibleRange(start_hour=8, end_hour=19)

    def test_appointments_inside_range_do_not_change_it(self, options, working_hours):
        resolver = TimeRangeResolver(options)
        appointments = [appointment("a", "09:00", 60), appointment("b", "10:30", 60)]

        assert resolver.resolve(MONDAY, appointments, working_hours) == VisibleRange(8, 19)

    def test_missing_config_uses_padded_default_window(self, options):
        resolver = TimeRangeResolver(options)

        assert resolver.resolve(MONDAY, [], None) == VisibleRange(8, 21)

    def test_disabled_day_uses_padded_default_window(self, options):
        resolver = TimeRangeResolver(options)

        visible_range = resolver.resolve(MONDAY, [], monday_hours(enabled=False))

        assert visible_range == VisibleRange(8, 21)

    def test_inconsistent_day_uses_padded_default_window(self, options):
        resolver = TimeRangeResolver(options)

        visible_range = resolver.resolve(MONDAY, [], monday_hours(start=time(18), end=time(9)))

        assert visible_range == VisibleRange(8, 21)

    def test_end_of_working_day_is_rounded_up(self, options):
        resolver = TimeRangeResolver(options)

        visible_range = resolver.resolve(MONDAY, [], monday_hours(start=time(9, 30), end=time(17, 30)))

        assert visible_range == VisibleRange(8, 19)

    def test_early_appointment_widens_start(self, options, working_hours):
        resolver = TimeRangeResolver(options)

        visible_range = resolver.resolve(MONDAY, [appointment("early", "06:30", 30)], working_hours)

        assert visible_range == VisibleRange(6, 19)

    def test_late_appointment_end_is_rounded_up(self, options, working_hours):
        """19:30 + 45 min ends at 20:15, so the range ends at 21:00."""
        resolver = TimeRangeResolver(options)

        visible_range = resolver.resolve(MONDAY, [appointment("late", "19:30", 45)], working_hours)

        assert visible_range == VisibleRange(8, 21)

    def test_range_is_clamped_to_ceiling_and_floor(self, options, working_hours):
        """The bottom edge may sit at 24 so that the 23:00 row is shown."""
        resolver = TimeRangeResolver(options)
        appointments = [appointment("night", "23:00", 45), appointment("dawn", "00:15", 30)]

        assert resolver.resolve(MONDAY, appointments, working_hours) == VisibleRange(0, 24)

    def test_custom_floor_and_ceiling(self, working_hours):
        options = LayoutOptions(floor_hour=6, ceiling_hour=22, timezone=TZ)
        resolver = TimeRangeResolver(options)
        appointments = [appointment("early", "05:00", 30), appointment("late", "22:30", 60)]

        assert resolver.resolve(MONDAY, appointments, working_hours) == VisibleRange(6, 23)

    def test_padding_is_configurable(self, working_hours):
        options = LayoutOptions(padding_hours=0, timezone=TZ)

        assert TimeRangeResolver(options).resolve(MONDAY, [], working_hours) == VisibleRange(9, 18)

    def test_result_is_independent_of_order(self, options, working_hours):
        resolver = TimeRangeResolver(options)
        appointments = [
            appointment("a", "07:15", 30),
            appointment("b", "12:00", 60),
            appointment("c", "20:00", 90),
        ]

        forward = resolver.resolve(MONDAY, appointments, working_hours)
        backward = resolver.resolve(MONDAY, list(reversed(appointments)), working_hours)

        assert forward == backward == VisibleRange(7, 22)

    def test_adding_appointments_never_shrinks_range(self, options, working_hours):
        resolver = TimeRangeResolver(options)
        appointments = [appointment("a", "10:00", 60)]
        before = resolver.resolve(MONDAY, appointments, working_hours)

        for extra in (appointment("x", "05:45", 30), appointment("y", "21:10", 20), appointment("z", "12:00", 15)):
            appointments = appointments + [extra]
            after = resolver.resolve(MONDAY, appointments, working_hours)

            assert after.start_hour <= before.start_hour
            assert after.end_hour >= before.end_hour
            before = after

    def test_other_weekday_config_is_ignored(self, options):
        working_hours = WorkingHours(
            days={"tuesday": DaySchedule(enabled=True, start=time(6), end=time(12))}
        )

        assert TimeRangeResolver(options).resolve(MONDAY, [], working_hours) == VisibleRange(8, 21)

    @pytest.mark.parametrize("day", ["2024-10-27", "2024-03-31"])
    def test_daylight_saving_day_uses_wall_clock_hours(self, options, day):
        """07:30 is hour 7 even though 6.5 or 8.5 hours have passed since midnight."""
        sunday_hours = WorkingHours(days={"sunday": DaySchedule(enabled=True, start=time(9), end=time(18))})
        resolver = TimeRangeResolver(options)

        visible_range = resolver.resolve(
            pendulum.parse(day).date(),
            [appointment("early", "07:30", 30, day=day)],
            sunday_hours,
        )

        assert visible_range == VisibleRange(7, 19)
