"""
Resolution of the visible hour range for a day.
"""

import logging
import math
from typing import Iterable, Tuple

from pendulum import Date

from .models import (
    Appointment,
    LayoutOptions,
    VisibleRange,
    WorkingHours,
    minutes_of_day,
    wall_clock_minutes,
)

logger = logging.getLogger(__name__)


class TimeRangeResolver:
    """
    Derives the visible hour range from working hours and appointments.

    Algorithm:
    1. Take the working hours of the weekday, or the default window when the
       day is disabled, absent or inconsistent
    2. Pad by ``padding_hours`` on each side, clamped to floor/ceiling
    3. Widen to include every appointment's start hour and (rounded up) end hour
    4. Fall back to the padded default window if the range came out inverted

    The result only depends on the set of appointments, not their order.
    """

    def __init__(self, options: LayoutOptions):
        self.options = options

    def resolve(
        self,
        day: Date,
        appointments: Iterable[Appointment],
        working_hours: WorkingHours | None = None,
    ) -> VisibleRange:
        start_hour, end_hour = self._padded(*self._base_window(day, working_hours))

        for appointment in appointments:
            first_hour, last_hour = self._appointment_hours(appointment, day)
            if first_hour < start_hour:
                start_hour = self.options.clamp_hour(first_hour)
            if last_hour > end_hour:
                end_hour = self.options.clamp_end_hour(last_hour)

        if end_hour < start_hour:
            logger.debug("Inverted range %s-%s on %s, using default window", start_hour, end_hour, day)
            start_hour, end_hour = self._padded(
                self.options.default_start_hour,
                self.options.default_end_hour,
            )

        logger.debug("Visible range for %s: %s-%s", day, start_hour, end_hour)
        return VisibleRange(start_hour=start_hour, end_hour=end_hour)

    def _base_window(self, day: Date, working_hours: WorkingHours | None) -> Tuple[int, int]:
        """Working-hours window in whole hours, end rounded up."""
        schedule = working_hours.get_schedule_for_day(day) if working_hours else None
        if schedule is None:
            return self.options.default_start_hour, self.options.default_end_hour

        return schedule.start.hour, math.ceil(minutes_of_day(schedule.end) / 60)

    def _padded(self, start_hour: int, end_hour: int) -> Tuple[int, int]:
        padding = self.options.padding_hours
        return (
            self.options.clamp_hour(start_hour - padding),
            self.options.clamp_end_hour(end_hour + padding),
        )

    def _appointment_hours(self, appointment: Appointment, day: Date) -> Tuple[int, int]:
        """Wall-clock start hour (floored) and end hour (rounded up) on ``day``."""
        timezone = self.options.timezone
        start_minutes = wall_clock_minutes(appointment.scheduled_at, day, timezone)
        end_minutes = max(start_minutes, wall_clock_minutes(appointment.end, day, timezone))
        return math.floor(start_minutes / 60), math.ceil(end_minutes / 60)
