"""
Per-hour working-hours shading of the timeline.
"""

from typing import List, Optional

from pendulum import Date, DateTime

from .current_time import is_same_local_day
from .models import (
    DaySchedule,
    LayoutOptions,
    TimeSlot,
    VisibleRange,
    WorkingHours,
    minutes_of_day,
)


def format_hour_label(hour: int, clock_format: str = "12h") -> str:
    """
    Label for an hour row.

    Example: 0 -> "12 AM", 9 -> "9 AM", 12 -> "12 PM", 15 -> "3 PM"
    (or "15:00" with the 24h clock).
    """
    if clock_format == "24h":
        return f"{hour:02d}:00"
    if hour == 0:
        return "12 AM"
    if hour == 12:
        return "12 PM"
    if hour < 12:
        return f"{hour} AM"
    return f"{hour - 12} PM"


class WorkingHoursShader:
    """
    Builds the time slots of a visible range.

    An hour is within working hours when its slot ``[h:00, h+1:00)`` overlaps
    the configured day and is not entirely covered by one break. A partially
    covered hour stays within working hours.
    """

    def __init__(self, options: LayoutOptions):
        self.options = options

    def shade(
        self,
        visible_range: VisibleRange,
        day: Date,
        working_hours: WorkingHours | None = None,
        now: DateTime | None = None,
    ) -> List[TimeSlot]:
        schedule = working_hours.get_schedule_for_day(day) if working_hours else None
        current_hour = self._current_hour(day, now)

        slots: List[TimeSlot] = []
        for hour in visible_range.hours():
            break_label = self._break_label(schedule, hour) if schedule else None
            within = (
                schedule is not None
                and self._overlaps_working_day(schedule, hour)
                and break_label is None
            )
            slots.append(
                TimeSlot(
                    hour=hour,
                    label=format_hour_label(hour, self.options.clock_format),
                    is_current_hour=hour == current_hour,
                    is_within_working_hours=within,
                    break_label=break_label,
                )
            )

        return slots

    def _current_hour(self, day: Date, now: DateTime | None) -> Optional[int]:
        if now is None or not is_same_local_day(now, day, self.options.timezone):
            return None
        return now.in_timezone(self.options.timezone).hour

    @staticmethod
    def _overlaps_working_day(schedule: DaySchedule, hour: int) -> bool:
        slot_start = hour * 60
        return schedule.start_minute < slot_start + 60 and slot_start < schedule.end_minute

    @staticmethod
    def _break_label(schedule: DaySchedule, hour: int) -> Optional[str]:
        """Label of the break that swallows the whole hour, if any."""
        slot_start = hour * 60
        for break_period in schedule.breaks:
            break_start = minutes_of_day(break_period.start)
            break_end = minutes_of_day(break_period.end)
            if break_start <= slot_start and slot_start + 60 <= break_end:
                return break_period.label
        return None
