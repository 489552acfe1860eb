"""
Single entry point of the layout engine.

This is the heart of the application - a pure function of appointments,
working hours, the selected date and a current-time reading. No I/O, no
clock reads, no state kept between calls.
"""

import dataclasses
import logging
from datetime import date, datetime
from typing import Any, Iterable, Mapping

import pendulum
from pendulum import Date, DateTime

from .current_time import CurrentTimeIndicator, is_same_local_day
from .models import LayoutOptions, TimelineLayout, WorkingHours
from .overlap_grouper import OverlapGrouper
from .parsing import AppointmentInput, coerce_appointments, parse_working_hours
from .position_calculator import PositionCalculator
from .time_range_resolver import TimeRangeResolver
from .working_hours_shader import WorkingHoursShader

logger = logging.getLogger(__name__)


class TimelineEngine:
    """
    Builds a complete timeline layout for one day.

    Pipeline:
    1. Coerce input records, skipping malformed ones
    2. Resolve the visible range (TimeRangeResolver)
    3. Cluster and assign columns (OverlapGrouper)
    4. Convert to pixel geometry (PositionCalculator)
    5. Shade hour slots (WorkingHoursShader) and place the "now" marker
       (CurrentTimeIndicator) against the same range
    """

    def __init__(self, options: LayoutOptions | None = None):
        self.options = options or LayoutOptions()
        self.range_resolver = TimeRangeResolver(self.options)
        self.grouper = OverlapGrouper()
        self.position_calculator = PositionCalculator(self.options)
        self.shader = WorkingHoursShader(self.options)
        self.indicator = CurrentTimeIndicator(self.options)

    def build(
        self,
        appointments: Iterable[AppointmentInput],
        selected_date: date,
        now: datetime,
        working_hours: WorkingHours | Mapping[str, Any] | None = None,
    ) -> TimelineLayout:
        """
        Lay out the appointments of ``selected_date``.

        Args:
            appointments: Appointment objects or raw records of that day
            selected_date: The displayed calendar date
            now: Current instant, read by the caller
            working_hours: Domain working hours or the raw weekday mapping

        Returns:
            A freshly built TimelineLayout
        """
        day = self._to_local_date(selected_date)
        now = self._to_instant(now)
        hours = self._to_working_hours(working_hours)

        usable, skipped = coerce_appointments(appointments, self.options.timezone)

        if hours is not None and hours.is_inconsistent_on(day):
            logger.warning("Working hours for %s are inconsistent, treating the day as disabled", day)

        visible_range = self.range_resolver.resolve(day, usable, hours)
        groups = self.grouper.group(usable)
        blocks = self.position_calculator.calculate(
            (member for group in groups for member in group.members),
            visible_range,
            day,
        )
        slots = self.shader.shade(visible_range, day, hours, now)
        marker = self.indicator.marker(now, day, visible_range)

        return TimelineLayout(
            selected_date=day,
            visible_range=visible_range,
            time_slots=tuple(slots),
            layout_blocks=tuple(blocks),
            groups=tuple(groups),
            current_time_marker=marker,
            skipped_appointment_ids=tuple(skipped),
        )

    def tick(self, layout: TimelineLayout, now: datetime) -> TimelineLayout:
        """
        Re-evaluate the time-dependent parts of a layout for a new ``now``.

        Returns a new layout; blocks and shading are carried over as they do
        not depend on the clock.
        """
        now = self._to_instant(now)
        marker = self.indicator.marker(now, layout.selected_date, layout.visible_range)

        current_hour = None
        if is_same_local_day(now, layout.selected_date, self.options.timezone):
            current_hour = now.in_timezone(self.options.timezone).hour

        slots = tuple(
            dataclasses.replace(slot, is_current_hour=slot.hour == current_hour)
            for slot in layout.time_slots
        )
        return dataclasses.replace(layout, time_slots=slots, current_time_marker=marker)

    def _to_local_date(self, value: date) -> Date:
        if isinstance(value, datetime):
            value = self._to_instant(value).in_timezone(self.options.timezone)
        return pendulum.date(value.year, value.month, value.day)

    def _to_instant(self, value: datetime) -> DateTime:
        if isinstance(value, DateTime):
            return value
        return pendulum.instance(value, tz=self.options.timezone)

    @staticmethod
    def _to_working_hours(value: WorkingHours | Mapping[str, Any] | None) -> WorkingHours | None:
        if value is None or isinstance(value, WorkingHours):
            return value
        return parse_working_hours(value)


def build_timeline(
    appointments: Iterable[AppointmentInput],
    selected_date: date,
    now: datetime,
    working_hours: WorkingHours | Mapping[str, Any] | None = None,
    options: LayoutOptions | None = None,
) -> TimelineLayout:
    """Shortcut for ``TimelineEngine(options).build(...)``."""
    return TimelineEngine(options).build(
        appointments,
        selected_date=selected_date,
        now=now,
        working_hours=working_hours,
    )
