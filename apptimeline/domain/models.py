"""
Domain models for the appointment timeline.

Everything here is an immutable snapshot: a layout pass builds fresh
instances and never mutates them afterwards.
"""

from dataclasses import dataclass, field
from datetime import time
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

import pendulum
from pendulum import Date, DateTime


WEEKDAY_NAMES = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

CLOCK_FORMATS = ("12h", "24h")


def weekday_name(day: Date) -> str:
    """Return the lowercase weekday name (Sunday-first table) for a date."""
    return WEEKDAY_NAMES[day.isoweekday() % 7]


def start_of_local_day(day: Date, timezone: str) -> DateTime:
    """Local midnight of ``day`` in ``timezone``."""
    return pendulum.datetime(day.year, day.month, day.day, tz=timezone)


def wall_clock_minutes(instant: DateTime, day: Date, timezone: str) -> float:
    """
    Local wall-clock position of ``instant`` in minutes, counted from the
    midnight of ``day``. Hours skipped or repeated by a daylight-saving change
    do not shift it.
    """
    local = instant.in_timezone(timezone)
    days = local.date().toordinal() - day.toordinal()
    return (
        days * 1440
        + local.hour * 60
        + local.minute
        + (local.second + local.microsecond / 1_000_000) / 60
    )


def minutes_of_day(value: time) -> int:
    """Minutes since midnight for a time-of-day."""
    return value.hour * 60 + value.minute


class AppointmentStatus(str, Enum):
    """Lifecycle status of a booked appointment."""
    CONFIRMED = "confirmed"
    PENDING = "pending"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must not be after end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Start time {self.start} must not be after end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another. Touching ranges do not overlap."""
        return self.start < other.end and self.end > other.start

    def intersect(self, other: "TimeRange") -> "TimeRange | None":
        """
        Calculate the intersection of two time ranges.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        return TimeRange(start=max(self.start, other.start), end=min(self.end, other.end))

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class Appointment:
    """
    A booked appointment as delivered by the data layer.

    ``client_id`` and ``service_ids`` are opaque display references; the
    layout never looks at them.
    """
    id: str
    scheduled_at: DateTime
    duration_minutes: int
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    client_id: Optional[str] = None
    service_ids: Tuple[str, ...] = ()

    @property
    def end(self) -> DateTime:
        return self.scheduled_at.add(minutes=self.duration_minutes)

    def time_range(self) -> TimeRange:
        return TimeRange(start=self.scheduled_at, end=max(self.scheduled_at, self.end))

    def local_start(self, timezone: str) -> DateTime:
        return self.scheduled_at.in_timezone(timezone)


@dataclass(frozen=True)
class BreakPeriod:
    """A break inside a working day, e.g. lunch."""
    start: time
    end: time
    label: str = "Break"


@dataclass(frozen=True)
class DaySchedule:
    """Working hours configured for one weekday."""
    enabled: bool
    start: time
    end: time
    breaks: Tuple[BreakPeriod, ...] = ()

    @property
    def start_minute(self) -> int:
        return minutes_of_day(self.start)

    @property
    def end_minute(self) -> int:
        return minutes_of_day(self.end)

    def is_consistent(self) -> bool:
        """
        Check the invariants: start before end, every break non-empty and
        inside the day, breaks not overlapping each other.
        """
        if self.start >= self.end:
            return False

        previous_end: time | None = None
        for break_period in sorted(self.breaks, key=lambda b: (b.start, b.end)):
            if break_period.start >= break_period.end:
                return False
            if break_period.start < self.start or break_period.end > self.end:
                return False
            if previous_end is not None and break_period.start < previous_end:
                return False
            previous_end = break_period.end

        return True


@dataclass(frozen=True)
class WorkingHours:
    """
    Per-weekday working hours keyed by lowercase weekday name.
    """
    days: Mapping[str, DaySchedule] = field(default_factory=dict)

    def get_raw_schedule(self, day: Date) -> DaySchedule | None:
        """Return the configured entry for the weekday of ``day``, valid or not."""
        return self.days.get(weekday_name(day))

    def get_schedule_for_day(self, day: Date) -> DaySchedule | None:
        """
        Get the usable schedule for a specific day.
        Returns None if the day is absent, disabled or inconsistent.
        """
        schedule = self.get_raw_schedule(day)
        if schedule is None or not schedule.enabled:
            return None
        if not schedule.is_consistent():
            return None
        return schedule

    def is_inconsistent_on(self, day: Date) -> bool:
        """True if the day is enabled but its configuration breaks the invariants."""
        schedule = self.get_raw_schedule(day)
        return schedule is not None and schedule.enabled and not schedule.is_consistent()


@dataclass(frozen=True)
class LayoutOptions:
    """
    Tunables of a layout pass.

    ``row_height_px`` is the height of one hour; ``minimum_block_height_px``
    keeps very short appointments tappable. Hour rows are clamped to
    ``[floor_hour, ceiling_hour]``; the bottom edge of the range may sit one
    hour past ``ceiling_hour`` so that the last row can be shown.
    """
    row_height_px: float = 80.0
    minimum_block_height_px: float = 40.0
    floor_hour: int = 0
    ceiling_hour: int = 23
    padding_hours: int = 1
    default_start_hour: int = 9
    default_end_hour: int = 20
    timezone: str = "Europe/Berlin"
    clock_format: str = "12h"

    def __post_init__(self):
        if self.row_height_px <= 0:
            raise ValueError(f"row_height_px must be positive, got {self.row_height_px}")
        if self.minimum_block_height_px < 0:
            raise ValueError(
                f"minimum_block_height_px must not be negative, got {self.minimum_block_height_px}"
            )
        if not 0 <= self.floor_hour <= self.ceiling_hour <= 23:
            raise ValueError(
                f"Expected 0 <= floor_hour <= ceiling_hour <= 23, "
                f"got {self.floor_hour} and {self.ceiling_hour}"
            )
        if not 0 <= self.default_start_hour <= self.default_end_hour <= 23:
            raise ValueError(
                f"Expected 0 <= default_start_hour <= default_end_hour <= 23, "
                f"got {self.default_start_hour} and {self.default_end_hour}"
            )
        if self.padding_hours < 0:
            raise ValueError(f"padding_hours must not be negative, got {self.padding_hours}")
        if self.clock_format not in CLOCK_FORMATS:
            raise ValueError(f"clock_format must be one of {CLOCK_FORMATS}, got {self.clock_format!r}")

    def clamp_hour(self, hour: int) -> int:
        return min(max(hour, self.floor_hour), self.ceiling_hour)

    def clamp_end_hour(self, hour: int) -> int:
        """Clamp the exclusive bottom edge of a range."""
        return min(max(hour, self.floor_hour), self.ceiling_hour + 1)


@dataclass(frozen=True)
class VisibleRange:
    """
    The hour span shown for a day. ``end_hour`` is the bottom edge of the
    timeline, so the rendered rows are ``start_hour <= h < end_hour``. An
    ``end_hour`` of 24 shows the 23:00 row.
    """
    start_hour: int
    end_hour: int

    def __post_init__(self):
        if not 0 <= self.start_hour <= self.end_hour <= 24:
            raise ValueError(
                f"Expected 0 <= start_hour <= end_hour <= 24, "
                f"got {self.start_hour} and {self.end_hour}"
            )

    def hours(self) -> Iterator[int]:
        return iter(range(self.start_hour, self.end_hour))

    def height(self, row_height_px: float) -> float:
        return (self.end_hour - self.start_hour) * row_height_px

    def minutes_from_start(self, instant: DateTime, day: Date, timezone: str) -> float:
        """Signed wall-clock minutes from the top of the range to ``instant``."""
        return wall_clock_minutes(instant, day, timezone) - self.start_hour * 60


@dataclass(frozen=True)
class ColumnAssignment:
    """Column placement of one appointment inside its overlap group."""
    appointment: Appointment
    column: int
    column_count: int
    group_index: int


@dataclass(frozen=True)
class OverlapGroup:
    """A maximal cluster of transitively overlapping appointments."""
    index: int
    members: Tuple[ColumnAssignment, ...]
    column_count: int

    def appointment_ids(self) -> Tuple[str, ...]:
        return tuple(member.appointment.id for member in self.members)


@dataclass(frozen=True)
class LayoutBlock:
    """Geometry of one appointment on the timeline."""
    appointment_id: str
    top: float
    height: float
    left_fraction: float
    width_fraction: float
    column: int = 0
    column_count: int = 1
    z_index: int = 10
    status: AppointmentStatus = AppointmentStatus.CONFIRMED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "appointmentId": self.appointment_id,
            "top": self.top,
            "height": self.height,
            "leftFraction": self.left_fraction,
            "widthFraction": self.width_fraction,
            "column": self.column,
            "columnCount": self.column_count,
            "zIndex": self.z_index,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class TimeSlot:
    """One hour row of the timeline."""
    hour: int
    label: str
    is_current_hour: bool
    is_within_working_hours: bool
    break_label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hour": self.hour,
            "label": self.label,
            "isCurrentHour": self.is_current_hour,
            "isWithinWorkingHours": self.is_within_working_hours,
            "breakLabel": self.break_label,
        }


@dataclass(frozen=True)
class CurrentTimeMarker:
    """Vertical position of "now" relative to the top of the visible range."""
    offset_from_range_start: float
    visible: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "offsetFromRangeStart": self.offset_from_range_start,
            "visible": self.visible,
        }


@dataclass(frozen=True)
class TimelineLayout:
    """
    Complete output of one layout pass, ready for a renderer.

    ``layout_blocks`` has no guaranteed order; join on ``appointment_id``.
    """
    selected_date: Date
    visible_range: VisibleRange
    time_slots: Tuple[TimeSlot, ...]
    layout_blocks: Tuple[LayoutBlock, ...]
    groups: Tuple[OverlapGroup, ...]
    current_time_marker: CurrentTimeMarker
    skipped_appointment_ids: Tuple[str, ...] = ()

    def block_for(self, appointment_id: str) -> LayoutBlock | None:
        for block in self.layout_blocks:
            if block.appointment_id == appointment_id:
                return block
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selectedDate": self.selected_date.isoformat(),
            "visibleRange": {
                "startHour": self.visible_range.start_hour,
                "endHour": self.visible_range.end_hour,
            },
            "timeSlots": [slot.to_dict() for slot in self.time_slots],
            "layoutBlocks": [block.to_dict() for block in self.layout_blocks],
            "currentTimeMarker": self.current_time_marker.to_dict(),
            "skippedAppointmentIds": list(self.skipped_appointment_ids),
        }
