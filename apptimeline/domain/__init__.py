"""
Domain layer - Pure layout logic without I/O or clock access.
"""

from .current_time import CurrentTimeIndicator, scroll_offset
from .models import (
    Appointment,
    AppointmentStatus,
    BreakPeriod,
    CurrentTimeMarker,
    DaySchedule,
    LayoutBlock,
    LayoutOptions,
    OverlapGroup,
    TimelineLayout,
    TimeSlot,
    VisibleRange,
    WorkingHours,
)
from .overlap_grouper import OverlapGrouper
from .position_calculator import PositionCalculator
from .time_range_resolver import TimeRangeResolver
from .timeline_engine import TimelineEngine, build_timeline
from .working_hours_shader import WorkingHoursShader

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "BreakPeriod",
    "CurrentTimeIndicator",
    "CurrentTimeMarker",
    "DaySchedule",
    "LayoutBlock",
    "LayoutOptions",
    "OverlapGroup",
    "OverlapGrouper",
    "PositionCalculator",
    "TimeRangeResolver",
    "TimelineEngine",
    "TimelineLayout",
    "TimeSlot",
    "VisibleRange",
    "WorkingHours",
    "WorkingHoursShader",
    "build_timeline",
    "scroll_offset",
]
