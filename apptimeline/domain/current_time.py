"""
The live "now" marker of the timeline.

The marker has two states, hidden and visible. It is visible only while the
displayed date is today in the viewer's timezone and "now" lies inside the
visible range. The clock is never read here; callers pass ``now`` in.
"""

from pendulum import Date, DateTime

from .models import CurrentTimeMarker, LayoutOptions, VisibleRange

DEFAULT_SCROLL_LEAD_PX = 200.0


def is_same_local_day(now: DateTime, day: Date, timezone: str) -> bool:
    """Calendar-date equality of ``now`` and ``day`` in ``timezone``."""
    return now.in_timezone(timezone).date() == day


class CurrentTimeIndicator:
    """Computes the current-time marker for a day and visible range."""

    def __init__(self, options: LayoutOptions):
        self.options = options

    def marker(self, now: DateTime, day: Date, visible_range: VisibleRange) -> CurrentTimeMarker:
        if not is_same_local_day(now, day, self.options.timezone):
            return CurrentTimeMarker(offset_from_range_start=0.0, visible=False)

        minutes = visible_range.minutes_from_start(now, day, self.options.timezone)
        offset = minutes / 60 * self.options.row_height_px
        inside = 0 <= offset <= visible_range.height(self.options.row_height_px)

        return CurrentTimeMarker(offset_from_range_start=offset, visible=inside)


def scroll_offset(marker: CurrentTimeMarker, lead_px: float = DEFAULT_SCROLL_LEAD_PX) -> float:
    """
    Initial scroll position that keeps the marker ``lead_px`` below the top
    of the viewport. Zero while the marker is hidden.
    """
    if not marker.visible:
        return 0.0
    return max(0.0, marker.offset_from_range_start - lead_px)
