"""
Pixel geometry for appointments on the timeline.
"""

from typing import Iterable, List

from pendulum import Date, DateTime

from .models import (
    Appointment,
    ColumnAssignment,
    LayoutBlock,
    LayoutOptions,
    VisibleRange,
)

BASE_Z_INDEX = 10


class PositionCalculator:
    """
    Converts column assignments into layout blocks.

    Formulas (all floating point, no rounding):
        top    = wall-clock minutes from range start / 60 * row height, at least 0
        height = max(minimum block height, duration / 60 * row height)
        width  = 1 / column count
        left   = column * width
    """

    def __init__(self, options: LayoutOptions):
        self.options = options

    def calculate(
        self,
        assignments: Iterable[ColumnAssignment],
        visible_range: VisibleRange,
        day: Date,
    ) -> List[LayoutBlock]:
        return [self.position_for(assignment, visible_range, day) for assignment in assignments]

    def position_for(
        self,
        assignment: ColumnAssignment,
        visible_range: VisibleRange,
        day: Date,
    ) -> LayoutBlock:
        appointment = assignment.appointment
        width_fraction = 1 / assignment.column_count

        return LayoutBlock(
            appointment_id=appointment.id,
            top=self.top_for(appointment.scheduled_at, visible_range, day),
            height=self.height_for(appointment),
            left_fraction=assignment.column * width_fraction,
            width_fraction=width_fraction,
            column=assignment.column,
            column_count=assignment.column_count,
            z_index=BASE_Z_INDEX + assignment.column,
            status=appointment.status,
        )

    def offset_for(self, instant: DateTime, visible_range: VisibleRange, day: Date) -> float:
        """Signed vertical offset of ``instant`` below the top of the range."""
        minutes = visible_range.minutes_from_start(instant, day, self.options.timezone)
        return minutes / 60 * self.options.row_height_px

    def top_for(self, instant: DateTime, visible_range: VisibleRange, day: Date) -> float:
        return max(0.0, self.offset_for(instant, visible_range, day))

    def height_for(self, appointment: Appointment) -> float:
        natural = appointment.duration_minutes / 60 * self.options.row_height_px
        return max(self.options.minimum_block_height_px, natural)
