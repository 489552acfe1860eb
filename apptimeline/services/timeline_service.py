"""
Application services for building day timelines.

The service coordinates fetching appointments via a source adapter and
delegates the layout to the domain-level ``TimelineEngine``. This is the
only place the wall clock is read; the engine always receives ``now``
explicitly.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from datetime import date
from typing import (
    Any,
    Awaitable,
    Callable,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Union,
)

import pendulum
from pendulum import Date, DateTime

from ..domain.models import (
    Appointment,
    AppointmentStatus,
    TimelineLayout,
    WorkingHours,
    start_of_local_day,
)
from ..domain.parsing import AppointmentInput, coerce_appointments
from ..domain.timeline_engine import TimelineEngine

logger = logging.getLogger(__name__)

Clock = Callable[[], DateTime]

DEFAULT_VISIBLE_STATUSES = (AppointmentStatus.CONFIRMED, AppointmentStatus.PENDING)


class AppointmentSourceProtocol(Protocol):
    """Protocol describing the data-layer behaviour needed by the service."""

    async def get_appointments(
        self,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> List[AppointmentInput]:
        """Return appointments (objects or raw records) starting in the window."""

    async def get_working_hours(self) -> Union[WorkingHours, Mapping[str, Any], None]:
        """Return the provider's working hours, if any are configured."""


def system_clock(timezone: str) -> Clock:
    """Clock reading the current time in ``timezone``."""
    return lambda: pendulum.now(timezone)


class TimelineService:
    """
    Orchestrates appointment retrieval and timeline layout.

    Dependency inversion toward a protocol makes it easy to plug in any data
    source, or a stub in tests.
    """

    def __init__(
        self,
        appointment_source: AppointmentSourceProtocol,
        engine: TimelineEngine,
        *,
        working_hours: WorkingHours | None = None,
        visible_statuses: Sequence[AppointmentStatus] = DEFAULT_VISIBLE_STATUSES,
        clock: Clock | None = None,
    ) -> None:
        self._appointment_source = appointment_source
        self._engine = engine
        self._working_hours = working_hours
        self._visible_statuses = frozenset(visible_statuses)
        self._clock = clock or system_clock(engine.options.timezone)

    @property
    def engine(self) -> TimelineEngine:
        return self._engine

    def now(self) -> DateTime:
        return self._clock()

    async def build_day(
        self,
        *,
        selected_date: date,
        now: DateTime | None = None,
    ) -> TimelineLayout:
        """
        Retrieve the day's appointments and working hours, then lay them out.
        """
        day = pendulum.date(selected_date.year, selected_date.month, selected_date.day)
        records = await self.fetch_appointments(day)
        working_hours = await self.fetch_working_hours()

        return self.layout_day(
            records=records,
            selected_date=day,
            now=now if now is not None else self.now(),
            working_hours=working_hours,
        )

    async def fetch_appointments(self, day: Date) -> List[AppointmentInput]:
        """Fetch the raw appointment records of one local day."""
        timezone = self._engine.options.timezone
        start = start_of_local_day(day, timezone)

        return await self._appointment_source.get_appointments(
            start_time=start,
            end_time=start.add(days=1),
            timezone=timezone,
        )

    async def fetch_working_hours(self) -> Union[WorkingHours, Mapping[str, Any], None]:
        """Configured working hours win over the ones reported by the source."""
        if self._working_hours is not None:
            return self._working_hours
        return await self._appointment_source.get_working_hours()

    def layout_day(
        self,
        *,
        records: Iterable[AppointmentInput],
        selected_date: Date,
        now: DateTime,
        working_hours: Union[WorkingHours, Mapping[str, Any], None] = None,
    ) -> TimelineLayout:
        """Filter the records to the visible ones of the day and run the engine."""
        appointments, skipped = coerce_appointments(records, self._engine.options.timezone)
        visible = self.select_visible(appointments, selected_date)

        layout = self._engine.build(
            visible,
            selected_date=selected_date,
            now=now,
            working_hours=working_hours,
        )

        if skipped:
            layout = dataclasses.replace(
                layout,
                skipped_appointment_ids=tuple(skipped) + layout.skipped_appointment_ids,
            )
        return layout

    def select_visible(self, appointments: Iterable[Appointment], day: Date) -> List[Appointment]:
        """
        Keep appointments that start on ``day`` in local time and whose
        status is shown on the timeline.
        """
        timezone = self._engine.options.timezone
        selected: List[Appointment] = []

        for appointment in appointments:
            if appointment.local_start(timezone).date() != day:
                continue
            if appointment.status not in self._visible_statuses:
                logger.debug("Hiding appointment %s with status %s", appointment.id, appointment.status.value)
                continue
            selected.append(appointment)

        return selected


class CurrentTimeTicker:
    """
    Periodic driver of the current-time marker.

    Each tick reads the clock once and derives a fresh layout from the most
    recent one; the previous layout is never modified.
    """

    def __init__(
        self,
        engine: TimelineEngine,
        *,
        interval_seconds: float = 60,
        clock: Clock | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        self._engine = engine
        self._interval_seconds = interval_seconds
        self._clock = clock or system_clock(engine.options.timezone)
        self._sleep = sleep

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    def tick(self, layout: TimelineLayout) -> TimelineLayout:
        return self._engine.tick(layout, self._clock())

    async def run(
        self,
        latest_layout: Callable[[], TimelineLayout],
        on_tick: Callable[[TimelineLayout], None],
        *,
        max_ticks: Optional[int] = None,
    ) -> int:
        """
        Tick until cancelled or ``max_ticks`` ticks have been delivered.

        Args:
            latest_layout: Returns the most recently completed layout
            on_tick: Receives the refreshed layout
            max_ticks: Stop after this many ticks (None runs forever)

        Returns:
            Number of ticks delivered
        """
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            on_tick(self.tick(latest_layout()))
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            await self._sleep(self._interval_seconds)
        return ticks
