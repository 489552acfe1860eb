"""
Conversion of raw data-layer records into validated domain objects.

Appointment records that cannot be converted are reported with
``InvalidAppointmentError``; working-hours days that cannot be parsed are
dropped, which makes them behave like disabled days.
"""

import logging
import re
from datetime import datetime, time
from typing import Any, Iterable, List, Mapping, Tuple, Union

import pendulum
from pendulum import DateTime

from .exceptions import InvalidAppointmentError, WorkingHoursError
from .models import (
    WEEKDAY_NAMES,
    Appointment,
    AppointmentStatus,
    BreakPeriod,
    DaySchedule,
    WorkingHours,
)

logger = logging.getLogger(__name__)

_CLOCK_TIME = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

AppointmentInput = Union[Appointment, Mapping[str, Any]]


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


def parse_instant(value: Any, timezone: str = "UTC") -> DateTime:
    """
    Parse an ISO-8601 instant. Naive values are interpreted in ``timezone``.

    Raises:
        ValueError: If the value is not a date-time
    """
    if isinstance(value, DateTime):
        return value
    if isinstance(value, datetime):
        return pendulum.instance(value, tz=timezone)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected an ISO-8601 string, got {value!r}")

    parsed = pendulum.parse(value.strip(), tz=timezone)
    if not isinstance(parsed, DateTime):
        raise ValueError(f"Not a date-time: {value!r}")
    return parsed


def parse_duration(value: Any) -> int:
    """Parse a whole number of minutes; anything else raises ValueError."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"Duration must be whole minutes, got {value!r}")
    return int(value)


def parse_appointment(record: Mapping[str, Any], timezone: str = "UTC") -> Appointment:
    """
    Build an Appointment from a raw record.

    Accepts ``scheduledAt``/``scheduled_at``, ``durationMinutes``/
    ``duration_minutes``/``duration``, ``status`` (default confirmed),
    ``clientId`` and ``serviceIds``.

    Raises:
        InvalidAppointmentError: If a required field is missing or malformed,
            or the duration is not positive
    """
    appointment_id = _first(record, "id")
    if appointment_id is None:
        raise InvalidAppointmentError("Appointment record has no id")
    appointment_id = str(appointment_id)

    try:
        scheduled_at = parse_instant(_first(record, "scheduledAt", "scheduled_at"), timezone)
    except (ValueError, TypeError) as exc:
        raise InvalidAppointmentError(
            f"Appointment {appointment_id}: unparsable scheduledAt ({exc})"
        ) from exc

    try:
        duration = parse_duration(_first(record, "durationMinutes", "duration_minutes", "duration"))
    except (ValueError, TypeError) as exc:
        raise InvalidAppointmentError(f"Appointment {appointment_id}: {exc}") from exc

    if duration <= 0:
        raise InvalidAppointmentError(
            f"Appointment {appointment_id}: duration must be positive, got {duration}"
        )

    raw_status = _first(record, "status") or AppointmentStatus.CONFIRMED.value
    try:
        status = AppointmentStatus(str(raw_status).lower())
    except ValueError as exc:
        raise InvalidAppointmentError(
            f"Appointment {appointment_id}: unknown status {raw_status!r}"
        ) from exc

    client_id = _first(record, "clientId", "client_id")
    service_ids = _first(record, "serviceIds", "service_ids") or ()
    if isinstance(service_ids, str):
        service_ids = (service_ids,)

    return Appointment(
        id=appointment_id,
        scheduled_at=scheduled_at,
        duration_minutes=duration,
        status=status,
        client_id=str(client_id) if client_id is not None else None,
        service_ids=tuple(str(service_id) for service_id in service_ids),
    )


def coerce_appointments(
    records: Iterable[AppointmentInput],
    timezone: str = "UTC",
) -> Tuple[List[Appointment], List[str]]:
    """
    Turn mixed input (Appointment objects or raw records) into appointments.

    Returns:
        Tuple of (usable appointments, identifiers of skipped records).
        Records without an id are identified by their position as ``#<n>``.
    """
    appointments: List[Appointment] = []
    skipped: List[str] = []

    for position, record in enumerate(records):
        if isinstance(record, Appointment):
            if record.duration_minutes <= 0:
                logger.warning(
                    "Skipping appointment %s: duration must be positive, got %s",
                    record.id,
                    record.duration_minutes,
                )
                skipped.append(record.id)
                continue
            appointments.append(record)
            continue

        if not isinstance(record, Mapping):
            logger.warning("Skipping appointment record of type %s", type(record).__name__)
            skipped.append(f"#{position}")
            continue

        try:
            appointments.append(parse_appointment(record, timezone))
        except InvalidAppointmentError as exc:
            logger.warning("Skipping appointment record: %s", exc)
            identifier = record.get("id")
            skipped.append(str(identifier) if identifier is not None else f"#{position}")

    return appointments, skipped


def parse_clock_time(value: Any) -> time:
    """
    Parse an ``HH:MM`` time of day.

    Raises:
        WorkingHoursError: If the value is not a valid time of day
    """
    if isinstance(value, time):
        return value
    match = _CLOCK_TIME.match(str(value).strip()) if value is not None else None
    if match is None:
        raise WorkingHoursError(f"Invalid time of day {value!r}, expected HH:MM")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def parse_day_schedule(raw: Mapping[str, Any]) -> DaySchedule:
    """
    Parse one weekday entry. Only the format is checked here; invariants such
    as start before end are checked by ``DaySchedule.is_consistent``.

    Raises:
        WorkingHoursError: If the entry is malformed
    """
    if not isinstance(raw, Mapping):
        raise WorkingHoursError(f"Working-hours entry must be a mapping, got {type(raw).__name__}")

    breaks = []
    for raw_break in raw.get("breaks") or ():
        if not isinstance(raw_break, Mapping):
            raise WorkingHoursError(f"Break entry must be a mapping, got {raw_break!r}")
        breaks.append(
            BreakPeriod(
                start=parse_clock_time(raw_break.get("start")),
                end=parse_clock_time(raw_break.get("end")),
                label=str(raw_break.get("label") or "Break"),
            )
        )

    return DaySchedule(
        enabled=bool(raw.get("enabled", False)),
        start=parse_clock_time(raw.get("start")),
        end=parse_clock_time(raw.get("end")),
        breaks=tuple(breaks),
    )


def parse_working_hours(raw: Mapping[str, Any] | None) -> WorkingHours:
    """
    Parse a weekday -> entry mapping. Malformed days and unknown weekday
    names are logged and left out, so they count as disabled.
    """
    if not raw:
        return WorkingHours()

    days = {}
    for key, entry in raw.items():
        name = str(key).strip().lower()
        if name not in WEEKDAY_NAMES:
            logger.warning("Ignoring working hours for unknown weekday %r", key)
            continue
        try:
            days[name] = parse_day_schedule(entry)
        except WorkingHoursError as exc:
            logger.warning("Treating %s as disabled: %s", name, exc)

    return WorkingHours(days=days)
