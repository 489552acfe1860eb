"""
Appointment source backed by a JSON export of the booking data layer.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

from pendulum import DateTime

from ..domain.exceptions import AppointmentSourceError
from ..domain.parsing import parse_instant

logger = logging.getLogger(__name__)


class JsonAppointmentSource:
    """
    Source that serves appointments and working hours from a JSON file.

    Accepted layouts:
        {"appointments": [...], "workingHours": {...}}
        [...]   (appointments only)

    Records are handed on unparsed; the service and engine decide which of
    them are usable. Records whose start cannot be read are passed through
    so that they show up as skipped instead of silently disappearing.
    """

    def __init__(self, data_file: Path):
        self.data_file = Path(data_file)
        self._data: Dict[str, Any] | None = None

    def _load(self) -> Dict[str, Any]:
        """Load and cache the JSON document."""
        if self._data is not None:
            return self._data

        if not self.data_file.exists():
            raise AppointmentSourceError(f"Appointment data file not found: {self.data_file}")

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise AppointmentSourceError(f"Could not read {self.data_file}: {exc}") from exc

        if isinstance(document, list):
            document = {"appointments": document}
        if not isinstance(document, dict):
            raise AppointmentSourceError(
                f"{self.data_file} must contain a list or an object at the root level."
            )
        if not isinstance(document.get("appointments", []), list):
            raise AppointmentSourceError(f"'appointments' in {self.data_file} must be a list.")

        self._data = document
        return document

    async def get_appointments(
        self,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str = "Europe/Berlin",
    ) -> List[Mapping[str, Any]]:
        """
        Return the records that start inside ``[start_time, end_time)``.

        Args:
            start_time: Start of the time window
            end_time: End of the time window
            timezone: IANA timezone used for naive timestamps

        Returns:
            List of raw appointment records
        """
        records: List[Mapping[str, Any]] = []

        for record in self._load().get("appointments", []):
            if not isinstance(record, Mapping):
                records.append(record)
                continue

            raw_start = record.get("scheduledAt", record.get("scheduled_at"))
            try:
                scheduled_at = parse_instant(raw_start, timezone)
            except (ValueError, TypeError):
                records.append(record)
                continue

            if start_time <= scheduled_at < end_time:
                records.append(record)

        logger.debug("Loaded %d appointment records from %s", len(records), self.data_file)
        return records

    async def get_working_hours(self) -> Mapping[str, Any] | None:
        """Return the raw working-hours mapping, if the file has one."""
        working_hours = self._load().get("workingHours")
        if working_hours is not None and not isinstance(working_hours, Mapping):
            raise AppointmentSourceError(f"'workingHours' in {self.data_file} must be an object.")
        return working_hours
